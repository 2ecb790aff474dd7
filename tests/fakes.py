"""
Fake billing upstream for tests.
"""
import json
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx


BILLING_URL = "https://billing.test"
API_KEY = "s3cr3t"


class FakeBillingUpstream:
    """
    Routes ``/api/{scope}/{method}`` requests to canned responses.

    A route is either a JSON-serializable body or a callable receiving the
    decoded payload and returning ``(status_code, body)``. Unknown routes
    answer 404 with an ``error`` member.
    """

    def __init__(self, routes: Optional[dict[str, Any]] = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        route = request.url.path.split("/api/", 1)[-1]
        content_type = request.headers.get("Content-Type", "")
        body = request.content.decode("utf-8")
        if content_type == "application/json":
            payload = json.loads(body) if body else {}
        else:
            payload = dict(parse_qsl(body))

        self.requests.append(
            {
                "route": route,
                "mode": "json" if content_type == "application/json" else "form",
                "payload": payload,
                "headers": dict(request.headers),
            }
        )

        answer = self.routes.get(route)
        if answer is None:
            return httpx.Response(404, json={"result": None, "error": {"message": f"Unknown method {route}"}})
        if callable(answer):
            status_code, response_body = answer(payload)
        else:
            status_code, response_body = 200, answer
        if isinstance(response_body, str):
            return httpx.Response(status_code, text=response_body)
        return httpx.Response(status_code, json=response_body)

    def calls_to(self, route: str) -> list[dict[str, Any]]:
        """Requests received for one route."""
        return [request for request in self.requests if request["route"] == route]
