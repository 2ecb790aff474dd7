"""
FOSSBilling API client.

Issues one logical RPC call against ``{base_url}/api/{scope}/{method}``.
Upstream versions disagree on the accepted body encoding, so every call is
tried as JSON first and once more as a form-urlencoded body.
"""
import base64
import json
import time
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import urlencode

import httpx

from catalog_snapshot.internal.domain.errors import (
    ApiError,
    ApplicationError,
    ExhaustedFallbackError,
    ProtocolError,
    TransportError,
)
from catalog_snapshot.internal.domain.run import CallRecord, RunContext
from catalog_snapshot.internal.metrics import API_CALLS, API_CALL_DURATION
from catalog_snapshot.pkg.logger.logger import get_logger


logger = get_logger(__name__)


GUEST_SCOPE = "guest"
CLIENT_SCOPE = "client"
ADMIN_SCOPE = "admin"

# Older API versions read the admin secret from the payload.
ADMIN_SECRET_PAYLOAD_KEYS = ("api_key", "api_token", "token")

MIN_TIMEOUT_SECONDS = 5
MAX_CONNECT_TIMEOUT_SECONDS = 10
RAW_BODY_PREVIEW_CHARS = 200


def read_error_message(decoded: Any) -> str:
    """
    Extract a readable error message from a decoded response.

    Args:
        decoded: Decoded JSON response.

    Returns:
        Error message, ``unknown error`` when none is found.
    """
    if not isinstance(decoded, dict):
        return "unknown error"

    error = decoded.get("error")
    if isinstance(error, str) and error != "":
        return error
    if isinstance(error, dict):
        for key in ("message", "msg", "code", "error"):
            value = error.get(key)
            if value is not None and value != "":
                return str(value)
        return json.dumps(error, ensure_ascii=False)
    if isinstance(error, list):
        return json.dumps(error, ensure_ascii=False)

    message = decoded.get("message")
    if message is not None and message != "":
        return str(message)
    return "unknown error"


def _form_pairs(value: Any, prefix: str = "") -> Iterable[tuple[str, str]]:
    """Flatten a payload into PHP-style ``a[b]=c`` form pairs."""
    if isinstance(value, dict):
        items: Iterable[tuple[Any, Any]] = value.items()
    elif isinstance(value, (list, tuple)):
        items = enumerate(value)
    else:
        if value is None:
            return
        if isinstance(value, bool):
            yield prefix, "1" if value else "0"
        else:
            yield prefix, str(value)
        return

    for key, item in items:
        name = f"{prefix}[{key}]" if prefix else str(key)
        yield from _form_pairs(item, name)


def encode_form(payload: dict[str, Any]) -> str:
    """Encode a payload as ``application/x-www-form-urlencoded``."""
    return urlencode(list(_form_pairs(payload)))


class BillingApiClient:
    """
    Resilient client for the billing platform's RPC API.

    Every attempt is appended to the run context's call log and counted in
    Prometheus metrics; the log is diagnostic only and never drives control
    flow.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        context: RunContext,
        timeout_seconds: int = 25,
        strict_tls: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Billing platform URL.
            api_key: Shared API secret.
            context: Run context receiving the call log.
            timeout_seconds: Per-request timeout, at least 5 seconds.
            strict_tls: Verify TLS certificates.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._context = context
        self._timeout_seconds = max(MIN_TIMEOUT_SECONDS, int(timeout_seconds))
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(
                self._timeout_seconds,
                connect=min(MAX_CONNECT_TIMEOUT_SECONDS, self._timeout_seconds),
            ),
            verify=strict_tls,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """Billing platform URL without trailing slash."""
        return self._base_url

    @property
    def call_log(self) -> list[CallRecord]:
        """Attempts issued so far."""
        return self._context.call_log

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> "BillingApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call(
        self,
        scope: str,
        method: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Call a remote method.

        Tries a JSON body first and retries the same call once with a form
        body. The JSON-mode error is only surfaced if the form attempt
        fails too.

        Args:
            scope: API scope (guest, client, admin).
            method: Remote method, e.g. ``product/get_list``.
            payload: Request parameters.

        Returns:
            The ``result`` member of the response, or the whole response.

        Raises:
            ApiError: If both encodings fail.
        """
        endpoint = self._endpoint(scope, method)
        effective_payload = self._with_auth_payload(scope, payload or {})

        try:
            decoded = await self._request(endpoint, scope, method, effective_payload, "json")
            return self._unwrap_result(decoded, scope, method)
        except ApiError as error:
            json_error: ApiError = error

        logger.debug(
            "JSON mode failed, retrying with form encoding",
            scope=scope,
            method=method,
            error=json_error.message,
        )

        try:
            decoded = await self._request(endpoint, scope, method, effective_payload, "form")
            return self._unwrap_result(decoded, scope, method)
        except ApiError as form_error:
            message = (
                f"{scope}/{method} failed in both JSON and form mode. "
                f"json_error={json_error.message}; form_error={form_error.message}"
            )
            raise type(form_error)(
                message,
                scope,
                method,
                form_error.status_code,
            ) from form_error

    async def call_with_fallback(
        self,
        scope: str,
        methods: Sequence[str],
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Call the first method alias that succeeds.

        Args:
            scope: API scope.
            methods: Method aliases in priority order.
            payload: Request parameters.

        Returns:
            Result of the first successful alias.

        Raises:
            ApiError: The last alias' error, verbatim.
            ExhaustedFallbackError: If no alias was given.
        """
        last_error: Optional[ApiError] = None
        for method in methods:
            try:
                return await self.call(scope, str(method), payload)
            except ApiError as error:
                last_error = error

        if last_error is not None:
            raise last_error
        raise ExhaustedFallbackError("No API methods were provided", scope, "n/a")

    def _endpoint(self, scope: str, method: str) -> str:
        return f"{self._base_url}/api/{scope.strip()}/{method.strip('/')}"

    def _with_auth_payload(self, scope: str, payload: dict[str, Any]) -> dict[str, Any]:
        if scope != ADMIN_SCOPE or not self._api_key:
            return dict(payload)
        effective = dict(payload)
        for key in ADMIN_SECRET_PAYLOAD_KEYS:
            if effective.get(key) is None:
                effective[key] = self._api_key
        return effective

    def _headers(self, scope: str, mode: str) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if scope != GUEST_SCOPE and self._api_key:
            username = ADMIN_SCOPE if scope == ADMIN_SCOPE else CLIENT_SCOPE
            token = base64.b64encode(f"{username}:{self._api_key}".encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {token}"
        if mode == "json":
            headers["Content-Type"] = "application/json"
        else:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
        return headers

    async def _request(
        self,
        endpoint: str,
        scope: str,
        method: str,
        payload: dict[str, Any],
        mode: str,
    ) -> Any:
        """
        Issue one HTTP attempt and decode the body.

        Returns:
            Decoded JSON object or list.

        Raises:
            TransportError: No response was received.
            ProtocolError: Body is not a JSON object or list.
            ApplicationError: HTTP status >= 400.
        """
        if mode == "json":
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        else:
            body = encode_form(payload).encode("ascii")

        started = time.perf_counter()
        status_code = 0
        transport_error = ""
        response: Optional[httpx.Response] = None
        try:
            response = await self._http.post(
                endpoint,
                content=body,
                headers=self._headers(scope, mode),
            )
            status_code = response.status_code
        except httpx.HTTPError as exc:
            transport_error = f"{exc.__class__.__name__}: {exc}"
        finally:
            self._record(scope, method, mode, status_code, transport_error, time.perf_counter() - started)

        if response is None:
            raise TransportError(
                f"Transport error ({transport_error})",
                scope,
                method,
                status_code,
            )

        raw_text = response.text
        try:
            decoded = json.loads(raw_text)
        except ValueError:
            decoded = None

        if not isinstance(decoded, (dict, list)):
            raise ProtocolError(
                f"Non-JSON response ({status_code}): {raw_text.strip()[:RAW_BODY_PREVIEW_CHARS]}",
                scope,
                method,
                status_code,
            )

        if status_code >= 400:
            raise ApplicationError(
                f"HTTP {status_code}: {read_error_message(decoded)}",
                scope,
                method,
                status_code,
            )

        return decoded

    def _unwrap_result(self, decoded: Any, scope: str, method: str) -> Any:
        if not isinstance(decoded, dict):
            return decoded

        if decoded.get("error"):
            raise ApplicationError(
                f"API error: {read_error_message(decoded)}",
                scope,
                method,
            )

        if "result" in decoded:
            return decoded["result"]
        return decoded

    def _record(
        self,
        scope: str,
        method: str,
        mode: str,
        status_code: int,
        transport_error: str,
        duration: float,
    ) -> None:
        record = CallRecord(
            scope=scope,
            method=method,
            mode=mode,
            status_code=status_code,
            transport_error=transport_error,
            duration_seconds=duration,
        )
        self._context.record_call(record)
        API_CALLS.labels(
            scope=scope,
            mode=mode,
            outcome="success" if record.success else "error",
        ).inc()
        API_CALL_DURATION.labels(scope=scope, mode=mode).observe(duration)
