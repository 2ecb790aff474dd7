"""
Pagination harvester for list-style billing API methods.

The upstream has no uniform pagination contract: some methods return a bare
list, others wrap items under ``list``/``data``/``items`` with or without
page/total metadata. The harvester stops on whichever signal shows up first.
"""
import math
from typing import Any, Optional, Protocol, Sequence

from catalog_snapshot.internal.domain.errors import ApiError, ProtocolError
from catalog_snapshot.pkg.logger.logger import get_logger


logger = get_logger(__name__)


LIST_MEMBER_KEYS = ("list", "data", "items")
PAGES_KEYS = ("pages", "total_pages")
TOTAL_KEYS = ("total", "total_results", "count")


class ApiCaller(Protocol):
    """Protocol for issuing a single remote call."""

    async def call(
        self,
        scope: str,
        method: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Call a remote method."""
        ...


def as_list(value: Any) -> list[Any]:
    """
    Extract list items from a response.

    Args:
        value: Decoded API result.

    Returns:
        The response itself if it is a list, else the first list-like
        member among ``list``, ``data`` and ``items``; empty otherwise.
    """
    if isinstance(value, list):
        return value
    if not isinstance(value, dict):
        return []
    for key in LIST_MEMBER_KEYS:
        member = value.get(key)
        if isinstance(member, list):
            return list(member)
        if isinstance(member, dict):
            return list(member.values())
    return []


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        # NaN and infinities are not page counts.
        if not math.isfinite(value):
            return None
        return int(value)
    return None


def read_pagination_meta(result: Any) -> tuple[int, int]:
    """
    Read total pages and total item count from a response.

    Returns:
        ``(pages, total)``; 0 means unknown.
    """
    if not isinstance(result, dict):
        return 0, 0

    pages = 0
    for key in PAGES_KEYS:
        parsed = _as_int(result.get(key))
        if parsed is not None:
            pages = parsed
            break

    total = 0
    for key in TOTAL_KEYS:
        parsed = _as_int(result.get(key))
        if parsed is not None:
            total = parsed
            break

    return pages, total


async def fetch_paginated(
    api: ApiCaller,
    scope: str,
    methods: Sequence[str],
    base_payload: Optional[dict[str, Any]],
    per_page: int,
    max_pages: int,
) -> list[Any]:
    """
    Collect every item of a paginated list method.

    Each alias is walked from page 1 up to ``max_pages``. ``page`` and
    ``per_page`` are only added when the caller did not fix them. Stop
    rules, checked after each page in order:

    1. page 1 is empty and the response is an object: the alias is not a
       paginated list; try the next alias.
    2. a later page is empty: done.
    3. ``pages``/``total`` metadata says the end was reached: done.
    4. the page is shorter than ``per_page``: done. This is a heuristic
       for upstreams that expose no metadata at all.

    Args:
        api: Client issuing the calls.
        scope: API scope.
        methods: Method aliases in priority order.
        base_payload: Parameters sent with every page.
        per_page: Requested page size.
        max_pages: Hard cap on pages per alias.

    Returns:
        Collected raw items, empty if no alias was given.

    Raises:
        ApiError: The last alias' error when every alias failed.
    """
    last_error: Optional[ApiError] = None

    for method in methods:
        try:
            collected = await _walk_pages(api, scope, str(method), base_payload or {}, per_page, max_pages)
        except ApiError as error:
            logger.debug(
                "Paginated alias failed",
                scope=scope,
                method=method,
                error=error.message,
            )
            last_error = error
            continue
        return collected

    if last_error is not None:
        raise last_error
    return []


async def _walk_pages(
    api: ApiCaller,
    scope: str,
    method: str,
    base_payload: dict[str, Any],
    per_page: int,
    max_pages: int,
) -> list[Any]:
    collected: list[Any] = []

    for page in range(1, max_pages + 1):
        payload = dict(base_payload)
        payload.setdefault("page", page)
        payload.setdefault("per_page", per_page)

        result = await api.call(scope, method, payload)
        items = as_list(result)

        if page == 1 and not items and isinstance(result, dict):
            raise ProtocolError(
                "Method did not return paginated list payload",
                scope,
                method,
            )

        if not items:
            break

        collected.extend(items)

        pages, total = read_pagination_meta(result)
        if pages > 0 and page >= pages:
            break
        if total > 0 and len(collected) >= total:
            break
        if len(items) < per_page:
            break

    logger.debug(
        "Paginated fetch finished",
        scope=scope,
        method=method,
        items=len(collected),
    )
    return collected
