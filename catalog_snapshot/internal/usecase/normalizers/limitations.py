"""
Extraction of quota-like limitations from nested product and plan config.
"""
import re
from decimal import Decimal
from typing import Any, Mapping

from .fields import is_present, pick_first, scalar_text


LIMITATION_KEY_PATTERN = re.compile(
    r"(max|limit|quota|database|db|addon|subdomain|domain|email|mailbox|ftp|cron"
    r"|disk|inode|bandwidth|traffic|ram|cpu|site|website|account)",
    re.IGNORECASE,
)

# Top-level hosting plan fields -> limitation key.
HOSTING_PLAN_FEATURES = (
    ("bandwidth", "bandwidth"),
    ("quota", "disk"),
    ("max_ftp", "ftp"),
    ("max_sql", "database"),
    ("max_pop", "email"),
    ("max_sub", "subdomain"),
    ("max_park", "addon"),
    ("max_addon", "addon"),
)


def flatten_config(value: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested config into dotted keys.

    Lists are flattened by index. None leaves are dropped; the first
    occurrence of a dotted key wins.
    """
    if isinstance(value, Mapping):
        items = value.items()
    elif isinstance(value, list):
        items = enumerate(value)
    else:
        return {}

    result: dict[str, Any] = {}
    for key, item in items:
        path = str(key) if prefix == "" else f"{prefix}.{key}"
        if isinstance(item, (Mapping, list)):
            for sub_key, sub_value in flatten_config(item, path).items():
                result.setdefault(sub_key, sub_value)
            continue
        if item is None:
            continue
        result.setdefault(path, item)
    return result


def extract_limitations(config: Any) -> dict[str, Any]:
    """
    Keep config leaves whose last path segment names a quota.

    Args:
        config: Raw product or plan config.

    Returns:
        Dotted path -> bool/number/string value.
    """
    limits: dict[str, Any] = {}
    for path, value in flatten_config(config).items():
        leaf = path.rsplit(".", 1)[-1]
        if not LIMITATION_KEY_PATTERN.search(leaf):
            continue
        if isinstance(value, (bool, int, float, Decimal, str)):
            limits[path] = value
    return limits


def is_set_limit(value: Any) -> bool:
    """Zero, empty and false values mean "not set"."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return True


def hosting_plan_limitations(row: Mapping[str, Any], config: Any) -> dict[str, Any]:
    """
    Build hosting plan limitations.

    Top-level plan fields are promoted into the limitation vocabulary and
    take precedence over config-derived values of the same key.
    """
    limitations = extract_limitations(config)
    for api_key, limitation_key in HOSTING_PLAN_FEATURES:
        value = pick_first(row, (api_key,), "")
        if is_present(value) and is_set_limit(value):
            limitations[limitation_key] = scalar_text(value)
    return limitations
