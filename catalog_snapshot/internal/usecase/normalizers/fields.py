"""
Field picking and scalar coercion helpers shared by all normalizers.
"""
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation, localcontext
from typing import Any, Mapping, Optional, Sequence


TRUE_WORDS = frozenset({"1", "true", "yes", "on", "enabled", "active"})
FALSE_WORDS = frozenset({"0", "false", "no", "off", "disabled", "inactive"})

# Widest coefficient a rounded amount may have; larger values stay unconverted.
MAX_QUANTIZE_DIGITS = 100


def is_present(value: Any) -> bool:
    """Return True for values that are neither None nor an empty string."""
    return value is not None and value != ""


def pick_first(row: Any, keys: Sequence[str], default: Any = None) -> Any:
    """
    Return the first present value among ``keys``.

    Args:
        row: Upstream record.
        keys: Acceptable key names in priority order.
        default: Value returned when no key is present.

    Returns:
        First value that is not None and not an empty string.
    """
    if not isinstance(row, Mapping):
        return default
    for key in keys:
        if key in row and is_present(row[key]):
            return row[key]
    return default


def scalar_text(value: Any) -> str:
    """Render a scalar the way the upstream JSON would show it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float, Decimal)):
        return str(value)
    return ""


def normalize_text(value: Any) -> str:
    """Return a trimmed string for scalars, empty string otherwise."""
    return scalar_text(value).strip()


def lower_text(value: Any) -> str:
    """Return :func:`normalize_text` lowercased."""
    return normalize_text(value).lower()


def id_text(value: Any) -> str:
    """Stringify an upstream identifier."""
    return normalize_text(value)


def bool_like(value: Any, default: bool = False) -> bool:
    """
    Interpret loosely typed boolean flags.

    Args:
        value: Upstream value (bool, number or word).
        default: Result for unrecognized values.

    Returns:
        Parsed flag.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    return default


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse an upstream amount.

    Thousands separators are dropped. Returns None for anything that is
    not a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if text == "":
            return None
    else:
        return None

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def quantize(value: Decimal, decimals: int) -> Decimal:
    """
    Round half-up to ``decimals`` fractional digits.

    Precision grows with the integer part of ``value`` up to
    ``MAX_QUANTIZE_DIGITS``.

    Raises:
        InvalidOperation: If the result needs more digits than that.
    """
    with localcontext() as context:
        needed = max(value.adjusted(), 0) + decimals + 2
        context.prec = min(max(context.prec, needed), MAX_QUANTIZE_DIGITS)
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_decimal(value: Decimal, scale: int = 8) -> str:
    """
    Format a number with at most ``scale`` digits, trailing zeros trimmed.

    Numbers too wide to round are rendered as they are.

    >>> format_decimal(Decimal("0.900000001"))
    '0.9'
    """
    try:
        text = f"{quantize(value, scale):f}"
    except DecimalException:
        return str(value)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def flatten_pairs(value: Any) -> dict[str, str]:
    """
    Read an ``{id: title}`` pairs response.

    Nested values and empty keys are skipped.
    """
    if not isinstance(value, Mapping):
        return {}
    pairs: dict[str, str] = {}
    for key, title in value.items():
        if isinstance(title, (dict, list)):
            continue
        if str(key) == "":
            continue
        pairs[str(key)] = scalar_text(title)
    return pairs


def as_mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` if it is a mapping, else an empty dict."""
    return dict(value) if isinstance(value, Mapping) else {}
