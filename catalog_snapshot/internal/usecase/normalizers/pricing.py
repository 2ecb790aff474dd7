"""
Pricing shape normalization.

The billing API has used three pricing encodings over time. They carry no
discriminator and are told apart purely by structure:

* Shape A: a single pricing model (``type``/``recurrent``/``free``/``once``
  at the root). Stored under ``__DEFAULT``.
* Shape B: currency code -> Shape A model.
* Shape C: currency code -> bare ``{period: price}`` map (legacy).
"""
from typing import Any, Mapping, Optional

from catalog_snapshot.internal.domain.value_objects import (
    DEFAULT_PRICING_KEY,
    PricingEntry,
    PricingModel,
)

from .aliases import PRICING_ENTRY_FIELDS
from .fields import bool_like, is_present, normalize_text, pick_first, scalar_text, to_decimal


MODEL_MARKER_KEYS = ("type", "recurrent", "free", "once")
NON_PERIOD_KEYS = frozenset(MODEL_MARKER_KEYS)

MIN_DECIMALS = 0
MAX_DECIMALS = 6
DEFAULT_DECIMALS = 2


def clamp_decimals(value: Any, default: int = DEFAULT_DECIMALS) -> int:
    """Clamp a price precision to 0..6."""
    number = to_decimal(value)
    if number is None:
        return default
    return max(MIN_DECIMALS, min(MAX_DECIMALS, int(number)))


def is_pricing_model(row: Any) -> bool:
    """Shape A test: any model marker key at the root."""
    return isinstance(row, Mapping) and any(key in row for key in MODEL_MARKER_KEYS)


def _is_period_value(value: Any) -> bool:
    return isinstance(value, Mapping) or to_decimal(value) is not None


def normalize_period(value: Any) -> PricingEntry:
    """
    Normalize one period entry.

    A bare number is a price with a zero setup fee. Objects are read through
    the price/setup/enabled aliases. Anything else is a disabled entry.
    """
    if not isinstance(value, Mapping):
        if to_decimal(value) is not None:
            return PricingEntry(price=normalize_text(value), setup="0", enabled=True)
        return PricingEntry(price=None, setup=None, enabled=False)

    price = pick_first(value, PRICING_ENTRY_FIELDS["price"], None)
    setup = pick_first(value, PRICING_ENTRY_FIELDS["setup"], None)
    enabled = bool_like(pick_first(value, PRICING_ENTRY_FIELDS["enabled"], True), True)

    return PricingEntry(
        price=None if price is None else scalar_text(price),
        setup=None if setup is None else scalar_text(setup),
        enabled=enabled,
    )


def infer_type(model: PricingModel) -> PricingModel:
    """Fill an unset type tag from the sections the model carries."""
    if model.type == "":
        if model.recurrent:
            model.type = "recurrent"
        elif model.once is not None:
            model.type = "once"
    return model


def _root_periods(row: Mapping[str, Any]) -> dict[str, PricingEntry]:
    periods: dict[str, PricingEntry] = {}
    for period, entry in row.items():
        if str(period).lower() in NON_PERIOD_KEYS:
            continue
        if not _is_period_value(entry):
            continue
        periods[str(period).upper()] = normalize_period(entry)
    return periods


def normalize_model(row: Mapping[str, Any]) -> PricingModel:
    """
    Normalize a Shape A model.

    Payloads without a ``recurrent`` wrapper expose periods at the root;
    those are read as recurring periods.
    """
    model = PricingModel(type=normalize_text(row.get("type")))
    if "free" in row:
        model.free = normalize_period(row["free"])
    if "once" in row:
        model.once = normalize_period(row["once"])

    recurrent = row.get("recurrent")
    if isinstance(recurrent, Mapping):
        model.recurrent = {
            str(period).upper(): normalize_period(entry)
            for period, entry in recurrent.items()
        }
    else:
        model.recurrent = _root_periods(row)

    return infer_type(model)


def normalize_legacy_model(row: Mapping[str, Any]) -> PricingModel:
    """Normalize a Shape C ``{period: price}`` map."""
    model = PricingModel(recurrent=_root_periods(row))
    return infer_type(model)


def normalize_pricing(pricing: Any) -> dict[str, PricingModel]:
    """
    Normalize any supported pricing encoding.

    Args:
        pricing: Raw ``pricing`` member of a product or addon.

    Returns:
        Currency code (or ``__DEFAULT``) -> model.
    """
    if not isinstance(pricing, Mapping):
        return {}

    if is_pricing_model(pricing):
        return {DEFAULT_PRICING_KEY: normalize_model(pricing)}

    models: dict[str, PricingModel] = {}
    for currency, value in pricing.items():
        if not isinstance(value, Mapping) or not is_present(currency):
            continue
        code = str(currency).upper()
        if is_pricing_model(value):
            models[code] = normalize_model(value)
        else:
            models[code] = normalize_legacy_model(value)
    return models


def pick_model_for_currency(
    pricing: Mapping[str, PricingModel],
    currency_code: str,
) -> Optional[PricingModel]:
    """Pick the model for a currency, else the default, else the first."""
    if currency_code in pricing:
        return pricing[currency_code]
    if DEFAULT_PRICING_KEY in pricing:
        return pricing[DEFAULT_PRICING_KEY]
    for model in pricing.values():
        return model
    return None
