"""
Pricing Resolver.

Converts prices between currencies and fills in currencies the platform
never priced explicitly. Shape detection lives in
:mod:`catalog_snapshot.internal.usecase.normalizers.pricing`.
"""
from dataclasses import dataclass, field
from decimal import Decimal, DecimalException
from typing import Iterable, Mapping, Optional

from catalog_snapshot.internal.domain.billing import Currency
from catalog_snapshot.internal.domain.value_objects import (
    DomainPricing,
    PricingEntry,
    PricingModel,
)
from catalog_snapshot.internal.usecase.normalizers.fields import quantize, to_decimal
from catalog_snapshot.internal.usecase.normalizers.pricing import (
    MAX_DECIMALS,
    MIN_DECIMALS,
    clamp_decimals,
    pick_model_for_currency,
)


# ============================================================================
# CONVERSION
# ============================================================================

def convert_amount(amount: Optional[str], multiplier: Decimal, decimals: int) -> Optional[str]:
    """
    Convert an amount by rate.

    Non-numeric amounts, and amounts too large to round, are returned
    unchanged.
    """
    number = to_decimal(amount)
    if number is None:
        return amount
    precision = max(MIN_DECIMALS, min(MAX_DECIMALS, decimals))
    try:
        return f"{quantize(number * multiplier, precision):f}"
    except DecimalException:
        return amount


def _convert_entry(entry: Optional[PricingEntry], multiplier: Decimal, decimals: int) -> Optional[PricingEntry]:
    if entry is None:
        return None
    return PricingEntry(
        price=convert_amount(entry.price, multiplier, decimals),
        setup=convert_amount(entry.setup, multiplier, decimals),
        enabled=entry.enabled,
    )


def convert_model(model: PricingModel, multiplier: Decimal, decimals: int) -> PricingModel:
    """Multiply every price and setup fee of a model."""
    return PricingModel(
        type=model.type,
        free=_convert_entry(model.free, multiplier, decimals),
        once=_convert_entry(model.once, multiplier, decimals),
        recurrent={
            period: _convert_entry(entry, multiplier, decimals)
            for period, entry in model.recurrent.items()
        },
    )


def convert_domain_pricing(pricing: DomainPricing, multiplier: Decimal, decimals: int) -> DomainPricing:
    """Convert register/renew/transfer prices by rate."""
    return DomainPricing(
        register=convert_amount(pricing.register, multiplier, decimals) or "",
        renew=convert_amount(pricing.renew, multiplier, decimals) or "",
        transfer=convert_amount(pricing.transfer, multiplier, decimals) or "",
    )


# ============================================================================
# CURRENCY TABLE
# ============================================================================

@dataclass
class CurrencyTable:
    """
    Enabled currencies with their usable rates and precision.

    Attributes:
        codes: Enabled currency codes in upstream order.
        rates: Code -> positive rate relative to the platform default.
        decimals: Code -> price precision.
        base_code: Rate base currency, empty when no currency is enabled.
    """
    codes: list[str] = field(default_factory=list)
    rates: dict[str, Decimal] = field(default_factory=dict)
    decimals: dict[str, int] = field(default_factory=dict)
    base_code: str = ""

    @classmethod
    def from_currencies(
        cls,
        currencies: Iterable[Currency],
        upstream_default: str = "",
    ) -> "CurrencyTable":
        """
        Build the table and elect the base currency.

        The base is the first enabled currency flagged as default, else the
        platform-reported default when enabled, else the first enabled
        currency. A base without a usable rate gets rate 1.

        Args:
            currencies: Normalized currencies in upstream order.
            upstream_default: Code reported by ``currency/get_default``.
        """
        table = cls()
        flagged = ""
        for currency in currencies:
            code = currency.code.upper()
            if not currency.enabled or code in table.decimals:
                continue
            table.codes.append(code)
            table.decimals[code] = clamp_decimals(currency.price_decimals)
            rate = to_decimal(currency.conversion_rate)
            if rate is not None and rate > 0:
                table.rates[code] = rate
            if currency.is_default and not flagged:
                flagged = code

        upstream_default = upstream_default.upper()
        if flagged:
            table.base_code = flagged
        elif upstream_default and upstream_default in table.decimals:
            table.base_code = upstream_default
        elif table.codes:
            table.base_code = table.codes[0]

        if table.base_code and table.base_code not in table.rates:
            table.rates[table.base_code] = Decimal(1)

        return table

    def is_enabled(self, code: str) -> bool:
        """Return True if the currency is enabled."""
        return code.upper() in self.decimals

    def multiplier(self, code: str) -> Optional[Decimal]:
        """
        Factor converting base-currency amounts into ``code``.

        Returns:
            ``rate(code) / rate(base)``, None when either rate is unusable.
        """
        target = self.rates.get(code)
        base = self.rates.get(self.base_code)
        if target is None or base is None or base <= 0:
            return None
        return target / base

    def relation(self, from_code: str, to_code: str) -> Decimal:
        """Factor converting ``from_code`` amounts into ``to_code``."""
        return self.rates[to_code] / self.rates[from_code]


# ============================================================================
# RESOLVER
# ============================================================================

class PricingResolver:
    """
    Derives per-currency pricing from the base currency.

    A currency receives a converted copy of the base model when it has no
    model of its own, or when its model is structurally identical to the
    base model. The latter means the platform echoed the default price
    instead of a customized one. A deliberate manual override that happens
    to match the base price is re-derived as well; this is a known false
    positive kept for output compatibility.
    """

    def __init__(self, table: CurrencyTable) -> None:
        """
        Initialize the resolver.

        Args:
            table: Enabled currencies and their rates.
        """
        self._table = table

    def resolve(
        self,
        fetched: Mapping[str, PricingModel],
        existing: Optional[Mapping[str, PricingModel]] = None,
    ) -> dict[str, PricingModel]:
        """
        Complete an entity's pricing for every enabled currency.

        Args:
            fetched: Currency code -> model fetched per currency.
            existing: Pricing already known for the entity (any keys).

        Returns:
            Currency code -> model. Currencies whose rate is unusable keep
            their fetched model or stay absent.
        """
        resolved = dict(fetched)
        base_code = self._table.base_code
        if not base_code:
            return resolved

        base_model = fetched.get(base_code)
        if base_model is None:
            base_model = pick_model_for_currency(existing or {}, base_code)
        if base_model is None:
            return resolved

        for code in self._table.codes:
            if code == base_code:
                resolved[code] = base_model
                continue

            multiplier = self._table.multiplier(code)
            if multiplier is None:
                continue

            current = resolved.get(code)
            if current is not None and current != base_model:
                continue

            resolved[code] = convert_model(base_model, multiplier, self._table.decimals[code])

        return resolved

    def domain_pricing(self, base: DomainPricing) -> dict[str, DomainPricing]:
        """
        Price a TLD in every enabled currency.

        Currencies without a usable rate receive the raw base prices.
        """
        result: dict[str, DomainPricing] = {}
        for code in self._table.codes:
            multiplier = self._table.multiplier(code)
            if multiplier is None:
                result[code] = base
            else:
                result[code] = convert_domain_pricing(base, multiplier, self._table.decimals[code])
        return result
