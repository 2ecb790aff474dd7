"""
Unit tests for pricing normalization and currency synthesis.
"""
from decimal import Decimal

import pytest

from catalog_snapshot.internal.domain.billing import Currency
from catalog_snapshot.internal.domain.value_objects import (
    DEFAULT_PRICING_KEY,
    DomainPricing,
    PricingEntry,
    PricingModel,
)
from catalog_snapshot.internal.usecase.normalizers.pricing import (
    clamp_decimals,
    normalize_period,
    normalize_pricing,
    pick_model_for_currency,
)
from catalog_snapshot.internal.usecase.pricing import (
    CurrencyTable,
    PricingResolver,
    convert_amount,
)


def monthly(price: str, setup: str = "0") -> PricingModel:
    return PricingModel(
        type="recurrent",
        recurrent={"1M": PricingEntry(price=price, setup=setup, enabled=True)},
    )


class TestNormalizePricing:
    """Tests for pricing shape detection."""

    def test_all_shapes_normalize_to_the_same_model(self):
        """Test that shapes A, B and C carrying the same price are equal."""
        shape_a = {"type": "recurrent", "recurrent": {"1M": {"price": "10.00", "setup": "0", "enabled": 1}}}
        shape_b = {"USD": shape_a}
        shape_c = {"USD": {"1M": "10.00"}}

        model_a = normalize_pricing(shape_a)[DEFAULT_PRICING_KEY]
        model_b = normalize_pricing(shape_b)["USD"]
        model_c = normalize_pricing(shape_c)["USD"]

        assert model_a == model_b == model_c == monthly("10.00")

    def test_period_order_does_not_affect_equality(self):
        """Test that models compare structurally."""
        first = normalize_pricing({"USD": {"1M": "5", "1Y": "50"}})["USD"]
        second = normalize_pricing({"USD": {"1Y": "50", "1M": "5"}})["USD"]

        assert first == second
        assert list(first.sorted_recurrent()) == ["1M", "1Y"]

    def test_root_periods_without_recurrent_wrapper(self):
        """Test that Shape A without a recurrent member reads root periods."""
        model = normalize_pricing({"type": "recurrent", "1m": {"price": "3"}, "3M": 8})[DEFAULT_PRICING_KEY]

        assert model.recurrent == {
            "1M": PricingEntry(price="3", setup=None, enabled=True),
            "3M": PricingEntry(price="8", setup="0", enabled=True),
        }

    def test_once_and_free_models(self):
        """Test one-time and free sections and type inference."""
        once = normalize_pricing({"once": {"price": "25.00", "setup": "5.00"}})[DEFAULT_PRICING_KEY]
        free = normalize_pricing({"type": "free", "free": {"price": 0}})[DEFAULT_PRICING_KEY]

        assert once.type == "once"
        assert once.once == PricingEntry(price="25.00", setup="5.00", enabled=True)
        assert free.type == "free"
        assert free.free == PricingEntry(price="0", setup=None, enabled=True)

    def test_invalid_values_are_skipped(self):
        """Test that non-mapping currencies and non-mapping pricing are ignored."""
        assert normalize_pricing(None) == {}
        assert normalize_pricing("10.00") == {}
        assert normalize_pricing({"USD": "10.00", "": {"1M": 1}}) == {}

    def test_normalize_period_variants(self):
        """Test period entry normalization."""
        assert normalize_period(12) == PricingEntry(price="12", setup="0", enabled=True)
        assert normalize_period({"amount": "7.5", "setup_fee": "1", "enabled": "0"}) == PricingEntry(
            price="7.5", setup="1", enabled=False,
        )
        assert normalize_period("n/a") == PricingEntry(price=None, setup=None, enabled=False)

    def test_pick_model_for_currency(self):
        """Test model choice: exact code, then default, then first."""
        usd = monthly("10")
        default = monthly("9")
        assert pick_model_for_currency({"USD": usd, DEFAULT_PRICING_KEY: default}, "USD") is usd
        assert pick_model_for_currency({"USD": usd, DEFAULT_PRICING_KEY: default}, "EUR") is default
        assert pick_model_for_currency({"USD": usd}, "EUR") is usd
        assert pick_model_for_currency({}, "EUR") is None

    def test_clamp_decimals(self):
        """Test precision clamping."""
        assert clamp_decimals("3") == 3
        assert clamp_decimals(9) == 6
        assert clamp_decimals(-1) == 0
        assert clamp_decimals("n/a") == 2


class TestCurrencyTable:
    """Tests for base currency election and rates."""

    def test_flagged_default_is_base(self):
        """Test that the first flagged default becomes the base."""
        table = CurrencyTable.from_currencies([
            Currency(code="EUR", conversion_rate="0.9"),
            Currency(code="USD", conversion_rate="1", is_default=True),
        ])

        assert table.base_code == "USD"
        assert table.codes == ["EUR", "USD"]

    def test_upstream_default_then_first_enabled(self):
        """Test fallbacks when no currency is flagged."""
        currencies = [Currency(code="EUR", conversion_rate="0.9"), Currency(code="USD", conversion_rate="1")]

        assert CurrencyTable.from_currencies(currencies, "usd").base_code == "USD"
        assert CurrencyTable.from_currencies(currencies, "GBP").base_code == "EUR"

    def test_disabled_and_duplicate_currencies_are_skipped(self):
        """Test that only the first enabled occurrence counts."""
        table = CurrencyTable.from_currencies([
            Currency(code="USD", conversion_rate="1", is_default=True),
            Currency(code="GBP", conversion_rate="0.8", enabled=False),
            Currency(code="usd", conversion_rate="2"),
        ])

        assert table.codes == ["USD"]
        assert not table.is_enabled("GBP")
        assert table.rates["USD"] == Decimal("1")

    def test_base_without_rate_gets_one(self):
        """Test that an unusable base rate is treated as 1."""
        table = CurrencyTable.from_currencies([Currency(code="USD", conversion_rate="", is_default=True)])

        assert table.rates["USD"] == Decimal(1)
        assert table.multiplier("USD") == Decimal(1)

    def test_multiplier_is_relative_to_base(self):
        """Test that rates are rebased on the base currency."""
        table = CurrencyTable.from_currencies([
            Currency(code="EUR", conversion_rate="1", is_default=True),
            Currency(code="USD", conversion_rate="1.25"),
            Currency(code="GBP", conversion_rate="0"),
        ])

        assert table.multiplier("USD") == Decimal("1.25")
        assert table.multiplier("GBP") is None


class TestPricingResolver:
    """Tests for per-currency pricing synthesis."""

    @pytest.fixture
    def table(self):
        """USD base with EUR at 0.9 and JPY at 150 without decimals."""
        return CurrencyTable.from_currencies([
            Currency(code="USD", conversion_rate="1", is_default=True),
            Currency(code="EUR", conversion_rate="0.9"),
            Currency(code="JPY", conversion_rate="150", price_decimals=0),
            Currency(code="XXX", conversion_rate="0"),
        ])

    def test_missing_currency_is_converted(self, table):
        """Test that a currency without a model gets a converted copy."""
        resolved = PricingResolver(table).resolve({"USD": monthly("10.00")})

        assert resolved["USD"] == monthly("10.00")
        assert resolved["EUR"] == monthly("9.00", setup="0.00")
        assert resolved["JPY"].recurrent["1M"].price == "1500"

    def test_echoed_base_price_is_rederived(self, table):
        """Test that a currency model identical to the base is recomputed."""
        resolved = PricingResolver(table).resolve({"USD": monthly("10.00"), "EUR": monthly("10.00")})

        assert resolved["EUR"] == monthly("9.00", setup="0.00")

    def test_customized_price_is_kept(self, table):
        """Test that a currency-specific price survives."""
        resolved = PricingResolver(table).resolve({"USD": monthly("10.00"), "EUR": monthly("8.50")})

        assert resolved["EUR"] == monthly("8.50")

    def test_currency_without_rate_is_skipped(self, table):
        """Test that a zero rate never produces a price."""
        resolved = PricingResolver(table).resolve({"USD": monthly("10.00")})

        assert "XXX" not in resolved

    def test_base_model_falls_back_to_existing_pricing(self, table):
        """Test that the entity's known pricing seeds the base model."""
        resolved = PricingResolver(table).resolve({}, {DEFAULT_PRICING_KEY: monthly("20.00")})

        assert resolved["USD"] == monthly("20.00")
        assert resolved["EUR"] == monthly("18.00", setup="0.00")

    def test_nothing_to_resolve(self, table):
        """Test that an entity without any pricing stays empty."""
        assert PricingResolver(table).resolve({}, {}) == {}

    def test_conversion_is_rate_consistent(self):
        """Test that converting base to X to Y matches the direct conversion within precision."""
        table = CurrencyTable.from_currencies([
            Currency(code="USD", conversion_rate="1", is_default=True),
            Currency(code="EUR", conversion_rate="0.9"),
            Currency(code="GBP", conversion_rate="0.78"),
        ])
        resolved = PricingResolver(table).resolve({"USD": monthly("12.34")})

        eur = Decimal(resolved["EUR"].recurrent["1M"].price)
        gbp = Decimal(resolved["GBP"].recurrent["1M"].price)
        via_eur = eur * table.relation("EUR", "GBP")

        assert abs(via_eur - gbp) <= Decimal("0.01")

    def test_domain_pricing_per_currency(self, table):
        """Test TLD pricing conversion and raw fallback."""
        prices = PricingResolver(table).domain_pricing(DomainPricing(register="12.00", renew="12.00", transfer=""))

        assert prices["USD"] == DomainPricing(register="12.00", renew="12.00", transfer="")
        assert prices["EUR"] == DomainPricing(register="10.80", renew="10.80", transfer="")
        assert prices["XXX"] == DomainPricing(register="12.00", renew="12.00", transfer="")


class TestConvertAmount:
    """Tests for amount conversion."""

    def test_rounds_half_up(self):
        """Test half-up rounding to the target precision."""
        assert convert_amount("1.005", Decimal(1), 2) == "1.01"
        assert convert_amount("10", Decimal("0.9"), 2) == "9.00"

    def test_non_numeric_amount_is_unchanged(self):
        """Test that non-numeric amounts pass through."""
        assert convert_amount(None, Decimal(2), 2) is None
        assert convert_amount("free", Decimal(2), 2) == "free"

    def test_large_amounts(self):
        """Test that wide amounts convert exactly and oversized ones pass through."""
        assert convert_amount("1e30", Decimal("0.9"), 2) == "900000000000000000000000000000.00"
        assert convert_amount("1e200", Decimal("0.9"), 2) == "1e200"
        assert convert_amount("1e999999", Decimal(10), 2) == "1e999999"

    def test_domain_pricing_with_oversized_amount(self):
        """Test that one unroundable TLD price does not stop the others."""
        table = CurrencyTable.from_currencies([
            Currency(code="USD", conversion_rate="1", is_default=True),
            Currency(code="EUR", conversion_rate="0.9"),
        ])

        prices = PricingResolver(table).domain_pricing(DomainPricing(register="1e200", renew="12.00"))

        assert prices["EUR"] == DomainPricing(register="1e200", renew="10.80", transfer="")
