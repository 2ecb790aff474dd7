"""
Unit tests for the public sanitizer.
"""
import pytest

from catalog_snapshot.internal.domain.billing import Gateway
from catalog_snapshot.internal.domain.catalog import Addon, Category, Product
from catalog_snapshot.internal.domain.value_objects import (
    DEFAULT_PRICING_KEY,
    Feature,
    PricingEntry,
    PricingModel,
)
from catalog_snapshot.internal.usecase.sanitizer import (
    features_from_limitations,
    is_domain_registration_product,
    is_public_addon,
    is_public_product,
    sanitize_addon,
    sanitize_category,
    sanitize_gateway,
    sanitize_limitations_for_public,
    sanitize_pricing_for_public,
    sanitize_pricing_model,
    sanitize_product,
    status_is_public,
)


EXCLUDE = ["tld", "domain register", "domain registration", "domain transfer", "domain renewal"]


@pytest.fixture
def product():
    """Otherwise publishable product."""
    return Product(id="10", title="Starter Hosting", type="hosting", status="enabled")


class TestVisibility:
    """Tests for visibility predicates."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("enabled", True),
            ("Active", True),
            ("inactive", False),
            ("disabled", False),
            ("draft", False),
            ("", True),
            ("pending review", True),
        ],
    )
    def test_status_is_public(self, status, expected):
        """Test status classification with non-public tokens first."""
        assert status_is_public(status) is expected

    def test_hidden_product_is_never_public(self, product):
        """Test that the hidden flag wins over everything else."""
        product.hidden = True

        assert is_public_product(product, []) is False

    def test_domain_product_is_not_public(self, product):
        """Test that domain-type products are excluded even when eligible."""
        product.type = "domain"

        assert is_public_product(product, []) is False
        assert is_domain_registration_product(product) is True

    def test_exclude_patterns_match_any_text_field(self, product):
        """Test case-insensitive pattern matching across fields."""
        assert is_public_product(product, EXCLUDE) is True

        product.category_title = "Domain Registration"
        assert is_public_product(product, EXCLUDE) is False

    def test_untitled_product_is_not_public(self, product):
        """Test that a blank title is rejected."""
        product.title = "  "

        assert is_public_product(product, []) is False

    def test_addon_visibility(self):
        """Test addon predicate."""
        assert is_public_addon(Addon(id="5", title="Backups", status="active"), EXCLUDE) is True
        assert is_public_addon(Addon(id="6", title="Backups", status="disabled"), EXCLUDE) is False
        assert is_public_addon(Addon(id="7", title="TLD lock"), EXCLUDE) is False


class TestFeatures:
    """Tests for feature mapping."""

    def test_features_follow_display_priority(self):
        """Test mapping, filtering and ordering of features."""
        limitations = {
            "max_cpu": 2,
            "email_accounts": "25",
            "disk_quota": "10240",
            "max_sql": 0,
            "ftp": True,
            "traffic": -1,
            "bandwidth_gb": "100",
        }

        features = features_from_limitations(limitations)

        assert features == [
            Feature(key="disk", value="10240"),
            Feature(key="bandwidth", value="100"),
            Feature(key="email_accounts", value="25"),
            Feature(key="cpu_cores", value="2"),
        ]

    def test_public_addon_limitations(self):
        """Test addon limitation vocabulary."""
        public = sanitize_limitations_for_public({
            "config.max_addon": "5",
            "config.addons_total": "9",
            "disk": "unlimited",
            "backup_db": True,
            "ram": "lots",
            "theme": "dark",
        })

        assert public == {"addons": "5", "disk": "unlimited", "databases": True}


class TestPricingSanitization:
    """Tests for public pricing."""

    @pytest.fixture
    def raw_pricing(self):
        """Pricing with a default model, a disabled period and a foreign currency."""
        return {
            DEFAULT_PRICING_KEY: PricingModel(
                recurrent={
                    "1Y": PricingEntry(price="100", setup=None, enabled=True),
                    "1M": PricingEntry(price=None, setup=None, enabled=True),
                    "3M": PricingEntry(price="27", setup="0", enabled=False),
                },
            ),
            "GBP": PricingModel(type="once", once=PricingEntry(price="5", setup="1", enabled=True)),
        }

    def test_default_model_is_broadcast(self, raw_pricing):
        """Test broadcast to enabled currencies and entry defaults."""
        public = sanitize_pricing_for_public(raw_pricing, ["usd", "EUR"])

        assert list(public) == ["EUR", "USD"]
        model = public["USD"]
        assert model.type == "recurrent"
        assert list(model.recurrent) == ["1M", "1Y"]
        assert model.recurrent["1M"] == PricingEntry(price="0", setup="0", enabled=True)
        assert model.recurrent["1Y"] == PricingEntry(price="100", setup="0", enabled=True)

    def test_sanitization_is_idempotent(self, raw_pricing):
        """Test that sanitizing sanitized pricing changes nothing."""
        once = sanitize_pricing_for_public(raw_pricing, ["USD", "GBP"])
        twice = sanitize_pricing_for_public(once, ["USD", "GBP"])

        assert once == twice
        assert list(once) == ["GBP"]

    def test_empty_model_is_dropped(self):
        """Test that a model without orderable entries disappears."""
        model = PricingModel(recurrent={"1M": PricingEntry(price=None, setup=None, enabled=False)})

        assert sanitize_pricing_model(model) is None
        assert sanitize_pricing_for_public({"USD": model}, ["USD"]) == {}

    def test_free_entry_is_always_enabled(self):
        """Test free model normalization."""
        model = sanitize_pricing_model(
            PricingModel(type="free", free=PricingEntry(price=None, setup=None, enabled=False)),
        )

        assert model is None

        model = sanitize_pricing_model(PricingModel(type="free", free=PricingEntry(price="0", enabled=False)))
        assert model.free == PricingEntry(price="0", setup="0", enabled=True)


class TestPublicShapes:
    """Tests for public DTO construction."""

    def test_sanitize_product_filters_addons_and_currencies(self, product):
        """Test product DTO contents."""
        product.addons = ["5", "6", "5"]
        product.pricing = {
            "USD": PricingModel(recurrent={"1M": PricingEntry(price="10.00", setup="0")}),
            "XXX": PricingModel(recurrent={"1M": PricingEntry(price="1", setup="0")}),
        }
        product.limitations = {"disk": "1000"}
        product.config = {"secret": "never published"}

        dto = sanitize_product(product, ["USD"], public_addon_ids=["5"])

        assert dto.addons == ["5"]
        assert list(dto.pricing) == ["USD"]
        assert dto.pricing["USD"].type == "recurrent"
        assert dto.features[0].key == "disk"
        assert "config" not in dto.model_dump()

    def test_sanitize_addon(self):
        """Test addon DTO contents."""
        addon = Addon(id="5", title="Backups", limitations={"max_db": 2}, config={"token": "x"})

        dto = sanitize_addon(addon, ["USD"])

        assert dto.limitations == {"databases": "2"}
        assert "config" not in dto.model_dump()

    def test_category_without_public_products_is_dropped(self):
        """Test category filtering."""
        category = Category(id="1", title="Hosting", products=["10", "11"])

        assert sanitize_category(category, ["12"]) is None
        assert sanitize_category(category, ["11"]).products == ["11"]

    def test_gateway_currencies_and_config(self):
        """Test gateway filtering."""
        gateway = Gateway(id="1", code="PayPal", title="PayPal", accepted_currencies=["USD", "gbp"], config={"key": "x"})

        dto = sanitize_gateway(gateway, ["USD", "EUR"])

        assert dto.accepted_currencies == ["USD"]
        assert "config" not in dto.model_dump()
        assert sanitize_gateway(Gateway(id="2", enabled=False), ["USD"]) is None
