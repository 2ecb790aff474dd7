"""
Unit tests for the build catalog use case against a fake billing upstream.
"""
import pytest

from catalog_snapshot.internal.usecase import BuildCatalogInput, BuildCatalogUseCase

from tests.fakes import BILLING_URL, FakeBillingUpstream


PRODUCTS = {
    "10": {
        "id": 10,
        "title": "Starter Hosting",
        "type": "hosting",
        "status": "enabled",
        "slug": "starter",
        "product_category_id": 1,
        "addons": [20],
        "config": {"disk_quota": "10240", "max_ftp": 0},
        "pricing": {
            "type": "recurrent",
            "recurrent": {"1M": {"price": "10.00", "setup": "0", "enabled": 1}},
        },
    },
    "11": {
        "id": 11,
        "title": "Domain Registration",
        "type": "domain",
        "status": "enabled",
        "slug": "domain-registration",
        "product_category_id": 1,
    },
}


def product_detail(payload):
    product = PRODUCTS.get(str(payload.get("id")))
    if product is None:
        return 200, {"result": None, "error": {"message": "Product not found"}}
    return 200, {"result": product}


def listing(rows):
    return {"result": {"list": rows, "total": len(rows)}}


def catalog_routes():
    return {
        "guest/system/company": {"result": {"name": "Acme", "email": "sales@acme.test"}},
        "guest/extension/theme": {"result": {"code": "huraga", "name": "Huraga", "url": BILLING_URL + "/themes/huraga"}},
        "admin/extension/config_get": {"result": {"logo_url": "https://cdn.test/logo.png"}},
        "admin/product/category_get_pairs": {"result": {"1": "Hosting"}},
        "guest/product/category_get_list": listing([{"id": 1, "title": "Hosting", "slug": "hosting"}]),
        "admin/product/get_list": listing([
            {"id": 10, "title": "Starter Hosting", "type": "hosting", "status": "enabled", "slug": "starter",
             "product_category_id": 1},
            {"id": 11, "title": "Domain Registration", "type": "domain", "status": "enabled",
             "slug": "domain-registration", "product_category_id": 1},
        ]),
        "admin/product/get": product_detail,
        "admin/product/addon_get_pairs": {"result": {"20": "Backups"}},
        "admin/product/addon_get": {
            "result": {
                "id": 20,
                "title": "Backups",
                "status": "enabled",
                "slug": "backups",
                "pricing": {"type": "once", "once": {"price": "2.00", "setup": "0", "enabled": 1}},
            },
        },
        "admin/servicehosting/hp_get_list": {"result": []},
        "admin/currency/get_default": {"result": {"code": "USD"}},
        "admin/currency/get_list": listing([
            {"code": "USD", "title": "US Dollar", "conversion_rate": "1", "is_default": 1},
            {"code": "EUR", "title": "Euro", "conversion_rate": "0.9", "is_default": 0},
        ]),
        "admin/servicedomain/tld_get_list": listing([
            {"id": 1, "tld": ".com", "active": 1, "price_registration": "12.00",
             "price_renew": "12.00", "price_transfer": "12.00"},
            {"id": 2, "tld": ".net", "active": 0, "price_registration": "11.00"},
        ]),
        "admin/invoice/gateway_get_list": listing([
            {"id": 1, "gateway": "PayPal", "title": "PayPal", "enabled": 1,
             "accepted_currencies": ["USD", "EUR", "GBP"], "config": {"email": "billing@acme.test"}},
        ]),
    }


@pytest.fixture
def build_input():
    """Input with the default exclusions."""
    return BuildCatalogInput(
        public_site_url="https://www.acme.test",
        exclude_patterns=["tld", "domain registration"],
        custom_assets={"favicon_url": "https://www.acme.test/favicon.ico"},
    )


class TestBuildCatalogUseCase:
    """Tests for BuildCatalogUseCase."""

    @pytest.mark.asyncio
    async def test_full_catalog(self, make_client, run_context, build_input):
        """Test that a healthy upstream produces the complete document without warnings."""
        upstream = FakeBillingUpstream(catalog_routes())

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        document = output.document
        assert output.warnings == []
        assert document.domain_registration_slug == "domain-registration"
        assert [product.id for product in document.products] == ["10"]
        assert [category.products for category in document.categories] == [["10"]]
        assert [currency.code for currency in document.currencies] == ["EUR", "USD"]

        product = document.products[0]
        assert product.order_url == BILLING_URL + "/order/starter"
        assert product.category_title == "Hosting"
        assert product.addons == ["20"]
        assert product.pricing["USD"].recurrent["1M"].price == "10.00"
        assert product.pricing["EUR"].recurrent["1M"].price == "9.00"
        assert [feature.key for feature in product.features] == ["disk"]

        addon = document.addons[0]
        assert addon.order_url == "https://www.acme.test/order/backups"
        assert addon.pricing["EUR"].once.price == "1.80"

        assert document.domains[0].tld == ".com"
        assert document.domains[0].pricing["EUR"].register == "10.80"
        assert len(document.domains) == 1

        gateway = document.gateways[0]
        assert gateway.accepted_currencies == ["USD", "EUR"]
        assert "config" not in gateway.model_dump()

        assert document.branding.company.name == "Acme"
        assert document.branding.assets.logo_url == "https://cdn.test/logo.png"
        assert document.meta.custom_assets == {"favicon_url": "https://www.acme.test/favicon.ico"}
        assert document.meta.billing_base_url == BILLING_URL

    @pytest.mark.asyncio
    async def test_pricing_is_fetched_per_currency(self, make_client, run_context, build_input):
        """Test that every entity is requested once per enabled currency."""
        upstream = FakeBillingUpstream(catalog_routes())

        async with make_client(upstream) as client:
            await BuildCatalogUseCase(client, run_context).execute(build_input)

        priced = {
            (request["payload"]["id"], request["payload"]["currency"])
            for request in upstream.calls_to("admin/product/get")
            if "currency" in request["payload"]
        }
        assert priced == {("10", "USD"), ("10", "EUR"), ("11", "USD"), ("11", "EUR")}
        assert upstream.calls_to("admin/extension/config_get")[0]["payload"]["ext"] == "theme_huraga"

    @pytest.mark.asyncio
    async def test_failures_become_warnings(self, make_client, run_context, build_input):
        """Test that an upstream without any method still yields a document."""
        upstream = FakeBillingUpstream()

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        contexts = [warning.split(":", 1)[0] for warning in output.warnings]
        assert "company" in contexts
        assert "products" in contexts
        assert "products_guest" in contexts
        assert "currency_pairs" in contexts
        assert "domain_tlds_admin" in contexts
        assert "domain_tlds_guest" in contexts
        assert "guest_gateways" in contexts
        assert output.document.products == []
        assert output.document.meta.counts.products == 0
        assert output.warnings == run_context.warnings

    @pytest.mark.asyncio
    async def test_products_fall_back_to_guest_scope(self, make_client, run_context, build_input):
        """Test guest listing and guest details when the admin scope has nothing."""
        routes = catalog_routes()
        routes["admin/product/get_list"] = {"result": []}
        routes["guest/product/get_list"] = listing([{"id": 10, "title": "Starter Hosting"}])
        routes["guest/product/get"] = routes.pop("admin/product/get")

        upstream = FakeBillingUpstream(routes)

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        product = output.snapshot.products["10"]
        assert product.slug == "starter"
        assert product.category_id == "1"
        assert not any(warning.startswith("product_10_details") for warning in output.warnings)
        assert any(warning.startswith("product_10_pricing_USD") for warning in output.warnings)
        assert output.document.products[0].pricing["EUR"].recurrent["1M"].price == "9.00"

    @pytest.mark.asyncio
    async def test_gateway_pairs_fallback(self, make_client, run_context, build_input):
        """Test that gateway pairs are used when the list call fails."""
        routes = catalog_routes()
        del routes["admin/invoice/gateway_get_list"]
        routes["admin/invoice/gateway_get_pairs"] = {"result": {"3": "Bank transfer"}}

        upstream = FakeBillingUpstream(routes)

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        assert [gateway.id for gateway in output.document.gateways] == ["3"]
        assert output.document.gateways[0].title == "Bank transfer"
        assert any(warning.startswith("gateway_list") for warning in output.warnings)

    @pytest.mark.asyncio
    async def test_unusual_numbers_do_not_abort_the_run(self, make_client, run_context, build_input):
        """Test non-finite page metadata and a very large TLD price."""
        routes = catalog_routes()
        routes["admin/servicedomain/tld_get_list"] = (
            '{"result": {"list": [{"id": 1, "tld": ".com", "active": 1, '
            '"price_registration": "1e30", "price_renew": "12.00"}], "pages": NaN, "total": Infinity}}'
        )

        upstream = FakeBillingUpstream(routes)

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        assert output.warnings == []
        assert len(upstream.calls_to("admin/servicedomain/tld_get_list")) == 1
        pricing = output.document.domains[0].pricing
        assert pricing["USD"].register == "1000000000000000000000000000000.00"
        assert pricing["EUR"].register == "900000000000000000000000000000.00"
        assert pricing["EUR"].renew == "10.80"

    @pytest.mark.asyncio
    async def test_output_is_json_ready(self, make_client, run_context, build_input):
        """Test the serializable representation."""
        upstream = FakeBillingUpstream(catalog_routes())

        async with make_client(upstream) as client:
            output = await BuildCatalogUseCase(client, run_context).execute(build_input)

        data = output.to_dict()
        assert data["meta"]["generator"] == "fossbilling-static-site-gen"
        assert data["currency_rates"]["rates_to_base"] == {"EUR": "0.9", "USD": "1"}
