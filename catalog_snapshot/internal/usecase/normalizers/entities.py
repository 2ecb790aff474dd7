"""
Normalizers turning raw billing API records into domain entities.

Every function is pure: it reads a raw record through the alias tables and
returns a fully populated entity with defaults for anything missing.
"""
from typing import Any, Mapping
from urllib.parse import quote

from catalog_snapshot.internal.domain.billing import Currency, DomainTld, Gateway
from catalog_snapshot.internal.domain.catalog import Addon, Category, HostingPlan, Product
from catalog_snapshot.internal.domain.value_objects import DomainPricing

from .aliases import (
    CATEGORY_FIELDS,
    CURRENCY_FIELDS,
    DOMAIN_TLD_FIELDS,
    GATEWAY_FIELDS,
    HOSTING_PLAN_FIELDS,
    PRODUCT_FIELDS,
)
from .fields import as_mapping, bool_like, id_text, normalize_text, pick_first, scalar_text
from .limitations import extract_limitations, hosting_plan_limitations
from .pricing import clamp_decimals, normalize_pricing


def build_order_url(base_url: str, slug: str, product_id: str) -> str:
    """
    Build the order form link for a product.

    Args:
        base_url: Site the order form lives on.
        slug: Product slug, preferred when present.
        product_id: Product id used when there is no slug.

    Returns:
        ``{base}/order/{slug}`` or ``{base}/order?product_id={id}``.
    """
    base = base_url.rstrip("/")
    if slug:
        return f"{base}/order/{quote(slug, safe='')}"
    return f"{base}/order?product_id={quote(product_id, safe='')}"


def _string_list(value: Any) -> list[str]:
    if isinstance(value, Mapping):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    return [id_text(item) for item in value if id_text(item) != ""]


def normalize_category(row: Mapping[str, Any]) -> Category:
    """Normalize a category record."""
    return Category(
        id=id_text(pick_first(row, CATEGORY_FIELDS["id"], "")),
        title=normalize_text(pick_first(row, CATEGORY_FIELDS["title"], "")),
        slug=normalize_text(pick_first(row, CATEGORY_FIELDS["slug"], "")),
        description=normalize_text(pick_first(row, CATEGORY_FIELDS["description"], "")),
        icon_url=normalize_text(pick_first(row, CATEGORY_FIELDS["icon_url"], "")),
    )


def normalize_product(row: Mapping[str, Any], billing_base_url: str) -> Product:
    """
    Normalize a product record.

    Args:
        row: Raw product from a list or detail call.
        billing_base_url: Base URL for generated order links.

    Returns:
        Product with pricing normalized and limitations extracted from
        its config.
    """
    product_id = id_text(pick_first(row, PRODUCT_FIELDS["id"], ""))
    slug = normalize_text(pick_first(row, PRODUCT_FIELDS["slug"], ""))
    order_url = normalize_text(pick_first(row, PRODUCT_FIELDS["order_url"], ""))
    if order_url == "":
        order_url = build_order_url(billing_base_url, slug, product_id)

    config = as_mapping(pick_first(row, PRODUCT_FIELDS["config"], {}))

    return Product(
        id=product_id,
        title=normalize_text(pick_first(row, PRODUCT_FIELDS["title"], "")),
        description=normalize_text(pick_first(row, PRODUCT_FIELDS["description"], "")),
        type=normalize_text(pick_first(row, PRODUCT_FIELDS["type"], "")),
        status=normalize_text(pick_first(row, PRODUCT_FIELDS["status"], "")),
        slug=slug,
        order_url=order_url,
        category_id=id_text(pick_first(row, PRODUCT_FIELDS["category_id"], "")),
        icon_url=normalize_text(pick_first(row, PRODUCT_FIELDS["icon_url"], "")),
        hidden=bool_like(pick_first(row, PRODUCT_FIELDS["hidden"], False), False),
        setup=normalize_text(pick_first(row, PRODUCT_FIELDS["setup"], "")),
        stock_control=bool_like(pick_first(row, PRODUCT_FIELDS["stock_control"], False), False),
        quantity_in_stock=scalar_text(pick_first(row, PRODUCT_FIELDS["quantity_in_stock"], "")),
        allow_quantity_select=bool_like(
            pick_first(row, PRODUCT_FIELDS["allow_quantity_select"], False),
            False,
        ),
        pricing=normalize_pricing(pick_first(row, PRODUCT_FIELDS["pricing"], {})),
        addons=_string_list(pick_first(row, PRODUCT_FIELDS["addons"], [])),
        upgrades=pick_first(row, PRODUCT_FIELDS["upgrades"], None),
        config=config,
        limitations=extract_limitations(config),
    )


def normalize_addon(row: Mapping[str, Any], public_site_url: str) -> Addon:
    """
    Normalize an addon record.

    The platform returns addons as products, so the product normalizer does
    the work; order links point at the public site.
    """
    product = normalize_product(row, public_site_url)
    return Addon(
        id=product.id,
        title=product.title,
        description=product.description,
        type=product.type,
        status=product.status,
        slug=product.slug,
        order_url=product.order_url,
        icon_url=product.icon_url,
        pricing=product.pricing,
        config=product.config,
        limitations=product.limitations,
    )


def normalize_currency(row: Mapping[str, Any], default_code: str = "") -> Currency:
    """
    Normalize a currency record.

    Args:
        row: Raw currency.
        default_code: Code reported by ``currency/get_default``; a matching
            currency is flagged as default.

    Returns:
        Currency with an uppercase code.
    """
    code = normalize_text(pick_first(row, CURRENCY_FIELDS["code"], "")).upper()
    flagged = bool_like(pick_first(row, CURRENCY_FIELDS["is_default"], False), False)
    reported_default = code != "" and default_code.upper() == code

    return Currency(
        code=code,
        title=normalize_text(pick_first(row, CURRENCY_FIELDS["title"], code)),
        sign=normalize_text(pick_first(row, CURRENCY_FIELDS["sign"], "")),
        format=normalize_text(pick_first(row, CURRENCY_FIELDS["format"], "")),
        conversion_rate=normalize_text(pick_first(row, CURRENCY_FIELDS["conversion_rate"], "")),
        price_decimals=clamp_decimals(pick_first(row, CURRENCY_FIELDS["price_decimals"], "2")),
        enabled=bool_like(pick_first(row, CURRENCY_FIELDS["enabled"], True), True),
        is_default=flagged or reported_default,
    )


def normalize_gateway(row: Mapping[str, Any]) -> Gateway:
    """Normalize a payment gateway record."""
    accepted = pick_first(row, GATEWAY_FIELDS["accepted_currencies"], [])
    return Gateway(
        id=id_text(pick_first(row, GATEWAY_FIELDS["id"], "")),
        code=normalize_text(pick_first(row, GATEWAY_FIELDS["code"], "")),
        title=normalize_text(pick_first(row, GATEWAY_FIELDS["title"], "")),
        enabled=bool_like(pick_first(row, GATEWAY_FIELDS["enabled"], True), True),
        allow_single=bool_like(pick_first(row, GATEWAY_FIELDS["allow_single"], True), True),
        allow_recurrent=bool_like(pick_first(row, GATEWAY_FIELDS["allow_recurrent"], True), True),
        accepted_currencies=[code.upper() for code in _string_list(accepted)],
        config=as_mapping(pick_first(row, GATEWAY_FIELDS["config"], {})),
    )


def normalize_domain_tld(row: Mapping[str, Any]) -> DomainTld:
    """Normalize a domain TLD record. Prices are in the platform default currency."""
    return DomainTld(
        id=id_text(pick_first(row, DOMAIN_TLD_FIELDS["id"], "")),
        tld=normalize_text(pick_first(row, DOMAIN_TLD_FIELDS["tld"], "")),
        enabled=bool_like(pick_first(row, DOMAIN_TLD_FIELDS["enabled"], True), True),
        allow_register=bool_like(pick_first(row, DOMAIN_TLD_FIELDS["allow_register"], True), True),
        allow_transfer=bool_like(pick_first(row, DOMAIN_TLD_FIELDS["allow_transfer"], True), True),
        min_years=scalar_text(pick_first(row, DOMAIN_TLD_FIELDS["min_years"], "1")),
        pricing=DomainPricing(
            register=normalize_text(pick_first(row, DOMAIN_TLD_FIELDS["register"], "")),
            renew=normalize_text(pick_first(row, DOMAIN_TLD_FIELDS["renew"], "")),
            transfer=normalize_text(pick_first(row, DOMAIN_TLD_FIELDS["transfer"], "")),
        ),
    )


def normalize_hosting_plan(row: Mapping[str, Any]) -> HostingPlan:
    """Normalize a hosting plan record, promoting top-level quotas."""
    config = as_mapping(pick_first(row, HOSTING_PLAN_FIELDS["config"], {}))
    return HostingPlan(
        id=id_text(pick_first(row, HOSTING_PLAN_FIELDS["id"], "")),
        name=normalize_text(pick_first(row, HOSTING_PLAN_FIELDS["name"], "")),
        status=normalize_text(pick_first(row, HOSTING_PLAN_FIELDS["status"], "")),
        config=config,
        limitations=hosting_plan_limitations(row, config),
    )
