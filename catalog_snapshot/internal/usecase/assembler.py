"""
Assembler.

Reduces a collected catalog snapshot to the published document with a
deterministic ordering: every collection is sorted by its canonical key so
regenerating from unchanged upstream data yields identical output.
"""
from datetime import datetime
from typing import Mapping, Optional, Sequence, TypeVar

from catalog_snapshot.internal.domain.billing import Branding, Currency
from catalog_snapshot.internal.domain.snapshot import CatalogSnapshot
from catalog_snapshot.internal.transport.document.dto import (
    AddonDTO,
    AssetsDTO,
    BrandingDTO,
    CatalogDocument,
    CategoryDTO,
    CompanyDTO,
    CountsDTO,
    CurrencyDTO,
    CurrencyRatesDTO,
    DomainDTO,
    DomainPricingDTO,
    GatewayDTO,
    MetaDTO,
    ProductDTO,
    ThemeDTO,
)
from catalog_snapshot.internal.usecase.merge import link_categories
from catalog_snapshot.internal.usecase.normalizers.fields import format_decimal, to_decimal
from catalog_snapshot.internal.usecase.pricing import CurrencyTable, PricingResolver
from catalog_snapshot.internal.usecase.sanitizer import (
    is_public_addon,
    is_public_product,
    sanitize_addon,
    sanitize_category,
    sanitize_gateway,
    sanitize_product,
)
from catalog_snapshot.pkg.logger.logger import get_logger


logger = get_logger(__name__)


GENERATOR_NAME = "fossbilling-static-site-gen"
RATE_SCALE = 8

T = TypeVar("T")


def canonical_key(key: str) -> tuple[int, int, str]:
    """
    Sort key for collection keys.

    Integer-like ids sort numerically before any other key, which sort
    lexically.
    """
    if key.isascii() and key.isdigit():
        return 0, int(key), ""
    return 1, 0, key


def sort_by_key(items: Mapping[str, T]) -> list[T]:
    """Return mapping values ordered by :func:`canonical_key`."""
    return [items[key] for key in sorted(items, key=canonical_key)]


class CatalogAssembler:
    """
    Builds the public catalog document.

    The assembler is pure: it performs no I/O and derives everything from
    the snapshot and its own settings.
    """

    def __init__(
        self,
        public_site_url: str,
        billing_base_url: str,
        exclude_patterns: Sequence[str] = (),
        custom_assets: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initialize the assembler.

        Args:
            public_site_url: URL of the storefront.
            billing_base_url: URL of the billing platform.
            exclude_patterns: Substrings that keep products/addons private.
            custom_assets: Asset URL overrides published in ``meta``.
        """
        self._public_site_url = public_site_url
        self._billing_base_url = billing_base_url
        self._exclude_patterns = list(exclude_patterns)
        self._custom_assets = {key: value for key, value in (custom_assets or {}).items() if value}

    def assemble(self, snapshot: CatalogSnapshot, generated_at: datetime) -> CatalogDocument:
        """
        Assemble the document.

        Args:
            snapshot: Collected catalog state.
            generated_at: Generation time (timezone-aware).

        Returns:
            Validated catalog document.
        """
        table = CurrencyTable.from_currencies(
            snapshot.currencies.values(),
            snapshot.default_currency_code,
        )
        enabled_codes = list(table.codes)

        addons: dict[str, AddonDTO] = {}
        for addon_id, addon in snapshot.addons.items():
            if not is_public_addon(addon, self._exclude_patterns):
                continue
            public_addon = sanitize_addon(addon, enabled_codes)
            if public_addon.id == "" or public_addon.title == "":
                continue
            addons[addon_id] = public_addon

        linked_categories, linked = link_categories(snapshot.categories, snapshot.products.values())

        products: dict[str, ProductDTO] = {}
        for product_id, product in linked.items():
            if not is_public_product(product, self._exclude_patterns):
                continue
            public_product = sanitize_product(product, enabled_codes, addons.keys())
            if public_product.id == "" or public_product.title == "":
                continue
            products[product_id] = public_product

        categories: dict[str, CategoryDTO] = {}
        for category_id, category in linked_categories.items():
            public_category = sanitize_category(category, products.keys())
            if public_category is not None:
                categories[category_id] = public_category

        gateways: dict[str, GatewayDTO] = {}
        for gateway_id, gateway in snapshot.gateways.items():
            public_gateway = sanitize_gateway(gateway, enabled_codes)
            if public_gateway is not None:
                gateways[gateway_id] = public_gateway

        currencies = self._currencies(snapshot.currencies, table)
        domains = self._domains(snapshot, table)

        document = CatalogDocument(
            meta=MetaDTO(
                generated_at=generated_at.replace(microsecond=0).isoformat(),
                generator=GENERATOR_NAME,
                public_site_url=self._public_site_url,
                billing_base_url=self._billing_base_url,
                default_currency=table.base_code,
                custom_assets=dict(self._custom_assets) or None,
                counts=CountsDTO(
                    categories=len(categories),
                    products=len(products),
                    addons=len(addons),
                    currencies=len(currencies),
                    domains=len(domains),
                    gateways=len(gateways),
                ),
            ),
            branding=self._branding(snapshot.branding),
            categories=sort_by_key(categories),
            products=sort_by_key(products),
            addons=sort_by_key(addons),
            currencies=sort_by_key(currencies),
            domains=sort_by_key(domains),
            currency_rates=self._currency_rates(table),
            gateways=sort_by_key(gateways),
            domain_registration_slug=snapshot.domain_registration_slug,
        )

        logger.info(
            "Catalog assembled",
            categories=len(categories),
            products=len(products),
            addons=len(addons),
            currencies=len(currencies),
            domains=len(domains),
            gateways=len(gateways),
        )
        return document

    def _currencies(
        self,
        currencies: Mapping[str, Currency],
        table: CurrencyTable,
    ) -> dict[str, CurrencyDTO]:
        published: dict[str, CurrencyDTO] = {}
        for code in table.codes:
            currency = currencies.get(code)
            if currency is None:
                continue
            rate_text = currency.conversion_rate
            if code == table.base_code and not _is_usable_rate(rate_text):
                rate_text = "1"
            published[code] = CurrencyDTO(
                code=code,
                title=currency.title or code,
                sign=currency.sign,
                format=currency.format,
                conversion_rate=rate_text,
                is_default=code == table.base_code,
            )
        return published

    def _domains(self, snapshot: CatalogSnapshot, table: CurrencyTable) -> dict[str, DomainDTO]:
        resolver = PricingResolver(table)
        published: dict[str, DomainDTO] = {}
        for key, domain in snapshot.domains.items():
            if not domain.enabled or key == "":
                continue
            published[key] = DomainDTO(
                id=domain.id,
                tld=domain.tld,
                enabled=domain.enabled,
                allow_register=domain.allow_register,
                allow_transfer=domain.allow_transfer,
                min_years=domain.min_years,
                pricing={
                    code: DomainPricingDTO(**pricing.to_dict())
                    for code, pricing in resolver.domain_pricing(domain.pricing).items()
                },
            )
        return published

    def _currency_rates(self, table: CurrencyTable) -> CurrencyRatesDTO:
        """Rates against the base currency and every pairwise relation."""
        codes = sorted(table.rates)
        rates_to_base = {
            code: format_decimal(table.relation(table.base_code, code), RATE_SCALE)
            for code in codes
        }
        relations = {
            from_code: {
                to_code: format_decimal(table.relation(from_code, to_code), RATE_SCALE)
                for to_code in codes
            }
            for from_code in codes
        }
        return CurrencyRatesDTO(
            base_currency=table.base_code,
            rates_to_base=rates_to_base,
            relations=relations,
        )

    def _branding(self, branding: Branding) -> BrandingDTO:
        return BrandingDTO(
            company=CompanyDTO(**branding.company),
            motto=branding.motto,
            brand_mark=branding.brand_mark,
            clientarea_url=branding.clientarea_url,
            theme=ThemeDTO(**branding.theme),
            assets=AssetsDTO(**branding.assets),
            footer_content=branding.footer_content,
        )


def _is_usable_rate(rate_text: str) -> bool:
    rate = to_decimal(rate_text)
    return rate is not None and rate > 0
