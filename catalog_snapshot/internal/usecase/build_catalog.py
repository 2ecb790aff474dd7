"""
Build Catalog Use Case.

Collects branding, catalog, currency, domain and gateway data from the
billing platform and assembles the public catalog document. Every stage is
best-effort: failures become warnings and the document is still produced.
"""
import asyncio
from dataclasses import replace
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, Sequence, TypeVar

from catalog_snapshot.internal.domain.billing import Branding, Currency, DomainTld, Gateway
from catalog_snapshot.internal.domain.catalog import Addon, Category, HostingPlan, Product
from catalog_snapshot.internal.domain.errors import ApiError, CatalogError
from catalog_snapshot.internal.domain.run import RunContext
from catalog_snapshot.internal.domain.snapshot import CatalogSnapshot
from catalog_snapshot.internal.domain.value_objects import PricingModel
from catalog_snapshot.internal.infrastructure.fossbilling.client import ADMIN_SCOPE, GUEST_SCOPE
from catalog_snapshot.internal.infrastructure.fossbilling.pagination import as_list, fetch_paginated
from catalog_snapshot.internal.metrics import PUBLISHED_ENTITIES, WARNINGS
from catalog_snapshot.internal.transport.document.dto import CatalogDocument
from catalog_snapshot.internal.usecase.assembler import CatalogAssembler
from catalog_snapshot.internal.usecase.merge import attach_hosting_plans, merge_non_empty
from catalog_snapshot.internal.usecase.normalizers import (
    flatten_pairs,
    normalize_addon,
    normalize_branding,
    normalize_category,
    normalize_currency,
    normalize_domain_tld,
    normalize_gateway,
    normalize_hosting_plan,
    normalize_product,
    normalize_pricing,
    normalize_text,
    pick_first,
    pick_model_for_currency,
    theme_code,
)
from catalog_snapshot.internal.usecase.normalizers.aliases import CURRENCY_FIELDS
from catalog_snapshot.internal.usecase.pricing import CurrencyTable, PricingResolver
from catalog_snapshot.internal.usecase.sanitizer import is_domain_registration_product
from catalog_snapshot.pkg.logger.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class BillingApi(Protocol):
    """Protocol for the billing platform client."""

    @property
    def base_url(self) -> str:
        """Billing platform URL."""
        ...

    async def call(
        self,
        scope: str,
        method: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Call a remote method."""
        ...

    async def call_with_fallback(
        self,
        scope: str,
        methods: Sequence[str],
        payload: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Call the first method alias that succeeds."""
        ...


class BuildCatalogInput:
    """Input DTO for building the catalog."""

    def __init__(
        self,
        public_site_url: str,
        exclude_patterns: Optional[Sequence[str]] = None,
        per_page: int = 100,
        max_pages: int = 25,
        max_concurrency: int = 4,
        motto: str = "",
        brand_mark: str = "",
        custom_assets: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Initialize build catalog input.

        Args:
            public_site_url: Storefront URL, used for addon order links.
            exclude_patterns: Substrings keeping products/addons private.
            per_page: Page size for list calls.
            max_pages: Page cap per list call.
            max_concurrency: Parallel detail fetches.
            motto: Motto override.
            brand_mark: Brand mark text.
            custom_assets: Asset URL overrides.
        """
        self.public_site_url = public_site_url
        self.exclude_patterns = list(exclude_patterns or [])
        self.per_page = max(1, per_page)
        self.max_pages = max(1, max_pages)
        self.max_concurrency = max(1, max_concurrency)
        self.motto = motto
        self.brand_mark = brand_mark
        self.custom_assets = dict(custom_assets or {})


class BuildCatalogOutput:
    """Output DTO for a built catalog."""

    def __init__(
        self,
        document: CatalogDocument,
        snapshot: CatalogSnapshot,
        warnings: list[str],
    ) -> None:
        """
        Initialize build catalog output.

        Args:
            document: Public catalog document.
            snapshot: Collected state the document was assembled from.
            warnings: Absorbed failures, ``"{context}: {message}"``.
        """
        self.document = document
        self.snapshot = snapshot
        self.warnings = warnings

    def to_dict(self) -> dict:
        """Convert the document to its JSON-ready representation."""
        return self.document.model_dump(mode="json")


class BuildCatalogUseCase:
    """
    Use case for building the catalog snapshot.

    Stages run in a fixed order because later stages read earlier results:
    branding, categories, products, addons, hosting plans, currencies,
    domains, per-currency pricing, gateways. Per-entity detail calls run
    concurrently under a semaphore; results are applied in listing order so
    the outcome does not depend on completion order.
    """

    def __init__(self, api: BillingApi, context: RunContext) -> None:
        """
        Initialize use case.

        Args:
            api: Billing platform client.
            context: Run context receiving warnings.
        """
        self._api = api
        self._context = context
        self._semaphore: Optional[asyncio.Semaphore] = None

    async def execute(self, input_dto: BuildCatalogInput) -> BuildCatalogOutput:
        """
        Execute the use case.

        Args:
            input_dto: Input data.

        Returns:
            BuildCatalogOutput with the document and the warnings.
        """
        self._semaphore = asyncio.Semaphore(input_dto.max_concurrency)
        snapshot = CatalogSnapshot()

        logger.info(
            "Catalog build started",
            billing_base_url=self._api.base_url,
            per_page=input_dto.per_page,
            max_pages=input_dto.max_pages,
        )

        snapshot.branding = await self._collect_branding(input_dto)
        snapshot.categories = await self._collect_categories(input_dto)
        snapshot.products = await self._collect_products(input_dto)
        snapshot.addons = await self._collect_addons(input_dto)
        snapshot.hosting_plans = await self._collect_hosting_plans(input_dto)
        attach_hosting_plans(snapshot.products, snapshot.hosting_plans)
        snapshot.default_currency_code, snapshot.currencies = await self._collect_currencies(input_dto)
        snapshot.domain_registration_slug = self._domain_registration_slug(snapshot)
        snapshot.domains = await self._collect_domains(input_dto)
        await self._refresh_pricing(snapshot)
        snapshot.gateways = await self._collect_gateways(input_dto)

        assembler = CatalogAssembler(
            public_site_url=input_dto.public_site_url,
            billing_base_url=self._api.base_url,
            exclude_patterns=input_dto.exclude_patterns,
            custom_assets=input_dto.custom_assets,
        )
        document = assembler.assemble(snapshot, self._context.started_at)
        for collection, count in document.meta.counts.model_dump().items():
            PUBLISHED_ENTITIES.labels(collection=collection).set(count)

        logger.info(
            "Catalog build finished",
            warnings=len(self._context.warnings),
            api_calls=len(self._context.call_log),
        )
        return BuildCatalogOutput(document, snapshot, list(self._context.warnings))

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _warn(self, stage: str, context: str, error: CatalogError) -> None:
        warning = self._context.add_warning(context, error.message)
        WARNINGS.labels(stage=stage).inc()
        logger.warning("Stage degraded", stage=stage, detail=warning)

    async def _bounded(
        self,
        items: Iterable[T],
        fetch: Callable[[T], Awaitable[Any]],
    ) -> list[tuple[T, Any, Optional[CatalogError]]]:
        """
        Run ``fetch`` for every item with bounded concurrency.

        Returns:
            ``(item, result, error)`` triples in input order.
        """
        assert self._semaphore is not None
        semaphore = self._semaphore

        async def run(item: T) -> tuple[T, Any, Optional[CatalogError]]:
            async with semaphore:
                try:
                    return item, await fetch(item), None
                except CatalogError as error:
                    return item, None, error

        return list(await asyncio.gather(*(run(item) for item in items)))

    async def _paginated(
        self,
        input_dto: BuildCatalogInput,
        scope: str,
        method: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> list[Any]:
        return await fetch_paginated(
            self._api,
            scope,
            [method],
            payload or {},
            input_dto.per_page,
            input_dto.max_pages,
        )

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------

    async def _collect_branding(self, input_dto: BuildCatalogInput) -> Branding:
        company: dict[str, Any] = {}
        theme: dict[str, Any] = {}
        theme_settings: dict[str, Any] = {}

        try:
            result = await self._api.call_with_fallback(GUEST_SCOPE, ["system/company"], {})
            if isinstance(result, dict):
                company = result
        except ApiError as error:
            self._warn("branding", "company", error)

        try:
            result = await self._api.call_with_fallback(GUEST_SCOPE, ["extension/theme"], {"client": 1})
            if isinstance(result, dict):
                theme = result
        except ApiError as error:
            self._warn("branding", "theme_info", error)

        code = theme_code(theme)
        if code:
            try:
                result = await self._api.call_with_fallback(
                    ADMIN_SCOPE,
                    ["extension/config_get"],
                    {"ext": f"theme_{code}"},
                )
                if isinstance(result, dict):
                    theme_settings = result
            except ApiError as error:
                self._warn("branding", "theme_config_get", error)

        return normalize_branding(
            company,
            theme,
            theme_settings,
            self._api.base_url,
            motto=input_dto.motto,
            brand_mark=input_dto.brand_mark,
        )

    async def _collect_categories(self, input_dto: BuildCatalogInput) -> dict[str, Category]:
        categories: dict[str, Category] = {}

        try:
            pairs = await self._api.call_with_fallback(ADMIN_SCOPE, ["product/category_get_pairs"], {})
            for category_id, title in flatten_pairs(pairs).items():
                categories[category_id] = Category(id=category_id, title=title)
        except ApiError as error:
            self._warn("categories", "category_pairs", error)

        try:
            rows = await self._paginated(input_dto, GUEST_SCOPE, "product/category_get_list")
            for row in rows:
                if not isinstance(row, dict):
                    continue
                category = normalize_category(row)
                if category.id == "":
                    continue
                existing = categories.get(category.id)
                categories[category.id] = category if existing is None else merge_non_empty(existing, category)
        except ApiError as error:
            self._warn("categories", "category_list", error)

        return categories

    async def _collect_products(self, input_dto: BuildCatalogInput) -> dict[str, Product]:
        products: dict[str, Product] = {}
        base_url = self._api.base_url

        rows: list[Any] = []
        try:
            rows = await self._paginated(input_dto, ADMIN_SCOPE, "product/get_list", {"show_hidden": True})
        except ApiError as error:
            self._warn("products", "products", error)

        if not rows:
            try:
                rows = await self._paginated(input_dto, GUEST_SCOPE, "product/get_list", {"show_hidden": True})
            except ApiError as error:
                self._warn("products", "products_guest", error)
                return products

        for row in rows:
            if not isinstance(row, dict):
                continue
            product = normalize_product(row, base_url)
            if product.id == "":
                continue
            products[product.id] = product

        async def fetch_details(product_id: str) -> Any:
            try:
                return await self._api.call_with_fallback(ADMIN_SCOPE, ["product/get"], {"id": product_id})
            except ApiError:
                return await self._api.call_with_fallback(GUEST_SCOPE, ["product/get"], {"id": product_id})

        for product_id, details, error in await self._bounded(list(products), fetch_details):
            if error is not None:
                self._warn("products", f"product_{product_id}_details", error)
                continue
            if isinstance(details, dict):
                detailed = normalize_product(details, base_url)
                products[product_id] = merge_non_empty(detailed, products[product_id])

        return products

    async def _collect_addons(self, input_dto: BuildCatalogInput) -> dict[str, Addon]:
        addons: dict[str, Addon] = {}

        try:
            pairs = await self._api.call_with_fallback(ADMIN_SCOPE, ["product/addon_get_pairs"], {})
        except ApiError as error:
            self._warn("addons", "addons", error)
            return addons

        for addon_id, title in flatten_pairs(pairs).items():
            addons[addon_id] = Addon(id=addon_id, title=title)

        async def fetch_addon(addon_id: str) -> Any:
            return await self._api.call_with_fallback(ADMIN_SCOPE, ["product/addon_get"], {"id": addon_id})

        for addon_id, details, error in await self._bounded(list(addons), fetch_addon):
            if error is not None:
                self._warn("addons", f"addon_{addon_id}", error)
                continue
            if isinstance(details, dict):
                addons[addon_id] = merge_non_empty(
                    addons[addon_id],
                    normalize_addon(details, input_dto.public_site_url),
                )

        return addons

    async def _collect_hosting_plans(self, input_dto: BuildCatalogInput) -> dict[str, HostingPlan]:
        plans: dict[str, HostingPlan] = {}

        try:
            rows = await self._paginated(input_dto, ADMIN_SCOPE, "servicehosting/hp_get_list")
        except ApiError as error:
            self._warn("hosting_plans", "hosting_plans", error)
            return plans

        for row in rows:
            if not isinstance(row, dict):
                continue
            plan = normalize_hosting_plan(row)
            if plan.id == "":
                continue
            plans[plan.id] = plan

        async def fetch_plan(plan_id: str) -> Any:
            return await self._api.call_with_fallback(ADMIN_SCOPE, ["servicehosting/hp_get"], {"id": plan_id})

        for plan_id, details, error in await self._bounded(list(plans), fetch_plan):
            if error is not None:
                self._warn("hosting_plans", f"hosting_plan_{plan_id}", error)
                continue
            if isinstance(details, dict):
                plans[plan_id] = merge_non_empty(plans[plan_id], normalize_hosting_plan(details))

        return plans

    async def _collect_currencies(
        self,
        input_dto: BuildCatalogInput,
    ) -> tuple[str, dict[str, Currency]]:
        default_code = ""
        currencies: dict[str, Currency] = {}

        try:
            result = await self._api.call_with_fallback(ADMIN_SCOPE, ["currency/get_default"], {})
            if isinstance(result, dict):
                default_code = normalize_text(pick_first(result, CURRENCY_FIELDS["code"], "")).upper()
        except ApiError as error:
            self._warn("currencies", "currency_default", error)

        try:
            rows = await self._paginated(input_dto, ADMIN_SCOPE, "currency/get_list")
            for row in rows:
                if not isinstance(row, dict):
                    continue
                currency = normalize_currency(row, default_code)
                if currency.code == "":
                    continue
                currencies[currency.code] = currency
        except ApiError as error:
            self._warn("currencies", "currency_list", error)

        if not currencies:
            try:
                pairs = await self._api.call_with_fallback(GUEST_SCOPE, ["currency/get_pairs"], {})
                for code, title in flatten_pairs(pairs).items():
                    code = code.upper()
                    is_default = code == default_code
                    currencies[code] = Currency(
                        code=code,
                        title=title,
                        conversion_rate="1" if is_default else "",
                        is_default=is_default,
                    )
            except ApiError as error:
                self._warn("currencies", "currency_pairs", error)

        return default_code, currencies

    def _domain_registration_slug(self, snapshot: CatalogSnapshot) -> str:
        for product in snapshot.products.values():
            if is_domain_registration_product(product) and product.slug:
                return product.slug
        return ""

    async def _collect_domains(self, input_dto: BuildCatalogInput) -> dict[str, DomainTld]:
        for scope, context in ((ADMIN_SCOPE, "domain_tlds_admin"), (GUEST_SCOPE, "domain_tlds_guest")):
            try:
                rows = await self._paginated(input_dto, scope, "servicedomain/tld_get_list")
            except ApiError as error:
                self._warn("domains", context, error)
                continue

            domains: dict[str, DomainTld] = {}
            for row in rows:
                if not isinstance(row, dict):
                    continue
                domain = normalize_domain_tld(row)
                if domain.key == "" or not domain.enabled:
                    continue
                domains[domain.key] = domain
            return domains

        return {}

    async def _refresh_pricing(self, snapshot: CatalogSnapshot) -> None:
        """Fetch per-currency pricing and synthesize missing currencies."""
        table = CurrencyTable.from_currencies(snapshot.currencies.values(), snapshot.default_currency_code)
        if not table.codes:
            return
        resolver = PricingResolver(table)

        product_pricing = await self._fetch_pricing(
            "product",
            "product/get",
            list(snapshot.products),
            table.codes,
        )
        for product_id, fetched in product_pricing.items():
            product = snapshot.products[product_id]
            resolved = resolver.resolve(fetched, product.pricing)
            if resolved:
                snapshot.products[product_id] = replace(product, pricing=resolved)

        addon_pricing = await self._fetch_pricing(
            "addon",
            "product/addon_get",
            list(snapshot.addons),
            table.codes,
        )
        for addon_id, fetched in addon_pricing.items():
            addon = snapshot.addons[addon_id]
            resolved = resolver.resolve(fetched, addon.pricing)
            if resolved:
                snapshot.addons[addon_id] = replace(addon, pricing=resolved)

    async def _fetch_pricing(
        self,
        kind: str,
        method: str,
        entity_ids: list[str],
        codes: Sequence[str],
    ) -> dict[str, dict[str, PricingModel]]:
        """
        Fetch every entity's detail once per currency.

        Returns:
            Entity id -> currency code -> picked model.
        """
        async def fetch(pair: tuple[str, str]) -> Any:
            entity_id, code = pair
            return await self._api.call_with_fallback(ADMIN_SCOPE, [method], {"id": entity_id, "currency": code})

        pairs = [(entity_id, code) for entity_id in entity_ids for code in codes]
        fetched: dict[str, dict[str, PricingModel]] = {entity_id: {} for entity_id in entity_ids}

        for (entity_id, code), details, error in await self._bounded(pairs, fetch):
            if error is not None:
                self._warn("pricing", f"{kind}_{entity_id}_pricing_{code}", error)
                continue
            if not isinstance(details, dict):
                continue
            picked = pick_model_for_currency(normalize_pricing(pick_first(details, ("pricing",), {})), code)
            if picked is not None:
                fetched[entity_id][code] = picked

        return fetched

    async def _collect_gateways(self, input_dto: BuildCatalogInput) -> dict[str, Gateway]:
        gateways: dict[str, Gateway] = {}

        try:
            rows = await self._paginated(input_dto, ADMIN_SCOPE, "invoice/gateway_get_list")
            self._add_gateways(gateways, rows)
        except ApiError as error:
            self._warn("gateways", "gateway_list", error)

        if not gateways:
            try:
                pairs = await self._api.call_with_fallback(ADMIN_SCOPE, ["invoice/gateway_get_pairs"], {})
                for gateway_id, title in flatten_pairs(pairs).items():
                    gateways[gateway_id] = Gateway(id=gateway_id, title=title)
            except ApiError as error:
                self._warn("gateways", "gateway_pairs", error)

        if not gateways:
            try:
                result = await self._api.call_with_fallback(GUEST_SCOPE, ["invoice/gateways"], {})
                self._add_gateways(gateways, as_list(result))
            except ApiError as error:
                self._warn("gateways", "guest_gateways", error)

        return gateways

    def _add_gateways(self, gateways: dict[str, Gateway], rows: list[Any]) -> None:
        for index, row in enumerate(rows, start=1):
            if not isinstance(row, dict):
                continue
            gateway = normalize_gateway(row)
            gateway_id = gateway.id or gateway.code or f"gateway_{index}"
            gateways[gateway_id] = replace(gateway, id=gateway_id)
