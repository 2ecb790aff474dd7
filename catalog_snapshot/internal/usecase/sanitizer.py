"""
Public Sanitizer.

Decides what may be published and reduces entities to their minimal
public shape. Raw configuration, gateway settings and hidden records never
leave this module.
"""
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from catalog_snapshot.internal.domain.billing import Gateway
from catalog_snapshot.internal.domain.catalog import Addon, Category, Product
from catalog_snapshot.internal.domain.value_objects import (
    DEFAULT_PRICING_KEY,
    Feature,
    PricingEntry,
    PricingModel,
)
from catalog_snapshot.internal.transport.document.dto import (
    AddonDTO,
    CategoryDTO,
    FeatureDTO,
    GatewayDTO,
    PricingEntryDTO,
    PricingModelDTO,
    ProductDTO,
)
from catalog_snapshot.internal.usecase.normalizers.fields import lower_text, normalize_text, scalar_text


NON_PUBLIC_STATUS_TOKENS = (
    "disabled", "disable", "hidden", "inactive", "draft", "private", "internal",
    "archived", "deleted", "closed", "off",
)
PUBLIC_STATUS_TOKENS = ("active", "enabled", "public", "visible", "live", "on")

DOMAIN_PRODUCT_TYPES = frozenset({"domain", "tld"})

# Limitation key substring -> feature key, first match wins.
FEATURE_KEY_MAP = (
    ("addon", "addon_domains"),
    ("addons", "addon_domains"),
    ("database", "databases"),
    ("databases", "databases"),
    ("db", "databases"),
    ("email", "email_accounts"),
    ("email_accounts", "email_accounts"),
    ("mailbox", "email_accounts"),
    ("ftp", "ftp_accounts"),
    ("ftp_accounts", "ftp_accounts"),
    ("cron", "cron_jobs"),
    ("cron_jobs", "cron_jobs"),
    ("subdomain", "subdomains"),
    ("subdomains", "subdomains"),
    ("disk", "disk"),
    ("inode", "inodes"),
    ("bandwidth", "bandwidth"),
    ("traffic", "bandwidth"),
    ("websites", "websites"),
    ("ram", "ram"),
    ("cpu", "cpu_cores"),
)

FEATURE_ORDER = (
    "disk", "bandwidth", "addon_domains", "databases", "email_accounts", "ftp_accounts",
    "subdomains", "cron_jobs", "inodes", "websites", "ram", "cpu_cores",
)

# Public addon limitation key -> limitation key substrings.
ADDON_LIMITATION_MAP = (
    ("addons", ("addon",)),
    ("databases", ("database", "db")),
    ("domains", ("domain",)),
    ("subdomains", ("subdomain",)),
    ("email_accounts", ("email", "mailbox")),
    ("ftp_accounts", ("ftp",)),
    ("cron_jobs", ("cron",)),
    ("disk", ("disk",)),
    ("inodes", ("inode",)),
    ("bandwidth", ("bandwidth", "traffic")),
    ("ram", ("ram", "memory")),
    ("cpu", ("cpu",)),
    ("websites", ("site", "website")),
    ("accounts", ("account",)),
)

UNLIMITED_WORDS = frozenset({"unlimited", "unmetered", "infinite"})
NUMERIC_TEXT = re.compile(r"^-?\d+(\.\d+)?$")


# ============================================================================
# VISIBILITY
# ============================================================================

def status_is_public(status: Any, default: bool = True) -> bool:
    """
    Classify an upstream status text.

    Non-public tokens are checked before public ones, so ``inactive`` is
    not mistaken for ``active``.

    Args:
        status: Raw status.
        default: Result for empty or unrecognized statuses.
    """
    value = lower_text(status)
    if value == "":
        return default
    if any(token in value for token in NON_PUBLIC_STATUS_TOKENS):
        return False
    if any(token in value for token in PUBLIC_STATUS_TOKENS):
        return True
    return default


def text_contains_any(values: Iterable[Any], patterns: Sequence[str]) -> bool:
    """Return True if any pattern occurs in the joined, lowercased values."""
    if not patterns:
        return False
    haystack = " ".join(normalize_text(value) for value in values).lower()
    if haystack.strip() == "":
        return False
    for pattern in patterns:
        needle = str(pattern).strip().lower()
        if needle and needle in haystack:
            return True
    return False


def is_public_product(product: Product, exclude_patterns: Sequence[str]) -> bool:
    """
    Decide whether a product may be published.

    Hidden products, non-public statuses, untitled products, domain
    products and anything matching an exclude pattern are rejected.
    """
    if product.hidden:
        return False
    if not status_is_public(product.status, True):
        return False
    if normalize_text(product.title) == "":
        return False
    if lower_text(product.type) in DOMAIN_PRODUCT_TYPES:
        return False
    return not text_contains_any(
        (
            product.type,
            product.slug,
            product.title,
            product.description,
            product.category_title,
        ),
        exclude_patterns,
    )


def is_public_addon(addon: Addon, exclude_patterns: Sequence[str]) -> bool:
    """Decide whether an addon may be published."""
    if not status_is_public(addon.status, True):
        return False
    if normalize_text(addon.title) == "":
        return False
    return not text_contains_any(
        (addon.type, addon.slug, addon.title, addon.description),
        exclude_patterns,
    )


def is_domain_registration_product(product: Product) -> bool:
    """Public product of type ``domain``/``tld``."""
    return lower_text(product.type) in DOMAIN_PRODUCT_TYPES and status_is_public(product.status, True)


# ============================================================================
# FEATURES AND LIMITATIONS
# ============================================================================

def _is_unset_feature_value(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return True
    if isinstance(value, (int, float)):
        return value == 0 or value == -1
    return value in ("", "0")


def features_from_limitations(limitations: Mapping[str, Any]) -> list[Feature]:
    """
    Map limitations to ordered public features.

    Zero, empty, boolean and ``-1`` values are dropped. Features follow a
    fixed display priority; unrecognized keys keep discovery order after it.
    """
    grouped: dict[str, list[Feature]] = {}
    for key, value in limitations.items():
        if _is_unset_feature_value(value):
            continue
        lowered = str(key).lower()
        for needle, feature_key in FEATURE_KEY_MAP:
            if needle in lowered:
                grouped.setdefault(feature_key, []).append(Feature(key=feature_key, value=scalar_text(value)))
                break

    ordered: list[Feature] = []
    for feature_key in FEATURE_ORDER:
        ordered.extend(grouped.get(feature_key, []))
    for feature_key, features in grouped.items():
        if feature_key not in FEATURE_ORDER:
            ordered.extend(features)
    return ordered


def _public_limitation_value(value: Any) -> Optional[Any]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return scalar_text(value)
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if NUMERIC_TEXT.match(trimmed) or trimmed.lower() in UNLIMITED_WORDS:
        return trimmed
    return None


def sanitize_limitations_for_public(limitations: Mapping[str, Any]) -> dict[str, Any]:
    """
    Reduce addon limitations to a public vocabulary.

    Each public key takes the first limitation whose key contains one of its
    substrings. Only booleans, numbers, numeric strings and "unlimited"
    words are published.
    """
    public: dict[str, Any] = {}
    for key, value in limitations.items():
        lowered = str(key).lower()
        for public_key, needles in ADDON_LIMITATION_MAP:
            if public_key in public:
                continue
            if not any(needle in lowered for needle in needles):
                continue
            public_value = _public_limitation_value(value)
            if public_value is not None:
                public[public_key] = public_value
            break
    return public


# ============================================================================
# PRICING
# ============================================================================

def _public_entry(entry: Optional[PricingEntry]) -> Optional[PricingEntry]:
    if entry is None:
        return None
    price = normalize_text(entry.price)
    setup = normalize_text(entry.setup)
    if price == "":
        if not entry.enabled:
            return None
        price = "0"
    return PricingEntry(price=price, setup=setup or "0", enabled=entry.enabled)


def sanitize_pricing_model(model: PricingModel) -> Optional[PricingModel]:
    """
    Reduce one pricing model to its public form.

    Returns:
        The model with defaults filled and disabled periods dropped, or None
        when nothing orderable is left.
    """
    free = _public_entry(model.free)
    if free is not None:
        free = PricingEntry(price=free.price, setup=free.setup, enabled=True)

    recurrent: dict[str, PricingEntry] = {}
    for period, entry in model.recurrent.items():
        public_entry = _public_entry(entry)
        if public_entry is None or not public_entry.enabled:
            continue
        recurrent[str(period).upper()] = public_entry

    public = PricingModel(
        type=normalize_text(model.type),
        free=free,
        once=_public_entry(model.once),
        recurrent=recurrent,
    )
    public.recurrent = public.sorted_recurrent()

    if public.type == "":
        if public.recurrent:
            public.type = "recurrent"
        elif public.once is not None:
            public.type = "once"

    if public.is_empty():
        return None
    return public


def sanitize_pricing_for_public(
    pricing: Mapping[str, PricingModel],
    enabled_codes: Iterable[str],
) -> dict[str, PricingModel]:
    """
    Restrict pricing to enabled currencies.

    When no currency-specific model matches, the ``__DEFAULT`` model is
    broadcast to every enabled currency. Applying the function to its own
    output with the same currencies returns the same value.

    Args:
        pricing: Currency code (or ``__DEFAULT``) -> model.
        enabled_codes: Enabled currency codes.

    Returns:
        Currency code -> public model, sorted by code.
    """
    enabled = [code.upper() for code in enabled_codes]
    enabled_set = set(enabled)

    public: dict[str, PricingModel] = {}
    default_model: Optional[PricingModel] = None
    for currency, model in pricing.items():
        code = str(currency).upper()
        if code == DEFAULT_PRICING_KEY:
            default_model = sanitize_pricing_model(model)
            continue
        if code not in enabled_set:
            continue
        sanitized = sanitize_pricing_model(model)
        if sanitized is not None:
            public[code] = sanitized

    if not public and default_model is not None:
        for code in enabled:
            public[code] = default_model

    return {code: public[code] for code in sorted(public)}


# ============================================================================
# PUBLIC SHAPES
# ============================================================================

def _entry_dto(entry: Optional[PricingEntry]) -> Optional[PricingEntryDTO]:
    if entry is None:
        return None
    return PricingEntryDTO(price=entry.price, setup=entry.setup, enabled=entry.enabled)


def pricing_to_dto(pricing: Mapping[str, PricingModel]) -> dict[str, PricingModelDTO]:
    """Convert public pricing to document DTOs."""
    return {
        code: PricingModelDTO(
            type=model.type,
            free=_entry_dto(model.free),
            once=_entry_dto(model.once),
            recurrent={period: _entry_dto(entry) for period, entry in model.sorted_recurrent().items()},
        )
        for code, model in pricing.items()
    }


def sanitize_product(
    product: Product,
    enabled_codes: Sequence[str],
    public_addon_ids: Iterable[str] = (),
) -> ProductDTO:
    """
    Build the public shape of a product.

    Args:
        product: Public product.
        enabled_codes: Enabled currency codes.
        public_addon_ids: Ids of published addons; other references drop.
    """
    published_addons = set(public_addon_ids)
    addon_ids: list[str] = []
    for addon_id in product.addons:
        if addon_id in published_addons and addon_id not in addon_ids:
            addon_ids.append(addon_id)

    return ProductDTO(
        id=product.id,
        title=normalize_text(product.title),
        description=normalize_text(product.description),
        slug=normalize_text(product.slug),
        type=normalize_text(product.type),
        order_url=normalize_text(product.order_url),
        icon_url=normalize_text(product.icon_url),
        category_id=product.category_id,
        category_title=normalize_text(product.category_title),
        pricing=pricing_to_dto(sanitize_pricing_for_public(product.pricing, enabled_codes)),
        features=[
            FeatureDTO(key=feature.key, value=feature.value)
            for feature in features_from_limitations(product.limitations)
        ],
        addons=addon_ids,
    )


def sanitize_addon(addon: Addon, enabled_codes: Sequence[str]) -> AddonDTO:
    """Build the public shape of an addon."""
    return AddonDTO(
        id=addon.id,
        title=normalize_text(addon.title),
        description=normalize_text(addon.description),
        slug=normalize_text(addon.slug),
        order_url=normalize_text(addon.order_url),
        icon_url=normalize_text(addon.icon_url),
        pricing=pricing_to_dto(sanitize_pricing_for_public(addon.pricing, enabled_codes)),
        limitations=sanitize_limitations_for_public(addon.limitations),
    )


def sanitize_category(category: Category, public_product_ids: Iterable[str]) -> Optional[CategoryDTO]:
    """
    Build the public shape of a category.

    Returns:
        None when the category lists no published product.
    """
    published = set(public_product_ids)
    product_ids: list[str] = []
    for product_id in category.products:
        if product_id in published and product_id not in product_ids:
            product_ids.append(product_id)
    if not product_ids:
        return None

    return CategoryDTO(
        id=category.id,
        title=normalize_text(category.title),
        slug=normalize_text(category.slug),
        description=normalize_text(category.description),
        icon_url=normalize_text(category.icon_url),
        products=product_ids,
    )


def sanitize_gateway(gateway: Gateway, enabled_codes: Iterable[str]) -> Optional[GatewayDTO]:
    """
    Build the public shape of a gateway.

    Returns:
        None for disabled gateways. Accepted currencies are limited to the
        enabled set; the gateway config is dropped.
    """
    if not gateway.enabled:
        return None

    enabled_set = {code.upper() for code in enabled_codes}
    accepted: list[str] = []
    for code in gateway.accepted_currencies:
        code = normalize_text(code).upper()
        if code in enabled_set and code not in accepted:
            accepted.append(code)

    return GatewayDTO(
        id=gateway.id,
        code=normalize_text(gateway.code),
        title=normalize_text(gateway.title),
        allow_single=gateway.allow_single,
        allow_recurrent=gateway.allow_recurrent,
        accepted_currencies=accepted,
    )
