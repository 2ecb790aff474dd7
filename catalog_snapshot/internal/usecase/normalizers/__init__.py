"""
Shape normalizers for billing API records.
"""
from .fields import (
    as_mapping,
    bool_like,
    flatten_pairs,
    format_decimal,
    id_text,
    is_present,
    lower_text,
    normalize_text,
    pick_first,
    to_decimal,
)
from .limitations import extract_limitations, flatten_config, hosting_plan_limitations
from .entities import (
    build_order_url,
    normalize_addon,
    normalize_category,
    normalize_currency,
    normalize_domain_tld,
    normalize_gateway,
    normalize_hosting_plan,
    normalize_product,
)
from .pricing import (
    clamp_decimals,
    is_pricing_model,
    normalize_period,
    normalize_pricing,
    pick_model_for_currency,
)
from .branding import normalize_branding, theme_code

__all__ = [
    "as_mapping",
    "bool_like",
    "flatten_pairs",
    "format_decimal",
    "id_text",
    "is_present",
    "lower_text",
    "normalize_text",
    "pick_first",
    "to_decimal",
    "extract_limitations",
    "flatten_config",
    "hosting_plan_limitations",
    "build_order_url",
    "normalize_addon",
    "normalize_category",
    "normalize_currency",
    "normalize_domain_tld",
    "normalize_gateway",
    "normalize_hosting_plan",
    "normalize_product",
    "clamp_decimals",
    "is_pricing_model",
    "normalize_period",
    "normalize_pricing",
    "pick_model_for_currency",
    "normalize_branding",
    "theme_code",
]
