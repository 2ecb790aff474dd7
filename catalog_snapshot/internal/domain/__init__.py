"""
Domain package for the catalog generator.

Contains domain entities, value objects, and domain errors.
"""
from .catalog import Addon, Category, HostingPlan, Product
from .billing import Branding, Currency, DomainTld, Gateway
from .run import CallRecord, RunContext
from .snapshot import CatalogSnapshot
from .value_objects import (
    DEFAULT_PRICING_KEY,
    PERIOD_ORDER,
    DomainPricing,
    Feature,
    HostingPlanRef,
    PricingEntry,
    PricingModel,
    period_sort_key,
)
from .errors import (
    CatalogError,
    ApiError,
    TransportError,
    ProtocolError,
    ApplicationError,
    ExhaustedFallbackError,
    ConfigError,
    PublishError,
)

__all__ = [
    "Addon",
    "Category",
    "HostingPlan",
    "Product",
    "Branding",
    "Currency",
    "DomainTld",
    "Gateway",
    "CallRecord",
    "RunContext",
    "CatalogSnapshot",
    "DEFAULT_PRICING_KEY",
    "PERIOD_ORDER",
    "DomainPricing",
    "Feature",
    "HostingPlanRef",
    "PricingEntry",
    "PricingModel",
    "period_sort_key",
    # Errors
    "CatalogError",
    "ApiError",
    "TransportError",
    "ProtocolError",
    "ApplicationError",
    "ExhaustedFallbackError",
    "ConfigError",
    "PublishError",
]
