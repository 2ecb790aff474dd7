"""
Published catalog document schema.
"""
from .dto import (
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
    FeatureDTO,
    GatewayDTO,
    MetaDTO,
    PricingEntryDTO,
    PricingModelDTO,
    ProductDTO,
    ThemeDTO,
)

__all__ = [
    "AddonDTO",
    "AssetsDTO",
    "BrandingDTO",
    "CatalogDocument",
    "CategoryDTO",
    "CompanyDTO",
    "CountsDTO",
    "CurrencyDTO",
    "CurrencyRatesDTO",
    "DomainDTO",
    "DomainPricingDTO",
    "FeatureDTO",
    "GatewayDTO",
    "MetaDTO",
    "PricingEntryDTO",
    "PricingModelDTO",
    "ProductDTO",
    "ThemeDTO",
]
