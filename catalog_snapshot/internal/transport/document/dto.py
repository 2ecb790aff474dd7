"""
Data Transfer Objects for the published catalog document.

Contains Pydantic models describing the public JSON document consumed by
the static storefront. Nothing here carries configuration or secrets.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Pricing DTOs
class PricingEntryDTO(BaseModel):
    """Price of one billing period."""

    price: Optional[str] = Field(None, description="Price as decimal string")
    setup: Optional[str] = Field(None, description="Setup fee as decimal string")
    enabled: bool = Field(True, description="Whether the period can be ordered")


class PricingModelDTO(BaseModel):
    """Pricing of one entity in one currency."""

    type: str = Field("", description="once, recurrent or empty")
    free: Optional[PricingEntryDTO] = Field(None, description="Free product entry")
    once: Optional[PricingEntryDTO] = Field(None, description="One-time payment entry")
    recurrent: Dict[str, PricingEntryDTO] = Field(
        default_factory=dict, description="Period code -> entry"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "recurrent",
                "free": None,
                "once": None,
                "recurrent": {"1M": {"price": "10.00", "setup": "0", "enabled": True}},
            }
        }
    )


# Catalog DTOs
class FeatureDTO(BaseModel):
    """Public product feature."""

    key: str = Field(..., description="Standardized feature key")
    value: str = Field(..., description="Feature value as reported upstream")

    model_config = ConfigDict(json_schema_extra={"example": {"key": "disk", "value": "10240"}})


class CategoryDTO(BaseModel):
    """Category with the ids of its published products."""

    id: str = Field(..., description="Category ID")
    title: str = Field("", description="Category title")
    slug: str = Field("", description="URL slug")
    description: str = Field("", description="Category description")
    icon_url: str = Field("", description="Icon URL")
    products: List[str] = Field(default_factory=list, description="Published product IDs")


class ProductDTO(BaseModel):
    """Published product."""

    id: str = Field(..., description="Product ID")
    title: str = Field(..., description="Product title")
    description: str = Field("", description="Product description")
    slug: str = Field("", description="URL slug")
    type: str = Field("", description="Product type")
    order_url: str = Field("", description="Order form URL")
    icon_url: str = Field("", description="Icon URL")
    category_id: str = Field("", description="Category ID")
    category_title: str = Field("", description="Category title")
    pricing: Dict[str, PricingModelDTO] = Field(
        default_factory=dict, description="Currency code -> pricing"
    )
    features: List[FeatureDTO] = Field(default_factory=list, description="Ordered features")
    addons: List[str] = Field(default_factory=list, description="Published addon IDs")


class AddonDTO(BaseModel):
    """Published product addon."""

    id: str = Field(..., description="Addon ID")
    title: str = Field(..., description="Addon title")
    description: str = Field("", description="Addon description")
    slug: str = Field("", description="URL slug")
    order_url: str = Field("", description="Order form URL")
    icon_url: str = Field("", description="Icon URL")
    pricing: Dict[str, PricingModelDTO] = Field(
        default_factory=dict, description="Currency code -> pricing"
    )
    limitations: Dict[str, Union[bool, str]] = Field(
        default_factory=dict, description="Public limitation key -> value"
    )


# Billing DTOs
class CurrencyDTO(BaseModel):
    """Published currency."""

    code: str = Field(..., description="Currency code")
    title: str = Field("", description="Currency title")
    sign: str = Field("", description="Currency sign")
    format: str = Field("", description="Display format")
    conversion_rate: str = Field("", description="Rate against the base currency")
    is_default: bool = Field(False, description="Rate base currency")


class DomainPricingDTO(BaseModel):
    """TLD prices in one currency."""

    register: str = Field("", description="Registration price")
    renew: str = Field("", description="Renewal price")
    transfer: str = Field("", description="Transfer price")


class DomainDTO(BaseModel):
    """Published domain TLD."""

    id: str = Field("", description="TLD ID")
    tld: str = Field(..., description="TLD such as .com")
    enabled: bool = Field(True, description="Whether the TLD is sold")
    allow_register: bool = Field(True, description="Registration allowed")
    allow_transfer: bool = Field(True, description="Transfer allowed")
    min_years: str = Field("1", description="Minimum registration years")
    pricing: Dict[str, DomainPricingDTO] = Field(
        default_factory=dict, description="Currency code -> prices"
    )


class GatewayDTO(BaseModel):
    """Published payment gateway. Gateway configuration is never exposed."""

    id: str = Field(..., description="Gateway ID")
    code: str = Field("", description="Gateway module code")
    title: str = Field("", description="Gateway title")
    allow_single: bool = Field(True, description="Supports one-time payments")
    allow_recurrent: bool = Field(True, description="Supports subscriptions")
    accepted_currencies: List[str] = Field(
        default_factory=list, description="Enabled currency codes the gateway accepts"
    )


class CurrencyRatesDTO(BaseModel):
    """Conversion rates between enabled currencies."""

    base_currency: str = Field("", description="Rate base currency code")
    rates_to_base: Dict[str, str] = Field(default_factory=dict, description="Code -> rate")
    relations: Dict[str, Dict[str, str]] = Field(
        default_factory=dict, description="relations[from][to] = rate(to) / rate(from)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "base_currency": "USD",
                "rates_to_base": {"EUR": "0.9", "USD": "1"},
                "relations": {
                    "EUR": {"EUR": "1", "USD": "1.11111111"},
                    "USD": {"EUR": "0.9", "USD": "1"},
                },
            }
        }
    )


# Branding DTOs
class CompanyDTO(BaseModel):
    """Public company profile."""

    name: str = ""
    email: str = ""
    phone: str = ""
    www: str = ""
    address: str = ""
    city: str = ""
    country: str = ""


class ThemeDTO(BaseModel):
    """Active client area theme."""

    name: str = ""
    code: str = ""
    version: str = ""
    url: str = ""


class AssetsDTO(BaseModel):
    """Resolved storefront asset URLs."""

    logo_url: str = ""
    logo_dark_url: str = ""
    favicon_url: str = ""
    header_bg_url: str = ""
    footer_bg_url: str = ""


class BrandingDTO(BaseModel):
    """Storefront branding block."""

    company: CompanyDTO = Field(default_factory=CompanyDTO)
    motto: str = ""
    brand_mark: str = ""
    clientarea_url: str = ""
    theme: ThemeDTO = Field(default_factory=ThemeDTO)
    assets: AssetsDTO = Field(default_factory=AssetsDTO)
    footer_content: str = ""


# Document DTOs
class CountsDTO(BaseModel):
    """Number of published entities per collection."""

    categories: int = 0
    products: int = 0
    addons: int = 0
    currencies: int = 0
    domains: int = 0
    gateways: int = 0


class MetaDTO(BaseModel):
    """Document metadata."""

    generated_at: str = Field(..., description="Generation time, ISO 8601 UTC")
    generator: str = Field(..., description="Generator name")
    public_site_url: str = ""
    billing_base_url: str = ""
    default_currency: str = ""
    custom_assets: Optional[Dict[str, str]] = Field(
        None, description="Asset overrides from the environment"
    )
    counts: CountsDTO = Field(default_factory=CountsDTO)


class CatalogDocument(BaseModel):
    """The published catalog snapshot."""

    meta: MetaDTO
    branding: BrandingDTO = Field(default_factory=BrandingDTO)
    categories: List[CategoryDTO] = Field(default_factory=list)
    products: List[ProductDTO] = Field(default_factory=list)
    addons: List[AddonDTO] = Field(default_factory=list)
    currencies: List[CurrencyDTO] = Field(default_factory=list)
    domains: List[DomainDTO] = Field(default_factory=list)
    currency_rates: CurrencyRatesDTO = Field(default_factory=CurrencyRatesDTO)
    gateways: List[GatewayDTO] = Field(default_factory=list)
    domain_registration_slug: str = ""
