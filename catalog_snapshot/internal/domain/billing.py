"""
Domain model for billing reference data: currencies, payment gateways,
domain TLDs and company branding.
"""
from dataclasses import dataclass, field
from typing import Any

from .value_objects import DomainPricing


@dataclass
class Currency:
    """
    Currency configured on the billing platform.

    Attributes:
        code: Uppercase currency code, unique key.
        title: Display title.
        sign: Currency sign.
        format: Display format pattern.
        conversion_rate: Rate against the platform default, as reported.
        price_decimals: Price precision, clamped to 0..6.
        enabled: Whether the currency is offered.
        is_default: Whether the platform marks it as default.
    """
    code: str
    title: str = ""
    sign: str = ""
    format: str = ""
    conversion_rate: str = ""
    price_decimals: int = 2
    enabled: bool = True
    is_default: bool = False


@dataclass
class Gateway:
    """
    Payment gateway.

    Attributes:
        id: Gateway identifier.
        code: Gateway module code.
        title: Display title.
        enabled: Whether the gateway is active.
        allow_single: Supports one-time payments.
        allow_recurrent: Supports subscriptions.
        accepted_currencies: Weak references to Currency codes.
        config: Raw gateway configuration, never published.
    """
    id: str
    code: str = ""
    title: str = ""
    enabled: bool = True
    allow_single: bool = True
    allow_recurrent: bool = True
    accepted_currencies: list[str] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class DomainTld:
    """
    Domain TLD offered for registration.

    Attributes:
        id: TLD identifier.
        tld: TLD string such as ``.com``.
        enabled: Whether the TLD is sold.
        allow_register: Registration allowed.
        allow_transfer: Transfer allowed.
        min_years: Minimum registration period.
        pricing: Prices in the platform default currency.
    """
    id: str
    tld: str = ""
    enabled: bool = True
    allow_register: bool = True
    allow_transfer: bool = True
    min_years: str = "1"
    pricing: DomainPricing = field(default_factory=DomainPricing)

    @property
    def key(self) -> str:
        """Lowercased TLD used as collection key."""
        return self.tld.lower()


@dataclass
class Branding:
    """Company and theme information shown by the storefront."""
    company: dict[str, str] = field(default_factory=dict)
    motto: str = ""
    brand_mark: str = ""
    clientarea_url: str = ""
    theme: dict[str, str] = field(default_factory=dict)
    assets: dict[str, str] = field(default_factory=dict)
    footer_content: str = ""
