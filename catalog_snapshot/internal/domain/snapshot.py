"""
Catalog snapshot aggregate.

Everything collected from the billing platform during one run, before the
public sanitizer and assembler reduce it to the published document.
"""
from dataclasses import dataclass, field

from .billing import Branding, Currency, DomainTld, Gateway
from .catalog import Addon, Category, HostingPlan, Product


@dataclass
class CatalogSnapshot:
    """
    Collected catalog state keyed by canonical id.

    Attributes:
        branding: Company and theme information.
        categories: Categories by id.
        products: Products by id, in upstream listing order.
        addons: Addons by id.
        hosting_plans: Hosting plans by id.
        currencies: Currencies by code, in upstream order.
        default_currency_code: Code reported by ``currency/get_default``.
        domains: Enabled TLDs by lowercased TLD.
        gateways: Payment gateways by id.
        domain_registration_slug: Slug of the domain registration product.
    """
    branding: Branding = field(default_factory=Branding)
    categories: dict[str, Category] = field(default_factory=dict)
    products: dict[str, Product] = field(default_factory=dict)
    addons: dict[str, Addon] = field(default_factory=dict)
    hosting_plans: dict[str, HostingPlan] = field(default_factory=dict)
    currencies: dict[str, Currency] = field(default_factory=dict)
    default_currency_code: str = ""
    domains: dict[str, DomainTld] = field(default_factory=dict)
    gateways: dict[str, Gateway] = field(default_factory=dict)
    domain_registration_slug: str = ""
