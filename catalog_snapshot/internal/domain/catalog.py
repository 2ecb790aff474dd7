"""
Domain model for the product catalog.

Categories, products, addons and hosting plans as they exist after
normalization. Relations between them are weak references by id.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from .value_objects import HostingPlanRef, PricingModel


Limitations = dict[str, Any]
PricingByCurrency = dict[str, PricingModel]


@dataclass
class Category:
    """
    Product category.

    Attributes:
        id: Category identifier.
        title: Display title.
        slug: URL-friendly identifier.
        description: Free-form description.
        icon_url: Category icon.
        products: Ids of products in this category, in discovery order.
    """
    id: str
    title: str = ""
    slug: str = ""
    description: str = ""
    icon_url: str = ""
    products: list[str] = field(default_factory=list)


@dataclass
class Product:
    """
    Product as reported by the billing platform.

    Attributes:
        id: Product identifier.
        title: Display title.
        description: Free-form description.
        type: Product type (hosting, domain, custom, ...).
        status: Raw upstream status text.
        slug: URL-friendly identifier.
        order_url: Link to the order form.
        category_id: Weak reference to a Category.
        icon_url: Product icon.
        hidden: Whether the product is hidden from the storefront.
        setup: Upstream activation mode.
        stock_control: Whether stock is tracked.
        quantity_in_stock: Remaining stock as text.
        allow_quantity_select: Whether quantity can be chosen.
        pricing: Currency code (or ``__DEFAULT``) -> pricing model.
        addons: Weak references to Addon ids.
        upgrades: Raw upgrade references.
        config: Raw product configuration.
        limitations: Quota-like values extracted from ``config``.
        hosting_plan: Attached hosting plan, if any.
        category_title: Title of the owning category, filled on enrichment.
    """
    id: str
    title: str = ""
    description: str = ""
    type: str = ""
    status: str = ""
    slug: str = ""
    order_url: str = ""
    category_id: str = ""
    icon_url: str = ""
    hidden: bool = False
    setup: str = ""
    stock_control: bool = False
    quantity_in_stock: str = ""
    allow_quantity_select: bool = False
    pricing: PricingByCurrency = field(default_factory=dict)
    addons: list[str] = field(default_factory=list)
    upgrades: Any = None
    config: dict[str, Any] = field(default_factory=dict)
    limitations: Limitations = field(default_factory=dict)
    hosting_plan: Optional[HostingPlanRef] = None
    category_title: str = ""


@dataclass
class Addon:
    """
    Product addon. The platform models addons as products, so the same
    normalizer produces both; only the fields below are kept.
    """
    id: str
    title: str = ""
    description: str = ""
    type: str = ""
    status: str = ""
    slug: str = ""
    order_url: str = ""
    icon_url: str = ""
    pricing: PricingByCurrency = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)
    limitations: Limitations = field(default_factory=dict)


@dataclass
class HostingPlan:
    """
    Hosting plan referenced by hosting products.

    Attributes:
        id: Plan identifier.
        name: Plan name, matched case-insensitively by products.
        status: Raw upstream status.
        config: Raw plan configuration.
        limitations: Promoted top-level quotas merged with config quotas.
    """
    id: str
    name: str = ""
    status: str = ""
    config: dict[str, Any] = field(default_factory=dict)
    limitations: Limitations = field(default_factory=dict)

    def ref(self) -> HostingPlanRef:
        """Build a weak reference to this plan."""
        return HostingPlanRef(id=self.id, name=self.name)
