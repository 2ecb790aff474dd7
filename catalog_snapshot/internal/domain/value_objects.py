"""
Value Objects for the catalog domain.

Value objects are defined by their attributes. Pricing models compare
structurally: two models with the same periods are equal regardless of the
order the upstream listed them in.
"""
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_PRICING_KEY = "__DEFAULT"

# Canonical billing period codes, shortest first.
PERIOD_ORDER = ("1W", "2W", "1M", "3M", "6M", "1Y", "2Y", "3Y")


def period_sort_key(code: str) -> tuple[int, str]:
    """
    Sort key placing canonical periods first, unknown codes after them.

    Args:
        code: Period code such as ``1M``.

    Returns:
        Tuple usable as a ``sorted`` key.
    """
    try:
        return PERIOD_ORDER.index(code), code
    except ValueError:
        return len(PERIOD_ORDER), code


@dataclass(frozen=True)
class PricingEntry:
    """
    Price of one billing period.

    Attributes:
        price: Decimal string or None when the upstream omitted it.
        setup: Setup fee as decimal string or None.
        enabled: Whether the period can be ordered.
    """
    price: Optional[str] = None
    setup: Optional[str] = None
    enabled: bool = True


@dataclass
class PricingModel:
    """
    Canonical pricing of one entity in one currency.

    Attributes:
        type: ``once``, ``recurrent`` or empty when unknown.
        free: Entry for free products.
        once: Entry for one-time payment.
        recurrent: Period code -> entry.
    """
    type: str = ""
    free: Optional[PricingEntry] = None
    once: Optional[PricingEntry] = None
    recurrent: dict[str, PricingEntry] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Return True when the model carries no price at all."""
        return self.free is None and self.once is None and not self.recurrent

    def sorted_recurrent(self) -> dict[str, PricingEntry]:
        """Return recurring entries ordered by canonical period."""
        return {
            code: self.recurrent[code]
            for code in sorted(self.recurrent, key=period_sort_key)
        }


@dataclass(frozen=True)
class Feature:
    """
    Public feature derived from a limitation.

    Attributes:
        key: Standardized feature key (e.g. ``disk``, ``databases``).
        value: Display value as reported upstream.
    """
    key: str
    value: str


@dataclass(frozen=True)
class HostingPlanRef:
    """Weak reference from a product to a hosting plan."""
    id: str
    name: str = ""


@dataclass(frozen=True)
class DomainPricing:
    """Register/renew/transfer prices of a TLD in one currency."""
    register: str = ""
    renew: str = ""
    transfer: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "register": self.register,
            "renew": self.renew,
            "transfer": self.transfer,
        }
