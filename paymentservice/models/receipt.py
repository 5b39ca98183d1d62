"""
Receipt domain models - Immutable dataclasses reported by the payment provider.

NO DICTIONARIES - All data uses strongly typed models.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class ItemState(IntEnum):
    """State of a digital good as reported on its receipt."""

    UNKNOWN = 0
    OWNED = 1
    SUBSCRIBED = 2
    CANCELLED = 3


@dataclass(frozen=True)
class PurchaseReceipt:
    """The provider's record of a single purchase transaction."""

    purchase_date: datetime
    digital_good_id: str
    digital_good_sku: str
    purchase_id: str
    license_key: str
    purchase_metadata: str
    item_state: ItemState
    is_subscription: bool

    # Subscription fields; dates are absent for one-time goods
    start_date: datetime | None = None
    end_date: datetime | None = None
    initial_period: int = 0

    def is_active_subscription(self) -> bool:
        """Check if this receipt grants a live subscription."""
        return self.is_subscription and self.item_state != ItemState.CANCELLED


@dataclass(frozen=True)
class SubscriptionTerms:
    """Subscription pricing as quoted by the provider (display strings)."""

    price: str
    initial_period: str
    renewal_price: str
    renewal_period: str
