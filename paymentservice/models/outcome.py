"""
Request outcome models.

Every issued request resolves to exactly one Outcome. Errors share a single
variant regardless of request kind.
"""

from dataclasses import dataclass
from enum import Enum

from paymentservice.models.receipt import SubscriptionTerms


class RequestKind(str, Enum):
    """The six request types the gateway can issue."""

    PURCHASE = "purchase"
    EXISTING_PURCHASES = "existing_purchases"
    PRICE = "price"
    SUBSCRIPTION_TERMS = "subscription_terms"
    SUBSCRIPTION_STATUS = "subscription_status"
    CANCEL_SUBSCRIPTION = "cancel_subscription"


@dataclass(frozen=True)
class RequestFailed:
    """Provider-reported error, forwarded verbatim."""

    code: int
    text: str
    kind: RequestKind


@dataclass(frozen=True)
class RequestSucceeded:
    """
    Successful completion.

    Payload by kind:
    - PURCHASE, EXISTING_PURCHASES: formatted receipt text
    - PRICE: price string
    - SUBSCRIPTION_TERMS: SubscriptionTerms
    - SUBSCRIPTION_STATUS: bool (active?)
    - CANCEL_SUBSCRIPTION: bool (canceled?)
    """

    kind: RequestKind
    payload: str | bool | SubscriptionTerms


Outcome = RequestFailed | RequestSucceeded
