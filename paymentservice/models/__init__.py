"""
Domain models for the payment gateway.
"""

from paymentservice.models.outcome import (
    Outcome,
    RequestFailed,
    RequestKind,
    RequestSucceeded,
)
from paymentservice.models.receipt import ItemState, PurchaseReceipt, SubscriptionTerms

__all__ = [
    "ItemState",
    "Outcome",
    "PurchaseReceipt",
    "RequestFailed",
    "RequestKind",
    "RequestSucceeded",
    "SubscriptionTerms",
]
