"""
Payment service gateway - asynchronous adapter between a platform in-app
purchase service and the UI layer.
"""

from paymentservice.models import (
    ItemState,
    Outcome,
    PurchaseReceipt,
    RequestFailed,
    RequestKind,
    RequestSucceeded,
    SubscriptionTerms,
)
from paymentservice.services.payment_gateway import PaymentGateway
from paymentservice.services.reply import Reply

__all__ = [
    "ItemState",
    "Outcome",
    "PaymentGateway",
    "PurchaseReceipt",
    "Reply",
    "RequestFailed",
    "RequestKind",
    "RequestSucceeded",
    "SubscriptionTerms",
]
