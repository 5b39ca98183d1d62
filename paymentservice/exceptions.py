"""
Exception Classes - Strongly typed exception hierarchy.

Provider-reported request failures are NOT exceptions; they are delivered as
RequestFailed outcomes. These classes cover misuse of the provider boundary.
"""

from paymentservice.models.outcome import RequestKind


class PaymentServiceError(Exception):
    """Base exception for all payment gateway errors."""

    pass


class ProviderError(PaymentServiceError):
    """Raised when the payment provider cannot be reached or constructed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Payment provider error: {message}")


class ReplyAlreadyFinishedError(PaymentServiceError):
    """Raised when a provider tries to complete a reply a second time."""

    def __init__(self, kind: RequestKind) -> None:
        self.kind = kind
        super().__init__(f"Reply for {kind.value} request already finished")


class ReplyReleasedError(PaymentServiceError):
    """Raised when a released reply is used again."""

    def __init__(self, kind: RequestKind) -> None:
        self.kind = kind
        super().__init__(f"Reply for {kind.value} request has been released")
