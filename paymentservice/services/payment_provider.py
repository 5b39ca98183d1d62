"""
Payment Manager Protocol - Boundary to the platform payment service.

The platform manager issues requests and hands back one Reply per request;
the backend work (billing, receipt validation, retries) happens behind it.
"""

from collections.abc import Sequence
from typing import Protocol

from structlog import get_logger

from paymentservice.config import settings
from paymentservice.exceptions import ProviderError
from paymentservice.models.receipt import PurchaseReceipt, SubscriptionTerms
from paymentservice.services.reply import Reply
from paymentservice.services.sandbox_provider import SandboxPaymentManager

logger = get_logger(__name__)


class PaymentManager(Protocol):
    """
    Platform payment manager protocol.

    Every issue_* call returns immediately; the returned Reply completes
    exactly once, later, with either an error or the kind-specific result.
    """

    def set_window_group_id(self, window_group_id: str) -> None:
        """Parent the provider's purchase dialog to the host window group."""
        ...

    def issue_purchase(
        self, digital_good_id: str, sku: str, name: str, metadata: str
    ) -> Reply[PurchaseReceipt]:
        """Start a purchase. Completes with the new receipt."""
        ...

    def issue_existing_purchases_query(self, refresh: bool) -> Reply[Sequence[PurchaseReceipt]]:
        """
        List prior purchases.

        Args:
            refresh: Ask the backend instead of answering from the local cache
        """
        ...

    def issue_price_query(self, digital_good_id: str, sku: str) -> Reply[str]:
        """Look up the current display price."""
        ...

    def issue_subscription_terms_query(
        self, digital_good_id: str, sku: str
    ) -> Reply[SubscriptionTerms]:
        """Look up subscription pricing and periods."""
        ...

    def issue_subscription_status_query(self, digital_good_id: str, sku: str) -> Reply[bool]:
        """Completes with True if the subscription is active."""
        ...

    def issue_cancel_subscription(self, purchase_id: str) -> Reply[bool]:
        """Completes with True if the subscription was canceled."""
        ...


def create_payment_manager(platform_manager: PaymentManager | None = None) -> PaymentManager:
    """
    Select the payment manager for the configured connection mode.

    Args:
        platform_manager: The host platform's manager, required in production mode

    Returns:
        The local sandbox in test mode, otherwise platform_manager

    Raises:
        ProviderError: If production mode is configured without a platform manager
    """
    if settings.is_test_mode:
        logger.info("payment_manager_selected", connection_mode="test")
        return SandboxPaymentManager()

    if platform_manager is None:
        raise ProviderError("No platform payment manager available in production mode")

    logger.info(
        "payment_manager_selected",
        connection_mode="production",
        manager=type(platform_manager).__name__,
    )
    return platform_manager
