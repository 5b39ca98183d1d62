"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- Receipts in various states
- Payment manager doubles whose replies the test completes by hand
- Sandbox payment manager with a small catalog
- Gateways wired to either of the above
"""

import os
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

# Set environment variables BEFORE importing package modules
os.environ.setdefault("PAYMENT_CONNECTION_MODE", "test")
os.environ.setdefault("PAYMENT_METRICS_ENABLED", "true")
os.environ.setdefault("PAYMENT_TRACING_ENABLED", "false")
os.environ.setdefault("PAYMENT_LOG_FORMAT", "console")

from paymentservice.models.outcome import RequestKind
from paymentservice.models.receipt import ItemState, PurchaseReceipt, SubscriptionTerms
from paymentservice.services.payment_gateway import PaymentGateway
from paymentservice.services.reply import Reply
from paymentservice.services.sandbox_provider import SandboxGood, SandboxPaymentManager

# ============================================================================
# Receipt Fixtures
# ============================================================================


@pytest.fixture
def receipt_factory():
    """Factory for receipts with overridable fields."""

    def _create(**overrides) -> PurchaseReceipt:
        fields = {
            "purchase_date": datetime(2024, 3, 5, 14, 7, 9, tzinfo=UTC),
            "digital_good_id": "item1",
            "digital_good_sku": "sku1",
            "purchase_id": "p-001",
            "license_key": "LK-1",
            "purchase_metadata": "{}",
            "item_state": ItemState.OWNED,
            "is_subscription": False,
        }
        fields.update(overrides)
        return PurchaseReceipt(**fields)

    return _create


@pytest.fixture
def owned_receipt(receipt_factory) -> PurchaseReceipt:
    """One-time purchase receipt without subscription dates."""
    return receipt_factory()


@pytest.fixture
def subscription_receipt(receipt_factory) -> PurchaseReceipt:
    """Active subscription receipt with both dates set."""
    return receipt_factory(
        digital_good_id="sub1",
        digital_good_sku="sub-sku",
        purchase_id="p-002",
        item_state=ItemState.SUBSCRIBED,
        is_subscription=True,
        start_date=datetime(2024, 3, 5, 14, 7, 9, tzinfo=UTC),
        end_date=datetime(2024, 4, 4, 14, 7, 9, tzinfo=UTC),
        initial_period=30,
    )


# ============================================================================
# Payment Manager Fixtures
# ============================================================================


@pytest.fixture
def payment_manager() -> MagicMock:
    """
    Payment manager double.

    Each issue_* call hands out a fresh Reply of the matching kind and appends
    it to manager.replies so the test can complete it by hand.
    """
    manager = MagicMock()
    manager.replies = []

    def _issuer(kind: RequestKind):
        def _issue(*args):
            reply = Reply(kind)
            manager.replies.append(reply)
            return reply

        return _issue

    manager.issue_purchase.side_effect = _issuer(RequestKind.PURCHASE)
    manager.issue_existing_purchases_query.side_effect = _issuer(RequestKind.EXISTING_PURCHASES)
    manager.issue_price_query.side_effect = _issuer(RequestKind.PRICE)
    manager.issue_subscription_terms_query.side_effect = _issuer(RequestKind.SUBSCRIPTION_TERMS)
    manager.issue_subscription_status_query.side_effect = _issuer(RequestKind.SUBSCRIPTION_STATUS)
    manager.issue_cancel_subscription.side_effect = _issuer(RequestKind.CANCEL_SUBSCRIPTION)
    return manager


@pytest.fixture
def gateway(payment_manager: MagicMock) -> PaymentGateway:
    """Gateway over the hand-completed payment manager double."""
    return PaymentGateway(payment_manager)


@pytest.fixture
def monthly_terms() -> SubscriptionTerms:
    return SubscriptionTerms(
        price="$0.00",
        initial_period="30",
        renewal_price="$4.99",
        renewal_period="30",
    )


@pytest.fixture
def sandbox(monthly_terms: SubscriptionTerms) -> SandboxPaymentManager:
    """Sandbox with one consumable and one monthly subscription."""
    return SandboxPaymentManager(
        goods=[
            SandboxGood(digital_good_id="item1", sku="sku1", price="$0.99"),
            SandboxGood(
                digital_good_id="sub1",
                sku="sub-sku",
                price="$4.99",
                subscription_terms=monthly_terms,
                initial_period=30,
            ),
        ]
    )


@pytest.fixture
def sandbox_gateway(sandbox: SandboxPaymentManager) -> PaymentGateway:
    """Gateway over the sandbox payment manager."""
    return PaymentGateway(sandbox, window_group_id="wg-test")

