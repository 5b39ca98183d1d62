"""
Sandbox Payment Manager - In-process stand-in for the platform payment service.

Used when the gateway runs in test connection mode. Keeps a catalog of goods
and an in-memory purchase ledger; nothing is persisted. Replies complete on
the next event loop iteration, never synchronously.
"""

import asyncio
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import IntEnum
from typing import Any
from uuid import uuid4

from structlog import get_logger

from paymentservice.models.outcome import RequestKind
from paymentservice.models.receipt import ItemState, PurchaseReceipt, SubscriptionTerms
from paymentservice.services.reply import Reply

logger = get_logger(__name__)


class SandboxErrorCode(IntEnum):
    """Error codes reported by the sandbox."""

    CANCELED = 1  # User dismissed the purchase dialog
    BUSY = 2  # Another purchase dialog is already open
    FAILED = 3  # Request could not be fulfilled


@dataclass(frozen=True)
class SandboxGood:
    """A digital good the sandbox knows how to sell."""

    digital_good_id: str
    sku: str
    price: str
    subscription_terms: SubscriptionTerms | None = None
    initial_period: int = 0  # Days

    @property
    def is_subscription(self) -> bool:
        return self.subscription_terms is not None


class SandboxPaymentManager:
    """
    Local payment manager for test connection mode.

    Scripted failures queued with fail_next() take precedence over normal
    handling for the next request of that kind.
    """

    def __init__(self, goods: Iterable[SandboxGood] = ()) -> None:
        self.window_group_id: str | None = None
        self._goods: dict[str, SandboxGood] = {}
        self._purchases: list[PurchaseReceipt] = []
        self._scripted_failures: dict[RequestKind, deque[tuple[int, str]]] = {
            kind: deque() for kind in RequestKind
        }
        for good in goods:
            self.add_good(good)

        logger.info("sandbox_payment_manager_initialized", goods=len(self._goods))

    @property
    def purchases(self) -> Sequence[PurchaseReceipt]:
        return tuple(self._purchases)

    def add_good(self, good: SandboxGood) -> None:
        self._goods[good.digital_good_id] = good

    def fail_next(self, kind: RequestKind, code: int, text: str) -> None:
        """Make the next request of this kind fail with (code, text)."""
        self._scripted_failures[kind].append((code, text))

    def set_window_group_id(self, window_group_id: str) -> None:
        self.window_group_id = window_group_id

    # ========================================================================
    # PaymentManager protocol
    # ========================================================================

    def issue_purchase(
        self, digital_good_id: str, sku: str, name: str, metadata: str
    ) -> Reply[PurchaseReceipt]:
        return self._schedule(
            RequestKind.PURCHASE,
            lambda reply: self._resolve_purchase(reply, digital_good_id, sku, metadata),
        )

    def issue_existing_purchases_query(self, refresh: bool) -> Reply[Sequence[PurchaseReceipt]]:
        return self._schedule(
            RequestKind.EXISTING_PURCHASES,
            lambda reply: reply.finish(tuple(self._purchases)),
        )

    def issue_price_query(self, digital_good_id: str, sku: str) -> Reply[str]:
        return self._schedule(
            RequestKind.PRICE,
            lambda reply: self._resolve_price(reply, digital_good_id),
        )

    def issue_subscription_terms_query(
        self, digital_good_id: str, sku: str
    ) -> Reply[SubscriptionTerms]:
        return self._schedule(
            RequestKind.SUBSCRIPTION_TERMS,
            lambda reply: self._resolve_subscription_terms(reply, digital_good_id),
        )

    def issue_subscription_status_query(self, digital_good_id: str, sku: str) -> Reply[bool]:
        return self._schedule(
            RequestKind.SUBSCRIPTION_STATUS,
            lambda reply: self._resolve_subscription_status(reply, digital_good_id),
        )

    def issue_cancel_subscription(self, purchase_id: str) -> Reply[bool]:
        return self._schedule(
            RequestKind.CANCEL_SUBSCRIPTION,
            lambda reply: self._resolve_cancel(reply, purchase_id),
        )

    # ========================================================================
    # Resolution
    # ========================================================================

    def _schedule(self, kind: RequestKind, resolve: Callable[[Reply[Any]], None]) -> Reply[Any]:
        reply: Reply[Any] = Reply(kind)
        asyncio.get_running_loop().call_soon(self._complete, reply, resolve)
        return reply

    def _complete(self, reply: Reply[Any], resolve: Callable[[Reply[Any]], None]) -> None:
        scripted = self._scripted_failures[reply.kind]
        if scripted:
            code, text = scripted.popleft()
            logger.info("sandbox_scripted_failure", kind=reply.kind.value, error_code=code)
            reply.fail(code, text)
            return
        resolve(reply)

    def _lookup(self, reply: Reply[Any], digital_good_id: str) -> SandboxGood | None:
        good = self._goods.get(digital_good_id)
        if good is None:
            reply.fail(SandboxErrorCode.FAILED, "Item not found")
        return good

    def _resolve_purchase(
        self, reply: Reply[PurchaseReceipt], digital_good_id: str, sku: str, metadata: str
    ) -> None:
        good = self._lookup(reply, digital_good_id)
        if good is None:
            return

        now = datetime.now(UTC)
        end_date = None
        if good.is_subscription and good.initial_period:
            end_date = now + timedelta(days=good.initial_period)

        receipt = PurchaseReceipt(
            purchase_date=now,
            digital_good_id=good.digital_good_id,
            digital_good_sku=sku or good.sku,
            purchase_id=uuid4().hex,
            license_key="",
            purchase_metadata=metadata,
            item_state=ItemState.SUBSCRIBED if good.is_subscription else ItemState.OWNED,
            is_subscription=good.is_subscription,
            start_date=now if good.is_subscription else None,
            end_date=end_date,
            initial_period=good.initial_period,
        )
        self._purchases.append(receipt)

        logger.info(
            "sandbox_purchase_recorded",
            digital_good_id=good.digital_good_id,
            purchase_id=receipt.purchase_id,
        )
        reply.finish(receipt)

    def _resolve_price(self, reply: Reply[str], digital_good_id: str) -> None:
        good = self._lookup(reply, digital_good_id)
        if good is not None:
            reply.finish(good.price)

    def _resolve_subscription_terms(
        self, reply: Reply[SubscriptionTerms], digital_good_id: str
    ) -> None:
        good = self._lookup(reply, digital_good_id)
        if good is None:
            return
        if good.subscription_terms is None:
            reply.fail(SandboxErrorCode.FAILED, "Item is not a subscription")
            return
        reply.finish(good.subscription_terms)

    def _resolve_subscription_status(self, reply: Reply[bool], digital_good_id: str) -> None:
        if self._lookup(reply, digital_good_id) is None:
            return
        reply.finish(
            any(
                receipt.digital_good_id == digital_good_id and receipt.is_active_subscription()
                for receipt in self._purchases
            )
        )

    def _resolve_cancel(self, reply: Reply[bool], purchase_id: str) -> None:
        for index, receipt in enumerate(self._purchases):
            if receipt.purchase_id != purchase_id:
                continue
            if not receipt.is_subscription:
                reply.fail(SandboxErrorCode.FAILED, "Purchase is not a subscription")
                return
            if receipt.item_state != ItemState.CANCELLED:
                self._purchases[index] = replace(
                    receipt, item_state=ItemState.CANCELLED, end_date=datetime.now(UTC)
                )
            logger.info("sandbox_subscription_canceled", purchase_id=purchase_id)
            reply.finish(True)
            return

        reply.fail(SandboxErrorCode.FAILED, "Purchase not found")
