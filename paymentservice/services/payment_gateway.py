"""
Payment Gateway - Forwards in-app-purchase requests and classifies their replies.

Each operation issues one request to the payment manager and returns a future
that resolves with exactly one Outcome. Subscribers get the same outcome
through the per-kind success channels or the shared error channel.
"""

import asyncio
import time
from collections.abc import Callable
from contextlib import suppress
from typing import Any

from opentelemetry.trace import Span
from structlog import get_logger

from paymentservice.config import settings
from paymentservice.models.outcome import Outcome, RequestFailed, RequestKind, RequestSucceeded
from paymentservice.observability.metrics import metrics
from paymentservice.observability.tracing import (
    add_span_attributes,
    get_tracer,
    set_span_provider_error,
)
from paymentservice.services.formatting import format_receipts, receipt_to_string
from paymentservice.services.payment_provider import PaymentManager, create_payment_manager
from paymentservice.services.reply import Reply

logger = get_logger(__name__)
tracer = get_tracer(__name__)

SuccessHandler = Callable[[Any], None]
ErrorHandler = Callable[[int, str], None]


class PaymentGateway:
    """
    Adapter between the platform payment manager and the UI layer.

    Requests whose identifying parameter is empty are dropped without issuing
    anything and without notifying anyone; the operation returns None.
    """

    def __init__(self, payment_manager: PaymentManager, window_group_id: str | None = None) -> None:
        """
        Initialize the gateway.

        Args:
            payment_manager: Platform (or sandbox) payment manager
            window_group_id: Host window group the purchase dialog is parented to
        """
        self.payment_manager = payment_manager
        self._success_handlers: dict[RequestKind, list[SuccessHandler]] = {
            kind: [] for kind in RequestKind
        }
        self._error_handlers: list[ErrorHandler] = []

        if window_group_id:
            payment_manager.set_window_group_id(window_group_id)

        logger.info(
            "payment_gateway_initialized",
            manager=type(payment_manager).__name__,
            window_group_id=window_group_id,
        )

    @classmethod
    def from_settings(cls, platform_manager: PaymentManager | None = None) -> "PaymentGateway":
        """Build a gateway for the configured connection mode and window group."""
        return cls(
            create_payment_manager(platform_manager),
            window_group_id=settings.window_group_id,
        )

    # ========================================================================
    # Subscriptions
    # ========================================================================

    def subscribe(self, kind: RequestKind, handler: SuccessHandler) -> Callable[[], None]:
        """
        Receive success payloads for one request kind.

        Returns:
            Callable that removes the handler
        """
        handlers = self._success_handlers[kind]
        handlers.append(handler)
        return lambda: self._unsubscribe(handlers, handler)

    def subscribe_errors(self, handler: ErrorHandler) -> Callable[[], None]:
        """Receive (code, text) for failed requests of every kind."""
        self._error_handlers.append(handler)
        return lambda: self._unsubscribe(self._error_handlers, handler)

    @staticmethod
    def _unsubscribe(handlers: list[Any], handler: Any) -> None:
        # Unsubscribing twice is harmless
        with suppress(ValueError):
            handlers.remove(handler)

    # ========================================================================
    # Operations
    # ========================================================================

    def purchase(
        self, digital_good_id: str, sku: str, name: str, metadata: str
    ) -> "asyncio.Future[Outcome] | None":
        """Request a purchase of the given digital good."""
        if not digital_good_id:
            return self._reject(RequestKind.PURCHASE)

        return self._issue(
            RequestKind.PURCHASE,
            lambda: self.payment_manager.issue_purchase(digital_good_id, sku, name, metadata),
            digital_good_id=digital_good_id,
            sku=sku,
            name=name,
            metadata=metadata,
        )

    def get_existing_purchases(self, refresh: bool) -> "asyncio.Future[Outcome]":
        """Request the list of prior purchases."""
        return self._issue(
            RequestKind.EXISTING_PURCHASES,
            lambda: self.payment_manager.issue_existing_purchases_query(refresh),
            refresh=refresh,
        )

    def get_price(self, digital_good_id: str, sku: str) -> "asyncio.Future[Outcome] | None":
        """Query the current price of a digital good."""
        if not digital_good_id:
            return self._reject(RequestKind.PRICE)

        return self._issue(
            RequestKind.PRICE,
            lambda: self.payment_manager.issue_price_query(digital_good_id, sku),
            digital_good_id=digital_good_id,
            sku=sku,
        )

    def get_subscription_terms(
        self, digital_good_id: str, sku: str
    ) -> "asyncio.Future[Outcome] | None":
        """Query subscription price and periods."""
        if not digital_good_id:
            return self._reject(RequestKind.SUBSCRIPTION_TERMS)

        return self._issue(
            RequestKind.SUBSCRIPTION_TERMS,
            lambda: self.payment_manager.issue_subscription_terms_query(digital_good_id, sku),
            digital_good_id=digital_good_id,
            sku=sku,
        )

    def check_subscription_status(
        self, digital_good_id: str, sku: str
    ) -> "asyncio.Future[Outcome] | None":
        """Query whether a subscription is active."""
        if not digital_good_id:
            return self._reject(RequestKind.SUBSCRIPTION_STATUS)

        return self._issue(
            RequestKind.SUBSCRIPTION_STATUS,
            lambda: self.payment_manager.issue_subscription_status_query(digital_good_id, sku),
            digital_good_id=digital_good_id,
            sku=sku,
        )

    def cancel_subscription(self, purchase_id: str) -> "asyncio.Future[Outcome] | None":
        """Cancel the subscription identified by its purchase ID."""
        if not purchase_id:
            return self._reject(RequestKind.CANCEL_SUBSCRIPTION)

        return self._issue(
            RequestKind.CANCEL_SUBSCRIPTION,
            lambda: self.payment_manager.issue_cancel_subscription(purchase_id),
            purchase_id=purchase_id,
        )

    # ========================================================================
    # Completion handling
    # ========================================================================

    def _reject(self, kind: RequestKind) -> None:
        logger.debug("payment_request_dropped_empty_id", kind=kind.value)
        metrics.record_rejected(kind.value)
        return None

    def _issue(
        self,
        kind: RequestKind,
        issue: Callable[[], Reply[Any]],
        **attributes: Any,
    ) -> "asyncio.Future[Outcome]":
        future: asyncio.Future[Outcome] = asyncio.get_running_loop().create_future()

        span = tracer.start_span(f"payment.{kind.value}")
        add_span_attributes(span, **{f"payment.{key}": value for key, value in attributes.items()})
        try:
            reply = issue()
        except Exception:
            span.end()
            raise

        metrics.record_issued(kind.value)
        logger.info("payment_request_issued", kind=kind.value, **attributes)

        started = time.monotonic()
        reply.on_finished(lambda finished: self._on_finished(finished, future, span, started))
        return future

    def _on_finished(
        self,
        reply: Reply[Any],
        future: "asyncio.Future[Outcome]",
        span: Span,
        started: float,
    ) -> None:
        try:
            try:
                outcome = self._classify(reply)
            except Exception as exc:
                logger.exception("payment_reply_unclassifiable", kind=reply.kind.value)
                span.record_exception(exc)
                metrics.record_outcome(
                    reply.kind.value, success=False, duration=time.monotonic() - started
                )
                if not future.done():
                    future.set_exception(exc)
                raise

            if isinstance(outcome, RequestFailed):
                set_span_provider_error(span, outcome.code, outcome.text)
            metrics.record_outcome(
                reply.kind.value,
                success=isinstance(outcome, RequestSucceeded),
                duration=time.monotonic() - started,
            )

            # The caller may have cancelled its future; subscribers still hear about it
            if not future.done():
                future.set_result(outcome)
            self._notify(outcome)
        finally:
            span.end()
            reply.release()

    def _classify(self, reply: Reply[Any]) -> Outcome:
        kind = reply.kind

        if reply.is_error:
            logger.warning(
                "payment_request_failed",
                kind=kind.value,
                error_code=reply.error_code,
                error_text=reply.error_text,
            )
            return RequestFailed(code=int(reply.error_code), text=reply.error_text, kind=kind)

        if kind == RequestKind.PURCHASE:
            payload: Any = receipt_to_string(reply.result)
        elif kind == RequestKind.EXISTING_PURCHASES:
            payload = format_receipts(reply.result)
        else:
            payload = reply.result

        logger.info("payment_request_succeeded", kind=kind.value, payload=str(payload))
        return RequestSucceeded(kind=kind, payload=payload)

    def _notify(self, outcome: Outcome) -> None:
        """
        Deliver the outcome to every subscriber on its channel.

        A failing subscriber does not stop delivery to the rest; the first
        failure is re-raised once all of them have been called.
        """
        if isinstance(outcome, RequestFailed):
            calls = [
                lambda handler=handler: handler(outcome.code, outcome.text)
                for handler in list(self._error_handlers)
            ]
        else:
            calls = [
                lambda handler=handler: handler(outcome.payload)
                for handler in list(self._success_handlers[outcome.kind])
            ]

        first_error: Exception | None = None
        for call in calls:
            try:
                call()
            except Exception as exc:
                logger.exception("payment_subscriber_failed", kind=outcome.kind.value)
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise first_error
