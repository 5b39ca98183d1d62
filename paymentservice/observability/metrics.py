"""
Metrics Collection with Prometheus.

Exposes request and outcome metrics for the payment gateway.
"""

from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info

from paymentservice.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    KIND = "kind"
    RESULT = "result"


class PaymentMetrics:
    """
    Centralized metrics for the payment gateway.

    Covers:
    - Requests issued and rejected locally, per kind
    - Outcomes (success/error) per kind
    - Time from issue to completion
    - Requests currently in flight
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""
        self.service_info = Info(
            "payment_gateway",
            "Payment gateway information",
        )
        self.service_info.info(
            {
                "version": settings.service_version,
                "service_name": settings.service_name,
                "connection_mode": settings.connection_mode.lower(),
            }
        )

        self.requests_total = Counter(
            "payment_requests_total",
            "Total requests issued to the payment provider",
            [MetricLabels.KIND.value],
        )

        self.requests_rejected_total = Counter(
            "payment_requests_rejected_total",
            "Requests dropped locally because an identifying parameter was empty",
            [MetricLabels.KIND.value],
        )

        self.outcomes_total = Counter(
            "payment_outcomes_total",
            "Completed requests by result",
            [MetricLabels.KIND.value, MetricLabels.RESULT.value],
        )

        self.request_duration_seconds = Histogram(
            "payment_request_duration_seconds",
            "Time from request issue to provider completion",
            [MetricLabels.KIND.value],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0),
        )

        self.requests_in_flight = Gauge(
            "payment_requests_in_flight",
            "Requests issued and not yet completed",
        )

    def record_issued(self, kind: str) -> None:
        """Record a request handed to the provider."""
        if not settings.metrics_enabled:
            return
        self.requests_total.labels(kind=kind).inc()
        self.requests_in_flight.inc()

    def record_rejected(self, kind: str) -> None:
        """Record a request dropped before issue."""
        if not settings.metrics_enabled:
            return
        self.requests_rejected_total.labels(kind=kind).inc()

    def record_outcome(self, kind: str, success: bool, duration: float) -> None:
        """Record a completed request."""
        if not settings.metrics_enabled:
            return
        self.outcomes_total.labels(kind=kind, result="success" if success else "error").inc()
        self.request_duration_seconds.labels(kind=kind).observe(duration)
        self.requests_in_flight.dec()


# Global metrics instance
metrics = PaymentMetrics()
