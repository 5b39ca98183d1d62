"""
Observability module - Logging, Metrics, and Tracing.
"""

from paymentservice.observability.logging import get_logger, log_context, setup_logging
from paymentservice.observability.metrics import metrics
from paymentservice.observability.tracing import setup_tracing

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "setup_tracing",
]
