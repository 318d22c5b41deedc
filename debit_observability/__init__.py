"""Prometheus metrics for direct-debit collections."""

from .metrics import (collections_generated_total, generate_latency_seconds,
                      maybe_start_http_server, payments_added_total,
                      payments_rejected_total)

__all__ = [
    "payments_added_total",
    "payments_rejected_total",
    "collections_generated_total",
    "generate_latency_seconds",
    "maybe_start_http_server",
]
