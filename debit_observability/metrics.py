# debit_observability/metrics.py
"""
Prometheus metrics for direct-debit collections.

This module does NOT start a standalone HTTP server. Embedding services
expose the default registry themselves. For a batch job, set
METRICS_HTTP_SERVER=1 and call maybe_start_http_server() explicitly.
"""

import os
import threading
from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram, start_http_server

# ----------------------------
# Optional standalone server
# ----------------------------
_server_started = False
_server_lock = threading.Lock()


def maybe_start_http_server() -> None:
    """
    Start a sidecar metrics HTTP server exactly once, but only if
    METRICS_HTTP_SERVER=1 is set in the environment.
    """
    global _server_started
    if _server_started or os.getenv("METRICS_HTTP_SERVER") != "1":
        return
    with _server_lock:
        if not _server_started and os.getenv("METRICS_HTTP_SERVER") == "1":
            start_http_server(int(os.getenv("METRICS_PORT", "8001")))
            _server_started = True


# ----------------------------
# Registration helper (avoid duplicate collectors)
# ----------------------------
_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


# ----------------------------
# Collection metrics
# ----------------------------

payments_added_total = get_metric(
    Counter,
    "dd_payments_added_total",
    "Number of direct-debit payments accepted into a collection",
    ["sequence_type"],
)

# reason is the exception class name, e.g. MissingRequiredField
payments_rejected_total = get_metric(
    Counter,
    "dd_payments_rejected_total",
    "Number of direct-debit payments rejected by validation",
    ["reason"],
)

collections_generated_total = get_metric(
    Counter,
    "dd_collections_generated_total",
    "Number of PmtInf blocks generated",
)

generate_latency_seconds = get_metric(
    Histogram,
    "dd_generate_latency_seconds",
    "Latency of PmtInf generation in seconds",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)
