import pytest

from debit_observability import maybe_start_http_server
from debit_observability import metrics as metrics_module


@pytest.fixture()
def started_ports(monkeypatch):
    ports: list = []
    monkeypatch.setattr(metrics_module, "start_http_server", ports.append)
    monkeypatch.setattr(metrics_module, "_server_started", False)
    return ports


def test_sidecar_server_skipped_without_env(monkeypatch, started_ports):
    monkeypatch.delenv("METRICS_HTTP_SERVER", raising=False)
    maybe_start_http_server()
    assert started_ports == []


def test_sidecar_server_started_once(monkeypatch, started_ports):
    monkeypatch.setenv("METRICS_HTTP_SERVER", "1")
    monkeypatch.setenv("METRICS_PORT", "9105")
    maybe_start_http_server()
    maybe_start_http_server()
    assert started_ports == [9105]


def test_get_metric_returns_registered_collector():
    from prometheus_client import Counter

    assert (
        metrics_module.get_metric(Counter, "dd_payments_rejected_total", "dup", ["reason"])
        is metrics_module.payments_rejected_total
    )
