import socket

import pytest

from agency.utils import metrics


@pytest.fixture
def statsd(monkeypatch):
    sink = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sink.bind(("127.0.0.1", 0))
    sink.settimeout(2.0)
    monkeypatch.setattr(metrics.settings, "STATSD_HOST", "127.0.0.1")
    monkeypatch.setattr(metrics.settings, "STATSD_PORT", sink.getsockname()[1])
    monkeypatch.setattr(metrics.settings, "METRICS_PREFIX", "agency")
    monkeypatch.setattr(metrics, "_SOCK", None)
    yield sink
    if metrics._SOCK is not None:
        metrics._SOCK.close()
    sink.close()


def test_incr_sends_prefixed_counter_with_tags(statsd):
    metrics.incr("payments.confirm.credited", tags={"method": "online"})
    assert statsd.recv(1024) == b"agency.payments.confirm.credited:1|c|#method:online"


def test_timer_reports_outcome(statsd):
    with pytest.raises(RuntimeError):
        with metrics.Timer("checkout.preference.ms", tags={"mode": "test"}):
            raise RuntimeError("boom")
    line = statsd.recv(1024).decode()
    assert line.startswith("agency.checkout.preference.ms:")
    assert line.endswith("|ms|#mode:test,outcome:error")


def test_metrics_are_noop_without_host(monkeypatch):
    monkeypatch.setattr(metrics.settings, "STATSD_HOST", "")
    monkeypatch.setattr(metrics, "_SOCK", None)
    metrics.incr("payments.confirm.noop")
    assert metrics._SOCK is None
