"""
Best-effort StatsD counters and timers for the payment flows.

Usage:
  from agency.utils.metrics import incr, Timer
  incr("payments.confirm.credited", tags={"method": "online"})
  with Timer("checkout.preference.ms"):
      ...

Configured through STATSD_HOST / STATSD_PORT / METRICS_PREFIX; when no host
is set every call is a no-op. A failing sink never breaks a request.
"""

from __future__ import annotations

import logging
import socket
import time
from typing import Dict, Optional

from ..core.config import settings

logger = logging.getLogger(__name__)

_SOCK: Optional[socket.socket] = None


def _get_sock() -> Optional[socket.socket]:
    global _SOCK
    if not settings.STATSD_HOST:
        return None
    if _SOCK is None:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.connect((settings.STATSD_HOST, settings.STATSD_PORT))
        except OSError as exc:
            logger.debug("statsd sink unavailable: %s", exc)
            return None
        _SOCK = sock
    return _SOCK


def _metric_name(name: str) -> str:
    prefix = settings.METRICS_PREFIX.strip(".")
    return f"{prefix}.{name}" if prefix else name


def _format_tags(tags: Optional[Dict[str, object]]) -> str:
    if not tags:
        return ""
    parts = [
        f"{str(k).replace(',', '_')}:{str(v).replace(',', '_')}"
        for k, v in tags.items()
        if k is not None
    ]
    return "|#" + ",".join(parts) if parts else ""


def _send(line: str) -> None:
    sock = _get_sock()
    if sock is None:
        return
    try:
        sock.send(line.encode("utf-8"))
    except OSError as exc:
        logger.debug("statsd send failed: %s", exc)


def incr(name: str, value: int = 1, tags: Optional[Dict[str, object]] = None) -> None:
    _send(f"{_metric_name(name)}:{int(value)}|c{_format_tags(tags)}")


def timing_ms(name: str, ms: float, tags: Optional[Dict[str, object]] = None) -> None:
    _send(f"{_metric_name(name)}:{float(ms):.2f}|ms{_format_tags(tags)}")


class Timer:
    """Context manager reporting elapsed milliseconds on exit."""

    def __init__(self, name: str, tags: Optional[Dict[str, object]] = None):
        self.name = name
        self.tags = tags or {}
        self.elapsed_ms: float = 0.0
        self._t0: float = 0.0

    def __enter__(self):
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed_ms = (time.perf_counter() - self._t0) * 1000.0
        tags = dict(self.tags)
        tags["outcome"] = "error" if exc_type else "ok"
        timing_ms(self.name, self.elapsed_ms, tags=tags)
        return False
