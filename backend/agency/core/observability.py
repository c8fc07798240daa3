"""Observability helpers for logging and tracing.

Knobs come from :mod:`agency.core.config`:

- LOG_LEVEL (default: INFO) for the root logger
- ENABLE_CONSOLE_TRACING (default: off) to emit OTel spans to stdout
- OTEL_SAMPLER_RATIO (default: 1.0) trace sampling ratio
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from pythonjsonlogger import jsonlogger

from .config import settings

# Probes are hit every few seconds by the platform; keep them out of traces.
EXCLUDED_URLS = "/healthz/live,/healthz/ready"


def setup_logging() -> None:
    """Configure structured JSON logging."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    root = logging.getLogger()
    root.handlers = [handler]
    level = logging.getLevelName(settings.LOG_LEVEL)
    root.setLevel(level)
    # Uvicorn's access lines duplicate the Server-Timing data; only keep them when debugging
    access_logger = logging.getLogger("uvicorn.access")
    access_logger.setLevel(level if level <= logging.DEBUG else logging.WARNING)


def setup_tracer(app) -> None:
    """Attach an OpenTelemetry tracer to the FastAPI app."""
    resource = Resource(attributes={"service.name": "agency-payments-api"})
    provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.OTEL_SAMPLER_RATIO)),
    )
    if settings.ENABLE_CONSOLE_TRACING:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)
