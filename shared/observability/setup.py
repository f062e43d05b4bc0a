import logging
from typing import Optional

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

# 1. Structlog Processor: Injects Trace/Span IDs into every log line
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict

# 2. Configure Structlog for JSON output
def configure_logging(log_level: str = "INFO"):
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

# 3. Configure OpenTelemetry Tracing (only when a collector endpoint is set)
def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: Optional[str]):
    if not otlp_endpoint:
        return

    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    # Spans for every incoming request
    FastAPIInstrumentor.instrument_app(app)

# 4. Configure Prometheus Metrics
def configure_metrics(app: FastAPI):
    # Request latency, status codes, etc. exposed at /metrics
    Instrumentator().instrument(app).expose(app, include_in_schema=False)

# --- THE MASTER SETUP FUNCTION ---
def setup_observability(
    app: FastAPI,
    service_name: str,
    otlp_endpoint: Optional[str] = None,
    log_level: str = "INFO",
):
    """
    Bootstraps Logging, Tracing, and Metrics for a FastAPI app.
    Call this once while building the app, before serving.
    """
    configure_logging(log_level)
    configure_tracing(app, service_name, otlp_endpoint)
    configure_metrics(app)
