from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

# probes and scrapes would otherwise dominate the trace volume
UNTRACED_URLS = "/health/live,/health/ready,/metrics"

_OTEL_CONFIGURED = False
logger = logging.getLogger(__name__)


def _sample_ratio() -> float:
    raw = os.getenv("OTEL_TRACES_SAMPLER_ARG", "1.0")
    try:
        return min(max(float(raw), 0.0), 1.0)
    except ValueError:
        logger.warning("otel_invalid_sample_ratio", extra={"error_code": raw})
        return 1.0


def configure_otel(app: FastAPI) -> None:
    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        return

    service_name = os.getenv("OTEL_SERVICE_NAME", "tabletop-backend")
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: service_name,
                "deployment.environment": os.getenv("APP_ENV", "dev"),
            }
        ),
        sampler=ParentBased(TraceIdRatioBased(_sample_ratio())),
    )
    if endpoint:
        try:
            exporter = OTLPSpanExporter(
                endpoint=endpoint,
                insecure=endpoint.startswith("http://"),
            )
            provider.add_span_processor(BatchSpanProcessor(exporter))
        except Exception:
            logger.exception("otel_exporter_setup_failed")

    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls=UNTRACED_URLS,
    )
    _OTEL_CONFIGURED = True
