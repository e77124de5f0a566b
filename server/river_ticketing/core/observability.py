"""Observability setup for OpenTelemetry, Prometheus metrics, and structured logging."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

from .config import settings

SERVICE_NAME = "river-ticketing-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

SALES_CONFIRMED = Counter(
    "ticket_sales_confirmed_total",
    "Sales admitted by the admission gate",
    ["route_id"],
    registry=REGISTRY,
)

SEATS_SOLD = Counter(
    "ticket_seats_sold_total",
    "Seats sold across all departures",
    ["route_id"],
    registry=REGISTRY,
)

ADMISSIONS_REJECTED = Counter(
    "ticket_admissions_rejected_total",
    "Sale admissions rejected, by reason",
    ["reason"],
    registry=REGISTRY,
)

SALES_ANNULLED = Counter(
    "ticket_sales_annulled_total",
    "Sales voided or refunded",
    ["kind"],
    registry=REGISTRY,
)

DEPARTURE_UTILIZATION = Gauge(
    "departure_capacity_utilization",
    "Share of seats sold on a departure instance (0-100)",
    ["route_id", "vessel_id", "travel_date", "departure_time"],
    registry=REGISTRY,
)


def setup_structured_logging() -> None:
    """Configure structlog with request context and trace ids."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })


def setup_tracing() -> trace.Tracer:
    """Setup OpenTelemetry tracing, exporting over OTLP when configured."""
    provider = TracerProvider(resource=_resource())
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics() -> metrics.Meter:
    """Setup OpenTelemetry metrics, exporting over OTLP when configured."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60000,
        )
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))
    return metrics.get_meter(__name__)


def instrument_fastapi(app) -> None:
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine) -> None:
    """Instrument the async engine's sync core with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for ticketing business metrics."""

    @staticmethod
    def record_sale_confirmed(route_id: str, seats: int) -> None:
        SALES_CONFIRMED.labels(route_id=route_id).inc()
        SEATS_SOLD.labels(route_id=route_id).inc(seats)

    @staticmethod
    def record_admission_rejected(reason: str) -> None:
        ADMISSIONS_REJECTED.labels(reason=reason).inc()

    @staticmethod
    def record_sale_annulled(kind: str) -> None:
        SALES_ANNULLED.labels(kind=kind).inc()

    @staticmethod
    def set_departure_utilization(
        route_id: str,
        vessel_id: str,
        travel_date: str,
        departure_time: str,
        sold: int,
        capacity: int,
    ) -> None:
        """Set utilization percentage for a departure instance."""
        utilization = (sold / capacity * 100) if capacity else 0.0
        DEPARTURE_UTILIZATION.labels(
            route_id=route_id,
            vessel_id=vessel_id,
            travel_date=travel_date,
            departure_time=departure_time,
        ).set(utilization)


def get_prometheus_metrics() -> bytes:
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structlog logger bound to a module name."""
    return structlog.get_logger(name)
