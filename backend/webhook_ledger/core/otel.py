"""OpenTelemetry initialization and instrumentation"""
import logging

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

from webhook_ledger.core.config import settings

logger = logging.getLogger(__name__)


def _resource() -> Resource:
    return Resource.create({
        "service.name": settings.OTEL_SERVICE_NAME,
        "service.namespace": "payments",
        "service.version": "1.0.0",
        "deployment.environment": settings.OTEL_ENVIRONMENT,
        "webhook.provider": "stripe",
        "webhook.signature_tolerance_seconds": settings.STRIPE_WEBHOOK_TOLERANCE
    })


def initialize_otel():
    """Initialize OpenTelemetry trace and metric providers

    Returns False (and does nothing) when no OTLP endpoint is configured.
    """
    if not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        return False

    try:
        resource = _resource()

        trace_provider = TracerProvider(resource=resource)
        trace_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(
            endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            insecure=True
        )))
        trace.set_tracer_provider(trace_provider)

        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True),
            export_interval_millis=5000,
            export_timeout_millis=30000
        )
        metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[metric_reader]))

        return True
    except Exception as e:
        logger.warning(f"Failed to initialize OpenTelemetry: {e}")
        return False


def setup_otel_logging():
    """Attach an OTLP log handler to the root logger"""
    if not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        return False

    try:
        from opentelemetry._logs import set_logger_provider
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
        from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
        from opentelemetry.sdk._logs.export import BatchLogRecordProcessor

        logger_provider = LoggerProvider(resource=_resource())
        set_logger_provider(logger_provider)

        logger_provider.add_log_record_processor(BatchLogRecordProcessor(
            OTLPLogExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True),
            max_queue_size=2048,
            export_timeout_millis=30000,
            schedule_delay_millis=5000
        ))

        handler = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
        logging.getLogger().addHandler(handler)

        return True
    except Exception as e:
        logger.warning(f"Failed to setup OTEL logging: {e}")
        return False


def instrument_fastapi(app):
    """Instrument FastAPI application with OpenTelemetry"""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument SQLAlchemy with OpenTelemetry"""
    try:
        SQLAlchemyInstrumentor().instrument(engine=engine)
        logger.info("SQLAlchemy instrumentation enabled")
    except Exception as e:
        logger.warning(f"Failed to instrument SQLAlchemy: {e}")


def annotate_webhook_span(event_id: str, event_type: str, store_outcome: str) -> None:
    """Tag the current request span with the delivery it carried

    No-op unless tracing is initialized and the span is being recorded.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        return
    span.set_attributes({
        "webhook.event_id": event_id,
        "webhook.event_type": event_type,
        "webhook.store_outcome": store_outcome,
    })
