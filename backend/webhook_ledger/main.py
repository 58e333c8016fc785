"""FastAPI application entry point"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webhook_ledger.core.config import settings
from webhook_ledger.core.logging import setup_logging
from webhook_ledger.core.middleware import access_log_middleware
from webhook_ledger.core.otel import (
    initialize_otel, instrument_fastapi, instrument_sqlalchemy, setup_otel_logging
)
from webhook_ledger.db.session import dispose_engine, engine, init_db

# Import routers
from webhook_ledger.api import checkout, events, monitoring, webhooks

logger = logging.getLogger(__name__)


def warn_on_missing_config():
    """Log (never fail) when optional secrets are absent"""
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set. Webhook verification will fail.")
    if not settings.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY is not set. Checkout sessions cannot be created.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    setup_logging()

    if initialize_otel():
        if setup_otel_logging():
            logger.info(f"OpenTelemetry fully initialized, exporting to {settings.OTEL_EXPORTER_OTLP_ENDPOINT}")
        else:
            logger.warning("OpenTelemetry metrics/traces initialized but logging setup failed")
        instrument_sqlalchemy(engine)
    else:
        logger.info("OpenTelemetry not configured - running without distributed tracing")

    logger.info("Initializing database...")
    try:
        init_db()
        logger.info("Database table initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    warn_on_missing_config()
    logger.info(f"Stripe webhook server is running on port {settings.PORT}")

    yield

    # Shutdown
    logger.info("Shutting down: closing database connection pool")
    dispose_engine()


# Create FastAPI app
app = FastAPI(
    title="Webhook Ledger",
    description="Verified, idempotent storage of Stripe webhook events",
    version="1.0.0",
    lifespan=lifespan
)

if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
    instrument_fastapi(app)

# Access logging (never reads the request body)
app.middleware("http")(access_log_middleware)

# Include routers
app.include_router(webhooks.router)
app.include_router(events.router)
app.include_router(checkout.router)
app.include_router(monitoring.router)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )
