"""Monitoring API routes for health checks and metrics"""
import logging

from fastapi import APIRouter, Response, Depends
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from webhook_ledger.db.session import check_db_connection, get_db

router = APIRouter(tags=["monitoring"])
logger = logging.getLogger(__name__)


@router.get("/")
def index():
    """Service name and endpoint map"""
    return {
        "message": "Stripe Webhook Server",
        "endpoints": {
            "webhook": "POST /webhook",
            "health": "GET /health",
            "events": "GET /events?limit=50&offset=0&type=optional",
            "eventById": "GET /events/:eventId",
            "checkout": "POST /create-checkout-session",
            "metrics": "GET /metrics"
        }
    }


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint - runs a trivial query against the database"""
    try:
        check_db_connection(db)
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "Database connection failed",
                "error": str(e)
            }
        )

    return {
        "status": "ok",
        "message": "Stripe webhook server is running",
        "database": "connected"
    }


@router.get("/metrics")
def metrics_endpoint():
    """Prometheus metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
