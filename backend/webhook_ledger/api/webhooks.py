"""Webhook ingestion route"""
import logging
from typing import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from webhook_ledger.api.deps import read_raw_body
from webhook_ledger.core.exceptions import WebhookVerificationError
from webhook_ledger.core.metrics import webhook_deliveries_counter
from webhook_ledger.db.session import get_session_factory
from webhook_ledger.schemas.events import ErrorResponse, WebhookAck
from webhook_ledger.services.webhook_service import ingest_webhook

router = APIRouter(tags=["webhooks"])
logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": str(status_code), "message": message}}
    )


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def stripe_webhook(
    request: Request,
    payload: bytes = Depends(read_raw_body),
    session_factory: Callable[[], Session] = Depends(get_session_factory)
):
    """Handle Stripe webhook events

    Note: the body is taken as raw bytes via ``read_raw_body``; do not add a
    body model or any body-parsing middleware in front of this route.
    """
    sig_header = request.headers.get("stripe-signature")
    logger.debug(
        f"Webhook received: content-type={request.headers.get('content-type')}, "
        f"signature present={bool(sig_header)}, body length={len(payload)}"
    )

    try:
        return await ingest_webhook(payload, sig_header, session_factory)
    except WebhookVerificationError as e:
        webhook_deliveries_counter.labels(outcome=type(e).__name__).inc()
        if e.status_code >= 500:
            logger.error(f"Webhook rejected: {e.message}")
        else:
            logger.warning(f"Webhook rejected: {e.message}")
        return error_response(e.status_code, e.message)
    except Exception as e:
        webhook_deliveries_counter.labels(outcome="error").inc()
        logger.error(f"Error processing webhook: {e}", exc_info=True)
        return error_response(500, "A server error has occurred")
