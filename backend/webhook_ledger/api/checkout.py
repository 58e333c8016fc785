"""Checkout session route"""
import logging

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from webhook_ledger.core.exceptions import CheckoutError
from webhook_ledger.schemas.events import CheckoutRequest, CheckoutResponse
from webhook_ledger.services.checkout_service import create_checkout_session

router = APIRouter(tags=["checkout"])
logger = logging.getLogger(__name__)


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session_route(checkout_request: CheckoutRequest):
    """Create a Stripe Checkout Session for a one-off payment"""
    if not checkout_request.amount:
        return JSONResponse(status_code=400, content={"error": "Amount is required"})

    try:
        return await run_in_threadpool(
            create_checkout_session,
            checkout_request.amount,
            checkout_request.currency,
            checkout_request.productName,
            checkout_request.metadata
        )
    except CheckoutError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
