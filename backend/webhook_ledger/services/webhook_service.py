"""Webhook ingestion: verify, store, dispatch, acknowledge"""
import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from webhook_ledger.core.config import settings
from webhook_ledger.core.metrics import (
    store_duration_histogram, store_results_counter, webhook_deliveries_counter
)
from webhook_ledger.core.otel import annotate_webhook_span
from webhook_ledger.services.event_handlers import EventHandlerRegistry, registry
from webhook_ledger.services.event_store import StoreOutcome, StoreResult, store_event_if_absent
from webhook_ledger.services.signature_service import VerifiedEvent, verify_webhook

logger = logging.getLogger(__name__)

STORE_FAILED = "store_failed"


def _store_in_new_session(session_factory: Callable[[], Session], event: VerifiedEvent) -> StoreResult:
    # One session per store attempt; the connection goes back to the pool on exit
    with session_factory() as db:
        with store_duration_histogram.time():
            return store_event_if_absent(db, event)


async def store_with_timeout(
    event: VerifiedEvent,
    session_factory: Callable[[], Session],
    timeout: Optional[float] = None
) -> Optional[StoreResult]:
    """Best-effort store bounded by ``timeout`` seconds

    Returns None when the store failed or timed out. Failures are logged
    and counted here and never propagate to the caller.
    """
    if timeout is None:
        timeout = settings.WEBHOOK_STORE_TIMEOUT_SECONDS

    # A plain executor future: on timeout the response goes out without
    # waiting for the worker thread to finish
    loop = asyncio.get_running_loop()
    try:
        result = await asyncio.wait_for(
            loop.run_in_executor(None, functools.partial(_store_in_new_session, session_factory, event)),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        store_results_counter.labels(result="timeout").inc()
        logger.error(f"Timed out after {timeout}s storing event {event.id}; acknowledging anyway")
        return None
    except Exception as e:
        store_results_counter.labels(result="error").inc()
        logger.error(f"Failed to store event {event.id} in database: {e}", exc_info=True)
        return None

    store_results_counter.labels(result=result.outcome.value).inc()
    return result


async def ingest_webhook(
    payload: bytes,
    sig_header: Optional[str],
    session_factory: Callable[[], Session],
    handlers: EventHandlerRegistry = registry
) -> Dict[str, Any]:
    """Process one webhook delivery

    Only verification can fail the delivery. Once the event is verified the
    delivery is acknowledged whatever happens to storage, so the provider
    does not redeliver because of a local database outage.

    Args:
        payload: Raw request body as bytes (must not be parsed beforehand)
        sig_header: Stripe-Signature header value
        session_factory: Callable returning a new database session
        handlers: Registry of per-type handlers

    Returns:
        Acknowledgment body

    Raises:
        WebhookVerificationError: missing signature, missing secret or invalid signature
    """
    event = verify_webhook(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
    logger.info(f"Received event: {event.id} ({event.type})")

    result = await store_with_timeout(event, session_factory)
    outcome = result.outcome.value if result else STORE_FAILED

    # Redeliveries of an already stored event are not handed to handlers again.
    # Handlers are synchronous, so they run in the threadpool.
    if outcome != StoreOutcome.ALREADY_EXISTS.value:
        await run_in_threadpool(handlers.dispatch, event)

    annotate_webhook_span(event.id, event.type, outcome)

    webhook_deliveries_counter.labels(outcome=outcome).inc()
    return {"received": True, "eventId": event.id, "eventType": event.type}
