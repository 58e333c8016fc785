"""Stored events API routes"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from webhook_ledger.db.session import get_db
from webhook_ledger.schemas.events import EventListResponse, WebhookEventOut
from webhook_ledger.services.event_query import coerce_pagination, get_event, list_events

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.get("", response_model=EventListResponse)
def get_events(
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="Exact event type filter"),
    db: Session = Depends(get_db)
):
    """List stored events, newest first

    limit/offset are taken as strings so malformed values fall back to
    defaults instead of failing validation.
    """
    page_limit, page_offset = coerce_pagination(limit, offset)
    events = list_events(db, limit=page_limit, offset=page_offset, event_type=type or None)
    return EventListResponse(
        events=[WebhookEventOut.model_validate(e) for e in events],
        count=len(events),
        limit=page_limit,
        offset=page_offset
    )


@router.get(
    "/{event_id}",
    response_model=WebhookEventOut,
    responses={404: {"description": "Event not found"}}
)
def get_event_by_id(event_id: str, db: Session = Depends(get_db)):
    """Get one stored event by its provider event id"""
    event = get_event(db, event_id)
    if event is None:
        return JSONResponse(status_code=404, content={"error": "Event not found"})
    return WebhookEventOut.model_validate(event)
