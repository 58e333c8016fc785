"""Read-only queries over stored webhook events"""
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from webhook_ledger.core.config import settings
from webhook_ledger.models.webhook_event import WebhookEvent


def _to_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def coerce_pagination(raw_limit: Any = None, raw_offset: Any = None) -> Tuple[int, int]:
    """Turn untrusted query values into a usable (limit, offset)

    Missing or non-numeric values fall back to the defaults, negatives
    are clamped to zero and the limit is capped. Never raises.
    """
    limit = _to_int(raw_limit, settings.EVENTS_DEFAULT_LIMIT)
    offset = _to_int(raw_offset, 0)
    limit = min(max(limit, 0), settings.EVENTS_MAX_LIMIT)
    offset = max(offset, 0)
    return limit, offset


def list_events(
    db: Session,
    limit: int = 50,
    offset: int = 0,
    event_type: Optional[str] = None
) -> List[WebhookEvent]:
    """Newest-first page of stored events, optionally filtered by exact type"""
    stmt = select(WebhookEvent)
    if event_type:
        stmt = stmt.where(WebhookEvent.event_type == event_type)
    stmt = (
        stmt.order_by(WebhookEvent.received_at.desc(), WebhookEvent.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars().all())


def get_event(db: Session, external_event_id: str) -> Optional[WebhookEvent]:
    """Stored event with exactly this external id, or None"""
    return db.execute(
        select(WebhookEvent).where(WebhookEvent.external_event_id == external_event_id)
    ).scalar_one_or_none()
