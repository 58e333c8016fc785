"""Idempotent persistence of verified webhook events"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from webhook_ledger.core.exceptions import UnsupportedDatabaseError
from webhook_ledger.models.webhook_event import WebhookEvent
from webhook_ledger.services.signature_service import VerifiedEvent

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class StoreOutcome(str, enum.Enum):
    STORED = "stored"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class StoreResult:
    outcome: StoreOutcome
    row_id: Optional[int] = None

    @property
    def stored(self) -> bool:
        return self.outcome is StoreOutcome.STORED


def _conditional_insert(dialect_name: str):
    try:
        return _INSERT_BY_DIALECT[dialect_name]
    except KeyError:
        raise UnsupportedDatabaseError(dialect_name)


def store_event_if_absent(db: Session, event: VerifiedEvent) -> StoreResult:
    """Insert ``event`` unless a row with the same external id already exists

    A single ``INSERT ... ON CONFLICT (external_event_id) DO NOTHING``
    round trip; the unique constraint decides the winner when the same
    event is delivered concurrently. A conflict is reported as
    ALREADY_EXISTS, not an error.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: for anything other than the duplicate-key case
        UnsupportedDatabaseError: the bound dialect is neither PostgreSQL nor SQLite
    """
    insert = _conditional_insert(db.get_bind().dialect.name)
    now = datetime.now(timezone.utc)

    stmt = (
        insert(WebhookEvent)
        .values(
            external_event_id=event.id,
            event_type=event.type,
            payload=event.body,
            received_at=now,
            processed_at=now,
        )
        .on_conflict_do_nothing(index_elements=["external_event_id"])
        .returning(WebhookEvent.id)
    )

    try:
        row_id = db.execute(stmt).scalar_one_or_none()
        db.commit()
    except Exception:
        db.rollback()
        raise

    if row_id is None:
        logger.info(f"Event {event.id} already exists in database (duplicate)")
        return StoreResult(StoreOutcome.ALREADY_EXISTS)

    logger.info(f"Stored event {event.id} ({event.type}) in database as row {row_id}")
    return StoreResult(StoreOutcome.STORED, row_id=row_id)
