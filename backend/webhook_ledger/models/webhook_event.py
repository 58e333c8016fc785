"""WebhookEvent model"""
from sqlalchemy import Column, Integer, String, JSON, DateTime, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone
from webhook_ledger.models.base import Base


def utcnow():
    return datetime.now(timezone.utc)


class WebhookEvent(Base):
    """Verified provider webhook event, stored once per external event id

    Rows are append-only: nothing in the application updates or deletes them.
    """
    __tablename__ = "webhook_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_event_id = Column(String(255), nullable=False)
    event_type = Column(String(255), nullable=False)
    payload = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    received_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Set together with received_at; kept separate so handler processing can be decoupled later
    processed_at = Column(DateTime(timezone=True), default=utcnow, nullable=True)

    __table_args__ = (
        UniqueConstraint('external_event_id', name='uq_webhook_events_external_event_id'),
        Index('ix_webhook_events_event_type', 'event_type'),
        Index('ix_webhook_events_received_at', 'received_at'),
    )

    def __repr__(self):
        return f"<WebhookEvent {self.external_event_id} ({self.event_type})>"
