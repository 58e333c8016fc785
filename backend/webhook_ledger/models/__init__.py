"""SQLAlchemy models package - imports all models so they register with Base.metadata"""
from webhook_ledger.models.base import Base
from webhook_ledger.models.webhook_event import WebhookEvent

# Export all for convenience
__all__ = ["Base", "WebhookEvent"]
