"""Logging configuration for the application"""
import logging

from webhook_ledger.core.config import settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("stripe", "urllib3", "sqlalchemy.engine", "opentelemetry.exporter")

# Named loggers shared across modules
webhook_logger = logging.getLogger("webhook")
api_access_logger = logging.getLogger("api_access")


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging():
    """Configure root logging plus the webhook and access-log levels

    ``LOG_LEVEL`` sets the root level. ``WEBHOOK_LOG_LEVEL`` and
    ``ACCESS_LOG_LEVEL`` tune the per-event and per-request loggers
    separately, so a busy endpoint can be quietened without losing
    delivery logs.
    """
    logging.basicConfig(
        level=_level(settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        force=True
    )

    webhook_logger.setLevel(_level(settings.WEBHOOK_LOG_LEVEL))
    api_access_logger.setLevel(_level(settings.ACCESS_LOG_LEVEL))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
