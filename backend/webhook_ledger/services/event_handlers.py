"""Pluggable per-event-type handlers

The ingestion pipeline never branches on event type itself; anything
type-specific is registered here and looked up by the type string.
"""
import logging
from collections import defaultdict
from typing import Callable, Dict, List

from webhook_ledger.core.logging import webhook_logger
from webhook_ledger.core.metrics import handler_errors_counter
from webhook_ledger.services.signature_service import VerifiedEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[VerifiedEvent], None]


class EventHandlerRegistry:
    """Maps event type strings to the handlers interested in them"""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def register(self, *event_types: str):
        """Decorator registering a handler for one or more event types"""
        def decorator(func: EventHandler) -> EventHandler:
            for event_type in event_types:
                self._handlers[event_type].append(func)
            return func
        return decorator

    def handlers_for(self, event_type: str) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def dispatch(self, event: VerifiedEvent) -> int:
        """Run every handler registered for ``event.type``

        Handler failures are logged and counted, never raised.

        Returns:
            Number of handlers that completed without error
        """
        handlers = self.handlers_for(event.type)
        if not handlers:
            webhook_logger.info(f"Unhandled event type: {event.type}")
            return 0

        succeeded = 0
        for handler in handlers:
            try:
                handler(event)
                succeeded += 1
            except Exception as e:
                handler_errors_counter.labels(event_type=event.type).inc()
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)} failed for event "
                    f"{event.id} ({event.type}): {e}",
                    exc_info=True
                )
        return succeeded


registry = EventHandlerRegistry()


_DEFAULT_HANDLED = {
    "payment_intent.succeeded": "PaymentIntent succeeded",
    "payment_intent.payment_failed": "PaymentIntent failed",
    "customer.created": "Customer created",
    "customer.updated": "Customer updated",
    "invoice.payment_succeeded": "Invoice payment succeeded",
    "invoice.payment_failed": "Invoice payment failed",
    "customer.subscription.created": "Subscription created",
    "customer.subscription.updated": "Subscription updated",
    "customer.subscription.deleted": "Subscription deleted",
    "checkout.session.completed": "Checkout session completed",
    "checkout.session.async_payment_failed": "Checkout session async payment failed",
    "checkout.session.expired": "Checkout session expired",
}


@registry.register(*_DEFAULT_HANDLED)
def log_event_object(event: VerifiedEvent) -> None:
    """Default handler: record which domain object the event refers to"""
    label = _DEFAULT_HANDLED.get(event.type, event.type)
    webhook_logger.info(f"{label}: {event.data_object.get('id', 'unknown')}")
