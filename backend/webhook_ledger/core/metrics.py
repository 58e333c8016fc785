"""Prometheus metrics for the application"""
from prometheus_client import Counter, Histogram, REGISTRY


def _collector(name):
    """Return an already-registered collector (module re-imported under a test runner)"""
    return REGISTRY._names_to_collectors.get(name)


# Webhook delivery metrics
try:
    webhook_deliveries_counter = Counter(
        'webhook_ledger_deliveries_total',
        'Webhook deliveries by terminal outcome',
        ['outcome']
    )
except ValueError:
    webhook_deliveries_counter = _collector('webhook_ledger_deliveries_total')

# Storage metrics
try:
    store_results_counter = Counter(
        'webhook_ledger_store_results_total',
        'Results of idempotent event store attempts',
        ['result']
    )
except ValueError:
    store_results_counter = _collector('webhook_ledger_store_results_total')

try:
    store_duration_histogram = Histogram(
        'webhook_ledger_store_duration_seconds',
        'Time spent storing a verified webhook event'
    )
except ValueError:
    store_duration_histogram = _collector('webhook_ledger_store_duration_seconds')

# Handler metrics
try:
    handler_errors_counter = Counter(
        'webhook_ledger_handler_errors_total',
        'Errors raised by per-type event handlers',
        ['event_type']
    )
except ValueError:
    handler_errors_counter = _collector('webhook_ledger_handler_errors_total')
