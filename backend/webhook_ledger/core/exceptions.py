"""Exceptions raised while verifying inbound webhook deliveries"""


class WebhookLedgerError(Exception):
    """Base exception for the webhook ledger."""

    pass


class WebhookVerificationError(WebhookLedgerError):
    """A delivery could not be turned into a trusted event.

    ``status_code`` is the HTTP status the ingestion endpoint answers with.
    """

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingSignatureError(WebhookVerificationError):
    """Raised when the delivery carries no signature header."""

    def __init__(self):
        super().__init__("No stripe-signature header value was provided.")


class MissingSecretError(WebhookVerificationError):
    """Raised when no webhook signing secret is configured (operator error)."""

    status_code = 500

    def __init__(self):
        super().__init__("Webhook secret not configured")


class InvalidSignatureError(WebhookVerificationError):
    """Raised when the signature does not verify against the raw payload."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Webhook signature verification failed: {reason}")


class CheckoutError(WebhookLedgerError):
    """Raised when a checkout session cannot be created."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnsupportedDatabaseError(WebhookLedgerError):
    """Raised when the configured database has no insert-or-ignore statement."""

    def __init__(self, dialect_name: str):
        self.dialect_name = dialect_name
        super().__init__(f"No insert-or-ignore support for database dialect '{dialect_name}'")
