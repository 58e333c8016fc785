"""Webhook signature verification

Wraps ``stripe.Webhook.construct_event``. The payload handed in must be the
request body exactly as received: parsing and re-serializing JSON changes key
order, whitespace and number formatting, and the HMAC will never match.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import stripe

from webhook_ledger.core.config import settings
from webhook_ledger.core.exceptions import (
    InvalidSignatureError, MissingSecretError, MissingSignatureError
)

logger = logging.getLogger(__name__)

NOT_AN_EVENT = "Payload is not a provider event (missing id or type)"


@dataclass(frozen=True)
class VerifiedEvent:
    """A provider event whose signature has been checked"""
    id: str
    type: str
    body: Dict[str, Any] = field(repr=False)

    @property
    def data_object(self) -> Dict[str, Any]:
        """The domain object the event is about (``data.object``), if any"""
        data = self.body.get("data") or {}
        return data.get("object") or {}


def verify_webhook(
    payload: Union[bytes, bytearray],
    sig_header: Optional[str],
    secret: Optional[str],
    tolerance: Optional[int] = None
) -> VerifiedEvent:
    """Verify a webhook delivery and decode it

    Args:
        payload: Raw request body bytes
        sig_header: Value of the Stripe-Signature header
        secret: Webhook signing secret (whsec_...)
        tolerance: Maximum age of the signed timestamp in seconds

    Returns:
        VerifiedEvent with the full decoded body

    Raises:
        MissingSignatureError: No signature header (checked first)
        MissingSecretError: No signing secret configured
        InvalidSignatureError: Any other verification failure
        TypeError: payload is not a byte buffer
    """
    if not sig_header:
        raise MissingSignatureError()

    if not secret:
        raise MissingSecretError()

    if not isinstance(payload, (bytes, bytearray)):
        raise TypeError(
            f"Webhook payload must be the raw request bytes, got {type(payload).__name__}"
        )

    if tolerance is None:
        tolerance = settings.STRIPE_WEBHOOK_TOLERANCE

    raw = bytes(payload)
    try:
        stripe.Webhook.construct_event(raw, sig_header, secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as e:
        raise InvalidSignatureError(str(e)) from e
    except ValueError as e:
        # Undecodable or non-JSON body
        raise InvalidSignatureError(f"Invalid payload: {e}") from e
    except (AttributeError, TypeError) as e:
        # Signed JSON that is not an object ([], "text", 42) fails inside Event.construct_from
        raise InvalidSignatureError(NOT_AN_EVENT) from e

    body = json.loads(raw.decode("utf-8"))
    if not isinstance(body, dict) or not body.get("id") or not body.get("type"):
        raise InvalidSignatureError(NOT_AN_EVENT)

    return VerifiedEvent(id=str(body["id"]), type=str(body["type"]), body=body)
