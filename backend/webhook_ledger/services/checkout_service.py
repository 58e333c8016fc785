import logging
import stripe
from typing import Dict, Optional

from webhook_ledger.core.config import settings
from webhook_ledger.core.exceptions import CheckoutError

logger = logging.getLogger(__name__)

# Configure Stripe
stripe.api_key = settings.STRIPE_SECRET_KEY


def create_checkout_session(
    amount: int,
    currency: str = "usd",
    product_name: str = "Custom Payment",
    metadata: Optional[Dict[str, str]] = None
) -> Dict:
    """Create a one-off card payment Checkout Session

    Pass-through to the provider: arguments are forwarded and the session
    id and hosted URL returned.

    Args:
        amount: Amount in the smallest currency unit (cents)
        currency: ISO currency code
        product_name: Line item name shown on the checkout page
        metadata: Free-form key/value pairs attached to the session

    Raises:
        CheckoutError: No API key configured or the provider rejected the request
    """
    if not settings.STRIPE_SECRET_KEY:
        raise CheckoutError("Stripe secret key not configured")

    base_url = settings.PUBLIC_BASE_URL.rstrip("/")
    try:
        session = stripe.checkout.Session.create(
            api_key=settings.STRIPE_SECRET_KEY,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": product_name},
                    "unit_amount": amount,
                },
                "quantity": 1,
            }],
            mode="payment",
            success_url=f"{base_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/cancel",
            metadata=metadata or {},
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating checkout session: {e}")
        raise CheckoutError(str(e)) from e

    logger.info(f"Created checkout session {session.id} for {amount} {currency}")
    return {"id": session.id, "url": session.url}
