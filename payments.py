"""Stripe payment intents for contest registration fees."""
import logging
import math
from typing import Optional

import stripe

from errors import PaymentProviderError, PaymentValidationError

logger = logging.getLogger(__name__)


def price_to_cents(price: Optional[float]) -> int:
    """Dollar price to integer cents; at least one cent is required."""
    if price is None:
        raise PaymentValidationError("price is required")
    if not math.isfinite(price):
        raise PaymentValidationError("price must be a finite number")
    amount = round(price * 100)
    if amount < 1:
        raise PaymentValidationError("price must be at least 0.01")
    return amount


def create_payment_intent(price: Optional[float], api_key: str, currency: str = "usd") -> str:
    """Create a PaymentIntent and return only its client secret."""
    amount = price_to_cents(price)
    try:
        intent = stripe.PaymentIntent.create(
            amount=amount,
            currency=currency,
            payment_method_types=["card"],
            api_key=api_key,
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe PaymentIntent.create failed: {e}")
        raise PaymentProviderError(type(e).__name__)
    logger.info(f"Created payment intent: {amount} ({currency}, minor units)")
    return intent["client_secret"]
