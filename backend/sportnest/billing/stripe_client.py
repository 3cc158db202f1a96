"""Async Stripe API wrapper for SportNest."""

import logging

import stripe
from stripe import StripeClient

from sportnest.config import Settings

logger = logging.getLogger(__name__)


def get_stripe_client(settings: Settings) -> StripeClient:
    """Create a StripeClient instance with async HTTP support.

    The SDK retries connection failures with exponential backoff, bounded by
    ``stripe_max_network_retries``.
    """
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
        max_network_retries=settings.stripe_max_network_retries,
    )


async def create_payment_intent(
    settings: Settings,
    amount_minor: int,
    currency: str,
    metadata: dict[str, str],
) -> stripe.PaymentIntent:
    """Create a PaymentIntent for a single slot booking."""
    client = get_stripe_client(settings)
    logger.info(
        "Creating payment intent for turf %s (%s %s)",
        metadata.get("turf_id"),
        amount_minor,
        currency,
    )
    return await client.v1.payment_intents.create_async(
        params={
            "amount": amount_minor,
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
    )


async def retrieve_payment_intent(settings: Settings, payment_intent_id: str) -> stripe.PaymentIntent:
    """Retrieve a PaymentIntent by ID."""
    client = get_stripe_client(settings)
    return await client.v1.payment_intents.retrieve_async(payment_intent_id)


def construct_webhook_event(settings: Settings, payload: bytes, sig_header: str) -> stripe.Event:
    """Verify and construct a Stripe webhook event (synchronous)."""
    client = get_stripe_client(settings)
    return client.construct_event(payload, sig_header, settings.stripe_webhook_secret)
