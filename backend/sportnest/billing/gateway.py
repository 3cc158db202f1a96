"""Payment confirmation adapter.

The reservation guard only needs two things from a payment processor: start
a payment for a slot, and later confirm that a given token really paid for
that slot. ``PaymentGateway`` is that contract; ``StripePaymentGateway``
fulfils it with Stripe PaymentIntents.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

import stripe

from sportnest.billing import stripe_client
from sportnest.config import Settings

logger = logging.getLogger(__name__)

# https://docs.stripe.com/currencies#zero-decimal
_ZERO_DECIMAL_CURRENCIES = frozenset(
    {"bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga", "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf"}
)


class PaymentGatewayError(Exception):
    """The processor failed to answer (network, auth, rate limit, outage)."""


@dataclass(frozen=True)
class PaymentInitiation:
    confirmation_token: str
    client_secret: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class PaymentVerification:
    status: str  # succeeded, processing, requires_payment_method, ..., invalid
    metadata: dict[str, str] = field(default_factory=dict)
    amount: Decimal | None = None
    currency: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGateway(Protocol):
    async def initiate(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> PaymentInitiation: ...

    async def verify(self, confirmation_token: str) -> PaymentVerification: ...


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Convert a major-unit amount (rupees) to the processor's minor unit (paise)."""
    if currency.lower() in _ZERO_DECIMAL_CURRENCIES:
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, currency: str) -> Decimal:
    if currency.lower() in _ZERO_DECIMAL_CURRENCIES:
        return Decimal(amount)
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


def _metadata_dict(metadata: Any) -> dict[str, str]:
    """Flatten Stripe's metadata object into a plain ``dict[str, str]``."""
    if metadata is None:
        return {}
    if hasattr(metadata, "to_dict"):
        metadata = metadata.to_dict()
    return {str(key): str(value) for key, value in dict(metadata).items()}


class StripePaymentGateway:
    """``PaymentGateway`` backed by Stripe PaymentIntents."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def initiate(self, amount: Decimal, currency: str, metadata: dict[str, str]) -> PaymentInitiation:
        try:
            intent = await stripe_client.create_payment_intent(
                self._settings,
                amount_minor=to_minor_units(amount, currency),
                currency=currency,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.warning("Stripe payment intent creation failed: %s", e)
            raise PaymentGatewayError(str(e)) from e

        return PaymentInitiation(
            confirmation_token=intent.id,
            client_secret=intent.client_secret,
            amount=amount,
            currency=currency,
        )

    async def verify(self, confirmation_token: str) -> PaymentVerification:
        try:
            intent = await stripe_client.retrieve_payment_intent(self._settings, confirmation_token)
        except stripe.InvalidRequestError:
            # Unknown or malformed token: nothing was paid with it
            logger.info("Payment intent %s not found at Stripe", confirmation_token)
            return PaymentVerification(status="invalid")
        except stripe.StripeError as e:
            logger.warning("Stripe payment intent lookup failed for %s: %s", confirmation_token, e)
            raise PaymentGatewayError(str(e)) from e

        amount_minor = intent.amount_received or intent.amount
        return PaymentVerification(
            status=intent.status,
            metadata=_metadata_dict(intent.metadata),
            amount=from_minor_units(amount_minor, intent.currency) if amount_minor is not None else None,
            currency=intent.currency,
        )
