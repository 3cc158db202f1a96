"""Tests for the Stripe-backed payment gateway with the Stripe API mocked."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe

from sportnest.billing.gateway import (
    PaymentGatewayError,
    StripePaymentGateway,
    from_minor_units,
    to_minor_units,
)
from sportnest.config import Settings


@pytest.fixture
def stripe_gateway() -> StripePaymentGateway:
    return StripePaymentGateway(Settings(jwt_secret_key="unit-test-secret", stripe_secret_key="sk_test_dummy"))


class TestMinorUnits:
    def test_rupees_to_paise(self):
        assert to_minor_units(Decimal("1200.50"), "inr") == 120050

    def test_zero_decimal_currency(self):
        assert to_minor_units(Decimal("1500"), "JPY") == 1500
        assert from_minor_units(1500, "jpy") == Decimal("1500")

    def test_paise_to_rupees(self):
        assert from_minor_units(120050, "inr") == Decimal("1200.50")


class TestInitiate:
    async def test_returns_intent_token(self, stripe_gateway):
        intent = SimpleNamespace(id="pi_123", client_secret="pi_123_secret")
        create = AsyncMock(return_value=intent)
        with patch("sportnest.billing.stripe_client.create_payment_intent", create):
            initiation = await stripe_gateway.initiate(Decimal("1200.00"), "inr", {"slot": "06:00-07:00"})

        assert initiation.confirmation_token == "pi_123"
        assert initiation.client_secret == "pi_123_secret"
        assert create.await_args.kwargs["amount_minor"] == 120000
        assert create.await_args.kwargs["metadata"] == {"slot": "06:00-07:00"}

    async def test_stripe_error_becomes_gateway_error(self, stripe_gateway):
        create = AsyncMock(side_effect=stripe.APIConnectionError("network down"))
        with patch("sportnest.billing.stripe_client.create_payment_intent", create):
            with pytest.raises(PaymentGatewayError):
                await stripe_gateway.initiate(Decimal("1200.00"), "inr", {})


class TestVerify:
    async def test_succeeded_intent(self, stripe_gateway):
        intent = SimpleNamespace(
            id="pi_123",
            status="succeeded",
            metadata={"user_id": "u1", "slot": "06:00-07:00"},
            amount=120000,
            amount_received=120000,
            currency="inr",
        )
        with patch("sportnest.billing.stripe_client.retrieve_payment_intent", AsyncMock(return_value=intent)):
            verification = await stripe_gateway.verify("pi_123")

        assert verification.succeeded is True
        assert verification.metadata == {"user_id": "u1", "slot": "06:00-07:00"}
        assert verification.amount == Decimal("1200.00")
        assert verification.currency == "inr"

    async def test_processing_intent_not_succeeded(self, stripe_gateway):
        intent = SimpleNamespace(status="processing", metadata=None, amount=120000, amount_received=0, currency="inr")
        with patch("sportnest.billing.stripe_client.retrieve_payment_intent", AsyncMock(return_value=intent)):
            verification = await stripe_gateway.verify("pi_123")

        assert verification.succeeded is False
        assert verification.metadata == {}

    async def test_unknown_intent_is_invalid(self, stripe_gateway):
        missing = AsyncMock(side_effect=stripe.InvalidRequestError("No such payment_intent: 'pi_x'", "id"))
        with patch("sportnest.billing.stripe_client.retrieve_payment_intent", missing):
            verification = await stripe_gateway.verify("pi_x")
        assert verification.status == "invalid"

    async def test_connection_failure_raises(self, stripe_gateway):
        down = AsyncMock(side_effect=stripe.APIConnectionError("network down"))
        with patch("sportnest.billing.stripe_client.retrieve_payment_intent", down):
            with pytest.raises(PaymentGatewayError):
                await stripe_gateway.verify("pi_123")
