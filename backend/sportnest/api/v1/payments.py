"""Payments API router — start an online payment for a slot, list payment history."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_current_active_user, get_db, get_payment_gateway, get_settings
from sportnest.billing.gateway import PaymentGateway, PaymentGatewayError
from sportnest.config import Settings
from sportnest.errors import InvalidSlot, PaymentGatewayUnavailable, TurfNotFound
from sportnest.models.payment import Payment
from sportnest.models.turf import Turf
from sportnest.models.user import User
from sportnest.schemas.booking import PaymentIntentCreate, PaymentIntentResponse, PaymentResponse
from sportnest.services.reservation_service import parse_booking_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.post("/intents", response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: PaymentIntentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> PaymentIntentResponse:
    """Start a card payment for one hour on a turf.

    The returned ``payment_intent_id`` is bound to (user, turf, date, slot);
    pass it to ``POST /bookings`` once the client has confirmed the payment.
    """
    turf = await db.get(Turf, body.turf_id)
    if turf is None:
        raise TurfNotFound()

    booking_date = parse_booking_date(body.date)
    if body.slot not in settings.booking_slots:
        raise InvalidSlot(details={"allowed_slots": list(settings.booking_slots)})

    metadata = {
        "user_id": str(current_user.id),
        "turf_id": str(turf.id),
        "date": booking_date.isoformat(),
        "slot": body.slot,
    }
    try:
        initiation = await gateway.initiate(turf.price, settings.stripe_currency, metadata)
    except PaymentGatewayError as e:
        logger.warning("Could not start payment for turf %s: %s", turf.id, e)
        raise PaymentGatewayUnavailable(
            details={
                "suggest_alternative_payment": True,
                "alternative_methods": settings.pay_at_venue_methods,
            }
        ) from e

    return PaymentIntentResponse(
        payment_intent_id=initiation.confirmation_token,
        client_secret=initiation.client_secret,
        amount=initiation.amount,
        currency=initiation.currency,
    )


@router.get("", response_model=list[PaymentResponse])
async def list_payments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PaymentResponse]:
    """The current user's payments, newest first."""
    result = await db.execute(
        select(Payment).where(Payment.user_id == current_user.id).order_by(Payment.created_at.desc())
    )
    payments = []
    for payment in result.scalars().all():
        details = payment.details or {}
        payments.append(
            PaymentResponse(
                id=payment.id,
                booking_id=payment.booking_id,
                turf_id=payment.turf_id,
                amount=payment.amount,
                currency=payment.currency,
                payment_method=payment.payment_method,
                status=payment.status,
                transaction_id=payment.transaction_id,
                created_at=payment.created_at,
                turf_name=payment.turf.name if payment.turf else details.get("turf_name"),
                date=details.get("date"),
                slot=details.get("slot"),
            )
        )
    return payments
