"""Stripe webhook event handlers: admit bookings paid for asynchronously."""

import logging
import uuid

import stripe
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.errors import (
    InvalidDate,
    InvalidPaymentMethod,
    InvalidSlot,
    PaymentDetailMismatch,
    PaymentNotConfirmed,
    SlotAlreadyBooked,
    TurfNotFound,
)
from sportnest.models.payment import Payment
from sportnest.services.reservation_service import ReservationGuard, ReservationRequest

logger = logging.getLogger(__name__)

_REQUIRED_METADATA = ("user_id", "turf_id", "date", "slot")

# Rejections that redelivering the same event cannot change
_FINAL_REJECTIONS = (
    TurfNotFound,
    InvalidDate,
    InvalidSlot,
    InvalidPaymentMethod,
    PaymentNotConfirmed,
    PaymentDetailMismatch,
)


async def _get_payment_by_transaction(db: AsyncSession, transaction_id: str) -> Payment | None:
    result = await db.execute(select(Payment).where(Payment.transaction_id == transaction_id))
    return result.scalar_one_or_none()


def _metadata(intent) -> dict[str, str]:
    metadata = getattr(intent, "metadata", None) or {}
    return {key: metadata[key] for key in _REQUIRED_METADATA if key in metadata}


async def handle_payment_intent_succeeded(
    db: AsyncSession, event: stripe.Event, guard: ReservationGuard
) -> None:
    """Handle payment_intent.succeeded: admit the booking the intent paid for.

    Usually the client has already booked with the intent id; the event is
    then a no-op.
    """
    intent = event.data.object

    if await _get_payment_by_transaction(db, intent.id) is not None:
        logger.info("Payment intent %s already settled a booking, skipping", intent.id)
        return

    metadata = _metadata(intent)
    missing = [key for key in _REQUIRED_METADATA if key not in metadata]
    if missing:
        logger.warning("Payment intent %s lacks booking metadata %s, skipping", intent.id, missing)
        return

    try:
        request = ReservationRequest(
            user_id=uuid.UUID(metadata["user_id"]),
            turf_id=uuid.UUID(metadata["turf_id"]),
            date=metadata["date"],
            slot=metadata["slot"],
            payment_method="card",
            payment_intent_id=intent.id,
        )
    except ValueError:
        logger.warning("Payment intent %s has malformed ids in metadata, skipping", intent.id)
        return

    # PaymentGatewayUnavailable and ReservationFailed propagate so Stripe redelivers the event
    try:
        reservation = await guard.reserve(db, request)
    except SlotAlreadyBooked:
        # Paid but not admitted; refunds are issued by operators
        logger.error(
            "Payment intent %s paid for %s %s on turf %s but the slot is taken",
            intent.id,
            request.date,
            request.slot,
            request.turf_id,
        )
        return
    except _FINAL_REJECTIONS as e:
        logger.warning("Payment intent %s could not be admitted: %s (%s)", intent.id, e.message, e.kind.value)
        return

    logger.info("Webhook admitted booking %s from payment intent %s", reservation.booking.id, intent.id)


async def handle_payment_intent_failed(
    db: AsyncSession, event: stripe.Event, guard: ReservationGuard
) -> None:
    """Handle payment_intent.payment_failed: mark a matching payment as failed."""
    intent = event.data.object

    payment = await _get_payment_by_transaction(db, intent.id)
    if payment is None:
        logger.info("Payment intent %s failed before any booking was made", intent.id)
        return

    payment.status = "failed"
    await db.flush()
    logger.info("Payment %s (intent %s) marked as failed", payment.id, intent.id)
