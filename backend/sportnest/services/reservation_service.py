"""Slot reservation — admission of bookings under concurrent demand.

Admission is a single insert guarded by the partial unique index
``uq_bookings_turf_date_slot_confirmed``: the database, not a prior read,
decides which of several concurrent requests for the same
(turf, date, slot) wins. The losers get ``SlotAlreadyBooked``.
"""

import datetime
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.billing.gateway import PaymentGateway, PaymentGatewayError, PaymentVerification
from sportnest.config import Settings
from sportnest.errors import (
    InvalidBookingTransition,
    InvalidDate,
    InvalidPaymentMethod,
    InvalidSlot,
    PaymentDetailMismatch,
    PaymentGatewayUnavailable,
    PaymentNotConfirmed,
    ReservationFailed,
    SlotAlreadyBooked,
    TurfNotFound,
)
from sportnest.models.booking import Booking
from sportnest.models.payment import Payment
from sportnest.models.turf import Turf
from sportnest.models.user import User
from sportnest.services.notification_service import booking_message, cancellation_message, notify_turf_owner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationRequest:
    """What a user asked for; ``date`` is the raw client string."""

    user_id: uuid.UUID
    turf_id: uuid.UUID
    date: str
    slot: str
    payment_method: str
    payment_intent_id: str | None = None


@dataclass(frozen=True)
class Reservation:
    booking: Booking
    payment: Payment


def parse_booking_date(value: str) -> datetime.date:
    """Parse ``YYYY-MM-DD`` or an ISO datetime, dropping any time of day."""
    value = (value or "").strip()
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidDate(details={"date": value}) from None


class ReservationGuard:
    """Grants or denies bookings for (turf, date, slot) tuples."""

    def __init__(self, settings: Settings, gateway: PaymentGateway) -> None:
        self._settings = settings
        self._gateway = gateway

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    async def reserve(self, db: AsyncSession, request: ReservationRequest) -> Reservation:
        """Admit a booking or raise the first failed precondition.

        Checks, in order: turf exists, date parses, slot is a known token,
        payment method is accepted, and for online methods that the payment
        token was paid for exactly this (user, turf, date, slot). Then inserts
        the booking and its payment in one transaction.
        """
        turf = await db.get(Turf, request.turf_id)
        if turf is None:
            raise TurfNotFound()

        booking_date = parse_booking_date(request.date)

        if request.slot not in self._settings.booking_slots:
            raise InvalidSlot(details={"allowed_slots": list(self._settings.booking_slots)})

        if request.payment_method not in self._settings.payment_methods:
            raise InvalidPaymentMethod(details={"allowed_methods": list(self._settings.payment_methods)})

        verification = None
        if request.payment_method in self._settings.online_payment_methods:
            # End the read transaction so no lock is held across the processor call
            await db.commit()
            verification = await self._confirm_payment(request, booking_date)

        try:
            return await self._admit(db, request, turf, booking_date, verification)
        except SQLAlchemyError as e:
            logger.exception(
                "Reservation failed for user %s on turf %s (%s %s)",
                request.user_id,
                request.turf_id,
                request.date,
                request.slot,
            )
            await db.rollback()
            raise ReservationFailed() from e

    async def _confirm_payment(
        self,
        request: ReservationRequest,
        booking_date: datetime.date,
    ) -> PaymentVerification:
        if not request.payment_intent_id:
            raise PaymentNotConfirmed("Please complete the online payment before booking")

        try:
            verification = await self._gateway.verify(request.payment_intent_id)
        except PaymentGatewayError as e:
            logger.warning("Payment gateway unavailable while verifying %s: %s", request.payment_intent_id, e)
            raise PaymentGatewayUnavailable(
                details={
                    "suggest_alternative_payment": True,
                    "alternative_methods": self._settings.pay_at_venue_methods,
                }
            ) from e

        if not verification.succeeded:
            raise PaymentNotConfirmed(details={"payment_status": verification.status})

        expected = {
            "user_id": str(request.user_id),
            "turf_id": str(request.turf_id),
            "date": booking_date.isoformat(),
            "slot": request.slot,
        }
        mismatched = sorted(key for key, value in expected.items() if verification.metadata.get(key) != value)
        if mismatched:
            logger.warning("Payment %s does not match booking request on %s", request.payment_intent_id, mismatched)
            raise PaymentDetailMismatch(details={"fields": mismatched})

        return verification

    async def _admit(
        self,
        db: AsyncSession,
        request: ReservationRequest,
        turf: Turf,
        booking_date: datetime.date,
        verification: PaymentVerification | None,
    ) -> Reservation:
        # The turf may come from the identity map with relationships unloaded
        owner = await db.get(User, turf.owner_id)
        booking = Booking(
            user_id=request.user_id,
            turf_id=turf.id,
            date=booking_date,
            slot=request.slot,
            status="confirmed",
            payment_method=request.payment_method,
            admin_contact_name=owner.name,
            admin_contact_phone=owner.phone,
            admin_contact_email=owner.email,
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.info(
                "Rejected booking for turf %s on %s at %s by user %s: slot taken",
                request.turf_id,
                booking_date,
                request.slot,
                request.user_id,
            )
            raise SlotAlreadyBooked() from None

        if verification is not None:
            payment = Payment(
                user_id=request.user_id,
                booking_id=booking.id,
                turf_id=turf.id,
                amount=verification.amount if verification.amount is not None else turf.price,
                currency=verification.currency or self._settings.stripe_currency,
                payment_method=request.payment_method,
                status="succeeded",
                transaction_id=request.payment_intent_id,
                details={"slot": request.slot, "date": booking_date.isoformat(), "turf_name": turf.name},
            )
        else:
            payment = Payment(
                user_id=request.user_id,
                booking_id=booking.id,
                turf_id=turf.id,
                amount=turf.price,
                currency=self._settings.stripe_currency,
                payment_method=request.payment_method,
                status="pending",
                details={"slot": request.slot, "date": booking_date.isoformat(), "turf_name": turf.name},
            )
        db.add(payment)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Payment %s already settles another booking", request.payment_intent_id)
            raise PaymentDetailMismatch("This payment has already been used for another booking") from None

        await db.refresh(booking)
        await db.refresh(payment)
        await db.commit()
        logger.info(
            "Admitted booking %s for turf %s on %s at %s (user %s, %s)",
            booking.id,
            turf.id,
            booking_date,
            request.slot,
            request.user_id,
            request.payment_method,
        )

        await self._notify_owner(db, request, turf, booking, payment)
        return Reservation(booking=booking, payment=payment)

    async def _notify_owner(
        self,
        db: AsyncSession,
        request: ReservationRequest,
        turf: Turf,
        booking: Booking,
        payment: Payment,
    ) -> None:
        """Tell the owner about the booking; a failure here never undoes admission."""
        try:
            await notify_turf_owner(
                db,
                actor_id=request.user_id,
                turf=turf,
                notification_type="booking",
                message=booking_message(turf, booking.date, booking.slot),
            )
            await db.commit()
        except SQLAlchemyError:
            logger.exception("Could not notify owner of turf %s about booking %s", turf.id, booking.id)
            await db.rollback()
            await db.refresh(booking)
            await db.refresh(payment)

    # ------------------------------------------------------------------
    # Queries and transitions
    # ------------------------------------------------------------------

    async def booked_slots(self, db: AsyncSession, turf_id: uuid.UUID, on_date: datetime.date) -> list[str]:
        """Slot tokens currently held by confirmed bookings. Advisory only."""
        result = await db.execute(
            select(Booking.slot)
            .where(
                Booking.turf_id == turf_id,
                Booking.date == on_date,
                Booking.status == "confirmed",
            )
            .order_by(Booking.slot)
        )
        return list(result.scalars().all())


async def cancel_booking(db: AsyncSession, booking: Booking, *, actor_id: uuid.UUID) -> Booking:
    """Move a booking ``confirmed -> cancelled`` and notify the turf owner.

    The slot becomes available to fresh bookings; the cancelled row is never
    revived.
    """
    if booking.status != "confirmed":
        raise InvalidBookingTransition()

    booking.status = "cancelled"
    db.add(booking)
    await db.flush()

    turf = booking.turf
    await notify_turf_owner(
        db,
        actor_id=actor_id,
        turf=turf,
        notification_type="cancellation",
        message=cancellation_message(turf, booking.date, booking.slot),
    )
    await db.refresh(booking)
    logger.info("Booking %s cancelled by %s", booking.id, actor_id)
    return booking
