"""Tests for the reservation guard: admission under contention."""

import asyncio
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from sportnest.errors import (
    InvalidBookingTransition,
    InvalidDate,
    InvalidPaymentMethod,
    InvalidSlot,
    PaymentDetailMismatch,
    PaymentGatewayUnavailable,
    PaymentNotConfirmed,
    SlotAlreadyBooked,
    TurfNotFound,
)
from sportnest.models.booking import Booking
from sportnest.models.notification import Notification
from sportnest.models.payment import Payment
from sportnest.models.turf import Turf
from sportnest.services.reservation_service import (
    ReservationRequest,
    cancel_booking,
    parse_booking_date,
)

DAY = "2030-05-20"
SLOT = "18:00-19:00"


@pytest.fixture
def guard(app):
    return app.state.reservation_guard


def _request(user_id, turf_id, **overrides) -> ReservationRequest:
    fields = {
        "user_id": user_id,
        "turf_id": turf_id,
        "date": DAY,
        "slot": SLOT,
        "payment_method": "cash",
    }
    fields.update(overrides)
    return ReservationRequest(**fields)


async def _count(session_factory, model, *where) -> int:
    async with session_factory() as db:
        return (await db.execute(select(func.count()).select_from(model).where(*where))).scalar_one()


class TestParseBookingDate:
    def test_plain_date(self):
        assert parse_booking_date("2030-05-20").isoformat() == "2030-05-20"

    def test_datetime_drops_time(self):
        assert parse_booking_date("2030-05-20T23:15:00Z").isoformat() == "2030-05-20"

    def test_garbage(self):
        with pytest.raises(InvalidDate) as exc_info:
            parse_booking_date("20/05/2030")
        assert exc_info.value.details == {"date": "20/05/2030"}


class TestAdmission:
    async def test_admits_and_snapshots_owner_contact(self, guard, session_factory, test_user, test_owner, test_turf):
        turf_id = uuid.UUID(test_turf["id"])
        async with session_factory() as db:
            reservation = await guard.reserve(db, _request(test_user.id, turf_id))

        booking, payment = reservation.booking, reservation.payment
        assert booking.status == "confirmed"
        assert booking.admin_contact == {
            "name": test_owner.name,
            "phone": test_owner.phone,
            "email": test_owner.email,
        }
        assert payment.booking_id == booking.id
        assert payment.amount == Decimal("1200.00")
        assert payment.status == "pending"
        assert payment.details == {"slot": SLOT, "date": DAY, "turf_name": test_turf["name"]}
        assert await _count(session_factory, Notification, Notification.type == "booking") == 1

    async def test_duplicate_rejected(self, guard, session_factory, test_user, test_turf, create_account):
        turf_id = uuid.UUID(test_turf["id"])
        other, _ = await create_account()
        async with session_factory() as db:
            await guard.reserve(db, _request(test_user.id, turf_id))
        async with session_factory() as db:
            with pytest.raises(SlotAlreadyBooked):
                await guard.reserve(db, _request(other.id, turf_id))

        assert await _count(session_factory, Booking) == 1
        assert await _count(session_factory, Payment) == 1

    async def test_repeated_request_keeps_being_rejected(
        self, guard, session_factory, test_user, test_turf, create_account
    ):
        turf_id = uuid.UUID(test_turf["id"])
        other, _ = await create_account()
        async with session_factory() as db:
            await guard.reserve(db, _request(test_user.id, turf_id))

        for _ in range(4):
            async with session_factory() as db:
                with pytest.raises(SlotAlreadyBooked):
                    await guard.reserve(db, _request(other.id, turf_id))

        assert await _count(session_factory, Booking, Booking.status == "confirmed") == 1
        assert await _count(session_factory, Booking) == 1
        assert await _count(session_factory, Payment) == 1

    async def test_concurrent_requests_admit_exactly_one(self, guard, session_factory, test_turf, create_account):
        turf_id = uuid.UUID(test_turf["id"])
        players = [(await create_account(name=f"Player {i}"))[0] for i in range(8)]

        async def attempt(user):
            async with session_factory() as db:
                try:
                    await guard.reserve(db, _request(user.id, turf_id))
                except SlotAlreadyBooked:
                    return "rejected"
                return "admitted"

        outcomes = await asyncio.gather(*(attempt(p) for p in players))

        assert outcomes.count("admitted") == 1
        assert outcomes.count("rejected") == 7
        assert await _count(session_factory, Booking, Booking.status == "confirmed") == 1
        assert await _count(session_factory, Payment) == 1

    async def test_concurrent_requests_over_http(self, client, test_turf, create_account):
        accounts = [await create_account(name=f"Player {i}") for i in range(6)]
        body = {"turf_id": test_turf["id"], "date": DAY, "slot": SLOT, "payment_method": "cash"}

        responses = await asyncio.gather(
            *(client.post("/api/v1/bookings", json=body, headers=headers) for _, headers in accounts)
        )

        statuses = sorted(r.status_code for r in responses)
        assert statuses == [201, 400, 400, 400, 400, 400]
        rejected = [r.json() for r in responses if r.status_code == 400]
        assert all(r["message"] == "This slot is already booked" for r in rejected)

    async def test_notification_failure_keeps_booking(self, guard, session_factory, test_user, test_turf):
        turf_id = uuid.UUID(test_turf["id"])
        failing = AsyncMock(side_effect=OperationalError("INSERT INTO notifications", {}, Exception("disk full")))

        with patch("sportnest.services.reservation_service.notify_turf_owner", failing):
            async with session_factory() as db:
                reservation = await guard.reserve(db, _request(test_user.id, turf_id))

        assert reservation.booking.status == "confirmed"
        assert await _count(session_factory, Booking, Booking.id == reservation.booking.id) == 1
        assert await _count(session_factory, Payment, Payment.booking_id == reservation.booking.id) == 1
        assert await _count(session_factory, Notification) == 0


class TestPreconditionOrder:
    """The first failing check wins."""

    async def test_missing_turf_beats_bad_date(self, guard, session_factory, test_user):
        async with session_factory() as db:
            with pytest.raises(TurfNotFound):
                await guard.reserve(db, _request(test_user.id, uuid.uuid4(), date="bogus", slot="bogus"))

    async def test_bad_date_beats_bad_slot(self, guard, session_factory, test_user, test_turf):
        async with session_factory() as db:
            with pytest.raises(InvalidDate):
                await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"]), date="bogus", slot="bogus"))

    async def test_bad_slot_beats_bad_method(self, guard, session_factory, test_user, test_turf):
        async with session_factory() as db:
            with pytest.raises(InvalidSlot):
                await guard.reserve(
                    db, _request(test_user.id, uuid.UUID(test_turf["id"]), slot="bogus", payment_method="bogus")
                )

    async def test_bad_method(self, guard, session_factory, test_user, test_turf):
        async with session_factory() as db:
            with pytest.raises(InvalidPaymentMethod) as exc_info:
                await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"]), payment_method="bitcoin"))
        assert "cash" in exc_info.value.details["allowed_methods"]

    async def test_rejections_write_nothing(self, guard, session_factory, test_user, test_turf):
        async with session_factory() as db:
            with pytest.raises(InvalidSlot):
                await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"]), slot="bogus"))
        assert await _count(session_factory, Booking) == 0


class TestOnlinePayment:
    async def test_card_requires_token(self, guard, session_factory, test_user, test_turf, gateway):
        async with session_factory() as db:
            with pytest.raises(PaymentNotConfirmed):
                await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"]), payment_method="card"))
        assert gateway.verified == []

    async def test_verified_amount_recorded(self, guard, session_factory, test_user, test_turf, gateway):
        token = gateway.paid_intent(
            {"user_id": str(test_user.id), "turf_id": test_turf["id"], "date": DAY, "slot": SLOT},
            amount=Decimal("1150.00"),
        )
        async with session_factory() as db:
            reservation = await guard.reserve(
                db,
                _request(test_user.id, uuid.UUID(test_turf["id"]), payment_method="card", payment_intent_id=token),
            )
        assert reservation.payment.status == "succeeded"
        assert reservation.payment.amount == Decimal("1150.00")
        assert reservation.payment.transaction_id == token

    async def test_metadata_mismatch_lists_fields(self, guard, session_factory, test_user, test_turf, gateway):
        token = gateway.paid_intent(
            {"user_id": str(test_user.id), "turf_id": test_turf["id"], "date": "2030-05-21", "slot": "06:00-07:00"}
        )
        async with session_factory() as db:
            with pytest.raises(PaymentDetailMismatch) as exc_info:
                await guard.reserve(
                    db,
                    _request(test_user.id, uuid.UUID(test_turf["id"]), payment_method="card", payment_intent_id=token),
                )
        assert exc_info.value.details == {"fields": ["date", "slot"]}

    async def test_gateway_outage(self, guard, session_factory, test_user, test_turf, gateway):
        gateway.unavailable = True
        async with session_factory() as db:
            with pytest.raises(PaymentGatewayUnavailable) as exc_info:
                await guard.reserve(
                    db,
                    _request(test_user.id, uuid.UUID(test_turf["id"]), payment_method="card", payment_intent_id="pi_x"),
                )
        assert exc_info.value.status_code == 503
        assert exc_info.value.details["alternative_methods"] == ["cash", "phonepe", "gpay", "paytm"]

    async def test_cash_never_touches_gateway(self, guard, session_factory, test_user, test_turf, gateway):
        gateway.unavailable = True
        async with session_factory() as db:
            reservation = await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"])))
        assert reservation.booking.status == "confirmed"


class TestCancellation:
    async def test_cancel_then_rebook(self, guard, session_factory, test_user, test_turf, create_account):
        turf_id = uuid.UUID(test_turf["id"])
        async with session_factory() as db:
            reservation = await guard.reserve(db, _request(test_user.id, turf_id))

        async with session_factory() as db:
            booking = await db.get(Booking, reservation.booking.id)
            await cancel_booking(db, booking, actor_id=test_user.id)
            await db.commit()

        other, _ = await create_account()
        async with session_factory() as db:
            rebooked = await guard.reserve(db, _request(other.id, turf_id))
            assert await guard.booked_slots(db, turf_id, parse_booking_date(DAY)) == [SLOT]

        assert rebooked.booking.id != reservation.booking.id
        assert await _count(session_factory, Booking, Booking.status == "cancelled") == 1

    async def test_cancel_is_one_way(self, guard, session_factory, test_user, test_turf):
        async with session_factory() as db:
            reservation = await guard.reserve(db, _request(test_user.id, uuid.UUID(test_turf["id"])))

        async with session_factory() as db:
            booking = await db.get(Booking, reservation.booking.id)
            await cancel_booking(db, booking, actor_id=test_user.id)
            with pytest.raises(InvalidBookingTransition):
                await cancel_booking(db, booking, actor_id=test_user.id)
            await db.rollback()

    async def test_turf_price_change_does_not_touch_existing_payment(
        self, guard, session_factory, test_user, test_turf
    ):
        turf_id = uuid.UUID(test_turf["id"])
        async with session_factory() as db:
            reservation = await guard.reserve(db, _request(test_user.id, turf_id))

        async with session_factory() as db:
            turf = await db.get(Turf, turf_id)
            turf.price = Decimal("2000.00")
            await db.commit()

        async with session_factory() as db:
            payment = await db.get(Payment, reservation.payment.id)
            assert payment.amount == Decimal("1200.00")
