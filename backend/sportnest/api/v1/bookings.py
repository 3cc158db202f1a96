"""Bookings API router.

``POST /bookings`` is the only way a slot is claimed; it goes through the
reservation guard. Ownership rules: players see and cancel their own
bookings; turf owners manage bookings on **their** turfs, filtered through
``Turf.owner_id``.
"""

from __future__ import annotations

import datetime
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_current_active_user, get_db, get_reservation_guard, require_admin
from sportnest.models.booking import Booking
from sportnest.models.turf import Turf
from sportnest.models.user import User
from sportnest.schemas.auth import MessageResponse
from sportnest.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    PaymentSummary,
    ReservationResponse,
)
from sportnest.services.account_service import delete_booking as purge_booking
from sportnest.services.reservation_service import (
    ReservationGuard,
    ReservationRequest,
    cancel_booking as cancel,
    parse_booking_date,
)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_booking_for_owner(
    booking_id: uuid.UUID,
    current_user: User,
    db: AsyncSession,
) -> Booking:
    """Fetch a booking on a turf owned by the current user, else 404."""
    result = await db.execute(
        select(Booking)
        .join(Turf, Booking.turf_id == Turf.id)
        .where(Booking.id == booking_id, Turf.owner_id == current_user.id)
    )
    booking = result.scalar_one_or_none()

    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


# ---------------------------------------------------------------------------
# Player endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a slot",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    guard: ReservationGuard = Depends(get_reservation_guard),
) -> ReservationResponse:
    """Reserve ``slot`` on ``turf_id`` for ``date``.

    Returns 400 ``{"message": "This slot is already booked"}`` when another
    confirmed booking holds the slot; clients should refresh the booked-slot
    list and pick another.
    """
    reservation = await guard.reserve(
        db,
        ReservationRequest(
            user_id=current_user.id,
            turf_id=body.turf_id,
            date=body.date,
            slot=body.slot,
            payment_method=body.payment_method,
            payment_intent_id=body.payment_intent_id,
        ),
    )
    return ReservationResponse(
        booking=BookingResponse.model_validate(reservation.booking),
        payment=PaymentSummary.model_validate(reservation.payment),
    )


@router.get(
    "/slots/{turf_id}",
    response_model=list[str],
    summary="List booked slots for a turf on a date",
)
async def list_booked_slots(
    turf_id: uuid.UUID,
    date: str = Query(..., description="Calendar date, YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
    guard: ReservationGuard = Depends(get_reservation_guard),
) -> list[str]:
    """Slots already confirmed. Advisory: a slot shown free may still be taken."""
    return await guard.booked_slots(db, turf_id, parse_booking_date(date))


@router.get(
    "/history",
    response_model=list[BookingDetailResponse],
    summary="The current user's bookings, newest first",
)
async def booking_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Booking]:
    result = await db.execute(
        select(Booking).where(Booking.user_id == current_user.id).order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


@router.put(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel one of your bookings",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Cancel a confirmed booking, freeing its slot. 409 if already cancelled."""
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.user_id == current_user.id)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return await cancel(db, booking, actor_id=current_user.id)


# ---------------------------------------------------------------------------
# Owner endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/admin",
    response_model=BookingListResponse,
    summary="List bookings on the current owner's turfs",
)
async def list_owner_bookings(
    turf_id: uuid.UUID | None = Query(None, description="Filter by turf"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    date_from: datetime.date | None = Query(None, description="Bookings on or after this date"),
    date_to: datetime.date | None = Query(None, description="Bookings on or before this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> dict:
    filters = [Turf.owner_id == current_user.id]
    if turf_id is not None:
        filters.append(Booking.turf_id == turf_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if date_from is not None:
        filters.append(Booking.date >= date_from)
    if date_to is not None:
        filters.append(Booking.date <= date_to)

    count_query = select(func.count()).select_from(Booking).join(Turf, Booking.turf_id == Turf.id).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = (
        select(Booking)
        .join(Turf, Booking.turf_id == Turf.id)
        .where(*filters)
        .order_by(Booking.date.desc(), Booking.slot)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(items_query)
    return {"items": list(result.scalars().all()), "total": total}


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking's status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Booking:
    """Owners may cancel bookings on their turfs. Re-confirming is not allowed."""
    booking = await _get_booking_for_owner(booking_id, current_user, db)
    if body.status == booking.status == "confirmed":
        return booking
    if body.status == "confirmed":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A cancelled booking cannot be confirmed again; create a new booking instead",
        )
    return await cancel(db, booking, actor_id=current_user.id)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> dict:
    """Hard-delete a booking (and its payment) on one of the owner's turfs."""
    booking = await _get_booking_for_owner(booking_id, current_user, db)
    await purge_booking(db, booking)
    return {"message": "Booking deleted"}
