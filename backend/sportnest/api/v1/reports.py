"""Reports API router — revenue and booking metrics for turf owners."""

from __future__ import annotations

import uuid
from collections import Counter, defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_db, get_settings, require_admin
from sportnest.config import Settings
from sportnest.models.booking import Booking
from sportnest.models.turf import Turf
from sportnest.models.user import User
from sportnest.schemas.report import (
    DetailedReportResponse,
    OverviewReportResponse,
    ReportOverview,
    TurfBookingCount,
    TurfStats,
)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])

TIMEFRAME_DAYS = {"weekly": 7, "monthly": 30, "yearly": 365}

_CENTS = Decimal("0.01")


def _booking_revenue(booking: Booking) -> Decimal:
    """Money a booking brings in: confirmed bookings whose payment has not failed."""
    if booking.status != "confirmed" or booking.payment is None or booking.payment.status == "failed":
        return Decimal("0")
    return booking.payment.amount


def _percentage(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return Decimal("0.00")
    return (Decimal(part * 100) / Decimal(whole)).quantize(_CENTS, rounding=ROUND_HALF_UP)


async def _owner_turfs_and_bookings(
    db: AsyncSession,
    owner_id: uuid.UUID,
    period_start: date,
    period_end: date,
) -> tuple[list[Turf], list[Booking]]:
    """The owner's turfs and every booking on them dated within the period (inclusive)."""
    turfs_result = await db.execute(select(Turf).where(Turf.owner_id == owner_id).order_by(Turf.name))
    turfs = list(turfs_result.scalars().all())
    if not turfs:
        return [], []

    bookings_result = await db.execute(
        select(Booking).where(
            Booking.turf_id.in_([t.id for t in turfs]),
            Booking.date >= period_start,
            Booking.date <= period_end,
        )
    )
    return turfs, list(bookings_result.scalars().all())


@router.get("/overview", response_model=OverviewReportResponse)
async def get_overview(
    timeframe: str = Query("monthly", pattern="^(weekly|monthly|yearly)$"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> OverviewReportResponse:
    """Revenue, booking counts, daily revenue and popular slots for a trailing window."""
    period_end = date.today()
    period_start = period_end - timedelta(days=TIMEFRAME_DAYS[timeframe] - 1)
    turfs, bookings = await _owner_turfs_and_bookings(db, current_user.id, period_start, period_end)

    confirmed = [b for b in bookings if b.status == "confirmed"]
    total_revenue = sum((_booking_revenue(b) for b in bookings), Decimal("0"))
    average_value = (total_revenue / len(confirmed)).quantize(_CENTS) if confirmed else Decimal("0.00")

    revenue_by_day: dict[str, Decimal] = defaultdict(Decimal)
    for booking in confirmed:
        revenue_by_day[booking.date.isoformat()] += _booking_revenue(booking)

    per_turf_count: Counter[uuid.UUID] = Counter(b.turf_id for b in confirmed)
    per_turf_revenue: dict[uuid.UUID, Decimal] = defaultdict(Decimal)
    for booking in confirmed:
        per_turf_revenue[booking.turf_id] += _booking_revenue(booking)

    return OverviewReportResponse(
        timeframe=timeframe,
        period_start=period_start,
        period_end=period_end,
        overview=ReportOverview(
            total_revenue=total_revenue,
            total_bookings=len(bookings),
            confirmed_bookings=len(confirmed),
            cancelled_bookings=len(bookings) - len(confirmed),
            average_booking_value=average_value,
        ),
        revenue_by_day=dict(sorted(revenue_by_day.items())),
        bookings_by_turf=[
            TurfBookingCount(
                turf_id=turf.id,
                turf_name=turf.name,
                bookings=per_turf_count.get(turf.id, 0),
                revenue=per_turf_revenue.get(turf.id, Decimal("0")),
            )
            for turf in turfs
        ],
        popular_slots=dict(Counter(b.slot for b in confirmed).most_common()),
    )


@router.get("/detailed", response_model=DetailedReportResponse)
async def get_detailed(
    start_date: date = Query(..., description="First day of the range"),
    end_date: date = Query(..., description="Last day of the range (inclusive)"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
    settings: Settings = Depends(get_settings),
) -> DetailedReportResponse:
    """Per-turf booking stats, occupancy and payment-method mix for a date range."""
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )

    turfs, bookings = await _owner_turfs_and_bookings(db, current_user.id, start_date, end_date)

    by_turf: dict[uuid.UUID, list[Booking]] = {t.id: [] for t in turfs}
    for booking in bookings:
        by_turf[booking.turf_id].append(booking)

    slots_in_range = ((end_date - start_date).days + 1) * len(settings.booking_slots)
    turf_stats = []
    for turf in turfs:
        turf_bookings = by_turf[turf.id]
        confirmed = sum(1 for b in turf_bookings if b.status == "confirmed")
        turf_stats.append(
            TurfStats(
                turf_id=turf.id,
                turf_name=turf.name,
                sport=turf.sport,
                total_bookings=len(turf_bookings),
                confirmed_bookings=confirmed,
                cancelled_bookings=len(turf_bookings) - confirmed,
                revenue=sum((_booking_revenue(b) for b in turf_bookings), Decimal("0")),
                occupancy_rate=_percentage(confirmed, slots_in_range),
            )
        )

    methods: Counter[str] = Counter()
    revenue_by_method: dict[str, Decimal] = defaultdict(Decimal)
    for booking in bookings:
        if booking.status != "confirmed":
            continue
        methods[booking.payment_method] += 1
        revenue_by_method[booking.payment_method] += _booking_revenue(booking)

    return DetailedReportResponse(
        start_date=start_date,
        end_date=end_date,
        turfs=turf_stats,
        payment_methods=dict(methods),
        revenue_by_payment_method=dict(revenue_by_method),
    )
