"""Pydantic v2 schemas for owner revenue reports."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class ReportOverview(BaseModel):
    total_revenue: Decimal
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    average_booking_value: Decimal


class TurfBookingCount(BaseModel):
    turf_id: uuid.UUID
    turf_name: str
    bookings: int
    revenue: Decimal


class OverviewReportResponse(BaseModel):
    """Headline numbers for the owner's turfs over a trailing timeframe."""

    timeframe: str
    period_start: date
    period_end: date
    overview: ReportOverview
    revenue_by_day: dict[str, Decimal]
    bookings_by_turf: list[TurfBookingCount]
    popular_slots: dict[str, int]


class TurfStats(BaseModel):
    turf_id: uuid.UUID
    turf_name: str
    sport: str
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    revenue: Decimal
    occupancy_rate: Decimal  # percentage 0.00–100.00 of slots sold in the range


class DetailedReportResponse(BaseModel):
    """Per-turf statistics and payment-method mix within a date range."""

    start_date: date
    end_date: date
    turfs: list[TurfStats]
    payment_methods: dict[str, int]
    revenue_by_payment_method: dict[str, Decimal]
