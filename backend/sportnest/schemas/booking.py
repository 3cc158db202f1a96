"""Pydantic v2 request/response schemas for booking and payment endpoints."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from sportnest.schemas.turf import TurfResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for reserving a slot.

    ``date``, ``slot`` and ``payment_method`` are left as plain strings so the
    reservation guard can report each bad value with its own error.
    """

    turf_id: uuid.UUID
    date: str
    slot: str
    payment_method: str = "cash"
    payment_intent_id: str | None = None


class BookingStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(confirmed|cancelled)$")


class PaymentIntentCreate(BaseModel):
    turf_id: uuid.UUID
    date: str
    slot: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AdminContact(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    user_id: uuid.UUID
    turf_id: uuid.UUID
    date: datetime.date
    slot: str
    status: str
    payment_method: str
    admin_contact: AdminContact
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with the turf it is for, used in history and admin views."""

    turf: TurfResponse | None = None


class PaymentSummary(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    amount: Decimal
    currency: str
    payment_method: str
    status: str
    transaction_id: str | None = None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class ReservationResponse(BaseModel):
    """Returned with 201 when a slot is admitted."""

    booking: BookingResponse
    payment: PaymentSummary


class BookingListResponse(BaseModel):
    items: list[BookingDetailResponse]
    total: int


class PaymentResponse(PaymentSummary):
    """A payment as shown in the user's payment history."""

    turf_id: uuid.UUID
    turf_name: str | None = None
    date: str | None = None
    slot: str | None = None


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str
    amount: Decimal
    currency: str
