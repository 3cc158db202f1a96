"""Domain error hierarchy.

Each failure mode of the reservation workflow is its own exception type with
a stable ``kind`` so callers branch on the type, never on message text. The
FastAPI handler in ``sportnest.main`` renders them as
``{"message": ..., "details": ...}``.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorKind(str, Enum):
    TURF_NOT_FOUND = "turf_not_found"
    INVALID_DATE = "invalid_date"
    INVALID_SLOT = "invalid_slot"
    INVALID_PAYMENT_METHOD = "invalid_payment_method"
    PAYMENT_NOT_CONFIRMED = "payment_not_confirmed"
    PAYMENT_DETAIL_MISMATCH = "payment_detail_mismatch"
    SLOT_ALREADY_BOOKED = "slot_already_booked"
    PAYMENT_GATEWAY_UNAVAILABLE = "payment_gateway_unavailable"
    INVALID_TRANSITION = "invalid_transition"
    UNKNOWN = "unknown"


class SportNestError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "details": self.details}


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class TurfNotFound(SportNestError):
    kind = ErrorKind.TURF_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Turf not found"


class InvalidDate(SportNestError):
    kind = ErrorKind.INVALID_DATE
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid booking date"


class InvalidSlot(SportNestError):
    kind = ErrorKind.INVALID_SLOT
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid time slot"


class InvalidPaymentMethod(SportNestError):
    kind = ErrorKind.INVALID_PAYMENT_METHOD
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid payment method"


class PaymentNotConfirmed(SportNestError):
    kind = ErrorKind.PAYMENT_NOT_CONFIRMED
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment has not been confirmed"


class PaymentDetailMismatch(SportNestError):
    kind = ErrorKind.PAYMENT_DETAIL_MISMATCH
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment details do not match this booking"


# ---------------------------------------------------------------------------
# Contention and upstream errors
# ---------------------------------------------------------------------------


class SlotAlreadyBooked(SportNestError):
    kind = ErrorKind.SLOT_ALREADY_BOOKED
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "This slot is already booked"


class PaymentGatewayUnavailable(SportNestError):
    """The payment processor could not be reached; pay-at-venue may still work."""

    kind = ErrorKind.PAYMENT_GATEWAY_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Payment service is temporarily unavailable. Please try another payment method."


class ReservationFailed(SportNestError):
    kind = ErrorKind.UNKNOWN


class InvalidBookingTransition(SportNestError):
    """Bookings only move ``confirmed -> cancelled``."""

    kind = ErrorKind.INVALID_TRANSITION
    status_code = status.HTTP_409_CONFLICT
    default_message = "Booking is already cancelled"
