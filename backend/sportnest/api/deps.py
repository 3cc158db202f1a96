"""Shared API dependencies — single import point for all routers.

Re-exports database session, settings and authentication dependencies so
that router modules can import everything they need from one place::

    from sportnest.api.deps import get_db, get_current_active_user
"""

from starlette.requests import Request

from sportnest.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    require_admin,
)
from sportnest.billing.gateway import PaymentGateway
from sportnest.config import get_settings
from sportnest.database import get_db
from sportnest.services.reservation_service import ReservationGuard


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


def get_reservation_guard(request: Request) -> ReservationGuard:
    return request.app.state.reservation_guard


__all__ = [
    "get_db",
    "get_settings",
    "get_current_user",
    "get_current_active_user",
    "require_admin",
    "get_payment_gateway",
    "get_reservation_guard",
]
