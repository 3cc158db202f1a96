"""Notification service — fan-out of booking, cancellation and review alerts."""

import datetime
import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.models.notification import Notification
from sportnest.models.turf import Turf

logger = logging.getLogger(__name__)


def booking_message(turf: Turf, booking_date: datetime.date, slot: str) -> str:
    return f"New booking for {turf.name} on {booking_date:%d/%m/%Y} at {slot}"


def cancellation_message(turf: Turf, booking_date: datetime.date, slot: str) -> str:
    return f"Booking for {turf.name} on {booking_date:%d/%m/%Y} at {slot} was cancelled"


def review_message(turf: Turf, rating: int) -> str:
    return f"New {rating}-star review for {turf.name}"


async def notify_turf_owner(
    db: AsyncSession,
    *,
    actor_id: uuid.UUID,
    turf: Turf,
    notification_type: str,
    message: str,
) -> Notification:
    """Queue a notification for the owner of ``turf`` about ``actor_id``'s action."""
    notification = Notification(
        user_id=actor_id,
        admin_id=turf.owner_id,
        turf_id=turf.id,
        type=notification_type,
        message=message,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Queued %s notification for owner %s (turf %s)", notification_type, turf.owner_id, turf.id)
    return notification


async def list_notifications_for(db: AsyncSession, user_id: uuid.UUID) -> list[Notification]:
    """Notifications the user raised or received, newest first."""
    result = await db.execute(
        select(Notification)
        .where(or_(Notification.user_id == user_id, Notification.admin_id == user_id))
        .order_by(Notification.created_at.desc())
    )
    return list(result.scalars().all())
