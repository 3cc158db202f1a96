"""Cascading deletes for turfs and user accounts.

Rows are removed with bulk DELETE statements in dependency order rather than
through ORM cascades, so nothing has to be loaded first.
"""

import logging
import uuid

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.models.booking import Booking
from sportnest.models.favorite import Favorite
from sportnest.models.notification import Notification
from sportnest.models.payment import Payment
from sportnest.models.turf import Review, Turf
from sportnest.models.user import User

logger = logging.getLogger(__name__)


async def purge_turfs(db: AsyncSession, turf_ids: list[uuid.UUID]) -> None:
    """Delete turfs together with their bookings, payments, reviews, favorites and notifications."""
    if not turf_ids:
        return
    await db.execute(delete(Payment).where(Payment.turf_id.in_(turf_ids)))
    await db.execute(delete(Booking).where(Booking.turf_id.in_(turf_ids)))
    await db.execute(delete(Review).where(Review.turf_id.in_(turf_ids)))
    await db.execute(delete(Favorite).where(Favorite.turf_id.in_(turf_ids)))
    await db.execute(delete(Notification).where(Notification.turf_id.in_(turf_ids)))
    await db.execute(delete(Turf).where(Turf.id.in_(turf_ids)))
    logger.info("Purged %d turf(s): %s", len(turf_ids), turf_ids)


async def delete_booking(db: AsyncSession, booking: Booking) -> None:
    """Hard-delete a booking and its payment."""
    await db.execute(delete(Payment).where(Payment.booking_id == booking.id))
    await db.execute(delete(Booking).where(Booking.id == booking.id))


async def purge_account(db: AsyncSession, user: User) -> None:
    """Delete a user and everything they own or created."""
    user_id = user.id
    owned = await db.execute(select(Turf.id).where(Turf.owner_id == user_id))
    await purge_turfs(db, list(owned.scalars().all()))

    await db.execute(delete(Payment).where(Payment.user_id == user_id))
    await db.execute(delete(Booking).where(Booking.user_id == user_id))
    await db.execute(delete(Review).where(Review.user_id == user_id))
    await db.execute(delete(Favorite).where(Favorite.user_id == user_id))
    await db.execute(
        delete(Notification).where(or_(Notification.user_id == user_id, Notification.admin_id == user_id))
    )
    await db.execute(delete(User).where(User.id == user_id))
    logger.info("Deleted account %s", user_id)
