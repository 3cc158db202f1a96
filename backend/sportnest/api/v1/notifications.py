"""Notifications API router."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sportnest.api.deps import get_current_active_user, get_db
from sportnest.models.notification import Notification
from sportnest.models.user import User
from sportnest.schemas.notification import NotificationResponse
from sportnest.services.notification_service import list_notifications_for

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


def _to_response(notification: Notification) -> NotificationResponse:
    response = NotificationResponse.model_validate(notification)
    response.user_name = notification.user.name if notification.user else None
    response.turf_name = notification.turf.name if notification.turf else None
    return response


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationResponse]:
    notifications = await list_notifications_for(db, current_user.id)
    return [_to_response(n) for n in notifications]


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationResponse:
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            or_(Notification.user_id == current_user.id, Notification.admin_id == current_user.id),
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )

    notification.is_read = True
    db.add(notification)
    await db.flush()
    return _to_response(notification)
