"""Pydantic v2 response schemas for notification endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    admin_id: uuid.UUID
    turf_id: uuid.UUID | None = None
    type: str
    message: str
    is_read: bool
    created_at: datetime
    user_name: str | None = None
    turf_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
