"""Notification model: booking, cancellation and review alerts for turf owners."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sportnest.database import Base, UUIDPrimaryKeyMixin

NOTIFICATION_TYPES = ("booking", "cancellation", "review")


class Notification(UUIDPrimaryKeyMixin, Base):
    """An alert raised by a user's action on an owner's turf."""

    __tablename__ = "notifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    admin_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    turf_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("turfs.id", ondelete="CASCADE"),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    user: Mapped["User"] = relationship(foreign_keys=[user_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    turf: Mapped["Turf | None"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.type}, admin_id={self.admin_id}, read={self.is_read})>"
