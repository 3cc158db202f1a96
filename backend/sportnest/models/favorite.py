"""Favorite model: turfs a user has bookmarked."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sportnest.database import Base, UUIDPrimaryKeyMixin


class Favorite(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "favorites"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    turf_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("turfs.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    turf: Mapped["Turf"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("user_id", "turf_id", name="uq_favorites_user_turf"),)
