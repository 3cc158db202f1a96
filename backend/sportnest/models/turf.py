"""Turf model: bookable sports facilities and their reviews."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sportnest.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

LOCATIONS = (
    "Mumbai",
    "Delhi",
    "Bengaluru",
    "Hyderabad",
    "Chennai",
    "Kolkata",
    "Ahmedabad",
    "Pune",
    "Jaipur",
    "Lucknow",
)

SPORTS = ("Cricket", "Football", "Badminton", "Volleyball", "Basketball", "Tennis")


class Turf(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A sports facility listed by an admin and booked by the hour."""

    __tablename__ = "turfs"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    sport: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # per hour
    description: Mapped[str | None] = mapped_column(Text, default=None)
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    average_rating: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), default=None)

    # Relationships
    owner: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    reviews: Mapped[list["Review"]] = relationship(
        back_populates="turf",
        lazy="selectin",
        order_by="Review.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Turf(id={self.id}, name={self.name!r}, sport={self.sport!r})>"


class Review(UUIDPrimaryKeyMixin, Base):
    """A user's rating of a turf."""

    __tablename__ = "reviews"

    turf_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("turfs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    turf: Mapped[Turf] = relationship(back_populates="reviews")
    user: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
