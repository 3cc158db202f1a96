"""Booking model: one claimed hour on a turf."""

import datetime
import uuid

from sqlalchemy import Date, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sportnest.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("confirmed", "cancelled")

# Only one confirmed booking per (turf, date, slot); cancelled rows are ignored.
_CONFIRMED_ONLY = text("status = 'confirmed'")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of a single slot on a turf for a calendar date.

    ``created_at`` doubles as the booking timestamp. The ``admin_contact_*``
    columns are a snapshot of the turf owner's contact details taken when
    the booking was admitted; later profile edits do not touch them.
    """

    __tablename__ = "bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    turf_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("turfs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    slot: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="confirmed", nullable=False, index=True)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)

    admin_contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    admin_contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    turf: Mapped["Turf"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    payment: Mapped["Payment | None"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="booking", lazy="selectin", uselist=False
    )

    __table_args__ = (
        Index(
            "uq_bookings_turf_date_slot_confirmed",
            "turf_id",
            "date",
            "slot",
            unique=True,
            postgresql_where=_CONFIRMED_ONLY,
            sqlite_where=_CONFIRMED_ONLY,
        ),
        Index("ix_bookings_turf_date", "turf_id", "date"),
    )

    @property
    def admin_contact(self) -> dict[str, str | None]:
        return {
            "name": self.admin_contact_name,
            "phone": self.admin_contact_phone,
            "email": self.admin_contact_email,
        }

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, turf_id={self.turf_id}, date={self.date}, "
            f"slot={self.slot!r}, status={self.status})>"
        )
