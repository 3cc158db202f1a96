"""Payment model: settlement record created alongside each booking."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sportnest.database import Base, UUIDPrimaryKeyMixin

PAYMENT_STATUSES = ("pending", "succeeded", "failed")


class Payment(UUIDPrimaryKeyMixin, Base):
    """Money owed or received for exactly one booking."""

    __tablename__ = "payments"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    turf_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("turfs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)

    # Processor confirmation token; one token settles at most one booking
    transaction_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    details: Mapped[dict | None] = mapped_column("metadata", JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    booking: Mapped["Booking"] = relationship(back_populates="payment")  # type: ignore[name-defined]  # noqa: F821
    turf: Mapped["Turf"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, booking_id={self.booking_id}, status={self.status}, amount={self.amount})>"
