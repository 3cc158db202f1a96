"""SQLAlchemy models for SportNest.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from sportnest.models.booking import Booking
from sportnest.models.favorite import Favorite
from sportnest.models.notification import Notification
from sportnest.models.payment import Payment
from sportnest.models.turf import Review, Turf
from sportnest.models.user import User

__all__ = [
    "Booking",
    "Favorite",
    "Notification",
    "Payment",
    "Review",
    "Turf",
    "User",
]
