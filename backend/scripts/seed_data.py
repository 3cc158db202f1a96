"""Seed the database with sample turfs, players and bookings.

Creates a demo turf owner (admin), a demo player, a handful of turfs across
cities and sports, and pay-at-venue bookings admitted through the same
reservation guard the API uses.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from sportnest.auth.passwords import hash_password
from sportnest.billing.gateway import StripePaymentGateway
from sportnest.config import Settings
from sportnest.database import Base, build_engine, build_session_factory
from sportnest.errors import SlotAlreadyBooked
from sportnest.models.turf import Review, Turf
from sportnest.models.user import User
from sportnest.services.account_service import purge_account
from sportnest.services.reservation_service import ReservationGuard, ReservationRequest

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_OWNER = {
    "email": "owner@sportnest.app",
    "password": "owner1234",
    "name": "Rahul Mehta",
    "phone": "+91 98200 11223",
    "role": "admin",
}

DEMO_PLAYER = {
    "email": "player@sportnest.app",
    "password": "player1234",
    "name": "Priya Nair",
    "phone": "+91 99000 44556",
    "role": "user",
}

TURFS = [
    {
        "name": "Powai Box Cricket Arena",
        "location": "Mumbai",
        "address": "Hiranandani Gardens, Powai, Mumbai 400076",
        "sport": "Cricket",
        "price": Decimal("1200.00"),
        "description": "Floodlit box cricket turf with bowling machine and dugouts.",
        "images": ["https://images.sportnest.app/powai-1.jpg"],
    },
    {
        "name": "Koramangala Kickoff",
        "location": "Bengaluru",
        "address": "5th Block, Koramangala, Bengaluru 560095",
        "sport": "Football",
        "price": Decimal("1500.00"),
        "description": "FIFA-grade 5-a-side artificial grass with changing rooms.",
        "images": [],
    },
    {
        "name": "Banjara Smash Court",
        "location": "Hyderabad",
        "address": "Road No. 12, Banjara Hills, Hyderabad 500034",
        "sport": "Badminton",
        "price": Decimal("600.00"),
        "description": "Two synthetic indoor courts, racquets on rent.",
        "images": [],
    },
    {
        "name": "Salt Lake Hoops",
        "location": "Kolkata",
        "address": "Sector V, Salt Lake, Kolkata 700091",
        "sport": "Basketball",
        "price": Decimal("900.00"),
        "description": None,
        "images": [],
    },
]

# (turf name, days from today, slot, payment method)
BOOKINGS = [
    ("Powai Box Cricket Arena", -6, "18:00-19:00", "cash"),
    ("Powai Box Cricket Arena", -2, "19:00-20:00", "gpay"),
    ("Powai Box Cricket Arena", 1, "07:00-08:00", "phonepe"),
    ("Koramangala Kickoff", -3, "20:00-21:00", "paytm"),
    ("Koramangala Kickoff", 2, "17:00-18:00", "cash"),
    ("Banjara Smash Court", 0, "06:00-07:00", "cash"),
]

REVIEWS = [
    ("Powai Box Cricket Arena", 5, "Great lights for evening games."),
    ("Koramangala Kickoff", 4, "Good turf, parking is tight."),
]


async def _create_user(session, data: dict) -> User:
    result = await session.execute(select(User).where(User.email == data["email"]))
    existing = result.scalar_one_or_none()
    if existing is not None:
        print(f"⚠️  '{data['email']}' already exists. Deleting and re-seeding...")
        await purge_account(session, existing)
        await session.flush()

    user = User(
        email=data["email"],
        hashed_password=hash_password(data["password"]),
        name=data["name"],
        phone=data["phone"],
        role=data["role"],
        is_active=True,
    )
    session.add(user)
    await session.flush()
    return user


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample data.

    Idempotent: existing demo accounts are purged with everything they own
    before re-seeding.
    """
    settings = Settings()
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    guard = ReservationGuard(settings, StripePaymentGateway(settings))

    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        owner = await _create_user(session, DEMO_OWNER)
        player = await _create_user(session, DEMO_PLAYER)
        print(f"✅ Created owner {owner.email} and player {player.email}")

        turfs: dict[str, Turf] = {}
        for turf_data in TURFS:
            turf = Turf(owner_id=owner.id, **turf_data)
            session.add(turf)
            await session.flush()
            turfs[turf.name] = turf
            print(f"   🏟️  {turf.name} — {turf.location}, {turf.sport} (₹{turf.price}/hour)")

        for turf_name, rating, comment in REVIEWS:
            session.add(Review(turf_id=turfs[turf_name].id, user_id=player.id, rating=rating, comment=comment))
            turfs[turf_name].average_rating = Decimal(rating)
        await session.commit()

        today = date.today()
        booking_count = 0
        for turf_name, offset, slot, method in BOOKINGS:
            request = ReservationRequest(
                user_id=player.id,
                turf_id=turfs[turf_name].id,
                date=(today + timedelta(days=offset)).isoformat(),
                slot=slot,
                payment_method=method,
            )
            try:
                await guard.reserve(session, request)
            except SlotAlreadyBooked:
                continue
            booking_count += 1

        print(f"✅ Created {booking_count} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Owner:    {DEMO_OWNER['email']} / {DEMO_OWNER['password']}")
        print(f"   Player:   {DEMO_PLAYER['email']} / {DEMO_PLAYER['password']}")
        print(f"   Turfs:    {len(turfs)}")
        print(f"   Reviews:  {len(REVIEWS)}")
        print(f"   Bookings: {booking_count}")
        print("=" * 60)
        print("🎉 Done! You can now log in at /api/v1/auth/login")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
