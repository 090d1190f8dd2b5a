"""Seed the database with a few weeks of sample gym activity.

Creates members, a Monday-Saturday session timetable, bookings spread over
the previous and current month, and hourly rollups with daily summaries for
every completed day, so each dashboard panel has data to show.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import random
import sys
import uuid
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from gympulse.analytics.periods import shift_months
from gympulse.analytics.rollup import AnalyticsRollupWriter, aggregate_hour, build_daily_summary
from gympulse.config import settings
from gympulse.database import async_session_factory, engine
from gympulse.models import AnalyticsRecord, Booking, SessionOccurrence, User
from gympulse.store import SqlAlchemyDataStore

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

RNG = random.Random(2024)

# (role, how many)
MEMBERS = [("student", 60), ("staff", 12), ("faculty", 8), ("alumni", 5)]

# (start hour, category, capacity)
TIMETABLE = [
    (6, "Open Gym", 30),
    (7, "Spin", 20),
    (8, "Open Gym", 40),
    (9, "Strength", 25),
    (10, "Open Gym", 40),
    (11, "Yoga", 20),
    (12, "HIIT", 25),
    (13, "Open Gym", 40),
    (14, "Open Gym", 40),
    (15, "Pilates", 20),
    (16, "Strength", 25),
    (17, "Spin", 20),
    (18, "Open Gym", 50),
]

# Relative weight of each start hour: busy mornings and evenings
HOUR_DEMAND = {6: 0.5, 7: 0.9, 8: 0.8, 9: 0.5, 10: 0.4, 11: 0.5, 12: 0.7, 13: 0.4, 14: 0.3, 15: 0.4, 16: 0.7, 17: 0.9, 18: 0.6}

STATUS_WEIGHTS = [
    ("attended", 70),
    ("no_show", 10),
    ("cancelled_by_user", 12),
    ("cancelled_by_admin", 2),
    ("waitlisted", 6),
]


def _sample_status(session_day: date, today: date) -> str:
    if session_day >= today:
        return RNG.choice(["confirmed", "confirmed", "pending", "waitlisted"])
    statuses, weights = zip(*STATUS_WEIGHTS)
    return RNG.choices(statuses, weights=weights)[0]


def _build_day(day: date, members: list[User], today: date) -> tuple[list[SessionOccurrence], list[Booking]]:
    """One day's timetable with its bookings and attendance tallies."""
    occurrences: list[SessionOccurrence] = []
    bookings: list[Booking] = []
    for hour, category, capacity in TIMETABLE:
        demand = HOUR_DEMAND[hour] * (0.7 if day.weekday() == 5 else 1.0)
        wanted = min(int(capacity * demand * RNG.uniform(0.8, 1.2)), len(members))
        occurrence = SessionOccurrence(
            id=uuid.uuid4(),
            date=day,
            start_time_of_day=time(hour),
            end_time_of_day=time(hour + 1),
            capacity=capacity,
            category=category,
        )
        booked = attended = cancelled = waitlisted = 0
        for member in RNG.sample(members, wanted):
            status = _sample_status(day, today)
            lead_days = RNG.choice([0, 0, 1, 1, 2, 3, 5, 7])
            booked_at = datetime.combine(day - timedelta(days=lead_days), time(RNG.randint(6, 21)), tzinfo=timezone.utc)
            bookings.append(Booking(user_id=member.id, session_date=day, booking_time=booked_at, status=status))
            if status.startswith("cancelled"):
                cancelled += 1
            elif status == "waitlisted":
                waitlisted += 1
            else:
                booked += 1
                attended += status == "attended"
        occurrence.booked_slots = booked
        occurrence.attended_count = attended
        occurrence.cancelled_count = cancelled
        occurrence.waitlist_count = waitlisted
        occurrences.append(occurrence)
    return occurrences, bookings


async def _log_rollups(first_day: date, today: date) -> int:
    """Write hourly rollups and the daily summary for every completed day."""
    store = SqlAlchemyDataStore(async_session_factory)
    writer = AnalyticsRollupWriter(store, settings)
    logged = 0
    day = first_day
    while day < today:
        for hour in range(24):
            logged += await writer.log_hourly_rollup(await aggregate_hour(store, day, hour))
        await writer.log_daily_summary(await build_daily_summary(store, day))
        day += timedelta(days=1)
    return logged


async def seed() -> None:
    """Populate the database with sample gym activity.

    Idempotent: all existing rows are deleted before re-seeding.
    """
    today = date.today()
    first_day = shift_months(today, -1)

    async with async_session_factory() as session:
        for model in (AnalyticsRecord, Booking, SessionOccurrence, User):
            await session.execute(delete(model))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Members
        # ------------------------------------------------------------------
        members: list[User] = []
        for role, count in MEMBERS:
            for _ in range(count):
                members.append(User(id=uuid.uuid4(), user_role=role))
        session.add_all(members)
        await session.flush()
        print(f"✅ Created {len(members)} members")

        # ------------------------------------------------------------------
        # 2. Timetable and bookings, Monday to Saturday, through next week
        # ------------------------------------------------------------------
        occurrence_count = booking_count = 0
        day = first_day
        while day <= today + timedelta(days=7):
            if day.weekday() != 6:
                occurrences, bookings = _build_day(day, members, today)
                session.add_all(occurrences)
                session.add_all(bookings)
                occurrence_count += len(occurrences)
                booking_count += len(bookings)
            day += timedelta(days=1)

        await session.commit()

    print(f"✅ Created {occurrence_count} session occurrences")
    print(f"✅ Created {booking_count} bookings")

    # ----------------------------------------------------------------------
    # 3. Rollups for every completed day
    # ----------------------------------------------------------------------
    logged = await _log_rollups(first_day, today)

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Members:             {len(members)}")
    print(f"   Session occurrences: {occurrence_count}")
    print(f"   Bookings:            {booking_count}")
    print(f"   Hourly rollups:      {logged}")
    print(f"   Period:              {first_day} .. {today + timedelta(days=7)}")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
