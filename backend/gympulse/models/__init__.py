"""SQLAlchemy models for GymPulse Analytics.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from gympulse.models.analytics_record import AnalyticsRecord
from gympulse.models.booking import Booking
from gympulse.models.session_occurrence import SessionOccurrence
from gympulse.models.user import User

__all__ = [
    "AnalyticsRecord",
    "Booking",
    "SessionOccurrence",
    "User",
]
