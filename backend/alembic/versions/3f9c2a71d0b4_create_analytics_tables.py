"""create_analytics_tables

Revision ID: 3f9c2a71d0b4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a71d0b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_role", sa.String(length=50), nullable=False, server_default="student"),
    )
    op.create_index("ix_users_user_role", "users", ["user_role"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("booking_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_session_date", "bookings", ["session_date"])

    op.create_table(
        "session_occurrences",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time_of_day", sa.Time(), nullable=False),
        sa.Column("end_time_of_day", sa.Time(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("override_capacity", sa.Integer(), nullable=True),
        sa.Column("booked_slots", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attended_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cancelled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("waitlist_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="scheduled"),
        sa.Column("category", sa.String(length=100), nullable=True),
    )
    op.create_index(
        "ix_session_occurrences_date_start", "session_occurrences", ["date", "start_time_of_day"]
    )

    # Append-only rollups; the daily summary row is marked by 00:00-23:59
    op.create_table(
        "analytics",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time_of_day", sa.String(length=5), nullable=False),
        sa.Column("end_time_of_day", sa.String(length=5), nullable=False),
        sa.Column("hourly_occupancy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("daily_occupancy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("booked_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("no_show_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cancelled_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("waitlist_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("peak_time", sa.String(length=5), nullable=True),
        sa.Column("max_capacity", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_analytics_date_start", "analytics", ["date", "start_time_of_day"])


def downgrade() -> None:
    op.drop_index("ix_analytics_date_start", table_name="analytics")
    op.drop_table("analytics")
    op.drop_index("ix_session_occurrences_date_start", table_name="session_occurrences")
    op.drop_table("session_occurrences")
    op.drop_index("ix_bookings_session_date", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_users_user_role", table_name="users")
    op.drop_table("users")
