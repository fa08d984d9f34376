"""Create courses, tee_times and bookings tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

difficulty = sa.Enum("beginner", "intermediate", "advanced", name="difficulty")
booking_status = sa.Enum("confirmed", "cancelled", "completed", name="bookingstatus")


def upgrade() -> None:
    """Create booking schema."""
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("holes", sa.Integer, nullable=False),
        sa.Column("difficulty_level", difficulty, nullable=False),
        sa.Column("facilities", sa.Text, nullable=True),
        sa.Column("caddie_required", sa.Boolean, nullable=False),
        sa.Column("golf_cart_available", sa.Boolean, nullable=False),
        sa.Column("club_rental_available", sa.Boolean, nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "tee_times",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "course_id",
            sa.Integer,
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("time", sa.Time, nullable=False),
        sa.Column("available", sa.Boolean, nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_tee_times_course_date", "tee_times", ["course_id", "date"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tee_time_id", sa.Integer, sa.ForeignKey("tee_times.id"), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("players", sa.Integer, nullable=False),
        sa.Column("booking_status", booking_status, nullable=False),
        sa.Column("special_requests", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_bookings_tee_time", "bookings", ["tee_time_id"])


def downgrade() -> None:
    """Drop booking schema."""
    op.drop_index("ix_bookings_tee_time", table_name="bookings")
    op.drop_table("bookings")
    op.drop_index("ix_tee_times_course_date", table_name="tee_times")
    op.drop_table("tee_times")
    op.drop_table("courses")
    booking_status.drop(op.get_bind(), checkfirst=True)
    difficulty.drop(op.get_bind(), checkfirst=True)
