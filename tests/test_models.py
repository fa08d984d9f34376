"""
Tests for Fairway database models.
"""

from datetime import date, time

import pytest
from sqlalchemy import select

from fairway.models import (
    Booking,
    BookingStatus,
    Course,
    Difficulty,
    TeeTime,
    close_database,
    get_session,
    get_session_factory,
    init_database,
)


@pytest.fixture
async def db():
    """Set up in-memory SQLite database for testing."""
    await init_database("sqlite+aiosqlite:///:memory:", echo=False)
    yield
    await close_database()


class TestCourseModel:
    """Tests for Course model."""

    @pytest.mark.asyncio
    async def test_create_course_defaults(self, db):
        async with get_session() as session:
            session.add(Course(name="Riverside Links"))
            await session.commit()

            courses = (await session.scalars(select(Course))).all()

            assert len(courses) == 1
            course = courses[0]
            assert course.id is not None
            assert course.holes == 18
            assert course.difficulty_level == Difficulty.INTERMEDIATE
            assert course.caddie_required is False
            assert course.golf_cart_available is True

    @pytest.mark.asyncio
    async def test_course_tee_times_relationship(self, db):
        async with get_session() as session:
            course = Course(name="Hilltop", holes=9)
            course.tee_times.append(TeeTime(date=date(2026, 10, 20), time=time(7, 30)))
            session.add(course)
            await session.commit()

            tee_time = (await session.scalars(select(TeeTime))).one()
            assert tee_time.course_id == course.id
            assert tee_time.available is True
            assert tee_time.time == time(7, 30)


class TestBookingModel:
    """Tests for Booking model."""

    @pytest.mark.asyncio
    async def test_booking_defaults(self, db):
        async with get_session() as session:
            course = Course(name="Lakeside")
            tee_time = TeeTime(course=course, date=date(2026, 10, 20), time=time(9, 0))
            session.add_all([course, tee_time])
            await session.flush()

            session.add(Booking(tee_time_id=tee_time.id, user_id="42", players=3))
            await session.commit()

            booking = (await session.scalars(select(Booking))).one()
            assert booking.booking_status == BookingStatus.CONFIRMED
            assert booking.players == 3
            assert "confirmed" in repr(booking)


class TestDatabaseLifecycle:
    """Tests for engine helpers."""

    @pytest.mark.asyncio
    async def test_session_factory_requires_init(self):
        await close_database()
        with pytest.raises(RuntimeError):
            get_session_factory()

    @pytest.mark.asyncio
    async def test_reinit_replaces_engine(self):
        first = await init_database("sqlite+aiosqlite:///:memory:")
        second = await init_database("sqlite+aiosqlite:///:memory:")
        try:
            assert first is not second
        finally:
            await close_database()
