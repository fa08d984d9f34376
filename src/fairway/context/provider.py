"""
Database Context Provider

Aggregates course and tee-time availability from the database and renders
it as a text block the booking assistant reads as conversation context.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fairway.models import Booking, BookingStatus, Course, TeeTime, get_session_factory
from fairway.utils.logging import get_logger

logger = get_logger(__name__)

NO_TIMES_AVAILABLE = "No times available"
BASIC_FACILITIES = "Basic facilities available"
COURSE_SEPARATOR = "\n-------------------------\n"

BOOKING_GUIDE = """BOOKING INFORMATION:
- Players per booking: 1-4 players
- Booking statuses: Confirmed, Cancelled, Completed
- Required information: Number of players, preferred time, service requests
- Optional services: Caddie service, golf cart, equipment rental

SPECIAL SERVICES:
- Equipment rental available (clubs, shoes, etc.)
- Golf cart rental options
- Professional caddie services
- Special requests accommodation

BOOKING GUIDELINES:
1. Select course based on:
   - Skill level (beginner/intermediate/advanced)
   - Number of holes (9 or 18)
   - Required services
   - Location preference

2. Consider when booking:
   - Available tee times
   - Group size (1-4 players)
   - Service requirements
   - Special requests"""


def parse_facilities(facilities: str | None) -> list[str]:
    """Split a comma-separated facilities column into a clean list."""
    if not facilities:
        return [BASIC_FACILITIES]
    parsed = [f.strip() for f in facilities.split(",") if f.strip()]
    return parsed or [BASIC_FACILITIES]


def format_tee_time(value: dt.time) -> str:
    """Format a tee time like 07:30 AM."""
    return value.strftime("%I:%M %p")


@dataclass
class DayAvailability:
    """Availability of one course on one day."""

    available_slots: int = 0
    earliest: dt.time | None = None
    latest: dt.time | None = None
    available_times: list[str] = field(default_factory=list)


@dataclass
class CourseSummary:
    """Aggregated view of a course for the assistant."""

    id: int
    name: str
    description: str | None
    location: str | None
    holes: int
    difficulty: str
    facilities: list[str]
    caddie: str
    golf_cart: str
    club_rental: str
    total_tee_times: int = 0
    total_bookings: int = 0
    available_slots: int = 0
    completed_rounds: int = 0
    popular_hours: list[str] = field(default_factory=list)
    today: DayAvailability = field(default_factory=DayAvailability)
    tomorrow: DayAvailability = field(default_factory=DayAvailability)


@dataclass
class CourseContext:
    """Result of a context fetch: structured summaries plus rendered text."""

    courses: list[CourseSummary]
    text: str


class DatabaseContextProvider:
    """
    Builds the live database context for chat conversations.

    Each call to get_context() runs a fresh set of aggregate queries, so
    the text always reflects current availability.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        """
        Args:
            session_factory: Sessions to query with (defaults to the app engine)
            today: Returns the current date; injectable for tests
        """
        self._session_factory = session_factory
        self._today = today

    async def get_context(self) -> CourseContext:
        """Query the database and render the context text."""
        factory = self._session_factory or get_session_factory()
        today = self._today()
        tomorrow = today + dt.timedelta(days=1)

        async with factory() as session:
            courses = (await session.scalars(select(Course).order_by(Course.id))).all()
            summaries = {c.id: self._summarize(c) for c in courses}

            await self._load_totals(session, summaries)
            await self._load_popular_hours(session, summaries)
            await self._load_day(session, summaries, today, "today")
            await self._load_day(session, summaries, tomorrow, "tomorrow")

        ordered = list(summaries.values())
        logger.debug("database_context_loaded", courses=len(ordered), date=today.isoformat())
        return CourseContext(courses=ordered, text=render_context(ordered))

    @staticmethod
    def _summarize(course: Course) -> CourseSummary:
        return CourseSummary(
            id=course.id,
            name=course.name,
            description=course.description,
            location=course.location,
            holes=course.holes,
            difficulty=course.difficulty_level.value,
            facilities=parse_facilities(course.facilities),
            caddie="Required" if course.caddie_required else "Optional",
            golf_cart="Available" if course.golf_cart_available else "Not available",
            club_rental="Available" if course.club_rental_available else "Not available",
        )

    async def _load_totals(
        self, session: AsyncSession, summaries: dict[int, CourseSummary]
    ) -> None:
        slot_rows = await session.execute(
            select(
                TeeTime.course_id,
                func.count(TeeTime.id),
                func.count(case((TeeTime.available.is_(True), TeeTime.id))),
            ).group_by(TeeTime.course_id)
        )
        for course_id, total, available in slot_rows:
            if course_id in summaries:
                summaries[course_id].total_tee_times = total
                summaries[course_id].available_slots = available

        booking_rows = await session.execute(
            select(
                TeeTime.course_id,
                func.count(Booking.id),
                func.count(
                    case((Booking.booking_status == BookingStatus.COMPLETED, Booking.id))
                ),
            )
            .join(Booking, Booking.tee_time_id == TeeTime.id)
            .group_by(TeeTime.course_id)
        )
        for course_id, total, completed in booking_rows:
            if course_id in summaries:
                summaries[course_id].total_bookings = total
                summaries[course_id].completed_rounds = completed

    async def _load_popular_hours(
        self, session: AsyncSession, summaries: dict[int, CourseSummary]
    ) -> None:
        rows = await session.execute(
            select(TeeTime.course_id, TeeTime.time)
            .join(Booking, Booking.tee_time_id == TeeTime.id)
            .where(Booking.booking_status == BookingStatus.CONFIRMED)
        )
        hours: dict[int, set[int]] = defaultdict(set)
        for course_id, tee_time in rows:
            hours[course_id].add(tee_time.hour)
        for course_id, seen in hours.items():
            if course_id in summaries:
                summaries[course_id].popular_hours = [f"{h:02d}:00" for h in sorted(seen)]

    async def _load_day(
        self,
        session: AsyncSession,
        summaries: dict[int, CourseSummary],
        day: dt.date,
        attr: str,
    ) -> None:
        rows = await session.execute(
            select(TeeTime.course_id, TeeTime.time, TeeTime.available)
            .where(TeeTime.date == day)
            .order_by(TeeTime.course_id, TeeTime.time)
        )
        for course_id, tee_time, available in rows:
            summary = summaries.get(course_id)
            if summary is None:
                continue
            availability: DayAvailability = getattr(summary, attr)
            if availability.earliest is None or tee_time < availability.earliest:
                availability.earliest = tee_time
            if availability.latest is None or tee_time > availability.latest:
                availability.latest = tee_time
            if available:
                availability.available_slots += 1
                availability.available_times.append(format_tee_time(tee_time))


def render_course(course: CourseSummary) -> str:
    """Render one course block."""
    times = ", ".join(course.tomorrow.available_times) or NO_TIMES_AVAILABLE
    features = "\n".join(f"- {f}" for f in course.facilities)

    return f"""{course.name} (Course ID: {course.id})
- Location: {course.location or "Not specified"}
- Course Type: {course.holes}-hole course
- Difficulty Level: {course.difficulty}

Available Tee Times:
- Today: {course.today.available_slots} slots
- Tomorrow: {course.tomorrow.available_slots} slots

Tomorrow's Available Times:
{times}

Services:
- Caddie: {course.caddie}
- Golf Cart: {course.golf_cart}
- Club Rental: {course.club_rental}

Course Features:
{features}"""


def render_context(courses: Sequence[CourseSummary]) -> str:
    """Render the full context text for a set of courses."""
    if courses:
        body = COURSE_SEPARATOR.join(render_course(c) for c in courses)
    else:
        body = f"No courses are currently listed. {NO_TIMES_AVAILABLE}."

    return f"CURRENT GOLF COURSE STATUS:\n\n{body}\n\n{BOOKING_GUIDE}\n"
