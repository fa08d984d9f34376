"""
Fairway Data Models

SQLAlchemy models for courses, tee times and bookings, plus the async
engine helpers the service and the context provider share.
"""

from __future__ import annotations

import enum
import datetime as dt
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from fairway.utils.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Difficulty(enum.Enum):
    """Course difficulty levels."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class BookingStatus(enum.Enum):
    """Booking lifecycle status."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Course(Base):
    """
    A golf course.

    Facilities are stored as comma-separated text, e.g. "Driving range,Pro shop".
    """
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    holes: Mapped[int] = mapped_column(Integer, default=18)
    difficulty_level: Mapped[Difficulty] = mapped_column(
        Enum(Difficulty, values_callable=lambda e: [m.value for m in e]),
        default=Difficulty.INTERMEDIATE,
    )
    facilities: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Services
    caddie_required: Mapped[bool] = mapped_column(Boolean, default=False)
    golf_cart_available: Mapped[bool] = mapped_column(Boolean, default=True)
    club_rental_available: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    tee_times: Mapped[list["TeeTime"]] = relationship(
        "TeeTime", back_populates="course", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Course {self.name!r}>"


class TeeTime(Base):
    """A bookable starting slot on a course."""
    __tablename__ = "tee_times"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True)
    price: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    course: Mapped["Course"] = relationship("Course", back_populates="tee_times")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="tee_time")

    def __repr__(self) -> str:
        return f"<TeeTime course={self.course_id} {self.date} {self.time}>"


class Booking(Base):
    """A user's reservation of a tee time."""
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tee_time_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tee_times.id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    players: Mapped[int] = mapped_column(Integer, default=1)  # 1-4
    booking_status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, values_callable=lambda e: [m.value for m in e]),
        default=BookingStatus.CONFIRMED,
    )
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    tee_time: Mapped["TeeTime"] = relationship("TeeTime", back_populates="bookings")

    def __repr__(self) -> str:
        return f"<Booking {self.id} [{self.booking_status.value}]>"


# Module-level engine (initialized by init_database)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_database(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine and make sure all tables exist.

    Args:
        url: SQLAlchemy async URL (sqlite+aiosqlite or postgresql+asyncpg)
        echo: Log emitted SQL

    Returns:
        The engine, also kept as the module default
    """
    global _engine, _session_factory

    if _engine is not None:
        await close_database()

    _engine = create_async_engine(url, echo=echo)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.debug("database_initialized", dialect=_engine.dialect.name)
    return _engine


async def close_database() -> None:
    """Dispose of the engine created by init_database."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory, failing loudly if the database is not ready."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized; call init_database() first")
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Open an async session on the default engine."""
    async with get_session_factory()() as session:
        yield session
