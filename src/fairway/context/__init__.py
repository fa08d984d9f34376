"""
Context Module

Live database context for the booking assistant.
"""

from fairway.context.provider import (
    CourseContext,
    CourseSummary,
    DatabaseContextProvider,
    DayAvailability,
    parse_facilities,
    render_context,
)

__all__ = [
    "CourseContext",
    "CourseSummary",
    "DatabaseContextProvider",
    "DayAvailability",
    "parse_facilities",
    "render_context",
]
