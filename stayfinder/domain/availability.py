"""Listing availability against blocked-date ranges.

Ranges are closed on both ends: a request whose check-in falls on the last
day of a blocked range (or whose check-out falls on its first day) conflicts.
Same-day turnover is therefore never allowed.
"""

from collections.abc import Iterable
from datetime import date
from typing import Protocol

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement


class DateRange(Protocol):
    start_date: date
    end_date: date


def overlaps(blocked: DateRange, check_in: date, check_out: date) -> bool:
    """Three-way closed-interval overlap test."""
    return (
        blocked.start_date <= check_in <= blocked.end_date
        or blocked.start_date <= check_out <= blocked.end_date
        or (check_in <= blocked.start_date and check_out >= blocked.end_date)
    )


def is_available(blocked_ranges: Iterable[DateRange], check_in: date, check_out: date) -> bool:
    """Return True if no blocked range overlaps [check_in, check_out].

    The caller must already have checked that check_out > check_in.
    """
    return not any(overlaps(blocked, check_in, check_out) for blocked in blocked_ranges)


def blocked_range_overlaps(model, check_in: date, check_out: date) -> ColumnElement[bool]:
    """SQL form of ``overlaps`` for a mapped class with start_date/end_date columns."""
    return or_(
        and_(model.start_date <= check_in, model.end_date >= check_in),
        and_(model.start_date <= check_out, model.end_date >= check_out),
        and_(model.start_date >= check_in, model.end_date <= check_out),
    )
