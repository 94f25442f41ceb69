"""Calendar helpers shared by the assignment, week and archive services.

All arithmetic is done on ``datetime.date`` values. "Today" is taken in UTC
so every service agrees on the same calendar day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from crewboard.core.errors import ValidationError

WORKDAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
WORK_WEEK_SPAN = timedelta(days=len(WORKDAYS) - 1)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_date(value: date | str, field_name: str) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{field_name} must be a valid YYYY-MM-DD date.") from exc
    raise ValidationError(f"{field_name} must be a valid YYYY-MM-DD date.")


def parse_date_range(start: date | str, end: date | str) -> tuple[date, date]:
    start_date = parse_date(start, "start_date")
    end_date = parse_date(end, "end_date")
    if end_date < start_date:
        raise ValidationError("end_date must be greater than or equal to start_date.")
    return start_date, end_date


def shift_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # 29 February in a non-leap target year.
        return day.replace(year=day.year + years, day=28)


def week_start_for(day: date) -> date:
    """Monday of the ISO week containing ``day``."""

    return day - timedelta(days=day.weekday())


def ensure_week_start(value: date | str, field_name: str = "week_start_date") -> date:
    day = parse_date(value, field_name)
    if day.weekday() != 0:
        raise ValidationError(f"{field_name} must be a Monday.")
    return day


def week_end_for(week_start: date) -> date:
    return week_start + WORK_WEEK_SPAN


def workday_name(day: date) -> str | None:
    index = day.weekday()
    if index >= len(WORKDAYS):
        return None
    return WORKDAYS[index]


def range_or_current_week(start: date | str | None, end: date | str | None, today: date) -> tuple[date, date]:
    """Both bounds, or neither for the work week containing ``today``."""

    if start is None and end is None:
        monday = week_start_for(today)
        return monday, week_end_for(monday)
    if start is None or end is None:
        raise ValidationError("start_date and end_date must be provided together.")
    return parse_date_range(start, end)
