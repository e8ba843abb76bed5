"""
Rolling booking window of weekday names.

The club website only lists today and the next three days in its date picker,
so requests may only name one of those four weekdays. The window is
recomputed every time it is asked for.
"""

from datetime import datetime, timedelta

import pytz

from app.config import settings

DAYS_IN_WINDOW = 4

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def current_time() -> datetime:
    """Return "now" in the configured club timezone, or host local time if unset."""
    if settings.timezone:
        return datetime.now(pytz.timezone(settings.timezone))
    return datetime.now()


def get_next_four_days(now: datetime | None = None) -> list[str]:
    """
    Return the weekday names for today and the following three days.

    Args:
        now: Reference time. Defaults to current_time().

    Returns:
        Four distinct weekday names, today first.
    """
    now = now or current_time()
    today = now.date()
    return [
        WEEKDAY_NAMES[(today + timedelta(days=offset)).weekday()]
        for offset in range(DAYS_IN_WINDOW)
    ]


def validate_day(day: str, now: datetime | None = None) -> bool:
    return day in get_next_four_days(now)
