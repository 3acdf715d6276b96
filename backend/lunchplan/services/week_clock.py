"""Which ISO week and weekday the planner opens on.

The functions here are pure: they take the moment to evaluate. Wall-clock
time only enters through ``get_now``, a FastAPI dependency that tests
override to pin the date.
"""
from datetime import datetime, timedelta

import pytz

from lunchplan.config import settings

WEEKEND = (6, 7)


def get_now() -> datetime:
    """Current time in the app's timezone."""
    return datetime.now(pytz.timezone(settings.APP_TIMEZONE))


def format_iso_week(moment: datetime) -> str:
    year, week, _ = moment.isocalendar()
    return f"{year}-W{week:02d}"


def current_iso_week(now: datetime) -> str:
    """ISO week to plan for; on Saturday and Sunday that is next week."""
    if now.isoweekday() in WEEKEND:
        now = now + timedelta(weeks=1)
    return format_iso_week(now)


def active_weekday(now: datetime) -> int:
    """Today's ISO weekday on Mon–Fri, otherwise Monday."""
    weekday = now.isoweekday()
    return 1 if weekday in WEEKEND else weekday
