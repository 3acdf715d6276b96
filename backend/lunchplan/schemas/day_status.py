"""Pydantic schemas for day statuses.

``DayStatusWrite`` is tri-state per optional field: a field the client never
sent is absent from ``model_fields_set`` (keep the stored value), a field sent
as ``null`` clears it, and any other value overwrites it.
"""
from __future__ import annotations
import re
from datetime import date, datetime, time
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from lunchplan.models.day_status import LunchStatus, StatusVisibility
from lunchplan.schemas.group import GroupSummary
from lunchplan.schemas.user import UserOut

ISO_WEEK_RE = re.compile(r"^(\d{4})-W(\d{2})$")
ARRIVAL_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Fields copied onto a record only when present in the request
MERGEABLE_FIELDS = ("status", "arrival_time", "location", "start_location", "eat_location", "note")


def validate_iso_week(value: str) -> str:
    """Accept ``YYYY-Www`` naming a week that exists in that ISO year."""
    match = ISO_WEEK_RE.match(value)
    if not match:
        raise ValueError("iso_week must look like YYYY-Www, e.g. 2025-W40")
    year, week = int(match.group(1)), int(match.group(2))
    try:
        date.fromisocalendar(year, week, 1)
    except ValueError:
        raise ValueError(f"{year} has no ISO week {week:02d}")
    return value


class DayStatusWrite(BaseModel):
    iso_week: str
    weekday: int = Field(ge=1, le=5)
    status: Optional[LunchStatus] = None
    arrival_time: Optional[time] = None
    location: Optional[str] = Field(default=None, max_length=120)
    start_location: Optional[str] = Field(default=None, max_length=120)
    eat_location: Optional[str] = Field(default=None, max_length=120)
    note: Optional[str] = Field(default=None, max_length=2000)
    visibility: Optional[StatusVisibility] = None
    group_id: Optional[str] = None

    @field_validator("iso_week")
    @classmethod
    def _check_iso_week(cls, value: str) -> str:
        return validate_iso_week(value)

    @field_validator("arrival_time", mode="before")
    @classmethod
    def _check_arrival_time(cls, value: Any) -> Any:
        # Clients send HH:MM; time objects pass through from service callers
        if value is None or isinstance(value, time):
            return value
        if not isinstance(value, str) or not ARRIVAL_TIME_RE.match(value):
            raise ValueError("arrival_time must be HH:MM, e.g. 11:45")
        return value

    @property
    def has_status(self) -> bool:
        return "status" in self.model_fields_set

    @property
    def resolved_visibility(self) -> StatusVisibility:
        return self.visibility or StatusVisibility.group_only

    def provided_fields(self) -> dict[str, Any]:
        """The mergeable fields the client actually sent, explicit nulls included."""
        return {
            field: getattr(self, field)
            for field in MERGEABLE_FIELDS
            if field in self.model_fields_set
        }


class DayStatusOut(BaseModel):
    id: int
    user_id: str
    group_id: Optional[str] = None
    iso_week: str
    weekday: int
    status: Optional[LunchStatus] = None
    arrival_time: Optional[time] = None
    location: Optional[str] = None
    start_location: Optional[str] = None
    eat_location: Optional[str] = None
    note: Optional[str] = None
    visibility: StatusVisibility
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CurrentWeekOut(BaseModel):
    week: str
    active_weekday: int


class ScopeGroupOut(BaseModel):
    group_id: str
    name: str
    code: str


class WeekStatusPage(BaseModel):
    """Everything the week grid needs for one viewer and one week."""

    week: str
    active_weekday: int
    group: Optional[ScopeGroupOut] = None
    groups: list[GroupSummary] = []
    users: list[UserOut] = []
    statuses: dict[str, list[DayStatusOut]] = {}
