"""Week-status API routes — the lunch grid, upserts and clears."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lunchplan.database import get_db
from lunchplan.schemas.day_status import (
    CurrentWeekOut, DayStatusOut, DayStatusWrite, ScopeGroupOut, WeekStatusPage, validate_iso_week,
)
from lunchplan.schemas.user import UserOut
from lunchplan.errors import validation_error
from lunchplan.services import group_service, status_service, visibility_service
from lunchplan.services.directory import get_active_group, get_user
from lunchplan.services.week_clock import active_weekday, current_iso_week, get_now

router = APIRouter()


def _parse_week(week: str) -> str:
    try:
        return validate_iso_week(week)
    except ValueError as exc:
        raise validation_error(str(exc), "iso_week")


@router.get("/", response_model=WeekStatusPage)
def list_week_statuses(
    actor_user_id: str = Query(..., description="ID of the viewing user"),
    week: Optional[str] = Query(None, description="ISO week, e.g. 2025-W40; defaults to the current week"),
    group_id: Optional[str] = Query(None),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    """Statuses the viewer may see for one week, keyed by user id."""
    viewer = get_user(db, actor_user_id)
    iso_week = _parse_week(week) if week else current_iso_week(now)

    group = get_active_group(db, group_id, field="group_id") if group_id else None
    statuses = visibility_service.resolve_visible_statuses(db, viewer, iso_week, group)

    if group is not None:
        users = visibility_service.group_members(db, viewer, group)
    else:
        users = visibility_service.visible_users(db, viewer)

    grouped = visibility_service.group_statuses_by_user(statuses)
    return WeekStatusPage(
        week=iso_week,
        active_weekday=active_weekday(now),
        group=ScopeGroupOut(group_id=group.group_id, name=group.name, code=group.code) if group else None,
        groups=group_service.groups_for_user(db, viewer),
        users=[UserOut.model_validate(user) for user in users],
        statuses={
            user_id: [DayStatusOut.model_validate(record) for record in records]
            for user_id, records in grouped.items()
        },
    )


@router.get("/current-week", response_model=CurrentWeekOut)
def get_current_week(now: datetime = Depends(get_now)):
    """The week and weekday the planner opens on."""
    return CurrentWeekOut(week=current_iso_week(now), active_weekday=active_weekday(now))


@router.post("/", response_model=list[DayStatusOut])
def upsert_week_status(
    payload: DayStatusWrite,
    actor_user_id: str = Query(..., description="ID of the user setting their status"),
    db: Session = Depends(get_db),
):
    """Create or update the actor's status for one day. Returns every record written."""
    actor = get_user(db, actor_user_id)
    return status_service.upsert_status(db, actor, payload)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
def clear_week_status(
    actor_user_id: str = Query(..., description="ID of the user clearing their status"),
    iso_week: str = Query(...),
    weekday: int = Query(..., ge=1, le=5),
    group_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Delete the actor's status for one (group, week, weekday). A missing status is fine."""
    actor = get_user(db, actor_user_id)
    status_service.clear_status(db, actor, _parse_week(iso_week), weekday, group_id)
