"""Status service — creates, merges and clears day statuses.

Responsibilities:
- Group access: a referenced group must exist (404) and the actor must
  belong to it (403)
- Target selection: one personal record, one record per group, or one record
  for the chosen group, depending on memberships and visibility
- Partial updates: a request without ``status`` edits every record the actor
  already has for that day, each keeping its own group and visibility
- Merge: fields absent from the request keep their stored value
- Idempotent persistence keyed on (user, group, iso_week, weekday)

Fan-out writes commit one record at a time; a failure part-way keeps the
records already written. Each write is idempotent, so the client can retry.
"""
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lunchplan.errors import forbidden, validation_error
from lunchplan.models.day_status import DayStatus, StatusVisibility
from lunchplan.models.user import User
from lunchplan.schemas.day_status import DayStatusWrite
from lunchplan.services.directory import get_active_group, is_member, user_group_ids

logger = logging.getLogger(__name__)


def _key_query(db: Session, user_id: str, group_id: Optional[str], iso_week: str, weekday: int):
    query = db.query(DayStatus).filter(
        DayStatus.user_id == user_id,
        DayStatus.iso_week == iso_week,
        DayStatus.weekday == weekday,
    )
    if group_id is None:
        return query.filter(DayStatus.group_id.is_(None))
    return query.filter(DayStatus.group_id == group_id)


def _check_group_access(db: Session, actor: User, group_id: Optional[str]) -> None:
    if group_id is None:
        return
    group = get_active_group(db, group_id, field="group_id")
    if not is_member(db, group.group_id, actor.user_id):
        raise forbidden("You are not a member of this group.", "group_id")


def _write_record(
    db: Session,
    actor: User,
    iso_week: str,
    weekday: int,
    group_id: Optional[str],
    visibility: StatusVisibility,
    fields: dict[str, Any],
) -> DayStatus:
    """Create the record for this key, or merge ``fields`` into the existing one."""
    created = False
    record = _key_query(db, actor.user_id, group_id, iso_week, weekday).first()

    if record is None:
        record = DayStatus(
            user_id=actor.user_id,
            group_id=group_id,
            iso_week=iso_week,
            weekday=weekday,
            visibility=visibility,
            **fields,
        )
        db.add(record)
        try:
            db.commit()
            created = True
        except IntegrityError:
            # Lost an insert race on the same key: merge into the winner's row
            db.rollback()
            record = _key_query(db, actor.user_id, group_id, iso_week, weekday).first()
            if record is None:
                raise
            logger.info(
                "Concurrent insert for user %s group %s %s/%d, merging",
                actor.user_id, group_id, iso_week, weekday,
            )

    if not created:
        for field, value in fields.items():
            setattr(record, field, value)
        record.visibility = visibility
        db.commit()

    db.refresh(record)
    logger.info(
        "%s status %s for user %s (group %s, %s day %d, %s)",
        "Created" if created else "Updated",
        record.id, actor.user_id, group_id, iso_week, weekday, visibility.value,
    )
    return record


def upsert_status(db: Session, actor: User, payload: DayStatusWrite) -> list[DayStatus]:
    """Create or update the actor's status for one day; returns every record written."""
    _check_group_access(db, actor, payload.group_id)

    fields = payload.provided_fields()
    visibility = payload.resolved_visibility
    iso_week, weekday = payload.iso_week, payload.weekday

    if not payload.has_status:
        existing = (
            db.query(DayStatus)
            .filter(
                DayStatus.user_id == actor.user_id,
                DayStatus.iso_week == iso_week,
                DayStatus.weekday == weekday,
            )
            .order_by(DayStatus.id)
            .all()
        )
        if not existing:
            return [_write_record(db, actor, iso_week, weekday, payload.group_id, visibility, fields)]
        targets = [(record.group_id, record.visibility) for record in existing]
        return [
            _write_record(db, actor, iso_week, weekday, group_id, record_visibility, fields)
            for group_id, record_visibility in targets
        ]

    group_ids = user_group_ids(db, actor.user_id)
    if not group_ids:
        targets = [(None, StatusVisibility.group_only)]
    elif visibility == StatusVisibility.all_groups:
        targets = [(group_id, StatusVisibility.all_groups) for group_id in group_ids]
    else:
        if payload.group_id is None:
            raise validation_error("Group ID is required for group_only visibility.", "group_id")
        targets = [(payload.group_id, visibility)]

    return [
        _write_record(db, actor, iso_week, weekday, group_id, target_visibility, fields)
        for group_id, target_visibility in targets
    ]


def clear_status(
    db: Session,
    actor: User,
    iso_week: str,
    weekday: int,
    group_id: Optional[str] = None,
) -> int:
    """Delete the actor's status for exactly this key. Missing records are not an error."""
    _check_group_access(db, actor, group_id)

    deleted = _key_query(db, actor.user_id, group_id, iso_week, weekday).delete(
        synchronize_session=False
    )
    db.commit()
    logger.info(
        "Cleared %d status(es) for user %s (group %s, %s day %d)",
        deleted, actor.user_id, group_id, iso_week, weekday,
    )
    return deleted
