"""Visibility service — who may see whose day statuses.

Rules, in priority order:
1. A viewer always sees their own statuses.
2. A viewer in no group sees nothing else.
3. In a group-scoped view, other users' statuses are visible when they belong
   to that group (either visibility), or when they are personal
   (group_id NULL, group_only) statuses of a member of that group.
4. In the global view, the same applies across every group the viewer
   belongs to.

``can_see`` is the single-record form of the global view and must agree with
``resolve_visible_statuses(viewer, week)`` for every record.
"""
import logging
from typing import Optional

from sqlalchemy import and_, case, or_, select
from sqlalchemy.orm import Session

from lunchplan.errors import forbidden
from lunchplan.models.day_status import DayStatus, StatusVisibility
from lunchplan.models.group import Group, GroupMember
from lunchplan.models.user import User
from lunchplan.services.directory import user_group_ids

logger = logging.getLogger(__name__)


def _ordered(query):
    return query.order_by(
        DayStatus.user_id,
        DayStatus.weekday,
        case((DayStatus.group_id.is_(None), 0), else_=1),
        DayStatus.group_id,
        DayStatus.id,
    )


def resolve_visible_statuses(
    db: Session,
    viewer: User,
    iso_week: str,
    group: Optional[Group] = None,
) -> list[DayStatus]:
    """Return every status of ``iso_week`` the viewer may see, optionally scoped to one group."""
    group_ids = user_group_ids(db, viewer.user_id)

    if group is not None and group.group_id not in group_ids:
        raise forbidden("You are not a member of this group.", "group_id")

    query = db.query(DayStatus).filter(DayStatus.iso_week == iso_week)

    if not group_ids:
        return _ordered(query.filter(DayStatus.user_id == viewer.user_id)).all()

    scope_ids = [group.group_id] if group is not None else group_ids
    scope_member_ids = select(GroupMember.user_id).where(GroupMember.group_id.in_(scope_ids))

    query = query.filter(
        or_(
            DayStatus.user_id == viewer.user_id,
            and_(
                DayStatus.visibility == StatusVisibility.all_groups,
                DayStatus.group_id.in_(scope_ids),
            ),
            and_(
                DayStatus.visibility == StatusVisibility.group_only,
                DayStatus.group_id.in_(scope_ids),
            ),
            and_(
                DayStatus.visibility == StatusVisibility.group_only,
                DayStatus.group_id.is_(None),
                DayStatus.user_id.in_(scope_member_ids),
            ),
        )
    )
    statuses = _ordered(query).all()
    logger.debug(
        "Resolved %d statuses for viewer %s in week %s (group %s)",
        len(statuses), viewer.user_id, iso_week, group.group_id if group else None,
    )
    return statuses


def can_see(db: Session, viewer: User, status: DayStatus) -> bool:
    """Point check: may ``viewer`` see this single status?"""
    if status.user_id == viewer.user_id:
        return True

    group_ids = user_group_ids(db, viewer.user_id)
    if not group_ids:
        return False

    if status.group_id is not None:
        return status.group_id in group_ids

    if status.visibility != StatusVisibility.group_only:
        return False
    return _shares_group(db, status.user_id, group_ids)


def _shares_group(db: Session, user_id: str, group_ids: list[str]) -> bool:
    shared = (
        db.query(GroupMember.group_id)
        .filter(GroupMember.user_id == user_id, GroupMember.group_id.in_(group_ids))
        .first()
    )
    return shared is not None


def visible_users(db: Session, viewer: User) -> list[User]:
    """The viewer first, then everyone sharing a group with them, by name."""
    group_ids = user_group_ids(db, viewer.user_id)
    if not group_ids:
        return [viewer]

    others = (
        db.query(User)
        .join(GroupMember, GroupMember.user_id == User.user_id)
        .filter(GroupMember.group_id.in_(group_ids), User.user_id != viewer.user_id)
        .distinct()
        .order_by(User.name, User.user_id)
        .all()
    )
    return [viewer] + others


def group_members(db: Session, viewer: User, group: Group) -> list[User]:
    """Members of one group, the viewer first, then by name."""
    members = (
        db.query(User)
        .join(GroupMember, GroupMember.user_id == User.user_id)
        .filter(GroupMember.group_id == group.group_id)
        .order_by(
            case((User.user_id == viewer.user_id, 0), else_=1),
            User.name,
            User.user_id,
        )
        .all()
    )
    return members


def group_statuses_by_user(statuses: list[DayStatus]) -> dict[str, list[DayStatus]]:
    """Bucket already-ordered statuses by owner, keeping their order."""
    grouped: dict[str, list[DayStatus]] = {}
    for status in statuses:
        grouped.setdefault(status.user_id, []).append(status)
    return grouped
