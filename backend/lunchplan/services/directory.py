"""User and group directory lookups shared by the status services."""
from typing import Optional

from sqlalchemy.orm import Session

from lunchplan.errors import not_found
from lunchplan.models.group import Group, GroupMember, GroupRole
from lunchplan.models.user import User


def get_user(db: Session, user_id: str, field: Optional[str] = None) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise not_found("User not found", field)
    return user


def get_active_group(db: Session, group_id: str, field: Optional[str] = None) -> Group:
    group = (
        db.query(Group)
        .filter(Group.group_id == group_id, Group.is_active.is_(True))
        .first()
    )
    if not group:
        raise not_found("Group not found", field)
    return group


def user_group_ids(db: Session, user_id: str) -> list[str]:
    """Ids of every active group the user belongs to, oldest membership first."""
    rows = (
        db.query(GroupMember.group_id)
        .join(Group, Group.group_id == GroupMember.group_id)
        .filter(GroupMember.user_id == user_id, Group.is_active.is_(True))
        .order_by(GroupMember.joined_at, GroupMember.group_id)
        .all()
    )
    return [group_id for (group_id,) in rows]


def get_membership(db: Session, group_id: str, user_id: str) -> Optional[GroupMember]:
    return (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        .first()
    )


def is_member(db: Session, group_id: str, user_id: str) -> bool:
    return get_membership(db, group_id, user_id) is not None


def is_admin(db: Session, group_id: str, user_id: str) -> bool:
    membership = get_membership(db, group_id, user_id)
    return membership is not None and membership.role == GroupRole.admin
