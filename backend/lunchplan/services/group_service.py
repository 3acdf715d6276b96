"""Group service — group creation and membership administration.

Authorization rules:
- Only admins may change roles or remove other members
- Any member may remove themselves (leave)
- The creator can neither leave, be removed, nor have their role changed
- Only the creator may delete the group
"""
import logging
import secrets
import string

from sqlalchemy.orm import Session

from lunchplan.errors import conflict, forbidden, not_found, validation_error
from lunchplan.models.day_status import DayStatus
from lunchplan.models.group import Group, GroupMember, GroupRole
from lunchplan.models.user import User
from lunchplan.schemas.group import GroupCreate, GroupSummary
from lunchplan.services.directory import get_membership, get_user, is_admin

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
LINK_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 6
INVITE_LINK_LENGTH = 32


def _random_token(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _unique_token(db: Session, column, alphabet: str, length: int) -> str:
    while True:
        token = _random_token(alphabet, length)
        if not db.query(Group).filter(column == token).first():
            return token


def create_group(db: Session, payload: GroupCreate) -> Group:
    """Create a group with a fresh join code and invite link; the creator joins as admin."""
    get_user(db, payload.created_by, field="created_by")

    group = Group(
        name=payload.name,
        description=payload.description,
        code=_unique_token(db, Group.code, CODE_ALPHABET, CODE_LENGTH),
        invite_link=_unique_token(db, Group.invite_link, LINK_ALPHABET, INVITE_LINK_LENGTH),
        created_by=payload.created_by,
        privacy=payload.privacy,
        category=payload.category,
        tags=",".join(tag.strip() for tag in payload.tags if tag.strip()) or None,
    )
    db.add(group)
    db.flush()

    db.add(GroupMember(group_id=group.group_id, user_id=payload.created_by, role=GroupRole.admin))
    db.commit()
    db.refresh(group)
    logger.info("Created group '%s' (%s) by user %s", group.name, group.group_id, payload.created_by)
    return group


def add_member(db: Session, group: Group, user_id: str, role: GroupRole) -> GroupMember:
    get_user(db, user_id, field="user_id")
    if get_membership(db, group.group_id, user_id):
        raise conflict("User is already a member of this group", "user_id")

    member = GroupMember(group_id=group.group_id, user_id=user_id, role=role)
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("Added user %s to group %s as %s", user_id, group.group_id, role.value)
    return member


def _require_member(db: Session, group: Group, user_id: str) -> GroupMember:
    member = get_membership(db, group.group_id, user_id)
    if not member:
        raise not_found("User is not a member of this group.", "user_id")
    return member


def update_member_role(db: Session, group: Group, actor: User, user_id: str, role: GroupRole) -> GroupMember:
    if not is_admin(db, group.group_id, actor.user_id):
        raise forbidden("You are not authorized to change member roles.")
    if group.created_by == user_id:
        raise validation_error("Cannot change the group creator's role.", "user_id")

    member = _require_member(db, group, user_id)
    member.role = role
    db.commit()
    db.refresh(member)
    logger.info("User %s set role of %s in group %s to %s", actor.user_id, user_id, group.group_id, role.value)
    return member


def remove_member(db: Session, group: Group, actor: User, user_id: str) -> None:
    """Remove a member; removing yourself is leaving the group."""
    leaving = actor.user_id == user_id
    if leaving:
        _require_member(db, group, user_id)
    elif not is_admin(db, group.group_id, actor.user_id):
        raise forbidden("You are not authorized to remove members.")

    if group.created_by == user_id:
        if leaving:
            raise validation_error(
                "Group creators cannot leave their groups. Delete the group instead."
            )
        raise validation_error("Cannot remove the group creator.", "user_id")

    member = _require_member(db, group, user_id)
    db.delete(member)
    db.commit()
    logger.info("User %s removed %s from group %s", actor.user_id, user_id, group.group_id)


def delete_group(db: Session, group: Group, actor: User) -> None:
    """Delete a group together with its memberships and day statuses."""
    if group.created_by != actor.user_id:
        raise forbidden("Only the group creator can delete the group.")

    group_id = group.group_id
    status_count = db.query(DayStatus).filter(DayStatus.group_id == group_id).count()
    # Memberships and day statuses go with the group through the ORM cascade
    db.delete(group)
    db.commit()
    logger.info(
        "Deleted group %s by creator %s (%d day statuses removed)",
        group_id, actor.user_id, status_count,
    )


def groups_for_user(db: Session, user: User) -> list[GroupSummary]:
    """The user's active groups with their role flags, by name."""
    rows = (
        db.query(Group, GroupMember.role)
        .join(GroupMember, GroupMember.group_id == Group.group_id)
        .filter(GroupMember.user_id == user.user_id, Group.is_active.is_(True))
        .order_by(Group.name, Group.group_id)
        .all()
    )
    return [
        GroupSummary(
            group_id=group.group_id,
            name=group.name,
            description=group.description,
            code=group.code,
            invite_link=group.invite_link,
            is_admin=role == GroupRole.admin,
            is_creator=group.created_by == user.user_id,
        )
        for group, role in rows
    ]
