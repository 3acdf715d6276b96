"""Group management API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lunchplan.database import get_db
from lunchplan.models.group import Group, GroupMember
from lunchplan.schemas.group import (
    GroupCreate, GroupMemberAdd, GroupMemberOut, GroupMemberRoleUpdate, GroupOut,
)
from lunchplan.services import group_service
from lunchplan.services.directory import get_active_group, get_user

router = APIRouter()


@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(payload: GroupCreate, db: Session = Depends(get_db)):
    """Create a new group. Creator is automatically added as admin."""
    return group_service.create_group(db, payload)


@router.get("/", response_model=list[GroupOut])
def list_groups(user_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """List active groups, optionally only those a user belongs to."""
    query = db.query(Group).filter(Group.is_active.is_(True))
    if user_id:
        query = query.join(GroupMember).filter(GroupMember.user_id == user_id)
    return query.order_by(Group.name).all()


@router.get("/{group_id}", response_model=GroupOut)
def get_group(group_id: str, db: Session = Depends(get_db)):
    """Fetch a single group by ID with members."""
    return get_active_group(db, group_id)


@router.post("/{group_id}/members", response_model=GroupMemberOut, status_code=status.HTTP_201_CREATED)
def add_member(group_id: str, payload: GroupMemberAdd, db: Session = Depends(get_db)):
    """Add a member to a group."""
    group = get_active_group(db, group_id)
    return group_service.add_member(db, group, payload.user_id, payload.role)


@router.patch("/{group_id}/members/{user_id}", response_model=GroupMemberOut)
def update_member_role(
    group_id: str,
    user_id: str,
    payload: GroupMemberRoleUpdate,
    actor_user_id: str = Query(..., description="ID of the user performing the change"),
    db: Session = Depends(get_db),
):
    """Change a member's role (group admins only)."""
    group = get_active_group(db, group_id)
    actor = get_user(db, actor_user_id)
    return group_service.update_member_role(db, group, actor, user_id, payload.role)


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    group_id: str,
    user_id: str,
    actor_user_id: str = Query(..., description="ID of the user performing the removal"),
    db: Session = Depends(get_db),
):
    """Remove a member from a group, or leave it when removing yourself."""
    group = get_active_group(db, group_id)
    actor = get_user(db, actor_user_id)
    group_service.remove_member(db, group, actor, user_id)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: str,
    actor_user_id: str = Query(..., description="ID of the user deleting the group"),
    db: Session = Depends(get_db),
):
    """Delete a group with its memberships and day statuses (creator only)."""
    group = get_active_group(db, group_id)
    actor = get_user(db, actor_user_id)
    group_service.delete_group(db, group, actor)
