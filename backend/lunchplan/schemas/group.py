"""Pydantic schemas for Groups."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from lunchplan.models.group import GroupCategory, GroupPrivacy, GroupRole


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    created_by: str
    privacy: GroupPrivacy = GroupPrivacy.private
    category: Optional[GroupCategory] = None
    tags: list[str] = []


class GroupOut(BaseModel):
    group_id: str
    name: str
    description: Optional[str] = None
    code: str
    invite_link: str
    created_by: str
    is_active: bool
    privacy: GroupPrivacy
    category: Optional[GroupCategory] = None
    tags: list[str] = Field(default=[], validation_alias="tag_list")
    created_at: datetime
    members: list[GroupMemberOut] = []

    model_config = {"from_attributes": True}


class GroupMemberAdd(BaseModel):
    user_id: str
    role: GroupRole = GroupRole.member


class GroupMemberRoleUpdate(BaseModel):
    role: GroupRole


class GroupMemberOut(BaseModel):
    user_id: str
    role: GroupRole
    joined_at: datetime

    model_config = {"from_attributes": True}


class GroupSummary(BaseModel):
    """A group as seen by one of its members on the week-status page."""

    group_id: str
    name: str
    description: Optional[str] = None
    code: str
    invite_link: str
    is_admin: bool
    is_creator: bool


# Rebuild GroupOut now that GroupMemberOut is defined
GroupOut.model_rebuild()
