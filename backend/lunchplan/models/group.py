"""Group and GroupMember ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from lunchplan.database import Base


class GroupRole(str, enum.Enum):
    admin = "admin"
    member = "member"


class GroupPrivacy(str, enum.Enum):
    private = "private"
    public = "public"


class GroupCategory(str, enum.Enum):
    location = "location"
    interest = "interest"
    program = "program"
    course = "course"
    other = "other"


class Group(Base):
    __tablename__ = "groups"

    group_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    code = Column(String(6), nullable=False, unique=True)
    invite_link = Column(String(32), nullable=False, unique=True)
    created_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    privacy = Column(SAEnum(GroupPrivacy), nullable=False, default=GroupPrivacy.private)
    category = Column(SAEnum(GroupCategory), nullable=True)
    tags = Column(String(255), nullable=True)  # comma-separated
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")
    day_statuses = relationship("DayStatus", back_populates="group", cascade="all, delete-orphan")

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]


class GroupMember(Base):
    __tablename__ = "group_members"

    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    role = Column(SAEnum(GroupRole), nullable=False, default=GroupRole.member)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="memberships")
