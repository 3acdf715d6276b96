"""DayStatus ORM model — one lunch plan per (user, group, iso_week, weekday)."""
import enum
from sqlalchemy import (
    Column, Integer, String, Text, Time, DateTime, ForeignKey, Index, UniqueConstraint,
    CheckConstraint, Enum as SAEnum, text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from lunchplan.database import Base


class LunchStatus(str, enum.Enum):
    lunchbox = "Lunchbox"
    buying = "Buying"
    home = "Home"
    away = "Away"


class StatusVisibility(str, enum.Enum):
    group_only = "group_only"
    all_groups = "all_groups"

    @property
    def label(self) -> str:
        return {
            StatusVisibility.group_only: "Group Only",
            StatusVisibility.all_groups: "All Groups",
        }[self]

    @property
    def description(self) -> str:
        return {
            StatusVisibility.group_only: "Visible only to members of the specific group",
            StatusVisibility.all_groups: "Visible to all groups you belong to",
        }[self]


class DayStatus(Base):
    __tablename__ = "day_statuses"
    __table_args__ = (
        UniqueConstraint("user_id", "group_id", "iso_week", "weekday", name="uq_day_status_key"),
        # NULL group ids never collide in a plain unique constraint
        Index(
            "uq_day_status_personal_key",
            "user_id", "iso_week", "weekday",
            unique=True,
            sqlite_where=text("group_id IS NULL"),
            postgresql_where=text("group_id IS NULL"),
        ),
        CheckConstraint("weekday BETWEEN 1 AND 5", name="ck_day_status_weekday"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(String(36), ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=True)
    iso_week = Column(String(10), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)
    status = Column(SAEnum(LunchStatus, values_callable=lambda e: [m.value for m in e]), nullable=True)
    arrival_time = Column(Time, nullable=True)
    location = Column(String(120), nullable=True)
    start_location = Column(String(120), nullable=True)
    eat_location = Column(String(120), nullable=True)
    note = Column(Text, nullable=True)
    visibility = Column(
        SAEnum(StatusVisibility),
        nullable=False,
        default=StatusVisibility.group_only,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="day_statuses")
    group = relationship("Group", back_populates="day_statuses")

    @property
    def is_group_only(self) -> bool:
        return self.visibility == StatusVisibility.group_only

    @property
    def is_all_groups(self) -> bool:
        return self.visibility == StatusVisibility.all_groups
