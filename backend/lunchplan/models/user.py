"""User ORM model — the read-mostly user directory."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from lunchplan.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    avatar = Column(String(500), nullable=True)  # absolute URL, storage is external
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    memberships = relationship("GroupMember", back_populates="user", cascade="all, delete-orphan")
    day_statuses = relationship("DayStatus", back_populates="user", cascade="all, delete-orphan")
