"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=500)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", "email")
    @classmethod
    def _not_null(cls, value: Optional[str]) -> str:
        # May be omitted, but never cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
