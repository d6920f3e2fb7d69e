from __future__ import annotations
from enum import Enum
from typing import Optional
from pydantic import BaseModel, field_validator


class UserRole(str, Enum):
    student = "student"
    admin = "admin"


class Profile(BaseModel):
    user_id: str
    name: str = ""
    register_number: str = ""
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("name", "register_number", mode="before")
    @classmethod
    def _null_to_blank(cls, v):
        # Admin profiles are created without a register number.
        return "" if v is None else v


class AllowedStudent(BaseModel):
    name: str
    register_number: str
