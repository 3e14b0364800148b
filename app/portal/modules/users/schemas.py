from __future__ import annotations

from typing import Literal, Optional

from pydantic import EmailStr, Field

from app.portal.validation import BaseSchema

RoleKey = Literal["admin", "editor", "viewer"]


class UserCreate(BaseSchema):
    name: str = Field(min_length=2, max_length=128)
    email: EmailStr
    password: str = Field(min_length=8, max_length=256)
    role: RoleKey = "viewer"
    is_active: bool = True


class UserUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=128)
    role: Optional[RoleKey] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=8, max_length=256)
