# mcq_practice/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

Role = Literal["student", "admin"]


class UserBase(BaseModel):
    username: str
    full_name: str
    email: EmailStr
    role: Role = "student"


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserUpdate(BaseModel):
    username: str | None = None
    full_name: str | None = None
    email: EmailStr | None = None
    role: Role | None = None


class AdminPasswordReset(BaseModel):
    new_password: str = Field(min_length=6)


class UserPublic(UserBase):
    id: int
    approved: bool
    active: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
