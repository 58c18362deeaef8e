from uuid import UUID
from datetime import datetime

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from schemas.base.user import UserBase


class UserPublic(UserBase):
    id: UUID
    created_at: datetime
    updated_at: datetime | None


class UserCreate(SQLModel):
    email: EmailStr = Field(...)

    # min_length=8, see utilities.fields_validator
    password: str = Field(...)

    full_name: str | None = Field(default=None, max_length=100)
