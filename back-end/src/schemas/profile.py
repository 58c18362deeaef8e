from uuid import UUID
from datetime import date, datetime

from pydantic import computed_field
from sqlmodel import Field, SQLModel

from schemas.base.profile import ProfileBase


def get_initials(name: str | None) -> str:
    """First letters of up to two name parts, "U" when there is no name."""
    if not name or not name.strip():
        return "U"
    return "".join(part[0] for part in name.split()).upper()[:2]


class ProfilePublic(ProfileBase):
    id: UUID
    created_at: datetime
    updated_at: datetime | None

    @computed_field
    @property
    def initials(self) -> str:
        return get_initials(self.full_name)


class ProfileUpdate(SQLModel):
    # max_length=100
    full_name: str | None = Field(default=None, max_length=100)

    # max_length=100
    location: str | None = Field(default=None, max_length=100)

    birth_date: date | None = Field(default=None)
