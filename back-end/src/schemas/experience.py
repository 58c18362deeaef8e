from datetime import datetime
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from schemas.base.experience import ExperienceBase
from services.resume_normalization import EXPERIENCE_ALIASES, apply_aliases
from utilities.fields_validator import reject_null_fields


# columns a partial update may leave out but never clear
EXPERIENCE_REQUIRED_FIELDS = ("company", "position", "start_date")


class ExperiencePublic(ExperienceBase):
    id: UUID
    resume_id: UUID
    created_at: datetime
    updated_at: datetime | None


class ExperienceEntry(ExperienceBase):
    """An experience row as submitted inside a whole-resume payload."""

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        if isinstance(data, dict):
            return apply_aliases(data, EXPERIENCE_ALIASES)
        return data

    @model_validator(mode="after")
    def _clear_end_date_when_current(self):
        if self.current:
            self.end_date = None
        return self


class ExperienceCreate(ExperienceEntry):
    resume_id: UUID


class ExperienceUpdate(SQLModel):
    company: str | None = Field(default=None, min_length=1, max_length=100)

    position: str | None = Field(default=None, min_length=1, max_length=100)

    start_date: str | None = Field(default=None, min_length=1)

    end_date: str | None = Field(default=None)

    current: bool | None = Field(default=None)

    description: str | None = Field(default=None)

    location: str | None = Field(default=None, max_length=100)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        if isinstance(data, dict):
            return reject_null_fields(apply_aliases(data, EXPERIENCE_ALIASES), EXPERIENCE_REQUIRED_FIELDS)
        return data
