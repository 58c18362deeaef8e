from datetime import datetime
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from schemas.base.education import EducationBase
from services.resume_normalization import EDUCATION_ALIASES, apply_aliases
from utilities.fields_validator import reject_null_fields


# columns a partial update may leave out but never clear
EDUCATION_REQUIRED_FIELDS = ("institution", "degree", "start_date")


class EducationPublic(EducationBase):
    id: UUID
    resume_id: UUID
    created_at: datetime
    updated_at: datetime | None


class EducationEntry(EducationBase):
    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        # older clients send "school" / "field"
        if isinstance(data, dict):
            return apply_aliases(data, EDUCATION_ALIASES)
        return data

    @model_validator(mode="after")
    def _clear_end_date_when_current(self):
        if self.current:
            self.end_date = None
        return self


class EducationCreate(EducationEntry):
    resume_id: UUID


class EducationUpdate(SQLModel):
    institution: str | None = Field(default=None, min_length=1, max_length=100)

    degree: str | None = Field(default=None, min_length=1, max_length=100)

    field_of_study: str | None = Field(default=None, max_length=100)

    start_date: str | None = Field(default=None, min_length=1)

    end_date: str | None = Field(default=None)

    current: bool | None = Field(default=None)

    description: str | None = Field(default=None)

    location: str | None = Field(default=None, max_length=100)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        if isinstance(data, dict):
            return reject_null_fields(apply_aliases(data, EDUCATION_ALIASES), EDUCATION_REQUIRED_FIELDS)
        return data
