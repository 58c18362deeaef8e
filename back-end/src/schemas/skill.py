from datetime import datetime
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from schemas.base.skill import SkillBase
from services.resume_normalization import DEFAULT_SKILL_CATEGORY, SKILL_ALIASES, apply_aliases
from utilities.enumerables import SkillLevel
from utilities.fields_validator import reject_null_fields


SKILL_REQUIRED_FIELDS = ("name",)


class SkillPublic(SkillBase):
    id: UUID
    resume_id: UUID
    created_at: datetime
    updated_at: datetime | None


class SkillEntry(SkillBase):
    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        if isinstance(data, dict):
            return apply_aliases(data, SKILL_ALIASES)
        return data


class SkillCreate(SkillEntry):
    resume_id: UUID


class SkillUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)

    level: SkillLevel | None = Field(default=None)

    category: str | None = Field(default=None, max_length=50)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_names(cls, data):
        if isinstance(data, dict):
            return reject_null_fields(apply_aliases(data, SKILL_ALIASES), SKILL_REQUIRED_FIELDS)
        return data


class SkillGroup(SQLModel):
    """Skills submitted under one category label."""

    category: str = Field(default=DEFAULT_SKILL_CATEGORY, max_length=50)

    skills: list[SkillEntry] = Field(default_factory=list)


class SkillGroupPublic(SQLModel):
    category: str
    skills: list[SkillPublic] = []
