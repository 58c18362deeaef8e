from datetime import datetime
from uuid import UUID

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from schemas.base.resume import ResumeBase
from schemas.education import EducationEntry, EducationPublic
from schemas.experience import ExperienceEntry, ExperiencePublic
from schemas.profile import ProfilePublic
from schemas.skill import SkillGroup, SkillGroupPublic
from utilities.enumerables import ResumeSection
from utilities.fields_validator import reject_null_fields


class ResumePublic(ResumeBase):
    id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime | None


class ResumeCreate(ResumeBase):
    """
    A whole resume: the root row plus its sections, written in one go.

    ``use_sample_content`` fills empty sections with placeholder content
    when a user starts from a template.
    """

    experiences: list[ExperienceEntry] = Field(default_factory=list)

    educations: list[EducationEntry] = Field(default_factory=list)

    skills: list[SkillGroup] = Field(default_factory=list)

    use_sample_content: bool = Field(default=False)

    # admins may create on behalf of another user; ignored for regular users
    user_id: UUID | None = Field(default=None)


class ResumeUpdate(SQLModel):
    # min_length=1, max_length=100
    title: str | None = Field(default=None, min_length=1, max_length=100)

    summary: str | None = Field(default=None)

    template_id: int | None = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _title_cannot_be_cleared(cls, data):
        return reject_null_fields(data, ("title",))


class ResumeAggregatePublic(ResumePublic):
    profile: ProfilePublic | None = None
    experiences: list[ExperiencePublic] = []
    educations: list[EducationPublic] = []
    skills: list[SkillGroupPublic] = []

    # names of child collections that could not be loaded
    partial_failures: list[str] = []


class SectionProgress(SQLModel):
    section: ResumeSection
    title: str
    subtitle: str
    completed: bool


class ResumeProgress(SQLModel):
    resume_id: UUID
    sections: list[SectionProgress]
    completed_count: int
    total_count: int
    percentage: int
    next_section: ResumeSection | None = None
