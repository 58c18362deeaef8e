from datetime import datetime
from uuid import uuid4, UUID

from sqlmodel import Column, DateTime, Field, Relationship, Text, func
from schemas.base.education import EducationBase
from schemas.base.experience import ExperienceBase
from schemas.base.profile import ProfileBase
from schemas.base.resume import ResumeBase
from schemas.base.skill import SkillBase
from schemas.base.template import TemplateBase
from schemas.base.user import UserBase


class User(UserBase, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    password: str = Field(...)

    profile: "Profile" = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"lazy": "selectin"}
    )

    resumes: list["Resume"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Profile(ProfileBase, table=True):
    # shares its primary key with the owning user
    id: UUID = Field(foreign_key="user.id", primary_key=True, ondelete="CASCADE")
    user: User = Relationship(
        back_populates="profile",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Template(TemplateBase, table=True):
    id: int | None = Field(default=None, primary_key=True)

    description: str | None = Field(default=None, sa_column=Column(Text))

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Resume(ResumeBase, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    summary: str | None = Field(default=None, sa_column=Column(Text))

    user_id: UUID = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    user: User = Relationship(
        back_populates="resumes",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    template: Template | None = Relationship(
        sa_relationship_kwargs={"lazy": "selectin"}
    )

    # children are loaded explicitly by the aggregate loader
    experiences: list["Experience"] = Relationship(
        back_populates="resume",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    educations: list["Education"] = Relationship(
        back_populates="resume",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    skills: list["Skill"] = Relationship(
        back_populates="resume",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Experience(ExperienceBase, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    description: str | None = Field(default=None, sa_column=Column(Text))

    resume_id: UUID = Field(foreign_key="resume.id", index=True, ondelete="CASCADE")
    resume: Resume = Relationship(
        back_populates="experiences",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Education(EducationBase, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    description: str | None = Field(default=None, sa_column=Column(Text))

    resume_id: UUID = Field(foreign_key="resume.id", index=True, ondelete="CASCADE")
    resume: Resume = Relationship(
        back_populates="educations",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )


class Skill(SkillBase, table=True):
    id: UUID = Field(default_factory=uuid4, primary_key=True)

    resume_id: UUID = Field(foreign_key="resume.id", index=True, ondelete="CASCADE")
    resume: Resume = Relationship(
        back_populates="skills",
        sa_relationship_kwargs={"lazy": "noload"}
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )

    updated_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True), onupdate=func.now()),
    )
