from uuid import UUID

from sqlmodel import SQLModel

from utilities.enumerables import ResumeSection, SectionPlacement, SkillLevel, TemplateLayout


class RenderedIdentity(SQLModel):
    full_name: str
    initials: str
    email: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    headline: str | None = None

    placement: SectionPlacement
    centered: bool = False

    # True when the block sits on the accent color (sidebar or header band)
    accent_background: bool = False

    # "accent-bottom" draws an accent rule under the block
    border: str | None = None


class RenderedEntry(SQLModel):
    heading: str
    subheading: str | None = None
    detail: str | None = None
    period: str
    location: str | None = None
    description: str | None = None


class RenderedSkillBadge(SQLModel):
    name: str
    level: SkillLevel | None = None


class RenderedSkillGroup(SQLModel):
    category: str
    badges: list[RenderedSkillBadge] = []


class RenderedSection(SQLModel):
    key: ResumeSection
    title: str
    placement: SectionPlacement

    # "plain" | "accent" | "accent-border" | "divider"
    heading_style: str = "plain"

    text: str | None = None
    entries: list[RenderedEntry] = []
    skill_groups: list[RenderedSkillGroup] = []

    # "badge" | "circle" | "two-column-list", skills section only
    skill_style: str | None = None

    # set when the section has no content
    placeholder: str | None = None


class RenderedResume(SQLModel):
    resume_id: UUID
    template_id: int | None = None

    # strategy actually used, after aliasing and fallback
    layout: TemplateLayout
    requested_layout: str | None = None

    accent_color: str
    columns: int = 1

    # region painted with the accent color, if any
    accent_area: SectionPlacement | None = None

    identity: RenderedIdentity
    sections: list[RenderedSection] = []
