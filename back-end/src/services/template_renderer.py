"""
Template renderer: turns a composed resume view into a display tree.

Each layout kind maps to one strategy, a pure function that arranges the
same sections (identity, summary, experience, education, skills) in its own
way. Nothing here touches the database.
"""

from datetime import date, datetime
import re
from typing import Callable

from loguru import logger

from models.relational_models import Template
from schemas.profile import get_initials
from schemas.rendered_resume import (
    RenderedEntry,
    RenderedIdentity,
    RenderedResume,
    RenderedSection,
    RenderedSkillBadge,
    RenderedSkillGroup,
)
from schemas.resume import ResumeAggregatePublic
from utilities.enumerables import ResumeSection, SectionPlacement, TemplateLayout


DEFAULT_LAYOUT = TemplateLayout.STANDARD
DEFAULT_ACCENT_COLOR = "#003366"

# category names that share a strategy with a layout kind
LAYOUT_ALIASES = {"minimalist": TemplateLayout.SIMPLE.value}

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# strptime alone would take "20-01" as the year 20
DATE_PATTERN = re.compile(r"\d{4}-\d{1,2}(?:-\d{1,2})?")

SECTION_TITLES = {
    ResumeSection.SUMMARY: "Summary",
    ResumeSection.EXPERIENCE: "Experience",
    ResumeSection.EDUCATION: "Education",
    ResumeSection.SKILLS: "Skills",
}

PLACEHOLDERS = {
    ResumeSection.SUMMARY: "No summary added yet.",
    ResumeSection.EXPERIENCE: "No experience added yet.",
    ResumeSection.EDUCATION: "No education added yet.",
    ResumeSection.SKILLS: "No skills added yet.",
}

NAME_PLACEHOLDER = "Your Name"

Strategy = Callable[[ResumeAggregatePublic], dict]

STRATEGIES: dict[TemplateLayout, Strategy] = {}


# ------------------------------------------------------------------
# Dates
# ------------------------------------------------------------------

def parse_date(value: str | None) -> date | None:
    """Parse "YYYY-MM", "YYYY-MM-DD" or an ISO timestamp; None when unparseable."""
    if not value:
        return None
    text = value.strip().split("T", 1)[0]
    if not DATE_PATTERN.fullmatch(text):
        return None
    for fmt in ("%Y-%m-%d", "%Y-%m"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_short_date(value: str | None) -> str:
    """
    "2020-01" -> "Jan 2020". Malformed values come back unchanged.
    """
    if not value:
        return ""
    parsed = parse_date(value)
    if parsed is None:
        return value
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.year}"


def format_date_range(start: str | None, end: str | None = None, current: bool = False) -> str:
    """
    Render a period as "<start> - <end>".

    The end is "Present" for current entries, the short end date otherwise,
    and is left out when there is no end date.
    """
    parts = []
    if start:
        parts.append(format_short_date(start))
    if current:
        parts.append("Present")
    elif end:
        parts.append(format_short_date(end))
    return " - ".join(parts)


# ------------------------------------------------------------------
# Section builders shared by the strategies
# ------------------------------------------------------------------

def _identity(view: ResumeAggregatePublic, placement: SectionPlacement, **style) -> RenderedIdentity:
    profile = view.profile
    full_name = profile.full_name if profile and profile.full_name else None
    return RenderedIdentity(
        full_name=full_name or NAME_PLACEHOLDER,
        initials=get_initials(full_name),
        email=profile.email if profile else None,
        location=profile.location if profile else None,
        avatar_url=profile.avatar_url if profile else None,
        headline=view.title,
        placement=placement,
        **style,
    )


def _summary(view: ResumeAggregatePublic, placement: SectionPlacement, heading_style: str) -> RenderedSection:
    text = view.summary.strip() if view.summary else None
    return RenderedSection(
        key=ResumeSection.SUMMARY,
        title=SECTION_TITLES[ResumeSection.SUMMARY],
        placement=placement,
        heading_style=heading_style,
        text=text,
        placeholder=None if text else PLACEHOLDERS[ResumeSection.SUMMARY],
    )


def _experience(view: ResumeAggregatePublic, placement: SectionPlacement, heading_style: str) -> RenderedSection:
    entries = [
        RenderedEntry(
            heading=item.position,
            subheading=item.company,
            period=format_date_range(item.start_date, item.end_date, item.current),
            location=item.location,
            description=item.description,
        )
        for item in view.experiences
    ]
    return RenderedSection(
        key=ResumeSection.EXPERIENCE,
        title=SECTION_TITLES[ResumeSection.EXPERIENCE],
        placement=placement,
        heading_style=heading_style,
        entries=entries,
        placeholder=None if entries else PLACEHOLDERS[ResumeSection.EXPERIENCE],
    )


def _education(view: ResumeAggregatePublic, placement: SectionPlacement, heading_style: str) -> RenderedSection:
    entries = [
        RenderedEntry(
            heading=item.degree,
            subheading=item.institution,
            detail=item.field_of_study,
            period=format_date_range(item.start_date, item.end_date, item.current),
            location=item.location,
            description=item.description,
        )
        for item in view.educations
    ]
    return RenderedSection(
        key=ResumeSection.EDUCATION,
        title=SECTION_TITLES[ResumeSection.EDUCATION],
        placement=placement,
        heading_style=heading_style,
        entries=entries,
        placeholder=None if entries else PLACEHOLDERS[ResumeSection.EDUCATION],
    )


def _skills(
    view: ResumeAggregatePublic,
    placement: SectionPlacement,
    heading_style: str,
    skill_style: str,
) -> RenderedSection:
    groups = [
        RenderedSkillGroup(
            category=group.category,
            badges=[RenderedSkillBadge(name=skill.name, level=skill.level) for skill in group.skills],
        )
        for group in view.skills
        if group.skills
    ]
    return RenderedSection(
        key=ResumeSection.SKILLS,
        title=SECTION_TITLES[ResumeSection.SKILLS],
        placement=placement,
        heading_style=heading_style,
        skill_groups=groups,
        skill_style=skill_style,
        placeholder=None if groups else PLACEHOLDERS[ResumeSection.SKILLS],
    )


# ------------------------------------------------------------------
# Strategies
# ------------------------------------------------------------------

def register(layout: TemplateLayout) -> Callable[[Strategy], Strategy]:
    def decorator(func: Strategy) -> Strategy:
        STRATEGIES[layout] = func
        return func
    return decorator


@register(TemplateLayout.STANDARD)
def render_standard(view: ResumeAggregatePublic) -> dict:
    """Two columns: accent sidebar with identity and skills, main column with the rest."""
    main, sidebar = SectionPlacement.MAIN, SectionPlacement.SIDEBAR
    return {
        "columns": 2,
        "accent_area": sidebar,
        "identity": _identity(view, sidebar, accent_background=True),
        "sections": [
            _summary(view, main, "accent"),
            _experience(view, main, "accent"),
            _education(view, main, "accent"),
            _skills(view, sidebar, "plain", "badge"),
        ],
    }


@register(TemplateLayout.MODERN)
def render_modern(view: ResumeAggregatePublic) -> dict:
    """Plain sidebar with identity, accent main area with every section."""
    main = SectionPlacement.MAIN
    return {
        "columns": 2,
        "accent_area": main,
        "identity": _identity(view, SectionPlacement.SIDEBAR),
        "sections": [
            _summary(view, main, "plain"),
            _experience(view, main, "plain"),
            _education(view, main, "plain"),
            _skills(view, main, "plain", "badge"),
        ],
    }


@register(TemplateLayout.CREATIVE)
def render_creative(view: ResumeAggregatePublic) -> dict:
    """Colored header band above a single-column body; circular skill badges."""
    main, header = SectionPlacement.MAIN, SectionPlacement.HEADER
    return {
        "columns": 1,
        "accent_area": header,
        "identity": _identity(view, header, accent_background=True),
        "sections": [
            _summary(view, main, "accent"),
            _experience(view, main, "accent"),
            _education(view, main, "accent"),
            _skills(view, main, "accent", "circle"),
        ],
    }


@register(TemplateLayout.PROFESSIONAL)
def render_professional(view: ResumeAggregatePublic) -> dict:
    main = SectionPlacement.MAIN
    return {
        "columns": 1,
        "accent_area": None,
        "identity": _identity(view, SectionPlacement.HEADER, border="accent-bottom"),
        "sections": [
            _summary(view, main, "accent-border"),
            _experience(view, main, "accent-border"),
            _education(view, main, "accent-border"),
            _skills(view, main, "accent-border", "two-column-list"),
        ],
    }


@register(TemplateLayout.SIMPLE)
def render_simple(view: ResumeAggregatePublic) -> dict:
    main = SectionPlacement.MAIN
    return {
        "columns": 1,
        "accent_area": None,
        "identity": _identity(view, SectionPlacement.HEADER, centered=True),
        "sections": [
            _summary(view, main, "divider"),
            _experience(view, main, "divider"),
            _education(view, main, "divider"),
            _skills(view, main, "divider", "badge"),
        ],
    }


def select_strategy(layout: str | TemplateLayout | None) -> tuple[TemplateLayout, Strategy]:
    """
    Resolve a layout kind to its strategy.

    "minimalist" is an alias of "simple". Missing or unknown kinds fall back
    to the standard strategy.
    """
    key = layout.value if isinstance(layout, TemplateLayout) else (layout or "").strip().lower()
    key = LAYOUT_ALIASES.get(key, key)
    try:
        resolved = TemplateLayout(key)
    except ValueError:
        if key:
            logger.debug(f"Unknown layout '{layout}', falling back to {DEFAULT_LAYOUT.value}")
        resolved = DEFAULT_LAYOUT
    return resolved, STRATEGIES[resolved]


def render_resume(
    view: ResumeAggregatePublic,
    template: Template | None = None,
    layout: str | None = None,
) -> RenderedResume:
    """
    Render the resume view with the template's layout, or with ``layout``
    when given. Without a template the default layout and accent color apply.
    """
    requested = layout
    if requested is None and template is not None:
        requested = template.layout.value if isinstance(template.layout, TemplateLayout) else template.layout

    resolved, strategy = select_strategy(requested)

    return RenderedResume(
        resume_id=view.id,
        template_id=template.id if template is not None else view.template_id,
        layout=resolved,
        requested_layout=requested,
        accent_color=template.color if template is not None and template.color else DEFAULT_ACCENT_COLOR,
        **strategy(view),
    )
