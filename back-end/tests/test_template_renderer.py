import pytest

from models.relational_models import Template
from services.template_renderer import (
    DEFAULT_ACCENT_COLOR,
    format_date_range,
    format_short_date,
    render_resume,
    select_strategy,
)
from utilities.enumerables import ResumeSection, SectionPlacement, TemplateLayout

from factories import make_view


def section(rendered, key):
    return next(s for s in rendered.sections if s.key == key)


def test_short_date_formats_month_and_year():
    assert format_short_date("2020-01") == "Jan 2020"
    assert format_short_date("2019-12-24") == "Dec 2019"
    assert format_short_date("2021-06-01T00:00:00Z") == "Jun 2021"


def test_malformed_date_is_returned_unchanged():
    assert format_short_date("bad-date") == "bad-date"
    assert format_short_date("2020-13") == "2020-13"
    assert format_short_date("20-01") == "20-01"
    assert format_short_date("220-01-15") == "220-01-15"
    assert format_date_range("bad-date") == "bad-date"


def test_current_range_ends_with_present():
    assert format_date_range("2020-01", None, current=True) == "Jan 2020 - Present"


def test_current_wins_over_a_stale_end_date():
    assert format_date_range("2020-01", "2020-06", current=True) == "Jan 2020 - Present"


def test_closed_range():
    assert format_date_range("2020-01", "2020-06") == "Jan 2020 - Jun 2020"


def test_open_range_without_end_omits_the_end():
    assert format_date_range("2020-01") == "Jan 2020"


@pytest.mark.parametrize(
    "requested, expected",
    [
        ("standard", TemplateLayout.STANDARD),
        ("modern", TemplateLayout.MODERN),
        ("creative", TemplateLayout.CREATIVE),
        ("professional", TemplateLayout.PROFESSIONAL),
        ("simple", TemplateLayout.SIMPLE),
        ("minimalist", TemplateLayout.SIMPLE),
        ("Modern", TemplateLayout.MODERN),
        ("exotic", TemplateLayout.STANDARD),
        ("", TemplateLayout.STANDARD),
        (None, TemplateLayout.STANDARD),
    ],
)
def test_select_strategy(requested, expected):
    resolved, strategy = select_strategy(requested)
    assert resolved == expected
    assert callable(strategy)


def test_unknown_layout_renders_like_standard():
    view = make_view()
    exotic = render_resume(view, layout="exotic")
    standard = render_resume(view, layout="standard")

    assert exotic.layout == TemplateLayout.STANDARD
    assert exotic.requested_layout == "exotic"
    assert exotic.model_dump(exclude={"requested_layout"}) == standard.model_dump(exclude={"requested_layout"})


def test_empty_sections_render_placeholders():
    rendered = render_resume(make_view(summary=None))

    assert section(rendered, ResumeSection.SUMMARY).placeholder == "No summary added yet."
    assert section(rendered, ResumeSection.EXPERIENCE).placeholder == "No experience added yet."
    assert section(rendered, ResumeSection.EDUCATION).placeholder == "No education added yet."
    assert section(rendered, ResumeSection.SKILLS).placeholder == "No skills added yet."


def test_entries_keep_order_and_format_periods():
    view = make_view(
        experiences=[
            {"company": "Acme", "position": "Lead", "start_date": "2021-03", "current": True},
            {"company": "Initech", "position": "Developer", "start_date": "2018-01", "end_date": "2021-02"},
        ],
        educations=[
            {"institution": "ITB", "degree": "BSc", "field_of_study": "Informatics",
             "start_date": "2014-09", "end_date": "2018-06"},
        ],
    )
    rendered = render_resume(view)

    experience = section(rendered, ResumeSection.EXPERIENCE)
    assert experience.placeholder is None
    assert [e.subheading for e in experience.entries] == ["Acme", "Initech"]
    assert [e.period for e in experience.entries] == ["Mar 2021 - Present", "Jan 2018 - Feb 2021"]

    education = section(rendered, ResumeSection.EDUCATION)
    assert education.entries[0].heading == "BSc"
    assert education.entries[0].detail == "Informatics"
    assert education.entries[0].period == "Sep 2014 - Jun 2018"


def test_standard_puts_identity_and_skills_in_accent_sidebar():
    view = make_view(skills=[{"category": "Languages", "skills": [{"name": "Python", "level": "expert"}]}])
    template = Template(id=1, name="Classic Professional", category="professional",
                        color="#003366", layout=TemplateLayout.STANDARD)
    rendered = render_resume(view, template)

    assert rendered.columns == 2
    assert rendered.accent_area == SectionPlacement.SIDEBAR
    assert rendered.accent_color == "#003366"
    assert rendered.identity.placement == SectionPlacement.SIDEBAR
    assert rendered.identity.accent_background is True

    skills = section(rendered, ResumeSection.SKILLS)
    assert skills.placement == SectionPlacement.SIDEBAR
    assert skills.skill_groups[0].category == "Languages"
    assert skills.skill_groups[0].badges[0].name == "Python"
    assert section(rendered, ResumeSection.EXPERIENCE).placement == SectionPlacement.MAIN


def test_modern_has_plain_sidebar_and_accent_main_area():
    rendered = render_resume(make_view(), layout="modern")

    assert rendered.accent_area == SectionPlacement.MAIN
    assert rendered.identity.placement == SectionPlacement.SIDEBAR
    assert rendered.identity.accent_background is False
    assert all(s.placement == SectionPlacement.MAIN for s in rendered.sections)


def test_creative_uses_header_band_and_circle_badges():
    rendered = render_resume(make_view(), layout="creative")

    assert rendered.columns == 1
    assert rendered.identity.placement == SectionPlacement.HEADER
    assert rendered.identity.accent_background is True
    assert section(rendered, ResumeSection.SKILLS).skill_style == "circle"


def test_professional_uses_bordered_headings_and_two_column_skills():
    rendered = render_resume(make_view(), layout="professional")

    assert rendered.identity.border == "accent-bottom"
    assert {s.heading_style for s in rendered.sections} == {"accent-border"}
    assert section(rendered, ResumeSection.SKILLS).skill_style == "two-column-list"


def test_minimalist_alias_renders_simple_layout():
    rendered = render_resume(make_view(), layout="minimalist")

    assert rendered.layout == TemplateLayout.SIMPLE
    assert rendered.identity.centered is True
    assert {s.heading_style for s in rendered.sections} == {"divider"}


def test_without_template_uses_default_accent_and_identity_fallbacks():
    rendered = render_resume(make_view(profile=False))

    assert rendered.accent_color == DEFAULT_ACCENT_COLOR
    assert rendered.identity.full_name == "Your Name"
    assert rendered.identity.initials == "U"
    assert rendered.identity.headline == "Software Engineer"
