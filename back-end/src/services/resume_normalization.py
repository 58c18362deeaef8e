"""
Adapter between stored/submitted resume rows and the view contract.

Rows may come from older clients or imported data that use different field
names ("school" instead of "institution", "field" instead of
"field_of_study", skill "title" instead of "name"). Everything that reaches
the aggregate view or the renderer goes through these helpers first, so
field-name drift never leaks into rendering.
"""

from typing import Any

DEFAULT_SKILL_CATEGORY = "General"

EDUCATION_ALIASES = {
    "school": "institution",
    "institution_name": "institution",
    "field": "field_of_study",
    "study_field": "field_of_study",
    "is_current": "current",
}

EXPERIENCE_ALIASES = {
    "company_name": "company",
    "title": "position",
    "is_current": "current",
}

SKILL_ALIASES = {
    "title": "name",
    "proficiency_level": "level",
}


def _as_dict(row: Any) -> dict:
    if row is None:
        return {}
    if isinstance(row, dict):
        return dict(row)
    if hasattr(row, "model_dump"):
        return row.model_dump()
    return dict(vars(row))


def apply_aliases(row: Any, aliases: dict[str, str]) -> dict:
    """Rename legacy keys to their canonical names; canonical keys win on conflict."""
    data = _as_dict(row)
    for legacy, canonical in aliases.items():
        if legacy in data:
            value = data.pop(legacy)
            if data.get(canonical) is None:
                data[canonical] = value
    return data


def normalize_period(data: dict) -> dict:
    """current=True forces end_date to None."""
    if data.get("current"):
        data["end_date"] = None
    elif "current" in data and data["current"] is None:
        data["current"] = False
    return data


def normalize_experience(row: Any) -> dict:
    return normalize_period(apply_aliases(row, EXPERIENCE_ALIASES))


def normalize_education(row: Any) -> dict:
    return normalize_period(apply_aliases(row, EDUCATION_ALIASES))


def normalize_skill(row: Any) -> dict:
    data = apply_aliases(row, SKILL_ALIASES)
    category = data.get("category")
    if isinstance(category, str):
        category = category.strip()
    data["category"] = category or None
    return data


def group_skills(skills: list[Any]) -> list[dict]:
    """
    Group skill rows by category label, preserving first-seen category order.

    Skills without a category go to the "General" group.
    """
    groups: dict[str, list[dict]] = {}
    for skill in skills:
        data = normalize_skill(skill)
        label = data["category"] or DEFAULT_SKILL_CATEGORY
        groups.setdefault(label, []).append(data)
    return [{"category": label, "skills": items} for label, items in groups.items()]


def flatten_skill_groups(groups: list[Any]) -> list[dict]:
    """
    Inverse of group_skills: one dict per skill, tagged with its group label.

    The "General" group flattens to category=None so that it regroups the same way.
    """
    out = []
    for group in groups:
        data = _as_dict(group)
        label = data.get("category")
        if label == DEFAULT_SKILL_CATEGORY:
            label = None
        for skill in data.get("skills") or []:
            item = normalize_skill(skill)
            if item.get("category") is None:
                item["category"] = label
            out.append(item)
    return out
