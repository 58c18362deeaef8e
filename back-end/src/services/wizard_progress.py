from schemas.resume import ResumeAggregatePublic, ResumeProgress, SectionProgress
from utilities.enumerables import ResumeSection


# Wizard steps in the order the builder presents them
WIZARD_SECTIONS = [
    (ResumeSection.PERSONAL, "Personal Data", "Complete your personal data to make your resume even better"),
    (
        ResumeSection.SUMMARY,
        "Summary",
        "Enter a brief description of your professional background, you can choose specific skills",
    ),
    (
        ResumeSection.EXPERIENCE,
        "Experience",
        "Enter details about what you did in your previous jobs. Start with your responsibilities",
    ),
    (
        ResumeSection.EDUCATION,
        "Education",
        "Enter your educational background, starting with the most recent",
    ),
    (ResumeSection.SKILLS, "Skills", "List the skills you want employers to notice, grouped by category"),
]


def is_section_complete(view: ResumeAggregatePublic, section: ResumeSection) -> bool:
    if section == ResumeSection.PERSONAL:
        profile = view.profile
        return bool(profile and profile.full_name and profile.email and profile.location)
    if section == ResumeSection.SUMMARY:
        return bool(view.summary and view.summary.strip())
    if section == ResumeSection.EXPERIENCE:
        return bool(view.experiences)
    if section == ResumeSection.EDUCATION:
        return bool(view.educations)
    if section == ResumeSection.SKILLS:
        return any(group.skills for group in view.skills)
    return False


def compute_progress(view: ResumeAggregatePublic) -> ResumeProgress:
    """Completion state of each wizard step and the overall percentage."""
    sections = [
        SectionProgress(section=section, title=title, subtitle=subtitle, completed=is_section_complete(view, section))
        for section, title, subtitle in WIZARD_SECTIONS
    ]
    completed = sum(1 for item in sections if item.completed)
    next_section = next((item.section for item in sections if not item.completed), None)

    return ResumeProgress(
        resume_id=view.id,
        sections=sections,
        completed_count=completed,
        total_count=len(sections),
        percentage=round(100 * completed / len(sections)),
        next_section=next_section,
    )
