"""
Resume aggregate: one Resume row plus its Experience, Education and Skill
rows and the owner's Profile.

Reads fan out one query per child collection, each on its own session, so a
failing collection degrades the view instead of failing it. Writes that touch
more than one table run in a single transaction.
"""

import asyncio
from typing import Any
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from models.relational_models import Education, Experience, Profile, Resume, Skill, Template
from schemas.resume import ResumeAggregatePublic, ResumeCreate
from services.resume_normalization import (
    flatten_skill_groups,
    group_skills,
    normalize_education,
    normalize_experience,
)
from utilities.exceptions import ResumeNotFoundError, TemplateNotFoundError


CHILD_MODELS = (Experience, Education, Skill)

# Placeholder content for a resume started from a template
SAMPLE_CONTENT = {
    "summary": (
        "Results-driven professional with a track record of delivering projects "
        "on time and collaborating across teams. Replace this text with your own summary."
    ),
    "experiences": [
        {
            "company": "Your Company",
            "position": "Your Position",
            "start_date": "2021-01",
            "current": True,
            "location": "Jakarta, Indonesia",
            "description": "Describe your responsibilities and achievements.",
        },
    ],
    "educations": [
        {
            "institution": "Your University",
            "degree": "Bachelor's Degree",
            "field_of_study": "Your Field of Study",
            "start_date": "2017-09",
            "end_date": "2021-06",
        },
    ],
    "skills": [
        {"category": "General", "skills": [{"name": "Communication"}, {"name": "Teamwork"}]},
    ],
}


async def _fetch_rows(bind: Any, statement) -> list[dict]:
    # separate session per collection; rows are converted before the session closes
    async with AsyncSession(bind) as child_session:
        result = await child_session.exec(statement)
        return [row.model_dump() for row in result.all()]


async def get_resume(session: AsyncSession, resume_id: UUID, owner_id: UUID | str | None = None) -> Resume:
    """
    Fetch the root row.

    Raises:
        ResumeNotFoundError: absent, or owned by someone other than ``owner_id``
    """
    resume = await session.get(Resume, resume_id)
    if resume is None or (owner_id is not None and str(resume.user_id) != str(owner_id)):
        raise ResumeNotFoundError(resume_id)
    return resume


async def load_resume_aggregate(
    session: AsyncSession,
    resume_id: UUID,
    owner_id: UUID | str | None = None,
) -> ResumeAggregatePublic:
    """
    Compose the full resume view.

    Experience and education come back ordered by start date descending,
    skills grouped by category ("General" when uncategorised). A child
    collection that fails to load is logged and named in ``partial_failures``.
    """
    resume = await get_resume(session, resume_id, owner_id)

    bind = session.bind
    queries = {
        "experiences": select(Experience)
        .where(Experience.resume_id == resume.id)
        .order_by(Experience.start_date.desc()),
        "educations": select(Education)
        .where(Education.resume_id == resume.id)
        .order_by(Education.start_date.desc()),
        "skills": select(Skill)
        .where(Skill.resume_id == resume.id)
        .order_by(Skill.name),
        "profile": select(Profile).where(Profile.id == resume.user_id),
    }

    results = await asyncio.gather(
        *(_fetch_rows(bind, statement) for statement in queries.values()),
        return_exceptions=True,
    )

    collections: dict[str, list[dict]] = {}
    partial_failures: list[str] = []
    for name, result in zip(queries, results):
        if isinstance(result, Exception):
            logger.warning(f"Resume {resume.id}: loading {name} failed: {result!r}")
            partial_failures.append(name)
            collections[name] = []
        elif isinstance(result, BaseException):
            raise result
        else:
            collections[name] = result

    view = resume.model_dump()
    view.update(
        experiences=[normalize_experience(row) for row in collections["experiences"]],
        educations=[normalize_education(row) for row in collections["educations"]],
        skills=group_skills(collections["skills"]),
        profile=collections["profile"][0] if collections["profile"] else None,
        partial_failures=partial_failures,
    )
    return ResumeAggregatePublic.model_validate(view)


async def list_resumes(
    session: AsyncSession,
    owner_id: UUID | str | None = None,
    offset: int = 0,
    limit: int = 100,
) -> list[Resume]:
    statement = select(Resume).order_by(Resume.created_at.desc()).offset(offset).limit(limit)
    if owner_id is not None:
        statement = statement.where(Resume.user_id == UUID(str(owner_id)))
    result = await session.exec(statement)
    return list(result.all())


async def ensure_template_exists(session: AsyncSession, template_id: int | None) -> None:
    if template_id is not None and await session.get(Template, template_id) is None:
        raise TemplateNotFoundError(template_id)


def _with_sample_content(payload: ResumeCreate) -> ResumeCreate:
    """Fill the sections the caller left empty with placeholder content."""
    filled = payload.model_copy()
    if not filled.summary:
        filled.summary = SAMPLE_CONTENT["summary"]
    if not filled.experiences:
        filled.experiences = ResumeCreate.model_validate(
            {"title": payload.title, "experiences": SAMPLE_CONTENT["experiences"]}
        ).experiences
    if not filled.educations:
        filled.educations = ResumeCreate.model_validate(
            {"title": payload.title, "educations": SAMPLE_CONTENT["educations"]}
        ).educations
    if not filled.skills:
        filled.skills = ResumeCreate.model_validate(
            {"title": payload.title, "skills": SAMPLE_CONTENT["skills"]}
        ).skills
    return filled


async def create_resume_aggregate(
    session: AsyncSession,
    payload: ResumeCreate,
    user_id: UUID | str,
) -> Resume:
    """
    Insert the resume and all submitted sections in one transaction.

    Skill groups are flattened to rows carrying their category label.
    Nothing is persisted if any insert fails.
    """
    await ensure_template_exists(session, payload.template_id)

    if payload.use_sample_content:
        payload = _with_sample_content(payload)

    resume = Resume(
        title=payload.title,
        summary=payload.summary,
        template_id=payload.template_id,
        user_id=UUID(str(user_id)),
    )

    try:
        session.add(resume)
        await session.flush()

        session.add_all(
            Experience(**entry.model_dump(), resume_id=resume.id) for entry in payload.experiences
        )
        session.add_all(
            Education(**entry.model_dump(), resume_id=resume.id) for entry in payload.educations
        )
        session.add_all(
            Skill(name=item["name"], level=item.get("level"), category=item.get("category"), resume_id=resume.id)
            for item in flatten_skill_groups([group.model_dump() for group in payload.skills])
        )

        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Creating resume '{payload.title}' failed, transaction rolled back: {e}")
        raise

    await session.refresh(resume)
    logger.info(
        f"Created resume {resume.id} with {len(payload.experiences)} experience, "
        f"{len(payload.educations)} education and "
        f"{sum(len(group.skills) for group in payload.skills)} skill rows"
    )
    return resume


async def _delete_children(session: AsyncSession, resume_ids: list[UUID]) -> None:
    for model in CHILD_MODELS:
        rows = await session.exec(select(model).where(model.resume_id.in_(resume_ids)))
        for row in rows.all():
            await session.delete(row)
    # children leave the database before any parent row is touched
    await session.flush()


async def delete_resume(session: AsyncSession, resume: Resume) -> None:
    """
    Delete the resume's children, then the resume itself, in one transaction.

    A failure at any step rolls everything back, the parent is never removed
    while children remain.
    """
    resume_id = resume.id
    try:
        await _delete_children(session, [resume_id])
        await session.delete(resume)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Deleting resume {resume_id} failed, transaction rolled back: {e}")
        raise

    logger.info(f"Deleted resume {resume_id}")


async def delete_all_resumes(session: AsyncSession, user_id: UUID | str) -> int:
    """
    Delete every resume owned by ``user_id`` with the same cascade as
    :func:`delete_resume`. Returns the number of resumes removed.
    """
    result = await session.exec(select(Resume.id).where(Resume.user_id == UUID(str(user_id))))
    resume_ids = list(result.all())
    if not resume_ids:
        return 0

    try:
        await _delete_children(session, resume_ids)
        resumes = await session.exec(select(Resume).where(Resume.id.in_(resume_ids)))
        for resume in resumes.all():
            await session.delete(resume)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.error(f"Deleting all resumes of user {user_id} failed, transaction rolled back: {e}")
        raise

    logger.info(f"Deleted {len(resume_ids)} resumes of user {user_id}")
    return len(resume_ids)
