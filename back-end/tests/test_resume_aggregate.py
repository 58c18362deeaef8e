import pytest
from sqlmodel import select

from models.relational_models import Education, Experience, Resume, Skill
from schemas.resume import ResumeCreate
from services import resume_aggregate
from services.resume_aggregate import (
    SAMPLE_CONTENT,
    create_resume_aggregate,
    delete_all_resumes,
    delete_resume,
    get_resume,
    list_resumes,
    load_resume_aggregate,
)
from utilities.exceptions import ResumeNotFoundError, TemplateNotFoundError


def resume_payload(**overrides) -> ResumeCreate:
    data = {
        "title": "Backend Engineer",
        "summary": "Builds APIs.",
        "template_id": 1,
        "experiences": [
            {"company": "Initech", "position": "Developer", "start_date": "2018-01", "end_date": "2021-02"},
            {"company": "Acme", "position": "Lead", "start_date": "2021-03", "end_date": "2023-01", "current": True},
        ],
        "educations": [
            {"institution": "ITB", "degree": "BSc", "start_date": "2010-09", "end_date": "2014-06"},
            {"school": "MIT", "degree": "MSc", "field": "CS", "start_date": "2015-09", "end_date": "2017-06"},
        ],
        "skills": [
            {"category": "Languages", "skills": [{"name": "Python", "level": "expert"}, {"name": "Go"}]},
            {"category": "General", "skills": [{"name": "Teamwork"}]},
        ],
    }
    data.update(overrides)
    return ResumeCreate.model_validate(data)


async def count_rows(session, model) -> int:
    result = await session.exec(select(model))
    return len(result.all())


@pytest.mark.asyncio
async def test_create_then_load_returns_ordered_normalized_view(session, user):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)

    view = await load_resume_aggregate(session, resume.id, user.id)

    assert view.title == "Backend Engineer"
    assert view.partial_failures == []
    assert view.profile.full_name == "Harry Maguire Johnson"
    assert view.profile.initials == "HM"

    assert [e.company for e in view.experiences] == ["Acme", "Initech"]
    assert view.experiences[0].current is True
    assert view.experiences[0].end_date is None

    assert [e.institution for e in view.educations] == ["MIT", "ITB"]
    assert view.educations[0].field_of_study == "CS"


@pytest.mark.asyncio
async def test_skills_are_grouped_by_category(session, user):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)

    view = await load_resume_aggregate(session, resume.id, user.id)
    groups = {g.category: sorted(s.name for s in g.skills) for g in view.skills}

    assert groups == {"General": ["Teamwork"], "Languages": ["Go", "Python"]}
    assert sum(len(g.skills) for g in view.skills) == 3


@pytest.mark.asyncio
async def test_load_for_another_owner_is_not_found(session, user, other_user):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)

    with pytest.raises(ResumeNotFoundError):
        await load_resume_aggregate(session, resume.id, other_user.id)

    # no owner filter is the admin view
    view = await load_resume_aggregate(session, resume.id)
    assert view.id == resume.id


@pytest.mark.asyncio
async def test_create_with_unknown_template_persists_nothing(session, user):
    with pytest.raises(TemplateNotFoundError):
        await create_resume_aggregate(session, resume_payload(template_id=999), user.id)

    assert await count_rows(session, Resume) == 0


@pytest.mark.asyncio
async def test_failed_child_insert_rolls_back_whole_resume(session, user, monkeypatch):
    def broken(groups):
        raise RuntimeError("skill insert failed")

    monkeypatch.setattr(resume_aggregate, "flatten_skill_groups", broken)

    with pytest.raises(RuntimeError):
        await create_resume_aggregate(session, resume_payload(), user.id)

    assert await count_rows(session, Resume) == 0
    assert await count_rows(session, Experience) == 0
    assert await count_rows(session, Education) == 0


@pytest.mark.asyncio
async def test_failed_collection_is_reported_as_partial_failure(session, user, monkeypatch):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)

    original = resume_aggregate._fetch_rows

    async def flaky(bind, statement):
        if "FROM skill" in str(statement):
            raise RuntimeError("skills table unavailable")
        return await original(bind, statement)

    monkeypatch.setattr(resume_aggregate, "_fetch_rows", flaky)

    view = await load_resume_aggregate(session, resume.id, user.id)

    assert view.partial_failures == ["skills"]
    assert view.skills == []
    assert len(view.experiences) == 2
    assert len(view.educations) == 2


@pytest.mark.asyncio
async def test_sample_content_fills_empty_sections(session, user):
    payload = resume_payload(summary=None, experiences=[], educations=[], skills=[], use_sample_content=True)
    resume = await create_resume_aggregate(session, payload, user.id)

    view = await load_resume_aggregate(session, resume.id, user.id)

    assert view.summary == SAMPLE_CONTENT["summary"]
    assert [e.company for e in view.experiences] == ["Your Company"]
    assert view.experiences[0].current is True
    assert [e.institution for e in view.educations] == ["Your University"]
    assert [s.name for g in view.skills for s in g.skills] == ["Communication", "Teamwork"]


@pytest.mark.asyncio
async def test_sample_content_keeps_submitted_sections(session, user):
    payload = resume_payload(educations=[], use_sample_content=True)
    resume = await create_resume_aggregate(session, payload, user.id)

    view = await load_resume_aggregate(session, resume.id, user.id)

    assert view.summary == "Builds APIs."
    assert [e.company for e in view.experiences] == ["Acme", "Initech"]
    assert [e.institution for e in view.educations] == ["Your University"]


@pytest.mark.asyncio
async def test_delete_removes_resume_and_children(session, user):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)
    resume_id = resume.id

    await delete_resume(session, resume)

    with pytest.raises(ResumeNotFoundError):
        await get_resume(session, resume_id)
    assert await count_rows(session, Experience) == 0
    assert await count_rows(session, Education) == 0
    assert await count_rows(session, Skill) == 0


@pytest.mark.asyncio
async def test_delete_all_only_touches_the_owner(session, user, other_user):
    for title in ("First", "Second"):
        await create_resume_aggregate(session, resume_payload(title=title), user.id)
    kept = await create_resume_aggregate(session, resume_payload(title="Kept"), other_user.id)
    kept_id = kept.id

    deleted = await delete_all_resumes(session, user.id)

    assert deleted == 2
    assert await list_resumes(session, user.id) == []
    remaining = await list_resumes(session)
    assert [r.id for r in remaining] == [kept_id]
    assert await count_rows(session, Experience) == 2


@pytest.mark.asyncio
async def test_delete_all_without_resumes_returns_zero(session, user):
    assert await delete_all_resumes(session, user.id) == 0


def fail_deleting(session, monkeypatch, model):
    """Make ``session.delete`` raise for rows of ``model``."""
    original = session.delete

    async def delete(instance):
        if isinstance(instance, model):
            raise RuntimeError(f"cannot delete {model.__name__}")
        await original(instance)

    monkeypatch.setattr(session, "delete", delete)


async def row_counts(session) -> dict:
    return {model.__name__: await count_rows(session, model) for model in (Resume, Experience, Education, Skill)}


@pytest.mark.asyncio
@pytest.mark.parametrize("failing_model", [Skill, Resume])
async def test_failed_delete_keeps_resume_and_children(session, user, monkeypatch, failing_model):
    resume = await create_resume_aggregate(session, resume_payload(), user.id)
    resume_id = resume.id
    before = await row_counts(session)
    fail_deleting(session, monkeypatch, failing_model)

    with pytest.raises(RuntimeError):
        await delete_resume(session, resume)

    assert await row_counts(session) == before == {"Resume": 1, "Experience": 2, "Education": 2, "Skill": 3}
    assert (await get_resume(session, resume_id)).title == "Backend Engineer"


@pytest.mark.asyncio
@pytest.mark.parametrize("failing_model", [Skill, Resume])
async def test_failed_delete_all_keeps_every_resume(session, user, monkeypatch, failing_model):
    for title in ("First", "Second"):
        await create_resume_aggregate(session, resume_payload(title=title), user.id)
    before = await row_counts(session)
    fail_deleting(session, monkeypatch, failing_model)

    with pytest.raises(RuntimeError):
        await delete_all_resumes(session, user.id)

    assert await row_counts(session) == before == {"Resume": 2, "Experience": 4, "Education": 4, "Skill": 6}
    assert len(await list_resumes(session, user.id)) == 2
