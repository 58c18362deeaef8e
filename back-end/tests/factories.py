from datetime import datetime, timezone
from uuid import uuid4

from schemas.resume import ResumeAggregatePublic


NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _row(**fields):
    return {"id": uuid4(), "created_at": NOW, "updated_at": None, **fields}


def make_view(experiences=(), educations=(), skills=(), summary="Backend engineer.", profile=True):
    """An aggregate resume view built in memory, without a database."""
    resume_id = uuid4()
    user_id = uuid4()
    return ResumeAggregatePublic.model_validate({
        "id": resume_id,
        "user_id": user_id,
        "title": "Software Engineer",
        "summary": summary,
        "template_id": None,
        "created_at": NOW,
        "updated_at": None,
        "profile": _row(
            id=user_id,
            full_name="Harry Maguire Johnson",
            email="harry@example.com",
            location="Jakarta, Indonesia",
        ) if profile else None,
        "experiences": [_row(resume_id=resume_id, **item) for item in experiences],
        "educations": [_row(resume_id=resume_id, **item) for item in educations],
        "skills": [
            {"category": group["category"], "skills": [_row(resume_id=resume_id, **s) for s in group["skills"]]}
            for group in skills
        ],
    })
