from typing import Any
from uuid import UUID

from fastapi import HTTPException
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from models.relational_models import Resume
from utilities.enumerables import UserRole


def is_admin(user: dict[str, Any]) -> bool:
    return user["role"] == UserRole.ADMIN.value


def requester_uuid(user: dict[str, Any]) -> UUID:
    return UUID(str(user["id"]))


async def get_parent_resume(session: AsyncSession, resume_id: UUID, user: dict[str, Any], action: str) -> Resume:
    """
    Load the resume a child row hangs off and check the requester may touch it.
    - ADMIN: any resume
    - USER: only their own resumes
    """
    resume = await session.get(Resume, resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")

    if not is_admin(user) and str(resume.user_id) != str(user["id"]):
        raise HTTPException(status_code=403, detail=f"Not allowed to {action} this resume")

    return resume


async def owned_resume_ids(session: AsyncSession, user: dict[str, Any]) -> list[UUID]:
    result = await session.exec(select(Resume.id).where(Resume.user_id == requester_uuid(user)))
    return list(result.all())
