from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from dependencies import get_session, require_roles
from models.relational_models import Skill
from schemas.skill import SkillCreate, SkillPublic, SkillUpdate
from services.resume_normalization import normalize_skill
from utilities.authentication import oauth2_scheme
from utilities.enumerables import UserRole
from utilities.ownership import get_parent_resume, is_admin, owned_resume_ids


router = APIRouter()

READ_ROLE_DEP = Depends(
    require_roles(
        UserRole.ADMIN.value,
        UserRole.USER.value,
    )
)

WRITE_ROLE_DEP = Depends(
    require_roles(
        UserRole.ADMIN.value,
        UserRole.USER.value,
    )
)


@router.get(
    "/skills/",
    response_model=list[SkillPublic],
)
async def get_skills(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, le=100),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    List skills ordered by name.
    - resume_id: restrict to one resume
    - ADMIN: all skills
    - USER: only skills of their own resumes
    """
    stmt = select(Skill)

    if resume_id is not None:
        await get_parent_resume(session, resume_id, _user, "read")
        stmt = stmt.where(Skill.resume_id == resume_id)
    elif not is_admin(_user):
        resume_ids = await owned_resume_ids(session, _user)
        if not resume_ids:
            return []
        stmt = stmt.where(Skill.resume_id.in_(resume_ids))

    stmt = stmt.order_by(Skill.name).offset(offset).limit(limit)
    result = await session.exec(stmt)
    return result.all()


@router.post(
    "/skills/",
    response_model=SkillPublic,
)
async def create_skill(
    *,
    session: AsyncSession = Depends(get_session),
    skill_create: SkillCreate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    await get_parent_resume(session, skill_create.resume_id, _user, "modify")

    try:
        db_skill = Skill(**skill_create.model_dump())
        db_skill.category = normalize_skill(skill_create)["category"]

        session.add(db_skill)
        await session.commit()
        await session.refresh(db_skill)

        return db_skill

    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Database constraint violated or duplicate")
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error creating skill: {e}")


async def _get_skill_checked(session: AsyncSession, skill_id: UUID, _user: dict, action: str) -> Skill:
    skill = await session.get(Skill, skill_id)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")

    await get_parent_resume(session, skill.resume_id, _user, action)
    return skill


@router.get(
    "/skills/{skill_id}",
    response_model=SkillPublic,
)
async def get_skill(
    *,
    session: AsyncSession = Depends(get_session),
    skill_id: UUID,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    return await _get_skill_checked(session, skill_id, _user, "read")


@router.patch(
    "/skills/{skill_id}",
    response_model=SkillPublic,
)
async def patch_skill(
    *,
    session: AsyncSession = Depends(get_session),
    skill_id: UUID,
    skill_update: SkillUpdate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    skill = await _get_skill_checked(session, skill_id, _user, "modify")

    update_data = skill_update.model_dump(exclude_unset=True)
    if "category" in update_data:
        # blank labels fall back to the "General" group
        update_data["category"] = normalize_skill(update_data)["category"]
    skill.sqlmodel_update(update_data)

    try:
        await session.commit()
        await session.refresh(skill)
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error updating skill: {e}")

    return skill


@router.delete(
    "/skills/{skill_id}",
    response_model=dict[str, str],
)
async def delete_skill(
    *,
    session: AsyncSession = Depends(get_session),
    skill_id: UUID,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    skill = await _get_skill_checked(session, skill_id, _user, "modify")

    await session.delete(skill)
    await session.commit()

    return {"msg": "Skill deleted successfully"}
