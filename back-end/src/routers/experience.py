from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from dependencies import get_session, require_roles
from models.relational_models import Experience
from schemas.experience import ExperienceCreate, ExperiencePublic, ExperienceUpdate
from services.resume_normalization import normalize_period
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
    "/experiences/",
    response_model=list[ExperiencePublic],
)
async def get_experiences(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, le=100),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    List experience entries, most recent start date first.
    - resume_id: restrict to one resume
    - ADMIN: all entries
    - USER: only entries of their own resumes
    """
    stmt = select(Experience)

    if resume_id is not None:
        await get_parent_resume(session, resume_id, _user, "read")
        stmt = stmt.where(Experience.resume_id == resume_id)
    elif not is_admin(_user):
        resume_ids = await owned_resume_ids(session, _user)
        if not resume_ids:
            return []
        stmt = stmt.where(Experience.resume_id.in_(resume_ids))

    stmt = stmt.order_by(Experience.start_date.desc()).offset(offset).limit(limit)
    result = await session.exec(stmt)
    return result.all()


@router.post(
    "/experiences/",
    response_model=ExperiencePublic,
)
async def create_experience(
    *,
    session: AsyncSession = Depends(get_session),
    experience_create: ExperienceCreate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    await get_parent_resume(session, experience_create.resume_id, _user, "modify")

    try:
        db_experience = Experience(**experience_create.model_dump())

        session.add(db_experience)
        await session.commit()
        await session.refresh(db_experience)

        return db_experience

    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Database constraint violated or duplicate")
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error creating experience: {e}")


async def _get_experience_checked(session: AsyncSession, experience_id: UUID, _user: dict, action: str) -> Experience:
    experience = await session.get(Experience, experience_id)
    if not experience:
        raise HTTPException(status_code=404, detail="Experience not found")

    await get_parent_resume(session, experience.resume_id, _user, action)
    return experience


@router.get(
    "/experiences/{experience_id}",
    response_model=ExperiencePublic,
)
async def get_experience(
    *,
    session: AsyncSession = Depends(get_session),
    experience_id: UUID,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    return await _get_experience_checked(session, experience_id, _user, "read")


@router.patch(
    "/experiences/{experience_id}",
    response_model=ExperiencePublic,
)
async def patch_experience(
    *,
    session: AsyncSession = Depends(get_session),
    experience_id: UUID,
    experience_update: ExperienceUpdate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Update an entry. Marking it current clears its end date.
    """
    experience = await _get_experience_checked(session, experience_id, _user, "modify")

    update_data = normalize_period(experience_update.model_dump(exclude_unset=True))
    experience.sqlmodel_update(update_data)
    if experience.current:
        experience.end_date = None

    try:
        await session.commit()
        await session.refresh(experience)
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error updating experience: {e}")

    return experience


@router.delete(
    "/experiences/{experience_id}",
    response_model=dict[str, str],
)
async def delete_experience(
    *,
    session: AsyncSession = Depends(get_session),
    experience_id: UUID,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    experience = await _get_experience_checked(session, experience_id, _user, "modify")

    await session.delete(experience)
    await session.commit()

    return {"msg": "Experience deleted successfully"}
