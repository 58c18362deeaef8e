from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from dependencies import get_session, require_roles
from models.relational_models import Education
from schemas.education import EducationCreate, EducationPublic, EducationUpdate
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
    "/educations/",
    response_model=list[EducationPublic],
)
async def get_educations(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, le=100),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    List education entries, most recent start date first.
    - resume_id: restrict to one resume
    - ADMIN: all entries
    - USER: only entries of their own resumes
    """
    stmt = select(Education)

    if resume_id is not None:
        await get_parent_resume(session, resume_id, _user, "read")
        stmt = stmt.where(Education.resume_id == resume_id)
    elif not is_admin(_user):
        resume_ids = await owned_resume_ids(session, _user)
        if not resume_ids:
            return []
        stmt = stmt.where(Education.resume_id.in_(resume_ids))

    stmt = stmt.order_by(Education.start_date.desc()).offset(offset).limit(limit)
    result = await session.exec(stmt)
    return result.all()


@router.post(
    "/educations/",
    response_model=EducationPublic,
)
async def create_education(
    *,
    session: AsyncSession = Depends(get_session),
    education_create: EducationCreate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    await get_parent_resume(session, education_create.resume_id, _user, "modify")

    try:
        db_education = Education(**education_create.model_dump())

        session.add(db_education)
        await session.commit()
        await session.refresh(db_education)

        return db_education

    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Database constraint violated or duplicate")
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error creating education: {e}")


async def _get_education_checked(session: AsyncSession, education_id: UUID, _user: dict, action: str) -> Education:
    education = await session.get(Education, education_id)
    if not education:
        raise HTTPException(status_code=404, detail="Education not found")

    await get_parent_resume(session, education.resume_id, _user, action)
    return education


@router.get(
    "/educations/{education_id}",
    response_model=EducationPublic,
)
async def get_education(
    *,
    session: AsyncSession = Depends(get_session),
    education_id: UUID,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    return await _get_education_checked(session, education_id, _user, "read")


@router.patch(
    "/educations/{education_id}",
    response_model=EducationPublic,
)
async def patch_education(
    *,
    session: AsyncSession = Depends(get_session),
    education_id: UUID,
    education_update: EducationUpdate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Update an entry. Marking it current clears its end date.
    """
    education = await _get_education_checked(session, education_id, _user, "modify")

    update_data = normalize_period(education_update.model_dump(exclude_unset=True))
    education.sqlmodel_update(update_data)
    if education.current:
        education.end_date = None

    try:
        await session.commit()
        await session.refresh(education)
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error updating education: {e}")

    return education


@router.delete(
    "/educations/{education_id}",
    response_model=dict[str, str],
)
async def delete_education(
    *,
    session: AsyncSession = Depends(get_session),
    education_id: UUID,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    education = await _get_education_checked(session, education_id, _user, "modify")

    await session.delete(education)
    await session.commit()

    return {"msg": "Education deleted successfully"}
