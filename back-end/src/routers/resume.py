from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from dependencies import get_session, require_roles
from models.relational_models import Template, User
from schemas.rendered_resume import RenderedResume
from schemas.relational_schemas import RelationalResumePublic
from schemas.resume import ResumeAggregatePublic, ResumeCreate, ResumeProgress, ResumePublic, ResumeUpdate
from services.resume_aggregate import (
    create_resume_aggregate,
    delete_all_resumes,
    delete_resume,
    ensure_template_exists,
    get_resume,
    list_resumes,
    load_resume_aggregate,
)
from services.template_renderer import render_resume
from services.wizard_progress import compute_progress
from utilities.authentication import oauth2_scheme
from utilities.enumerables import UserRole
from utilities.exceptions import ResumeNotFoundError, TemplateNotFoundError
from utilities.ownership import is_admin, requester_uuid


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


def _visible_owner(_user: dict) -> UUID | None:
    # None lifts the ownership filter (admins see every resume)
    return None if is_admin(_user) else requester_uuid(_user)


async def _load_or_404(session: AsyncSession, resume_id: UUID, _user: dict) -> ResumeAggregatePublic:
    try:
        return await load_resume_aggregate(session, resume_id, owner_id=_visible_owner(_user))
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")


@router.get(
    "/resumes/",
    response_model=list[RelationalResumePublic],
)
async def get_resumes(
    *,
    session: AsyncSession = Depends(get_session),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, le=100),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    List resumes, newest first.
    - ADMIN: every resume
    - USER: only their own resumes
    """
    return await list_resumes(session, owner_id=_visible_owner(_user), offset=offset, limit=limit)


@router.post(
    "/resumes/",
    response_model=ResumeAggregatePublic,
)
async def create_resume(
    *,
    session: AsyncSession = Depends(get_session),
    resume_create: ResumeCreate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Create a resume together with its sections, all or nothing.
    - USER: the resume always belongs to the requester (user_id is ignored)
    - ADMIN: may pass user_id to create on behalf of an existing user
    """
    if is_admin(_user) and resume_create.user_id is not None:
        target_user = await session.get(User, resume_create.user_id)
        if not target_user:
            raise HTTPException(status_code=404, detail="Target user not found")
        user_id = target_user.id
    else:
        user_id = requester_uuid(_user)

    try:
        resume = await create_resume_aggregate(session, resume_create, user_id)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Database constraint violated or duplicate")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating resume: {e}")

    return await load_resume_aggregate(session, resume.id)


@router.delete(
    "/resumes/",
    response_model=dict[str, str | int],
)
async def delete_my_resumes(
    *,
    session: AsyncSession = Depends(get_session),
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Delete every resume of the requester, with all their sections.
    Having no resumes is not an error.
    """
    try:
        deleted = await delete_all_resumes(session, requester_uuid(_user))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting resumes: {e}")

    return {"msg": "Resumes deleted successfully", "deleted_count": deleted}


@router.get(
    "/resumes/{resume_id}",
    response_model=ResumeAggregatePublic,
)
async def get_resume_aggregate(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Full resume: profile, summary, experience and education (most recent
    first) and skills grouped by category.
    - ADMIN: any resume
    - USER: only their own; other resumes are reported as not found
    """
    return await _load_or_404(session, resume_id, _user)


@router.patch(
    "/resumes/{resume_id}",
    response_model=ResumePublic,
)
async def patch_resume(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID,
    resume_update: ResumeUpdate,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    try:
        resume = await get_resume(session, resume_id, owner_id=_visible_owner(_user))
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")

    update_data = resume_update.model_dump(exclude_unset=True)

    if update_data.get("template_id") is not None:
        try:
            await ensure_template_exists(session, update_data["template_id"])
        except TemplateNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    resume.sqlmodel_update(update_data)

    try:
        await session.commit()
        await session.refresh(resume)
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error updating resume: {e}")

    return resume


@router.delete(
    "/resumes/{resume_id}",
    response_model=dict[str, str],
)
async def delete_single_resume(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID,
    _user: dict = WRITE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Delete a resume and all of its sections.
    - ADMIN: any resume
    - USER: only their own
    """
    try:
        resume = await get_resume(session, resume_id, owner_id=_visible_owner(_user))
    except ResumeNotFoundError:
        raise HTTPException(status_code=404, detail="Resume not found")

    try:
        await delete_resume(session, resume)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting resume: {e}")

    return {"msg": "Resume deleted successfully"}


@router.get(
    "/resumes/{resume_id}/render",
    response_model=RenderedResume,
)
async def render_resume_preview(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID,
    layout: str | None = Query(default=None, description="Preview with another layout kind"),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Display tree of the resume in its template's layout. Unknown layout
    kinds render with the standard layout.
    """
    view = await _load_or_404(session, resume_id, _user)

    template = None
    if view.template_id is not None:
        template = await session.get(Template, view.template_id)

    return render_resume(view, template, layout=layout)


@router.get(
    "/resumes/{resume_id}/progress",
    response_model=ResumeProgress,
)
async def get_resume_progress(
    *,
    session: AsyncSession = Depends(get_session),
    resume_id: UUID,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    view = await _load_or_404(session, resume_id, _user)
    return compute_progress(view)
