from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from dependencies import get_session, require_roles
from models.relational_models import Resume, Template
from schemas.template import TemplateCreate, TemplatePublic, TemplateUpdate
from utilities.authentication import oauth2_scheme
from utilities.enumerables import UserRole


router = APIRouter()

# Everyone signed in may browse templates
READ_ROLE_DEP = Depends(
    require_roles(
        UserRole.ADMIN.value,
        UserRole.USER.value,
    )
)

# Templates are reference data, only admins write them
ADMIN_ROLE_DEP = Depends(
    require_roles(
        UserRole.ADMIN.value,
    )
)


@router.get(
    "/templates/",
    response_model=list[TemplatePublic],
)
async def get_templates(
    *,
    session: AsyncSession = Depends(get_session),
    category: str | None = None,
    q: str | None = Query(default=None, description="Case-insensitive search in the template name"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, le=100),
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    List templates, newest first.
    - category: exact category label ("all" or empty means no filter)
    - q: substring of the name, case-insensitive
    """
    stmt = select(Template)

    if category and category.lower() != "all":
        stmt = stmt.where(Template.category == category.lower())
    if q:
        stmt = stmt.where(func.lower(Template.name).contains(q.strip().lower()))

    stmt = stmt.order_by(Template.created_at.desc(), Template.id.desc()).offset(offset).limit(limit)

    result = await session.exec(stmt)
    return result.all()


@router.post(
    "/templates/",
    response_model=TemplatePublic,
)
async def create_template(
    *,
    session: AsyncSession = Depends(get_session),
    template_create: TemplateCreate,
    _user: dict = ADMIN_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    try:
        db_template = Template(**template_create.model_dump())
        db_template.category = db_template.category.lower()

        session.add(db_template)
        await session.commit()
        await session.refresh(db_template)

        return db_template

    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="A template with this name already exists")
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error creating template: {e}")


@router.get(
    "/templates/{template_id}",
    response_model=TemplatePublic,
)
async def get_template(
    *,
    session: AsyncSession = Depends(get_session),
    template_id: int,
    _user: dict = READ_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    template = await session.get(Template, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    return template


@router.patch(
    "/templates/{template_id}",
    response_model=TemplatePublic,
)
async def patch_template(
    *,
    session: AsyncSession = Depends(get_session),
    template_id: int,
    template_update: TemplateUpdate,
    _user: dict = ADMIN_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    template = await session.get(Template, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    update_data = template_update.model_dump(exclude_unset=True)
    if update_data.get("category"):
        update_data["category"] = update_data["category"].lower()

    template.sqlmodel_update(update_data)

    try:
        await session.commit()
        await session.refresh(template)
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="A template with this name already exists")

    return template


@router.delete(
    "/templates/{template_id}",
    response_model=dict[str, str],
)
async def delete_template(
    *,
    session: AsyncSession = Depends(get_session),
    template_id: int,
    _user: dict = ADMIN_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Delete a template. Resumes using it keep their content and fall back
    to the default layout.
    """
    template = await session.get(Template, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")

    resumes = await session.exec(select(Resume).where(Resume.template_id == template_id))
    for resume in resumes.all():
        resume.template = None

    await session.delete(template)
    await session.commit()

    return {"msg": "Template deleted successfully"}
