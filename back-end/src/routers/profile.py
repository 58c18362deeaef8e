from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from config import get_settings
from dependencies import get_session, require_roles
from models.relational_models import Profile
from schemas.profile import ProfilePublic, ProfileUpdate
from services.storage import LocalObjectStorage, get_storage
from utilities.authentication import oauth2_scheme
from utilities.enumerables import UserRole
from utilities.exceptions import InvalidUploadError, StorageError, StorageNotConfiguredError, UploadTooLargeError
from utilities.ownership import requester_uuid


router = APIRouter()

PROFILE_ROLE_DEP = Depends(
    require_roles(
        UserRole.ADMIN.value,
        UserRole.USER.value,
    )
)


async def _get_own_profile(session: AsyncSession, _user: dict) -> Profile:
    profile = await session.get(Profile, requester_uuid(_user))
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get(
    "/profiles/me",
    response_model=ProfilePublic,
)
async def get_my_profile(
    *,
    session: AsyncSession = Depends(get_session),
    _user: dict = PROFILE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    return await _get_own_profile(session, _user)


@router.patch(
    "/profiles/me",
    response_model=ProfilePublic,
)
async def patch_my_profile(
    *,
    session: AsyncSession = Depends(get_session),
    profile_update: ProfileUpdate,
    _user: dict = PROFILE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Update the caller's own profile (full name, location, birth date).
    The email is managed by the account and cannot be changed here.
    """
    profile = await _get_own_profile(session, _user)

    profile.sqlmodel_update(profile_update.model_dump(exclude_unset=True))

    try:
        await session.commit()
        await session.refresh(profile)
    except Exception as e:
        await session.rollback()
        raise HTTPException(status_code=500, detail=f"Error updating profile: {e}")

    return profile


@router.post(
    "/profiles/me/avatar",
    response_model=ProfilePublic,
)
async def upload_my_avatar(
    *,
    session: AsyncSession = Depends(get_session),
    storage: LocalObjectStorage = Depends(get_storage),
    file: UploadFile = File(...),
    _user: dict = PROFILE_ROLE_DEP,
    _: str = Depends(oauth2_scheme),
):
    """
    Upload an avatar image and store its public URL on the caller's profile.
    - 400: not an image / extension not allowed
    - 413: file larger than MAX_UPLOAD_SIZE
    - 503: the avatar bucket does not exist
    """
    profile = await _get_own_profile(session, _user)
    bucket = get_settings().AVATAR_BUCKET

    try:
        url = await storage.upload_image(bucket, profile.id, file)
    except StorageNotConfiguredError as e:
        logger.error(f"Avatar upload rejected: {e}")
        raise HTTPException(status_code=503, detail="Avatar storage is not configured")
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Error storing avatar: {e}")

    previous_url = profile.avatar_url
    profile.avatar_url = url

    try:
        await session.commit()
        await session.refresh(profile)
    except Exception as e:
        await session.rollback()
        await storage.delete_by_url(url)
        raise HTTPException(status_code=500, detail=f"Error updating profile: {e}")

    if previous_url:
        await storage.delete_by_url(previous_url)

    return profile
