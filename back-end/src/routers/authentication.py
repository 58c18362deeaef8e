from datetime import datetime, timezone
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordRequestForm
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from config import get_settings
from dependencies import _client_jwk_from_header, _verify_cnf_simple, get_session
from models.relational_models import Profile, User
from schemas.authentication import LoginResponse, TokenPair
from schemas.relational_schemas import RelationalUserPublic
from schemas.user import UserCreate
from utilities.authentication import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    get_password_hash,
    refresh_header_scheme,
)
from utilities.enumerables import UserAccountStatus, UserRole
from utilities.fields_validator import normalize_email, validate_password_value


router = APIRouter()
settings = get_settings()


def _token_pair(user_id: str, role: str, cnf: dict | None = None) -> tuple[str, str]:
    now_ts = str(int(datetime.now(timezone.utc).timestamp()))
    access_payload = {"sub": user_id, "role": role, "token_type": "access", "jti": f"access-{now_ts}-{uuid4().hex}"}
    refresh_payload = {"sub": user_id, "role": role, "token_type": "refresh", "jti": f"refresh-{now_ts}-{uuid4().hex}"}

    if cnf:
        access_payload["cnf"] = cnf
        refresh_payload["cnf"] = cnf

    return (
        create_access_token(access_payload, settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        create_access_token(refresh_payload, settings.REFRESH_TOKEN_EXPIRE_MINUTES),
    )


@router.post(
    "/sign-up/",
    response_model=RelationalUserPublic,
)
async def create_user(
        *,
        session: AsyncSession = Depends(get_session),
        user_create: UserCreate,
):
    """
    Register an account. The user and its profile are written together;
    new accounts always get the USER role.
    """
    validate_password_value(user_create.password)
    email = normalize_email(user_create.email)

    try:
        db_user = User(
            email=email,
            role=UserRole.USER,
            account_status=UserAccountStatus.ACTIVE,
            password=get_password_hash(user_create.password),
        )
        db_profile = Profile(
            id=db_user.id,
            email=email,
            full_name=user_create.full_name,
        )

        session.add(db_user)
        await session.flush()
        session.add(db_profile)
        await session.commit()
        await session.refresh(db_user)
        await session.refresh(db_profile)

    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=409,
            detail="An account with this email already exists"
        )
    except Exception as e:
        await session.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Error creating user: {e}"
        )

    logger.info(f"Registered user {db_user.id}")
    return RelationalUserPublic.model_validate({**db_user.model_dump(), "profile": db_profile.model_dump()})


@router.post("/login/", response_model=LoginResponse)
async def login(*,
        session: AsyncSession = Depends(get_session),
        request: Request,
        form: OAuth2PasswordRequestForm = Depends()
    ):
    client_jwk = _client_jwk_from_header(request)

    user = await authenticate_user(form, session)

    user_id = str(user["user_id"])
    role = user["user_role"]

    access_token, refresh_token = _token_pair(user_id, role, {"jwk": client_jwk} if client_jwk else None)

    return {
        "user_id": user_id,
        "user_role": role,
        "user_full_name": user["user_full_name"],
        "user_status": user["user_account_status"],
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "access_expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "refresh_expires_in": settings.REFRESH_TOKEN_EXPIRE_MINUTES * 60
    }


@router.post("/refresh-token/", response_model=TokenPair)
async def refresh_token(
    *,
    session: AsyncSession = Depends(get_session),
    request: Request,
    refresh_header: str | None = Depends(refresh_header_scheme)
):
    """
    Issue a new access/refresh pair.

    - The refresh token is read from the Authorization-Refresh header, or
      from the standard Authorization header (Bearer).
    - A token bound to a client key (cnf.jwk) requires the same key in the
      X-Client-JWK header; the binding is carried over to the new pair.
    - The account must still exist and be active.
    """
    token = None
    if refresh_header:
        token = refresh_header.removeprefix("Bearer").strip()

    if not token:
        header_auth = request.headers.get("Authorization")
        if header_auth:
            token = header_auth.removeprefix("Bearer").strip()

    if not token:
        raise HTTPException(status_code=401, detail="No refresh token found")

    payload = decode_access_token(token, verify_exp=True)

    if payload.get("token_type") != "refresh":
        raise HTTPException(status_code=401, detail="Provided token is not a refresh token")

    cnf = payload.get("cnf")
    if cnf and "jwk" in cnf:
        _verify_cnf_simple(request, cnf["jwk"])

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Token claims are incomplete")

    user = await session.get(User, user_id)
    if not user or user.account_status != UserAccountStatus.ACTIVE:
        raise HTTPException(status_code=401, detail="Account is not available")

    new_access, new_refresh = _token_pair(str(user.id), user.role.value, cnf)

    return {"access_token": new_access, "refresh_token": new_refresh, "token_type": "bearer"}
