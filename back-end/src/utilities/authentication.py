from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException
from fastapi.security import APIKeyHeader, OAuth2PasswordBearer
from loguru import logger
from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import get_settings
from models.relational_models import User
from schemas.authentication import LoginRequest
from utilities.enumerables import UserAccountStatus


settings = get_settings()

PASSWORD_HASH_ROUNDS = 300_000

pwd_context = CryptContext(
    schemes=["pbkdf2_sha512"],
    deprecated="auto",
    pbkdf2_sha512__default_rounds=PASSWORD_HASH_ROUNDS,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login/")
refresh_header_scheme = APIKeyHeader(name="Authorization-Refresh", auto_error=False)

# jwt error -> detail of the 401 response; first match wins
TOKEN_ERRORS = (
    (jwt.ExpiredSignatureError, "Token has expired"),
    (jwt.InvalidSignatureError, "Token signature is invalid"),
    (jwt.InvalidAlgorithmError, "Token is signed with an unsupported algorithm"),
    (jwt.InvalidTokenError, "Token is malformed or invalid"),
)


def _lifetime(expires: timedelta | int | None) -> timedelta:
    if expires is None:
        return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    if isinstance(expires, timedelta):
        return expires
    if isinstance(expires, int):
        # minutes
        return timedelta(minutes=expires)
    raise TypeError("token lifetime must be a timedelta, a number of minutes or None")


def create_access_token(data: dict, expires_delta: timedelta | int | None = None) -> str:
    """Sign ``data`` as a JWT with ``iat`` and ``exp`` added."""
    issued_at = datetime.now(timezone.utc)
    claims = {
        **data,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + _lifetime(expires_delta)).timestamp()),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, verify_exp: bool = True) -> dict:
    """Verified claims of ``token``. Any verification problem is a 401."""
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except jwt.InvalidTokenError as e:
        detail = next(message for error_type, message in TOKEN_ERRORS if isinstance(e, error_type))
        raise HTTPException(status_code=401, detail=detail)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """A stored value that is not a recognised hash never matches."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (UnknownHashError, ValueError) as e:
        logger.warning(f"Stored password hash could not be read: {e}")
        return False


async def authenticate_user(credentials: LoginRequest, session: AsyncSession) -> dict:
    """
    Check an email/password pair (the OAuth2 form calls the email "username").

    Raises 401 for unknown accounts or wrong passwords alike, 403 for
    accounts that are not active.
    """
    email = credentials.username.strip().lower()

    result = await session.exec(select(User).where(User.email == email))
    account = result.one_or_none()

    if account is None or not verify_password(credentials.password, account.password):
        raise HTTPException(status_code=401, detail="Incorrect email or password")

    if account.account_status != UserAccountStatus.ACTIVE:
        raise HTTPException(status_code=403, detail="Account is not active")

    return {
        "user_id": account.id,
        "user_role": account.role.value,
        "user_full_name": account.profile.full_name if account.profile else None,
        "user_account_status": account.account_status.value,
    }
