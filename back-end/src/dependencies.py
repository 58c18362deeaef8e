from typing import Any, AsyncGenerator, Callable

from fastapi import Depends, HTTPException, Request, status
from jwcrypto import jwk
from jwcrypto.common import JWException
from orjson import JSONDecodeError, loads
from sqlmodel.ext.asyncio.session import AsyncSession

from database import async_engine
from utilities.authentication import decode_access_token


CLIENT_JWK_HEADER = "X-Client-JWK"


def jwk_thumbprint(key_data: dict[str, Any]) -> str:
    """RFC 7638 thumbprint of a JWK given as a dict; 400 when it is not a usable key."""
    try:
        return jwk.JWK(**key_data).thumbprint()
    except (JWException, TypeError, ValueError, KeyError):
        raise HTTPException(status_code=400, detail=f"{CLIENT_JWK_HEADER} is not a valid JSON Web Key")


def _client_jwk_from_header(request: Request) -> dict | None:
    """
    The client's public key, sent as hex-encoded JWK JSON.

    None when the header is absent; 400 when it cannot be decoded into a key.
    """
    raw = request.headers.get(CLIENT_JWK_HEADER)
    if not raw:
        return None

    try:
        key_data = loads(bytes.fromhex(raw).decode())
    except (ValueError, UnicodeDecodeError, JSONDecodeError):
        key_data = None

    if not isinstance(key_data, dict):
        raise HTTPException(status_code=400, detail=f"Malformed JWK in {CLIENT_JWK_HEADER} header")

    jwk_thumbprint(key_data)
    return key_data


def _verify_cnf_simple(request: Request, bound_jwk: dict[str, Any]) -> None:
    """
    A token bound to a key (cnf.jwk) is only accepted together with that key.

    Keys are compared by thumbprint. This checks presentation of the key,
    not possession of its private half.
    """
    presented = _client_jwk_from_header(request)
    if presented is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"This token is bound to a client key; send it in {CLIENT_JWK_HEADER}",
        )

    if jwk_thumbprint(presented) != jwk_thumbprint(bound_jwk):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Client key does not match the key bound to the token",
        )


def _bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization")
    if not header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    token = header.removeprefix("Bearer").strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Empty bearer token")
    return token


async def get_current_user(request: Request) -> dict[str, Any]:
    """
    Claims of a valid access token, with the subject exposed as ``id``.

    Refresh tokens are refused here, and key-bound tokens need the matching
    client key.
    """
    claims = decode_access_token(_bearer_token(request))

    if claims.get("token_type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="An access token is required")

    subject, role = claims.get("sub"), claims.get("role")
    if not subject or not role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token claims are incomplete")

    if "cnf" in claims:
        cnf = claims["cnf"]
        bound_jwk = cnf.get("jwk") if isinstance(cnf, dict) else None
        if not bound_jwk:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has an unusable cnf claim")
        _verify_cnf_simple(request, bound_jwk)

    return {**{k: v for k, v in claims.items() if k != "sub"}, "id": subject, "role": role}


def require_roles(*allowed_roles: str) -> Callable[..., dict[str, Any]]:
    """
    Dependency factory gating a route on the token role.

        WRITE_ROLE_DEP = Depends(require_roles(UserRole.ADMIN.value))

    With no roles, any authenticated caller passes.
    """
    def dependency(_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        if allowed_roles and _user.get("role") not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have permission to perform this action")
        return _user

    return dependency


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One database session per request."""
    async with AsyncSession(async_engine) as db_session:
        yield db_session
