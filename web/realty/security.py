from __future__ import annotations

import hashlib
import secrets
import time
from typing import Annotated

import bcrypt
from fastapi import Depends, Request
from jose import JWTError, jwt

from .core import get_settings
from .core.exceptions import AuthenticationError
from .core.permissions import Actor
from .deps import SessionDep
from .models import User

settings = get_settings()

# ---------------------------------------------------------------------------
#  Token lifetime configuration – override via env vars
# ---------------------------------------------------------------------------
ACCESS_TOKEN_EXP_SECONDS: int = settings.ACCESS_TOKEN_EXPIRE_SECONDS
REFRESH_TOKEN_EXP_SECONDS: int = settings.REFRESH_TOKEN_EXPIRE_SECONDS

ACCESS = "access"
REFRESH = "refresh"


def _now() -> int:
    return int(time.time())


# ---------------------------------------------------------------------------
#  Password helpers
# ---------------------------------------------------------------------------
def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify password against hash; malformed hashes never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def new_reset_token() -> tuple[str, str]:
    """Return *(raw, digest)*; only the digest is stored."""
    raw = secrets.token_hex(32)
    return raw, hash_reset_token(raw)


def hash_reset_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
#  Basic JWT helpers
# ---------------------------------------------------------------------------
def create_token(
    sub: int | str,
    role: str,
    *,
    token_type: str = ACCESS,
    expires_in: int | None = None,
    **extra_claims,
) -> str:
    """Return a signed JWT including any *extra_claims*.

    Standard claims:
    • sub  – user identifier
    • role – user role string (informational only, never used to authorize)
    • type – ``access`` or ``refresh``
    • exp  – expiry (unix epoch)
    """
    if expires_in is None:
        expires_in = ACCESS_TOKEN_EXP_SECONDS if token_type == ACCESS else REFRESH_TOKEN_EXP_SECONDS
    payload = {
        "sub": str(sub),
        "role": role,
        "type": token_type,
        "exp": _now() + expires_in,
    }
    payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, expected_type: str | None = ACCESS) -> dict:
    """Verify *token* and return its payload."""
    try:
        payload: dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise AuthenticationError("Invalid token") from exc
    if expected_type and payload.get("type") != expected_type:
        raise AuthenticationError("Invalid token type")
    if not str(payload.get("sub", "")).isdigit():
        raise AuthenticationError("Invalid token subject")
    return payload


# Convenience helper: returns *(access, refresh)* tokens pair
def mint_tokens(sub: int | str, role: str) -> tuple[str, str]:
    access = create_token(sub, role, token_type=ACCESS)
    refresh = create_token(sub, role, token_type=REFRESH)
    return access, refresh


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
async def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return req.cookies.get("access_token")


async def current_user(req: Request, sess: SessionDep) -> User:
    """FastAPI dependency returning the active account behind the token.

    The account is reloaded on every request so role or status changes apply
    immediately.
    """
    token = await _extract_token(req)
    if not token:
        raise AuthenticationError("Missing credentials")
    payload = decode_token(token)
    user = await sess.get(User, int(payload["sub"]))
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


async def current_actor(user: Annotated[User, Depends(current_user)]) -> Actor:
    return Actor.from_user(user)


ActorDep = Annotated[Actor, Depends(current_actor)]
