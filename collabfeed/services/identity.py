"""Caller identity resolution backed by signed bearer tokens."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..config import get_settings
from .errors import NotSignedIn

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


class IdentityContext(Protocol):
    def current_user_id(self) -> UUID | None: ...


@dataclass(frozen=True)
class StaticIdentity:
    """Identity fixed at construction, used by scripts and tests."""

    user_id: UUID | None

    def current_user_id(self) -> UUID | None:
        return self.user_id


class BearerIdentity:
    """Resolve the caller from an HS256 JWT whose ``sub`` claim is a user id."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def current_user_id(self) -> UUID | None:
        if not self._token:
            return None
        return decode_access_token(self._token)


def decode_access_token(token: str) -> UUID | None:
    """Decode a JWT and return its subject, or ``None`` when it is not usable."""

    settings = get_settings()
    if not settings.jwt_secret_key:
        logger.warning("JWT_SECRET_KEY is not configured; bearer tokens cannot be verified")
        return None
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return UUID(str(subject))
    except ValueError:
        return None


def create_access_token(subject: UUID) -> str:
    """Sign a token for ``subject``; token issuance normally lives with the identity provider."""

    settings = get_settings()
    if not settings.jwt_secret_key:
        raise RuntimeError("JWT_SECRET_KEY is required to sign tokens")
    return jwt.encode({"sub": str(subject)}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> IdentityContext:
    """FastAPI dependency returning the identity context for the request."""

    if not credentials or credentials.scheme.lower() != "bearer":
        return BearerIdentity(None)
    return BearerIdentity(credentials.credentials)


def require_user_id(identity: IdentityContext) -> UUID:
    user_id = identity.current_user_id()
    if user_id is None:
        raise NotSignedIn("No signed-in user for this request")
    return user_id


__all__ = [
    "IdentityContext",
    "StaticIdentity",
    "BearerIdentity",
    "decode_access_token",
    "create_access_token",
    "get_identity",
    "require_user_id",
]
