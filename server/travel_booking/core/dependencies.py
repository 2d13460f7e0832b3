"""FastAPI dependencies for database sessions and bearer-token authentication."""

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError, AuthorizationError


class AuthenticatedUser(BaseModel):
    """Caller identity decoded from a bearer token."""

    user_id: int = Field(..., description="Subject of the token")
    email: Optional[str] = None
    name: Optional[str] = None
    phone_number: Optional[str] = None
    roles: list[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return settings.admin_role in self.roles


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def decode_bearer_token(authorization: str) -> AuthenticatedUser:
    """
    Validate an ``Authorization: Bearer <jwt>`` header value.

    Raises:
        AuthenticationError: If the header or token is invalid or expired
    """
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        # PyJWT rejects expired tokens itself when "exp" is present
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError:
        raise AuthenticationError(detail="Token validation failed")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError(detail="Invalid token payload")

    exp = payload.get("exp")
    return AuthenticatedUser(
        user_id=user_id,
        email=payload.get("email"),
        name=payload.get("name"),
        phone_number=payload.get("phone_number"),
        roles=payload.get("roles", []),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> AuthenticatedUser:
    """
    Authentication dependency that requires a valid bearer token.

    Raises:
        AuthenticationError: If the token is missing or invalid
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")
    return decode_bearer_token(authorization)


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Optional[AuthenticatedUser]:
    """Authentication dependency for endpoints that also serve anonymous guests."""
    if not authorization:
        return None
    return decode_bearer_token(authorization)


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user)
) -> AuthenticatedUser:
    """
    Authorization dependency for booking moderation endpoints.

    Raises:
        AuthorizationError: If the caller is not an admin
    """
    if not user.is_admin:
        raise AuthorizationError(detail="Unauthorized", required_role=settings.admin_role)
    return user


RequiredAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
AdminAuth = Depends(require_admin)
DatabaseSession = Depends(get_db)
