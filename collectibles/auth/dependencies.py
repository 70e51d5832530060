"""FastAPI dependencies for the authentication gate.

Reads are never gated. Every mutating endpoint depends on ``RequireSession``,
which rejects the request before any store or image-service call is made.
"""

from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.auth.models import User
from collectibles.auth.service import AuthService
from collectibles.core.exceptions import AuthenticationError
from collectibles.db.session import get_db

bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Session token returned by /auth/sign-in",
)


async def get_session_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Security(bearer_scheme)
    ],
) -> str | None:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


async def get_current_user(
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Return the signed-in user, or None for anonymous requests."""
    if not token:
        return None
    return await AuthService.validate_token(db, token)


async def require_user(
    user: Annotated[User | None, Depends(get_current_user)],
) -> User:
    """Fail fast with 401 when there is no live session."""
    if user is None:
        raise AuthenticationError()
    return user


OptionalUser = Annotated[User | None, Depends(get_current_user)]
RequireSession = Annotated[User, Depends(require_user)]
