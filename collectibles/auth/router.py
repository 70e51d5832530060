"""Sign-up, sign-in and sign-out endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.auth.dependencies import OptionalUser, get_session_token
from collectibles.auth.schemas import (
    Credentials,
    CurrentSession,
    SessionResponse,
    UserResponse,
)
from collectibles.auth.service import AuthService
from collectibles.catalog.dependencies import CollectionStoreDep
from collectibles.core.exceptions import AuthenticationError
from collectibles.db.session import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/sign-up",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def sign_up(
    data: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    user = await AuthService.sign_up(db, data)
    return UserResponse.model_validate(user)


@router.post("/sign-in", response_model=SessionResponse, summary="Open a session")
async def sign_in(
    data: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionResponse:
    return await AuthService.sign_in(db, data)


@router.post(
    "/sign-out",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close the current session",
)
async def sign_out(
    store: CollectionStoreDep,
    user: OptionalUser,
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    if user is None or token is None:
        raise AuthenticationError()
    await AuthService.sign_out(db, token)
    # Session-local manufacturer edits end with the session
    store.discard_pending_manufacturers(user.id)


@router.get("/session", response_model=CurrentSession, summary="Current session")
async def current_session(user: OptionalUser) -> CurrentSession:
    if user is None:
        return CurrentSession(authenticated=False)
    return CurrentSession(authenticated=True, user=UserResponse.model_validate(user))
