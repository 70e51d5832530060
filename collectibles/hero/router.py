"""Hero banner endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.auth.dependencies import RequireSession
from collectibles.config.settings import Settings, get_settings
from collectibles.db.session import get_db, get_db_no_commit
from collectibles.hero.schemas import HeroContent
from collectibles.hero.service import HeroService

router = APIRouter(prefix="/hero", tags=["hero"])


@router.get("", response_model=HeroContent, summary="Get the hero text")
async def get_hero(
    db: Annotated[AsyncSession, Depends(get_db_no_commit)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HeroContent:
    return await HeroService.get(db, settings)


@router.put("", response_model=HeroContent, summary="Update the hero text")
async def update_hero(
    data: HeroContent,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: RequireSession,
) -> HeroContent:
    """Replace the hero text. Any signed-in user may edit it."""
    return await HeroService.save(db, user.id, data)
