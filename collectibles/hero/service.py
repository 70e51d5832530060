"""Hero settings persistence."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.config.settings import Settings
from collectibles.db.base import utc_now
from collectibles.hero.models import HeroSettings
from collectibles.hero.schemas import HeroContent, HeroHeading

logger = logging.getLogger(__name__)


def default_hero(settings: Settings) -> HeroContent:
    return HeroContent(
        heading=HeroHeading(
            line1=settings.hero_heading_line1, line2=settings.hero_heading_line2
        ),
        paragraph=settings.hero_paragraph,
    )


def _to_content(row: HeroSettings) -> HeroContent:
    return HeroContent(
        heading=HeroHeading(line1=row.heading_line1, line2=row.heading_line2),
        paragraph=row.paragraph,
    )


class HeroService:
    """Read and upsert the single hero settings row."""

    @staticmethod
    async def _current(db: AsyncSession) -> HeroSettings | None:
        result = await db.execute(
            select(HeroSettings).order_by(HeroSettings.updated_at.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get(db: AsyncSession, settings: Settings) -> HeroContent:
        """Return the saved hero text, or the defaults.

        A failed read also falls back to the defaults; the home page never
        goes without a hero.
        """
        try:
            row = await HeroService._current(db)
        except SQLAlchemyError as e:
            logger.warning("Failed to load hero settings: %s", e)
            return default_hero(settings)
        return _to_content(row) if row else default_hero(settings)

    @staticmethod
    async def save(db: AsyncSession, user_id: str, content: HeroContent) -> HeroContent:
        """Update the single row in place, inserting it on first save.

        Args:
            db: Database session
            user_id: The editor, recorded on the row
            content: New heading lines and paragraph

        Returns:
            The saved hero text
        """
        row = await HeroService._current(db)
        if row is None:
            row = HeroSettings(
                heading_line1=content.heading.line1,
                heading_line2=content.heading.line2,
                paragraph=content.paragraph,
                user_id=user_id,
            )
            db.add(row)
        else:
            row.heading_line1 = content.heading.line1
            row.heading_line2 = content.heading.line2
            row.paragraph = content.paragraph
            row.user_id = user_id
            row.updated_at = utc_now()

        await db.flush()
        logger.info("Hero settings saved", extra={"user_id": user_id})
        return _to_content(row)
