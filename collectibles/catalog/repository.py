"""Remote store access for categories and items.

Writes are attributed to the signed-in user; updates and deletes only touch
rows whose ``user_id`` matches, so a row owned by someone else reads as
missing.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.catalog.models import Category, Item
from collectibles.db.base import utc_now

# Columns a client may set; everything else is managed by the store
CATEGORY_COLUMNS = frozenset(
    {"name", "description", "image", "cloudflare_id", "parent_id"}
)
ITEM_COLUMNS = frozenset(
    {
        "name",
        "category_id",
        "stock_status",
        "rating",
        "valuation",
        "image",
        "cloudflare_id",
        "images",
        "cloudflare_ids",
        "manufacturer",
        "year_manufactured",
        "afa_number",
        "afa_grade",
        "description",
        "bought_for",
        "variations",
    }
)


def _pick(values: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if key in allowed}


class CatalogRepository:
    """Select, insert, update and delete against the categories/items tables."""

    @staticmethod
    async def list_categories(db: AsyncSession) -> list[Category]:
        result = await db.execute(
            select(Category).order_by(Category.created_at.asc(), Category.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_items(db: AsyncSession) -> list[Item]:
        result = await db.execute(
            select(Item).order_by(Item.created_at.asc(), Item.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def insert_category(
        db: AsyncSession, user_id: str, values: Mapping[str, Any]
    ) -> Category:
        category = Category(user_id=user_id, **_pick(values, CATEGORY_COLUMNS))
        db.add(category)
        await db.flush()
        await db.refresh(category)
        return category

    @staticmethod
    async def update_category(
        db: AsyncSession, user_id: str, category_id: str, values: Mapping[str, Any]
    ) -> Category | None:
        result = await db.execute(
            select(Category).where(
                Category.id == category_id,
                Category.user_id == user_id,
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            return None

        for key, value in _pick(values, CATEGORY_COLUMNS).items():
            setattr(category, key, value)
        category.updated_at = utc_now()
        await db.flush()
        await db.refresh(category)
        return category

    @staticmethod
    async def delete_category(db: AsyncSession, user_id: str, category_id: str) -> bool:
        """Delete an owned category and the items filed directly under it.

        Child categories are left in place.
        """
        result = await db.execute(
            delete(Category).where(
                Category.id == category_id,
                Category.user_id == user_id,
            )
        )
        rowcount: int = result.rowcount  # type: ignore[attr-defined]
        if rowcount == 0:
            return False
        # Explicit for databases that do not enforce ON DELETE CASCADE
        await db.execute(delete(Item).where(Item.category_id == category_id))
        return True

    @staticmethod
    async def insert_item(
        db: AsyncSession, user_id: str, values: Mapping[str, Any]
    ) -> Item:
        item = Item(user_id=user_id, **_pick(values, ITEM_COLUMNS))
        db.add(item)
        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def update_item(
        db: AsyncSession, user_id: str, item_id: str, values: Mapping[str, Any]
    ) -> Item | None:
        result = await db.execute(
            select(Item).where(Item.id == item_id, Item.user_id == user_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            return None

        for key, value in _pick(values, ITEM_COLUMNS).items():
            setattr(item, key, value)
        item.updated_at = utc_now()
        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def delete_item(db: AsyncSession, user_id: str, item_id: str) -> bool:
        result = await db.execute(
            delete(Item).where(Item.id == item_id, Item.user_id == user_id)
        )
        rowcount: int = result.rowcount  # type: ignore[attr-defined]
        return rowcount > 0
