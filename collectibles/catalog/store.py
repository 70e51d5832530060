"""In-process collection cache.

``CollectionStore`` loads every category and item once at startup and serves
all reads from memory. Writes go to the remote store first; the cache is only
changed after the remote transaction committed, so a failed write leaves the
cache exactly as it was. There is no version token: concurrent editors get
last-write-wins.

Every public operation returns an ``OperationResult`` and never raises.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from collectibles.auth.models import User
from collectibles.catalog.repository import CatalogRepository
from collectibles.catalog.schemas import (
    Category,
    CategoryCreate,
    CategoryDetail,
    CategoryUpdate,
    Item,
    ItemCreate,
    ItemDetail,
    ItemUpdate,
    normalize_images,
)
from collectibles.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from collectibles.core.notifications import OperationResult
from collectibles.images.service import ImageService
from collectibles.reports.service import descendant_category_ids

T = TypeVar("T")

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 10

_IMAGE_FIELDS = ("image", "cloudflare_id", "images", "cloudflare_ids")
# Columns that an explicit null in a patch leaves untouched
_REQUIRED_CATEGORY_FIELDS = ("name",)
_REQUIRED_ITEM_FIELDS = ("name", "category_id", "stock_status")


def _paired_images(item: Item | None) -> list[tuple[str, str | None]]:
    """The item's image URLs, each with its asset id when one is tracked."""
    if item is None:
        return []
    urls = list(item.images or ([item.image] if item.image else []))
    ids = list(item.cloudflare_ids or ([item.cloudflare_id] if item.cloudflare_id else []))
    if len(ids) != len(urls):
        ids = []
    return [(url, ids[i] if ids else None) for i, url in enumerate(urls)]


def merge_item_images(current: Item | None, patch: dict[str, Any]) -> dict[str, Any]:
    """Resolve the image fields of an item patch against the stored item.

    A patch that replaces ``images`` without ``cloudflareIds`` keeps the asset
    id of every URL that survived; a patch that only sets ``image`` replaces
    the primary slot and keeps the secondary images with their ids. When the
    item tracks asset ids, a new URL must arrive with its own id.

    Raises:
        ValueError: If a new image has no asset id or the merged images break
            the primary/list invariant.
    """
    if not any(field in patch for field in _IMAGE_FIELDS):
        return patch

    pairs = _paired_images(current)
    id_by_url = {url: asset_id for url, asset_id in pairs if asset_id}
    tracks_ids = bool(id_by_url)

    if "images" in patch:
        urls = list(patch["images"] or [])
        if "cloudflare_ids" in patch:
            ids = list(patch["cloudflare_ids"] or [])
        elif tracks_ids:
            if any(url not in id_by_url for url in urls):
                msg = "New images must include their cloudflareIds"
                raise ValueError(msg)
            ids = [id_by_url[url] for url in urls]
        else:
            ids = []
    elif "image" in patch:
        image = patch["image"]
        secondary = pairs[1:]
        urls = ([image] if image else []) + [url for url, _ in secondary]
        primary_id = patch.get("cloudflare_id")
        if image and not primary_id and tracks_ids:
            primary_id = id_by_url.get(image)
            if primary_id is None:
                msg = "New images must include their cloudflareIds"
                raise ValueError(msg)
        secondary_ids = [asset_id for _, asset_id in secondary]
        if all(secondary_ids) and (primary_id or not image):
            ids = ([primary_id] if image else []) + secondary_ids
        else:
            # Untracked item: a lone new primary id cannot pair with the rest
            ids = []
    else:
        urls = [url for url, _ in pairs]
        ids = list(patch.get("cloudflare_ids") or [asset_id for _, asset_id in pairs if asset_id])

    image, cloudflare_id, images, cloudflare_ids = normalize_images(None, None, urls, ids)
    return {
        **patch,
        "image": image,
        "cloudflare_id": cloudflare_id,
        "images": images,
        "cloudflare_ids": cloudflare_ids,
    }


def stale_item_assets(previous: Item, updated: Item) -> list[str]:
    """Asset ids of ``previous`` whose image ``updated`` no longer shows."""
    shown = {url for url, _ in _paired_images(updated)}
    kept_ids = set(updated.asset_ids)
    pairs = _paired_images(previous)
    if previous.image and previous.cloudflare_id:
        pairs.append((previous.image, previous.cloudflare_id))
    stale = {
        asset_id
        for url, asset_id in pairs
        if asset_id and url not in shown and asset_id not in kept_ids
    }
    return sorted(stale)


def _drop_nulls(values: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if not (k in fields and v is None)}


class CollectionStore:
    """Session-wide cache of categories and items with write-through mutations."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        images: ImageService | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.images = images
        self.categories: list[Category] = []
        self.items: list[Item] = []
        self.loaded = False
        self._pending_manufacturers: dict[str, list[str]] = {}

    # Remote store plumbing

    async def _write(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run one remote write in its own transaction."""
        async with self._session_factory() as db, db.begin():
            return await operation(db)

    @staticmethod
    def _unauthorized(action: str, message: str) -> OperationResult[Any]:
        return OperationResult.failed(
            AuthenticationError(f"User must be authenticated to {action}"), message
        )

    @staticmethod
    def _store_failure(error: SQLAlchemyError, message: str) -> OperationResult[Any]:
        logger.error("Remote store error: %s", error)
        return OperationResult.failed(
            StoreError(details={"error": error.__class__.__name__}), message
        )

    async def _cleanup_images(self, asset_ids: Iterable[str | None]) -> None:
        if self.images is None:
            return
        await self.images.delete_assets(asset_ids)

    # Loading

    async def load_categories(self) -> OperationResult[list[Category]]:
        try:
            async with self._session_factory() as db:
                rows = await CatalogRepository.list_categories(db)
        except SQLAlchemyError as e:
            return self._store_failure(e, "Failed to load categories")
        self.categories = [Category.model_validate(row) for row in rows]
        return OperationResult.succeeded(self.categories, "Categories loaded")

    async def load_items(self) -> OperationResult[list[Item]]:
        try:
            async with self._session_factory() as db:
                rows = await CatalogRepository.list_items(db)
        except SQLAlchemyError as e:
            return self._store_failure(e, "Failed to load items")
        self.items = [Item.model_validate(row) for row in rows]
        return OperationResult.succeeded(self.items, "Items loaded")

    async def load(self) -> bool:
        """Load categories and items concurrently.

        Returns:
            True if both collections loaded.
        """
        categories, items = await asyncio.gather(
            self.load_categories(), self.load_items()
        )
        self.loaded = self.loaded or (categories.ok and items.ok)
        logger.info(
            "Collection loaded",
            extra={
                "categories": len(self.categories),
                "items": len(self.items),
                "complete": categories.ok and items.ok,
            },
        )
        return categories.ok and items.ok

    def clear(self) -> None:
        self.categories = []
        self.items = []
        self._pending_manufacturers.clear()
        self.loaded = False

    # Reads

    def get_category(self, category_id: str) -> Category | None:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_item(self, item_id: str) -> Item | None:
        return next((i for i in self.items if i.id == item_id), None)

    def top_level_categories(self) -> list[Category]:
        return [c for c in self.categories if not c.parent_id]

    def subcategories(self, category_id: str) -> list[Category]:
        return [c for c in self.categories if c.parent_id == category_id]

    def items_in_category(self, category_id: str) -> list[Item]:
        return [i for i in self.items if i.category_id == category_id]

    def search_items(self, term: str, limit: int = SEARCH_RESULT_LIMIT) -> list[Item]:
        """Case-insensitive match on name, description and manufacturer."""
        needle = term.strip().lower()
        if not needle:
            return []
        matches = [
            item
            for item in self.items
            if needle in item.name.lower()
            or (item.description and needle in item.description.lower())
            or (item.manufacturer and needle in item.manufacturer.lower())
        ]
        return matches[:limit]

    def category_detail(self, category_id: str) -> CategoryDetail | None:
        category = self.get_category(category_id)
        if category is None:
            return None
        parent = self.get_category(category.parent_id) if category.parent_id else None
        return CategoryDetail(
            category=category,
            parent=parent,
            subcategories=self.subcategories(category_id),
            items=self.items_in_category(category_id),
        )

    def item_detail(self, item_id: str) -> ItemDetail | None:
        item = self.get_item(item_id)
        if item is None:
            return None
        category = self.get_category(item.category_id)
        category_name = category.name if category else ""
        group_name = category_name
        if category and category.parent_id:
            group = self.get_category(category.parent_id)
            group_name = group.name if group else ""
        return ItemDetail(item=item, category_name=category_name, group_name=group_name)

    # Category writes

    async def add_category(
        self, user: User | None, data: CategoryCreate
    ) -> OperationResult[Category]:
        message = "Failed to create category"
        if user is None:
            return self._unauthorized("add categories", message)
        if data.parent_id and self.get_category(data.parent_id) is None:
            return OperationResult.failed(
                ValidationError("Parent category not found"), message
            )

        values = data.model_dump()
        try:
            row = await self._write(
                lambda db: CatalogRepository.insert_category(db, user.id, values)
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)

        category = Category.model_validate(row)
        self.categories = [*self.categories, category]
        logger.info("Category created", extra={"category_id": category.id})
        return OperationResult.succeeded(category, "Category created successfully")

    async def update_category(
        self, user: User | None, category_id: str, patch: CategoryUpdate
    ) -> OperationResult[Category]:
        message = "Failed to update category"
        if user is None:
            return self._unauthorized("update categories", message)

        values = patch.model_dump(exclude_unset=True)
        values = _drop_nulls(values, _REQUIRED_CATEGORY_FIELDS)
        parent_id = values.get("parent_id")
        if parent_id:
            if parent_id == category_id or parent_id in descendant_category_ids(
                self.categories, category_id
            ):
                return OperationResult.failed(
                    ValidationError("A category cannot be nested inside itself"),
                    message,
                )
            if self.get_category(parent_id) is None:
                return OperationResult.failed(
                    ValidationError("Parent category not found"), message
                )
        previous = self.get_category(category_id)
        # A replaced or cleared image without its own id drops the old one
        if "image" in values and "cloudflare_id" not in values:
            if previous is None or values["image"] != previous.image:
                values["cloudflare_id"] = None

        try:
            row = await self._write(
                lambda db: CatalogRepository.update_category(
                    db, user.id, category_id, values
                )
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)
        if row is None:
            return OperationResult.failed(NotFoundError("Category not found"), message)

        category = Category.model_validate(row)
        if previous is None:
            self.categories = [*self.categories, category]
        else:
            self.categories = [
                category if c.id == category_id else c for c in self.categories
            ]

        if previous and previous.cloudflare_id != category.cloudflare_id:
            await self._cleanup_images([previous.cloudflare_id])
        return OperationResult.succeeded(category, "Category updated successfully")

    async def delete_category(
        self, user: User | None, category_id: str
    ) -> OperationResult[Category]:
        """Delete a category and the items filed directly under it.

        Subcategories are not deleted or re-parented; they keep pointing at
        the removed id.
        """
        message = "Failed to delete category"
        if user is None:
            return self._unauthorized("delete categories", message)

        previous = self.get_category(category_id)
        try:
            deleted = await self._write(
                lambda db: CatalogRepository.delete_category(db, user.id, category_id)
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)
        if not deleted:
            return OperationResult.failed(NotFoundError("Category not found"), message)

        removed_items = self.items_in_category(category_id)
        self.categories = [c for c in self.categories if c.id != category_id]
        self.items = [i for i in self.items if i.category_id != category_id]
        logger.info(
            "Category deleted",
            extra={"category_id": category_id, "items_removed": len(removed_items)},
        )

        asset_ids: list[str | None] = [previous.cloudflare_id] if previous else []
        for item in removed_items:
            asset_ids.extend(item.asset_ids)
        await self._cleanup_images(asset_ids)
        return OperationResult.succeeded(previous, "Category deleted successfully")

    # Item writes

    async def add_item(self, user: User | None, data: ItemCreate) -> OperationResult[Item]:
        message = "Failed to create item"
        if user is None:
            return self._unauthorized("add items", message)
        if self.get_category(data.category_id) is None:
            return OperationResult.failed(
                ValidationError("Category not found"), message
            )

        values = data.model_dump()
        try:
            row = await self._write(
                lambda db: CatalogRepository.insert_item(db, user.id, values)
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)

        item = Item.model_validate(row)
        self.items = [*self.items, item]
        logger.info("Item created", extra={"item_id": item.id})
        return OperationResult.succeeded(item, "Item created successfully")

    async def update_item(
        self, user: User | None, item_id: str, patch: ItemUpdate
    ) -> OperationResult[Item]:
        message = "Failed to update item"
        if user is None:
            return self._unauthorized("update items", message)

        previous = self.get_item(item_id)
        try:
            values = merge_item_images(
                previous,
                _drop_nulls(patch.model_dump(exclude_unset=True), _REQUIRED_ITEM_FIELDS),
            )
        except ValueError as e:
            return OperationResult.failed(ValidationError(str(e)), message)
        if "manufacturer" in values and values["manufacturer"] is not None:
            values["manufacturer"] = values["manufacturer"].strip() or None
        if values.get("category_id") and self.get_category(values["category_id"]) is None:
            return OperationResult.failed(ValidationError("Category not found"), message)

        try:
            row = await self._write(
                lambda db: CatalogRepository.update_item(db, user.id, item_id, values)
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)
        if row is None:
            return OperationResult.failed(NotFoundError("Item not found"), message)

        item = Item.model_validate(row)
        if previous is None:
            self.items = [*self.items, item]
        else:
            self.items = [item if i.id == item_id else i for i in self.items]

        if previous is not None:
            await self._cleanup_images(stale_item_assets(previous, item))
        return OperationResult.succeeded(item, "Item updated successfully")

    async def delete_item(self, user: User | None, item_id: str) -> OperationResult[Item]:
        message = "Failed to delete item"
        if user is None:
            return self._unauthorized("delete items", message)

        previous = self.get_item(item_id)
        try:
            deleted = await self._write(
                lambda db: CatalogRepository.delete_item(db, user.id, item_id)
            )
        except SQLAlchemyError as e:
            return self._store_failure(e, message)
        if not deleted:
            return OperationResult.failed(NotFoundError("Item not found"), message)

        self.items = [i for i in self.items if i.id != item_id]
        logger.info("Item deleted", extra={"item_id": item_id})
        if previous is not None:
            await self._cleanup_images(previous.asset_ids)
        return OperationResult.succeeded(previous, "Item deleted successfully")

    # Manufacturers

    def derived_manufacturers(self) -> list[str]:
        """Distinct non-empty manufacturer values across cached items."""
        names = (item.manufacturer.strip() for item in self.items if item.manufacturer)
        return sorted({name for name in names if name})

    def manufacturers(self, user_id: str | None = None) -> list[str]:
        if user_id is not None and user_id in self._pending_manufacturers:
            return list(self._pending_manufacturers[user_id])
        return self.derived_manufacturers()

    def add_manufacturer(self, user: User | None, name: str) -> OperationResult[list[str]]:
        """Add a manufacturer to the user's session-local list."""
        message = "This manufacturer already exists"
        if user is None:
            return self._unauthorized("add manufacturers", "Failed to add manufacturer")
        working = self.manufacturers(user.id)
        if any(m.lower() == name.lower() for m in working):
            return OperationResult.failed(ConflictError("Duplicate manufacturer"), message)

        self._pending_manufacturers[user.id] = sorted([*working, name])
        return OperationResult.succeeded(
            self._pending_manufacturers[user.id],
            "The manufacturer will be saved when you save the item",
        )

    def edit_manufacturer(
        self, user: User | None, old_name: str, new_name: str
    ) -> OperationResult[list[str]]:
        """Rename a manufacturer in the user's session-local list."""
        if user is None:
            return self._unauthorized("edit manufacturers", "Failed to update manufacturer")
        working = self.manufacturers(user.id)
        if old_name not in working:
            return OperationResult.failed(
                NotFoundError("Manufacturer not found"), "Failed to update manufacturer"
            )
        index = working.index(old_name)
        if any(m.lower() == new_name.lower() and i != index for i, m in enumerate(working)):
            return OperationResult.failed(
                ConflictError("Duplicate manufacturer"),
                "This manufacturer name already exists",
            )

        working[index] = new_name
        self._pending_manufacturers[user.id] = sorted(working)
        return OperationResult.succeeded(
            self._pending_manufacturers[user.id],
            "The change will be saved when you save the item",
        )

    def discard_pending_manufacturers(self, user_id: str) -> None:
        self._pending_manufacturers.pop(user_id, None)
