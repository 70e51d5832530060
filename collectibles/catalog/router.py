"""Category, item and manufacturer endpoints.

Reads are served from the in-memory collection store and never require a
session. Writes hand the (possibly anonymous) user to the store, which
rejects anonymous writes before touching the remote store.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from collectibles.auth.dependencies import OptionalUser
from collectibles.catalog.dependencies import CollectionStoreDep
from collectibles.catalog.schemas import (
    Category,
    CategoryCreate,
    CategoryDetail,
    CategoryList,
    CategoryUpdate,
    Item,
    ItemCreate,
    ItemDetail,
    ItemList,
    ItemUpdate,
    ManufacturerList,
    ManufacturerName,
    ReloadResponse,
)
from collectibles.core.exceptions import NotFoundError, StoreError

categories_router = APIRouter(prefix="/categories", tags=["categories"])
items_router = APIRouter(prefix="/items", tags=["items"])
collection_router = APIRouter(tags=["collection"])

CategoryId = Annotated[UUID, Path(description="The category ID")]
ItemId = Annotated[UUID, Path(description="The item ID")]


# Categories


@categories_router.get("", response_model=CategoryList, summary="List categories")
async def list_categories(
    store: CollectionStoreDep,
    parent_id: UUID | None = Query(
        None, alias="parentId", description="Only direct children of this category"
    ),
    top_level: bool = Query(
        False, alias="topLevel", description="Only categories without a parent"
    ),
) -> CategoryList:
    if parent_id is not None:
        categories = store.subcategories(str(parent_id))
    elif top_level:
        categories = store.top_level_categories()
    else:
        categories = store.categories
    return CategoryList(categories=categories, total=len(categories))


@categories_router.post(
    "",
    response_model=Category,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
async def create_category(
    data: CategoryCreate,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> Category:
    result = await store.add_category(user, data)
    return result.unwrap()


@categories_router.get(
    "/{category_id}",
    response_model=CategoryDetail,
    summary="Get a category with its subcategories and items",
)
async def get_category(category_id: CategoryId, store: CollectionStoreDep) -> CategoryDetail:
    detail = store.category_detail(str(category_id))
    if detail is None:
        raise NotFoundError("Category not found")
    return detail


@categories_router.patch(
    "/{category_id}", response_model=Category, summary="Update a category"
)
async def update_category(
    category_id: CategoryId,
    data: CategoryUpdate,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> Category:
    """Update a category (partial update)."""
    result = await store.update_category(user, str(category_id), data)
    return result.unwrap()


@categories_router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a category and its items",
)
async def delete_category(
    category_id: CategoryId,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> None:
    """Delete a category and the items filed directly under it.

    Subcategories are kept.
    """
    result = await store.delete_category(user, str(category_id))
    result.unwrap()


# Items


@items_router.get("", response_model=ItemList, summary="List or search items")
async def list_items(
    store: CollectionStoreDep,
    q: str | None = Query(
        None, max_length=200, description="Search name, description and manufacturer"
    ),
    category_id: UUID | None = Query(
        None, alias="categoryId", description="Only items filed in this category"
    ),
    limit: int = Query(10, ge=1, le=100, description="Maximum search results"),
) -> ItemList:
    if q is not None:
        items = store.search_items(q, limit=limit)
    elif category_id is not None:
        items = store.items_in_category(str(category_id))
    else:
        items = store.items
    return ItemList(items=items, total=len(items))


@items_router.post(
    "",
    response_model=Item,
    status_code=status.HTTP_201_CREATED,
    summary="Create an item",
)
async def create_item(
    data: ItemCreate,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> Item:
    result = await store.add_item(user, data)
    return result.unwrap()


@items_router.get(
    "/{item_id}",
    response_model=ItemDetail,
    summary="Get an item with its category and group names",
)
async def get_item(item_id: ItemId, store: CollectionStoreDep) -> ItemDetail:
    detail = store.item_detail(str(item_id))
    if detail is None:
        raise NotFoundError("Item not found")
    return detail


@items_router.patch("/{item_id}", response_model=Item, summary="Update an item")
async def update_item(
    item_id: ItemId,
    data: ItemUpdate,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> Item:
    """Update an item (partial update).

    Image assets the item no longer references are removed from the image
    service afterwards.
    """
    result = await store.update_item(user, str(item_id), data)
    return result.unwrap()


@items_router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an item",
)
async def delete_item(
    item_id: ItemId,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> None:
    result = await store.delete_item(user, str(item_id))
    result.unwrap()


# Collection and manufacturers


@collection_router.post(
    "/collection/reload",
    response_model=ReloadResponse,
    summary="Reload categories and items from the remote store",
)
async def reload_collection(store: CollectionStoreDep) -> ReloadResponse:
    if not await store.load():
        raise StoreError("Failed to load collection")
    return ReloadResponse(categories=len(store.categories), items=len(store.items))


@collection_router.get(
    "/manufacturers",
    response_model=ManufacturerList,
    tags=["manufacturers"],
    summary="List manufacturers",
)
async def list_manufacturers(store: CollectionStoreDep, user: OptionalUser) -> ManufacturerList:
    """Manufacturers seen on items, plus the caller's unsaved edits."""
    return ManufacturerList(manufacturers=store.manufacturers(user.id if user else None))


@collection_router.post(
    "/manufacturers",
    response_model=ManufacturerList,
    status_code=status.HTTP_201_CREATED,
    tags=["manufacturers"],
    summary="Add a manufacturer",
)
async def add_manufacturer(
    data: ManufacturerName,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> ManufacturerList:
    result = store.add_manufacturer(user, data.name)
    return ManufacturerList(manufacturers=result.unwrap())


@collection_router.put(
    "/manufacturers/{name}",
    response_model=ManufacturerList,
    tags=["manufacturers"],
    summary="Rename a manufacturer",
)
async def rename_manufacturer(
    name: Annotated[str, Path(description="The current manufacturer name")],
    data: ManufacturerName,
    store: CollectionStoreDep,
    user: OptionalUser,
) -> ManufacturerList:
    result = store.edit_manufacturer(user, name, data.name)
    return ManufacturerList(manufacturers=result.unwrap())


router = APIRouter()
router.include_router(categories_router)
router.include_router(items_router)
router.include_router(collection_router)
