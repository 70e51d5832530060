"""Report endpoints, recomputed from the collection store on every request."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from collectibles.catalog.dependencies import CollectionStoreDep
from collectibles.catalog.schemas import ItemList
from collectibles.config.settings import Settings, get_settings
from collectibles.reports import service
from collectibles.reports.schemas import (
    CategoryValuationSums,
    CollectionStats,
    GroupValuationCategories,
    HomeValuationReport,
    ValuationReport,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/category-sums",
    response_model=CategoryValuationSums,
    summary="In-stock valuation per category",
)
async def category_sums(store: CollectionStoreDep) -> CategoryValuationSums:
    return service.category_valuation_sums(store.categories, store.items)


@router.get(
    "/home-valuation",
    response_model=HomeValuationReport,
    summary="Valuation of a category tree and one of its subcategories",
)
async def home_valuation(
    store: CollectionStoreDep,
    settings: Annotated[Settings, Depends(get_settings)],
    category: str | None = Query(None, max_length=255, description="Top-level category name"),
    subcategory: str | None = Query(None, max_length=255, description="Direct child name"),
) -> HomeValuationReport:
    """Defaults to the configured home category and subcategory."""
    return service.category_tree_valuation(
        store.categories,
        store.items,
        category or settings.home_report_category,
        subcategory if subcategory is not None else settings.home_report_subcategory,
    )


@router.get("/top-items", response_model=ItemList, summary="Most valuable items")
async def top_items(
    store: CollectionStoreDep,
    limit: int = Query(service.TOP_ITEMS_LIMIT, ge=1, le=100),
) -> ItemList:
    items = service.top_items_by_value(store.items, limit=limit)
    return ItemList(items=items, total=len(items))


@router.get("/wishlist", response_model=ItemList, summary="Out-of-stock items by value")
async def wishlist(store: CollectionStoreDep) -> ItemList:
    items = service.wishlist(store.items)
    return ItemList(items=items, total=len(items))


@router.get(
    "/valuation",
    response_model=ValuationReport,
    summary="Purchase price against valuation, grouped by category",
)
async def valuation(store: CollectionStoreDep) -> ValuationReport:
    return service.valuation_report(store.categories, store.items)


@router.get("/stats", response_model=CollectionStats, summary="Collection counts")
async def stats(store: CollectionStoreDep) -> CollectionStats:
    return service.collection_stats(store.categories, store.items)


@router.get(
    "/group-valuation-categories",
    response_model=GroupValuationCategories,
    summary="Categories that hold valued in-stock items",
)
async def group_valuation_categories(store: CollectionStoreDep) -> GroupValuationCategories:
    return GroupValuationCategories(
        categories=service.group_valuation_categories(store.categories, store.items)
    )
