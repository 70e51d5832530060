"""Pydantic schemas for categories and items.

Payloads use camelCase field names (``categoryId``, ``stockStatus``) while
the store columns stay snake_case. ``Category`` and ``Item`` double as the
records held by the in-memory collection cache.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_ITEM_IMAGES = 4


class StockStatus(StrEnum):
    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip_name(v: str | None) -> str | None:
    if v is None:
        return None
    stripped = v.strip()
    if not stripped:
        msg = "Name cannot be empty or whitespace-only"
        raise ValueError(msg)
    return stripped


def normalize_images(
    image: str | None,
    cloudflare_id: str | None,
    images: list[str] | None,
    cloudflare_ids: list[str] | None,
) -> tuple[str | None, str | None, list[str] | None, list[str] | None]:
    """Make the primary image agree with the image list.

    The list is authoritative: whatever occupies index 0 becomes the primary
    image. A lone primary image becomes a one-element list. Asset ids, when
    present, must pair positionally with the URLs.

    Returns:
        (image, cloudflare_id, images, cloudflare_ids), with empty lists as None.

    Raises:
        ValueError: On more than four images or unpaired asset ids.
    """
    urls = [url for url in images or [] if url]
    ids = [asset_id for asset_id in cloudflare_ids or [] if asset_id]
    if not urls and image:
        urls = [image]
        if not ids and cloudflare_id:
            ids = [cloudflare_id]

    if len(urls) > MAX_ITEM_IMAGES:
        msg = f"An item can have at most {MAX_ITEM_IMAGES} images"
        raise ValueError(msg)
    if ids and len(ids) != len(urls):
        msg = "cloudflareIds must pair one-to-one with images"
        raise ValueError(msg)

    return (
        urls[0] if urls else None,
        ids[0] if ids else None,
        urls or None,
        ids or None,
    )


# Categories


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    image: str | None = None
    cloudflare_id: str | None = None
    parent_id: str | None = None

    @field_validator("name", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str | None) -> str | None:
        """Strip leading/trailing whitespace and validate not empty."""
        return _strip_name(v)


class CategoryUpdate(CamelModel):
    """Partial update; an explicit ``parentId: null`` moves to the top level."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    image: str | None = None
    cloudflare_id: str | None = None
    parent_id: str | None = None

    @field_validator("name", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str | None) -> str | None:
        """Strip leading/trailing whitespace and validate not empty."""
        return _strip_name(v)


class Category(CamelModel):
    id: str
    name: str
    description: str | None = None
    image: str | None = None
    cloudflare_id: str | None = None
    parent_id: str | None = None
    user_id: str
    created_at: datetime
    updated_at: datetime


# Items


class ItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    category_id: str
    stock_status: StockStatus = StockStatus.IN_STOCK
    rating: str | None = Field(None, max_length=64)
    valuation: float | None = Field(None, ge=0)
    bought_for: float | None = Field(None, ge=0)
    image: str | None = None
    cloudflare_id: str | None = None
    images: list[str] | None = None
    cloudflare_ids: list[str] | None = None
    manufacturer: str | None = Field(None, max_length=255)
    year_manufactured: int | None = Field(None, ge=1800, le=2200)
    afa_number: str | None = Field(None, max_length=64)
    afa_grade: str | None = Field(None, max_length=16)
    description: str | None = Field(None, max_length=10000)
    variations: str | None = Field(None, max_length=5000)

    @field_validator("name", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str | None) -> str | None:
        """Strip leading/trailing whitespace and validate not empty."""
        return _strip_name(v)

    @field_validator("manufacturer", mode="after")
    @classmethod
    def blank_manufacturer_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def primary_image_leads_list(self) -> "ItemCreate":
        (
            self.image,
            self.cloudflare_id,
            self.images,
            self.cloudflare_ids,
        ) = normalize_images(
            self.image, self.cloudflare_id, self.images, self.cloudflare_ids
        )
        return self


class ItemUpdate(CamelModel):
    """Partial update; image fields are re-normalized against the stored item."""

    name: str | None = Field(None, min_length=1, max_length=255)
    category_id: str | None = None
    stock_status: StockStatus | None = None
    rating: str | None = Field(None, max_length=64)
    valuation: float | None = Field(None, ge=0)
    bought_for: float | None = Field(None, ge=0)
    image: str | None = None
    cloudflare_id: str | None = None
    images: list[str] | None = Field(None, max_length=MAX_ITEM_IMAGES)
    cloudflare_ids: list[str] | None = Field(None, max_length=MAX_ITEM_IMAGES)
    manufacturer: str | None = Field(None, max_length=255)
    year_manufactured: int | None = Field(None, ge=1800, le=2200)
    afa_number: str | None = Field(None, max_length=64)
    afa_grade: str | None = Field(None, max_length=16)
    description: str | None = Field(None, max_length=10000)
    variations: str | None = Field(None, max_length=5000)

    @field_validator("name", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str | None) -> str | None:
        """Strip leading/trailing whitespace and validate not empty."""
        return _strip_name(v)


class Item(CamelModel):
    id: str
    name: str
    category_id: str
    stock_status: StockStatus
    rating: str | None = None
    valuation: float | None = None
    bought_for: float | None = None
    image: str | None = None
    cloudflare_id: str | None = None
    images: list[str] | None = None
    cloudflare_ids: list[str] | None = None
    manufacturer: str | None = None
    year_manufactured: int | None = None
    afa_number: str | None = None
    afa_grade: str | None = None
    description: str | None = None
    variations: str | None = None
    user_id: str
    created_at: datetime
    updated_at: datetime

    @property
    def asset_ids(self) -> list[str]:
        """Every image-service asset referenced by this item."""
        ids = list(self.cloudflare_ids or [])
        if self.cloudflare_id and self.cloudflare_id not in ids:
            ids.insert(0, self.cloudflare_id)
        return ids


# Views


class CategoryList(CamelModel):
    categories: list[Category]
    total: int


class CategoryDetail(CamelModel):
    """Category page: the category, its parent, children and own items."""

    category: Category
    parent: Category | None = None
    subcategories: list[Category]
    items: list[Item]


class ItemList(CamelModel):
    items: list[Item]
    total: int


class ItemDetail(CamelModel):
    """Item page: the item plus its category and group (parent) names."""

    item: Item
    category_name: str
    group_name: str


class ManufacturerList(CamelModel):
    manufacturers: list[str]


class ManufacturerName(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name", mode="after")
    @classmethod
    def strip_whitespace(cls, v: str | None) -> str | None:
        """Strip leading/trailing whitespace and validate not empty."""
        return _strip_name(v)


class ReloadResponse(CamelModel):
    categories: int
    items: int
