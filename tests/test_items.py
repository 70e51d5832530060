"""Tests for item endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from collectibles.auth.models import User
from collectibles.catalog.schemas import Category
from collectibles.catalog.store import CollectionStore
from tests.conftest import CloudflareStub
from tests.factories import CategoryFactory, ItemFactory

MISSING_ID = "00000000-0000-0000-0000-000000000000"
IMAGE_URLS = [f"https://imagedelivery.net/test-hash/img-{n}/public" for n in range(1, 6)]


@pytest_asyncio.fixture
async def category(store: CollectionStore, user: User) -> Category:
    return (await store.add_category(user, CategoryFactory.create_data(name="Figures"))).unwrap()


@pytest.mark.asyncio
async def test_create_item(authenticated_client: AsyncClient, category: Category) -> None:
    data = ItemFactory.create_data(category.id)

    response = await authenticated_client.post(
        "/api/v1/items",
        json=data.model_dump(by_alias=True, mode="json"),
    )

    assert response.status_code == 201
    result = response.json()
    assert result["name"] == data.name
    assert result["categoryId"] == category.id
    assert result["stockStatus"] == "In Stock"
    assert result["valuation"] == data.valuation


@pytest.mark.asyncio
async def test_create_item_minimal(authenticated_client: AsyncClient, category: Category) -> None:
    response = await authenticated_client.post(
        "/api/v1/items",
        json={"name": "Minimal Item", "categoryId": category.id},
    )

    assert response.status_code == 201
    result = response.json()
    assert result["images"] is None
    assert result["manufacturer"] is None


@pytest.mark.asyncio
async def test_create_item_primary_image_leads_list(
    authenticated_client: AsyncClient, category: Category
) -> None:
    response = await authenticated_client.post(
        "/api/v1/items",
        json={
            "name": "Falcon",
            "categoryId": category.id,
            "images": IMAGE_URLS[:3],
            "cloudflareIds": ["img-1", "img-2", "img-3"],
        },
    )

    assert response.status_code == 201
    result = response.json()
    assert result["image"] == IMAGE_URLS[0]
    assert result["cloudflareId"] == "img-1"


@pytest.mark.asyncio
async def test_create_item_rejects_five_images(
    authenticated_client: AsyncClient, category: Category
) -> None:
    response = await authenticated_client.post(
        "/api/v1/items",
        json={"name": "Too many", "categoryId": category.id, "images": IMAGE_URLS},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_item_rejects_unknown_stock_status(
    authenticated_client: AsyncClient, category: Category
) -> None:
    response = await authenticated_client.post(
        "/api/v1/items",
        json={"name": "X", "categoryId": category.id, "stockStatus": "Sold"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_item_requires_session(client: AsyncClient, category: Category) -> None:
    response = await client.post(
        "/api/v1/items", json={"name": "X", "categoryId": category.id}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_and_search_items(
    client: AsyncClient, store: CollectionStore, user: User, category: Category
) -> None:
    await store.add_item(user, ItemFactory.create_data(category.id, name="Darth Vader"))
    await store.add_item(user, ItemFactory.create_data(category.id, name="Luke Skywalker"))

    everything = await client.get("/api/v1/items")
    search = await client.get("/api/v1/items", params={"q": "vader"})
    by_category = await client.get("/api/v1/items", params={"categoryId": category.id})

    assert everything.json()["total"] == 2
    assert [i["name"] for i in search.json()["items"]] == ["Darth Vader"]
    assert by_category.json()["total"] == 2


@pytest.mark.asyncio
async def test_get_item_detail(
    client: AsyncClient, store: CollectionStore, user: User, category: Category
) -> None:
    child = (
        await store.add_category(
            user, CategoryFactory.create_data(name="Loose", parent_id=category.id)
        )
    ).unwrap()
    item = (await store.add_item(user, ItemFactory.create_data(child.id))).unwrap()

    response = await client.get(f"/api/v1/items/{item.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["item"]["id"] == item.id
    assert data["categoryName"] == "Loose"
    assert data["groupName"] == "Figures"


@pytest.mark.asyncio
async def test_get_item_not_found(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/items/{MISSING_ID}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_item(
    authenticated_client: AsyncClient, store: CollectionStore, user: User, category: Category
) -> None:
    item = (await store.add_item(user, ItemFactory.create_data(category.id))).unwrap()

    response = await authenticated_client.patch(
        f"/api/v1/items/{item.id}",
        json={"stockStatus": "Out of Stock", "valuation": 99.5},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["stockStatus"] == "Out of Stock"
    assert data["valuation"] == 99.5
    assert data["name"] == item.name


@pytest.mark.asyncio
async def test_update_item_removes_replaced_image(
    authenticated_client: AsyncClient,
    store: CollectionStore,
    user: User,
    category: Category,
    cloudflare: CloudflareStub,
) -> None:
    item = (
        await store.add_item(
            user,
            ItemFactory.create_data(category.id, image=IMAGE_URLS[0], cloudflare_id="img-1"),
        )
    ).unwrap()

    response = await authenticated_client.patch(
        f"/api/v1/items/{item.id}",
        json={"image": IMAGE_URLS[1], "cloudflareId": "img-2"},
    )

    assert response.status_code == 200
    assert response.json()["images"] == [IMAGE_URLS[1]]
    assert cloudflare.deleted == ["img-1"]


@pytest.mark.asyncio
async def test_delete_item(
    authenticated_client: AsyncClient,
    store: CollectionStore,
    user: User,
    category: Category,
    cloudflare: CloudflareStub,
) -> None:
    item = (
        await store.add_item(
            user,
            ItemFactory.create_data(
                category.id, images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"]
            ),
        )
    ).unwrap()

    response = await authenticated_client.delete(f"/api/v1/items/{item.id}")

    assert response.status_code == 204
    assert store.items == []
    assert sorted(cloudflare.deleted) == ["img-1", "img-2"]


@pytest.mark.asyncio
async def test_delete_item_not_found(authenticated_client: AsyncClient) -> None:
    response = await authenticated_client.delete(f"/api/v1/items/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Failed to delete item"


@pytest.mark.asyncio
async def test_reload_collection(
    client: AsyncClient, store: CollectionStore, user: User, category: Category
) -> None:
    await store.add_item(user, ItemFactory.create_data(category.id))
    store.clear()

    response = await client.post("/api/v1/collection/reload")

    assert response.status_code == 200
    assert response.json() == {"categories": 1, "items": 1}
    assert store.loaded
