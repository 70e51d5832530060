"""Tests for category endpoints."""

import pytest
from httpx import AsyncClient

from collectibles.auth.models import User
from collectibles.catalog.store import CollectionStore
from tests.factories import CategoryFactory, ItemFactory

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.asyncio
async def test_create_category(authenticated_client: AsyncClient, store: CollectionStore) -> None:
    data = CategoryFactory.create_data()

    response = await authenticated_client.post(
        "/api/v1/categories",
        json=data.model_dump(by_alias=True),
    )

    assert response.status_code == 201
    result = response.json()
    assert result["name"] == data.name
    assert result["parentId"] is None
    assert "createdAt" in result
    assert store.get_category(result["id"]) is not None


@pytest.mark.asyncio
async def test_create_category_requires_session(
    client: AsyncClient, store: CollectionStore
) -> None:
    response = await client.post("/api/v1/categories", json={"name": "Ships"})

    assert response.status_code == 401
    data = response.json()
    assert data["detail"] == "Failed to create category"
    assert data["reason"] == "User must be authenticated to add categories"
    assert store.categories == []


@pytest.mark.asyncio
async def test_create_category_rejects_blank_name(authenticated_client: AsyncClient) -> None:
    response = await authenticated_client.post("/api/v1/categories", json={"name": "   "})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_categories_is_public(
    client: AsyncClient, store: CollectionStore, user: User
) -> None:
    root = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
    await store.add_category(user, CategoryFactory.create_data(parent_id=root.id))

    everything = await client.get("/api/v1/categories")
    top_level = await client.get("/api/v1/categories", params={"topLevel": "true"})
    children = await client.get("/api/v1/categories", params={"parentId": root.id})

    assert everything.json()["total"] == 2
    assert [c["id"] for c in top_level.json()["categories"]] == [root.id]
    assert children.json()["total"] == 1
    assert children.json()["categories"][0]["parentId"] == root.id


@pytest.mark.asyncio
async def test_get_category_detail(
    client: AsyncClient, store: CollectionStore, user: User
) -> None:
    root = (await store.add_category(user, CategoryFactory.create_data(name="Root"))).unwrap()
    child = (
        await store.add_category(user, CategoryFactory.create_data(parent_id=root.id))
    ).unwrap()
    item = (await store.add_item(user, ItemFactory.create_data(child.id))).unwrap()

    response = await client.get(f"/api/v1/categories/{child.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["category"]["id"] == child.id
    assert data["parent"]["name"] == "Root"
    assert data["subcategories"] == []
    assert [i["id"] for i in data["items"]] == [item.id]


@pytest.mark.asyncio
async def test_get_category_not_found(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/categories/{MISSING_ID}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"


@pytest.mark.asyncio
async def test_update_category(
    authenticated_client: AsyncClient, store: CollectionStore, user: User
) -> None:
    category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()

    response = await authenticated_client.patch(
        f"/api/v1/categories/{category.id}",
        json={"name": "Renamed"},
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert store.get_category(category.id).name == "Renamed"  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_update_category_cycle_rejected(
    authenticated_client: AsyncClient, store: CollectionStore, user: User
) -> None:
    root = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
    child = (
        await store.add_category(user, CategoryFactory.create_data(parent_id=root.id))
    ).unwrap()

    response = await authenticated_client.patch(
        f"/api/v1/categories/{root.id}",
        json={"parentId": child.id},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Failed to update category"


@pytest.mark.asyncio
async def test_update_category_owned_by_someone_else(
    authenticated_client: AsyncClient, store: CollectionStore, other_user: User
) -> None:
    category = (await store.add_category(other_user, CategoryFactory.create_data())).unwrap()

    response = await authenticated_client.patch(
        f"/api/v1/categories/{category.id}",
        json={"name": "Mine now"},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_category(
    authenticated_client: AsyncClient, store: CollectionStore, user: User
) -> None:
    category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
    await store.add_item(user, ItemFactory.create_data(category.id))

    response = await authenticated_client.delete(f"/api/v1/categories/{category.id}")

    assert response.status_code == 204
    assert store.categories == []
    assert store.items == []


@pytest.mark.asyncio
async def test_delete_category_invalid_uuid(authenticated_client: AsyncClient) -> None:
    response = await authenticated_client.delete("/api/v1/categories/not-a-uuid")

    assert response.status_code == 422
