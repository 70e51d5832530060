"""Tests for the in-memory collection store."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from collectibles.auth.models import User
from collectibles.catalog.models import Item as ItemRow
from collectibles.catalog.repository import CatalogRepository
from collectibles.catalog.schemas import CategoryUpdate, ItemUpdate
from collectibles.catalog.store import CollectionStore, merge_item_images, stale_item_assets
from collectibles.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from collectibles.core.notifications import NotificationVariant
from collectibles.images.service import ImageService
from tests.conftest import CloudflareStub
from tests.factories import CategoryFactory, ItemFactory

IMAGE_URLS = [f"https://imagedelivery.net/test-hash/img-{n}/public" for n in range(1, 5)]


class TestLoading:
    """Tests for loading the collection."""

    @pytest.mark.asyncio
    async def test_load_orders_by_creation(
        self,
        store: CollectionStore,
        session_factory: async_sessionmaker[AsyncSession],
        image_service: ImageService,
        user: User,
    ) -> None:
        names = ["First", "Second", "Third"]
        for name in names:
            await store.add_category(user, CategoryFactory.create_data(name=name))

        fresh = CollectionStore(session_factory, image_service)
        assert await fresh.load()

        assert [c.name for c in fresh.categories] == names
        assert fresh.loaded

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous_cache(
        self,
        store: CollectionStore,
        user: User,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        await store.add_category(user, CategoryFactory.create_data(name="Kept"))

        async def broken(db: AsyncSession) -> list:
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(CatalogRepository, "list_categories", broken)
        result = await store.load_categories()

        assert not result.ok
        assert result.notification.description == "Failed to load categories"
        assert result.notification.variant == NotificationVariant.DESTRUCTIVE
        assert isinstance(result.error, StoreError)
        assert [c.name for c in store.categories] == ["Kept"]

    @pytest.mark.asyncio
    async def test_round_trip_keeps_primary_image_first(
        self,
        store: CollectionStore,
        session_factory: async_sessionmaker[AsyncSession],
        user: User,
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        await store.add_item(
            user,
            ItemFactory.create_data(
                category.id,
                images=IMAGE_URLS[:3],
                cloudflare_ids=["img-1", "img-2", "img-3"],
            ),
        )

        reloaded = CollectionStore(session_factory)
        await reloaded.load()

        (item,) = reloaded.items
        assert item.images == IMAGE_URLS[:3]
        assert item.image == item.images[0]
        assert item.cloudflare_id == item.cloudflare_ids[0] == "img-1"


class TestAuthenticationGate:
    """Writes without a session fail before any store call."""

    @pytest.mark.asyncio
    async def test_anonymous_writes_are_rejected(
        self, store: CollectionStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def unexpected(*args: object, **kwargs: object) -> None:
            raise AssertionError("remote store must not be called")

        monkeypatch.setattr(CatalogRepository, "insert_category", unexpected)
        monkeypatch.setattr(CatalogRepository, "delete_item", unexpected)

        created = await store.add_category(None, CategoryFactory.create_data())
        deleted = await store.delete_item(None, "any-id")

        for result in (created, deleted):
            assert not result.ok
            assert isinstance(result.error, AuthenticationError)
        assert created.notification.description == "Failed to create category"
        assert store.categories == []

    @pytest.mark.asyncio
    async def test_unwrap_raises_with_user_message(self, store: CollectionStore) -> None:
        result = await store.add_item(None, ItemFactory.create_data("some-category"))

        with pytest.raises(AuthenticationError) as exc_info:
            result.unwrap()

        assert exc_info.value.message == "Failed to create item"
        assert exc_info.value.details["reason"] == "User must be authenticated to add items"


class TestCategoryWrites:
    """Tests for category mutations."""

    @pytest.mark.asyncio
    async def test_add_category(self, store: CollectionStore, user: User) -> None:
        result = await store.add_category(user, CategoryFactory.create_data(name="  Ships "))

        assert result.ok
        assert result.notification.description == "Category created successfully"
        assert result.value is not None
        assert result.value.name == "Ships"
        assert result.value.user_id == user.id
        assert store.get_category(result.value.id) == result.value

    @pytest.mark.asyncio
    async def test_add_category_with_unknown_parent(
        self, store: CollectionStore, user: User
    ) -> None:
        result = await store.add_category(
            user, CategoryFactory.create_data(parent_id="00000000-0000-0000-0000-000000000000")
        )

        assert isinstance(result.error, ValidationError)
        assert store.categories == []

    @pytest.mark.asyncio
    async def test_update_category(self, store: CollectionStore, user: User) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()

        result = await store.update_category(
            user, category.id, CategoryUpdate(description="Updated")
        )

        assert result.ok
        assert store.get_category(category.id).description == "Updated"  # type: ignore[union-attr]
        assert store.get_category(category.id).name == category.name  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_update_rejects_cycles(self, store: CollectionStore, user: User) -> None:
        root = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        child = (
            await store.add_category(user, CategoryFactory.create_data(parent_id=root.id))
        ).unwrap()

        onto_self = await store.update_category(user, root.id, CategoryUpdate(parent_id=root.id))
        onto_child = await store.update_category(user, root.id, CategoryUpdate(parent_id=child.id))

        for result in (onto_self, onto_child):
            assert not result.ok
            assert isinstance(result.error, ValidationError)
        assert store.get_category(root.id).parent_id is None  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_update_to_top_level(self, store: CollectionStore, user: User) -> None:
        root = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        child = (
            await store.add_category(user, CategoryFactory.create_data(parent_id=root.id))
        ).unwrap()

        result = await store.update_category(user, child.id, CategoryUpdate(parent_id=None))

        assert result.ok
        assert child.id in {c.id for c in store.top_level_categories()}

    @pytest.mark.asyncio
    async def test_update_not_owned_is_not_found(
        self, store: CollectionStore, user: User, other_user: User
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()

        result = await store.update_category(
            other_user, category.id, CategoryUpdate(name="Stolen")
        )

        assert isinstance(result.error, NotFoundError)
        assert store.get_category(category.id).name == category.name  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_replacing_category_image_removes_old_asset(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (
            await store.add_category(
                user,
                CategoryFactory.create_data(image=IMAGE_URLS[0], cloudflare_id="img-1"),
            )
        ).unwrap()

        await store.update_category(
            user, category.id, CategoryUpdate(image=IMAGE_URLS[1], cloudflare_id="img-2")
        )

        assert cloudflare.deleted == ["img-1"]

    @pytest.mark.asyncio
    async def test_new_category_image_without_id_drops_old_asset(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (
            await store.add_category(
                user,
                CategoryFactory.create_data(image=IMAGE_URLS[0], cloudflare_id="img-1"),
            )
        ).unwrap()

        updated = (
            await store.update_category(user, category.id, CategoryUpdate(image=IMAGE_URLS[1]))
        ).unwrap()

        assert updated.image == IMAGE_URLS[1]
        assert updated.cloudflare_id is None
        assert cloudflare.deleted == ["img-1"]

    @pytest.mark.asyncio
    async def test_unchanged_category_image_keeps_asset(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (
            await store.add_category(
                user,
                CategoryFactory.create_data(image=IMAGE_URLS[0], cloudflare_id="img-1"),
            )
        ).unwrap()

        updated = (
            await store.update_category(
                user, category.id, CategoryUpdate(name="Renamed", image=IMAGE_URLS[0])
            )
        ).unwrap()

        assert updated.cloudflare_id == "img-1"
        assert cloudflare.deleted == []

    @pytest.mark.asyncio
    async def test_delete_category_removes_only_its_items(
        self,
        store: CollectionStore,
        user: User,
        cloudflare: CloudflareStub,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        parent = (
            await store.add_category(
                user, CategoryFactory.create_data(image=IMAGE_URLS[0], cloudflare_id="img-1")
            )
        ).unwrap()
        child = (
            await store.add_category(user, CategoryFactory.create_data(parent_id=parent.id))
        ).unwrap()
        await store.add_item(
            user,
            ItemFactory.create_data(parent.id, image=IMAGE_URLS[1], cloudflare_id="img-2"),
        )
        await store.add_item(user, ItemFactory.create_data(parent.id))
        child_item = (await store.add_item(user, ItemFactory.create_data(child.id))).unwrap()

        result = await store.delete_category(user, parent.id)

        assert result.ok
        assert result.notification.description == "Category deleted successfully"
        assert store.get_category(parent.id) is None
        # Subcategories are left in place, still pointing at the removed parent
        assert store.get_category(child.id).parent_id == parent.id  # type: ignore[union-attr]
        assert [i.id for i in store.items] == [child_item.id]
        assert sorted(cloudflare.deleted) == ["img-1", "img-2"]

        async with session_factory() as db:
            remaining = (await db.execute(select(ItemRow))).scalars().all()
        assert [row.id for row in remaining] == [child_item.id]

    @pytest.mark.asyncio
    async def test_delete_missing_category_is_not_found(
        self, store: CollectionStore, user: User
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()

        result = await store.delete_category(user, "00000000-0000-0000-0000-000000000000")

        assert isinstance(result.error, NotFoundError)
        assert result.notification.description == "Failed to delete category"
        assert store.categories == [category]


class TestItemWrites:
    """Tests for item mutations."""

    @pytest.mark.asyncio
    async def test_add_item_requires_known_category(
        self, store: CollectionStore, user: User
    ) -> None:
        result = await store.add_item(
            user, ItemFactory.create_data("00000000-0000-0000-0000-000000000000")
        )

        assert isinstance(result.error, ValidationError)
        assert store.items == []

    @pytest.mark.asyncio
    async def test_add_item_with_single_image(self, store: CollectionStore, user: User) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()

        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(category.id, image=IMAGE_URLS[0], cloudflare_id="img-1"),
            )
        ).unwrap()

        assert item.images == [IMAGE_URLS[0]]
        assert item.cloudflare_ids == ["img-1"]
        assert item.stock_status == "In Stock"

    @pytest.mark.asyncio
    async def test_update_item_removes_dropped_images(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(
                    category.id, images=IMAGE_URLS[:3], cloudflare_ids=["img-1", "img-2", "img-3"]
                ),
            )
        ).unwrap()

        result = await store.update_item(
            user, item.id, ItemUpdate(images=[IMAGE_URLS[2], IMAGE_URLS[0]])
        )

        updated = result.unwrap()
        assert updated.image == IMAGE_URLS[2]
        assert updated.cloudflare_ids == ["img-3", "img-1"]
        assert cloudflare.deleted == ["img-2"]
        assert store.get_item(item.id) == updated

    @pytest.mark.asyncio
    async def test_update_item_rejects_unpaired_ids(
        self, store: CollectionStore, user: User
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (await store.add_item(user, ItemFactory.create_data(category.id))).unwrap()

        result = await store.update_item(
            user,
            item.id,
            ItemUpdate(images=IMAGE_URLS[:2], cloudflare_ids=["img-1"]),
        )

        assert isinstance(result.error, ValidationError)
        assert store.get_item(item.id) == item

    @pytest.mark.asyncio
    async def test_new_image_without_id_is_rejected(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(
                    category.id, images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"]
                ),
            )
        ).unwrap()

        for patch in (
            ItemUpdate(images=[IMAGE_URLS[0], IMAGE_URLS[3]]),
            ItemUpdate(image=IMAGE_URLS[3]),
        ):
            result = await store.update_item(user, item.id, patch)

            assert isinstance(result.error, ValidationError)
            assert result.error.message == "New images must include their cloudflareIds"

        assert cloudflare.deleted == []
        assert store.get_item(item.id) == item

    @pytest.mark.asyncio
    async def test_update_item_keeps_ids_of_surviving_images(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(
                    category.id, images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"]
                ),
            )
        ).unwrap()

        updated = (
            await store.update_item(
                user,
                item.id,
                ItemUpdate(
                    images=[IMAGE_URLS[0], IMAGE_URLS[3]], cloudflare_ids=["img-1", "img-4"]
                ),
            )
        ).unwrap()

        assert updated.images == [IMAGE_URLS[0], IMAGE_URLS[3]]
        assert updated.cloudflare_ids == ["img-1", "img-4"]
        assert cloudflare.deleted == ["img-2"]

    @pytest.mark.asyncio
    async def test_dropping_secondary_image_keeps_primary_asset(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(
                    category.id, images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"]
                ),
            )
        ).unwrap()

        updated = (
            await store.update_item(user, item.id, ItemUpdate(images=[IMAGE_URLS[0]]))
        ).unwrap()

        assert updated.cloudflare_id == "img-1"
        assert updated.cloudflare_ids == ["img-1"]
        assert cloudflare.deleted == ["img-2"]

    @pytest.mark.asyncio
    async def test_explicit_null_name_is_ignored(self, store: CollectionStore, user: User) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (await store.add_item(user, ItemFactory.create_data(category.id))).unwrap()

        result = await store.update_item(
            user, item.id, ItemUpdate(name=None, stock_status=None, valuation=12.5)
        )

        updated = result.unwrap()
        assert updated.name == item.name
        assert updated.stock_status == item.stock_status
        assert updated.valuation == 12.5

    @pytest.mark.asyncio
    async def test_delete_item_swallows_image_failures(
        self, store: CollectionStore, user: User, cloudflare: CloudflareStub
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (
            await store.add_item(
                user,
                ItemFactory.create_data(
                    category.id, images=IMAGE_URLS[:3], cloudflare_ids=["img-1", "img-2", "img-3"]
                ),
            )
        ).unwrap()
        cloudflare.failing_deletes.add("img-2")
        cloudflare.missing.add("img-3")

        result = await store.delete_item(user, item.id)

        assert result.ok
        assert result.notification.description == "Item deleted successfully"
        assert store.items == []
        assert cloudflare.deleted == ["img-1"]

    @pytest.mark.asyncio
    async def test_delete_item_not_owned(
        self, store: CollectionStore, user: User, other_user: User
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        item = (await store.add_item(user, ItemFactory.create_data(category.id))).unwrap()

        result = await store.delete_item(other_user, item.id)

        assert isinstance(result.error, NotFoundError)
        assert store.items == [item]


class TestLookups:
    """Tests for cache reads."""

    @pytest.mark.asyncio
    async def test_search_matches_name_description_and_manufacturer(
        self, store: CollectionStore, user: User
    ) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        await store.add_item(user, ItemFactory.create_data(category.id, name="Boba Fett"))
        await store.add_item(
            user,
            ItemFactory.create_data(category.id, name="Card", description="signed by BOBA"),
        )
        await store.add_item(
            user, ItemFactory.create_data(category.id, name="Ship", manufacturer="Kenner")
        )

        assert len(store.search_items("boba")) == 2
        assert [i.name for i in store.search_items("kenner")] == ["Ship"]
        assert store.search_items("   ") == []

    @pytest.mark.asyncio
    async def test_search_is_capped(self, store: CollectionStore, user: User) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        for data in ItemFactory.create_batch_data(category.id, count=12, name="Trooper"):
            await store.add_item(user, data)

        assert len(store.search_items("trooper")) == 10
        assert len(store.search_items("trooper", limit=3)) == 3

    @pytest.mark.asyncio
    async def test_item_detail_names_group(self, store: CollectionStore, user: User) -> None:
        group = (await store.add_category(user, CategoryFactory.create_data(name="Group"))).unwrap()
        leaf = (
            await store.add_category(
                user, CategoryFactory.create_data(name="Leaf", parent_id=group.id)
            )
        ).unwrap()
        top_item = (await store.add_item(user, ItemFactory.create_data(group.id))).unwrap()
        leaf_item = (await store.add_item(user, ItemFactory.create_data(leaf.id))).unwrap()

        leaf_detail = store.item_detail(leaf_item.id)
        top_detail = store.item_detail(top_item.id)

        assert leaf_detail is not None
        assert (leaf_detail.category_name, leaf_detail.group_name) == ("Leaf", "Group")
        assert top_detail is not None
        assert (top_detail.category_name, top_detail.group_name) == ("Group", "Group")
        assert store.item_detail("missing") is None


class TestManufacturers:
    """Tests for the session-local manufacturer list."""

    @pytest.mark.asyncio
    async def test_derived_from_items(self, store: CollectionStore, user: User) -> None:
        category = (await store.add_category(user, CategoryFactory.create_data())).unwrap()
        for name in ["Kenner", "Hasbro", "Kenner", "   "]:
            await store.add_item(user, ItemFactory.create_data(category.id, manufacturer=name))

        assert store.manufacturers() == ["Hasbro", "Kenner"]

    @pytest.mark.asyncio
    async def test_add_rejects_case_insensitive_duplicate(
        self, store: CollectionStore, user: User
    ) -> None:
        assert store.add_manufacturer(user, "Kenner").ok

        result = store.add_manufacturer(user, "KENNER")

        assert isinstance(result.error, ConflictError)
        assert result.notification.description == "This manufacturer already exists"
        assert store.manufacturers(user.id) == ["Kenner"]

    @pytest.mark.asyncio
    async def test_edit_rules(self, store: CollectionStore, user: User) -> None:
        store.add_manufacturer(user, "Kenner")
        store.add_manufacturer(user, "Hasbro")

        unknown = store.edit_manufacturer(user, "Palitoy", "Lili Ledy")
        duplicate = store.edit_manufacturer(user, "Kenner", "hasbro")
        renamed = store.edit_manufacturer(user, "Kenner", "Kenner Products")

        assert isinstance(unknown.error, NotFoundError)
        assert isinstance(duplicate.error, ConflictError)
        assert renamed.value == ["Hasbro", "Kenner Products"]

    @pytest.mark.asyncio
    async def test_pending_edits_are_per_user_and_discarded(
        self, store: CollectionStore, user: User, other_user: User
    ) -> None:
        store.add_manufacturer(user, "Kenner")

        assert store.manufacturers(other_user.id) == []
        store.discard_pending_manufacturers(user.id)
        assert store.manufacturers(user.id) == []

    @pytest.mark.asyncio
    async def test_anonymous_add_is_rejected(self, store: CollectionStore) -> None:
        result = store.add_manufacturer(None, "Kenner")

        assert isinstance(result.error, AuthenticationError)


class TestMergeItemImages:
    """Tests for resolving image patches against a stored item."""

    def test_non_image_patch_is_untouched(self) -> None:
        assert merge_item_images(None, {"name": "x"}) == {"name": "x"}

    def test_primary_only_patch_keeps_secondary_images(self) -> None:
        current = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"],
        )

        merged = merge_item_images(current, {"image": IMAGE_URLS[3], "cloudflare_id": "img-4"})

        assert merged["images"] == [IMAGE_URLS[3], IMAGE_URLS[1]]
        assert merged["cloudflare_ids"] == ["img-4", "img-2"]

    def test_clearing_images(self) -> None:
        current = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=[IMAGE_URLS[0]], cloudflare_ids=["img-1"],
        )

        merged = merge_item_images(current, {"images": []})

        assert merged["image"] is None
        assert merged["images"] is None
        assert merged["cloudflare_ids"] is None

    def test_reordering_keeps_ids_paired(self) -> None:
        current = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:3], cloudflare_ids=["img-1", "img-2", "img-3"],
        )

        merged = merge_item_images(current, {"images": [IMAGE_URLS[2], IMAGE_URLS[0]]})

        assert merged["image"] == IMAGE_URLS[2]
        assert merged["cloudflare_id"] == "img-3"
        assert merged["cloudflare_ids"] == ["img-3", "img-1"]

    @pytest.mark.parametrize(
        "patch",
        [
            {"images": [IMAGE_URLS[0], IMAGE_URLS[3]]},
            {"image": IMAGE_URLS[3]},
        ],
    )
    def test_new_url_without_id_is_rejected(self, patch: dict) -> None:
        current = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"],
        )

        with pytest.raises(ValueError, match="must include their cloudflareIds"):
            merge_item_images(current, patch)

    def test_primary_reset_to_known_url_reuses_its_id(self) -> None:
        current = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"],
        )

        merged = merge_item_images(current, {"image": IMAGE_URLS[0]})

        assert merged["images"] == IMAGE_URLS[:2]
        assert merged["cloudflare_ids"] == ["img-1", "img-2"]

    def test_untracked_item_accepts_urls_without_ids(self) -> None:
        current = ItemFactory.build("c", image=IMAGE_URLS[0], images=[IMAGE_URLS[0]])

        merged = merge_item_images(current, {"images": [IMAGE_URLS[0], IMAGE_URLS[1]]})

        assert merged["images"] == IMAGE_URLS[:2]
        assert merged["cloudflare_id"] is None
        assert merged["cloudflare_ids"] is None


class TestStaleItemAssets:
    """Tests for picking the assets an item update leaves behind."""

    def test_only_ids_of_removed_urls(self) -> None:
        previous = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:3], cloudflare_ids=["img-1", "img-2", "img-3"],
        )
        updated = previous.model_copy(
            update={
                "image": IMAGE_URLS[2],
                "cloudflare_id": "img-3",
                "images": [IMAGE_URLS[2], IMAGE_URLS[0]],
                "cloudflare_ids": ["img-3", "img-1"],
            }
        )

        assert stale_item_assets(previous, updated) == ["img-2"]

    def test_surviving_url_keeps_its_id_even_when_ids_are_lost(self) -> None:
        previous = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1",
            images=IMAGE_URLS[:2], cloudflare_ids=["img-1", "img-2"],
        )
        updated = previous.model_copy(
            update={
                "image": IMAGE_URLS[3],
                "cloudflare_id": None,
                "images": [IMAGE_URLS[3], IMAGE_URLS[1]],
                "cloudflare_ids": None,
            }
        )

        assert stale_item_assets(previous, updated) == ["img-1"]

    def test_primary_id_without_list_ids_is_still_cleaned(self) -> None:
        previous = ItemFactory.build(
            "c", image=IMAGE_URLS[0], cloudflare_id="img-1", images=IMAGE_URLS[:2]
        )
        updated = previous.model_copy(
            update={"image": IMAGE_URLS[1], "cloudflare_id": None, "images": [IMAGE_URLS[1]]}
        )

        assert stale_item_assets(previous, updated) == ["img-1"]
