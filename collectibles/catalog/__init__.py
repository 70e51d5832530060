"""Categories, items and the in-memory collection store."""

from collectibles.catalog.store import CollectionStore

__all__ = ["CollectionStore"]
