"""Access to the application-wide collection store."""

from typing import Annotated

from fastapi import Depends, Request

from collectibles.catalog.store import CollectionStore
from collectibles.core.exceptions import StoreError


def get_collection_store(request: Request) -> CollectionStore:
    """Return the store built by the application lifespan."""
    store: CollectionStore | None = getattr(
        request.app.state, "collection_store", None
    )
    if store is None:
        raise StoreError("Collection store is not initialized")
    return store


CollectionStoreDep = Annotated[CollectionStore, Depends(get_collection_store)]
