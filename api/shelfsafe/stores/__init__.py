# shelfsafe/stores/__init__.py
"""
Document store backends.
"""
from __future__ import annotations

from fastapi import Request

from shelfsafe.stores.base import DocumentStore, StoreUnavailable, matches_filter

__all__ = [
    "DocumentStore",
    "StoreUnavailable",
    "matches_filter",
    "create_store",
    "get_store",
]


def create_store(settings) -> DocumentStore:
    """Build the backend named by settings.STORE_BACKEND (not yet connected)."""
    backend = settings.STORE_BACKEND
    if backend == "mongo":
        from shelfsafe.stores.mongo import MongoDocumentStore
        return MongoDocumentStore(
            uri=settings.MONGODB_URI,
            database=settings.MONGODB_DB,
            timeout_ms=settings.MONGODB_TIMEOUT_MS,
        )
    if backend == "postgres":
        from shelfsafe.database import create_engine
        from shelfsafe.stores.sql import SqlDocumentStore
        return SqlDocumentStore(create_engine(settings))
    if backend == "files":
        from shelfsafe.stores.files import FileDocumentStore
        return FileDocumentStore(settings.DATA_ROOT / "collections")
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def get_store(request: Request) -> DocumentStore:
    """
    Dependency for FastAPI - the store opened by the app lifespan.

    Usage:
        @router.get("/items")
        async def get_items(store: DocumentStore = Depends(get_store)):
            ...
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailable("Document store not initialized")
    return store
