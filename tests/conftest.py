import copy

import pytest
from fastapi.testclient import TestClient

from shelfsafe.main import create_app
from shelfsafe.settings import Settings
from shelfsafe.stores.base import DocumentStore, StoreUnavailable, matches_filter


class MemoryStore(DocumentStore):
    """In-memory store for API tests; flip `down` to simulate an outage."""

    name = "memory"

    def __init__(self, collections=None):
        self.collections = collections or {}
        self.down = False
        self.calls = []
        self.closed = False

    async def ping(self):
        if self.down:
            raise StoreUnavailable("memory store is down")

    async def list_collection(self, collection, filter=None):
        self.calls.append((collection, filter))
        await self.ping()
        docs = self.collections.get(collection, [])
        return [copy.deepcopy(d) for d in docs if matches_filter(d, filter)]

    async def close(self):
        self.closed = True


@pytest.fixture
def sample_collections():
    return {
        "products": [
            {"_id": {"$oid": "64b000000000000000000001"}, "name": "Whole Milk", "category": "Dairy", "barcodeUpc": "012345678905"},
            {"_id": {"$oid": "64b000000000000000000002"}, "name": "Rye Bread", "category": "Bakery", "barcode": "4006381333931"},
            {"_id": "p3", "name": "Olive Oil", "category": "Pantry", "barcode": "5012345678900"},
        ],
        "inventoryLots": [
            {"_id": {"$oid": "64c000000000000000000001"}, "productId": {"$oid": "64b000000000000000000001"},
             "quantityOnHand": 12, "expiryDate": {"$date": "2026-11-02T00:00:00Z"}, "status": "active"},
            {"_id": {"$oid": "64c000000000000000000002"}, "productId": "64b000000000000000000001",
             "qtyOnHand": 3, "status": "quarantined"},
            {"_id": "lot-bread", "productId": {"$oid": "64b000000000000000000002"}, "status": "active"},
        ],
        "attachments": [
            {"_id": "a1", "entityType": "inventoryLots", "entityId": {"$oid": "64c000000000000000000002"},
             "url": "https://img.example/milk-lot2.png", "isDeleted": False},
            {"_id": "a2", "entityType": "inventoryLots", "entityId": "64c000000000000000000001",
             "url": "https://img.example/milk-lot1.png", "isDeleted": False},
            {"_id": "a3", "entityType": "inventoryLots", "entityId": "lot-bread",
             "url": "https://img.example/bread-old.png", "isDeleted": True},
            {"_id": "a4", "entityType": "products", "entityId": "p3",
             "url": "https://img.example/oil.png"},
        ],
    }


@pytest.fixture
def memory_store(sample_collections):
    return MemoryStore(sample_collections)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(DATA_ROOT=tmp_path, STORE_BACKEND="files")


@pytest.fixture
def api_client(test_settings, memory_store):
    app = create_app(test_settings, store=memory_store)
    with TestClient(app) as client:
        yield client
