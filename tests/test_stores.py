import asyncio
import json

import pytest
from bson import ObjectId

from shelfsafe.settings import Settings
from shelfsafe.stores import create_store
from shelfsafe.stores.base import StoreUnavailable, matches_filter
from shelfsafe.stores.files import FileDocumentStore
from shelfsafe.stores.mongo import MongoDocumentStore, to_json_documents, to_query
from shelfsafe.stores.sql import SqlDocumentStore


# ---------------------------------------------------------
# filter subset
# ---------------------------------------------------------
def test_equality_and_empty_filter():
    doc = {"entityType": "inventoryLots", "isDeleted": False}
    assert matches_filter(doc, None)
    assert matches_filter(doc, {})
    assert matches_filter(doc, {"entityType": "inventoryLots"})
    assert not matches_filter(doc, {"entityType": "products"})


def test_ne_treats_missing_field_as_unequal():
    live = {"isDeleted": {"$ne": True}}
    assert matches_filter({"isDeleted": False}, live)
    assert matches_filter({}, live)
    assert not matches_filter({"isDeleted": True}, live)


def test_bool_does_not_equal_int():
    assert not matches_filter({"isDeleted": 1}, {"isDeleted": True})


def test_identifiers_match_in_either_shape():
    assert matches_filter({"entityId": {"$oid": "abc"}}, {"entityId": "abc"})
    assert matches_filter({"entityId": "abc"}, {"entityId": {"$oid": "abc"}})
    assert not matches_filter({"entityId": {"$oid": "abc"}}, {"entityId": "abd"})


def test_numeric_references_match_their_string_spelling():
    # query strings always arrive as text
    assert matches_filter({"entityId": 42, "url": "a.png"}, {"entityId": "42"})
    assert matches_filter({"entityId": "42"}, {"entityId": 42})
    assert matches_filter({"productId": 7.0}, {"productId": "7"})
    assert not matches_filter({"entityId": 7}, {"entityId": "007"})
    assert not matches_filter({"entityId": 42}, {"entityId": {"$ne": "42"}})
    assert matches_filter({"entityId": 42}, {"entityId": {"$in": ["41", "42"]}})


def test_unusable_references_never_match():
    assert not matches_filter({"entityId": None}, {"entityId": "undefined"})
    assert not matches_filter({}, {"entityId": ""})


def test_in_operator():
    flt = {"status": {"$in": ["active", "quarantined"]}}
    assert matches_filter({"status": "active"}, flt)
    assert not matches_filter({"status": "expired"}, flt)


def test_unknown_operator_is_rejected():
    with pytest.raises(ValueError):
        matches_filter({"qty": 1}, {"qty": {"$gt": 0}})


# ---------------------------------------------------------
# file store
# ---------------------------------------------------------
def _write(root, name, data):
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")


def test_file_store_lists_in_file_order_with_filter(tmp_path):
    root = tmp_path / "collections"
    _write(root, "attachments", [
        {"_id": "a1", "entityId": {"$oid": "l1"}, "url": "1.png", "isDeleted": False},
        {"_id": "a2", "entityId": "l1", "url": "2.png", "isDeleted": True},
        {"_id": "a3", "entityId": "l1", "url": "3.png"},
        "not a document",
    ])
    store = FileDocumentStore(root)
    docs = asyncio.run(store.list_collection("attachments", {"isDeleted": {"$ne": True}, "entityId": "l1"}))
    assert [d["_id"] for d in docs] == ["a1", "a3"]


def test_file_store_finds_numeric_entity_ids(tmp_path):
    root = tmp_path / "collections"
    _write(root, "attachments", [
        {"_id": "a1", "entityId": 42, "url": "a.png"},
        {"_id": "a2", "entityId": 43, "url": "b.png"},
    ])
    docs = asyncio.run(FileDocumentStore(root).list_collection("attachments", {"entityId": "42"}))
    assert [d["url"] for d in docs] == ["a.png"]


def test_file_store_missing_collection_is_empty(tmp_path):
    (tmp_path / "collections").mkdir()
    store = FileDocumentStore(tmp_path / "collections")
    assert asyncio.run(store.list_collection("products")) == []


def test_file_store_missing_directory_is_unavailable(tmp_path):
    store = FileDocumentStore(tmp_path / "nope")
    with pytest.raises(StoreUnavailable):
        asyncio.run(store.ping())
    with pytest.raises(StoreUnavailable):
        asyncio.run(store.list_collection("products"))


def test_file_store_broken_json_is_unavailable(tmp_path):
    root = tmp_path / "collections"
    root.mkdir()
    (root / "products.json").write_text("{oops", encoding="utf-8")
    with pytest.raises(StoreUnavailable):
        asyncio.run(FileDocumentStore(root).list_collection("products"))


def test_file_store_rejects_path_like_names(tmp_path):
    (tmp_path / "collections").mkdir()
    with pytest.raises(StoreUnavailable):
        asyncio.run(FileDocumentStore(tmp_path / "collections").list_collection("../secrets"))


# ---------------------------------------------------------
# mongo helpers (no server needed)
# ---------------------------------------------------------
def test_mongo_query_expands_object_id_strings():
    hex_id = "64c000000000000000000001"
    q = to_query({"isDeleted": {"$ne": True}, "entityId": hex_id, "entityType": "inventoryLots"})
    assert q["entityId"] == {"$in": [hex_id, ObjectId(hex_id)]}
    assert q["entityType"] == "inventoryLots"
    assert q["isDeleted"] == {"$ne": True}


def test_mongo_query_leaves_plain_strings():
    assert to_query({"entityId": "lot-bread"}) == {"entityId": "lot-bread"}
    assert to_query({"entityId": "007"}) == {"entityId": "007"}
    assert to_query(None) == {}


def test_mongo_query_expands_numeric_strings():
    assert to_query({"entityId": "42"}) == {"entityId": {"$in": ["42", 42]}}
    assert to_query({"productId": "-3"}) == {"productId": {"$in": ["-3", -3]}}


def test_mongo_documents_come_out_wrapped():
    oid = ObjectId("64c000000000000000000001")
    docs = to_json_documents([{"_id": oid, "productId": oid, "name": "Milk"}])
    assert docs == [{"_id": {"$oid": str(oid)}, "productId": {"$oid": str(oid)}, "name": "Milk"}]


# ---------------------------------------------------------
# backend selection
# ---------------------------------------------------------
def test_create_store_by_backend(tmp_path):
    files = create_store(Settings(DATA_ROOT=tmp_path, STORE_BACKEND="files"))
    assert isinstance(files, FileDocumentStore)
    assert files.root == tmp_path / "collections"

    mongo = create_store(Settings(STORE_BACKEND="mongo", MONGODB_URI="mongodb://db.example:27017", MONGODB_DB="shelfsafe"))
    assert isinstance(mongo, MongoDocumentStore)
    assert mongo.database_name == "shelfsafe"

    sql = create_store(Settings(STORE_BACKEND="postgres", DB_HOST="db.example", DB_NAME="shelfsafe"))
    assert isinstance(sql, SqlDocumentStore)
    assert sql.engine.url.host == "db.example"
    asyncio.run(sql.close())
