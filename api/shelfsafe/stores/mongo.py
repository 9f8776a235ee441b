# shelfsafe/stores/mongo.py
"""
MongoDB document store (pymongo async client, Stable API v1).
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId, json_util
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from shelfsafe.services.identifiers import REFERENCE_FIELDS
from shelfsafe.stores.base import DocumentStore, Filter, StoreUnavailable

logger = logging.getLogger(__name__)


def _as_int(value: str) -> Optional[int]:
    try:
        n = int(value)
    except ValueError:
        return None
    # only the canonical spelling: "007" is not 7
    return n if str(n) == value else None


def to_query(filter: Optional[Filter]) -> Dict[str, Any]:
    """
    Translate an API filter into a MongoDB query.

    A reference given as a string also matches the ObjectId or the integer
    it spells, so ?entityId=<hex> and ?entityId=42 find documents stored
    with either form.
    """
    query: Dict[str, Any] = dict(filter or {})
    for field in REFERENCE_FIELDS:
        value = query.get(field)
        if not isinstance(value, str):
            continue
        candidates: List[Any] = [value]
        if ObjectId.is_valid(value):
            candidates.append(ObjectId(value))
        as_int = _as_int(value)
        if as_int is not None:
            candidates.append(as_int)
        if len(candidates) > 1:
            query[field] = {"$in": candidates}
    return query


def to_json_documents(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """BSON documents -> relaxed Extended JSON (ObjectId becomes {"$oid": ...})."""
    return json.loads(json_util.dumps(docs))


class MongoDocumentStore(DocumentStore):
    name = "mongo"

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000, client: Optional[Any] = None):
        self.uri = uri
        self.database_name = database
        self.timeout_ms = timeout_ms
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AsyncMongoClient(
                self.uri,
                server_api=ServerApi("1"),
                serverSelectionTimeoutMS=self.timeout_ms,
            )
        return self._client

    async def connect(self) -> None:
        await self.ping()
        logger.info("Connected to MongoDB database '%s'", self.database_name)

    async def ping(self) -> None:
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            raise StoreUnavailable(f"MongoDB unreachable: {e}") from e

    async def list_collection(self, collection: str, filter: Optional[Filter] = None) -> List[Dict[str, Any]]:
        query = to_query(filter)
        try:
            cursor = self.client[self.database_name][collection].find(query)
            docs = await cursor.to_list(None)
        except PyMongoError as e:
            raise StoreUnavailable(f"MongoDB query on '{collection}' failed: {e}") from e
        return to_json_documents(docs)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")
