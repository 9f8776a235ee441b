# shelfsafe/stores/files.py
"""
JSON-file document store.

Reads collection exports from DATA_ROOT/collections/<collection>.json, each
a JSON array in MongoDB Extended JSON (what `mongoexport --jsonArray`
writes). Used for dummy data and offline work.
"""
from __future__ import annotations
import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from shelfsafe.stores.base import DocumentStore, Filter, StoreUnavailable, matches_filter

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileDocumentStore(DocumentStore):
    name = "files"

    def __init__(self, root: Path):
        self.root = Path(root).expanduser()

    def _collection_path(self, collection: str) -> Path:
        if not _SAFE_NAME.match(collection) or collection.startswith("."):
            raise StoreUnavailable(f"Invalid collection name: {collection!r}")
        return self.root / f"{collection}.json"

    async def ping(self) -> None:
        if not self.root.is_dir():
            raise StoreUnavailable(f"Collections directory not found: {self.root}")

    def _load(self, collection: str) -> List[Dict[str, Any]]:
        p = self._collection_path(collection)
        if not p.exists():
            # same as a collection MongoDB has never seen
            return []
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreUnavailable(f"Cannot read collection '{collection}': {e}") from e
        if not isinstance(data, list):
            raise StoreUnavailable(f"Collection '{collection}' is not a JSON array")
        return [d for d in data if isinstance(d, dict)]

    async def list_collection(self, collection: str, filter: Optional[Filter] = None) -> List[Dict[str, Any]]:
        await self.ping()
        docs = await asyncio.to_thread(self._load, collection)
        out = [d for d in docs if matches_filter(d, filter)]
        logger.debug("files: %s -> %d/%d documents", collection, len(out), len(docs))
        return out
