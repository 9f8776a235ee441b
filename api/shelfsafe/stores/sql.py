# shelfsafe/stores/sql.py
"""
PostgreSQL document store - documents kept as JSON rows (see db_models).

Filtering happens in Python after loading the collection in insertion
order; collections here are dashboard-sized snapshots.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from shelfsafe.database import create_session_factory, ping, session_scope
from shelfsafe.db_models import DocumentRow
from shelfsafe.stores.base import DocumentStore, Filter, StoreUnavailable, matches_filter

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    name = "postgres"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    async def connect(self) -> None:
        await self.ping()
        logger.info("Connected to PostgreSQL (%s)", self.engine.url.render_as_string(hide_password=True))

    async def ping(self) -> None:
        try:
            await ping(self._session_factory)
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"PostgreSQL unreachable: {e}") from e

    async def list_collection(self, collection: str, filter: Optional[Filter] = None) -> List[Dict[str, Any]]:
        stmt = (
            select(DocumentRow.body)
            .where(DocumentRow.collection == collection)
            .order_by(DocumentRow.id)
        )
        try:
            async with session_scope(self._session_factory) as db:
                result = await db.execute(stmt)
                bodies = list(result.scalars())
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"PostgreSQL query on '{collection}' failed: {e}") from e
        return [b for b in bodies if isinstance(b, dict) and matches_filter(b, filter)]

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("PostgreSQL connection closed")
