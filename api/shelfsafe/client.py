# shelfsafe/client.py
"""
Aggregation client - runs one fetch-and-resolve cycle against the API.

    health -> (products | inventoryLots | attachments) -> barrier -> resolve

A cycle either yields all three datasets or fails as a whole; resolution is
never attempted on partial data.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from shelfsafe.models import DashboardSnapshot
from shelfsafe.services.dashboard import build_snapshot
from shelfsafe.services.resolution import LOT_ENTITY_TYPE

logger = logging.getLogger(__name__)


class AggregationError(Exception):
    """One aggregation cycle failed; the caller may retry the whole cycle."""


@dataclass
class CycleData:
    products: List[Dict[str, Any]] = field(default_factory=list)
    lots: List[Dict[str, Any]] = field(default_factory=list)
    attachments: List[Dict[str, Any]] = field(default_factory=list)


class ShelfSafeClient:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ShelfSafeClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # =========================================================================
    # Single requests
    # =========================================================================

    async def _get_json(self, path: str, what: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            resp = await self._http.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AggregationError(f"Failed to fetch {what}: {e}") from e

    async def _get_list(self, path: str, what: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        data = await self._get_json(path, what, params=params)
        if not isinstance(data, list):
            raise AggregationError(f"Failed to fetch {what}: expected a JSON array")
        return data

    async def health(self) -> Dict[str, Any]:
        try:
            data = await self._get_json("/api/health", "health")
        except AggregationError as e:
            raise AggregationError(f"Health check failed. Is backend running? ({e.__cause__ or e})") from e
        if not isinstance(data, dict) or data.get("ok") is not True:
            raise AggregationError("Health check failed: store not connected")
        return data

    async def list_products(self) -> List[Dict[str, Any]]:
        return await self._get_list("/api/products", "products")

    async def list_inventory_lots(self) -> List[Dict[str, Any]]:
        return await self._get_list("/api/inventoryLots", "inventory lots")

    async def list_attachments(self, entity_type: Optional[str] = None, entity_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {}
        if entity_type:
            params["entityType"] = entity_type
        if entity_id:
            params["entityId"] = entity_id
        return await self._get_list("/api/attachments", "attachments", params=params or None)

    # =========================================================================
    # Aggregation cycle
    # =========================================================================

    async def fetch_cycle(self, entity_type: Optional[str] = LOT_ENTITY_TYPE) -> CycleData:
        await self.health()

        results = await asyncio.gather(
            self.list_products(),
            self.list_inventory_lots(),
            self.list_attachments(entity_type=entity_type),
            return_exceptions=True,
        )
        # barrier: any failed dataset fails the cycle
        for r in results:
            if isinstance(r, BaseException):
                logger.warning("Aggregation cycle against %s failed: %s", self.base_url, r)
                if isinstance(r, AggregationError):
                    raise r
                raise AggregationError(str(r)) from r

        products, lots, attachments = results
        logger.info(
            "Aggregation cycle: %d products, %d lots, %d attachments",
            len(products), len(lots), len(attachments),
        )
        return CycleData(products=products, lots=lots, attachments=attachments)


async def load_dashboard(client: ShelfSafeClient, entity_type: Optional[str] = LOT_ENTITY_TYPE) -> DashboardSnapshot:
    data = await client.fetch_cycle(entity_type=entity_type)
    return build_snapshot(data.products, data.lots, data.attachments, entity_type=entity_type)
