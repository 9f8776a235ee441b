# shelfsafe/routers/collections.py
"""
Collection read endpoints - straight pass-through to the document store.
No joins here; image resolution belongs to the client side.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from shelfsafe.stores import DocumentStore, get_store

router = APIRouter(prefix="/api", tags=["collections"])

PRODUCTS = "products"
INVENTORY_LOTS = "inventoryLots"
ATTACHMENTS = "attachments"


def attachments_filter(entity_type: Optional[str] = None, entity_id: Optional[str] = None) -> Dict[str, Any]:
    """Soft-deleted attachments never leave the API; a missing flag means live."""
    flt: Dict[str, Any] = {"isDeleted": {"$ne": True}}
    if entity_type:
        flt["entityType"] = entity_type
    if entity_id:
        flt["entityId"] = entity_id
    return flt


@router.get("/products")
async def list_products(store: DocumentStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await store.list_collection(PRODUCTS)


@router.get("/inventoryLots")
async def list_inventory_lots(store: DocumentStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await store.list_collection(INVENTORY_LOTS)


@router.get("/attachments")
async def list_attachments(
    entity_type: Optional[str] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
    store: DocumentStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """
    Attachments, optionally narrowed by ?entityType= and ?entityId=.
    entityId matches both bare and wrapped ({"$oid": ...}) stored ids.
    """
    return await store.list_collection(ATTACHMENTS, attachments_filter(entity_type, entity_id))
