from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shelfsafe.models import HealthOut
from shelfsafe.stores import DocumentStore, StoreUnavailable, get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
async def root(store: DocumentStore = Depends(get_store)):
    await store.ping()
    return {"ok": True, "message": "API connected"}


@router.get("/api/health", response_model=HealthOut)
async def health(store: DocumentStore = Depends(get_store)):
    """Liveness plus store reachability; 503 when the store does not answer."""
    try:
        await store.ping()
    except StoreUnavailable as e:
        logger.warning("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"ok": False, "message": str(e)})
    return HealthOut(ok=True, message="API is healthy + DB connected")
