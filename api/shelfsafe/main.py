# shelfsafe/main.py
# ShelfSafe API - read-only views over products, inventory lots and attachments
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelfsafe.settings import Settings, settings
from shelfsafe.logging_setup import setup_logging
from shelfsafe.stores import DocumentStore, StoreUnavailable, create_store
from shelfsafe.routers.collections import router as collections_router
from shelfsafe.routers.health import router as health_router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(app_settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """
    Build the API. `store` overrides the backend chosen by settings
    (tests pass an in-memory or file store).
    """
    cfg = app_settings or settings

    # ---------------------------------------------------------
    # Lifespan: store open/close
    # ---------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        # Startup
        setup_logging(cfg)
        app.state.store = store if store is not None else create_store(cfg)
        try:
            await app.state.store.connect()
        except StoreUnavailable as e:
            # requests report it as 503 until the store comes back
            logger.warning("Document store '%s' not reachable at startup: %s", app.state.store.name, e)
        yield
        # Shutdown
        await app.state.store.close()
        app.state.store = None

    app = FastAPI(
        title="ShelfSafe API",
        version=API_VERSION,
        description="Read-only inventory views: products, inventory lots, attachments",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
        logger.warning("%s %s -> 503: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.include_router(health_router)
    app.include_router(collections_router)
    return app


app = create_app()
