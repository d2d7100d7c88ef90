"""
api/app.py - FastAPI application factory
"""

from __future__ import annotations
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rackplan.bootstrap.config import RackPlanConfig, get_config
from rackplan.session.session import PlanningSession
from rackplan.session.store import BlobStore, JsonFileBlobStore, MemoryBlobStore

from .endpoints import create_planning_router

__all__ = ["create_session", "create_app"]

logger = logging.getLogger(__name__)


def create_session(config: RackPlanConfig) -> PlanningSession:
    """Session wired to the configured snapshot store, restored if possible."""
    store: BlobStore
    if config.storage.snapshots_dir:
        store = JsonFileBlobStore(config.storage.snapshots_dir)
    else:
        store = MemoryBlobStore()

    session = PlanningSession(
        store=store,
        layout_config=config.layout.to_layout_config(),
        store_key=config.storage.store_name,
        autosave=config.storage.autosave,
    )
    session.restore()
    return session


def create_app(
    config: Optional[RackPlanConfig] = None,
    session: Optional[PlanningSession] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application config (defaults to ``get_config()``)
        session: Pre-built session; built from ``config`` when omitted

    Returns:
        FastAPI application instance
    """
    config = config or get_config()
    session = session or create_session(config)

    app = FastAPI(
        title="rackplan API",
        description="Rack space allocation and move planning",
        version=config.version,
        docs_url=config.api.docs_url if config.api.enable_docs else None,
        redoc_url="/redoc" if config.api.enable_docs else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_planning_router(session))
    app.state.session = session

    @app.get("/health")
    async def health():
        return {"status": "ok", "sites": len(session.sites)}

    logger.info(f"API created (environment={config.environment})")
    return app
