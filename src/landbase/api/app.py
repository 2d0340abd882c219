"""FastAPI application wiring for the land-base service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from landbase.api import routes
from landbase.api.runtime import ApiState, build_state
from landbase.config import Settings, get_settings

logger = logging.getLogger(__name__)

API_TITLE = "Land Base API"
API_VERSION = "0.1.0"


def create_app(
    *,
    state_factory: Callable[[], ApiState] = build_state,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app; ``state_factory`` runs once per lifespan."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        app.state.api_state = state
        logger.info(
            "serving campaigns from %s, archives in %s (rules %s)",
            state.settings.data_dir,
            state.settings.archive_dir,
            state.settings.rules_version,
        )
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type"],
    )
    app.include_router(routes.router)
    return app


app = create_app()
