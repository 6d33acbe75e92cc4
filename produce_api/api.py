"""
FastAPI app factory wiring the storage handle, repository and routers.
Run with `uvicorn --factory produce_api.api:create_app` or `python -m produce_api`.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, load_settings
from .db import StorageHandle, open_storage
from .repository import ProduceRepository
from .routes import base as base_routes
from .routes import produce as produce_routes
from .routes import testing as testing_routes

logger = logging.getLogger(__name__)


def on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Undecodable JSON bodies land here before the route runs
    msgs = [f"{'.'.join(str(x) for x in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "; ".join(msgs) or "invalid request"})


def create_app(settings: Settings | None = None, handle: StorageHandle | None = None) -> FastAPI:
    """
    Build an app around an explicit storage handle.

    When ``handle`` is given the caller owns it; otherwise one is opened from
    ``settings`` and closed again on shutdown.
    """
    settings = settings or load_settings()
    owns_handle = handle is None
    if handle is None:
        handle = open_storage(settings.db_path, settings.db_driver)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if owns_handle:
            handle.close()

    app = FastAPI(title="produce-api", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = handle
    app.state.repository = ProduceRepository(handle)
    app.add_exception_handler(RequestValidationError, on_request_validation_error)

    app.include_router(base_routes.router)
    app.include_router(produce_routes.router)
    if settings.enable_test_routes:
        app.include_router(testing_routes.router)
        logger.warning("test routes enabled: POST /__test/reset wipes all records")

    return app
