"""didtools FastAPI application entrypoint.

The HTTP layer is a thin JSON surface over the pure functions in
`didtools.did`, `didtools.grammar` and `didtools.document`. It does not
resolve DIDs over the network.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from didtools import VERSION
from didtools.config import Settings, get_settings
from didtools.errors import DIDError
from didtools.routes.dids import router as dids_router

logger = logging.getLogger(__name__)


def include_didtools_routers(app: FastAPI) -> None:
    """Install didtools routers into an existing FastAPI app."""
    app.include_router(dids_router)


def create_app(*, settings: Optional[Settings] = None) -> FastAPI:
    """Create a didtools FastAPI app.

    Settings are read from the environment at startup unless passed in.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings if settings is not None else get_settings()
        logger.info(
            "didtools ready (default key type %s)", app.state.settings.default_key_type.value
        )
        yield

    app = FastAPI(title="didtools", version=VERSION, lifespan=lifespan)

    @app.get("/health", tags=["internal"])
    async def health(_: Request) -> dict:
        return {"status": "ok", "version": VERSION}

    @app.exception_handler(DIDError)
    async def _did_error_handler(_: Request, exc: DIDError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Internal DID failure: %s", exc.message)
        return JSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code}
        )

    include_didtools_routers(app)
    return app
