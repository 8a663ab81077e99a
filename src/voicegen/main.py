"""
FastAPI Application Entry Point.

Creates the voicegen application: logging, CORS, routers, and the shared
upstream HTTP client whose lifetime follows the application's.

Usage:
    # Run with uvicorn
    uvicorn voicegen.main:app --host 0.0.0.0 --port 3000

    # Or through the CLI (honours PORT)
    voicegen --serve
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voicegen import __version__
from voicegen.api.dependencies import create_http_client, get_service_config
from voicegen.api.pages import router as pages_router
from voicegen.api.routes import router
from voicegen.core.errors import ValidationError
from voicegen.core.logging import configure_logging, get_logger, info, set_request_id, warn

_LOG = get_logger("voicegen.main")


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the upstream client: opened at startup, closed at shutdown."""
    config = get_service_config()
    app.state.http_client = create_http_client(config.upstream)
    info(_LOG, "startup", version=__version__, eviction=config.cache.eviction)
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        app.state.http_client = None
        info(_LOG, "shutdown")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    configure_logging()

    config = get_service_config()

    app = FastAPI(title="voicegen", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)          # /api/generate-tts, /audio/{code}, /health, /metrics
    app.include_router(pages_router)    # /

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies get the same {success, error, code} shape as other failures."""
        rid = str(uuid.uuid4())[:12]
        set_request_id(rid)
        err = ValidationError(_describe_validation_error(exc))
        warn(_LOG, "invalid_body", path=request.url.path, error=err.message)
        return JSONResponse(status_code=422, content=err.to_dict(), headers={"X-Request-Id": rid})

    return app


app = create_app()
