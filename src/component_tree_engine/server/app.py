"""FastAPI application factory for the component tree service."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..components import build_registry
from ..config import load_config, trace_level_from_config
from ..core import ComponentRegistry, ComponentTreeError, SerializationError
from .pages import InMemoryQueryLayer, PageBuilder, QueryLayer, default_page_builder
from .routes import router


logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Global state
_start_time: float = 0.0


def get_uptime() -> float:
    """Get server uptime in seconds."""
    return time.time() - _start_time


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    global _start_time

    # Startup
    _start_time = time.time()
    logger.info(f"Serving {len(app.state.registry)} component definitions")

    yield

    # Shutdown (nothing to clean up)


def create_app(
    registry: ComponentRegistry | None = None,
    query_layer: QueryLayer | None = None,
    page_builder: PageBuilder | None = None,
    config: dict | None = None,
    title: str = "Component Tree Engine",
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_config()

    app = FastAPI(
        title=title,
        version=VERSION,
        description="HTTP API serving resolved component trees",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.trace_level = trace_level_from_config(config)
    app.state.registry = registry if registry is not None else build_registry(config)
    app.state.query_layer = query_layer or InMemoryQueryLayer()
    app.state.page_builder = page_builder or default_page_builder

    # CORS for decoupled front ends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ComponentTreeError)
    async def component_tree_error_handler(request: Request, exc: ComponentTreeError) -> JSONResponse:
        logger.error(f"{request.url.path}: {exc}")
        detail = {"error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, SerializationError) and exc.path:
            detail["path"] = exc.path
        return JSONResponse(detail, status_code=500)

    app.include_router(router)

    return app
