"""API route handlers for the component tree service."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..core import (
    DOCUMENT_ID,
    QUERY,
    Resolver,
    request_scope,
    serialize_children,
)
from .models import (
    ComponentsResponse,
    ComponentTypeListResponse,
    ComponentTypeSchema,
    HealthResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter()

RESERVED_PARAMS = ("path", "context")


# === Health ===

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(request: Request) -> HealthResponse:
    """Check service health."""
    from .app import get_uptime, VERSION

    return HealthResponse(
        status="healthy",
        version=VERSION,
        definitions_loaded=len(request.app.state.registry),
        uptime_seconds=get_uptime(),
    )


# === Components ===

@router.get("/components", tags=["Components"])
async def get_components(
    request: Request,
    path: str = Query(default="/", description="Path being requested by the client"),
    context: str = Query(default="page", description="'site' on first load, 'page' afterwards"),
) -> Any:
    """
    Resolve and serialize the component trees for a path.

    Responds 404 (with a well-formed envelope) when the query layer found
    no content. A path without a trailing slash that matched content is
    redirected to the same endpoint with the slash added.
    """
    state = request.app.state
    custom_params = {k: v for k, v in request.query_params.items() if k not in RESERVED_PARAMS}

    query = state.query_layer.query(path, custom_params)

    if not path.endswith("/") and query.have_documents:
        params = dict(request.query_params)
        params["path"] = f"{path}/"
        return RedirectResponse(url=str(request.url.include_query_params(**params)), status_code=301)

    document_id = query.documents[0].id if len(query.documents) == 1 else None
    resolver = Resolver(
        state.registry,
        max_depth=state.config["resolution"]["max_depth"],
        trace_level=state.trace_level,
    )

    with request_scope({DOCUMENT_ID: document_id, QUERY: query}) as store:
        trees = state.page_builder(path, context, query, custom_params)
        body = ComponentsResponse(
            defaults=serialize_children(resolver.resolve_children(trees.defaults, store)),
            page=serialize_children(resolver.resolve_children(trees.page, store)),
            providers=serialize_children(resolver.resolve_children(trees.providers, store)),
            redirect_to=trees.redirect_to,
            redirect_status=trees.redirect_status,
        )

    status = 404 if query.is_404 else 200
    logger.debug(f"GET /components path={path!r} context={context!r} -> {status}")
    return JSONResponse(body.model_dump(by_alias=True), status_code=status)


# === Component Types ===

@router.get("/component-types", response_model=ComponentTypeListResponse, tags=["Component Types"])
async def list_component_types(request: Request) -> ComponentTypeListResponse:
    """List registered component types grouped by namespace."""
    registry = request.app.state.registry
    all_types = registry.list_types()

    by_namespace: dict[str, list[str]] = {}
    for comp_type in all_types:
        namespace = comp_type.split("/")[0] if "/" in comp_type else "general"
        by_namespace.setdefault(namespace, []).append(comp_type)

    return ComponentTypeListResponse(types=by_namespace, total=len(all_types))


@router.get("/component-types/{name:path}", response_model=ComponentTypeSchema, tags=["Component Types"])
async def get_component_type(request: Request, name: str) -> ComponentTypeSchema:
    """Get a registered definition's schema."""
    info = request.app.state.registry.describe(name)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Component type '{name}' not found")
    return ComponentTypeSchema(**info)


# === Docs ===

@router.get("/docs/component-types", tags=["System"])
async def get_component_docs(request: Request) -> dict:
    """Get generated definition documentation in markdown."""
    docs = request.app.state.registry.generate_docs()
    return {"format": "markdown", "content": docs}
