"""Pydantic models for the component tree API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# === Components ===

class ComponentsResponse(BaseModel):
    """Envelope returned for a path: resolved, serialized trees plus redirect info."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    defaults: list[Any] = Field(default_factory=list)
    page: list[Any] = Field(default_factory=list)
    providers: list[Any] = Field(default_factory=list)
    redirect_to: str = ""
    redirect_status: int = 0


# === Component Types ===

class DataRequirementSchema(BaseModel):
    """One declared data requirement."""
    type: str
    source: str
    default: Any = None
    description: str = ""


class ComponentTypeSchema(BaseModel):
    """Full description of a registered definition."""
    name: str
    description: str = ""
    default_config: dict[str, Any] = Field(default_factory=dict)
    data_requirements: dict[str, DataRequirementSchema] = Field(default_factory=dict)
    transform: str | None = None
    source: str | None = None


class ComponentTypeListResponse(BaseModel):
    """Registered component types grouped by namespace."""
    types: dict[str, list[str]] = Field(default_factory=dict)
    total: int = 0


# === System ===

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    definitions_loaded: int
    uptime_seconds: float
