"""Error types and error records for tree resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ComponentTreeError(Exception):
    """Base exception for all component tree errors."""
    pass


class DefinitionError(ComponentTreeError):
    """
    A component definition could not be loaded.

    Raised for unparsable declaration files, declarations without a
    ``name`` and transforms that cannot be imported. These are operator
    facing: a registry source that raises this should not be served.
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        errors: list[str] | None = None,
    ):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.errors = errors or []


class RegistryFrozenError(ComponentTreeError):
    """Registration attempted after the registry left its init phase."""

    def __init__(self, name: str):
        super().__init__(f"Registry is frozen, cannot modify definition: {name!r}")
        self.name = name


class SerializationError(ComponentTreeError):
    """A resolved tree violates the wire shape (e.g. non-mapping config)."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ResolutionError(ComponentTreeError):
    """Raised by a strict resolver when any node recorded an error."""

    def __init__(self, message: str, records: list["ErrorRecord"] | None = None):
        super().__init__(message)
        self.records = records or []


@dataclass
class ErrorRecord:
    """Record of a node-local problem that occurred during resolution."""
    error_type: str  # "depth_exceeded", "transform_failed", "coercion", ...
    message: str
    component_type: str | None = None
    depth: int | None = None
    context: dict[str, Any] = field(default_factory=dict)
    recovered: bool = True
    recovery_action: str | None = None  # "kept_node", "zero_value", "stopped"

    def __str__(self) -> str:
        where = f" [{self.component_type}]" if self.component_type else ""
        return f"{self.error_type}{where}: {self.message}"
