"""Pre-resolution validation for raw trees and declaration files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    from .registry import ComponentRegistry


# Primitive type tags accepted in data requirement declarations, with aliases.
TYPE_TAGS = {
    "integer": "integer",
    "int": "integer",
    "number": "number",
    "float": "number",
    "string": "string",
    "str": "string",
    "boolean": "boolean",
    "bool": "boolean",
    "array": "array",
    "list": "array",
    "object": "object",
    "dict": "object",
    "any": "any",
}

DECLARATION_KEYS = {"name", "description", "default_config", "data_requirements", "transform"}


@dataclass
class ValidationMessage:
    """A validation message (error or warning)."""
    level: str  # "error", "warning", "info"
    message: str
    location: str | None = None
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        icon = {"error": "✗", "warning": "⚠", "info": "ℹ"}.get(self.level, "•")
        lines = [f"{icon} {self.message}"]
        if self.location:
            lines.append(f"  Location: {self.location}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)


@dataclass
class ValidationReport:
    """Collected validation messages."""
    valid: bool
    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.level == "error"]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.level == "warning"]

    def format(self) -> str:
        """Format the report as a string."""
        if not self.messages:
            return "✓ Validation passed with no issues"

        lines = []
        if self.errors:
            lines.append(f"Errors ({len(self.errors)}):")
            for msg in self.errors:
                lines.append(f"  {msg}")
        if self.warnings:
            lines.append(f"\nWarnings ({len(self.warnings)}):")
            for msg in self.warnings:
                lines.append(f"  {msg}")

        status = "FAILED" if not self.valid else "PASSED with warnings"
        lines.insert(0, f"Validation {status}")
        lines.insert(1, "=" * 50)

        return "\n".join(lines)


class _Collector:
    def __init__(self):
        self.messages: list[ValidationMessage] = []

    def error(self, message: str, location: str | None = None, suggestion: str | None = None, **context):
        self.messages.append(ValidationMessage("error", message, location, suggestion, context))

    def warning(self, message: str, location: str | None = None, suggestion: str | None = None, **context):
        self.messages.append(ValidationMessage("warning", message, location, suggestion, context))

    def report(self) -> ValidationReport:
        return ValidationReport(
            valid=not any(m.level == "error" for m in self.messages),
            messages=self.messages,
        )


def validate_declaration(data: Any) -> ValidationReport:
    """
    Check a component declaration before it is registered.

    Errors: not a mapping, missing ``name``, non-mapping ``default_config``
    or ``data_requirements``, unknown type tags, a ``transform`` that is
    neither an import path nor a callable. Unknown top-level keys are
    warnings.
    """
    out = _Collector()

    if not isinstance(data, Mapping):
        out.error("Declaration must be a mapping/object")
        return out.report()

    if not data.get("name") or not isinstance(data.get("name"), str):
        out.error("Declaration missing 'name'", suggestion="Add a 'name' field (e.g., 'post/title')")

    for key in data:
        if key not in DECLARATION_KEYS:
            out.warning(f"Unknown declaration key: '{key}'", location=str(key))

    defaults = data.get("default_config")
    if defaults is not None and not isinstance(defaults, Mapping):
        out.error("'default_config' must be a mapping", location="default_config")

    requirements = data.get("data_requirements")
    if requirements is not None:
        if not isinstance(requirements, Mapping):
            out.error("'data_requirements' must be a mapping", location="data_requirements")
        else:
            for param, spec in requirements.items():
                location = f"data_requirements.{param}"
                tag = spec if isinstance(spec, str) else spec.get("type", "any") if isinstance(spec, Mapping) else None
                if tag is None:
                    out.error(f"Data requirement '{param}' must be a mapping or type string", location=location)
                elif tag not in TYPE_TAGS:
                    out.error(
                        f"Unknown type '{tag}' for data requirement '{param}'",
                        location=location,
                        suggestion=f"Use one of: {sorted(set(TYPE_TAGS.values()))}",
                    )

    transform = data.get("transform")
    if transform is not None and not callable(transform):
        if not isinstance(transform, str) or ":" not in transform:
            out.error(
                "'transform' must be an import path like 'package.module:function'",
                location="transform",
            )

    return out.report()


def validate_tree(data: Any, registry: "ComponentRegistry | None" = None) -> ValidationReport:
    """
    Check a raw tree (storage shape) before resolution.

    Structural problems are errors. Types without a registered definition
    are warnings since they pass through resolution untouched.
    """
    out = _Collector()
    known = registry.list_types() if registry is not None else None
    _validate_node(data, "root", out, known)
    return out.report()


def _validate_node(node: Any, path: str, out: _Collector, known: list[str] | None) -> None:
    if isinstance(node, str):
        return
    if not isinstance(node, Mapping):
        out.error(f"Node must be a mapping or text, got {type(node).__name__}", location=path)
        return

    node_type = node.get("type", node.get("name"))
    if node_type is None:
        out.error("Node missing 'type'", location=path, suggestion="Add 'type' (use \"\" for a fragment)")
    elif not isinstance(node_type, str):
        out.error("Node 'type' must be a string", location=path)
    elif known is not None and node_type and node_type not in known:
        similar = [t for t in known if node_type.split("/")[-1] in t]
        out.warning(
            f"Unknown component type: '{node_type}'",
            location=path,
            suggestion=f"Similar types: {similar}" if similar else "Node will pass through unresolved",
        )

    config = node.get("config", {})
    if config is not None and not isinstance(config, Mapping):
        out.error("Node 'config' must be a mapping", location=f"{path}.config")

    children = node.get("children", [])
    if children is None:
        return
    if isinstance(children, (str, Mapping)) or not isinstance(children, list):
        out.error("Node 'children' must be a list", location=f"{path}.children")
        return
    for i, child in enumerate(children):
        if child is None:
            continue
        _validate_node(child, f"{path}.children[{i}]", out, known)
