"""Component definition registry with directory loading and declaration files."""

from __future__ import annotations

import copy
import importlib
import importlib.util
import json
import logging
import re
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, TYPE_CHECKING

import yaml

from .errors import DefinitionError, RegistryFrozenError
from .validation import validate_declaration

if TYPE_CHECKING:
    from .component import Component
    from .context import ContextStore


logger = logging.getLogger(__name__)

# Transform callback: (node, resolved_data, context) -> replacement.
# The replacement may be a Component, a mapping in storage shape, a text
# leaf, or None to drop the node.
TransformFn = Callable[["Component", dict[str, Any], "ContextStore"], Any]

DECLARATION_SUFFIXES = (".json", ".yaml", ".yml")


@dataclass
class DataRequirement:
    """A named value a transform needs, selected from the context store."""
    type: str = "any"  # "integer", "number", "string", "boolean", "array", "object", "any"
    source: str | None = None  # Context key, defaults to the parameter name
    default: Any = None
    description: str = ""

    @classmethod
    def from_spec(cls, name: str, spec: Any) -> "DataRequirement":
        """Build from ``{"type": ..., "source": ...}`` or a bare type tag."""
        if isinstance(spec, DataRequirement):
            return spec
        if isinstance(spec, str):
            return cls(type=spec, source=name)
        if not isinstance(spec, Mapping):
            raise ValueError(f"Data requirement '{name}' must be a mapping or type string")
        return cls(
            type=spec.get("type", "any"),
            source=spec.get("source") or name,
            default=spec.get("default"),
            description=spec.get("description", ""),
        )

    def source_key(self, name: str) -> str:
        return self.source or name


@dataclass
class ComponentDefinition:
    """Registry-held template for one component type."""
    name: str
    default_config: dict[str, Any] = field(default_factory=dict)
    data_requirements: dict[str, DataRequirement] = field(default_factory=dict)
    transform: TransformFn | None = None
    description: str = ""
    source: str | None = None  # Where the definition came from (file or module)

    def __post_init__(self):
        self.data_requirements = {
            key: DataRequirement.from_spec(key, spec)
            for key, spec in (self.data_requirements or {}).items()
        }

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any], source: str | None = None) -> "ComponentDefinition":
        """
        Build a definition from a structured declaration.

        Declaration shape:
        {
            "name": "footer",
            "description": "Site footer",
            "default_config": {"copyright": "..."},
            "data_requirements": {"postId": {"type": "integer", "source": "documentId"}},
            "transform": "package.module:function"
        }
        """
        transform = data.get("transform")
        if isinstance(transform, str):
            transform = import_transform(transform, source=source)
        return cls(
            name=data["name"],
            default_config=dict(data.get("default_config") or {}),
            data_requirements=dict(data.get("data_requirements") or {}),
            transform=transform,
            description=data.get("description", ""),
            source=source,
        )


def import_transform(target: str, source: str | None = None) -> TransformFn:
    """Resolve a ``"package.module:function"`` reference to a callable."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise DefinitionError(
            f"Transform reference must look like 'package.module:function', got {target!r}",
            path=source,
        )
    try:
        module = importlib.import_module(module_name)
        fn = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise DefinitionError(f"Cannot import transform {target!r}: {e}", path=source) from e
    if not callable(fn):
        raise DefinitionError(f"Transform {target!r} is not callable", path=source)
    return fn


def _merge_recursive(base: dict, update: Mapping) -> dict:
    """Merge ``update`` into ``base``: mappings merge, lists concatenate."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            merged[key] = _merge_recursive(current, value)
        elif isinstance(value, list) and isinstance(current, list):
            merged[key] = current + list(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ComponentRegistry:
    """
    Registry mapping component type strings to definitions.

    Trees reference definitions by type string (e.g. "post/title") and the
    resolver looks them up here. Populate the registry during startup, then
    call ``freeze()``: after that it is read-only and safe to share between
    concurrently served requests.
    """

    _instance: "ComponentRegistry | None" = None

    def __init__(self):
        self._definitions: dict[str, ComponentDefinition] = {}
        self._lock = threading.RLock()
        self._frozen = False

    @classmethod
    def get_instance(cls) -> "ComponentRegistry":
        """Get the process-wide registry instance."""
        if cls._instance is None:
            cls._instance = ComponentRegistry()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide instance (tests)."""
        cls._instance = None

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the initialization phase; further mutation raises."""
        with self._lock:
            self._frozen = True

    def register(
        self,
        name: str,
        definition: ComponentDefinition | Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Register a definition under a type string.

        Re-registration overwrites. Returns False (without raising) when the
        name is empty.

        Args:
            name: Type identifier (e.g., "post/title")
            definition: A ComponentDefinition or a declaration mapping
        """
        if not name:
            logger.warning("Refusing to register a component definition without a name")
            return False

        if definition is None:
            definition = ComponentDefinition(name=name)
        elif isinstance(definition, Mapping):
            definition = ComponentDefinition.from_declaration({**definition, "name": name})
        elif definition.name != name:
            definition = copy.copy(definition)
            definition.name = name

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(name)
            if name in self._definitions:
                logger.debug(f"Overwriting component definition: {name}")
            self._definitions[name] = definition
        return True

    def unregister(self, name: str) -> bool:
        """Remove a definition. Returns False if it was not registered."""
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(name)
            return self._definitions.pop(name, None) is not None

    def get(self, name: str) -> ComponentDefinition | None:
        """Get a definition by type string."""
        return self._definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def list_types(self) -> list[str]:
        """List all registered component types."""
        return sorted(self._definitions.keys())

    def list_by_namespace(self, namespace: str) -> list[str]:
        """List component types under a namespace ("post", ...)."""
        return [t for t in self.list_types() if t.startswith(f"{namespace}/")]

    def describe(self, name: str) -> dict | None:
        """Get a JSON-safe description of a definition."""
        definition = self.get(name)
        if definition is None:
            return None
        transform = definition.transform
        return {
            "name": definition.name,
            "description": definition.description,
            "default_config": copy.deepcopy(definition.default_config),
            "data_requirements": {
                k: {"type": v.type, "source": v.source_key(k), "default": v.default, "description": v.description}
                for k, v in definition.data_requirements.items()
            },
            "transform": getattr(transform, "__qualname__", repr(transform)) if transform else None,
            "source": definition.source,
        }

    def generate_docs(self, namespace: str | None = None) -> str:
        """Generate markdown documentation for registered definitions."""
        lines = []

        types = self.list_by_namespace(namespace) if namespace else self.list_types()

        by_namespace: dict[str, list[str]] = {}
        for t in types:
            ns = t.split("/")[0] if "/" in t else "general"
            by_namespace.setdefault(ns, []).append(t)

        for ns in sorted(by_namespace):
            lines.append(f"## {ns}\n")

            for comp_type in by_namespace[ns]:
                info = self.describe(comp_type)
                if not info:
                    continue

                lines.append(f"### `{comp_type}`")
                if info["description"]:
                    lines.append(f"{info['description']}\n")

                if info["default_config"]:
                    lines.append("**Defaults:**")
                    for key, value in info["default_config"].items():
                        lines.append(f"- `{key}` = `{value!r}`")
                    lines.append("")

                if info["data_requirements"]:
                    lines.append("**Data:**")
                    for key, spec in info["data_requirements"].items():
                        lines.append(f"- `{key}`: {spec['type']} (from `{spec['source']}`)")
                    lines.append("")

                lines.append("---\n")

        return "\n".join(lines)

    # === Loading ===

    def register_from_declaration(
        self,
        path: Path | str,
        overrides: Mapping[str, Any] | None = None,
    ) -> str:
        """
        Load a declaration file and register it. Returns the definition name.

        ``.json`` is appended when the path has no declaration suffix.
        ``overrides`` are merged recursively into the declaration.

        Raises:
            DefinitionError: Missing file, unparsable content, no ``name``,
                or an invalid declaration.
        """
        path = Path(path)
        if path.suffix not in DECLARATION_SUFFIXES:
            path = path.with_name(path.name + ".json")
        if not path.exists():
            raise DefinitionError(f"Could not find component declaration at {path}", path=path)

        data = _parse_declaration(path, path.read_text())
        if overrides:
            data = _merge_recursive(data, overrides)
        return self._register_declaration(path, data)

    def load_from_directories(
        self,
        directories: Iterable[Path | str] | Mapping[str, Path | str],
    ) -> list[str]:
        """
        Register every definition found in the given directories.

        Python modules are imported and, when they expose a
        ``register(registry)`` function, it is called with this registry.
        A module that fails to import is skipped with a warning, as is an
        unreadable declaration file. A declaration that cannot be parsed or
        lacks a ``name`` raises DefinitionError.

        Args:
            directories: Paths, or a mapping of label -> path

        Returns:
            Names registered by declaration files and module hooks
        """
        if isinstance(directories, Mapping):
            items = list(directories.items())
        else:
            items = [(Path(d).name, d) for d in directories]

        registered: list[str] = []
        for label, directory in items:
            directory = Path(directory).expanduser()
            if not directory.is_dir():
                logger.warning(f"Component directory not found ({label}): {directory}")
                continue
            registered.extend(self._load_directory(label, directory))
        return registered

    def _load_directory(self, label: str, directory: Path) -> list[str]:
        registered: list[str] = []
        for path in sorted(directory.iterdir()):
            if path.name.startswith((".", "_")) or not path.is_file():
                continue

            if path.suffix == ".py":
                before = set(self._definitions)
                if self._load_module(label, path):
                    registered.extend(sorted(set(self._definitions) - before))
                continue

            if path.suffix not in DECLARATION_SUFFIXES:
                continue

            try:
                text = path.read_text()
            except OSError as e:
                logger.warning(f"Skipping unreadable component declaration {path}: {e}")
                continue

            registered.append(self._register_declaration(path, _parse_declaration(path, text)))
        return registered

    def _load_module(self, label: str, path: Path) -> bool:
        module_name = "_component_modules." + re.sub(r"\W", "_", f"{label}_{path.stem}")
        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"no loader for {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
            hook = getattr(module, "register", None)
            if callable(hook):
                hook(self)
        except RegistryFrozenError:
            raise
        except Exception as e:
            sys.modules.pop(module_name, None)
            logger.warning(f"Failed to import component module {path}: {e}")
            return False
        return True

    def _register_declaration(self, path: Path, data: dict[str, Any]) -> str:
        report = validate_declaration(data)
        if not report.valid:
            raise DefinitionError(
                f"Invalid component declaration in {path}",
                path=path,
                errors=[m.message for m in report.errors],
            )
        for warning in report.warnings:
            logger.warning(f"{path}: {warning.message}")

        definition = ComponentDefinition.from_declaration(data, source=str(path))
        self.register(definition.name, definition)
        return definition.name


def _parse_declaration(path: Path, text: str) -> dict[str, Any]:
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DefinitionError(f"Unparsable component declaration {path}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise DefinitionError(f"Component declaration must be a mapping: {path}", path=path)
    if not data.get("name"):
        raise DefinitionError(f"Component declaration missing 'name': {path}", path=path)
    return data


def register_component(
    name: str,
    *,
    default_config: Mapping[str, Any] | None = None,
    data_requirements: Mapping[str, Any] | None = None,
    description: str = "",
    registry: ComponentRegistry | None = None,
):
    """
    Decorator to register a transform function as a component definition.

    Usage:
        @register_component("post/title", data_requirements={"postId": "integer"})
        def post_title(node, data, context):
            ...
    """
    def decorator(fn: TransformFn) -> TransformFn:
        target = registry if registry is not None else ComponentRegistry.get_instance()
        target.register(
            name,
            ComponentDefinition(
                name=name,
                default_config=dict(default_config or {}),
                data_requirements=dict(data_requirements or {}),
                transform=fn,
                description=description or (fn.__doc__ or "").strip().split("\n")[0],
                source=f"{fn.__module__}:{fn.__qualname__}",
            ),
        )
        return fn
    return decorator
