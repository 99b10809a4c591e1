"""Recursive component tree resolver."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .component import Child, Component
from .context import ContextStore
from .errors import ErrorRecord, ResolutionError
from .registry import ComponentDefinition, ComponentRegistry, DataRequirement
from .tracing import ResolutionTrace, ResolutionTracer, TraceLevel
from .validation import TYPE_TAGS


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

_ZERO_VALUES: dict[str, Any] = {
    "integer": 0,
    "number": 0,
    "string": "",
    "boolean": False,
    "array": [],
    "object": {},
    "any": None,
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


class CoercionError(ValueError):
    """A context value does not fit the declared type tag."""
    pass


def zero_value(type_tag: str) -> Any:
    """Zero value for a type tag (fresh copies for containers)."""
    return copy.copy(_ZERO_VALUES[TYPE_TAGS.get(type_tag, "any")])


def coerce_value(value: Any, type_tag: str) -> Any:
    """
    Coerce a context value to a declared primitive type tag.

    Lossless conversions are applied (numeric strings to numbers, integral
    floats to int, "true"/"false" strings to booleans). Anything else
    raises CoercionError.
    """
    tag = TYPE_TAGS.get(type_tag)
    if tag is None:
        raise CoercionError(f"unknown type tag {type_tag!r}")

    if tag == "any":
        return value

    if tag == "integer":
        if isinstance(value, bool):
            raise CoercionError("boolean is not an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise CoercionError(f"{value!r} is not an integer")

    if tag == "number":
        if isinstance(value, bool):
            raise CoercionError("boolean is not a number")
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise CoercionError(f"{value!r} is not a number")

    if tag == "string":
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise CoercionError(f"{type(value).__name__} is not a string")

    if tag == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise CoercionError(f"{value!r} is not a boolean")

    if tag == "array":
        if isinstance(value, (list, tuple)):
            return list(value)
        raise CoercionError(f"{type(value).__name__} is not an array")

    # object
    if isinstance(value, Mapping):
        return dict(value)
    raise CoercionError(f"{type(value).__name__} is not an object")


@dataclass
class ResolutionResult:
    """Result of resolving one tree."""
    tree: Child | None
    errors: list[ErrorRecord] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)
    traces: list[ResolutionTrace] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def warnings(self) -> list[str]:
        return [str(e) for e in self.errors]

    def trace_summary(self) -> str:
        return ResolutionTracer(traces=list(self.traces)).format_summary()


class _Failed:
    """Marker for a definition application that did not produce a result."""

    def __init__(self, node: Component):
        self.node = node


class Resolver:
    """
    Walks a component tree and applies registered definitions.

    For every node, in pre-order:
    1. Look up the definition for ``node.type``; unknown types pass through.
    2. Merge the definition's default config under the node's config.
    3. Select and coerce declared data from the context store, then call the
       transform. Its result replaces the node. A changed result is resolved
       again at the same position, so a type change can select another
       definition.
    4. Recurse into the children of the final node, including children the
       transform just generated.

    Every nesting level counts toward ``max_depth``, and so does every
    re-application at one position after the first change: a transform that
    rewrites a node once and then leaves it alone costs no extra depth, an
    endless rewrite costs one unit per round. Past the bound the node is
    returned as-is and a warning is recorded. Node-local failures never
    abort the rest of the tree.
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        trace_level: TraceLevel = TraceLevel.ERRORS,
        strict: bool = False,
    ):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.registry = registry if registry is not None else ComponentRegistry.get_instance()
        self.max_depth = max_depth
        self.trace_level = trace_level
        self.strict = strict

    def resolve(self, root: Component | Mapping[str, Any] | str, context: ContextStore) -> Child | None:
        """Resolve a tree. Returns None when the root transform dropped it."""
        return self.resolve_with_report(root, context).tree

    def resolve_with_report(
        self,
        root: Component | Mapping[str, Any] | str,
        context: ContextStore,
    ) -> ResolutionResult:
        """Resolve a tree and return it with errors, stats and traces."""
        run = _ResolutionRun(self, context)
        tree = run.resolve_node(root, depth=0)
        return run.finish(tree)

    def resolve_children(
        self,
        children: Iterable[Component | Mapping[str, Any] | str],
        context: ContextStore,
    ) -> list[Child]:
        """Resolve a sequence of sibling trees, dropping removed nodes."""
        run = _ResolutionRun(self, context)
        resolved = [run.resolve_node(child, depth=0) for child in children]
        run.finish(None)
        return [r for r in resolved if r is not None]


class _ResolutionRun:
    """State of one resolve call."""

    def __init__(self, resolver: Resolver, context: ContextStore):
        self.resolver = resolver
        self.registry = resolver.registry
        self.context = context
        self.tracer = ResolutionTracer(level=resolver.trace_level)
        self.errors: list[ErrorRecord] = []
        self.stats = {
            "nodes_visited": 0,
            "definitions_applied": 0,
            "passthrough": 0,
            "text_leaves": 0,
            "dropped": 0,
            "depth_exceeded": 0,
            "max_depth_seen": 0,
        }

    def finish(self, tree: Child | None) -> ResolutionResult:
        if self.resolver.strict and self.errors:
            raise ResolutionError(
                f"Resolution recorded {len(self.errors)} error(s): {self.errors[0]}",
                records=self.errors,
            )
        return ResolutionResult(
            tree=tree,
            errors=self.errors,
            stats=dict(self.stats),
            traces=list(self.tracer.traces),
        )

    def _record(self, record: ErrorRecord) -> None:
        self.errors.append(record)

    def resolve_node(self, node: Component | Mapping[str, Any] | str, depth: int) -> Child | None:
        if isinstance(node, str):
            self.stats["text_leaves"] += 1
            return node
        if not isinstance(node, Component):
            node = Component.from_dict(node)

        self.stats["nodes_visited"] += 1
        current = node
        changes = 0

        while True:
            self.stats["max_depth_seen"] = max(self.stats["max_depth_seen"], depth)
            if depth >= self.resolver.max_depth:
                return self._depth_exceeded(current, depth)

            definition = self.registry.get(current.type)
            if definition is None:
                if current.type:
                    self.stats["passthrough"] += 1
                    logger.debug(f"No definition for component type '{current.type}', passing through")
                break

            outcome = self._apply(definition, current, depth)
            if isinstance(outcome, _Failed):
                current = outcome.node
                break
            if outcome is None:
                self.stats["dropped"] += 1
                return None
            if isinstance(outcome, str):
                self.stats["text_leaves"] += 1
                return outcome
            if outcome == current or definition.transform is None:
                current = outcome
                break

            current = outcome
            changes += 1
            if changes > 1:
                depth += 1

        return self._resolve_children(current, depth)

    def _resolve_children(self, node: Component, depth: int) -> Component:
        if not node.children:
            return node
        resolved: list[Child] = []
        for child in node.children:
            result = self.resolve_node(child, depth + 1)
            if result is not None:
                resolved.append(result)
        if tuple(resolved) == node.children:
            return node
        return node.with_children(resolved)

    def _depth_exceeded(self, node: Component, depth: int) -> Component:
        self.stats["depth_exceeded"] += 1
        message = (
            f"Maximum resolution depth {self.resolver.max_depth} reached at "
            f"component '{node.type}'; returning it unresolved"
        )
        logger.warning(message)
        self._record(ErrorRecord(
            error_type="depth_exceeded",
            message=message,
            component_type=node.type,
            depth=depth,
            recovery_action="stopped",
        ))
        trace = self.tracer.start(node.type, depth, config=node.config)
        self.tracer.end(trace, result_type=node.type, error=message, recovered=True)
        return node

    def _apply(self, definition: ComponentDefinition, node: Component, depth: int) -> Any:
        """Apply one definition to one node. Returns the normalized replacement."""
        self.stats["definitions_applied"] += 1
        node = node.with_defaults(definition.default_config)
        if definition.transform is None:
            return node

        data = self._resolve_data(definition, node, depth)
        trace = self.tracer.start(node.type, depth, resolved_data=data, config=node.config)

        try:
            result = definition.transform(node, data, self.context)
        except Exception as e:
            logger.warning(f"Transform for component '{node.type}' failed: {e}")
            self._record(ErrorRecord(
                error_type="transform_failed",
                message=str(e),
                component_type=node.type,
                depth=depth,
                context={"exception": type(e).__name__},
                recovery_action="kept_node",
            ))
            self.tracer.end(trace, result_type=node.type, error=e, recovered=True)
            return _Failed(node)

        if result is None or isinstance(result, (Component, str)):
            normalized = result
        elif isinstance(result, Mapping):
            try:
                normalized = Component.from_dict(result)
            except ValueError as e:
                return self._invalid_result(trace, node, depth, str(e))
        else:
            return self._invalid_result(
                trace, node, depth, f"transform returned {type(result).__name__}"
            )

        if normalized is None:
            result_type = None
        elif isinstance(normalized, str):
            result_type = "text"
        else:
            result_type = normalized.type
        self.tracer.end(trace, result_type=result_type)
        return normalized

    def _invalid_result(self, trace: ResolutionTrace, node: Component, depth: int, reason: str) -> _Failed:
        message = f"Transform for component '{node.type}' returned an invalid node: {reason}"
        logger.warning(message)
        self._record(ErrorRecord(
            error_type="invalid_result",
            message=message,
            component_type=node.type,
            depth=depth,
            recovery_action="kept_node",
        ))
        self.tracer.end(trace, result_type=node.type, error=message, recovered=True)
        return _Failed(node)

    def _resolve_data(self, definition: ComponentDefinition, node: Component, depth: int) -> dict[str, Any]:
        """Select and coerce the declared data requirements from the context."""
        data: dict[str, Any] = {}
        for name, requirement in definition.data_requirements.items():
            data[name] = self._resolve_requirement(name, requirement, node, depth)
        return data

    def _resolve_requirement(self, name: str, requirement: DataRequirement, node: Component, depth: int) -> Any:
        source = requirement.source_key(name)
        value = self.context.get(source)

        if value is None:
            if requirement.default is not None:
                return copy.deepcopy(requirement.default)
            logger.debug(f"Component '{node.type}': context key '{source}' missing for '{name}'")
            return zero_value(requirement.type)

        try:
            return coerce_value(value, requirement.type)
        except CoercionError as e:
            logger.warning(
                f"Component '{node.type}': data '{name}' from '{source}' "
                f"is not {requirement.type} ({e}); using zero value"
            )
            self._record(ErrorRecord(
                error_type="coercion",
                message=f"'{name}' from '{source}': {e}",
                component_type=node.type,
                depth=depth,
                recovery_action="zero_value",
            ))
            return zero_value(requirement.type)
