"""Component node value object and helpers."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Union


# Opaque text/markup leaf. Resolution skips it, serialization emits it as-is.
RawText = str

Child = Union["Component", RawText]


def _clean_children(children: Iterable[Any] | None) -> tuple[Child, ...]:
    """Normalize a children sequence, dropping empty entries."""
    if not children:
        return ()
    cleaned: list[Child] = []
    for child in children:
        if child is None or child == "":
            continue
        if isinstance(child, (Component, str)):
            cleaned.append(child)
        elif isinstance(child, Mapping):
            cleaned.append(Component.from_dict(child))
        else:
            raise ValueError(f"Invalid child node: {child!r}")
    return tuple(cleaned)


@dataclass(frozen=True)
class Component:
    """
    A typed, configurable tree element with ordered children.

    Nodes are values: the helpers below return new nodes instead of
    mutating, so the same node can be shared across a fanned-out tree
    without aliasing surprises.

    An empty ``type`` marks a fragment: the node itself renders nothing
    but its children are spliced into its parent at serialization time.
    """
    type: str = ""
    config: dict[str, Any] = field(default_factory=dict)
    children: tuple[Child, ...] = ()

    def __post_init__(self):
        if not isinstance(self.type, str):
            raise ValueError(f"Component type must be a string, got {type(self.type).__name__}")
        if not isinstance(self.config, Mapping):
            raise ValueError(f"Component {self.type!r}: config must be a mapping")
        object.__setattr__(self, "config", dict(self.config))
        object.__setattr__(self, "children", _clean_children(self.children))

    @property
    def is_fragment(self) -> bool:
        return self.type == ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Component":
        """
        Build a node from its storage shape.

        Accepts ``{"type": ..., "config": {...}, "children": [...]}``; ``name``
        is accepted as an alias of ``type``. Mapping children are converted
        recursively and string children become text leaves.
        """
        if isinstance(data, Component):
            return data
        if not isinstance(data, Mapping):
            raise ValueError(f"Component data must be a mapping, got {type(data).__name__}")
        node_type = data.get("type", data.get("name", ""))
        config = data.get("config") or {}
        children = data.get("children") or []
        if isinstance(children, (str, bytes)) or not isinstance(children, Iterable):
            raise ValueError(f"Component {node_type!r}: children must be a list")
        return cls(type=node_type, config=config, children=children)

    def to_dict(self) -> dict[str, Any]:
        """Return the storage shape (keys are not recased)."""
        return {
            "type": self.type,
            "config": copy.deepcopy(self.config),
            "children": [c.to_dict() if isinstance(c, Component) else c for c in self.children],
        }

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.config.get(key, default)

    def with_type(self, node_type: str) -> "Component":
        """Return a copy with a different type."""
        return replace(self, type=node_type)

    def set_config(self, key: str, value: Any) -> "Component":
        """Return a copy with one configuration key set."""
        return replace(self, config={**self.config, key: value})

    def with_config(self, values: Mapping[str, Any]) -> "Component":
        """Return a copy with the given keys merged over the configuration."""
        return replace(self, config={**self.config, **values})

    def with_defaults(self, defaults: Mapping[str, Any]) -> "Component":
        """Return a copy with ``defaults`` filled in under existing keys."""
        merged = copy.deepcopy(dict(defaults))
        merged.update(self.config)
        return replace(self, config=merged)

    def with_children(self, children: Iterable[Any]) -> "Component":
        """Return a copy with new children. Empty entries are dropped."""
        return replace(self, children=tuple(children))

    def __repr__(self) -> str:
        return f"Component(type={self.type!r}, config={self.config!r}, children={len(self.children)})"


def component(node_type: str = "", config: Mapping[str, Any] | None = None, children: Iterable[Any] | None = None) -> Component:
    """Shorthand constructor."""
    return Component(type=node_type, config=dict(config or {}), children=tuple(children or ()))


class ComponentBuilder:
    """
    Chainable builder that finalizes into an immutable Component.

    Usage:
        node = (ComponentBuilder("image")
                .set_config("alt", "A cat")
                .add_child("caption")
                .build())
    """

    def __init__(self, node_type: str = "", config: Mapping[str, Any] | None = None):
        self._type = node_type
        self._config: dict[str, Any] = dict(config or {})
        self._children: list[Any] = []

    @classmethod
    def from_component(cls, node: Component) -> "ComponentBuilder":
        builder = cls(node.type, node.config)
        builder._children = list(node.children)
        return builder

    def set_type(self, node_type: str) -> "ComponentBuilder":
        self._type = node_type
        return self

    def set_config(self, key: str, value: Any) -> "ComponentBuilder":
        self._config[key] = value
        return self

    def merge_config(self, values: Mapping[str, Any]) -> "ComponentBuilder":
        self._config.update(values)
        return self

    def get_config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def add_child(self, child: Any) -> "ComponentBuilder":
        self._children.append(child)
        return self

    def set_children(self, children: Iterable[Any]) -> "ComponentBuilder":
        self._children = list(children)
        return self

    def build(self) -> Component:
        return Component(type=self._type, config=dict(self._config), children=tuple(self._children))
