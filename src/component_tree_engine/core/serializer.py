"""Wire serialization: camel-cased config keys, ordered children."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from .component import Child, Component
from .errors import SerializationError


KEY_SEPARATOR = "_"

# Wire shape: {"type": str, "config": {...}, "children": [WireNode | str, ...]}
WireNode = dict[str, Any]


def camel_case_key(key: Any) -> Any:
    """
    Recase one word-separated key to camel case.

    ``foo_bar_baz`` -> ``fooBarBaz``. Each segment gets its first character
    upper-cased (the rest is untouched) and the result gets its first
    character lower-cased, so ``foo`` stays ``foo`` and already camel-cased
    keys are stable. Non-string, empty and numeric keys pass through.
    """
    if not isinstance(key, str) or not key or key.isdigit():
        return key
    segments = key.split(KEY_SEPARATOR)
    joined = "".join(s[:1].upper() + s[1:] for s in segments)
    if not joined:
        return key
    return joined[:1].lower() + joined[1:]


def camel_case_keys(mapping: Mapping[Any, Any], path: str = "config") -> dict[Any, Any]:
    """
    Recase every key of a mapping, recursing into nested values.

    Each value is recased on its own, so a key whose value is a list in one
    node and a mapping in a sibling is handled per node. Two keys that
    recase to the same wire key raise SerializationError.
    """
    recased: dict[Any, Any] = {}
    origins: dict[Any, Any] = {}
    for key, value in mapping.items():
        new_key = camel_case_key(key)
        if new_key in recased:
            raise SerializationError(
                f"Config keys {origins[new_key]!r} and {key!r} both serialize to {new_key!r}",
                path=f"{path}.{key}",
            )
        origins[new_key] = key
        recased[new_key] = _serialize_value(value, f"{path}.{key}")
    return recased


def _serialize_value(value: Any, path: str) -> Any:
    if isinstance(value, Component):
        return serialize(value, path)
    if isinstance(value, Mapping):
        return camel_case_keys(value, path)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    return value


def serialize(node: Child, path: str = "root") -> WireNode | str:
    """
    Convert a resolved node to its wire shape.

    Text leaves are returned unchanged. A fragment (empty type) passed
    here directly is kept; fragments met as children are spliced into
    their parent by ``serialize_children``.
    """
    if isinstance(node, str):
        return node
    if not isinstance(node, Component):
        raise SerializationError(f"Expected a component or text, got {type(node).__name__}", path=path)
    if not isinstance(node.config, Mapping):
        raise SerializationError(f"Component '{node.type}' config is not a mapping", path=f"{path}.config")

    return {
        "type": node.type,
        "config": camel_case_keys(node.config, f"{path}.config"),
        "children": serialize_children(node.children, f"{path}.children"),
    }


def serialize_children(children: Iterable[Child], path: str = "children") -> list[WireNode | str]:
    """Serialize siblings, splicing fragment nodes' children in their place."""
    out: list[WireNode | str] = []
    for i, child in enumerate(children):
        child_path = f"{path}[{i}]"
        if isinstance(child, Component) and child.is_fragment:
            out.extend(serialize_children(child.children, f"{child_path}.children"))
            continue
        out.append(serialize(child, child_path))
    return out


def to_json(node: Child, **kwargs: Any) -> str:
    """Serialize a node and render it as JSON."""
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(serialize(node), **kwargs)
