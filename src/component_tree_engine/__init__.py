"""Component tree resolution engine.

Resolves trees of typed, declaratively configured components against a
registry of definitions and a per-request context store, and serializes
them into the camel-cased wire format consumed by client renderers.
"""

from .core import (
    Component,
    ComponentDefinition,
    ComponentRegistry,
    ContextStore,
    Resolver,
    request_scope,
    serialize,
)

__version__ = "1.0.0"

__all__ = [
    "Component",
    "ComponentDefinition",
    "ComponentRegistry",
    "ContextStore",
    "Resolver",
    "request_scope",
    "serialize",
    "__version__",
]
