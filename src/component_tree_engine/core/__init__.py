"""Core component tree resolution engine."""

from .component import (
    Child,
    Component,
    ComponentBuilder,
    RawText,
    component,
)
from .registry import (
    ComponentDefinition,
    ComponentRegistry,
    DataRequirement,
    import_transform,
    register_component,
)
from .context import (
    DOCUMENT_ID,
    QUERY,
    ContextStore,
    default_entries,
    get_context_store,
    request_scope,
)
from .errors import (
    ComponentTreeError,
    DefinitionError,
    RegistryFrozenError,
    ResolutionError,
    SerializationError,
    ErrorRecord,
)
from .resolver import (
    DEFAULT_MAX_DEPTH,
    CoercionError,
    Resolver,
    ResolutionResult,
    coerce_value,
    zero_value,
)
from .serializer import (
    WireNode,
    camel_case_key,
    camel_case_keys,
    serialize,
    serialize_children,
    to_json,
)
from .tracing import ResolutionTracer, ResolutionTrace, TraceLevel
from .validation import (
    TYPE_TAGS,
    ValidationMessage,
    ValidationReport,
    validate_declaration,
    validate_tree,
)
from .markup import html_to_components

__all__ = [
    # Component
    "Child",
    "Component",
    "ComponentBuilder",
    "RawText",
    "component",
    # Registry
    "ComponentDefinition",
    "ComponentRegistry",
    "DataRequirement",
    "import_transform",
    "register_component",
    # Context
    "DOCUMENT_ID",
    "QUERY",
    "ContextStore",
    "default_entries",
    "get_context_store",
    "request_scope",
    # Errors
    "ComponentTreeError",
    "DefinitionError",
    "RegistryFrozenError",
    "ResolutionError",
    "SerializationError",
    "ErrorRecord",
    # Resolver
    "DEFAULT_MAX_DEPTH",
    "CoercionError",
    "Resolver",
    "ResolutionResult",
    "coerce_value",
    "zero_value",
    # Serializer
    "WireNode",
    "camel_case_key",
    "camel_case_keys",
    "serialize",
    "serialize_children",
    "to_json",
    # Tracing
    "ResolutionTracer",
    "ResolutionTrace",
    "TraceLevel",
    # Validation
    "TYPE_TAGS",
    "ValidationMessage",
    "ValidationReport",
    "validate_declaration",
    "validate_tree",
    # Markup
    "html_to_components",
]
