"""Request-scoped context store feeding data requirements."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Iterator, Mapping


# Default entry keys seeded for every request.
DOCUMENT_ID = "documentId"
QUERY = "query"


def default_entries(document_id: Any = None, query: Any = None) -> dict[str, Any]:
    """Entries every store starts with: current document and query result."""
    return {DOCUMENT_ID: document_id, QUERY: query}


class ContextStore:
    """
    Key/value store holding the data of one request.

    Seeded by the request layer (current document identifier, current
    query result) and read by the resolver when it selects values for a
    definition's data requirements. Transforms receive it explicitly; it
    is never read as an ambient global during resolution.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None):
        self._entries: dict[str, Any] = {}
        if entries:
            self.set(entries)

    def set(self, entries: Mapping[str, Any]) -> None:
        """Merge entries into the store. Later calls override the same keys."""
        self._entries.update(entries)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or ``default`` when the key is absent."""
        return self._entries.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the entries (for tracing/debugging)."""
        return dict(self._entries)

    @property
    def document_id(self) -> Any:
        return self._entries.get(DOCUMENT_ID)

    @property
    def query(self) -> Any:
        return self._entries.get(QUERY)

    def __repr__(self) -> str:
        return f"ContextStore(keys={self.keys()!r})"


_current_store: contextvars.ContextVar[ContextStore | None] = contextvars.ContextVar(
    "component_tree_context_store", default=None
)


def get_context_store() -> ContextStore:
    """
    Get the store for the current request.

    The first call within a scope creates a store with the default entries;
    later calls in the same scope return that same instance.
    """
    store = _current_store.get()
    if store is None:
        store = ContextStore(default_entries())
        _current_store.set(store)
    return store


@contextmanager
def request_scope(entries: Mapping[str, Any] | None = None, **kwargs: Any) -> Iterator[ContextStore]:
    """
    Install a fresh store for one request and restore the previous on exit.

    Usage:
        with request_scope({DOCUMENT_ID: 42, QUERY: result}) as context:
            tree = resolver.resolve(root, context)
    """
    store = ContextStore(default_entries())
    if entries:
        store.set(entries)
    if kwargs:
        store.set(kwargs)
    token = _current_store.set(store)
    try:
        yield store
    finally:
        _current_store.reset(token)
