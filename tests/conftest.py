"""
Shared pytest fixtures for component-tree-engine tests.

Provides:
- A fresh registry per test (and a reset process-wide instance)
- Context stores seeded with a sample document/query
- Sample content documents
"""

import sys
from pathlib import Path

import pytest

# Ensure the package is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from component_tree_engine.components.content import Document, QueryResult, Term
from component_tree_engine.core import (
    ComponentRegistry,
    ContextStore,
    Resolver,
    default_entries,
)


@pytest.fixture(autouse=True)
def reset_process_registry():
    """Isolate tests that touch the process-wide registry."""
    ComponentRegistry.reset_instance()
    yield
    ComponentRegistry.reset_instance()


@pytest.fixture
def registry() -> ComponentRegistry:
    return ComponentRegistry()


@pytest.fixture
def resolver(registry) -> Resolver:
    return Resolver(registry)


@pytest.fixture
def document() -> Document:
    return Document(
        id=42,
        title="Fish &amp; Chips",
        content="<h2>Intro</h2><p class=\"lead big\">Hello</p><p>World</p>",
        excerpt="Short <b>summary</b>",
        permalink="https://example.com/fish-and-chips/",
        author="jdoe",
        tags=[Term("food", "https://example.com/tag/food/"), Term("uk", "https://example.com/tag/uk/")],
    )


@pytest.fixture
def query(document) -> QueryResult:
    return QueryResult(documents=[document])


@pytest.fixture
def context(document, query) -> ContextStore:
    return ContextStore(default_entries(document_id=document.id, query=query))


@pytest.fixture
def empty_context() -> ContextStore:
    return ContextStore(default_entries())
