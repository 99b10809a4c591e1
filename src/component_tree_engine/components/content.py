"""Content-layer value types seen through the context store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..core.context import QUERY, ContextStore


@dataclass
class Term:
    """A taxonomy term attached to a document."""
    name: str
    link: str = ""


@dataclass
class Attachment:
    """A media item, e.g. a document's featured image."""
    id: int
    url: str = ""
    alt: str = ""
    caption: str = ""
    excerpt: str = ""
    crops: dict[str, list[int]] = field(default_factory=dict)


@dataclass
class Document:
    """One piece of content returned by the query layer."""
    id: int
    title: str = ""
    content: str = ""
    excerpt: str = ""
    permalink: str = ""
    author: str = ""
    tags: list[Term] = field(default_factory=list)
    featured_image: Attachment | None = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryResult:
    """Result of the external content query for one request."""
    documents: list[Document] = field(default_factory=list)
    is_404: bool = False
    is_search: bool = False

    @classmethod
    def not_found(cls) -> "QueryResult":
        return cls(documents=[], is_404=True)

    @property
    def have_documents(self) -> bool:
        return bool(self.documents)

    def find(self, document_id: int | None) -> Document | None:
        """Find a document by id."""
        if not document_id:
            return None
        for document in self.documents:
            if document.id == document_id:
                return document
        return None


def current_document(post_id: int | None, context: ContextStore) -> Document | None:
    """The document with ``post_id`` in the request's query result, if any."""
    query = context.get(QUERY)
    if not isinstance(query, QueryResult):
        return None
    return query.find(post_id)
