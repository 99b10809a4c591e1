"""Query layer and page builder seams used by the components route."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol

from ..components.content import Document, QueryResult
from ..core.component import Component


class QueryLayer(Protocol):
    """Maps a request path to the content it shows."""

    def query(self, path: str, params: Mapping[str, Any]) -> QueryResult:
        ...


def normalize_path(path: str) -> str:
    """Leading and trailing slash, no surrounding whitespace."""
    path = "/" + path.strip().strip("/")
    return path if path == "/" else path + "/"


class InMemoryQueryLayer:
    """Query layer over a fixed path -> documents mapping."""

    def __init__(self, documents: Mapping[str, Document | list[Document]] | None = None):
        self._documents: dict[str, list[Document]] = {}
        for path, docs in (documents or {}).items():
            self.add(path, *(docs if isinstance(docs, list) else [docs]))

    def add(self, path: str, *documents: Document) -> None:
        self._documents.setdefault(normalize_path(path), []).extend(documents)

    def query(self, path: str, params: Mapping[str, Any]) -> QueryResult:
        documents = self._documents.get(normalize_path(path))
        if not documents:
            return QueryResult.not_found()
        return QueryResult(documents=list(documents), is_search="s" in params)


@dataclass
class PageTrees:
    """Raw trees for one response, before resolution."""
    defaults: list[Any] = field(default_factory=list)
    page: list[Any] = field(default_factory=list)
    providers: list[Any] = field(default_factory=list)
    redirect_to: str = ""
    redirect_status: int = 0


# (path, context name, query result, custom params) -> PageTrees
PageBuilder = Callable[[str, str, QueryResult, Mapping[str, Any]], PageTrees]


def default_page_builder(
    path: str,
    context_name: str,
    query: QueryResult,
    params: Mapping[str, Any],
) -> PageTrees:
    """
    Document page for a single match, a link list for several, nothing on 404.

    Site-level defaults (the footer) are only sent when the client asks for
    the ``site`` context, i.e. on its first load.
    """
    trees = PageTrees()
    if context_name == "site":
        trees.defaults = [Component(type="footer")]

    if query.is_404:
        return trees

    if len(query.documents) == 1:
        trees.page = [
            Component(type="container", children=[
                Component(type="post/title"),
                Component(type="post/byline"),
                Component(type="post/content"),
                Component(type="post/tags"),
            ]),
        ]
    else:
        trees.page = [
            Component(type="container", children=[
                Component(type="link", config={"href": doc.permalink}, children=[doc.title])
                for doc in query.documents
            ]),
        ]
    return trees
