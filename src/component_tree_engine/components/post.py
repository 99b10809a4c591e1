"""Document-bound components ("post/*").

Each definition declares ``postId`` sourced from the current document id
in the context store, and reads the document from the query result.
"""

from __future__ import annotations

import html
from typing import Any

from ..core.component import Component
from ..core.context import ContextStore
from ..core.markup import html_to_components
from ..core.registry import ComponentDefinition, ComponentRegistry
from .content import Document, current_document


MISSING_DOCUMENT_TEXT = "Error: no global post context found"
SOCIAL_SHARING_TEXT = "Share post"

POST_ID_REQUIREMENT = {"postId": {"type": "integer", "source": "documentId"}}

CONTENT_TAGS = ["h2", "h3", "p", "blockquote", "img"]


def _find_document(data: dict[str, Any], context: ContextStore) -> Document | None:
    return current_document(data.get("postId"), context)


def post_title(node: Component, data: dict[str, Any], context: ContextStore) -> str:
    """Document title as a text leaf."""
    document = _find_document(data, context)
    if document is not None and document.title:
        return html.unescape(document.title)
    return MISSING_DOCUMENT_TEXT


def post_excerpt(node: Component, data: dict[str, Any], context: ContextStore) -> str:
    document = _find_document(data, context)
    return html.escape(document.excerpt) if document is not None else ""


def post_permalink(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    """Becomes a ``link`` node pointing at the document."""
    document = _find_document(data, context)
    href = document.permalink if document is not None else ""
    return node.with_type("link").set_config("href", href)


def post_byline(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    document = _find_document(data, context)
    author = document.author if document is not None else ""
    return node.with_type("html").set_config("content", author)


def post_social_sharing(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    """Sharing placeholder rendered as an ``html`` node."""
    return node.with_type("html").set_config("content", SOCIAL_SHARING_TEXT)


def post_tags(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    """
    Expand into one ``html`` link node per tag.

    The node itself becomes a fragment so the links sit directly in the
    parent. No tags yields an empty fragment, which renders nothing.
    """
    document = _find_document(data, context)
    tags = document.tags if document is not None else []

    children = [
        Component(
            type="html",
            config={
                "content": '<a href="{}">{}</a>'.format(
                    html.escape(term.link, quote=True), html.escape(term.name)
                ),
            },
        )
        for term in tags
    ]
    return Component(type="", config=node.config, children=children)


def post_content(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    """
    Convert the document body into child components inside a container.

    The tags extracted from the markup can be overridden with the
    ``content_tags`` config key.
    """
    document = _find_document(data, context)
    if document is None:
        return Component(type="")

    tags = node.get_config("content_tags") or CONTENT_TAGS
    children = html_to_components(document.content, tags)

    config = {k: v for k, v in node.config.items() if k != "content_tags"}
    config["theme_name"] = "fullBleed"
    return Component(type="container", config=config, children=children)


POST_COMPONENTS = {
    "post/title": post_title,
    "post/excerpt": post_excerpt,
    "post/permalink": post_permalink,
    "post/byline": post_byline,
    "post/social-sharing": post_social_sharing,
    "post/tags": post_tags,
    "post/content": post_content,
}


def register(registry: ComponentRegistry) -> list[str]:
    """Register all ``post/*`` definitions."""
    for name, transform in POST_COMPONENTS.items():
        registry.register(
            name,
            ComponentDefinition(
                name=name,
                data_requirements=dict(POST_ID_REQUIREMENT),
                transform=transform,
                description=(transform.__doc__ or "").strip().split("\n")[0],
                source=f"{__name__}:{transform.__name__}",
            ),
        )
    return list(POST_COMPONENTS)
