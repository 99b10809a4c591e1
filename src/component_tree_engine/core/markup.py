"""Markup-to-tree adapter."""

from __future__ import annotations

from typing import Iterable

from bs4 import BeautifulSoup

from .component import Component


def html_to_components(markup: str, tags: Iterable[str]) -> list[Component]:
    """
    Convert markup into a flat list of components.

    For each tag name, in the order given, every matching element (in
    document order) becomes a node of that type. Its attributes become the
    config and its text content, when non-empty, becomes a single text
    child.

    Args:
        markup: HTML string
        tags: Tag names to extract (e.g., ["p", "img"])
    """
    if not markup:
        return []

    soup = BeautifulSoup(markup, "html.parser")
    components: list[Component] = []

    for tag in tags:
        for element in soup.find_all(tag):
            config = {
                name: " ".join(value) if isinstance(value, list) else value
                for name, value in element.attrs.items()
            }
            text = element.get_text()
            components.append(Component(type=tag, config=config, children=(text,) if text else ()))

    return components
