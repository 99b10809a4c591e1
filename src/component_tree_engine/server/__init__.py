"""HTTP service for resolved component trees."""

from .app import create_app
from .pages import InMemoryQueryLayer, PageTrees, default_page_builder

__all__ = ["create_app", "InMemoryQueryLayer", "PageTrees", "default_page_builder"]
