"""Built-in component definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ..core.registry import ComponentRegistry
from . import image, post
from .image import ImageSettings

DEFINITIONS_DIR = Path(__file__).parent.parent / "definitions"


def register_builtin_components(
    registry: ComponentRegistry,
    image_settings: ImageSettings | None = None,
) -> list[str]:
    """
    Register the shipped definitions: declaration files, ``post/*`` and ``image``.

    Returns the registered type names.
    """
    registered = registry.load_from_directories({"builtin": DEFINITIONS_DIR})
    registered += post.register(registry)
    registered += image.register(registry, image_settings)
    return registered


def image_settings_from_config(config: dict) -> ImageSettings:
    images = config.get("images") or {}
    settings = ImageSettings(missing_image_url=images.get("missing_image_url", ""))
    settings.register_sizes(images.get("sizes") or {})
    settings.register_breakpoints(images.get("breakpoints") or {})
    return settings


def build_registry(config: dict, extra_dirs: Iterable[str] | None = None) -> ComponentRegistry:
    """
    Populate and freeze a registry from configuration.

    Raises DefinitionError when a declaration is broken, so nothing is
    served from a partially loaded registry.
    """
    registry = ComponentRegistry()
    register_builtin_components(registry, image_settings_from_config(config))
    registry.load_from_directories(list(config.get("definition_dirs") or []) + list(extra_dirs or []))
    registry.freeze()
    return registry


__all__ = [
    "DEFINITIONS_DIR",
    "ImageSettings",
    "build_registry",
    "image_settings_from_config",
    "register_builtin_components",
]
