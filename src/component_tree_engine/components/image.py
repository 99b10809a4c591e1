"""Responsive image component.

A chain of URL transforms (resize, crop, fit, quality, width, height)
builds candidate image URLs as query parameters on a base asset URL. The
``image`` definition derives ``src``, ``srcset`` and, in picture mode, a
list of ``<source>`` entries with media conditions from named sizes and
breakpoints.

Sizes look like:
    {
        "feature": {
            "sources": [
                {"transforms": {"resize": [800, 450]}, "descriptor": 800,
                 "media": {"min": "md"}},
                {"transforms": {"resize": [400, 225]}, "descriptor": 400},
            ]
        }
    }
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from urllib.parse import quote

import httpx

from ..core.component import Component
from ..core.context import ContextStore
from ..core.registry import ComponentDefinition, ComponentRegistry
from .content import Attachment, current_document
from .post import POST_ID_REQUIREMENT


DEFAULT_CONFIG = {
    "image_size": "full",
    "alt": "",
    "src": "",
    "srcset": "",
    "source_tags": [],
    "original_url": "",
    "url": "",
    "crops": {},
    "sources": [],
    "retina": True,
    "aspect_ratio": 9 / 16,
    "lazyload": True,
    "picture": False,
}

LQIP_QUALITY = 60
LQIP_WIDTH = 60


def _absint(value: Any) -> int:
    return abs(int(value))


@dataclass(frozen=True)
class ImageTransformChain:
    """
    Immutable builder over an image URL.

    Every operation returns a new chain whose URL carries the operation's
    query parameter. Setting a parameter that is already present replaces
    its value in place; new parameters are appended in call order.
    """
    url: str

    # Names usable in a source's "transforms" mapping.
    OPERATIONS = ("w", "h", "resize", "fit", "crop", "quality")

    @property
    def base_url(self) -> str:
        """URL without any transform parameters."""
        return self.url.split("?", 1)[0]

    def apply_transform(self, params: Mapping[str, Any]) -> "ImageTransformChain":
        """Set query parameters. Commas in values stay literal (``resize=100,100``)."""
        if not params:
            return self
        url = httpx.URL(self.url)
        query = url.params
        for key, value in params.items():
            query = query.set(key, str(value))
        encoded = "&".join(
            f"{quote(key, safe='')}={quote(value, safe=',')}" for key, value in query.multi_items()
        )
        return ImageTransformChain(str(url.copy_with(query=encoded.encode("ascii"))))

    def w(self, width: int, density: int = 1) -> "ImageTransformChain":
        """Resized width."""
        return self.apply_transform({"w": _absint(width) * density})

    def h(self, height: int, density: int = 1) -> "ImageTransformChain":
        """Resized height."""
        return self.apply_transform({"h": _absint(height) * density})

    def resize(self, width: int, height: int, density: int = 1) -> "ImageTransformChain":
        """Resize and crop to exact dimensions."""
        return self.apply_transform({"resize": f"{_absint(width) * density},{_absint(height) * density}"})

    def fit(self, width: int, height: int, density: int = 1) -> "ImageTransformChain":
        """Fit inside a box, keeping the aspect ratio."""
        return self.apply_transform({"fit": f"{_absint(width) * density},{_absint(height) * density}"})

    def crop(self, x: Any, y: Any, width: Any, height: Any, density: int = 1) -> "ImageTransformChain":
        """Crop by x-offset, y-offset, width, height. Density does not apply."""
        return self.apply_transform({"crop": f"{x},{y},{width},{height}"})

    def quality(self, percentage: int, density: int = 1) -> "ImageTransformChain":
        return self.apply_transform({"quality": _absint(percentage)})

    def apply_transforms(self, transforms: Mapping[str, Sequence[Any]], density: int = 1) -> "ImageTransformChain":
        """Apply ``{operation: [args...]}`` in order; unknown operations are skipped."""
        chain = self
        for operation, values in transforms.items():
            if operation not in self.OPERATIONS:
                continue
            if not isinstance(values, (list, tuple)):
                values = [values]
            chain = getattr(chain, operation)(*values, density)
        return chain


@dataclass
class ImageSettings:
    """Named sizes and breakpoints available to ``image`` components."""
    sizes: dict[str, dict[str, Any]] = field(default_factory=dict)
    breakpoints: dict[str, str] = field(default_factory=dict)
    missing_image_url: str = ""

    def register_sizes(self, sizes: Mapping[str, Mapping[str, Any]]) -> None:
        self.sizes.update(copy.deepcopy(dict(sizes)))

    def register_breakpoints(self, breakpoints: Mapping[str, str]) -> None:
        self.breakpoints.update(breakpoints)


def get_media(media_params: Any, breakpoints: Mapping[str, str]) -> str:
    """
    Media condition for one source.

    A ``custom`` literal wins. Otherwise ``min``/``max`` name breakpoints
    (an unknown name is used literally, e.g. "768px"). Neither bound gives
    ``all``.
    """
    if not isinstance(media_params, Mapping):
        return ""

    if media_params.get("custom"):
        return str(media_params["custom"])

    min_name = media_params.get("min")
    max_name = media_params.get("max")
    min_width = f"(min-width: {breakpoints.get(min_name, min_name)})" if min_name else ""
    max_width = f"(max-width: {breakpoints.get(max_name, max_name)})" if max_name else ""

    if min_width and max_width:
        return f"{min_width} and {max_width}"
    return min_width or max_width or "all"


def get_srcset(url: str, sources: Sequence[Mapping[str, Any]], retina: bool = True) -> str:
    """``url descriptor`` candidates; retina adds a doubled candidate per source."""
    srcset: list[str] = []
    chain = ImageTransformChain(url)
    for params in sources:
        transforms = params.get("transforms") or {}
        descriptor = _absint(params.get("descriptor", 0))
        src_url = chain.apply_transforms(transforms).url

        if retina:
            retina_url = chain.apply_transforms(transforms, 2).url
            srcset.append(f"{retina_url} {descriptor * 2}w")

        srcset.append(f"{src_url} {descriptor}w")
    return ",".join(srcset)


def get_source_tags(
    url: str,
    sources: Sequence[Mapping[str, Any]],
    breakpoints: Mapping[str, str],
    retina: bool = True,
) -> list[dict[str, str]]:
    """``<source>`` entries for picture mode."""
    source_tags = []
    chain = ImageTransformChain(url)
    for params in sources:
        transforms = params.get("transforms") or {}
        src_url = chain.apply_transforms(transforms).url

        if retina:
            retina_url = chain.apply_transforms(transforms, 2).url
            srcset = f"{src_url} 1x, {retina_url} 2x"
        else:
            srcset = src_url

        source_tags.append({
            "srcset": srcset,
            "media": get_media(params.get("media", ""), breakpoints),
        })
    return source_tags


def get_lqip_src(url: str, aspect_ratio: float) -> str:
    """Low quality placeholder URL."""
    return (
        ImageTransformChain(url)
        .quality(LQIP_QUALITY)
        .resize(LQIP_WIDTH, int(LQIP_WIDTH * (aspect_ratio or 0)))
        .url
    )


def get_aspect_ratio_padding(aspect_ratio: Any) -> str:
    """Bottom padding style for intrinsic ratio sizing, "" when disabled."""
    if not aspect_ratio:
        return ""
    return f"padding-bottom: {float(aspect_ratio) * 100:g}%;"


def apply_crop(sources: Sequence[Mapping[str, Any]], coordinates: Sequence[Any]) -> list[dict[str, Any]]:
    """Prepend a pixel ``crop`` built from stored (x1, y1, x2, y2) coordinates."""
    x1, y1, x2, y2 = (int(c) for c in coordinates[:4])
    crop = [f"{x1}px", f"{y1}px", f"{x2 - x1}px", f"{y2 - y1}px"]
    cropped = []
    for source in sources:
        source = dict(source)
        source["transforms"] = {"crop": crop, **(source.get("transforms") or {})}
        cropped.append(source)
    return cropped


def configure_for_size(
    config: Mapping[str, Any],
    settings: ImageSettings,
    image_size: str | None = None,
    picture: bool | None = None,
) -> dict[str, Any]:
    """
    Derive the responsive fields for a named size.

    Returns a new config. An unknown size only sets ``src`` to ``url``.
    """
    config = dict(config)
    image_size = image_size or config.get("image_size") or "full"
    picture = bool(config.get("picture")) if picture is None else picture
    url = config.get("url") or settings.missing_image_url

    size_config = settings.sizes.get(image_size)
    if not size_config:
        config["src"] = url
        return config

    sources = list(size_config.get("sources") or [])
    crops = config.get("crops") or {}
    if crops.get(image_size):
        sources = apply_crop(sources, crops[image_size])

    retina = bool(config.get("retina"))
    config.update({
        "image_size": image_size,
        "sources": sources,
        "src": get_lqip_src(url, config.get("aspect_ratio") or 0),
        "srcset": get_srcset(url, sources, retina),
        "source_tags": get_source_tags(url, sources, settings.breakpoints, retina) if picture else [],
        "picture": picture,
        "original_url": ImageTransformChain(url).base_url,
        "aspect_ratio_padding": get_aspect_ratio_padding(config.get("aspect_ratio")),
        "alt": config.get("alt") or "",
    })
    return config


def apply_attachment(config: Mapping[str, Any], attachment: Attachment) -> dict[str, Any]:
    """
    Fill ``url``, ``crops`` and ``alt`` from an attachment.

    The URL loses its query string. Configured crops and alt text win; alt
    falls back to the attachment's alt text, then its caption, then its
    excerpt.
    """
    config = dict(config)
    config["attachment_id"] = attachment.id
    config["url"] = ImageTransformChain(attachment.url).base_url if attachment.url else ""
    if not config.get("crops"):
        config["crops"] = {name: coords for name, coords in attachment.crops.items() if coords}
    if not config.get("alt"):
        config["alt"] = attachment.alt or attachment.caption or attachment.excerpt
    return config


def image_definition(settings: ImageSettings) -> ComponentDefinition:
    """
    Build the ``image`` definition bound to a settings object.

    Without a configured ``url`` the image shows the current document's
    featured image.
    """

    def transform(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
        config = node.config
        document = current_document(data.get("postId"), context)
        if not config.get("url") and document is not None and document.featured_image is not None:
            config = apply_attachment(config, document.featured_image)
        return node.with_config(configure_for_size(config, settings))

    return ComponentDefinition(
        name="image",
        default_config=copy.deepcopy(DEFAULT_CONFIG),
        data_requirements=dict(POST_ID_REQUIREMENT),
        transform=transform,
        description="Responsive image with srcset and picture sources",
        source=__name__,
    )


def register(registry: ComponentRegistry, settings: ImageSettings | None = None) -> list[str]:
    """Register the ``image`` definition."""
    registry.register("image", image_definition(settings or ImageSettings()))
    return ["image"]
