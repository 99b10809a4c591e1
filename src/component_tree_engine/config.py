"""Configuration helpers for component-tree-engine."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from . import settings
from .core.tracing import TraceLevel


logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).parent.parent.parent
LOCAL_CONFIG_PATH = PACKAGE_ROOT / "config.local.yaml"

DEFAULT_CONFIG = {
    "definition_dirs": [str(settings.user_definitions_dir)],
    "server": {
        "host": settings.server_host,
        "port": settings.server_port,
    },
    "resolution": {
        "max_depth": settings.resolution_max_depth,
        "trace_level": settings.resolution_trace_level,
    },
    "images": {
        "sizes": {},
        "breakpoints": {},
        "missing_image_url": "",
    },
}

TRACE_LEVELS = {level.name.lower(): level for level in TraceLevel}


def config_defaults() -> dict:
    """Return default configuration values."""
    return copy.deepcopy(DEFAULT_CONFIG)


def config_schema() -> dict:
    """Return JSON Schema for configuration."""
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "definition_dirs": {"type": "array", "items": {"type": "string"}},
            "server": {
                "type": "object",
                "properties": {
                    "host": {"type": "string"},
                    "port": {"type": "integer", "minimum": 1, "maximum": 65535},
                },
                "additionalProperties": False,
            },
            "resolution": {
                "type": "object",
                "properties": {
                    "max_depth": {"type": "integer", "minimum": 1},
                    "trace_level": {"type": "string", "enum": sorted(TRACE_LEVELS)},
                },
                "additionalProperties": False,
            },
            "images": {
                "type": "object",
                "properties": {
                    "sizes": {"type": "object"},
                    "breakpoints": {"type": "object", "additionalProperties": {"type": "string"}},
                    "missing_image_url": {"type": "string"},
                },
                "additionalProperties": False,
            },
        },
        "additionalProperties": False,
    }


def _deep_merge(base: dict, update: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load resolved configuration (defaults merged with config file)."""
    path = config_path or LOCAL_CONFIG_PATH
    base = config_defaults()
    file_config = _load_config_file(path)
    return _deep_merge(base, file_config)


def trace_level_from_config(config: dict) -> TraceLevel:
    name = str(config.get("resolution", {}).get("trace_level", "errors")).lower()
    return TRACE_LEVELS.get(name, TraceLevel.ERRORS)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    """Validate a config dict against the schema."""
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    allowed_top = {"definition_dirs", "server", "resolution", "images"}
    for key in data:
        if key not in allowed_top:
            errors.append(f"Unknown config key: {key}")

    if "definition_dirs" in data:
        dirs = data["definition_dirs"]
        if not isinstance(dirs, list) or not all(isinstance(d, str) for d in dirs):
            errors.append("definition_dirs must be a list of paths")

    if "server" in data and isinstance(data["server"], dict):
        for key in data["server"]:
            if key not in {"host", "port"}:
                errors.append(f"Unknown server key: {key}")
        port = data["server"].get("port")
        if port is not None and (not _is_int(port) or not (1 <= port <= 65535)):
            errors.append("server.port must be between 1 and 65535")
    elif "server" in data:
        errors.append("server must be an object")

    if "resolution" in data and isinstance(data["resolution"], dict):
        for key in data["resolution"]:
            if key not in {"max_depth", "trace_level"}:
                errors.append(f"Unknown resolution key: {key}")
        max_depth = data["resolution"].get("max_depth")
        if max_depth is not None and (not _is_int(max_depth) or max_depth < 1):
            errors.append("resolution.max_depth must be a positive integer")
        trace_level = data["resolution"].get("trace_level")
        if trace_level is not None and str(trace_level).lower() not in TRACE_LEVELS:
            errors.append(f"resolution.trace_level must be one of {sorted(TRACE_LEVELS)}")
    elif "resolution" in data:
        errors.append("resolution must be an object")

    if "images" in data and isinstance(data["images"], dict):
        for key in data["images"]:
            if key not in {"sizes", "breakpoints", "missing_image_url"}:
                errors.append(f"Unknown images key: {key}")
        for key in ("sizes", "breakpoints"):
            if key in data["images"] and not isinstance(data["images"][key], dict):
                errors.append(f"images.{key} must be an object")
    elif "images" in data:
        errors.append("images must be an object")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    """Validate the config file. Returns list of errors (empty = valid)."""
    path = config_path or LOCAL_CONFIG_PATH
    if not path.exists():
        return []
    data = _load_config_file(path)
    return validate_config_dict(data)
