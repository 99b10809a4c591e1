#!/usr/bin/env python3
"""
Component Tree Engine Runner

Usage:
    component-tree <tree.json>                       # Resolve and print wire JSON
    component-tree <tree.json> --context documentId=42
    component-tree <tree.json> --validate            # Validate without resolving
    component-tree --list-types                      # List registered definitions
    component-tree --serve                           # Start the HTTP service

Options:
    --definitions DIR   Extra definition directory (repeatable)
    --config PATH       Config file (default: config.local.yaml)
    --max-depth N       Resolution depth bound
    --strict            Exit non-zero when any node recorded an error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any

from .components import build_registry
from .config import load_config, trace_level_from_config, validate_config_file
from .core import (
    ComponentRegistry,
    DefinitionError,
    ResolutionError,
    Resolver,
    SerializationError,
    TraceLevel,
    request_scope,
    serialize,
    validate_tree,
)


logger = logging.getLogger(__name__)


class OutputMode(Enum):
    """Controls how much the runner logs."""
    QUIET = 0
    NORMAL = 1
    DEBUG = 2


def setup_logging(output_mode: OutputMode) -> None:
    """Configure logging based on output mode."""
    if output_mode == OutputMode.QUIET:
        level = logging.WARNING
    elif output_mode == OutputMode.DEBUG:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    # Suppress library loggers unless in debug mode
    if output_mode != OutputMode.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_context_args(context_args: list[str] | None) -> dict[str, Any]:
    """Parse --context key=value arguments. Values are JSON-decoded when possible."""
    if not context_args:
        return {}

    entries: dict[str, Any] = {}
    for arg in context_args:
        if "=" not in arg:
            logger.warning(f"Invalid context format '{arg}', expected KEY=VALUE")
            continue
        key, value = arg.split("=", 1)
        try:
            entries[key.strip()] = json.loads(value)
        except json.JSONDecodeError:
            entries[key.strip()] = value
    return entries


def load_tree(path: Path) -> Any:
    """Load a raw tree (a node or a list of nodes) from JSON."""
    with open(path, "r") as f:
        return json.load(f)


def run_resolve(
    tree_path: Path,
    registry: ComponentRegistry,
    context_entries: dict[str, Any],
    max_depth: int,
    trace_level: TraceLevel = TraceLevel.ERRORS,
    strict: bool = False,
    validate_only: bool = False,
    indent: int | None = 2,
) -> int:
    """Resolve a tree file and print the wire JSON. Returns exit code."""
    logger.info(f"Loading tree: {tree_path}")
    raw = load_tree(tree_path)
    roots = raw if isinstance(raw, list) else [raw]

    failed = False
    for root in roots:
        report = validate_tree(root, registry)
        for warning in report.warnings:
            logger.warning(str(warning))
        if not report.valid:
            print(report.format())
            failed = True
    if failed:
        return 1
    if validate_only:
        print("✓ Tree is valid")
        return 0

    resolver = Resolver(registry, max_depth=max_depth, trace_level=trace_level, strict=strict)
    output = []
    with request_scope(context_entries) as context:
        for root in roots:
            try:
                result = resolver.resolve_with_report(root, context)
            except ResolutionError as e:
                logger.error(str(e))
                for record in e.records:
                    logger.error(f"  {record}")
                return 1
            logger.info(
                f"Resolved {result.stats['nodes_visited']} nodes, "
                f"{result.stats['definitions_applied']} definitions applied"
            )
            if result.traces:
                logger.debug(result.trace_summary())
            for trace in result.traces:
                logger.debug(trace.format_detailed())
            if result.tree is not None:
                try:
                    output.append(serialize(result.tree))
                except SerializationError as e:
                    logger.error(f"Serialization failed at {e.path}: {e}")
                    return 1

    print(json.dumps(output if isinstance(raw, list) else (output[0] if output else None), indent=indent, ensure_ascii=False))
    return 0


def serve(host: str, port: int, reload: bool = False) -> int:
    """Start the HTTP service with uvicorn."""
    import uvicorn

    print(f"Starting Component Tree Engine on http://{host}:{port}")
    print(f"API docs: http://{host}:{port}/docs")
    uvicorn.run(
        "component_tree_engine.server.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Resolve component trees into their wire format",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("tree", nargs="?", type=Path, help="Tree JSON file (a node or a list of nodes)")
    parser.add_argument("--context", action="append", metavar="KEY=VALUE", help="Context store entry (repeatable)")
    parser.add_argument("--definitions", action="append", metavar="DIR", help="Extra definition directory (repeatable)")
    parser.add_argument("--config", type=Path, default=None, help="Config file path")
    parser.add_argument("--max-depth", type=int, default=None, help="Resolution depth bound")
    parser.add_argument("--strict", action="store_true", help="Fail when any node recorded an error")
    parser.add_argument("--validate", action="store_true", help="Validate the tree without resolving")
    parser.add_argument("--list-types", action="store_true", help="List registered component types")
    parser.add_argument("--docs", action="store_true", help="Print markdown docs for registered types")
    parser.add_argument("--serve", action="store_true", help="Start the HTTP service")
    parser.add_argument("--host", default=None, help="Host to bind to when serving")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on when serving")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload when serving")
    parser.add_argument("--compact", action="store_true", help="Print JSON without indentation")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    verbosity.add_argument("--debug", action="store_true", help="Log everything, including traces")

    args = parser.parse_args(argv)

    output_mode = OutputMode.QUIET if args.quiet else OutputMode.DEBUG if args.debug else OutputMode.NORMAL
    setup_logging(output_mode)

    config_errors = validate_config_file(args.config)
    if config_errors:
        for error in config_errors:
            logger.error(f"Config: {error}")
        return 1
    config = load_config(args.config)

    if args.serve:
        server = config["server"]
        return serve(args.host or server["host"], args.port or server["port"], reload=args.reload)

    try:
        registry = build_registry(config, args.definitions)
    except DefinitionError as e:
        logger.error(str(e))
        for error in e.errors:
            logger.error(f"  {error}")
        return 1

    if args.list_types:
        for comp_type in registry.list_types():
            info = registry.describe(comp_type)
            desc = f" - {info['description']}" if info and info["description"] else ""
            print(f"{comp_type}{desc}")
        return 0

    if args.docs:
        print(registry.generate_docs())
        return 0

    if args.tree is None:
        parser.print_help()
        return 1

    if output_mode == OutputMode.DEBUG:
        trace_level = TraceLevel.DETAILED
    else:
        trace_level = trace_level_from_config(config)

    return run_resolve(
        args.tree,
        registry,
        parse_context_args(args.context),
        max_depth=args.max_depth or config["resolution"]["max_depth"],
        trace_level=trace_level,
        strict=args.strict,
        validate_only=args.validate,
        indent=None if args.compact else 2,
    )


if __name__ == "__main__":
    sys.exit(main())
