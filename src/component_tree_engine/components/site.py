"""Site-wide components referenced from the shipped declaration files."""

from __future__ import annotations

from datetime import date
from typing import Any

from ..core.component import Component
from ..core.context import ContextStore


def footer(node: Component, data: dict[str, Any], context: ContextStore) -> Component:
    """Fill in a copyright line for the current year unless one is configured."""
    if node.get_config("copyright"):
        return node
    holder = node.get_config("copyright_holder")
    line = f"Copyright © {date.today().year}"
    if holder:
        line = f"{line} - {holder}"
    return node.set_config("copyright", line)
