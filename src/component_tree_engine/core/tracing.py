"""Resolution tracing and debugging utilities."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TraceLevel(Enum):
    """Level of tracing detail."""
    NONE = 0      # No tracing
    ERRORS = 1    # Only trace nodes that failed or hit the depth bound
    STEPS = 2     # Trace each definition application
    DETAILED = 3  # Trace with resolved data and config


@dataclass
class ResolutionTrace:
    """Record of one definition application at one tree position."""
    node_index: int
    component_type: str
    depth: int
    timestamp: float
    duration_ms: float = 0.0

    resolved_data: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)
    result_type: str | None = None  # Type of the replacement, "text" or None when dropped

    success: bool = True
    error: str | None = None
    error_type: str | None = None
    recovered: bool = False

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        result = f" -> {self.result_type}" if self.result_type and self.result_type != self.component_type else ""
        time_str = f" {self.duration_ms:.1f}ms" if self.duration_ms > 0 else ""
        return f"{status} Node {self.node_index}: {self.component_type}{result} (depth {self.depth}){time_str}"

    def format_detailed(self) -> str:
        """Format trace with full details."""
        lines = [str(self)]

        if self.resolved_data:
            lines.append("  Data:")
            for k, v in self.resolved_data.items():
                v_str = str(v)[:80] + "..." if len(str(v)) > 80 else str(v)
                lines.append(f"    {k}: {v_str}")

        if self.config:
            lines.append("  Config:")
            for k, v in self.config.items():
                v_str = str(v)[:80] + "..." if len(str(v)) > 80 else str(v)
                lines.append(f"    {k}: {v_str}")

        if self.error:
            lines.append(f"  Error: {self.error}")

        return "\n".join(lines)


@dataclass
class ResolutionTracer:
    """Collects traces while a tree is resolved."""
    level: TraceLevel = TraceLevel.ERRORS
    traces: list[ResolutionTrace] = field(default_factory=list)
    _node_counter: int = 0

    def start(
        self,
        component_type: str,
        depth: int,
        resolved_data: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
    ) -> ResolutionTrace:
        """Start tracing a definition application."""
        detailed = self.level == TraceLevel.DETAILED
        trace = ResolutionTrace(
            node_index=self._node_counter,
            component_type=component_type,
            depth=depth,
            timestamp=time.time(),
            resolved_data=dict(resolved_data or {}) if detailed else {},
            config=dict(config or {}) if detailed else {},
        )
        self._node_counter += 1
        return trace

    def end(
        self,
        trace: ResolutionTrace,
        result_type: str | None = None,
        error: Exception | str | None = None,
        recovered: bool = False,
    ) -> None:
        """Complete a trace."""
        trace.duration_ms = (time.time() - trace.timestamp) * 1000
        trace.result_type = result_type

        if error:
            trace.success = False
            trace.error = str(error)
            trace.error_type = type(error).__name__ if isinstance(error, Exception) else "ResolutionWarning"
            trace.recovered = recovered

        if self.level == TraceLevel.NONE:
            return
        elif self.level == TraceLevel.ERRORS and trace.success:
            return

        self.traces.append(trace)

    def get_error_traces(self) -> list[ResolutionTrace]:
        """Get all traces with errors."""
        return [t for t in self.traces if not t.success]

    def format_summary(self) -> str:
        """Format a summary of all traces."""
        if not self.traces:
            return "No traces recorded"

        total = len(self.traces)
        errors = len(self.get_error_traces())
        recovered = len([t for t in self.traces if t.recovered])

        lines = [
            "Resolution Trace Summary:",
            f"  Total nodes traced: {total}",
            f"  Errors: {errors}",
            f"  Recovered: {recovered}",
        ]

        if errors > 0:
            lines.append("\nError nodes:")
            for t in self.get_error_traces():
                lines.append(f"  {t}")

        return "\n".join(lines)
