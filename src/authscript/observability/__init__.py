"""
Observability — Logging and metrics for the compiler.

Provides:
- Log records tagged with compilation ID, script ID, and ancestry depth
- In-process counters and histograms, readable as a snapshot
"""

from authscript.observability.logging import (
    CompilationTrace,
    CompilationTraceFilter,
    current_trace,
    set_compilation_id,
    get_compilation_id,
    configure_logging,
    get_logger,
    LogContext,
    JSONFormatter,
    ReadableFormatter,
)
from authscript.observability.metrics import (
    Counter,
    LabeledCounter,
    Histogram,
    MetricsRegistry,
    get_metrics,
    reset_metrics,
)

__all__ = [
    # Logging
    "CompilationTrace",
    "CompilationTraceFilter",
    "current_trace",
    "set_compilation_id",
    "get_compilation_id",
    "configure_logging",
    "get_logger",
    "LogContext",
    "JSONFormatter",
    "ReadableFormatter",
    # Metrics
    "Counter",
    "LabeledCounter",
    "Histogram",
    "MetricsRegistry",
    "get_metrics",
    "reset_metrics",
]
