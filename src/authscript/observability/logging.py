"""
Logging — Compilation trace on every log record.

A top-level compilation and the dependency and P2SH sub-compilations it
triggers share one compilation ID. Each `compile_raw` descent narrows the
trace to the script being compiled and its depth in the ancestry chain,
so a record logged three scripts deep says which script, at which depth,
under which compilation.
"""

import logging
import json
import sys
from contextvars import ContextVar
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class CompilationTrace:
    """Where in a compilation the current code is running."""
    compilation_id: str | None = None
    script_id: str | None = None
    depth: int = 0


_trace: ContextVar[CompilationTrace] = ContextVar(
    "compilation_trace", default=CompilationTrace()
)

_KEEP = object()


def current_trace() -> CompilationTrace:
    return _trace.get()


def set_compilation_id(cid: UUID | str | None) -> None:
    """Set compilation ID for current context."""
    _trace.set(replace(_trace.get(), compilation_id=str(cid) if cid else None))


def get_compilation_id() -> str | None:
    return _trace.get().compilation_id


class CompilationTraceFilter(logging.Filter):
    """Copies the current trace onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        trace = _trace.get()
        record.compilation_id = trace.compilation_id or "-"
        record.script_id = trace.script_id
        record.depth = trace.depth
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, trace fields included."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "compilation_id": getattr(record, "compilation_id", None),
        }
        script_id = getattr(record, "script_id", None)
        if script_id is not None:
            entry["script_id"] = script_id
            entry["depth"] = getattr(record, "depth", 0)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ReadableFormatter(logging.Formatter):
    """
    Terminal format: ``LEVEL [cid8 script@depth] logger: message``.
    """

    def format(self, record: logging.LogRecord) -> str:
        cid = getattr(record, "compilation_id", "-")
        where = cid[:8] if cid and cid != "-" else "-"
        script_id = getattr(record, "script_id", None)
        if script_id is not None:
            where += f" {script_id}@{getattr(record, 'depth', 0)}"

        line = f"{record.levelname:<7} [{where}] {record.name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: int | str = logging.WARNING,
    json_format: bool = False,
    stream: Any = None,
) -> None:
    """
    Install one handler on the `authscript` logger.

    Args:
        level: Logging level (int or level name)
        json_format: Use JSON format (for log shipping)
        stream: Output stream (default: stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(CompilationTraceFilter())
    handler.setFormatter(JSONFormatter() if json_format else ReadableFormatter())

    root = logging.getLogger("authscript")
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"authscript.{name}")


class LogContext:
    """
    Narrow the compilation trace for a block.

    Fields left out keep their current value.

    Usage:
        with LogContext(compilation_id):
            with LogContext(script_id="lock", depth=1):
                logger.debug("...")  # tagged with both
    """

    def __init__(
        self,
        compilation_id: UUID | str | None | object = _KEEP,
        *,
        script_id: str | None | object = _KEEP,
        depth: int | object = _KEEP,
    ):
        self._changes: dict[str, Any] = {}
        if compilation_id is not _KEEP:
            self._changes["compilation_id"] = str(compilation_id) if compilation_id else None
        if script_id is not _KEEP:
            self._changes["script_id"] = script_id
        if depth is not _KEEP:
            self._changes["depth"] = depth
        self._token = None

    def __enter__(self):
        self._token = _trace.set(replace(_trace.get(), **self._changes))
        return self

    def __exit__(self, *args):
        if self._token is not None:
            _trace.reset(self._token)
