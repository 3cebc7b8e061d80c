"""
Configuration — Runtime settings for the compiler and CLI.

Values come from the constructor, falling back to AUTHSCRIPT_* environment
variables, falling back to defaults.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass
class CompilerConfig:
    """Configuration for compilers built by `create_compiler` and the CLI."""
    max_dependency_depth: int | None = None  # None: bounded by cycle detection only
    log_level: str = "WARNING"
    log_json: bool = False

    def __post_init__(self):
        if self.max_dependency_depth is not None and self.max_dependency_depth < 1:
            raise ValueError("max_dependency_depth must be at least 1")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")


def load_config(environ: Mapping[str, str] | None = None) -> CompilerConfig:
    """
    Build a CompilerConfig from environment variables.

    Reads AUTHSCRIPT_MAX_DEPTH, AUTHSCRIPT_LOG_LEVEL, AUTHSCRIPT_LOG_JSON.
    """
    env = os.environ if environ is None else environ

    depth_raw = env.get("AUTHSCRIPT_MAX_DEPTH", "").strip()
    try:
        max_depth = int(depth_raw) if depth_raw else None
    except ValueError:
        raise ValueError(f"AUTHSCRIPT_MAX_DEPTH must be an integer, got {depth_raw!r}") from None

    json_raw = env.get("AUTHSCRIPT_LOG_JSON", "").strip().lower()
    if json_raw not in _TRUTHY | _FALSY:
        raise ValueError(f"AUTHSCRIPT_LOG_JSON must be a boolean, got {json_raw!r}")

    return CompilerConfig(
        max_dependency_depth=max_depth,
        log_level=env.get("AUTHSCRIPT_LOG_LEVEL", "WARNING").strip() or "WARNING",
        log_json=json_raw in _TRUTHY,
    )
