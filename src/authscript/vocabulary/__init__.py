"""
Vocabulary — Enumerated types forming the shared language of the compiler.
"""

from authscript.vocabulary.enums import (
    # Outcomes
    CompilationErrorType,
    TransformType,
    # Classifications
    LockingScriptType,
    TimeLockType,
    VariableType,
    # Constants
    LOCKTIME_TIMESTAMP_THRESHOLD,
)

__all__ = [
    "CompilationErrorType",
    "TransformType",
    "LockingScriptType",
    "TimeLockType",
    "VariableType",
    "LOCKTIME_TIMESTAMP_THRESHOLD",
]
