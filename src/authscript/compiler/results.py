"""
Compilation Results — Tagged outcome of every compile operation.

A result is exactly one of CompilationSuccess or CompilationFailure.
Callers branch on `success` (or `error_type`) and only read `bytecode`
from a success; a failure has no `bytecode` attribute at all.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from authscript.vocabulary import CompilationErrorType, TransformType


@dataclass(frozen=True)
class SourceRange:
    """
    Location of an error in a script template.

    Lines and columns are 1-based; the all-zero range means the error
    has no specific location.
    """
    start_line: int = 0
    start_column: int = 0
    end_line: int = 0
    end_column: int = 0

    @classmethod
    def empty(cls) -> "SourceRange":
        return cls()

    @classmethod
    def point(cls, line: int, column: int) -> "SourceRange":
        return cls(line, column, line, column)

    @property
    def is_empty(self) -> bool:
        return self == SourceRange.empty()

    def to_dict(self) -> dict[str, int]:
        return {
            "startLineNumber": self.start_line,
            "startColumn": self.start_column,
            "endLineNumber": self.end_line,
            "endColumn": self.end_column,
        }


@dataclass(frozen=True)
class CompilationError:
    """Single located error message."""
    error: str
    range: SourceRange = field(default_factory=SourceRange.empty)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "range": self.range.to_dict()}


@dataclass(frozen=True)
class CompilationSuccess:
    """
    Successful compilation.

    Carries the final bytecode plus every intermediate artifact. When a
    protocol transform was applied, the artifacts are those of the raw
    compilation and `transformed` names the transform.
    """
    bytecode: bytes
    parse: Any
    resolve: Any
    reduce: Any
    transformed: TransformType | None = None

    success = True

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": True,
            "bytecode": self.bytecode.hex(),
        }
        if self.transformed is not None:
            data["transformed"] = self.transformed.value
        return data


@dataclass(frozen=True)
class CompilationFailure:
    """
    Failed compilation.

    Holds whichever artifacts were produced before the failing stage.
    """
    error_type: CompilationErrorType
    errors: list[CompilationError]
    parse: Any = None
    resolve: Any = None
    reduce: Any = None

    success = False

    def __post_init__(self):
        if not self.errors:
            raise ValueError("A failed compilation must carry at least one error")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "errorType": self.error_type.value,
            "errors": [e.to_dict() for e in self.errors],
        }


CompilationResult = Union[CompilationSuccess, CompilationFailure]


def environment_failure(message: str) -> CompilationFailure:
    """Failure detected before parsing: parse-kind, no location."""
    return CompilationFailure(
        error_type=CompilationErrorType.PARSE,
        errors=[CompilationError(message, SourceRange.empty())],
    )
