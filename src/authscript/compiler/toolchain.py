"""
Script Toolchain — Protocols for the external compilation collaborators.

The compiler drives a host-supplied toolchain through three stages:
parse, resolve, reduce. It never looks inside parse trees, resolved
trees, virtual machines, or program states; it only threads them
through and reads the result shapes defined here.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, Union, runtime_checkable

from authscript.compiler.results import CompilationError

if TYPE_CHECKING:
    from authscript.compiler.environment import CompilationData, CompilationEnvironment


# =============================================================================
# PARSE RESULTS
# =============================================================================

@dataclass(frozen=True)
class SourcePosition:
    """1-based line/column of a parse failure."""
    line: int
    column: int


@dataclass(frozen=True)
class ParseSuccess:
    """Parser accepted the script."""
    tree: Any

    status = True


@dataclass(frozen=True)
class ParseFailure:
    """Parser rejected the script at `index`, wanting one of `expected`."""
    expected: list[str]
    index: SourcePosition

    status = False


ParseResult = Union[ParseSuccess, ParseFailure]


# =============================================================================
# REDUCTION
# =============================================================================

@dataclass(frozen=True)
class ScriptReduction:
    """
    Output of reducing a resolved script.

    Exactly one of `bytecode` or `errors` is set. `states` holds any
    intermediate program states the reducer kept for debugging.
    """
    bytecode: bytes | None = None
    errors: list[CompilationError] | None = None
    states: list[Any] | None = None
    debug: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if (self.bytecode is None) == (self.errors is None):
            raise ValueError("A reduction must carry exactly one of bytecode or errors")
        if self.errors is not None and not self.errors:
            raise ValueError("A failed reduction must carry at least one error")


# =============================================================================
# COLLABORATOR PROTOCOLS
# =============================================================================

@runtime_checkable
class AuthenticationVirtualMachine(Protocol):
    """
    Opaque virtual machine capability.

    Passed through to the reducer untouched; any object qualifies.
    """


StateConstructor = Callable[..., Any]


@runtime_checkable
class ScriptToolchain(Protocol):
    """
    Protocol for the parser, identifier resolver, and reducer.

    Allows plugging in any script language implementation. Resolvers
    that resolve references to other scripts should compile them with
    `authscript.compiler.compile_raw` and the environment they were
    created with, so circular dependencies are detected.
    """

    def parse(self, script: str) -> ParseResult:
        """Parse script text into a tree."""
        ...

    def create_resolver(
        self,
        data: "CompilationData",
        environment: "CompilationEnvironment",
    ) -> Any:
        """Create an identifier resolver bound to data and environment."""
        ...

    def resolve(self, tree: Any, resolver: Any) -> Any:
        """Resolve every identifier in a parse tree."""
        ...

    def collect_resolution_errors(self, resolved: Any) -> list[CompilationError]:
        """Flatten the errors embedded in a resolved tree, in order."""
        ...

    def reduce(
        self,
        resolved: Any,
        vm: Any,
        create_state: StateConstructor | None,
    ) -> ScriptReduction:
        """Fold a resolved tree into bytecode."""
        ...
