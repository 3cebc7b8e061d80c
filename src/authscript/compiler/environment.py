"""
Compilation Environment — Everything a compilation may consult.

The environment is immutable. Descending into a dependent script
produces a new environment with a longer ancestry chain; the caller's
environment is never touched, so sibling and concurrent compilations
cannot see each other's ancestry.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from authscript.vocabulary import LockingScriptType, TimeLockType, VariableType
from authscript.compiler.toolchain import ScriptToolchain, StateConstructor

E = TypeVar("E", VariableType, LockingScriptType, TimeLockType)


# =============================================================================
# COMPILATION DATA
# =============================================================================

class OperationData(BaseModel):
    """
    Transaction-level values available to the compiler.

    Hosts may attach further operation fields; they are kept as extras.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    locktime: int | None = Field(
        default=None,
        ge=0,
        le=0xFFFFFFFF,
        description="Transaction locktime (block height below 500,000,000, else timestamp)",
    )


class CompilationData(BaseModel):
    """
    Variable values supplied for one top-level compilation.

    Passed unchanged through every recursive sub-compilation.
    """
    model_config = ConfigDict(frozen=True)

    bytecode: dict[str, bytes] = Field(
        default_factory=dict,
        description="Pre-computed bytecode values keyed by variable identifier",
    )
    operation_data: OperationData | None = Field(
        default=None,
        description="Transaction context (locktime, ...)",
    )
    current_block_height: int | None = Field(default=None, ge=0)
    current_block_time: int | None = Field(default=None, ge=0)

    @property
    def locktime(self) -> int | None:
        return None if self.operation_data is None else self.operation_data.locktime


# =============================================================================
# COMPILATION ENVIRONMENT
# =============================================================================

def _classify(name: str, mapping: Mapping[str, Any], enum: type[E]) -> dict[str, E]:
    """Coerce a classification map's values to `enum`."""
    classified = {}
    for key, value in mapping.items():
        try:
            classified[key] = enum(value)
        except ValueError:
            allowed = ", ".join(repr(member.value) for member in enum)
            raise ValueError(
                f"{name}[{key!r}]: {value!r} is not one of {allowed}"
            ) from None
    return classified


@dataclass(frozen=True)
class CompilationEnvironment:
    """
    Script sources, collaborators, and classifications for compilation.

    Classification maps are sparse: most scripts have no entry, and the
    lookup methods return the explicit no-classification variant.
    String values are accepted and coerced; anything outside the
    classification enums raises ValueError at construction.
    """
    # Script identifier -> template text
    scripts: Mapping[str, str]
    toolchain: ScriptToolchain

    # Variable identifier -> variable type
    variables: Mapping[str, VariableType] = field(default_factory=dict)

    # Evaluation capabilities (None for pure-data compilations)
    vm: Any = None
    create_state: StateConstructor | None = None

    # Classifications
    locking_script_types: Mapping[str, LockingScriptType] = field(default_factory=dict)
    unlocking_scripts: Mapping[str, str] = field(default_factory=dict)  # unlocking id -> locking id
    unlocking_script_time_lock_types: Mapping[str, TimeLockType] = field(default_factory=dict)

    # Ancestry chain of the compilation in progress
    source_script_ids: tuple[str, ...] = ()

    # Optional ceiling on the ancestry chain length
    max_dependency_depth: int | None = None

    def __post_init__(self):
        # Unknown classifications fail here, not in the middle of a compile
        for name, enum in (
            ("variables", VariableType),
            ("locking_script_types", LockingScriptType),
            ("unlocking_script_time_lock_types", TimeLockType),
        ):
            object.__setattr__(self, name, _classify(name, getattr(self, name), enum))

    def locking_script_type(self, script_id: str) -> LockingScriptType:
        """Locking type of a script (STANDARD when unclassified)."""
        return self.locking_script_types.get(script_id, LockingScriptType.STANDARD)

    def unlocked_script(self, script_id: str) -> str | None:
        """ID of the locking script an unlocking script unlocks, if any."""
        return self.unlocking_scripts.get(script_id)

    def time_lock_type(self, script_id: str) -> TimeLockType:
        """Locktime type a script requires (NONE when unclassified)."""
        return self.unlocking_script_time_lock_types.get(script_id, TimeLockType.NONE)

    def with_source_script(self, script_id: str) -> "CompilationEnvironment":
        """Return copy with script_id appended to the ancestry chain."""
        return replace(self, source_script_ids=(*self.source_script_ids, script_id))

    def for_scripts(
        self,
        scripts: Mapping[str, str],
        variables: Mapping[str, VariableType],
        vm: Any = None,
    ) -> "CompilationEnvironment":
        """
        Derive an unclassified environment for synthetic scripts.

        Shares the toolchain and state constructor; drops every
        classification and starts a fresh ancestry chain.
        """
        return CompilationEnvironment(
            scripts=dict(scripts),
            toolchain=self.toolchain,
            variables=dict(variables),
            vm=vm,
            create_state=self.create_state,
            max_dependency_depth=self.max_dependency_depth,
        )


def create_environment(
    scripts: Mapping[str, str],
    toolchain: ScriptToolchain,
    **kwargs: Any,
) -> CompilationEnvironment:
    """Factory for compilation environments."""
    return CompilationEnvironment(scripts=dict(scripts), toolchain=toolchain, **kwargs)
