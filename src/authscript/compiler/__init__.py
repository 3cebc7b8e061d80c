"""
Compiler — Script template compilation to authentication bytecode.

Drives a host-supplied toolchain through parse, resolve, and reduce,
resolves script dependencies without cycles, and applies the P2SH and
locktime-type rules consensus requires.
"""

from authscript.compiler.results import (
    SourceRange,
    CompilationError,
    CompilationSuccess,
    CompilationFailure,
    CompilationResult,
    environment_failure,
)
from authscript.compiler.toolchain import (
    SourcePosition,
    ParseSuccess,
    ParseFailure,
    ParseResult,
    ScriptReduction,
    AuthenticationVirtualMachine,
    StateConstructor,
    ScriptToolchain,
)
from authscript.compiler.environment import (
    OperationData,
    CompilationData,
    CompilationEnvironment,
    create_environment,
)
from authscript.compiler.diagnostics import describe_expected_input
from authscript.compiler.pipeline import compile_body
from authscript.compiler.resolver import compile_raw
from authscript.compiler.transforms import (
    P2SH_LOCKING_SCRIPT,
    P2SH_UNLOCKING_SCRIPT,
    check_locktime_type,
    compile_p2sh_locking,
    compile_p2sh_unlocking,
    apply_transforms,
)
from authscript.compiler.compiler import (
    CompilationFailedError,
    ScriptCompiler,
    compile_script,
    create_compiler,
)

__all__ = [
    # Results
    "SourceRange",
    "CompilationError",
    "CompilationSuccess",
    "CompilationFailure",
    "CompilationResult",
    "environment_failure",
    # Toolchain
    "SourcePosition",
    "ParseSuccess",
    "ParseFailure",
    "ParseResult",
    "ScriptReduction",
    "AuthenticationVirtualMachine",
    "StateConstructor",
    "ScriptToolchain",
    # Environment
    "OperationData",
    "CompilationData",
    "CompilationEnvironment",
    "create_environment",
    # Stages
    "describe_expected_input",
    "compile_body",
    "compile_raw",
    # Transforms
    "P2SH_LOCKING_SCRIPT",
    "P2SH_UNLOCKING_SCRIPT",
    "check_locktime_type",
    "compile_p2sh_locking",
    "compile_p2sh_unlocking",
    "apply_transforms",
    # Entry points
    "CompilationFailedError",
    "ScriptCompiler",
    "compile_script",
    "create_compiler",
]
