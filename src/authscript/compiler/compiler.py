"""
Script Compiler — Top-level compilation entry point.

Order of work:
1. Locktime-type enforcement (before any parsing)
2. Dependency resolution and the stage pipeline
3. Protocol transforms on the successful raw result
"""

import time
from dataclasses import replace
from typing import Any
from uuid import uuid4

from authscript.config import CompilerConfig
from authscript.compiler.environment import (
    CompilationData,
    CompilationEnvironment,
    create_environment,
)
from authscript.compiler.pipeline import compile_body
from authscript.compiler.resolver import compile_raw
from authscript.compiler.results import CompilationFailure, CompilationResult
from authscript.compiler.transforms import apply_transforms, check_locktime_type
from authscript.observability.logging import LogContext, get_compilation_id, get_logger
from authscript.observability.metrics import get_metrics

logger = get_logger("compiler")


class CompilationFailedError(Exception):
    """Raised by `generate_bytecode` when compilation fails."""

    def __init__(self, script_id: str, result: CompilationFailure):
        self.script_id = script_id
        self.result = result
        first = result.errors[0].error
        more = f" (+{len(result.errors) - 1} more)" if len(result.errors) > 1 else ""
        super().__init__(
            f'Compiling "{script_id}" failed at the {result.error_type.value} stage: {first}{more}'
        )


def compile_script(
    script_id: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Compile a script by ID, applying locktime and P2SH rules.

    This is the recommended entry point. Returns a CompilationSuccess or
    CompilationFailure; never raises for compilation problems.
    """
    # Share one compilation ID across every sub-compilation of this call
    with LogContext(get_compilation_id() or uuid4()):
        started = time.perf_counter()
        result = _compile(script_id, data, environment)
        elapsed = time.perf_counter() - started

        if result.success:
            transform = result.transformed.value if result.transformed else None
            get_metrics().record_compilation("success", elapsed, transform)
            logger.info(
                "Compiled %r: %d byte(s)%s",
                script_id,
                len(result.bytecode),
                f" ({transform})" if transform else "",
            )
        else:
            get_metrics().record_compilation(result.error_type.value, elapsed)
            logger.info(
                "Compiling %r failed at %s stage with %d error(s)",
                script_id,
                result.error_type.value,
                len(result.errors),
            )
        return result


def _compile(
    script_id: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    mismatch = check_locktime_type(script_id, data, environment)
    if mismatch is not None:
        return mismatch

    raw = compile_raw(script_id, data, environment)
    if not raw.success:
        return raw

    return apply_transforms(script_id, raw, data, environment)


class ScriptCompiler:
    """
    Compiler bound to one environment.

    Usage:
        compiler = create_compiler(environment)
        result = compiler.compile("lock", data)
        if result.success:
            send(result.bytecode)
    """

    def __init__(
        self,
        environment: CompilationEnvironment,
        config: CompilerConfig | None = None,
    ):
        self.config = config or CompilerConfig()
        depth = self.config.max_dependency_depth
        if depth is not None and environment.max_dependency_depth is None:
            environment = replace(environment, max_dependency_depth=depth)
        self.environment = environment

    def compile(
        self,
        script_id: str,
        data: CompilationData | None = None,
    ) -> CompilationResult:
        """Compile with protocol transforms (see `compile_script`)."""
        return compile_script(script_id, data or CompilationData(), self.environment)

    def compile_raw(
        self,
        script_id: str,
        data: CompilationData | None = None,
    ) -> CompilationResult:
        """Compile by ID, bypassing locktime checks and P2SH transforms."""
        return compile_raw(script_id, data or CompilationData(), self.environment)

    def compile_body(
        self,
        script: str,
        data: CompilationData | None = None,
    ) -> CompilationResult:
        """Compile script text that is not in the environment."""
        return compile_body(script, data or CompilationData(), self.environment)

    def generate_bytecode(
        self,
        script_id: str,
        data: CompilationData | None = None,
    ) -> bytes:
        """
        Compile and return bytecode.

        Raises:
            CompilationFailedError: compilation failed; the failure
                result is available as `.result`.
        """
        result = self.compile(script_id, data)
        if not result.success:
            raise CompilationFailedError(script_id, result)
        return result.bytecode


def create_compiler(
    environment: CompilationEnvironment | None = None,
    config: CompilerConfig | None = None,
    **kwargs: Any,
) -> ScriptCompiler:
    """
    Factory for script compilers.

    Pass a ready environment, or the keyword arguments of
    `create_environment` (scripts, toolchain, ...).
    """
    if environment is None:
        environment = create_environment(**kwargs)
    elif kwargs:
        raise TypeError("Pass either an environment or environment fields, not both")
    return ScriptCompiler(environment, config)
