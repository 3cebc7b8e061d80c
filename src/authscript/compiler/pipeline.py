"""
Stage Pipeline — Parse, resolve, and reduce one script body.

Each stage short-circuits on failure. Whatever artifacts were produced
before the failing stage are kept on the result for debugging.
"""

from authscript.vocabulary import CompilationErrorType
from authscript.compiler.diagnostics import describe_expected_input
from authscript.compiler.environment import CompilationData, CompilationEnvironment
from authscript.compiler.results import (
    CompilationError,
    CompilationFailure,
    CompilationResult,
    CompilationSuccess,
    SourceRange,
)
from authscript.observability.logging import get_logger

logger = get_logger("pipeline")


def compile_body(
    script: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Compile raw script text.

    Generally for internal use; `compile_script` is the recommended
    entry point. Failures are returned, never raised.
    """
    toolchain = environment.toolchain

    # 1. Parse
    parsed = toolchain.parse(script)
    if not parsed.status:
        logger.debug(
            "Parse failed at %d:%d", parsed.index.line, parsed.index.column
        )
        return CompilationFailure(
            error_type=CompilationErrorType.PARSE,
            errors=[
                CompilationError(
                    describe_expected_input(parsed.expected),
                    SourceRange.point(parsed.index.line, parsed.index.column),
                )
            ],
        )

    # 2. Resolve (collect every error, not just the first)
    resolver = toolchain.create_resolver(data, environment)
    resolved = toolchain.resolve(parsed.tree, resolver)
    resolution_errors = toolchain.collect_resolution_errors(resolved)
    if resolution_errors:
        logger.debug("Resolution produced %d error(s)", len(resolution_errors))
        return CompilationFailure(
            error_type=CompilationErrorType.RESOLVE,
            errors=list(resolution_errors),
            parse=parsed.tree,
            resolve=resolved,
        )

    # 3. Reduce
    reduction = toolchain.reduce(resolved, environment.vm, environment.create_state)
    if reduction.errors is not None:
        logger.debug("Reduction produced %d error(s)", len(reduction.errors))
        return CompilationFailure(
            error_type=CompilationErrorType.REDUCE,
            errors=list(reduction.errors),
            parse=parsed.tree,
            resolve=resolved,
            reduce=reduction,
        )

    return CompilationSuccess(
        bytecode=reduction.bytecode,
        parse=parsed.tree,
        resolve=resolved,
        reduce=reduction,
    )
