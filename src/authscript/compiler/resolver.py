"""
Dependency Resolver — Compile a script by identifier.

Looks the script up in the environment, refuses circular dependencies,
and hands the text to the stage pipeline with an extended ancestry chain.
"""

from authscript.compiler.environment import CompilationData, CompilationEnvironment
from authscript.compiler.pipeline import compile_body
from authscript.compiler.results import CompilationResult, environment_failure
from authscript.observability.logging import LogContext, get_logger
from authscript.observability.metrics import get_metrics

logger = get_logger("resolver")


def compile_raw(
    script_id: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Compile a script by ID without protocol transforms.

    Toolchain resolvers compile referenced scripts through this function,
    passing the environment they were created with. Cycle detection is
    scoped to that environment's ancestry chain, never global.
    Log records emitted while it runs carry the script ID and its
    depth, the number of scripts above it in the ancestry chain.
    """
    depth = len(environment.source_script_ids)
    with LogContext(script_id=script_id, depth=depth):
        return _compile_raw(script_id, data, environment)


def _compile_raw(
    script_id: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    script = environment.scripts.get(script_id)
    if script is None:
        logger.warning("Unknown script ID %r", script_id)
        return environment_failure(
            f'No script with an ID of "{script_id}" was provided in the compilation environment.'
        )

    ancestry = environment.source_script_ids
    if script_id in ancestry:
        logger.warning("Circular dependency: %s -> %s", " -> ".join(ancestry), script_id)
        get_metrics().circular_dependencies.inc()
        return environment_failure(
            f'A circular dependency was encountered: script "{script_id}" relies on itself '
            f"to be generated. (Source scripts: {' → '.join(ancestry)})"
        )

    limit = environment.max_dependency_depth
    if limit is not None and len(ancestry) >= limit:
        logger.warning("Dependency depth %d exceeded compiling %r", limit, script_id)
        return environment_failure(
            f'Compiling script "{script_id}" exceeds the maximum script dependency depth '
            f"of {limit}. (Source scripts: {' → '.join(ancestry)})"
        )

    logger.debug("Compiling %r (depth %d)", script_id, len(ancestry))
    get_metrics().dependency_depth.observe(len(ancestry))
    return compile_body(script, data, environment.with_source_script(script_id))
