"""
Protocol Transforms — Consensus-required rewrites of compiled bytecode.

Both P2SH transforms are expressed as further compilation: a synthetic
one-script environment is built and compiled through the same toolchain.

- Locktime-type enforcement: height vs. timestamp precondition gate
- P2SH locking: wrap a locking script in a HASH160 equality check
- P2SH unlocking: append a push of the redeem (locking) script
"""

from dataclasses import replace

from authscript.vocabulary import (
    LOCKTIME_TIMESTAMP_THRESHOLD,
    LockingScriptType,
    TimeLockType,
    TransformType,
    VariableType,
)
from authscript.compiler.environment import CompilationData, CompilationEnvironment
from authscript.compiler.resolver import compile_raw
from authscript.compiler.results import (
    CompilationFailure,
    CompilationResult,
    CompilationSuccess,
    environment_failure,
)
from authscript.observability.logging import get_logger

logger = get_logger("transforms")


P2SH_LOCKING_SCRIPT_ID = "p2shLocking"
P2SH_LOCKING_SCRIPT = "OP_HASH160 <$(<lockingBytecode> OP_HASH160)> OP_EQUAL"

P2SH_UNLOCKING_SCRIPT_ID = "p2shUnlocking"
P2SH_UNLOCKING_SCRIPT = "unlockingBytecode <lockingBytecode>"


# =============================================================================
# LOCKTIME-TYPE ENFORCEMENT
# =============================================================================

def check_locktime_type(
    script_id: str,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationFailure | None:
    """
    Check the supplied locktime against the script's locktime type.

    Returns a failure on mismatch, None when the check passes or does
    not apply (no locktime supplied, or no requirement declared).
    """
    locktime = data.locktime
    if locktime is None:
        return None

    required = environment.time_lock_type(script_id)
    if required is TimeLockType.HEIGHT and locktime >= LOCKTIME_TIMESTAMP_THRESHOLD:
        logger.warning("Script %r requires a height locktime, got %d", script_id, locktime)
        return environment_failure(
            f'The script "{script_id}" requires a height-based locktime (less than '
            f"500,000,000), but this transaction uses a timestamp-based locktime "
            f'("{locktime}").'
        )
    if required is TimeLockType.TIMESTAMP and locktime < LOCKTIME_TIMESTAMP_THRESHOLD:
        logger.warning("Script %r requires a timestamp locktime, got %d", script_id, locktime)
        return environment_failure(
            f'The script "{script_id}" requires a timestamp-based locktime (greater than '
            f"or equal to 500,000,000), but this transaction uses a height-based locktime "
            f'("{locktime}").'
        )
    return None


# =============================================================================
# P2SH
# =============================================================================

def compile_p2sh_locking(
    locking_bytecode: bytes,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Compile the P2SH locking script for raw locking bytecode.

    Produces `OP_HASH160 <HASH160(locking_bytecode)> OP_EQUAL`. The hash is
    computed by evaluation, so the environment's virtual machine is used.
    """
    synthetic = environment.for_scripts(
        {P2SH_LOCKING_SCRIPT_ID: P2SH_LOCKING_SCRIPT},
        {"lockingBytecode": VariableType.ADDRESS_DATA},
        vm=environment.vm,
    )
    return compile_raw(
        P2SH_LOCKING_SCRIPT_ID,
        CompilationData(bytecode={"lockingBytecode": locking_bytecode}),
        synthetic,
    )


def compile_p2sh_unlocking(
    unlocking_bytecode: bytes,
    locking_bytecode: bytes,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Compile the P2SH unlocking script: unlocking bytecode, then a push
    of the raw locking (redeem) bytecode. Needs no virtual machine.
    """
    synthetic = environment.for_scripts(
        {P2SH_UNLOCKING_SCRIPT_ID: P2SH_UNLOCKING_SCRIPT},
        {
            "lockingBytecode": VariableType.ADDRESS_DATA,
            "unlockingBytecode": VariableType.ADDRESS_DATA,
        },
    )
    return compile_raw(
        P2SH_UNLOCKING_SCRIPT_ID,
        CompilationData(
            bytecode={
                "lockingBytecode": locking_bytecode,
                "unlockingBytecode": unlocking_bytecode,
            }
        ),
        synthetic,
    )


def apply_transforms(
    script_id: str,
    raw: CompilationSuccess,
    data: CompilationData,
    environment: CompilationEnvironment,
) -> CompilationResult:
    """
    Apply the P2SH transform the script's classification calls for.

    Unclassified scripts get the raw result back unchanged. Any failure
    of a sub-compilation is returned as-is, superseding the raw success.
    """
    if environment.locking_script_type(script_id) is LockingScriptType.P2SH:
        logger.debug("Wrapping %r as P2SH locking script", script_id)
        wrapped = compile_p2sh_locking(raw.bytecode, environment)
        if not wrapped.success:
            return wrapped
        return replace(raw, bytecode=wrapped.bytecode, transformed=TransformType.P2SH_LOCKING)

    unlocks = environment.unlocked_script(script_id)
    if unlocks is not None and environment.locking_script_type(unlocks) is LockingScriptType.P2SH:
        logger.debug("Assembling P2SH unlocking script %r for %r", script_id, unlocks)
        locking = compile_raw(unlocks, data, environment)
        if not locking.success:
            return locking
        assembled = compile_p2sh_unlocking(raw.bytecode, locking.bytecode, environment)
        if not assembled.success:
            return assembled
        return replace(raw, bytecode=assembled.bytecode, transformed=TransformType.P2SH_UNLOCKING)

    return raw
