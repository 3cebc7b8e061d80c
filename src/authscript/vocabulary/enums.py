"""
Vocabulary enums — the shared language of the compiler.

All enumerated types referenced by results, environments, and transforms.
"""

from enum import Enum


# =============================================================================
# COMPILATION OUTCOMES
# =============================================================================

class CompilationErrorType(str, Enum):
    """
    Pipeline stage a failed compilation stopped at.

    Environmental failures (unknown script, circular dependency,
    locktime mismatch) are reported as PARSE since they precede parsing.
    """
    PARSE = "parse"
    RESOLVE = "resolve"
    REDUCE = "reduce"


class TransformType(str, Enum):
    """Protocol transform applied to a successful raw compilation."""
    P2SH_LOCKING = "p2sh-locking"
    P2SH_UNLOCKING = "p2sh-unlocking"


# =============================================================================
# ENVIRONMENT CLASSIFICATIONS
# =============================================================================

class LockingScriptType(str, Enum):
    """
    How a locking script is placed in a transaction output.

    STANDARD is the no-classification default.
    """
    STANDARD = "standard"
    P2SH = "p2sh"


class TimeLockType(str, Enum):
    """
    Locktime kind an unlocking script requires.

    Locktime values below 500,000,000 are block heights; values at or
    above it are UNIX timestamps. NONE means no requirement.
    """
    NONE = "none"
    HEIGHT = "height"
    TIMESTAMP = "timestamp"


class VariableType(str, Enum):
    """Type of a variable a script template may reference."""
    ADDRESS_DATA = "AddressData"
    WALLET_DATA = "WalletData"
    CURRENT_BLOCK_HEIGHT = "CurrentBlockHeight"
    CURRENT_BLOCK_TIME = "CurrentBlockTime"
    KEY = "Key"
    HD_KEY = "HdKey"


# Locktime values at or above this are timestamps, below are block heights.
LOCKTIME_TIMESTAMP_THRESHOLD = 500_000_000
