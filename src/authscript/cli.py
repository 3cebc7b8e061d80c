"""
authscript CLI — Compile a script template from JSON documents.

Usage:
    authscript-compile <script_id> --environment env.json --toolchain pkg.mod:TOOLCHAIN

Examples:
    # Compile a P2SH locking script
    authscript-compile lock -e wallet.json -t mylang.toolchain:TOOLCHAIN

    # Compile an unlocking script for a timestamp-locked transaction
    authscript-compile unlock -e wallet.json -d spend.json -t mylang.toolchain:TOOLCHAIN

    # Inspect raw bytecode before P2SH wrapping, as JSON
    authscript-compile lock -e wallet.json -t mylang.toolchain:TOOLCHAIN --raw --json

    # Show outcome counts, transforms, and dependency depth afterwards
    authscript-compile lock -e wallet.json -t mylang.toolchain:TOOLCHAIN --stats
"""

import argparse
import importlib
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from authscript import __version__
from authscript.config import load_config
from authscript.vocabulary import LockingScriptType, TimeLockType, VariableType
from authscript.compiler import (
    CompilationData,
    CompilationEnvironment,
    OperationData,
    ScriptToolchain,
    create_compiler,
)
from authscript.observability import configure_logging, get_metrics


EXIT_OK = 0
EXIT_COMPILATION_FAILED = 1
EXIT_USAGE = 2


# =============================================================================
# INPUT DOCUMENTS
# =============================================================================

class EnvironmentDocument(BaseModel):
    """JSON form of a compilation environment (without collaborators)."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    scripts: dict[str, str] = Field(..., description="Script ID -> template text")
    variables: dict[str, VariableType] = Field(default_factory=dict)
    locking_script_types: dict[str, LockingScriptType] = Field(
        default_factory=dict, alias="lockingScriptTypes"
    )
    unlocking_scripts: dict[str, str] = Field(
        default_factory=dict, alias="unlockingScripts"
    )
    unlocking_script_time_lock_types: dict[str, TimeLockType] = Field(
        default_factory=dict, alias="unlockingScriptTimeLockTypes"
    )

    @field_validator("scripts")
    @classmethod
    def scripts_not_empty(cls, v: dict[str, str]) -> dict[str, str]:
        if not v:
            raise ValueError("environment must define at least one script")
        return v


class DataDocument(BaseModel):
    """JSON form of compilation data; bytecode values are hex strings."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    bytecode: dict[str, str] = Field(default_factory=dict)
    operation_data: dict[str, Any] | None = Field(default=None, alias="operationData")
    current_block_height: int | None = Field(default=None, alias="currentBlockHeight")
    current_block_time: int | None = Field(default=None, alias="currentBlockTime")

    @field_validator("bytecode")
    @classmethod
    def bytecode_is_hex(cls, v: dict[str, str]) -> dict[str, str]:
        for name, value in v.items():
            try:
                bytes.fromhex(value.removeprefix("0x"))
            except ValueError:
                raise ValueError(f"bytecode value for {name!r} is not hex") from None
        return v

    def to_data(self) -> CompilationData:
        return CompilationData(
            bytecode={
                name: bytes.fromhex(value.removeprefix("0x"))
                for name, value in self.bytecode.items()
            },
            operation_data=(
                None if self.operation_data is None
                else OperationData(**self.operation_data)
            ),
            current_block_height=self.current_block_height,
            current_block_time=self.current_block_time,
        )


# =============================================================================
# LOADING
# =============================================================================

class CLIError(Exception):
    """Usage or input document problem."""


def load_toolchain(path: str) -> ScriptToolchain:
    """Import a toolchain given as `module:attribute`."""
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise CLIError(f"Toolchain must be given as module:attribute, got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CLIError(f"Cannot import toolchain module {module_name!r}: {e}") from e
    try:
        toolchain = getattr(module, attribute)
    except AttributeError:
        raise CLIError(f"Module {module_name!r} has no attribute {attribute!r}") from None
    if not isinstance(toolchain, ScriptToolchain):
        raise CLIError(f"{path!r} does not implement the script toolchain protocol")
    return toolchain


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except FileNotFoundError:
        raise CLIError(f"File not found: {path}") from None
    except json.JSONDecodeError as e:
        raise CLIError(f"Invalid JSON in {path}: {e}") from None


def load_environment(path: Path, toolchain: ScriptToolchain) -> CompilationEnvironment:
    try:
        document = EnvironmentDocument.model_validate(_read_json(path))
    except ValidationError as e:
        raise CLIError(f"Invalid environment document {path}:\n{e}") from None
    return CompilationEnvironment(
        scripts=document.scripts,
        toolchain=toolchain,
        variables=document.variables,
        vm=getattr(toolchain, "vm", None),
        create_state=getattr(toolchain, "create_state", None),
        locking_script_types=document.locking_script_types,
        unlocking_scripts=document.unlocking_scripts,
        unlocking_script_time_lock_types=document.unlocking_script_time_lock_types,
    )


def load_data(path: Path | None) -> CompilationData:
    if path is None:
        return CompilationData()
    try:
        return DataDocument.model_validate(_read_json(path)).to_data()
    except ValidationError as e:
        raise CLIError(f"Invalid data document {path}:\n{e}") from None


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authscript-compile",
        description="Compile an authentication script template to bytecode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0  compiled successfully
  1  compilation failed (errors printed)
  2  usage or input document error

Environment variables:
  AUTHSCRIPT_MAX_DEPTH   maximum script dependency depth
  AUTHSCRIPT_LOG_LEVEL   log level (default: WARNING)
  AUTHSCRIPT_LOG_JSON    emit JSON log lines (true/false)
        """,
    )
    parser.add_argument("script_id", help="ID of the script to compile")
    parser.add_argument(
        "-e", "--environment",
        type=Path,
        required=True,
        help="Environment JSON (scripts, variables, script classifications)",
    )
    parser.add_argument(
        "-t", "--toolchain",
        required=True,
        help="Script toolchain as module:attribute",
    )
    parser.add_argument(
        "-d", "--data",
        type=Path,
        help="Compilation data JSON (bytecode values, operationData)",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Skip locktime checks and P2SH transforms",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log compilation steps to stderr",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print compilation statistics to stderr as JSON",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    configure_logging(
        level="DEBUG" if args.verbose else config.log_level,
        json_format=config.log_json,
    )

    try:
        toolchain = load_toolchain(args.toolchain)
        environment = load_environment(args.environment, toolchain)
        data = load_data(args.data)
    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    compiler = create_compiler(environment, config)
    if args.raw:
        result = compiler.compile_raw(args.script_id, data)
    else:
        result = compiler.compile(args.script_id, data)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print(result.bytecode.hex())
    else:
        print(f"Compilation failed ({result.error_type.value}):", file=sys.stderr)
        for error in result.errors:
            location = "" if error.range.is_empty else (
                f"{error.range.start_line}:{error.range.start_column}: "
            )
            print(f"  {location}{error.error}", file=sys.stderr)

    if args.stats:
        print(json.dumps(get_metrics().snapshot(), indent=2), file=sys.stderr)

    return EXIT_OK if result.success else EXIT_COMPILATION_FAILED


if __name__ == "__main__":
    sys.exit(main())
