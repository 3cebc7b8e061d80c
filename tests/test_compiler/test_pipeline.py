"""Tests for the parse -> resolve -> reduce pipeline."""

from unittest.mock import Mock

from authscript.vocabulary import CompilationErrorType, VariableType
from authscript.compiler import (
    CompilationData,
    CompilationError,
    ParseSuccess,
    ScriptReduction,
    SourceRange,
    compile_body,
    create_environment,
    describe_expected_input,
)

PUBKEY_HASH = "11" * 20


class TestSuccessfulCompilation:
    """Scripts that make it through every stage."""

    def test_compiles_opcodes_and_pushes(self, make_environment, data):
        """Opcodes and pushes fold into bytecode."""
        env = make_environment({})
        result = compile_body(
            f"OP_DUP OP_HASH160 <0x{PUBKEY_HASH}> OP_EQUALVERIFY OP_CHECKSIG", data, env
        )

        assert result.success is True
        assert result.bytecode == bytes.fromhex(f"76a914{PUBKEY_HASH}88ac")

    def test_keeps_all_artifacts(self, make_environment, data):
        """Success carries parse, resolve, and reduce artifacts."""
        result = compile_body("OP_1", data, make_environment({}))

        assert result.parse is not None
        assert result.resolve is not None
        assert result.reduce.bytecode == result.bytecode
        assert result.transformed is None

    def test_resolves_variables(self, make_environment):
        """Variables resolve from compilation data."""
        env = make_environment({}, variables={"key": VariableType.ADDRESS_DATA})
        data = CompilationData(bytecode={"key": b"\x01\x02"})

        result = compile_body("<key>", data, env)

        assert result.bytecode == b"\x02\x01\x02"

    def test_evaluation_uses_vm(self, make_environment, data):
        """Evaluations run on the environment's VM."""
        result = compile_body("$(<0xaa> OP_DUP OP_EQUAL)", data, make_environment({}))
        assert result.bytecode == b"\x01"


class TestParseFailure:
    """Scripts rejected by the parser."""

    def test_parse_failure_shape(self, make_environment, data):
        """Parse failure has one located error and no artifacts."""
        result = compile_body("OP_DUP >", data, make_environment({}))

        assert result.success is False
        assert result.error_type == CompilationErrorType.PARSE
        assert len(result.errors) == 1
        assert result.errors[0].range == SourceRange.point(1, 8)
        assert result.parse is None
        assert result.resolve is None
        assert result.reduce is None

    def test_parse_failure_message(self, make_environment, data):
        """Message describes what the parser expected."""
        result = compile_body("OP_DUP >", data, make_environment({}))

        assert result.errors[0].error == describe_expected_input(
            ["EOF", "a hex literal", "a push", "an evaluation", "an identifier"]
        )
        assert result.errors[0].error.endswith(
            "an evaluation, an identifier, or the end of the script."
        )

    def test_parse_failure_position_on_later_line(self, make_environment, data):
        result = compile_body("OP_DUP\n  )", data, make_environment({}))
        assert result.errors[0].range == SourceRange(2, 3, 2, 3)

    def test_unterminated_push(self, make_environment, data):
        """Running out of input inside a push expects the closing bracket."""
        result = compile_body("<0xaa", data, make_environment({}))

        assert result.error_type == CompilationErrorType.PARSE
        assert '">"' in result.errors[0].error
        assert "the end of the script" not in result.errors[0].error


class TestResolveFailure:
    """Scripts that parse but reference unknown things."""

    def test_collects_every_error(self, make_environment, data):
        """All resolution errors are reported, in order."""
        result = compile_body("foo OP_DUP bar", data, make_environment({}))

        assert result.error_type == CompilationErrorType.RESOLVE
        assert [e.error for e in result.errors] == [
            'Unknown identifier "foo".',
            'Unknown identifier "bar".',
        ]
        assert result.errors[0].range.start_column == 1
        assert result.errors[1].range.start_column == 12

    def test_keeps_parse_and_resolve_artifacts(self, make_environment, data):
        result = compile_body("foo", data, make_environment({}))

        assert result.parse is not None
        assert result.resolve is not None
        assert result.reduce is None

    def test_missing_variable_value(self, make_environment, data):
        env = make_environment({}, variables={"key": VariableType.ADDRESS_DATA})
        result = compile_body("<key>", data, env)

        assert result.error_type == CompilationErrorType.RESOLVE
        assert "was not provided" in result.errors[0].error


class TestReduceFailure:
    """Scripts that resolve but cannot be folded to bytecode."""

    def test_keeps_artifacts_without_bytecode(self, make_environment, data):
        """Reduce failure keeps all artifacts but has no bytecode."""
        result = compile_body("$(<0x01> OP_DROP)", data, make_environment({}))

        assert result.success is False
        assert result.error_type == CompilationErrorType.REDUCE
        assert result.parse is not None
        assert result.resolve is not None
        assert result.reduce is not None
        assert not hasattr(result, "bytecode")
        assert result.errors[0].error == "An evaluation must leave an item on the stack."

    def test_evaluation_without_vm(self, toolchain, data):
        """Pure-data environments cannot evaluate."""
        env = create_environment({}, toolchain)
        result = compile_body("$(<0x01>)", data, env)

        assert result.error_type == CompilationErrorType.REDUCE
        assert result.errors[0].error == "Evaluations require a virtual machine."


class TestToolchainDriving:
    """The pipeline only talks to the toolchain through its protocol."""

    def test_stage_calls(self, data):
        """Collaborators are called in order with the expected arguments."""
        toolchain = Mock()
        toolchain.parse.return_value = ParseSuccess("tree")
        toolchain.create_resolver.return_value = "resolver"
        toolchain.resolve.return_value = "resolved"
        toolchain.collect_resolution_errors.return_value = []
        toolchain.reduce.return_value = ScriptReduction(bytecode=b"\x51")
        vm = object()
        create_state = Mock()
        env = create_environment({}, toolchain, vm=vm, create_state=create_state)

        result = compile_body("anything", data, env)

        assert result.bytecode == b"\x51"
        toolchain.parse.assert_called_once_with("anything")
        toolchain.create_resolver.assert_called_once_with(data, env)
        toolchain.resolve.assert_called_once_with("tree", "resolver")
        toolchain.reduce.assert_called_once_with("resolved", vm, create_state)

    def test_reduce_skipped_after_resolve_errors(self, data):
        toolchain = Mock()
        toolchain.parse.return_value = ParseSuccess("tree")
        toolchain.collect_resolution_errors.return_value = [CompilationError("bad")]
        env = create_environment({}, toolchain)

        result = compile_body("anything", data, env)

        assert result.error_type == CompilationErrorType.RESOLVE
        toolchain.reduce.assert_not_called()
