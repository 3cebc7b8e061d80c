"""Tests for logging infrastructure."""

import json
import logging
from io import StringIO
from uuid import uuid4

from authscript.observability import (
    CompilationTrace,
    CompilationTraceFilter,
    current_trace,
    set_compilation_id,
    get_compilation_id,
    configure_logging,
    get_logger,
    LogContext,
)


class TestCompilationId:
    """Tests for compilation ID management."""

    def test_set_and_get(self):
        """Can set and get compilation ID."""
        cid = str(uuid4())
        set_compilation_id(cid)
        assert get_compilation_id() == cid

    def test_none_when_not_set(self):
        assert get_compilation_id() is None

    def test_uuid_converted_to_string(self):
        """UUID is converted to string."""
        cid = uuid4()
        set_compilation_id(cid)
        assert get_compilation_id() == str(cid)


class TestLogContext:
    """Tests for log context manager."""

    def test_context_sets_compilation_id(self):
        cid = str(uuid4())

        with LogContext(cid):
            assert get_compilation_id() == cid

    def test_context_restores_previous(self):
        """Context manager restores previous ID."""
        old_cid = str(uuid4())
        new_cid = str(uuid4())

        set_compilation_id(old_cid)

        with LogContext(new_cid):
            assert get_compilation_id() == new_cid

        assert get_compilation_id() == old_cid

    def test_script_scope_keeps_compilation_id(self):
        with LogContext("cid-1"):
            with LogContext(script_id="lock", depth=2):
                assert current_trace() == CompilationTrace("cid-1", "lock", 2)
            assert current_trace() == CompilationTrace("cid-1", None, 0)


class TestCompilationTraceFilter:
    """The filter copies the trace onto records."""

    def make_record(self):
        return logging.LogRecord("authscript.t", logging.INFO, __file__, 1, "msg", None, None)

    def test_outside_compilation(self):
        record = self.make_record()
        CompilationTraceFilter().filter(record)

        assert record.compilation_id == "-"
        assert record.script_id is None
        assert record.depth == 0

    def test_inside_script(self):
        record = self.make_record()
        with LogContext("cid-1", script_id="unlock", depth=1):
            CompilationTraceFilter().filter(record)

        assert record.compilation_id == "cid-1"
        assert record.script_id == "unlock"
        assert record.depth == 1

class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_logger_namespace(self):
        configure_logging(level=logging.DEBUG)

        logger = get_logger("test")
        assert logger.name == "authscript.test"

    def test_level_by_name(self):
        configure_logging(level="debug")
        assert logging.getLogger("authscript").level == logging.DEBUG

    def test_json_format(self):
        """JSON format produces valid JSON."""
        stream = StringIO()
        configure_logging(level=logging.INFO, json_format=True, stream=stream)

        set_compilation_id("test-123")
        get_logger("json_test").info("Test message")

        log_entry = json.loads(stream.getvalue().strip())
        assert log_entry["message"] == "Test message"
        assert log_entry["compilation_id"] == "test-123"
        assert log_entry["logger"] == "authscript.json_test"

    def test_readable_format(self):
        """Readable format includes the short compilation ID."""
        stream = StringIO()
        configure_logging(level=logging.INFO, stream=stream)

        set_compilation_id("abcd1234-5678")
        get_logger("readable_test").info("Test message")

        output = stream.getvalue()
        assert "[abcd1234]" in output
        assert "Test message" in output

    def test_readable_format_names_script(self):
        stream = StringIO()
        configure_logging(level=logging.INFO, stream=stream)

        with LogContext("abcd1234-5678", script_id="lock", depth=1):
            get_logger("readable_test").info("Inside")

        assert "[abcd1234 lock@1]" in stream.getvalue()

    def test_json_format_names_script(self):
        stream = StringIO()
        configure_logging(level=logging.INFO, json_format=True, stream=stream)

        with LogContext("cid-1", script_id="lock", depth=0):
            get_logger("json_test").info("Inside")

        log_entry = json.loads(stream.getvalue().strip())
        assert log_entry["script_id"] == "lock"
        assert log_entry["depth"] == 0

    def test_default_level_hides_info(self):
        stream = StringIO()
        configure_logging(stream=stream)

        get_logger("quiet").info("hidden")
        get_logger("quiet").warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()
