"""Tests for configuration loading."""

import pytest

from authscript.config import CompilerConfig, load_config


class TestCompilerConfig:
    def test_defaults(self):
        config = CompilerConfig()
        assert config.max_dependency_depth is None
        assert config.log_level == "WARNING"
        assert config.log_json is False

    def test_rejects_zero_depth(self):
        with pytest.raises(ValueError):
            CompilerConfig(max_dependency_depth=0)

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError):
            CompilerConfig(log_level="LOUD")


class TestLoadConfig:
    def test_empty_environment(self):
        assert load_config({}) == CompilerConfig()

    def test_reads_variables(self):
        config = load_config({
            "AUTHSCRIPT_MAX_DEPTH": "16",
            "AUTHSCRIPT_LOG_LEVEL": "debug",
            "AUTHSCRIPT_LOG_JSON": "true",
        })
        assert config.max_dependency_depth == 16
        assert config.log_level == "debug"
        assert config.log_json is True

    def test_invalid_depth_names_variable(self):
        with pytest.raises(ValueError, match="AUTHSCRIPT_MAX_DEPTH"):
            load_config({"AUTHSCRIPT_MAX_DEPTH": "deep"})

    def test_invalid_json_flag(self):
        with pytest.raises(ValueError, match="AUTHSCRIPT_LOG_JSON"):
            load_config({"AUTHSCRIPT_LOG_JSON": "maybe"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("AUTHSCRIPT_MAX_DEPTH", "3")
        assert load_config().max_dependency_depth == 3
