"""
Shared fixtures.

The compiler needs a toolchain to drive; tests use the small grammar and
VM in mini_toolchain.py.
"""

import logging

import pytest

from authscript.compiler import CompilationData, create_environment
from authscript.observability import reset_metrics, set_compilation_id

from mini_toolchain import MiniToolchain


@pytest.fixture(autouse=True)
def clean_observability():
    """Reset metrics, compilation ID, and logger config around each test."""
    reset_metrics()
    set_compilation_id(None)
    yield
    set_compilation_id(None)
    root = logging.getLogger("authscript")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def toolchain():
    return MiniToolchain()


@pytest.fixture
def make_environment(toolchain):
    """Build an environment with the mini toolchain and its VM."""
    def _make(scripts, **kwargs):
        kwargs.setdefault("vm", toolchain.vm)
        kwargs.setdefault("create_state", toolchain.create_state)
        return create_environment(scripts, toolchain, **kwargs)
    return _make


@pytest.fixture
def data():
    return CompilationData()
