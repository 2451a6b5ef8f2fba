"""Shared test fixtures for genapi.

Provides reusable fixtures for building msgpack artifacts, creating isolated
config environments, managing output state, and running the CLI. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable

import msgpack
import pytest

from genapi.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()
    logger = logging.getLogger("genapi")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# API surface data
# ---------------------------------------------------------------------------


LINE_COUNT_SIGNATURE = "Integer nvim_buf_line_count(Buffer buffer)"


@pytest.fixture
def line_count_api() -> dict[str, Any]:
    """The single-function artifact used by the end-to-end examples."""
    return {
        "nvim_buf_line_count": {
            "parameters": [["Buffer", "buffer"]],
            "return": ["Line count"],
            "signature": LINE_COUNT_SIGNATURE,
        }
    }


@pytest.fixture
def sample_api() -> dict[str, Any]:
    """A small artifact with public and internal functions and every field kind."""
    return {
        "nvim_buf_line_count": {
            "annotations": ["since=1"],
            "doc": ["Returns the number of lines in the given buffer."],
            "parameters": [["Buffer", "buffer"]],
            "parameters_doc": {"buffer": "Buffer handle, or 0 for current buffer"},
            "return": ["Line count, or 0 for unloaded buffer."],
            "seealso": [],
            "signature": LINE_COUNT_SIGNATURE,
            "c_decl": "Integer nvim_buf_line_count(Buffer buffer, Error *err)",
        },
        "nvim_get_current_line": {
            "doc": "Gets the current line.",
            "parameters": [],
            "parameters_doc": [],
            "return": ["Current line string"],
            "seealso": None,
            "signature": "String nvim_get_current_line()",
        },
        "nvim_set_var": {
            "parameters": [["String", "name"], ["Object", "value"]],
            "parameters_doc": {"name": "Variable name", "value": "Variable value"},
            "signature": "void nvim_set_var(String name, Object value)",
        },
        "nvim__id": {
            "doc": ["Returns object given as argument.", "Used for testing."],
            "parameters": [["Object", "obj"]],
            "parameters_doc": {"obj": "Object to return."},
            "return": ["its argument."],
            "signature": "Object nvim__id(Object obj)",
        },
    }


@pytest.fixture
def write_mpack(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory that packs a value with msgpack and writes it to disk."""

    def _write(value: Any, name: str = "api.mpack") -> Path:  # noqa: ANN401
        path = tmp_path / name
        path.write_bytes(msgpack.packb(value, use_bin_type=True))
        return path

    return _write


# ---------------------------------------------------------------------------
# Isolated config directory
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all GENAPI_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("genapi.config._is_xdg_platform", lambda: True)

    for var in list(os.environ):
        if var.startswith("GENAPI_"):
            monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output manager
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a plain, colourless OutputManager as the global instance."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    return output


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner with stdout and stderr captured separately.

    Older Click releases mix stderr into stdout unless ``mix_stderr=False``
    is passed; newer ones always separate them and reject the argument.
    """
    from typer.testing import CliRunner

    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        return CliRunner()
