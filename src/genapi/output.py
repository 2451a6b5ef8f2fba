"""Output formatting system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (JSON dumps, diffs). This is what
  downstream generators pipe and parse, so it is never decorated.
* **stderr** -- all diagnostics (progress, warnings, errors). Every line
  carries the fixed ``genapi: `` program tag.
* **TTY detection** -- Rich highlighting for diffs when stdout is an
  interactive terminal, plain text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- holds format preferences, Rich consoles, and
   quiet/verbose flags. Created once per invocation in :mod:`genapi.app`
   and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`info`, :func:`error`,
   :func:`debug`, etc.) that delegate to the global ``OutputManager``.
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from genapi import PROGRAM_NAME

TAG = f"{PROGRAM_NAME}: "
"""Prefix written before every diagnostic line."""


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all CLI output with stdout/stderr discipline.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )

        # soft_wrap keeps long git diagnostics on one tagged line.
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
            soft_wrap=True,
            highlight=False,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout verbatim, appending a newline if missing."""
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()

    def print_diff(self, text: str) -> None:
        """Print a unified diff to stdout, highlighted in Rich mode."""
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "diff", theme="ansi_dark", word_wrap=True))
        else:
            self.print_data(text)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        """Print a green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        """Print a warning. NOT suppressed by ``--quiet``."""
        self._emit(message, label="Warning:", label_style="yellow")

    def error(self, message: str) -> None:
        """Print an error. Never suppressed."""
        self._emit(message, label="Error:", label_style="bold red")

    def debug(self, message: str) -> None:
        """Print a debug message. Only shown when ``--verbose`` is active."""
        if self._verbose:
            self._emit(message, label="[debug]", style="dim")

    def _emit(
        self,
        message: str,
        style: Optional[str] = None,
        label: str = "",
        label_style: Optional[str] = None,
    ) -> None:
        for index, line in enumerate(message.splitlines() or [""]):
            # Continuation lines keep the tag but not the label.
            if index:
                label = ""
            if self._no_color:
                head = f"{label} " if label else ""
                print(f"{TAG}{head}{line}", file=sys.stderr, flush=True)
                continue
            text = escape(line)
            if style:
                text = f"[{style}]{text}[/{style}]"
            if label:
                head = escape(label)
                if label_style:
                    head = f"[{label_style}]{head}[/{label_style}]"
                text = f"{head} {text}"
            self._stderr.print(f"{TAG}{text}")

    # ------------------------------------------------------------------ #
    # Logging bridge
    # ------------------------------------------------------------------ #

    def configure_logging(self) -> None:
        """Route the standard :mod:`logging` records of ``genapi.*`` to stderr.

        Library modules log through ``logging.getLogger(__name__)``. Records
        are shown at DEBUG level with ``--verbose`` and at WARNING otherwise.
        """
        logger = logging.getLogger(PROGRAM_NAME)
        for handler in list(logger.handlers):
            if getattr(handler, "_genapi", False):
                logger.removeHandler(handler)
        handler = _OutputHandler(self)
        handler._genapi = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if self._verbose else logging.WARNING)
        logger.propagate = False


class _OutputHandler(logging.Handler):
    """Logging handler that forwards records to an :class:`OutputManager`."""

    def __init__(self, output: OutputManager) -> None:
        super().__init__()
        self._output = output

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        if record.levelno >= logging.ERROR:
            self._output.error(message)
        elif record.levelno >= logging.WARNING:
            self._output.warning(message)
        elif record.levelno >= logging.INFO:
            self._output.info(message)
        else:
            self._output.debug(message)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def print_data(text: str) -> None:
    """Print raw data to stdout via the global OutputManager."""
    get_output().print_data(text)


def print_diff(text: str) -> None:
    """Print a unified diff to stdout via the global OutputManager."""
    get_output().print_diff(text)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
