"""Exception hierarchy for genapi.

All exceptions inherit from :class:`GenapiError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`genapi.exit_codes`.
The CLI catches ``GenapiError``, prints the message on the diagnostic stream
and exits with the matching code. Nothing is retried or recovered locally.

Subclass hierarchy::

    GenapiError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- PrerequisiteError   (exit 3)
    +-- SubprocessError     (exit 4)
    +-- ArtifactIOError     (exit 5)
    +-- FormatError         (exit 6)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from genapi.exit_codes import (
    EXIT_FORMAT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_FAILURE,
    EXIT_MISSING_PREREQUISITE,
    EXIT_SUBPROCESS_FAILURE,
)


class GenapiError(Exception):
    """Base exception for all genapi errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GenapiError):
    """Raised when flags are inconsistent or a required argument is missing."""

    exit_code = EXIT_INVALID_USAGE


class PrerequisiteError(GenapiError):
    """Raised when a required external program is not found on ``PATH``."""

    exit_code = EXIT_MISSING_PREREQUISITE


class SubprocessError(GenapiError):
    """Raised when a version-control step exits non-zero or cannot be started.

    The extraction script is exempt: its exit status is never turned into
    this error.
    """

    exit_code = EXIT_SUBPROCESS_FAILURE


class ArtifactIOError(GenapiError):
    """Raised when the working directory, the artifact, or an input file cannot be accessed."""

    exit_code = EXIT_IO_FAILURE


class FormatError(GenapiError):
    """Raised when an artifact does not decode to the expected shape.

    Args:
        message: Description of the problem.
        offset: Byte offset into the artifact reported by the decoder, when known.
    """

    exit_code = EXIT_FORMAT_ERROR

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at byte offset {offset})"
        super().__init__(message)
        self.offset = offset


class ConfigError(GenapiError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
