"""Numeric process exit codes.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~genapi.exceptions.GenapiError` subclass. Scripts that
regenerate bindings in CI can inspect the exit code to tell a missing tool
from a broken artifact without parsing stderr.

Example::

    $ genapi truncated.mpack --dump
    genapi: Error: truncated artifact: ...
    $ echo $?
    6   # EXIT_FORMAT_ERROR
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including invalid configuration)."""

EXIT_INVALID_USAGE = 2
"""Flags were inconsistent or a required argument was missing."""

EXIT_MISSING_PREREQUISITE = 3
"""A required external program (git, python) was not found on PATH."""

EXIT_SUBPROCESS_FAILURE = 4
"""A version-control step exited non-zero."""

EXIT_IO_FAILURE = 5
"""A working directory, artifact, or user-supplied file could not be accessed."""

EXIT_FORMAT_ERROR = 6
"""The artifact did not decode to the expected shape."""

EXIT_INTERRUPTED = 130
"""The run was interrupted with Ctrl-C."""
