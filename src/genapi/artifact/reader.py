"""Open an artifact source as a binary stream with scoped release."""

from __future__ import annotations

import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from genapi.exceptions import ArtifactIOError

ArtifactSource = Union[str, Path, BinaryIO]


@contextmanager
def open_artifact(source: ArtifactSource) -> Iterator[BinaryIO]:
    """Yield a readable byte stream for *source* and release it on exit.

    Args:
        source: A filesystem path, ``"-"`` for standard input, or an already
            open binary stream (such as the one returned by
            :meth:`~genapi.artifact.acquirer.ArtifactAcquirer.acquire`).

    Raises:
        ArtifactIOError: If the path cannot be opened.

    Example::

        with open_artifact("api.mpack") as stream:
            surface = decode_surface(stream)
    """
    if isinstance(source, (str, Path)):
        if str(source) == "-":
            stream: BinaryIO = io.BytesIO(_read_stdin())
        else:
            try:
                stream = open(source, "rb")
            except OSError as exc:
                raise ArtifactIOError(f"cannot open artifact {source}: {exc}") from exc
    else:
        stream = source

    try:
        yield stream
    finally:
        stream.close()


def _read_stdin() -> bytes:
    try:
        return sys.stdin.buffer.read()
    except (OSError, AttributeError) as exc:
        raise ArtifactIOError(f"cannot read artifact from stdin: {exc}") from exc
