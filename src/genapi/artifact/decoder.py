"""Decode ``api.mpack`` into an :class:`~genapi.models.APISurface`.

The artifact is a single msgpack map keyed by API function name. Each value
is a map of descriptor fields (``signature``, ``parameters``, ``doc`` ...).
Decoding is structural only: shapes are checked, contents are not
interpreted. Unknown descriptor keys are dropped so newer artifacts keep
decoding.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO

import msgpack
from pydantic import ValidationError

from genapi.exceptions import ArtifactIOError, FormatError
from genapi.models import APISurface, FunctionDescriptor

logger = logging.getLogger(__name__)


def decode_surface(stream: BinaryIO) -> APISurface:
    """Read *stream* to the end and decode it.

    Raises:
        ArtifactIOError: If the stream cannot be read.
        FormatError: If the bytes are not a well-formed API description.
    """
    try:
        data = stream.read()
    except OSError as exc:
        raise ArtifactIOError(f"cannot read artifact: {exc}") from exc
    return decode_bytes(data)


def decode_bytes(data: bytes) -> APISurface:
    """Decode an in-memory artifact.

    Raises:
        FormatError: If the bytes are truncated, malformed, or do not have
            the expected shape.
    """
    return build_surface(_unpack(data))


def build_surface(value: Any) -> APISurface:  # noqa: ANN401
    """Validate an already-decoded top-level *value* into an :class:`APISurface`.

    Shared by the msgpack decoder and the companion loader so both sources
    obey the same shape rules.

    Raises:
        FormatError: If *value* is not a map of descriptor maps.
    """
    if not isinstance(value, dict):
        raise FormatError(f"top-level value must be a map, got {type_tag(value)}")

    functions: dict[str, FunctionDescriptor] = {}
    for name, entry in value.items():
        if not isinstance(name, str):
            raise FormatError(f"function name must be a string, got {type_tag(name)}")
        functions[name] = _decode_descriptor(name, entry)

    logger.debug("decoded %d functions", len(functions))
    return APISurface(functions)


def _unpack(data: bytes) -> Any:  # noqa: ANN401
    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(data)
    try:
        value = unpacker.unpack()
    except msgpack.OutOfData as exc:
        if not data:
            raise FormatError("empty artifact") from exc
        raise FormatError("truncated artifact: unexpected end of data", offset=len(data)) from exc
    except UnicodeDecodeError as exc:
        raise FormatError(f"malformed string in artifact: {exc.reason}") from exc
    except (ValueError, msgpack.UnpackException) as exc:
        raise FormatError(f"malformed artifact: {exc}") from exc

    consumed = unpacker.tell()
    if consumed < len(data):
        logger.debug("ignoring %d trailing bytes after offset %d", len(data) - consumed, consumed)
    return value


def _decode_descriptor(name: str, entry: Any) -> FunctionDescriptor:  # noqa: ANN401
    if not isinstance(entry, dict):
        raise FormatError(f"{name}: descriptor must be a map, got {type_tag(entry)}")
    if not entry.get("signature"):
        raise FormatError(f"{name}: missing signature")
    try:
        return FunctionDescriptor.model_validate(entry)
    except ValidationError as exc:
        raise FormatError(f"{name}: {_describe(exc)}") from exc


def _describe(exc: ValidationError) -> str:
    """Summarise the first validation problem as ``field.path: message``."""
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def type_tag(value: Any) -> str:  # noqa: ANN401
    """Name the msgpack type family of a decoded *value*."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "binary"
    # ExtType is a namedtuple, so it must be checked before sequences.
    if isinstance(value, msgpack.ExtType):
        return "extension"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__
