"""Load the hand-maintained companion definition from a URL or a local file.

The companion describes the API surface a bindings project *implements*,
using the same shape as the artifact::

    nvim_buf_line_count:
      signature: Integer nvim_buf_line_count(Buffer buffer)
      parameters: [[Buffer, buffer]]
      return: [Line count]

JSON and YAML are detected automatically; a ``.mpack`` file is decoded with
the artifact decoder, so a previously saved artifact can serve as the
companion too.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import yaml

from genapi.artifact.decoder import build_surface, decode_bytes
from genapi.exceptions import ArtifactIOError, FormatError
from genapi.models import APISurface


def load_companion(source: str) -> APISurface:
    """Load a companion definition from URL or file path.

    Args:
        source: A URL (http/https) or a file path.

    Returns:
        The companion as an :class:`~genapi.models.APISurface`.

    Raises:
        ArtifactIOError: If the source cannot be fetched or read.
        FormatError: If the content cannot be parsed or has the wrong shape.
    """
    if source.startswith(("http://", "https://")):
        return build_surface(_load_from_url(source))
    path = Path(source)
    if path.suffix.lower() == ".mpack":
        return _load_mpack(path)
    return build_surface(_load_from_file(path))


def _load_from_url(url: str) -> Any:  # noqa: ANN401
    """Fetch a JSON or YAML companion over HTTP(S)."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ArtifactIOError(
            f"HTTP {exc.response.status_code} fetching companion from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ArtifactIOError(f"Failed to fetch companion from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: Path) -> Any:  # noqa: ANN401
    """Load a JSON or YAML companion from disk, using the extension as a hint."""
    if not path.is_file():
        raise ArtifactIOError(f"Companion file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactIOError(f"Failed to read companion file {path}: {exc}") from exc

    if not content.strip():
        raise FormatError(f"Companion file is empty: {path}")

    suffix = path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _load_mpack(path: Path) -> APISurface:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ArtifactIOError(f"Failed to read companion file {path}: {exc}") from exc
    return decode_bytes(data)


def _parse_content(content: str, hint: str = "") -> Any:  # noqa: ANN401
    """Parse content as JSON or YAML.

    Tries JSON first (unless hinted as YAML), then falls back to YAML, since
    valid JSON is also valid YAML but JSON parsing is stricter.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise FormatError(f"Invalid JSON in companion: {exc}") from exc

    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse companion as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise FormatError(msg)
