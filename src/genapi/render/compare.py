"""Compare the hand-maintained companion against the decoded artifact.

Two views are produced:

* :func:`compare_surfaces` -- a :class:`~genapi.models.ComparisonResult`
  listing functions that are extra (companion only), missing (artifact
  only), or different.
* :func:`render_unified_diff` -- a unified diff of the JSON renderings of
  both surfaces, sorted by name so that unrelated reordering never shows up.

Functions named in ``compare.ignore`` are skipped everywhere; so is the
internal ``nvim__*`` family when ``compare.include_internal`` is off.
"""

from __future__ import annotations

import difflib
import json
from typing import Optional

from genapi.models import APISurface, CompareConfig, ComparisonResult, is_internal
from genapi.render.json_sink import INDENT


def _skipped(name: str, config: CompareConfig) -> bool:
    return name in config.ignore or (not config.include_internal and is_internal(name))


def compare_surfaces(
    companion: APISurface,
    artifact: APISurface,
    config: Optional[CompareConfig] = None,
) -> ComparisonResult:
    """Classify the names of both surfaces.

    Args:
        companion: The hand-maintained definition.
        artifact: The surface decoded from ``api.mpack``.
        config: Ignore list and internal-family switch.

    Returns:
        Sorted ``extra``, ``missing``, and ``different`` name lists.
    """
    config = config or CompareConfig()
    result = ComparisonResult()
    for name in sorted(set(companion) | set(artifact)):
        if _skipped(name, config):
            continue
        if name not in artifact:
            result.extra.append(name)
        elif name not in companion:
            result.missing.append(name)
        elif companion[name] != artifact[name]:
            result.different.append(name)
    return result


def _lines(surface: APISurface, config: CompareConfig) -> list[str]:
    data = {
        name: surface[name].to_json_dict()
        for name in sorted(surface)
        if not _skipped(name, config)
    }
    text = json.dumps(data, indent=INDENT, ensure_ascii=False) + "\n"
    return text.splitlines(keepends=True)


def render_unified_diff(
    companion: APISurface,
    artifact: APISurface,
    config: Optional[CompareConfig] = None,
    companion_label: str = "companion",
    artifact_label: str = "artifact",
    context: int = 3,
) -> str:
    """Return a unified diff from *companion* to *artifact*.

    An empty string means the two surfaces agree on every compared function.
    """
    config = config or CompareConfig()
    diff = difflib.unified_diff(
        _lines(companion, config),
        _lines(artifact, config),
        fromfile=companion_label,
        tofile=artifact_label,
        n=context,
    )
    return "".join(diff)


def summarize(result: ComparisonResult) -> list[str]:
    """One diagnostic line per non-empty category, e.g. ``2 missing: a, b``."""
    lines = []
    for label, names in (
        ("extra", result.extra),
        ("missing", result.missing),
        ("different", result.different),
    ):
        if names:
            lines.append(f"{len(names)} {label}: {', '.join(names)}")
    return lines
