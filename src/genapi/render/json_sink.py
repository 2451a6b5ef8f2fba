"""Render an :class:`~genapi.models.APISurface` as indented JSON.

Descriptor keys always appear in
:data:`~genapi.models.DESCRIPTOR_FIELD_ORDER` and functions in decoder order,
so two dumps of the same artifact are byte-identical and diff cleanly.
"""

from __future__ import annotations

import json

from genapi.models import APISurface
from genapi.output import print_data

INDENT = 2


def render_json(surface: APISurface) -> str:
    """Return the JSON text for *surface*, including the trailing newline."""
    return json.dumps(surface.to_json_dict(), indent=INDENT, ensure_ascii=False) + "\n"


def dump_json(surface: APISurface) -> None:
    """Write :func:`render_json` output to stdout."""
    print_data(render_json(surface))
