"""Renderers -- turn an :class:`~genapi.models.APISurface` into output.

Sub-modules:

* :mod:`~genapi.render.json_sink` -- indented JSON with a fixed key order.
* :mod:`~genapi.render.compare` -- companion vs. artifact comparison and
  unified diff.
* :mod:`~genapi.render.bindings` -- typed Python binding stubs.
"""

from genapi.render.bindings import render_bindings, write_bindings
from genapi.render.compare import compare_surfaces, render_unified_diff
from genapi.render.json_sink import dump_json, render_json

__all__ = [
    "compare_surfaces",
    "dump_json",
    "render_bindings",
    "render_json",
    "render_unified_diff",
    "write_bindings",
]
