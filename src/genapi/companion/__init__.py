"""Companion definition -- the hand-maintained surface a bindings project implements.

Sub-modules:

* :mod:`~genapi.companion.loader` -- load JSON, YAML, or msgpack companions
  from a file or URL into an :class:`~genapi.models.APISurface`.
"""

from genapi.companion.loader import load_companion

__all__ = ["load_companion"]
