"""Artifact pipeline -- acquire, open, and decode Neovim's ``api.mpack``.

Typical usage::

    from genapi.artifact import ArtifactAcquirer, decode_surface, open_artifact

    with open_artifact(ArtifactAcquirer().acquire("master")) as stream:
        surface = decode_surface(stream)

Sub-modules:

* :mod:`~genapi.artifact.acquirer` -- shallow clone + ``gen_vimdoc.py``.
* :mod:`~genapi.artifact.reader` -- scoped byte streams over paths, stdin,
  or in-memory artifacts.
* :mod:`~genapi.artifact.decoder` -- msgpack to
  :class:`~genapi.models.APISurface`.
"""

from genapi.artifact.acquirer import ArtifactAcquirer
from genapi.artifact.decoder import decode_bytes, decode_surface
from genapi.artifact.reader import open_artifact

__all__ = ["ArtifactAcquirer", "decode_bytes", "decode_surface", "open_artifact"]
