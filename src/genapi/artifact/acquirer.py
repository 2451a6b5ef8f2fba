"""Materialise ``api.mpack`` from the upstream Neovim repository.

The acquirer never interprets Neovim's sources itself. It prepares a
shallow checkout at the requested revision and lets the repository's own
``scripts/gen_vimdoc.py`` write the artifact, then harvests the bytes.

Steps (strictly sequential, no retries):

1. Locate ``git`` and the Python interpreter on ``PATH``.
2. Create an ephemeral working directory. Its removal is bound to a
   ``with`` block entered immediately, so it is deleted on success, on
   error, and on Ctrl-C.
3. ``git init`` / ``git remote add`` / ``git fetch --depth=1`` /
   ``git reset --hard``.
4. Run ``gen_vimdoc.py`` with ``INCLUDE_C_DECL`` and ``INCLUDE_DEPRECATED``
   set. Its exit status is ignored: the script routinely reports problems
   with unrelated documentation while still writing ``api.mpack``.
5. Read the artifact into memory.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from genapi import PROGRAM_NAME
from genapi.exceptions import ArtifactIOError, PrerequisiteError, SubprocessError
from genapi.models import ToolsConfig
from genapi.output import info, warning

logger = logging.getLogger(__name__)

NEOVIM_REPO_URL = "https://github.com/neovim/neovim"
"""Upstream remote fetched by the acquirer."""

GEN_VIMDOC_SCRIPT = Path("scripts") / "gen_vimdoc.py"
"""Extraction script, relative to the checkout root."""

API_MPACK_PATH = Path("runtime") / "doc" / "api.mpack"
"""Artifact written by :data:`GEN_VIMDOC_SCRIPT`, relative to the checkout root."""

DEFAULT_REVISION = "master"

EXTRACTION_ENV = {
    "INCLUDE_C_DECL": "true",
    "INCLUDE_DEPRECATED": "true",
}
"""Variables layered over the inherited environment for the extraction script only."""

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def reset_target(revision: str) -> str:
    """Return the ref passed to ``git reset --hard`` for *revision*.

    A shallow fetch of ``master`` only updates ``origin/master``; there is no
    local branch to reset to.
    """
    if revision == DEFAULT_REVISION:
        return f"origin/{DEFAULT_REVISION}"
    return revision


class ArtifactAcquirer:
    """Fetch Neovim at a revision and produce its ``api.mpack``.

    Args:
        tools: Names or paths of the ``git`` and ``python`` programs.
        repo_url: Remote to fetch from. Tests point this at a local bare
            repository.
        runner: ``subprocess.run``-compatible callable.

    Example::

        acquirer = ArtifactAcquirer(ToolsConfig())
        stream = acquirer.acquire("v0.9.5")
        surface = decode_surface(stream)
    """

    def __init__(
        self,
        tools: Optional[ToolsConfig] = None,
        repo_url: str = NEOVIM_REPO_URL,
        runner: Runner = subprocess.run,
    ) -> None:
        self._tools = tools or ToolsConfig()
        self._repo_url = repo_url
        self._run = runner

    def acquire(self, revision: str = DEFAULT_REVISION) -> BinaryIO:
        """Return an in-memory stream over the artifact built at *revision*.

        Raises:
            PrerequisiteError: ``git`` or the interpreter is not on ``PATH``.
            SubprocessError: A git step failed.
            ArtifactIOError: The working directory could not be created or the
                artifact was not produced.
        """
        git = _find_program(self._tools.git)
        python = _find_program(self._tools.python)

        try:
            workdir_ctx = tempfile.TemporaryDirectory(prefix=f"{PROGRAM_NAME}-")
        except OSError as exc:
            raise ArtifactIOError(f"cannot create working directory: {exc}") from exc

        with workdir_ctx as tmp:
            workdir = Path(tmp)
            logger.debug("working directory: %s", workdir)

            self._git(git, workdir, "init")
            info(f"git remote add origin {self._repo_url} ...")
            self._git(git, workdir, "remote", "add", "origin", self._repo_url)
            info(f"git fetch --depth=1 origin {revision} ...")
            self._git(git, workdir, "fetch", "--depth=1", "origin", revision)
            target = reset_target(revision)
            info(f"git reset --hard {target} ...")
            self._git(git, workdir, "reset", "--hard", target)

            info(f"exec {GEN_VIMDOC_SCRIPT.as_posix()} ...")
            self._extract(python, workdir)

            artifact = workdir / API_MPACK_PATH
            try:
                data = artifact.read_bytes()
            except OSError as exc:
                raise ArtifactIOError(
                    f"{API_MPACK_PATH.as_posix()} was not produced at {revision}: {exc}"
                ) from exc

        logger.debug("read %d bytes of %s", len(data), API_MPACK_PATH.as_posix())
        return io.BytesIO(data)

    def _git(self, git: str, workdir: Path, *args: str) -> None:
        cmd = [git, *args]
        try:
            result = self._run(
                cmd, cwd=workdir, capture_output=True, text=True, errors="replace"
            )
        except OSError as exc:
            raise SubprocessError(f"failed to run git {args[0]}: {exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            message = f"git {' '.join(args)} failed with exit status {result.returncode}"
            if detail:
                message = f"{message}\n{detail}"
            raise SubprocessError(message)

    def _extract(self, python: str, workdir: Path) -> None:
        env = {**os.environ, **EXTRACTION_ENV}
        try:
            result = self._run(
                [python, str(workdir / GEN_VIMDOC_SCRIPT)],
                cwd=workdir,
                env=env,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            # Only the artifact matters; a missing artifact is reported below.
            warning(f"{GEN_VIMDOC_SCRIPT.as_posix()} could not be started: {exc}")
            return
        if result.returncode != 0:
            warning(
                f"{GEN_VIMDOC_SCRIPT.as_posix()} exited with status {result.returncode}; "
                "continuing"
            )
            for line in (result.stderr or "").strip().splitlines()[-10:]:
                logger.debug("gen_vimdoc: %s", line)


def _find_program(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise PrerequisiteError(f"{name} not found in PATH")
    logger.debug("found %s at %s", name, path)
    return path
