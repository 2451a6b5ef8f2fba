"""Typer application and CLI entry point for genapi.

``genapi`` is a single command. The optional positional argument names an
existing ``api.mpack``; without it the artifact is rebuilt from the upstream
repository at ``--commit``. The artifact is then decoded and handed to at
most one renderer::

    genapi --dump                          # build at master, print JSON
    genapi --commit v0.9.5 -o api.mpack    # build and keep the artifact
    genapi api.mpack --compare --companion api_def.yaml
    genapi api.mpack --generate nvim_api.py

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~genapi.exceptions.GenapiError` is reported as a
single tagged line on stderr with the error's exit code; any other exception
writes a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Optional

import click
import typer
from typer.core import TyperCommand

from genapi import PROGRAM_NAME, __version__
from genapi.artifact import ArtifactAcquirer, decode_surface, open_artifact
from genapi.artifact.acquirer import API_MPACK_PATH, DEFAULT_REVISION
from genapi.exceptions import ArtifactIOError, GenapiError, InvalidUsageError
from genapi.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED, EXIT_INVALID_USAGE
from genapi.models import APISurface, CompareConfig, GlobalConfig
from genapi.output import (
    TAG,
    OutputManager,
    debug,
    error,
    info,
    print_diff,
    set_output,
    success,
    warning,
)


class _TaggedCommand(TyperCommand):
    """Report command-line parse errors as tagged diagnostics."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            error(exc.format_message())
            info(f"Try '{PROGRAM_NAME} --help' for help.")
            ctx.exit(EXIT_INVALID_USAGE)


app = typer.Typer(
    name=PROGRAM_NAME,
    help="Regenerate, dump, compare, or generate bindings from Neovim's api.mpack.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"{PROGRAM_NAME} {__version__}")
        raise typer.Exit()


@app.command(cls=_TaggedCommand)
def run(
    artifact: Optional[str] = typer.Argument(
        None,
        metavar="[ARTIFACT]",
        help="Existing api.mpack ('-' for stdin). Omit to build one from --commit.",
    ),
    generate: str = typer.Option(
        "", "--generate", metavar="FILE",
        help="Write Python bindings generated from the companion to FILE.",
    ),
    compare: bool = typer.Option(
        False, "--compare", help="Diff the companion definition against the artifact."
    ),
    dump: bool = typer.Option(
        False, "--dump", help="Print the decoded artifact as indented JSON."
    ),
    commit: str = typer.Option(
        DEFAULT_REVISION, "--commit",
        help="Neovim revision (hash, branch, or tag) to build api.mpack from.",
    ),
    companion: Optional[str] = typer.Option(
        None, "--companion",
        help="Companion definition (JSON, YAML, or .mpack; path or URL).",
    ),
    save: Optional[str] = typer.Option(
        None, "-o", "--output", metavar="FILE", help="Also save the raw artifact to FILE."
    ),
    git: Optional[str] = typer.Option(None, "--git", help="git executable name or path."),
    python: Optional[str] = typer.Option(
        None, "--python", help="Python interpreter used to run gen_vimdoc.py."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress messages."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Acquire or open api.mpack, decode it, and run the selected mode.

    With no mode flag the artifact is still acquired and decoded, which
    verifies that the revision builds and that the artifact is well formed.
    """
    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    output.configure_logging()

    from genapi.config import resolve_config

    try:
        config = resolve_config(cli_git=git, cli_python=python, cli_companion=companion)
        _run(
            artifact=artifact,
            generate=generate,
            compare=compare,
            dump=dump,
            commit=commit,
            save=save,
            config=config,
        )
    except GenapiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _run(
    *,
    artifact: Optional[str],
    generate: str,
    compare: bool,
    dump: bool,
    commit: str,
    save: Optional[str],
    config: GlobalConfig,
) -> None:
    """Validate the mode selection, then acquire, decode, and render."""
    modes = [
        flag
        for flag, selected in (("--dump", dump), ("--compare", compare), ("--generate", bool(generate)))
        if selected
    ]
    if len(modes) > 1:
        raise InvalidUsageError(f"{' and '.join(modes)} cannot be combined")
    if compare and not config.companion:
        raise InvalidUsageError(
            "--compare needs a companion definition (--companion or GENAPI_COMPANION)"
        )

    source: Any
    if artifact is None:
        source = ArtifactAcquirer(config.tools).acquire(commit)
        label = f"{API_MPACK_PATH.as_posix()}@{commit}"
    else:
        if commit != DEFAULT_REVISION:
            warning(f"--commit {commit} is ignored when an artifact path is given")
        source = artifact
        label = artifact

    with open_artifact(source) as stream:
        if save:
            _save_artifact(stream, Path(save))
        surface = decode_surface(stream)
    debug(
        f"decoded {len(surface)} functions "
        f"({len(surface.public())} public, {len(surface.internal())} internal)"
    )

    if dump:
        from genapi.render import dump_json

        dump_json(surface)
    elif compare and config.companion:
        _compare(surface, label, config.companion, config.compare)
    elif generate:
        _generate(surface, label, Path(generate), config)


def _save_artifact(stream: BinaryIO, path: Path) -> None:
    """Copy the raw artifact bytes to *path* and rewind *stream*."""
    try:
        data = stream.read()
        path.write_bytes(data)
    except OSError as exc:
        raise ArtifactIOError(f"cannot save artifact to {path}: {exc}") from exc
    stream.seek(0)
    success(f"Saved {len(data)} bytes to {path}")


def _compare(
    surface: APISurface, label: str, companion_ref: str, compare_config: CompareConfig
) -> None:
    from genapi.companion import load_companion
    from genapi.render.compare import compare_surfaces, render_unified_diff, summarize

    companion = load_companion(companion_ref)
    result = compare_surfaces(companion, surface, compare_config)
    diff = render_unified_diff(
        companion,
        surface,
        compare_config,
        companion_label=companion_ref,
        artifact_label=label,
    )
    if not diff:
        success(f"{companion_ref} matches {label}")
        return
    print_diff(diff)
    for line in summarize(result):
        info(line)


def _generate(surface: APISurface, label: str, path: Path, config: GlobalConfig) -> None:
    from genapi.render import write_bindings

    source_label = label
    if config.companion:
        from genapi.companion import load_companion

        surface = load_companion(config.companion)
        source_label = config.companion
    else:
        info("No companion configured; generating from the artifact")

    try:
        count = write_bindings(surface, path, source=source_label)
    except OSError as exc:
        raise ArtifactIOError(f"cannot write {path}: {exc}") from exc
    success(f"Generated {count} functions into {path}")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly.

    ``sys.exit`` unwinds through the acquirer's ``with`` block, so the
    working directory is still removed.
    """

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write(f"\n{TAG}Cancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from genapi.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``genapi`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write(f"\n{TAG}Cancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
