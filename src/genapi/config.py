"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for genapi:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.genapi/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~genapi.models.GlobalConfig` JSON
  file naming the external programs, the companion definition, and the
  comparison ignore list.
* **Project-local config** -- ``./genapi.json`` with the same shape, so a
  bindings repository can pin its companion file and ignore list.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config.

Generated files are written with :func:`atomic_write` so that an interrupted
``--generate`` never leaves a half-written module behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from genapi import PROGRAM_NAME
from genapi.exceptions import ConfigError
from genapi.models import GlobalConfig

_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = f"{PROGRAM_NAME}.json"

ENV_GIT = "GENAPI_GIT"
ENV_PYTHON = "GENAPI_PYTHON"
ENV_COMPANION = "GENAPI_COMPANION"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{PROGRAM_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/genapi/`` (default ``~/.config/genapi/``).
    On macOS/Windows: ``~/.genapi/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / PROGRAM_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/genapi/`` (default ``~/.local/share/genapi/``).
    On macOS/Windows: ``~/.genapi/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / PROGRAM_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Loading ---


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config at {path}: expected a JSON object")
    return data


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~genapi.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(_read_json(path))
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./genapi.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_git: Optional[str] = None,
    cli_python: Optional[str] = None,
    cli_companion: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--git``, ``--python``, ``--companion``)
        2. Environment variables (``GENAPI_GIT``, ``GENAPI_PYTHON``,
           ``GENAPI_COMPANION``)
        3. Project config (``./genapi.json``)
        4. User config (``~/.config/genapi/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~genapi.models.GlobalConfig`.

    Raises:
        ConfigError: If any config file is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        try:
            config = GlobalConfig.model_validate(
                _merge(config.model_dump(mode="json"), project)
            )
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid project config at {Path.cwd() / _PROJECT_CONFIG_FILENAME}: {exc}"
            ) from exc

    git = cli_git or os.environ.get(ENV_GIT)
    if git:
        config.tools.git = git
    python = cli_python or os.environ.get(ENV_PYTHON)
    if python:
        config.tools.python = python
    companion = cli_companion or os.environ.get(ENV_COMPANION)
    if companion:
        config.companion = companion

    return config
