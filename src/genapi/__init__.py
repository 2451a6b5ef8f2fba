"""genapi -- Regenerate, inspect, and compare Neovim's remote API description.

This package materialises Neovim's ``api.mpack`` artifact (the msgpack
description written by the editor's ``scripts/gen_vimdoc.py``), decodes it
into a typed :class:`~genapi.models.APISurface`, and renders it for client
library generators.

Typical workflow::

    genapi --commit v0.9.5 --dump > api.json     # clone, extract, dump
    genapi api.mpack --compare --companion api_def.yaml
    genapi api.mpack --generate nvim_api.py

Modules:
    app: Typer application and console-script entry point.
    models: Pydantic models for the API surface and configuration.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr discipline with a fixed program tag.
"""

__version__ = "0.1.0"

PROGRAM_NAME = "genapi"
