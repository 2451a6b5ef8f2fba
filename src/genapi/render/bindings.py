"""Generate typed Python bindings from an API surface.

The generated module contains one ``Nvim`` class with a method per API
function. Methods only forward their arguments to a caller object that
implements ``request(method, *args)``; no RPC machinery is generated.

Neovim type tags map onto Python annotations through :func:`python_type`::

    Integer              -> int
    ArrayOf(Integer, 2)  -> list[int]
    DictionaryOf(String) -> dict[str, str]
    Buffer               -> Buffer   (an ``int`` subclass in the module)

The return type is the text in front of the function name in ``c_decl``
(falling back to ``signature``); when neither names one, ``Any`` is used.
"""

from __future__ import annotations

import keyword
import re
from pathlib import Path

from genapi.config import atomic_write
from genapi.models import APISurface, FunctionDescriptor

_NAMESPACE_PREFIX = "nvim_"

_SIMPLE_TYPES = {
    "void": "None",
    "Boolean": "bool",
    "Integer": "int",
    "Float": "float",
    "String": "str",
    "Array": "list[Any]",
    "Dictionary": "dict[str, Any]",
    "Dict": "dict[str, Any]",
    "Object": "Any",
    "LuaRef": "Any",
    "Buffer": "Buffer",
    "Window": "Window",
    "Tabpage": "Tabpage",
}

_CONTAINER_RE = re.compile(r"^(ArrayOf|DictionaryOf|DictOf)\((.+?)(?:,\s*\d+)?\)$")

_MODULE_TEMPLATE = '''\
"""Neovim remote API bindings.

Code generated by genapi from {source}. DO NOT EDIT.
"""

from __future__ import annotations

from typing import Any, Protocol


class Buffer(int):
    """Handle of a Neovim buffer."""


class Window(int):
    """Handle of a Neovim window."""


class Tabpage(int):
    """Handle of a Neovim tabpage."""


class Caller(Protocol):
    """Anything that can send a request to Neovim and return its result."""

    def request(self, method: str, *args: Any) -> Any: ...


class Nvim:
    """Typed wrappers around Neovim's remote API.

    Every method forwards its arguments unchanged to ``caller.request``.
    """

    def __init__(self, caller: Caller) -> None:
        self._caller = caller
{methods}'''

_METHOD_TEMPLATE = '''
    def {py_name}(self{params}) -> {returns}:
        """{doc}"""
        return self._caller.request({name!r}{args})
'''


def python_type(tag: str) -> str:
    """Translate a Neovim type tag into a Python annotation string."""
    tag = tag.strip()
    if tag in _SIMPLE_TYPES:
        return _SIMPLE_TYPES[tag]
    match = _CONTAINER_RE.match(tag)
    if match:
        inner = python_type(match.group(2))
        if match.group(1) == "ArrayOf":
            return f"list[{inner}]"
        return f"dict[str, {inner}]"
    # Keyset dictionaries, e.g. Dict(option).
    if tag.startswith(("Dict(", "Dictionary(")):
        return "dict[str, Any]"
    return "Any"


def return_tag(name: str, desc: FunctionDescriptor) -> str:
    """Return the Neovim type tag declared in front of *name*, or ``Object``."""
    for text in (desc.c_decl, desc.signature):
        if not text:
            continue
        idx = text.find(f"{name}(")
        if idx > 0:
            prefix = text[:idx].strip()
            if prefix:
                return prefix
    return "Object"


def python_name(name: str) -> str:
    """Return a valid, non-keyword Python identifier for an API or parameter name."""
    if name.startswith(_NAMESPACE_PREFIX):
        name = name[len(_NAMESPACE_PREFIX):]
    name = re.sub(r"\W", "_", name)
    if not name or name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name == "self":
        name = f"{name}_"
    return name


def _docstring(name: str, desc: FunctionDescriptor) -> str:
    text = desc.doc_text.strip() or desc.signature
    lines = [text]
    for param, param_doc in desc.parameters_doc.items():
        lines.append(f"{param}: {param_doc}")
    lines.append(f"See :help {name}()")
    body = "\n\n".join(lines).replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    indented = "\n".join(
        f"        {line}" if line.strip() else "" for line in body.splitlines()
    )
    return indented.lstrip() + "\n        "


def _render_method(name: str, desc: FunctionDescriptor) -> str:
    params = "".join(
        f", {python_name(pname)}: {python_type(ptype)}" for ptype, pname in desc.parameters
    )
    args = "".join(f", {python_name(pname)}" for pname in desc.parameter_names)
    return _METHOD_TEMPLATE.format(
        py_name=python_name(name),
        params=params,
        returns=python_type(return_tag(name, desc)),
        doc=_docstring(name, desc),
        name=name,
        args=args,
    )


def render_bindings(surface: APISurface, source: str = "api.mpack") -> str:
    """Return the source of a bindings module for every function in *surface*.

    Methods are emitted in name order so regenerating from an unchanged
    surface produces an identical file.
    """
    methods = "".join(_render_method(name, surface[name]) for name in sorted(surface))
    return _MODULE_TEMPLATE.format(source=source, methods=methods)


def write_bindings(surface: APISurface, path: Path, source: str = "api.mpack") -> int:
    """Atomically write :func:`render_bindings` output to *path*.

    Returns:
        The number of generated methods.
    """
    atomic_write(path, render_bindings(surface, source))
    return len(surface)
