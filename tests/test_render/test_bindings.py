"""Tests for the Python bindings generator."""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Any

import pytest

from genapi.models import APISurface, FunctionDescriptor
from genapi.render.bindings import (
    python_name,
    python_type,
    render_bindings,
    return_tag,
    write_bindings,
)


class RecordingCaller:
    def __init__(self) -> None:
        self.requests: list[tuple[Any, ...]] = []

    def request(self, method: str, *args: Any) -> Any:
        self.requests.append((method, *args))
        return len(self.requests)


def _load(source: str) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    exec(compile(source, "nvim_api.py", "exec"), namespace)
    return namespace


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("Integer", "int"),
        ("Boolean", "bool"),
        ("String", "str"),
        ("void", "None"),
        ("Object", "Any"),
        ("Buffer", "Buffer"),
        ("Array", "list[Any]"),
        ("ArrayOf(Integer, 2)", "list[int]"),
        ("ArrayOf(Buffer)", "list[Buffer]"),
        ("DictionaryOf(LuaRef)", "dict[str, Any]"),
        ("ArrayOf(DictionaryOf(String))", "list[dict[str, str]]"),
        ("Dict(option)", "dict[str, Any]"),
        ("SomethingNew", "Any"),
    ],
)
def test_python_type(tag: str, expected: str) -> None:
    assert python_type(tag) == expected


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("nvim_buf_line_count", "buf_line_count"),
        ("nvim__id", "_id"),
        ("buffer", "buffer"),
        ("lambda", "lambda_"),
        ("self", "self_"),
        ("from", "from_"),
        ("2d", "_2d"),
    ],
)
def test_python_name(name: str, expected: str) -> None:
    assert python_name(name) == expected


class TestReturnTag:
    def test_from_c_decl(self) -> None:
        desc = FunctionDescriptor(
            signature="nvim_buf_line_count(Buffer buffer)",
            c_decl="Integer nvim_buf_line_count(Buffer buffer, Error *err)",
        )
        assert return_tag("nvim_buf_line_count", desc) == "Integer"

    def test_from_signature(self) -> None:
        desc = FunctionDescriptor(signature="ArrayOf(Buffer) nvim_list_bufs()")
        assert return_tag("nvim_list_bufs", desc) == "ArrayOf(Buffer)"

    def test_unknown(self) -> None:
        desc = FunctionDescriptor(signature="nvim_x()")
        assert return_tag("nvim_x", desc) == "Object"


class TestRenderBindings:
    def test_valid_python(self, sample_api) -> None:
        source = render_bindings(APISurface.model_validate(sample_api))
        ast.parse(source)

    def test_header_names_source(self, sample_api) -> None:
        source = render_bindings(APISurface.model_validate(sample_api), source="api_def.yaml")
        assert "Code generated by genapi from api_def.yaml. DO NOT EDIT." in source

    def test_methods_forward_to_caller(self, sample_api) -> None:
        namespace = _load(render_bindings(APISurface.model_validate(sample_api)))
        caller = RecordingCaller()
        nvim = namespace["Nvim"](caller)

        assert nvim.buf_line_count(namespace["Buffer"](3)) == 1
        nvim.set_var("answer", 42)
        nvim._id({"a": 1})
        assert caller.requests == [
            ("nvim_buf_line_count", 3),
            ("nvim_set_var", "answer", 42),
            ("nvim__id", {"a": 1}),
        ]

    def test_annotations(self, sample_api) -> None:
        source = render_bindings(APISurface.model_validate(sample_api))
        assert "def buf_line_count(self, buffer: Buffer) -> int:" in source
        assert "def set_var(self, name: str, value: Any) -> None:" in source
        assert "def get_current_line(self) -> str:" in source

    def test_docstrings(self, sample_api) -> None:
        namespace = _load(render_bindings(APISurface.model_validate(sample_api)))
        doc = namespace["Nvim"].buf_line_count.__doc__
        assert "Returns the number of lines in the given buffer." in doc
        assert "buffer: Buffer handle, or 0 for current buffer" in doc
        assert "See :help nvim_buf_line_count()" in doc

    def test_docstring_escaping(self) -> None:
        surface = APISurface.model_validate(
            {"nvim_x": {"signature": "void nvim_x()", "doc": 'Use """quotes""" and \\n'}}
        )
        namespace = _load(render_bindings(surface))
        assert '"""quotes"""' in namespace["Nvim"].x.__doc__
        assert "\\n" in namespace["Nvim"].x.__doc__

    def test_sorted_and_stable(self, sample_api) -> None:
        forward = APISurface.model_validate(sample_api)
        backward = APISurface.model_validate(dict(reversed(list(sample_api.items()))))
        assert render_bindings(forward) == render_bindings(backward)

    def test_empty_surface(self) -> None:
        namespace = _load(render_bindings(APISurface({})))
        assert "Nvim" in namespace


def test_write_bindings(tmp_path: Path, sample_api) -> None:
    target = tmp_path / "out" / "nvim_api.py"
    count = write_bindings(APISurface.model_validate(sample_api), target, source="api.mpack")
    assert count == 4
    assert target.read_text(encoding="utf-8").startswith('"""Neovim remote API bindings.')
    assert list(target.parent.iterdir()) == [target]
