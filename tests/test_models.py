"""Tests for the API surface and configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from genapi.models import (
    DESCRIPTOR_FIELD_ORDER,
    APISurface,
    ComparisonResult,
    FunctionDescriptor,
    GlobalConfig,
    is_internal,
)


class TestIsInternal:
    @pytest.mark.parametrize(
        "name", ["nvim__id", "nvim__stats", "nvim__buf_redraw_range"]
    )
    def test_internal_names(self, name: str) -> None:
        assert is_internal(name)

    @pytest.mark.parametrize(
        "name", ["nvim_buf_line_count", "nvim_get_api_info", "nvim", "", "_x"]
    )
    def test_public_names(self, name: str) -> None:
        assert not is_internal(name)


class TestFunctionDescriptor:
    def test_minimal(self) -> None:
        desc = FunctionDescriptor(signature="void nvim_command(String command)")
        assert desc.parameters == []
        assert desc.parameters_doc == {}
        assert desc.returns == []
        assert desc.doc is None
        assert desc.c_decl is None

    def test_return_alias(self) -> None:
        desc = FunctionDescriptor.model_validate(
            {"signature": "Integer f()", "return": ["a number"]}
        )
        assert desc.returns == ["a number"]

    def test_attribute_name_is_not_a_key(self) -> None:
        desc = FunctionDescriptor.model_validate(
            {"signature": "Integer f()", "returns": ["a number"]}
        )
        assert desc.returns == []

    def test_nil_fields_are_absent(self) -> None:
        desc = FunctionDescriptor.model_validate(
            {
                "signature": "void f()",
                "annotations": None,
                "parameters": None,
                "parameters_doc": None,
                "return": None,
                "seealso": None,
                "doc": None,
            }
        )
        assert desc.annotations == []
        assert desc.parameters == []
        assert desc.parameters_doc == {}
        assert desc.returns == []
        assert desc.seealso == []

    def test_empty_array_parameters_doc(self) -> None:
        desc = FunctionDescriptor.model_validate({"signature": "void f()", "parameters_doc": []})
        assert desc.parameters_doc == {}

    def test_unknown_keys_ignored(self) -> None:
        plain = FunctionDescriptor.model_validate({"signature": "void f()"})
        extended = FunctionDescriptor.model_validate(
            {"signature": "void f()", "since": 12, "deprecated_since": 3}
        )
        assert plain == extended

    def test_signature_required(self) -> None:
        with pytest.raises(ValidationError):
            FunctionDescriptor.model_validate({"doc": "no signature"})

    def test_empty_signature_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FunctionDescriptor(signature="")

    def test_parameters_must_be_pairs(self) -> None:
        with pytest.raises(ValidationError):
            FunctionDescriptor.model_validate(
                {"signature": "void f(Buffer b)", "parameters": [["Buffer"]]}
            )

    def test_parameters_doc_must_name_parameters(self) -> None:
        with pytest.raises(ValidationError, match="unknown parameter"):
            FunctionDescriptor.model_validate(
                {
                    "signature": "void f(Buffer buffer)",
                    "parameters": [["Buffer", "buffer"]],
                    "parameters_doc": {"window": "not a parameter"},
                }
            )

    def test_parameter_names_in_order(self) -> None:
        desc = FunctionDescriptor(
            signature="void nvim_set_var(String name, Object value)",
            parameters=[("String", "name"), ("Object", "value")],
        )
        assert desc.parameter_names == ["name", "value"]

    def test_doc_text(self) -> None:
        assert FunctionDescriptor(signature="x()").doc_text == ""
        assert FunctionDescriptor(signature="x()", doc="one").doc_text == "one"
        assert FunctionDescriptor(signature="x()", doc=["a", "b"]).doc_text == "a\n\nb"

    def test_frozen(self) -> None:
        desc = FunctionDescriptor(signature="void f()")
        with pytest.raises(ValidationError):
            desc.signature = "void g()"  # type: ignore[misc]


class TestToJsonDict:
    def test_key_order(self) -> None:
        desc = FunctionDescriptor.model_validate(
            {
                "c_decl": "Integer f(Buffer b, Error *err)",
                "signature": "Integer f(Buffer b)",
                "seealso": ["g"],
                "return": ["n"],
                "parameters_doc": {"b": "buf"},
                "parameters": [["Buffer", "b"]],
                "doc": "d",
                "annotations": ["since=1"],
            }
        )
        assert tuple(desc.to_json_dict()) == DESCRIPTOR_FIELD_ORDER

    def test_omits_empty_fields(self) -> None:
        desc = FunctionDescriptor.model_validate(
            {"signature": "void f()", "seealso": [], "parameters_doc": [], "doc": ""}
        )
        assert desc.to_json_dict() == {"signature": "void f()"}

    def test_parameters_render_as_lists(self) -> None:
        desc = FunctionDescriptor(
            signature="Integer nvim_buf_line_count(Buffer buffer)",
            parameters=[("Buffer", "buffer")],
        )
        assert desc.to_json_dict()["parameters"] == [["Buffer", "buffer"]]


class TestAPISurface:
    def test_mapping_protocol(self, sample_api) -> None:
        surface = APISurface.model_validate(sample_api)
        assert len(surface) == 4
        assert "nvim__id" in surface
        assert "nvim_missing" not in surface
        assert list(surface) == list(sample_api)
        assert surface.names() == list(sample_api)
        assert surface["nvim_set_var"].parameter_names == ["name", "value"]

    def test_families_are_disjoint(self, sample_api) -> None:
        surface = APISurface.model_validate(sample_api)
        assert surface.internal() == ["nvim__id"]
        assert set(surface.public()) | set(surface.internal()) == set(surface.names())
        assert not set(surface.public()) & set(surface.internal())

    def test_empty(self) -> None:
        surface = APISurface({})
        assert len(surface) == 0
        assert surface.to_json_dict() == {}


class TestComparisonResult:
    def test_identical(self) -> None:
        assert ComparisonResult().identical
        assert not ComparisonResult(missing=["nvim_x"]).identical


class TestGlobalConfig:
    def test_defaults(self) -> None:
        config = GlobalConfig()
        assert config.tools.git == "git"
        assert config.tools.python == "python3"
        assert config.companion is None
        assert config.compare.ignore == []
        assert config.compare.include_internal is True

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig.model_validate({"companoin": "typo.yaml"})
