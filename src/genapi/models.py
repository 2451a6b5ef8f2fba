"""Canonical Pydantic models shared across all genapi modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``genapi.json``:
    :class:`ToolsConfig`, :class:`CompareConfig`, and :class:`GlobalConfig`.

**API surface models** -- produced by the decoder and the companion loader and
consumed by the renderers:
    :class:`FunctionDescriptor`, :class:`APISurface`, and
    :class:`ComparisonResult`.

Neovim's ``api.mpack`` describes every function with the same handful of
optional fields, so a single :class:`FunctionDescriptor` covers all of them.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator


# --- Configuration ---


class ToolsConfig(BaseModel):
    """Names (or paths) of the external programs used by the acquirer."""

    git: str = Field(default="git", description="Version-control client")
    python: str = Field(default="python3", description="Interpreter for gen_vimdoc.py")


class CompareConfig(BaseModel):
    """Settings for ``--compare``.

    ``ignore`` lists functions that are implemented by hand in the companion
    (or deliberately hidden) and should never be reported.
    """

    ignore: list[str] = Field(
        default_factory=list, description="Function names excluded from comparison"
    )
    include_internal: bool = Field(
        default=True, description="Compare nvim__* functions as well"
    )


class GlobalConfig(BaseModel):
    """Top-level configuration loaded from ``config.json`` and ``genapi.json``.

    Unknown keys are rejected so that typos surface as
    :class:`~genapi.exceptions.ConfigError` instead of being ignored.
    """

    model_config = ConfigDict(extra="forbid")

    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    compare: CompareConfig = Field(default_factory=CompareConfig)
    companion: Optional[str] = Field(
        default=None, description="Path or URL of the hand-maintained companion definition"
    )


# --- API surface ---


DESCRIPTOR_FIELD_ORDER: tuple[str, ...] = (
    "annotations",
    "doc",
    "parameters",
    "parameters_doc",
    "return",
    "seealso",
    "signature",
    "c_decl",
)
"""Fixed key order used when rendering a descriptor, so dumps diff cleanly."""


def is_internal(name: str) -> bool:
    """Return ``True`` for internal API names such as ``nvim__id``.

    Internal names carry a doubled separator directly after the namespace
    prefix; every other name belongs to the public family.
    """
    _, sep, rest = name.partition("_")
    return bool(sep) and rest.startswith("_")


class FunctionDescriptor(BaseModel):
    """Description of one remote API function.

    Unknown keys are ignored so that newer artifacts still decode. A ``nil``
    value for a sequence or mapping field is treated as absent.

    Example::

        FunctionDescriptor.model_validate(
            {
                "signature": "Integer nvim_buf_line_count(Buffer buffer)",
                "parameters": [["Buffer", "buffer"]],
                "return": ["Line count"],
            }
        )
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    annotations: list[str] = Field(default_factory=list)
    doc: Optional[Union[str, list[str]]] = None
    parameters: list[tuple[str, str]] = Field(default_factory=list)
    parameters_doc: dict[str, str] = Field(default_factory=dict)
    returns: list[str] = Field(default_factory=list, alias="return")
    seealso: list[str] = Field(default_factory=list)
    signature: str = Field(min_length=1)
    c_decl: Optional[str] = None

    @field_validator("annotations", "parameters", "returns", "seealso", mode="before")
    @classmethod
    def _nil_as_empty_list(cls, value: Any) -> Any:  # noqa: ANN401
        return [] if value is None else value

    @field_validator("parameters_doc", mode="before")
    @classmethod
    def _nil_as_empty_dict(cls, value: Any) -> Any:  # noqa: ANN401
        # Lua encodes an empty table as an empty array.
        return {} if value is None or value == [] else value

    @model_validator(mode="after")
    def _check_parameters_doc(self) -> FunctionDescriptor:
        unknown = sorted(set(self.parameters_doc) - set(self.parameter_names))
        if unknown:
            raise ValueError(
                "parameters_doc documents unknown parameter(s): " + ", ".join(unknown)
            )
        return self

    @property
    def parameter_names(self) -> list[str]:
        """Parameter names in declaration order."""
        return [name for _, name in self.parameters]

    @property
    def doc_text(self) -> str:
        """``doc`` flattened to a single string (paragraphs joined by blank lines)."""
        if self.doc is None:
            return ""
        if isinstance(self.doc, str):
            return self.doc
        return "\n\n".join(self.doc)

    def to_json_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict in :data:`DESCRIPTOR_FIELD_ORDER`.

        Absent and empty optional fields are omitted; ``signature`` is always
        present.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return {
            key: data[key]
            for key in DESCRIPTOR_FIELD_ORDER
            if key == "signature" or data.get(key) not in (None, "", [], {})
        }


class APISurface(RootModel[dict[str, FunctionDescriptor]]):
    """Mapping of API function name to :class:`FunctionDescriptor`.

    Built once per run and never mutated afterwards. Iteration follows the
    order the decoder saw the names in.
    """

    model_config = ConfigDict(frozen=True)

    def __getitem__(self, name: str) -> FunctionDescriptor:
        return self.root[name]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __contains__(self, name: object) -> bool:
        return name in self.root

    def names(self) -> list[str]:
        return list(self.root)

    def items(self) -> list[tuple[str, FunctionDescriptor]]:
        return list(self.root.items())

    def public(self) -> list[str]:
        """Names of the public family, in surface order."""
        return [name for name in self.root if not is_internal(name)]

    def internal(self) -> list[str]:
        """Names of the internal (``nvim__*``) family, in surface order."""
        return [name for name in self.root if is_internal(name)]

    def to_json_dict(self) -> dict[str, dict[str, Any]]:
        return {name: desc.to_json_dict() for name, desc in self.root.items()}


class ComparisonResult(BaseModel):
    """Outcome of comparing a companion surface against an artifact surface.

    Attributes:
        extra: Names defined only in the companion.
        missing: Names present only in the artifact.
        different: Names present in both whose descriptors differ.
    """

    extra: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    different: list[str] = Field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not (self.extra or self.missing or self.different)
