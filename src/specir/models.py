"""Canonical Pydantic models shared across all specir modules.

The models fall into two groups:

**Configuration models** -- loaded from JSON files and CLI flags:
    :class:`ProcessorConfig`.

**IR models** -- produced by the processor and handed to a rendering stage:
    :class:`HTTPMethod`, :class:`ParameterLocation`, the type values
    (:class:`SchemaRef`, :class:`ArrayType`, :class:`MapType`,
    :class:`UnionType`, :class:`EnumType`), :class:`Param`,
    :class:`SchemaField`, :class:`Schema`, :class:`SchemaContext`, and
    :class:`Operation`.

IR models are frozen: once the processor inserts a :class:`Schema` or an
:class:`Operation` into its state it is never modified. The raw input graph
lives in :mod:`specir.description` instead, because it may be cyclic.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Processor Config ---


class ProcessorConfig(BaseModel):
    """Settings consumed by the default policy and the CLI.

    Resolved by :func:`~specir.config.resolve_config` from CLI flags,
    environment variables, the project-local ``specir.json`` and the user
    config file, in that order of precedence.

    Example::

        ProcessorConfig(
            base_module="petstore",
            ignore=["^/internal/", "Legacy.*"],
        )
    """

    model_config = ConfigDict(extra="forbid")

    base_module: Optional[str] = Field(
        default=None,
        description="Dotted prefix prepended to every generated module name",
    )
    default_operation_module: str = Field(
        default="operations",
        description="Module used for operations that carry no tags",
    )
    operation_use_tags: bool = Field(
        default=True, description="Group operations into one module per tag"
    )
    ignore: list[str] = Field(
        default_factory=list,
        description="Regex patterns matched against operation paths and schema names",
    )
    policy: Optional[str] = Field(
        default=None,
        description="Policy entry-point name or 'module:Class' path",
    )

    @field_validator("ignore")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid ignore pattern {pattern!r}: {exc}") from exc
        return patterns


# --- IR: enums ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Member order is the order in which the processor visits the methods of a
    path item, and therefore the only ordering it guarantees across
    operations.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


# --- IR: type values ---


class SchemaRef(BaseModel):
    """A type that points at another schema by reference id."""

    model_config = ConfigDict(frozen=True)

    ref: str


class ArrayType(BaseModel):
    """A homogeneous list of ``items``."""

    model_config = ConfigDict(frozen=True)

    items: SchemaType


class MapType(BaseModel):
    """A string-keyed map whose values share one type."""

    model_config = ConfigDict(frozen=True)

    values: SchemaType


class UnionType(BaseModel):
    """Any one of several types (``anyOf``, ``oneOf``, OpenAPI 3.1 type lists)."""

    model_config = ConfigDict(frozen=True)

    types: tuple[SchemaType, ...]


class EnumType(BaseModel):
    """A closed set of literal values."""

    model_config = ConfigDict(frozen=True)

    values: tuple[Any, ...]


SchemaType = Union[str, SchemaRef, ArrayType, MapType, UnionType, EnumType]
"""A resolved type: a primitive name (``"string"``, ``"integer"``,
``"number"``, ``"boolean"``, ``"null"``, ``"any"``, ``"map"``) or one of the
composite type models above."""

ArrayType.model_rebuild()
MapType.model_rebuild()
UnionType.model_rebuild()


def iter_refs(schema_type: SchemaType) -> Iterator[str]:
    """Yield every reference id contained in *schema_type*, depth-first."""
    if isinstance(schema_type, SchemaRef):
        yield schema_type.ref
    elif isinstance(schema_type, ArrayType):
        yield from iter_refs(schema_type.items)
    elif isinstance(schema_type, MapType):
        yield from iter_refs(schema_type.values)
    elif isinstance(schema_type, UnionType):
        for member in schema_type.types:
            yield from iter_refs(member)


# --- IR: schemas ---


StatusIndicator = Union[int, str]
"""A response key: an ``int`` status code, a range such as ``"4XX"``, or ``"default"``."""


class SchemaContext(BaseModel):
    """Where a body schema was encountered.

    Attached to a type resolution for attribution only (for instance to name
    an inline schema after the operation that uses it). It never changes how
    a schema resolves.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["request", "response"]
    module_name: str
    function_name: str
    status: Optional[StatusIndicator] = None
    content_type: str


class SchemaField(BaseModel):
    """One property of a rendered :class:`Schema`."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: SchemaType
    required: bool = False
    nullable: bool = False


class Schema(BaseModel):
    """A processed schema, keyed in the processor state by ``ref``.

    A schema rejected by the policy's ``ignore_schema`` check becomes the
    *ignored* marker: no fields, no module, and the ``"map"`` type name so
    that renderers fall back to a plain untyped map.
    """

    model_config = ConfigDict(frozen=True)

    ref: str
    fields: list[SchemaField] = Field(default_factory=list)
    module_name: Optional[str] = None
    type_name: str = "map"

    @property
    def ignored(self) -> bool:
        """Whether this is the untyped-map marker for an ignored schema."""
        return self.module_name is None

    @classmethod
    def ignored_marker(cls, ref: str) -> Schema:
        """Build the marker stored for a schema the policy chose to ignore."""
        return cls(ref=ref, fields=[], module_name=None, type_name="map")


# --- IR: operations ---


class Param(BaseModel):
    """A resolved operation parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    type: SchemaType = "any"
    required: bool = False
    description: Optional[str] = None


class Operation(BaseModel):
    """One client function to be rendered.

    A raw operation expands into one :class:`Operation` per module name
    chosen by the policy; every field except ``function_name`` and
    ``module_name`` is shared across that fan-out.
    """

    model_config = ConfigDict(frozen=True)

    docstring: str
    function_name: str
    module_name: str
    request_method: HTTPMethod
    request_path: str
    request_path_parameters: list[Param] = Field(default_factory=list)
    request_query_parameters: list[Param] = Field(default_factory=list)
    request_body: list[tuple[str, SchemaType]] = Field(default_factory=list)
    responses: list[tuple[StatusIndicator, list[tuple[str, SchemaType]]]] = Field(
        default_factory=list
    )
