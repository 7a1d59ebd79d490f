"""Raw description nodes -- the input graph consumed by the processor.

These are produced by :func:`specir.reader.read_description` and never
modified by the processor. Unlike the IR models in :mod:`specir.models` they
are plain dataclasses: a ``$ref`` in the source document becomes a Python
reference to the *same* :class:`RawSchemaNode` object that is registered
under the target reference id, so the node graph may contain cycles.

Every node carries ``ref``, the JSON pointer of the location it was decoded
from (e.g. ``#/components/schemas/Pet``). That pointer is the stable
reference id the processor memoizes on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union


@dataclass(eq=False)
class RawSchemaNode:
    """One schema object from the description.

    Attributes:
        ref: Reference id (JSON pointer) of this node.
        type: The ``type`` keyword -- a string, a list of strings
            (OpenAPI 3.1), or ``None`` when absent.
        title: Optional ``title``.
        description: Optional ``description``.
        format: Optional ``format`` (``int64``, ``date-time``...).
        enum: Literal values from ``enum``, or ``None``.
        properties: Property name to node, in document order.
        required: Names listed in ``required``, or ``None`` when absent.
        nullable: ``nullable: true`` or ``"null"`` in a type list.
        items: Node for array items.
        all_of: Members of ``allOf``.
        any_of: Members of ``anyOf``.
        one_of: Members of ``oneOf``.
        additional_properties: Node, boolean, or ``None`` when absent.
    """

    ref: str
    type: Union[str, list[str], None] = None
    title: Optional[str] = None
    description: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[list[Any]] = None
    properties: dict[str, RawSchemaNode] = field(default_factory=dict, repr=False)
    required: Optional[list[str]] = None
    nullable: bool = False
    items: Optional[RawSchemaNode] = field(default=None, repr=False)
    all_of: list[RawSchemaNode] = field(default_factory=list, repr=False)
    any_of: list[RawSchemaNode] = field(default_factory=list, repr=False)
    one_of: list[RawSchemaNode] = field(default_factory=list, repr=False)
    additional_properties: Union[RawSchemaNode, bool, None] = field(
        default=None, repr=False
    )

    @property
    def types(self) -> list[str]:
        """The declared type keyword as a list (empty when absent)."""
        if self.type is None:
            return []
        if isinstance(self.type, list):
            return list(self.type)
        return [self.type]

    def is_object(self) -> bool:
        """Whether this node describes a structured object with named properties."""
        if self.properties:
            return True
        if "object" in self.types and self.additional_properties in (None, False):
            return True
        return bool(self.all_of) and all(member.is_object() for member in self.all_of)

    def iter_properties(self) -> Iterator[tuple[str, RawSchemaNode]]:
        """Yield ``(name, node)`` for own properties, then ``allOf`` members' properties.

        A name already yielded is not yielded again, so own properties win.
        """
        seen: set[str] = set()
        for name, node in self.properties.items():
            seen.add(name)
            yield name, node
        for member in self.all_of:
            for name, node in member.iter_properties():
                if name not in seen:
                    seen.add(name)
                    yield name, node

    def required_names(self) -> set[str]:
        """Union of the ``required`` lists of this node and its ``allOf`` members."""
        names = set(self.required or [])
        for member in self.all_of:
            names |= member.required_names()
        return names


@dataclass(eq=False)
class RawParameter:
    """A parameter object (path-level or operation-level)."""

    name: str
    location: str
    required: bool = False
    description: Optional[str] = None
    schema: Optional[RawSchemaNode] = None


@dataclass(eq=False)
class RawOperationNode:
    """One HTTP method on one path.

    Attributes:
        path: The path template (``/pets/{petId}``).
        method: Lowercase HTTP method string.
        operation_id: ``operationId`` or ``None``.
        summary: ``summary`` or ``None``.
        description: ``description`` or ``None``.
        tags: ``tags`` in document order.
        deprecated: ``deprecated`` flag.
        path_parameters: Parameters declared on the path item.
        parameters: Parameters declared on the operation.
        request_body: Content type to schema node.
        responses: Status indicator (``int``, ``"4XX"``, ``"default"``) to
            content type to schema node.
    """

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    deprecated: bool = False
    path_parameters: list[RawParameter] = field(default_factory=list)
    parameters: list[RawParameter] = field(default_factory=list)
    request_body: dict[str, RawSchemaNode] = field(default_factory=dict)
    responses: dict[Union[int, str], dict[str, RawSchemaNode]] = field(
        default_factory=dict
    )


@dataclass(eq=False)
class RawPathItem:
    """A path and the operations declared on it."""

    path: str
    operations: dict[str, RawOperationNode] = field(default_factory=dict)
    parameters: list[RawParameter] = field(default_factory=list)


@dataclass(eq=False)
class RawDescription:
    """The decoded API description handed to the processor.

    Attributes:
        title: ``info.title``.
        version: ``info.version``.
        paths: Path template to :class:`RawPathItem`, in document order.
        schemas: Reference id to node for every schema reachable anywhere in
            the document, including ones no operation uses.
    """

    title: str = "Untitled API"
    version: str = "0.0.0"
    paths: dict[str, RawPathItem] = field(default_factory=dict)
    schemas: dict[str, RawSchemaNode] = field(default_factory=dict)
