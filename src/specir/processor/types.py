"""Map raw schema nodes to type values.

The :class:`TypeResolver` answers one question for the processor: is this
schema node a plain type (``"string"``, an array of integers, a map...) or a
structured object that must be processed into its own
:class:`~specir.models.Schema`? Objects come back as a
:class:`~specir.models.SchemaRef` carrying the node's reference id; the
caller is responsible for resolving it.

Replace the resolver by passing ``type_resolver=`` to
:func:`specir.processor.run` when a different set of type rules is needed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from specir.description import RawSchemaNode
from specir.models import (
    ArrayType,
    EnumType,
    MapType,
    SchemaContext,
    SchemaRef,
    SchemaType,
    UnionType,
    iter_refs,
)

if TYPE_CHECKING:
    from specir.processor.state import ProcessorState

logger = logging.getLogger(__name__)

_PRIMITIVES = frozenset({"string", "integer", "number", "boolean", "null"})


class TypeResolver:
    """Default type rules for OpenAPI 3.0/3.1 schema nodes."""

    def from_schema(
        self,
        state: ProcessorState,
        node: RawSchemaNode,
        context: Optional[SchemaContext] = None,
    ) -> SchemaType:
        """Resolve *node* to a type value.

        When *context* is given it is recorded in the state against the node
        and every reference the resulting type contains, so that a policy
        can later attribute inline schemas to the operation that uses them.

        Args:
            state: The current processor state.
            node: The schema node to inspect.
            context: Where the node was encountered, for body schemas.

        Returns:
            A primitive type name, a composite type, or a
            :class:`~specir.models.SchemaRef`.
        """
        schema_type = self._type_of(node, set())
        if context is not None:
            logger.debug("Resolved %s in %s as %r", node.ref, context, schema_type)
            state.record_context(node.ref, context)
            for ref in iter_refs(schema_type):
                state.record_context(ref, context)
        return schema_type

    def _type_of(self, node: RawSchemaNode, visiting: set[int]) -> SchemaType:
        if node.is_object():
            return SchemaRef(ref=node.ref)

        # Non-object cycles (an array of itself) have no finite type.
        if id(node) in visiting:
            return "any"
        visiting = visiting | {id(node)}

        if node.enum is not None:
            return EnumType(values=tuple(node.enum))

        members = node.any_of or node.one_of
        if members:
            return _union([self._type_of(member, visiting) for member in members])

        if node.all_of and not node.properties:
            # ``allOf: [{$ref: X}, {nullable: true}]`` is just X.
            typed = [member for member in node.all_of if not _is_annotation(member)]
            if len(typed) == 1:
                return self._type_of(typed[0], visiting)
            return "any"

        declared = [t for t in node.types if t != "null"] or node.types
        if len(declared) > 1:
            return _union([self._single_type(node, t, visiting) for t in declared])
        return self._single_type(node, declared[0] if declared else None, visiting)

    def _single_type(
        self, node: RawSchemaNode, type_name: Optional[str], visiting: set[int]
    ) -> SchemaType:
        if type_name == "array":
            if node.items is None:
                return ArrayType(items="any")
            return ArrayType(items=self._type_of(node.items, visiting))

        if type_name == "object" or (
            type_name is None and node.additional_properties is not None
        ):
            extra = node.additional_properties
            if isinstance(extra, RawSchemaNode):
                return MapType(values=self._type_of(extra, visiting))
            return "map"

        if type_name in _PRIMITIVES:
            return type_name
        return "any"


def _union(types: list[SchemaType]) -> SchemaType:
    unique: list[SchemaType] = []
    for schema_type in types:
        if schema_type not in unique:
            unique.append(schema_type)
    if len(unique) == 1:
        return unique[0]
    return UnionType(types=tuple(unique))


def _is_annotation(node: RawSchemaNode) -> bool:
    """True for a node that only annotates (``nullable``, ``description``...)."""
    return not (
        node.types
        or node.properties
        or node.enum is not None
        or node.items is not None
        or node.all_of
        or node.any_of
        or node.one_of
        or node.additional_properties is not None
    )
