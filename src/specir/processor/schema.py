"""Resolve raw schema nodes into processed :class:`~specir.models.Schema` entities.

Schemas are keyed by reference id. :func:`resolve_schema` produces at most
one :class:`~specir.models.Schema` per reference id and terminates on cyclic
graphs: a reference that is already processed, or whose fields are being
resolved further up the call stack, is not visited again.

Fields that point at other structured schemas are stored as
:class:`~specir.models.SchemaRef` values, so a cycle such as ``Node.children
-> Node`` needs no finished ``Node`` schema to describe the field.
"""

from __future__ import annotations

import logging

from specir.description import RawSchemaNode
from specir.exceptions import ProcessorError
from specir.models import Schema, SchemaField, SchemaType, iter_refs
from specir.processor.state import ProcessorState

logger = logging.getLogger(__name__)


def resolve_schema(state: ProcessorState, ref: str, node: RawSchemaNode) -> ProcessorState:
    """Process the schema *node* registered under *ref*.

    Does nothing when *ref* was already processed or is being processed.
    When the policy ignores the node, the untyped-map marker is stored.
    Otherwise every property becomes a :class:`~specir.models.SchemaField`
    (resolving referenced schemas first), the policy names the schema, and
    the result is stored.

    Args:
        state: The current processor state.
        ref: Reference id of *node*.
        node: The raw schema node.

    Returns:
        The updated state.
    """
    if ref in state.schemas_by_ref or ref in state.in_progress:
        return state

    policy = state.policy
    if policy.ignore_schema(state, node):
        logger.debug("Schema %s ignored by policy", ref)
        state.schemas_by_ref[ref] = Schema.ignored_marker(ref)
        return state

    state.in_progress.add(ref)
    try:
        state, fields = resolve_fields(state, node)
        identity = policy.schema_module_and_type(state, node)
    finally:
        state.in_progress.discard(ref)

    try:
        module_name, type_name = identity
    except (TypeError, ValueError):
        raise ProcessorError(
            f"Policy returned {identity!r} as the module and type of schema {ref}; "
            "expected a (module, type) pair"
        ) from None

    state.schemas_by_ref[ref] = Schema(
        ref=ref,
        fields=fields,
        module_name=module_name,
        type_name=type_name,
    )
    logger.debug("Schema %s -> %s.%s (%d fields)", ref, module_name, type_name, len(fields))
    return state


def resolve_fields(
    state: ProcessorState, node: RawSchemaNode
) -> tuple[ProcessorState, list[SchemaField]]:
    """Build the field list of *node*, resolving referenced schemas on the way.

    Properties contributed by ``allOf`` members follow the node's own
    properties. A field is required when its name appears in the node's (or
    an ``allOf`` member's) ``required`` list.
    """
    required = node.required_names()
    fields: list[SchemaField] = []

    for name, field_node in node.iter_properties():
        field_type = state.type_resolver.from_schema(state, field_node)
        state = resolve_type_refs(state, field_type)
        fields.append(
            SchemaField(
                name=name,
                type=field_type,
                required=name in required,
                nullable=field_node.nullable,
            )
        )

    return state, fields


def resolve_type_refs(state: ProcessorState, schema_type: SchemaType) -> ProcessorState:
    """Resolve every schema referenced by *schema_type*.

    Raises:
        ProcessorError: If a reference id is missing from the description's
            schema registry.
    """
    registry = state.description.schemas
    for ref in iter_refs(schema_type):
        node = registry.get(ref)
        if node is None:
            raise ProcessorError(
                f"Schema reference '{ref}' is not in the description's schema registry"
            )
        state = resolve_schema(state, ref, node)
    return state


def resolve_remaining_schemas(state: ProcessorState) -> ProcessorState:
    """Process every registry schema that no operation reached.

    These schemas still pass through the policy's ``ignore_schema`` check.
    """
    for ref, node in list(state.description.schemas.items()):
        state = resolve_schema(state, ref, node)
    return state
