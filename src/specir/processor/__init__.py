"""Processor -- turn a raw description into the code-generation IR.

The processor is operation-first: schemas are visited when an operation's
parameters, request body, or responses reference them. A final pass then
processes the registry schemas no operation reached, so the result holds
every schema of the description.

Typical usage::

    from specir.processor import run

    state = run(description)
    for operation in state.operations:
        print(operation.module_name, operation.function_name)

Sub-modules:

* :mod:`~specir.processor.state` -- the accumulator threaded through a run.
* :mod:`~specir.processor.types` -- schema node to type value rules.
* :mod:`~specir.processor.schema` -- memoized, cycle-safe schema resolution.
* :mod:`~specir.processor.operation` -- operation filtering and fan-out.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from specir.description import RawDescription
from specir.models import ProcessorConfig
from specir.processor.operation import expand_operations
from specir.processor.schema import resolve_remaining_schemas, resolve_schema
from specir.processor.state import ProcessorState
from specir.processor.types import TypeResolver

if TYPE_CHECKING:
    from specir.policy.base import Policy

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessorState",
    "TypeResolver",
    "expand_operations",
    "process_document",
    "resolve_remaining_schemas",
    "resolve_schema",
    "run",
]


def run(
    description: RawDescription,
    policy: Optional[Policy] = None,
    config: Optional[ProcessorConfig] = None,
    type_resolver: Optional[TypeResolver] = None,
) -> ProcessorState:
    """Run the processing phase over *description*.

    Args:
        description: The raw description produced by the reader.
        policy: Policy to consult; the default policy when omitted.
        config: Configuration made available to the policy.
        type_resolver: Type rules; the default :class:`TypeResolver` when
            omitted.

    Returns:
        The final state, holding every emitted operation in
        ``operations`` and every processed schema in ``schemas_by_ref``.
    """
    state = ProcessorState.new(
        description, policy=policy, config=config, type_resolver=type_resolver
    )
    state = expand_operations(state)
    state = resolve_remaining_schemas(state)

    logger.info(
        "Processed %s: %d operations, %d schemas",
        description.title,
        len(state.operations),
        len(state.schemas_by_ref),
    )
    return state


def process_document(
    document: dict[str, Any],
    policy: Optional[Policy] = None,
    config: Optional[ProcessorConfig] = None,
) -> ProcessorState:
    """Decode an OpenAPI document dict and run the processor over it.

    Example::

        doc = load_document("petstore.yaml")
        validate_openapi_version(doc)
        state = process_document(doc)
    """
    from specir.reader import read_description

    return run(read_description(document), policy=policy, config=config)
