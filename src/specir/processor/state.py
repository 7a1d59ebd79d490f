"""The accumulator threaded through every processor step.

:class:`ProcessorState` is created once per run by :meth:`ProcessorState.new`,
handed to each step, mutated there, and returned so the caller re-binds it::

    state = ProcessorState.new(description)
    state = expand_operations(state)
    state = resolve_remaining_schemas(state)

No step keeps a reference to the state after returning it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from specir.description import RawDescription
from specir.models import Operation, ProcessorConfig, Schema, SchemaContext

if TYPE_CHECKING:
    from specir.policy.base import Policy
    from specir.processor.types import TypeResolver


@dataclass
class ProcessorState:
    """Mutable state shared by the schema resolver and the operation expander.

    Attributes:
        policy: The policy consulted for every naming, filtering, and body
            extraction decision.
        type_resolver: Turns a raw schema node into a type value or a
            reference.
        description: The raw description being processed.
        config: Settings available to the policy.
        schemas_by_ref: Reference id to processed :class:`Schema`. Holds at
            most one entry per reference id; the first insert wins.
        operations: Every :class:`Operation` emitted so far.
        in_progress: Reference ids whose fields are currently being
            resolved. A reference found here is treated as already visited,
            which is what terminates cyclic schema graphs.
        schema_contexts: Reference id to the body contexts in which it was
            encountered, in encounter order.
    """

    policy: Policy
    type_resolver: TypeResolver
    description: RawDescription
    config: ProcessorConfig = field(default_factory=ProcessorConfig)
    schemas_by_ref: dict[str, Schema] = field(default_factory=dict)
    operations: list[Operation] = field(default_factory=list)
    in_progress: set[str] = field(default_factory=set)
    schema_contexts: dict[str, list[SchemaContext]] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        description: RawDescription,
        policy: Optional[Policy] = None,
        config: Optional[ProcessorConfig] = None,
        type_resolver: Optional[TypeResolver] = None,
    ) -> ProcessorState:
        """Create the initial state for a run, filling in defaults.

        Args:
            description: The raw description to process.
            policy: Policy instance; the default :class:`~specir.policy.base.Policy`
                when omitted.
            config: Processor configuration; defaults when omitted.
            type_resolver: Type resolver; the default
                :class:`~specir.processor.types.TypeResolver` when omitted.
        """
        from specir.policy.base import Policy
        from specir.processor.types import TypeResolver

        return cls(
            policy=policy if policy is not None else Policy(),
            type_resolver=type_resolver if type_resolver is not None else TypeResolver(),
            description=description,
            config=config if config is not None else ProcessorConfig(),
        )

    def record_context(self, ref: str, context: SchemaContext) -> None:
        """Remember that *ref* was encountered in *context*."""
        contexts = self.schema_contexts.setdefault(ref, [])
        if context not in contexts:
            contexts.append(context)

    def contexts_for(self, ref: str) -> list[SchemaContext]:
        """Return the contexts recorded for *ref* (empty when none)."""
        return list(self.schema_contexts.get(ref, []))
