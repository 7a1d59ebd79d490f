"""Default ignore rules.

Both checks match the regular expressions in ``ProcessorConfig.ignore``
with :func:`re.search`. Operations are matched on their path; schemas on
their reference id and on their name (see
:func:`~specir.policy.naming.schema_name`).

With the default empty pattern list nothing is ignored.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from specir.description import RawOperationNode, RawSchemaNode
from specir.policy import naming

if TYPE_CHECKING:
    from specir.processor.state import ProcessorState


def ignore_operation(state: ProcessorState, node: RawOperationNode) -> bool:
    """Whether the path of *node* matches an ignore pattern."""
    return _matches(state.config.ignore, node.path)


def ignore_schema(state: ProcessorState, node: RawSchemaNode) -> bool:
    """Whether the reference id or the name of *node* matches an ignore pattern."""
    patterns = state.config.ignore
    if not patterns:
        return False
    if _matches(patterns, node.ref):
        return True
    name = naming.schema_name(state, node)
    return name is not None and _matches(patterns, name)


def _matches(patterns: list[str], text: str) -> bool:
    return any(re.search(pattern, text) for pattern in patterns)
