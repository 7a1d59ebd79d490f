"""Base class for processor policies.

A policy makes every decision the processor does not make itself: which
operations and schemas to skip, how to name client functions, modules and
types, and where request and response bodies come from. :class:`Policy`
implements all of these with the default behaviour, so a custom policy
subclasses it and overrides only what it needs.

Policies are selected with the ``policy`` config key or the ``--policy``
flag and located by :func:`~specir.policy.manager.load_policy`, either as a
``module:Class`` path or as an entry point in the ``specir.policies`` group.

Example:
    Put every operation in a single module::

        class SingleModulePolicy(Policy):
            def operation_module_names(self, state, node):
                return ["client"]

Every method receives the current
:class:`~specir.processor.state.ProcessorState` first. Exceptions raised by
a policy are not caught by the processor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Union

from specir.description import RawOperationNode, RawSchemaNode
from specir.models import HTTPMethod, Param
from specir.policy import ignore, naming, operation

if TYPE_CHECKING:
    from specir.processor.state import ProcessorState

RequestBody = Union[Mapping[str, RawSchemaNode], Iterable[tuple[str, RawSchemaNode]]]
ResponseBody = Union[
    Mapping[Any, Mapping[str, RawSchemaNode]],
    Iterable[tuple[Any, Mapping[str, RawSchemaNode]]],
]


class Policy:
    """Default policy. Subclass and override individual methods to customise.

    The processor calls these methods at fixed points (see
    :mod:`specir.processor.operation`) and treats every call as a pure
    function of the state and node it is given.
    """

    @property
    def name(self) -> str:
        """Return a short name used in logs."""
        return "default"

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def ignore_operation(self, state: ProcessorState, node: RawOperationNode) -> bool:
        """Whether to drop *node* before it is processed.

        See :func:`specir.policy.ignore.ignore_operation` for the default.
        """
        return ignore.ignore_operation(state, node)

    def ignore_schema(self, state: ProcessorState, node: RawSchemaNode) -> bool:
        """Whether *node* should become a plain untyped map instead of a schema.

        See :func:`specir.policy.ignore.ignore_schema` for the default.
        """
        return ignore.ignore_schema(state, node)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operation_docstring(
        self, state: ProcessorState, node: RawOperationNode, query_params: list[Param]
    ) -> str:
        """Build the docstring of the client function for *node*.

        *query_params* are the already processed query parameters.
        """
        return operation.docstring(state, node, query_params)

    def operation_function_name(self, state: ProcessorState, node: RawOperationNode) -> str:
        """Choose the client function name; it must be unique within its module."""
        return naming.operation_function(state, node)

    def operation_module_names(
        self, state: ProcessorState, node: RawOperationNode
    ) -> list[str]:
        """Choose every module the client function appears in (at least one)."""
        return naming.operation_modules(state, node)

    def operation_request_method(
        self, state: ProcessorState, node: RawOperationNode
    ) -> HTTPMethod:
        """Return the lowercase HTTP method of *node*."""
        return operation.request_method(state, node)

    def operation_request_body(
        self, state: ProcessorState, node: RawOperationNode
    ) -> RequestBody:
        """Return ``content type -> schema node`` for the request body."""
        return operation.request_body(state, node)

    def operation_response_body(
        self, state: ProcessorState, node: RawOperationNode
    ) -> ResponseBody:
        """Return ``status indicator -> content type -> schema node`` for the responses."""
        return operation.response_body(state, node)

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def schema_module_and_type(
        self, state: ProcessorState, node: RawSchemaNode
    ) -> tuple[str, str]:
        """Choose the module and type name of a processed schema.

        Only called for schemas that are not ignored.
        """
        return naming.schema_module_and_type(state, node)
