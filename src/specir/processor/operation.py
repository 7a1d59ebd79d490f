"""Expand raw operations into :class:`~specir.models.Operation` entities.

Paths are visited in description order and, within a path, methods in the
fixed :class:`~specir.models.HTTPMethod` order (get, put, post, delete,
options, head, patch, trace). Every schema a kept operation touches is
handed to :mod:`specir.processor.schema` as it is encountered.

The policy is consulted at these points, per raw operation:

* ``ignore_operation`` -- before anything else.
* ``operation_docstring``, ``operation_module_names``,
  ``operation_request_method`` -- once.
* ``operation_function_name``, ``operation_request_body``,
  ``operation_response_body`` -- once per module name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Union

from specir.description import RawOperationNode, RawParameter, RawSchemaNode
from specir.exceptions import ProcessorError
from specir.models import (
    HTTPMethod,
    Operation,
    Param,
    ParameterLocation,
    SchemaContext,
    SchemaType,
    StatusIndicator,
)
from specir.processor.schema import resolve_type_refs
from specir.processor.state import ProcessorState

logger = logging.getLogger(__name__)

BodyPairs = list[tuple[str, SchemaType]]


def expand_operations(state: ProcessorState) -> ProcessorState:
    """Expand every operation of the description that the policy keeps."""
    for path, item in state.description.paths.items():
        for method in HTTPMethod:
            node = item.operations.get(method.value)
            if node is None:
                continue
            if state.policy.ignore_operation(state, node):
                logger.debug("Skipping %s %s (ignored by policy)", method.value.upper(), path)
                continue
            state = expand_operation(state, node)
    return state


def expand_operation(state: ProcessorState, node: RawOperationNode) -> ProcessorState:
    """Emit one :class:`~specir.models.Operation` per module the policy assigns *node* to.

    Raises:
        ProcessorError: If the policy returns no module names or a request
            method outside :class:`~specir.models.HTTPMethod`, or a
            parameter declares an unknown location.
    """
    policy = state.policy

    state, params = resolve_params(state, node.path_parameters + node.parameters)
    path_params = [p for p in params if p.location == ParameterLocation.PATH]
    query_params = [p for p in params if p.location == ParameterLocation.QUERY]

    docstring = policy.operation_docstring(state, node, query_params)
    module_names = list(policy.operation_module_names(state, node))
    if not module_names:
        raise ProcessorError(
            f"Policy returned no module names for {node.method.upper()} {node.path}"
        )
    request_method = _coerce_method(policy.operation_request_method(state, node), node)

    for module_name in module_names:
        function_name = policy.operation_function_name(state, node)

        state, request_body = resolve_request_body(
            state,
            policy.operation_request_body(state, node),
            module_name,
            function_name,
        )
        state, responses = resolve_response_body(
            state,
            policy.operation_response_body(state, node),
            module_name,
            function_name,
        )

        state.operations.append(
            Operation(
                docstring=docstring,
                function_name=function_name,
                module_name=module_name,
                request_method=request_method,
                request_path=node.path,
                request_path_parameters=path_params,
                request_query_parameters=query_params,
                request_body=request_body,
                responses=responses,
            )
        )
        logger.debug(
            "Operation %s %s -> %s.%s",
            request_method.value.upper(),
            node.path,
            module_name,
            function_name,
        )

    return state


def resolve_params(
    state: ProcessorState, declarations: list[RawParameter]
) -> tuple[ProcessorState, list[Param]]:
    """Resolve parameter declarations into :class:`~specir.models.Param` objects.

    Declaration order is preserved. Path parameters are always required.
    """
    params: list[Param] = []
    for declaration in declarations:
        try:
            location = ParameterLocation(declaration.location)
        except ValueError:
            raise ProcessorError(
                f"Parameter '{declaration.name}' has unknown location "
                f"'{declaration.location}'"
            ) from None

        param_type: SchemaType = "any"
        if declaration.schema is not None:
            param_type = state.type_resolver.from_schema(state, declaration.schema)
            state = resolve_type_refs(state, param_type)

        params.append(
            Param(
                name=declaration.name,
                location=location,
                type=param_type,
                required=declaration.required or location == ParameterLocation.PATH,
                description=declaration.description,
            )
        )
    return state, params


def resolve_request_body(
    state: ProcessorState,
    body: Union[Mapping[str, RawSchemaNode], Iterable[tuple[str, RawSchemaNode]]],
    module_name: str,
    function_name: str,
) -> tuple[ProcessorState, BodyPairs]:
    """Resolve request body schemas, ordered by content type descending."""
    resolved: BodyPairs = []
    for content_type, node in sorted(_pairs(body), key=lambda pair: pair[0], reverse=True):
        context = SchemaContext(
            kind="request",
            module_name=module_name,
            function_name=function_name,
            content_type=content_type,
        )
        state, schema_type = _resolve_body_schema(state, node, context)
        resolved.append((content_type, schema_type))
    return state, resolved


def resolve_response_body(
    state: ProcessorState,
    body: Union[Mapping[Any, Any], Iterable[tuple[Any, Any]]],
    module_name: str,
    function_name: str,
) -> tuple[ProcessorState, list[tuple[StatusIndicator, BodyPairs]]]:
    """Resolve response schemas, ordered by status indicator descending.

    Content types keep their document order within a status. See
    :func:`status_sort_key` for where ``"default"`` and ranges land.
    """
    resolved: list[tuple[StatusIndicator, BodyPairs]] = []
    for status, content in sorted(_pairs(body), key=lambda pair: status_sort_key(pair[0])):
        schema_types: BodyPairs = []
        for content_type, node in _pairs(content):
            context = SchemaContext(
                kind="response",
                module_name=module_name,
                function_name=function_name,
                status=status,
                content_type=content_type,
            )
            state, schema_type = _resolve_body_schema(state, node, context)
            schema_types.append((content_type, schema_type))
        resolved.append((status, schema_types))
    return state, resolved


def status_sort_key(status: StatusIndicator) -> tuple[int, float]:
    """Sort key placing status indicators in descending order.

    Numeric codes sort by value, highest first. A range such as ``"4XX"``
    sorts directly above the highest concrete code of its class (as if it
    were 499.5). ``"default"`` sorts after everything else.

    Raises:
        ProcessorError: For any other indicator.
    """
    if isinstance(status, int) and not isinstance(status, bool):
        return (0, -float(status))

    text = str(status)
    if text == "default":
        return (1, 0.0)
    if text.isdigit():
        return (0, -float(text))
    if len(text) == 3 and text[0].isdigit() and text[1:].upper() == "XX":
        return (0, -(int(text[0]) * 100 + 99.5))

    raise ProcessorError(f"Unrecognised response status indicator: {status!r}")


def _resolve_body_schema(
    state: ProcessorState, node: RawSchemaNode, context: SchemaContext
) -> tuple[ProcessorState, SchemaType]:
    schema_type = state.type_resolver.from_schema(state, node, context)
    state = resolve_type_refs(state, schema_type)
    return state, schema_type


def _pairs(body: Any) -> list[tuple[Any, Any]]:
    if isinstance(body, Mapping):
        return list(body.items())
    return list(body)


def _coerce_method(value: Any, node: RawOperationNode) -> HTTPMethod:
    if isinstance(value, HTTPMethod):
        return value
    try:
        return HTTPMethod(str(value).lower())
    except ValueError:
        raise ProcessorError(
            f"Unsupported request method {value!r} for {node.path}"
        ) from None
