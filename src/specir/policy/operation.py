"""Default docstring, request method, and body extraction for operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from specir.description import RawOperationNode, RawSchemaNode
from specir.exceptions import ProcessorError
from specir.models import HTTPMethod, Param

if TYPE_CHECKING:
    from specir.processor.state import ProcessorState


def docstring(state: ProcessorState, node: RawOperationNode, query_params: list[Param]) -> str:
    """Summary, description, and an ``## Options`` list of the query parameters.

    Deprecated operations open with a ``[DEPRECATED]`` line.

    Example output::

        List all pets

        Returns every pet in the store.

        ## Options

          * `limit`: How many items to return
    """
    sections: list[str] = []
    if node.deprecated:
        sections.append("[DEPRECATED]")
    if node.summary:
        sections.append(node.summary.strip())
    if node.description:
        sections.append(node.description.strip())

    if query_params:
        lines = ["## Options", ""]
        for param in query_params:
            line = f"  * `{param.name}`"
            if param.description:
                line += f": {param.description.strip()}"
            lines.append(line)
        sections.append("\n".join(lines))

    return "\n\n".join(sections)


def request_method(state: ProcessorState, node: RawOperationNode) -> HTTPMethod:
    try:
        return HTTPMethod(node.method.lower())
    except ValueError:
        raise ProcessorError(
            f"Unsupported request method '{node.method}' for {node.path}"
        ) from None


def request_body(state: ProcessorState, node: RawOperationNode) -> dict[str, RawSchemaNode]:
    return dict(node.request_body)


def response_body(
    state: ProcessorState, node: RawOperationNode
) -> dict[Union[int, str], dict[str, RawSchemaNode]]:
    return {status: dict(content) for status, content in node.responses.items()}
