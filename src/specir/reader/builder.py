"""Decode an OpenAPI document dict into a :class:`~specir.description.RawDescription`.

Every schema object is decoded once, keyed by its JSON pointer. A ``$ref``
is followed to its target pointer and yields the node decoded there, so two
references to ``#/components/schemas/Pet`` produce the same
:class:`~specir.description.RawSchemaNode` and recursive schemas produce a
cyclic graph. A node is stored under its pointer *before* its children are
decoded, which is what stops the walk on cycles.

The schema registry of the resulting description contains every structured
(object) schema plus every named component schema, wherever it appears in
the document, whether or not an operation uses it.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from specir.description import (
    RawDescription,
    RawOperationNode,
    RawParameter,
    RawPathItem,
    RawSchemaNode,
)
from specir.exceptions import DescriptionError
from specir.models import HTTPMethod
from specir.reader import pointer

logger = logging.getLogger(__name__)

_COMPONENT_SCHEMAS = "#/components/schemas"
_COMPOSITIONS = (("allOf", "all_of"), ("anyOf", "any_of"), ("oneOf", "one_of"))


def read_description(document: dict[str, Any]) -> RawDescription:
    """Build the raw description for *document*.

    Args:
        document: A parsed OpenAPI 3.x document, as returned by
            :func:`~specir.reader.loader.load_document`.

    Returns:
        The decoded :class:`~specir.description.RawDescription`.

    Raises:
        DescriptionError: On an unresolvable or external ``$ref``, a ``$ref``
            chain that loops without reaching a value, or a schema that is
            not an object.
    """
    description = _DescriptionBuilder(document).build()
    logger.debug(
        "Read %d paths and %d schemas", len(description.paths), len(description.schemas)
    )
    return description


class _DescriptionBuilder:
    """Single-use walker holding the decode caches for one document."""

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._nodes: dict[str, RawSchemaNode] = {}
        self._registry: dict[str, RawSchemaNode] = {}

    def build(self) -> RawDescription:
        info = self._document.get("info") or {}

        components = (self._document.get("components") or {}).get("schemas") or {}
        for name, raw in components.items():
            self._schema(pointer.join(_COMPONENT_SCHEMAS, name), raw)

        paths: dict[str, RawPathItem] = {}
        for path, raw_item in (self._document.get("paths") or {}).items():
            if _is_extension(path):
                continue
            item_pointer, item = self._follow(pointer.join("#/paths", path), raw_item)
            if not isinstance(item, dict):
                continue
            paths[path] = self._path_item(path, item_pointer, item)

        return RawDescription(
            title=str(info.get("title", "Untitled API")),
            version=str(info.get("version", "0.0.0")),
            paths=paths,
            schemas=self._registry,
        )

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _follow(self, location: str, raw: Any) -> tuple[str, Any]:
        """Follow ``$ref`` chains from *raw*, returning the final pointer and value."""
        seen: set[str] = set()
        while isinstance(raw, dict) and "$ref" in raw:
            target = str(raw["$ref"])
            if target in seen:
                raise DescriptionError(f"$ref chain at {location} loops back to {target}")
            seen.add(target)
            location, raw = target, pointer.resolve(self._document, target)
        return location, raw

    # ------------------------------------------------------------------
    # Paths and operations
    # ------------------------------------------------------------------

    def _path_item(self, path: str, item_pointer: str, item: dict[str, Any]) -> RawPathItem:
        path_params = self._parameters(
            pointer.join(item_pointer, "parameters"), item.get("parameters") or []
        )
        operations: dict[str, RawOperationNode] = {}
        for method in HTTPMethod:
            raw_op = item.get(method.value)
            if not isinstance(raw_op, dict):
                continue
            operations[method.value] = self._operation(
                path, method.value, pointer.join(item_pointer, method.value), raw_op, path_params
            )
        return RawPathItem(path=path, operations=operations, parameters=path_params)

    def _operation(
        self,
        path: str,
        method: str,
        op_pointer: str,
        raw: dict[str, Any],
        path_params: list[RawParameter],
    ) -> RawOperationNode:
        return RawOperationNode(
            path=path,
            method=method,
            operation_id=raw.get("operationId"),
            summary=raw.get("summary"),
            description=raw.get("description"),
            tags=[str(tag) for tag in raw.get("tags") or []],
            deprecated=bool(raw.get("deprecated", False)),
            path_parameters=list(path_params),
            parameters=self._parameters(
                pointer.join(op_pointer, "parameters"), raw.get("parameters") or []
            ),
            request_body=self._request_body(op_pointer, raw.get("requestBody")),
            responses=self._responses(op_pointer, raw.get("responses") or {}),
        )

    def _parameters(self, list_pointer: str, raw_params: list[Any]) -> list[RawParameter]:
        params: list[RawParameter] = []
        for index, raw in enumerate(raw_params):
            param_pointer, raw = self._follow(pointer.join(list_pointer, index), raw)
            if not isinstance(raw, dict):
                continue

            schema = None
            if "schema" in raw:
                schema = self._schema(pointer.join(param_pointer, "schema"), raw["schema"])
            else:
                content = self._content(param_pointer, raw.get("content") or {})
                if content:
                    schema = next(iter(content.values()))

            params.append(
                RawParameter(
                    name=str(raw.get("name", "")),
                    location=str(raw.get("in", "query")),
                    required=bool(raw.get("required", False)),
                    description=raw.get("description"),
                    schema=schema,
                )
            )
        return params

    def _request_body(self, op_pointer: str, raw: Any) -> dict[str, RawSchemaNode]:
        if raw is None:
            return {}
        body_pointer, body = self._follow(pointer.join(op_pointer, "requestBody"), raw)
        if not isinstance(body, dict):
            return {}
        return self._content(body_pointer, body.get("content") or {})

    def _responses(
        self, op_pointer: str, raw: dict[str, Any]
    ) -> dict[Union[int, str], dict[str, RawSchemaNode]]:
        responses: dict[Union[int, str], dict[str, RawSchemaNode]] = {}
        for status, raw_response in raw.items():
            if _is_extension(status):
                continue
            response_pointer, response = self._follow(
                pointer.join(op_pointer, "responses", status), raw_response
            )
            if not isinstance(response, dict):
                continue
            responses[_status_indicator(status)] = self._content(
                response_pointer, response.get("content") or {}
            )
        return responses

    def _content(self, owner_pointer: str, content: dict[str, Any]) -> dict[str, RawSchemaNode]:
        """Decode a content map, keeping only media types that declare a schema."""
        result: dict[str, RawSchemaNode] = {}
        for content_type, media in content.items():
            if isinstance(media, dict) and "schema" in media:
                result[content_type] = self._schema(
                    pointer.join(owner_pointer, "content", content_type, "schema"),
                    media["schema"],
                )
        return result

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------

    def _schema(self, location: str, raw: Any) -> RawSchemaNode:
        location, raw = self._follow(location, raw)
        if location in self._nodes:
            return self._nodes[location]

        # OpenAPI 3.1 allows boolean schemas; ``true`` accepts anything.
        if isinstance(raw, bool):
            raw = {}
        if not isinstance(raw, dict):
            raise DescriptionError(
                f"Schema at {location} must be an object (got {type(raw).__name__})"
            )

        declared_type = raw.get("type")
        types = declared_type if isinstance(declared_type, list) else [declared_type]
        required = raw.get("required")
        node = RawSchemaNode(
            ref=location,
            type=declared_type,
            title=raw.get("title"),
            description=raw.get("description"),
            format=raw.get("format"),
            enum=list(raw["enum"]) if isinstance(raw.get("enum"), list) else None,
            required=[str(name) for name in required] if isinstance(required, list) else None,
            nullable=bool(raw.get("nullable", False)) or "null" in types,
        )
        self._nodes[location] = node

        for name, raw_prop in (raw.get("properties") or {}).items():
            node.properties[str(name)] = self._schema(
                pointer.join(location, "properties", name), raw_prop
            )
        if "items" in raw:
            node.items = self._schema(pointer.join(location, "items"), raw["items"])
        for key, attr in _COMPOSITIONS:
            members = getattr(node, attr)
            for index, raw_member in enumerate(raw.get(key) or []):
                members.append(self._schema(pointer.join(location, key, index), raw_member))

        extra = raw.get("additionalProperties")
        if isinstance(extra, bool):
            node.additional_properties = extra
        elif extra is not None:
            node.additional_properties = self._schema(
                pointer.join(location, "additionalProperties"), extra
            )

        if node.is_object() or _is_component(location):
            self._registry[location] = node
        return node


def _is_component(location: str) -> bool:
    prefix = _COMPONENT_SCHEMAS + "/"
    return location.startswith(prefix) and "/" not in location[len(prefix):]


def _is_extension(key: Any) -> bool:
    """Specification extensions (``x-...``) may sit beside paths and statuses."""
    return isinstance(key, str) and key.lower().startswith("x-")


def _status_indicator(status: Any) -> Union[int, str]:
    """``"200"`` -> ``200``; ``"default"`` stays; ranges are upper-cased (``"4XX"``)."""
    text = str(status)
    if text.isdigit():
        return int(text)
    if text.lower() == "default":
        return "default"
    return text.upper()
