"""JSON Pointer helpers for internal ``$ref`` values (RFC 6901).

Reference ids in specir are the JSON pointers of the nodes they identify,
so the same helpers build ids while decoding and resolve ``$ref`` targets.
Only document-internal pointers (``#/...``) are supported.
"""

from __future__ import annotations

from typing import Any

from specir.exceptions import DescriptionError


def escape(segment: str) -> str:
    """Escape one pointer segment: ``~`` -> ``~0``, ``/`` -> ``~1``."""
    return str(segment).replace("~", "~0").replace("/", "~1")


def unescape(segment: str) -> str:
    """Reverse :func:`escape`."""
    return segment.replace("~1", "/").replace("~0", "~")


def join(pointer: str, *segments: Any) -> str:
    """Append escaped *segments* to *pointer*.

    Example::

        join("#/paths", "/pets/{id}", "get")  # '#/paths/~1pets~1{id}/get'
    """
    return "/".join([pointer, *(escape(str(segment)) for segment in segments)])


def resolve(document: dict[str, Any], ref: str) -> Any:
    """Return the value *ref* points at inside *document*.

    Raises:
        DescriptionError: If *ref* is external (does not start with ``#/``)
            or a segment does not exist.
    """
    if not ref.startswith("#/"):
        raise DescriptionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = document
    for raw_segment in ref[2:].split("/"):
        segment = unescape(raw_segment)
        if isinstance(current, dict):
            if segment not in current:
                raise DescriptionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise DescriptionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise DescriptionError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current
