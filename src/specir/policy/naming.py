"""Default naming rules for client functions, modules, and schema types.

Operation functions are named after the last segment of their
``operationId`` (``pets/listPets`` -> ``list_pets``) or, without one, after
the method and path (``GET /pets/{petId}`` -> ``get_pets_pet_id``).

Operations are grouped into one module per tag. Schemas are named after
their ``title``, their component name, or, for inline body schemas, the
operation that first used them.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from specir.description import RawOperationNode, RawSchemaNode
from specir.models import ProcessorConfig

if TYPE_CHECKING:
    from specir.processor.state import ProcessorState

_COMPONENT_PREFIX = "#/components/schemas/"
_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_POINTER_NOISE = frozenset(
    {"#", "components", "schemas", "properties", "items", "paths", "content", "schema"}
)


def words(text: str) -> list[str]:
    """Split *text* into lowercase words on separators and camelCase boundaries."""
    result: list[str] = []
    for chunk in _SEPARATORS.split(text):
        result.extend(part.lower() for part in _CAMEL_BOUNDARY.split(chunk) if part)
    return result


def snake_case(text: str) -> str:
    """``listPets`` -> ``list_pets``. A leading digit is prefixed with ``_``."""
    name = "_".join(words(text))
    if name and name[0].isdigit():
        name = f"_{name}"
    return name


def pascal_case(text: str) -> str:
    """``pet_owner`` -> ``PetOwner``. A leading digit is prefixed with ``T``."""
    name = "".join(word.capitalize() for word in words(text))
    if name and name[0].isdigit():
        name = f"T{name}"
    return name


def module_name(config: ProcessorConfig, name: str) -> str:
    """Prefix *name* with ``config.base_module`` when one is set."""
    if config.base_module:
        return f"{config.base_module}.{name}"
    return name


# --- Operations ---


def operation_function(state: ProcessorState, node: RawOperationNode) -> str:
    """Default client function name for *node*."""
    if node.operation_id:
        name = snake_case(re.split(r"[/.]", node.operation_id)[-1])
        if name:
            return name

    segments = [seg.strip("{}") for seg in node.path.split("/") if seg]
    return snake_case("_".join([node.method, *segments]))


def operation_modules(state: ProcessorState, node: RawOperationNode) -> list[str]:
    """Default module names for *node*: one per tag, else the default module."""
    config = state.config
    names: list[str] = []
    if config.operation_use_tags:
        for tag in node.tags:
            name = snake_case(tag)
            if name:
                name = module_name(config, name)
                if name not in names:
                    names.append(name)
    if not names:
        names.append(module_name(config, config.default_operation_module))
    return names


# --- Schemas ---


def component_name(ref: str) -> Optional[str]:
    """``#/components/schemas/Pet`` -> ``Pet``; ``None`` for any other pointer."""
    if not ref.startswith(_COMPONENT_PREFIX):
        return None
    name = ref[len(_COMPONENT_PREFIX):]
    if "/" in name:
        return None
    return name.replace("~1", "/").replace("~0", "~")


def schema_name(state: ProcessorState, node: RawSchemaNode) -> Optional[str]:
    """Best available human name for *node*, or ``None``.

    Tried in order: ``title``, component name, first recorded body context.
    """
    if node.title:
        return node.title

    name = component_name(node.ref)
    if name:
        return name

    contexts = state.contexts_for(node.ref)
    if contexts:
        context = contexts[0]
        if context.kind == "request":
            return f"{context.function_name}_request"
        return f"{context.function_name}_{context.status}_response"

    return None


def schema_module_and_type(state: ProcessorState, node: RawSchemaNode) -> tuple[str, str]:
    """Default ``(module, type)`` for *node*: ``("pet_owner", "PetOwner")``."""
    name = schema_name(state, node) or _pointer_name(node.ref)
    return module_name(state.config, snake_case(name)), pascal_case(name)


def _pointer_name(ref: str) -> str:
    segments = [
        seg.replace("~1", "/").replace("~0", "~")
        for seg in ref.split("/")
        if seg not in _POINTER_NOISE
    ]
    return "_".join(segments[-2:]) or "schema"
