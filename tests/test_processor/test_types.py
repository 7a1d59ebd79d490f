"""Tests for specir.processor.types -- schema node to type value rules."""

from __future__ import annotations

from typing import Any

import pytest

from specir.description import RawDescription, RawSchemaNode
from specir.models import (
    ArrayType,
    EnumType,
    MapType,
    SchemaContext,
    SchemaRef,
    UnionType,
)
from specir.processor.state import ProcessorState
from specir.processor.types import TypeResolver


def _node(ref: str = "#/inline", **kwargs: Any) -> RawSchemaNode:
    return RawSchemaNode(ref=ref, **kwargs)


@pytest.fixture
def state() -> ProcessorState:
    return ProcessorState.new(RawDescription())


@pytest.fixture
def resolver() -> TypeResolver:
    return TypeResolver()


# ---------------------------------------------------------------------------
# Primitive and composite types
# ---------------------------------------------------------------------------


class TestPrimitives:
    """Scalar ``type`` keywords pass through."""

    @pytest.mark.parametrize("type_name", ["string", "integer", "number", "boolean"])
    def test_scalar(self, state: ProcessorState, resolver: TypeResolver, type_name: str) -> None:
        assert resolver.from_schema(state, _node(type=type_name)) == type_name

    def test_missing_type_is_any(self, state: ProcessorState, resolver: TypeResolver) -> None:
        assert resolver.from_schema(state, _node()) == "any"

    def test_unknown_type_is_any(self, state: ProcessorState, resolver: TypeResolver) -> None:
        assert resolver.from_schema(state, _node(type="file")) == "any"

    def test_nullable_type_list(self, state: ProcessorState, resolver: TypeResolver) -> None:
        assert resolver.from_schema(state, _node(type=["string", "null"])) == "string"

    def test_multi_type_list_is_union(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        result = resolver.from_schema(state, _node(type=["string", "integer"]))
        assert result == UnionType(types=("string", "integer"))


class TestComposites:
    """Arrays, maps, enums and unions."""

    def test_array_of_integers(self, state: ProcessorState, resolver: TypeResolver) -> None:
        node = _node(type="array", items=_node(type="integer"))
        assert resolver.from_schema(state, node) == ArrayType(items="integer")

    def test_array_without_items(self, state: ProcessorState, resolver: TypeResolver) -> None:
        assert resolver.from_schema(state, _node(type="array")) == ArrayType(items="any")

    def test_typed_additional_properties_is_map(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(type="object", additional_properties=_node(type="string"))
        assert resolver.from_schema(state, node) == MapType(values="string")

    def test_free_form_object_is_map(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(type="object", additional_properties=True)
        assert resolver.from_schema(state, node) == "map"

    def test_enum(self, state: ProcessorState, resolver: TypeResolver) -> None:
        node = _node(type="string", enum=["available", "sold"])
        assert resolver.from_schema(state, node) == EnumType(values=("available", "sold"))

    def test_one_of_is_union(self, state: ProcessorState, resolver: TypeResolver) -> None:
        node = _node(one_of=[_node(type="string"), _node(type="integer")])
        assert resolver.from_schema(state, node) == UnionType(types=("string", "integer"))

    def test_union_members_deduplicated(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(any_of=[_node(type="string"), _node(type="string")])
        assert resolver.from_schema(state, node) == "string"

    def test_single_all_of_member_unwrapped(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(all_of=[_node(type="integer")])
        assert resolver.from_schema(state, node) == "integer"

    def test_array_of_itself_terminates(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(type="array")
        node.items = node
        assert resolver.from_schema(state, node) == ArrayType(items="any")


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferences:
    """Structured objects come back as references."""

    def test_object_with_properties(self, state: ProcessorState, resolver: TypeResolver) -> None:
        node = _node("#/components/schemas/Pet", properties={"id": _node(type="integer")})
        assert resolver.from_schema(state, node) == SchemaRef(ref="#/components/schemas/Pet")

    def test_empty_object(self, state: ProcessorState, resolver: TypeResolver) -> None:
        node = _node("#/components/schemas/Empty", type="object")
        assert resolver.from_schema(state, node) == SchemaRef(ref="#/components/schemas/Empty")

    def test_all_of_objects_is_reference(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        base = _node("#/components/schemas/Base", type="object")
        node = _node("#/components/schemas/Dog", all_of=[base])
        assert resolver.from_schema(state, node) == SchemaRef(ref="#/components/schemas/Dog")

    def test_all_of_reference_with_nullable_annotation(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        owner = _node("#/components/schemas/Owner", type="object")
        node = _node(all_of=[owner, _node(nullable=True, description="May be unset")])
        assert resolver.from_schema(state, node) == SchemaRef(ref="#/components/schemas/Owner")

    def test_all_of_two_typed_members_is_any(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node(all_of=[_node(type="string"), _node(type="integer")])
        assert resolver.from_schema(state, node) == "any"

    def test_array_of_objects(self, state: ProcessorState, resolver: TypeResolver) -> None:
        pet = _node("#/components/schemas/Pet", type="object")
        node = _node(type="array", items=pet)
        assert resolver.from_schema(state, node) == ArrayType(
            items=SchemaRef(ref="#/components/schemas/Pet")
        )


class TestContextRecording:
    """Body contexts are recorded for the node and every contained reference."""

    def test_records_context(self, state: ProcessorState, resolver: TypeResolver) -> None:
        pet = _node("#/components/schemas/Pet", type="object")
        node = _node("#/body", type="array", items=pet)
        context = SchemaContext(
            kind="response",
            module_name="pets",
            function_name="list_pets",
            status=200,
            content_type="application/json",
        )
        resolver.from_schema(state, node, context)

        assert state.contexts_for("#/body") == [context]
        assert state.contexts_for("#/components/schemas/Pet") == [context]

    def test_no_context_records_nothing(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        resolver.from_schema(state, _node("#/components/schemas/Pet", type="object"))
        assert state.schema_contexts == {}

    def test_duplicate_context_recorded_once(
        self, state: ProcessorState, resolver: TypeResolver
    ) -> None:
        node = _node("#/components/schemas/Pet", type="object")
        context = SchemaContext(
            kind="request",
            module_name="pets",
            function_name="create_pet",
            content_type="application/json",
        )
        resolver.from_schema(state, node, context)
        resolver.from_schema(state, node, context)

        assert state.contexts_for(node.ref) == [context]
