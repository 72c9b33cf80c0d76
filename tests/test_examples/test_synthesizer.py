"""Tests for specview.examples.synthesizer."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from specview.examples.synthesizer import (
    COMMENT_KEY,
    NO_VALUE,
    ExampleSynthesizer,
    SchemaKind,
    classify,
    strip_comments,
    synthesize,
)
from specview.models import Document, SchemaNode, SynthesisConfig


def _node(**fields: Any) -> SchemaNode:
    return SchemaNode.model_validate(fields)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    """One precedence rule decides how a node is synthesized."""

    @pytest.mark.parametrize(
        ("fields", "kind"),
        [
            ({"example": 1, "allOf": [], "$ref": "X", "type": "object"}, SchemaKind.LITERAL),
            ({"example": None}, SchemaKind.LITERAL),
            ({"allOf": [], "$ref": "X"}, SchemaKind.COMPOSITE),
            ({"$ref": "X", "type": "object"}, SchemaKind.REFERENCE),
            ({"type": "object"}, SchemaKind.OBJECT),
            ({"properties": {}}, SchemaKind.OBJECT),
            ({"type": "array", "items": {"type": "string"}}, SchemaKind.ARRAY),
            ({"type": "array"}, SchemaKind.SCALAR),
            ({"type": "string"}, SchemaKind.SCALAR),
            ({}, SchemaKind.SCALAR),
        ],
    )
    def test_precedence(self, fields: dict[str, Any], kind: SchemaKind) -> None:
        assert classify(_node(**fields)) is kind


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class TestScalars:
    """Placeholders by type."""

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"type": "string"}, "string"),
            ({"type": "string", "format": "date"}, "2025-04-18"),
            ({"type": "string", "format": "date-time"}, "2025-04-18T00:00:00"),
            ({"type": "string", "enum": ["b", "a"]}, "b"),
            ({"type": "string", "title": "Nickname"}, "example Nickname"),
            ({"type": "string", "description": "Free text"}, "example Free text"),
            ({"type": "string", "format": "date", "enum": ["x"]}, "2025-04-18"),
            ({"type": "integer"}, 0),
            ({"type": "number", "default": 1.5, "minimum": 1}, 1.5),
            ({"type": "integer", "minimum": 3, "maximum": 9}, 3),
            ({"type": "integer", "maximum": 9}, 9),
            ({"type": "boolean"}, False),
            ({"type": "boolean", "default": True}, True),
            ({"type": "null"}, None),
            ({"type": ["null", "integer"]}, 0),
            ({"default": "fallback"}, "fallback"),
        ],
    )
    def test_values(self, fields: dict[str, Any], expected: Any, minimal_doc: Document) -> None:
        assert synthesize(_node(**fields), minimal_doc) == expected

    def test_untyped_without_default_is_no_value(self, minimal_doc: Document) -> None:
        value = synthesize(_node(), minimal_doc)
        assert value is NO_VALUE
        assert value is not None
        assert not value

    def test_literal_example_verbatim(self, minimal_doc: Document) -> None:
        example = {"nested": [1, 2]}
        node = _node(type="string", example=example)
        value = synthesize(node, minimal_doc)
        assert value == example
        value["nested"].append(3)
        assert node.example == {"nested": [1, 2]}

    def test_explicit_null_example(self, minimal_doc: Document) -> None:
        assert synthesize(_node(type="integer", example=None), minimal_doc) is None


# ---------------------------------------------------------------------------
# Objects and arrays
# ---------------------------------------------------------------------------


class TestStructures:
    """Objects, arrays and maps."""

    def test_array_of_strings(self, minimal_doc: Document) -> None:
        node = _node(type="array", items={"type": "string"})
        assert synthesize(node, minimal_doc) == ["string"]

    def test_array_of_nothing_is_empty(self, minimal_doc: Document) -> None:
        node = _node(type="array", items={})
        assert synthesize(node, minimal_doc) == []

    def test_object_properties_in_order(self, minimal_doc: Document) -> None:
        node = _node(
            type="object",
            properties={"z": {"type": "integer"}, "a": {"type": "string"}, "m": {}},
        )
        value = synthesize(node, minimal_doc)
        assert value == {"z": 0, "a": "string"}
        assert list(value) == ["z", "a"]

    def test_object_comment(self, minimal_doc: Document) -> None:
        node = _node(type="object", title="A thing", properties={"x": {"type": "boolean"}})
        assert synthesize(node, minimal_doc) == {"x": False, COMMENT_KEY: "A thing"}

    def test_comments_can_be_disabled(self, minimal_doc: Document) -> None:
        node = _node(type="object", title="A thing")
        config = SynthesisConfig(include_comments=False)
        assert synthesize(node, minimal_doc, config) == {}

    def test_additional_properties(self, minimal_doc: Document) -> None:
        node = _node(type="object", additionalProperties={"type": "integer"})
        assert synthesize(node, minimal_doc) == {
            "additionalProp1": 0,
            "additionalProp2": 0,
            "additionalProp3": 0,
        }

    def test_additional_properties_count_configurable(self, minimal_doc: Document) -> None:
        node = _node(type="object", additionalProperties={"type": "object", "properties": {"a": {"type": "string"}}})
        value = synthesize(node, minimal_doc, SynthesisConfig(additional_properties_count=1))
        assert value == {"additionalProp1": {"a": "string"}}

    def test_additional_properties_values_are_independent(self, minimal_doc: Document) -> None:
        node = _node(type="object", additionalProperties={"type": "array", "items": {"type": "string"}})
        value = synthesize(node, minimal_doc)
        value["additionalProp1"].append("x")
        assert value["additionalProp2"] == ["string"]

    def test_additional_properties_true_adds_nothing(self, minimal_doc: Document) -> None:
        assert synthesize(_node(type="object", additionalProperties=True), minimal_doc) == {}

    def test_custom_placeholders(self, minimal_doc: Document) -> None:
        config = SynthesisConfig(date_example="1970-01-01", label_prefix="e.g. ")
        node = _node(
            type="object",
            properties={
                "d": {"type": "string", "format": "date"},
                "n": {"type": "string", "title": "name"},
            },
        )
        assert synthesize(node, minimal_doc, config) == {"d": "1970-01-01", "n": "e.g. name"}


# ---------------------------------------------------------------------------
# References and composition
# ---------------------------------------------------------------------------


class TestReferences:
    """$ref and allOf against real documents."""

    def test_new_pet(self, petstore_doc: Document) -> None:
        assert synthesize(_node(**{"$ref": "#/components/schemas/NewPet"}), petstore_doc) == {
            "name": "string",
            "tag": "example Free-form tag",
            "status": "available",
            "birthday": "2025-04-18",
            COMMENT_KEY: "A new pet",
        }

    def test_all_of_merges_branches(self, petstore_doc: Document) -> None:
        value = synthesize(petstore_doc.component_schemas["Pet"], petstore_doc)
        assert value["id"] == 0
        assert value["name"] == "string"
        assert list(value)[-1] == "id"

    def test_all_of_later_branch_wins(self, minimal_doc: Document) -> None:
        node = _node(allOf=[
            {"type": "object", "properties": {"a": {"type": "string"}, "b": {"type": "string"}}},
            {"type": "object", "properties": {"b": {"type": "integer"}}},
            {"type": "string"},
        ], properties={"c": {"type": "boolean"}})
        assert synthesize(node, minimal_doc) == {"a": "string", "b": 0, "c": False}

    def test_reference_comment_replaces_target_comment(self, petstore_doc: Document) -> None:
        node = _node(**{"$ref": "#/components/schemas/NewPet", "description": "Outer"})
        assert synthesize(node, petstore_doc)[COMMENT_KEY] == "Outer"

    def test_reference_without_label_keeps_target_comment(self, petstore_doc: Document) -> None:
        node = _node(**{"$ref": "#/components/schemas/NewPet"})
        assert synthesize(node, petstore_doc)[COMMENT_KEY] == "A new pet"

    def test_reference_comment_respects_config(self, petstore_doc: Document) -> None:
        node = _node(**{"$ref": "#/components/schemas/Error", "description": "Failure"})
        value = synthesize(node, petstore_doc, SynthesisConfig(include_comments=False))
        assert COMMENT_KEY not in value

    def test_reference_comment_added(self, petstore_doc: Document) -> None:
        node = _node(**{"$ref": "#/components/schemas/Error", "description": "Failure"})
        assert synthesize(node, petstore_doc)[COMMENT_KEY] == "Failure"

    def test_array_of_references(self, petstore_doc: Document) -> None:
        value = synthesize(petstore_doc.component_schemas["Pets"], petstore_doc)
        assert isinstance(value, list) and len(value) == 1
        assert value[0]["id"] == 0

    def test_swagger_definitions(self, swagger_doc: Document) -> None:
        assert synthesize(_node(**{"$ref": "#/definitions/Pet"}), swagger_doc) == {
            "id": 0,
            "category": {"id": 0, "name": "string"},
            "name": "doggie",
            "photoUrls": ["string"],
            "status": "available",
        }

    def test_unresolved_branch_omitted(self, cyclic_doc: Document) -> None:
        assert synthesize(cyclic_doc.component_schemas["Broken"], cyclic_doc) == {"ok": False}

    def test_unresolved_top_level_is_no_value(self, minimal_doc: Document) -> None:
        assert synthesize(_node(**{"$ref": "Missing"}), minimal_doc) is NO_VALUE

    def test_mutual_recursion_terminates(self, cyclic_doc: Document) -> None:
        value = synthesize(_node(**{"$ref": "#/components/schemas/A"}), cyclic_doc)
        assert value == {"name": "string", "b": {"id": 0}}

    def test_self_recursion_terminates(self, cyclic_doc: Document) -> None:
        value = synthesize(_node(**{"$ref": "#/components/schemas/Tree"}), cyclic_doc)
        assert value == {"value": "string", "children": []}

    def test_reference_loop_is_no_value(self, cyclic_doc: Document) -> None:
        assert synthesize(_node(**{"$ref": "Loop1"}), cyclic_doc) is NO_VALUE

    def test_deterministic(self, petstore_doc: Document) -> None:
        synthesizer = ExampleSynthesizer(petstore_doc)
        node = petstore_doc.component_schemas["Pets"]
        assert synthesizer.synthesize(node) == synthesizer.synthesize(node)

    def test_document_not_mutated(self, petstore_doc: Document) -> None:
        before = copy.deepcopy(petstore_doc.model_dump(by_alias=True))
        synthesize(petstore_doc.component_schemas["Pets"], petstore_doc)
        assert petstore_doc.model_dump(by_alias=True) == before


class TestStripComments:
    """Removing __comment keys at any depth."""

    def test_nested(self) -> None:
        value = {COMMENT_KEY: "x", "a": [{COMMENT_KEY: "y", "b": 1}], "c": {"d": {COMMENT_KEY: "z"}}}
        assert strip_comments(value) == {"a": [{"b": 1}], "c": {"d": {}}}

    def test_scalars_untouched(self) -> None:
        assert strip_comments("text") == "text"
        assert strip_comments(None) is None
