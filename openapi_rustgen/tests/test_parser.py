"""
Tests for parsing OpenAPI documents into schema nodes.
"""

import json
from pathlib import Path

import pytest

from openapi_rustgen.pipeline.schema_ast import (
    ArrayNode,
    DocumentParser,
    MapNode,
    ObjectNode,
    RefNode,
    ScalarNode,
    SyntheticKind,
    UnionNode,
)

TEST_DATA = Path(__file__).parent / "test_data"


def load_widgets():
    with open(TEST_DATA / "widgets.openapi.json") as f:
        return json.load(f)


def schemas_document(schemas: dict) -> dict:
    return {"openapi": "3.0.3", "info": {"title": "T", "version": "1"}, "components": {"schemas": schemas}}


class TestDocumentParser:
    def setup_method(self):
        self.document = DocumentParser().parse(load_widgets())

    def test_info(self):
        assert self.document.title == "Widgets"
        assert self.document.version == "1.2"

    def test_hoisted_models_follow_components(self):
        assert list(self.document.models) == [
            "Widget",
            "Labels",
            "Mixed",
            "OneOfWidgetLabel",
            "AnyOfWidgetItems",
            "Body1",
            "InlineResponse201",
        ]

    def test_synthetic_kinds(self):
        assert self.document.synthetic == {
            "OneOfWidgetLabel": SyntheticKind.INLINE_UNION,
            "AnyOfWidgetItems": SyntheticKind.INLINE_UNION,
            "Body1": SyntheticKind.BODY,
            "InlineResponse201": SyntheticKind.RESPONSE,
        }

    def test_inline_union_property_is_a_reference(self):
        widget = self.document.models["Widget"]
        label = next(p for p in widget.properties if p.name == "label")
        assert label.node == RefNode(name="OneOfWidgetLabel", source_path=label.node.source_path)
        assert isinstance(self.document.models["OneOfWidgetLabel"], UnionNode)

        aliases = next(p for p in widget.properties if p.name == "aliases")
        assert isinstance(aliases.node, ArrayNode)
        assert aliases.node.items.name == "AnyOfWidgetItems"

    def test_required_properties(self):
        widget = self.document.models["Widget"]
        required = {p.name for p in widget.properties if p.required}
        assert required == {"id", "name"}

    def test_missing_items_stay_missing(self):
        widget = self.document.models["Widget"]
        tags = next(p for p in widget.properties if p.name == "tags")
        assert isinstance(tags.node, ArrayNode)
        assert tags.node.items is None

    def test_operations(self):
        create = next(op for op in self.document.operations if op.operation_id == "createWidget")
        assert create.http_method == "post"
        assert create.tags == ["widgets"]
        assert create.request_body.node.name == "Body1"
        assert create.request_body.content_types == ["application/json"]
        assert [r.code for r in create.responses] == ["201", "404"]
        assert create.responses[1].node is None


class TestSchemaShapes:
    def parse_model(self, schema):
        return DocumentParser().parse(schemas_document({"Test": schema})).models["Test"]

    def test_map_only_object(self):
        node = self.parse_model({"type": "object", "additionalProperties": True})
        assert isinstance(node, MapNode)
        assert node.values is True

    def test_map_with_value_schema(self):
        node = self.parse_model({"type": "object", "additionalProperties": {"type": "integer"}})
        assert isinstance(node, MapNode)
        assert isinstance(node.values, ScalarNode)

    def test_map_like_object(self):
        node = self.parse_model({"type": "object", "additionalProperties": True, "properties": {"a": {"type": "string"}}})
        assert isinstance(node, ObjectNode)
        assert node.additional_properties is True

    def test_numeric_exclusive_bounds(self):
        node = self.parse_model({"type": "integer", "exclusiveMinimum": 0, "exclusiveMaximum": 256})
        assert node.minimum == 0
        assert node.exclusive_minimum is True
        assert node.maximum == 256
        assert node.exclusive_maximum is True

    def test_nullable_type_list(self):
        node = self.parse_model({"type": ["string", "null"], "format": "date-time"})
        assert isinstance(node, ScalarNode)
        assert node.kind == "string"
        assert node.format == "date-time"

    def test_untyped_schema_is_open_object(self):
        node = self.parse_model({"description": "anything"})
        assert isinstance(node, ObjectNode)
        assert node.properties == []

    def test_all_of_merges_properties(self):
        document = DocumentParser().parse(
            schemas_document(
                {
                    "Base": {"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]},
                    "Test": {
                        "allOf": [
                            {"$ref": "#/components/schemas/Base"},
                            {"type": "object", "properties": {"name": {"type": "string"}}},
                        ]
                    },
                }
            )
        )
        node = document.models["Test"]
        assert [p.name for p in node.properties] == ["id", "name"]
        assert node.properties[0].required

    def test_nested_object_is_hoisted(self):
        document = DocumentParser().parse(
            schemas_document({"Repo": {"type": "object", "properties": {"owner": {"type": "object", "properties": {"login": {"type": "string"}}}}}})
        )
        assert list(document.models) == ["Repo", "RepoOwner"]
        # Named after its owner, not renamed later
        assert "RepoOwner" not in document.synthetic

    def test_hoisted_name_avoids_components(self):
        document = DocumentParser().parse(
            schemas_document(
                {
                    "OneOfRepoOwner": {"type": "string"},
                    "Repo": {"type": "object", "properties": {"owner": {"oneOf": [{"type": "string"}, {"type": "integer"}]}}},
                }
            )
        )
        assert "OneOfRepoOwner1" in document.synthetic


class TestOperationParsing:
    def test_missing_operation_id(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "paths": {"/repos/{owner}": {"get": {"responses": {}}}},
        }
        operation = DocumentParser().parse(raw).operations[0]
        assert operation.operation_id == "get_repos_owner"
        assert operation.tags == ["default"]

    def test_shared_parameters_are_merged(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "components": {"parameters": {"owner": {"name": "owner", "in": "path", "required": True, "schema": {"type": "string"}}}},
            "paths": {
                "/repos/{owner}": {
                    "parameters": [{"$ref": "#/components/parameters/owner"}],
                    "get": {
                        "operationId": "getRepo",
                        "parameters": [
                            {"name": "page", "in": "query", "schema": {"type": "integer"}},
                            {"name": "owner", "in": "path", "required": True, "schema": {"type": "integer", "minimum": 0}},
                        ],
                        "responses": {},
                    },
                }
            },
        }
        operation = DocumentParser().parse(raw).operations[0]
        assert [(p.location, p.name) for p in operation.parameters] == [("path", "owner"), ("query", "page")]
        # The operation's own definition wins
        assert operation.parameters[0].node.kind == "integer"

    def test_union_body_is_hoisted(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "paths": {
                "/things": {
                    "put": {
                        "operationId": "putThing",
                        "requestBody": {"content": {"application/json": {"schema": {"oneOf": [{"type": "string"}, {"type": "integer"}]}}}},
                        "responses": {},
                    }
                }
            },
        }
        document = DocumentParser().parse(raw)
        assert document.synthetic == {"Body1": SyntheticKind.BODY}
        assert isinstance(document.models["Body1"], UnionNode)

    def test_scalar_body_is_not_hoisted(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "paths": {
                "/upload": {
                    "post": {
                        "operationId": "upload",
                        "requestBody": {"content": {"application/octet-stream": {"schema": {"type": "string", "format": "binary"}}}},
                        "responses": {},
                    }
                }
            },
        }
        document = DocumentParser().parse(raw)
        assert document.models == {}
        assert isinstance(document.operations[0].request_body.node, ScalarNode)


if __name__ == "__main__":
    pytest.main([__file__])
