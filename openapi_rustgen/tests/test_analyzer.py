"""
Tests for the schema analyzer: model building, the two-pass rename of
generated models and operation metadata.
"""

import copy
import json
from pathlib import Path

import pytest

from openapi_rustgen.errors import InvalidBoundError, UnresolvedReferenceError
from openapi_rustgen.pipeline.analyzer import GenerationContext, ModelFlag, SchemaAnalyzer
from openapi_rustgen.pipeline.analyzer.analyzer import pad_version, rewrite_notes
from openapi_rustgen.pipeline.config import GeneratorConfig
from openapi_rustgen.pipeline.schema_ast import (
    ApiDocument,
    ArrayNode,
    DocumentParser,
    ObjectNode,
    OperationNode,
    PropertyDef,
    RefNode,
    ResponseNode,
    ScalarNode,
    SyntheticKind,
    UnionNode,
)

TEST_DATA = Path(__file__).parent / "test_data"


def load_widgets():
    with open(TEST_DATA / "widgets.openapi.json") as f:
        return json.load(f)


def analyze(raw, config=None):
    context = GenerationContext(config=config or GeneratorConfig())
    ir = SchemaAnalyzer(context).analyze(DocumentParser().parse(raw))
    return ir, context


def operation(ir, operation_id):
    return next(op for ops in ir.operations.values() for op in ops if op.operation_id == operation_id)


def assert_references_resolve(ir, context):
    """Every model reference left in the IR names a live model by its current class name."""
    descriptors = [d for model in ir.models.values() for d in model.type_descriptors()]
    descriptors += [d for ops in ir.operations.values() for op in ops for d in op.type_descriptors()]
    for descriptor in descriptors:
        if descriptor.model_key is None:
            continue
        model = context.registry.get(descriptor.model_key)
        assert model is not None, f"{descriptor.name} refers to dropped model {descriptor.model_key}"
        assert descriptor.name == model.class_name
        assert ir.models[model.class_name] is model


class TestModels:
    def setup_method(self):
        self.ir, self.context = analyze(load_widgets())
        self.widget = self.ir.models["Widget"]
        self.props = {p.base_name: p for p in self.widget.properties}

    def test_model_names(self):
        assert list(self.ir.models) == [
            "Widget",
            "Labels",
            "Mixed",
            "WidgetLabel",
            "WidgetItems",
            "PostCreateWidget",
            "PostCreateWidgetResponse201",
        ]

    def test_integer_widths(self):
        assert self.props["id"].type.name == "u8"
        assert self.props["offset"].type.name == "i16"

    def test_property_types(self):
        assert self.props["created_at"].type.name == "DateTime<Utc>"
        assert self.props["tags"].type.name == "Vec<String>"
        assert self.props["labels"].type.name == "Labels"
        assert self.props["type"].name == "_type"

    def test_inline_union_reference_renamed(self):
        assert self.props["label"].type.name == "WidgetLabel"
        assert self.props["aliases"].type.name == "Vec<WidgetItems>"
        assert self.props["aliases"].items.name == "WidgetItems"

    def test_union_metadata(self):
        label = self.ir.models["WidgetLabel"]
        assert ModelFlag.UNION in label.flags
        assert label.union.declared_count == 3
        assert label.metadata["count"] == 2
        assert label.metadata["x-rustgen-enum-one-of"]
        assert label.metadata["x-rustgen-is-display"]

        mixed = self.ir.models["Mixed"]
        assert "x-rustgen-is-display" not in mixed.metadata

    def test_map_like_model(self):
        labels = self.ir.models["Labels"]
        assert ModelFlag.MAP_LIKE in labels.flags
        assert labels.metadata["x-rustgen-map-like"]
        assert labels.properties is self.context.map_like_models["Labels"].properties

    def test_body_model(self):
        body = self.ir.models["PostCreateWidget"]
        assert ModelFlag.BODY_MODEL in body.flags
        assert body.metadata["x-rustgen-body-model"]
        assert body.synthetic is SyntheticKind.BODY
        assert [p.type.name for p in body.properties] == ["String", "u8"]

    def test_finalized_metadata(self):
        assert self.widget.metadata["upperCaseName"] == "WIDGET"
        assert self.widget.metadata["x-rustgen-has-string"]
        assert self.ir.models["PostCreateWidgetResponse201"].metadata["upperCaseName"] == "POST_CREATE_WIDGET_RESPONSE_201"

    def test_single_missing_items_warning(self):
        assert len(self.ir.warnings) == 1
        assert "tags" in self.ir.warnings[0]

    def test_api_version_is_padded(self):
        assert self.ir.api_version == "1.2.0"

    def test_tags(self):
        assert [(t.base_name, t.class_name) for t in self.ir.tags] == [("widgets", "widgets")]
        assert [op.operation_id for op in self.ir.operations["widgets"]] == ["list_widgets", "create_widget", "get_widget"]

    def test_references_match_registry(self):
        assert_references_resolve(self.ir, self.context)

    def test_union_variants_follow_rename(self):
        variants = self.ir.models["WidgetLabel"].union.variants
        assert [v.name for v in variants] == ["WidgetLabel_sub_0", "WidgetLabel_sub_1"]
        assert [v.base_name for v in variants] == ["WidgetLabel_sub_0", "WidgetLabel_sub_1"]
        # Not a generated model, so its variants keep their names
        assert self.ir.models["Mixed"].union.variants[0].name == "Mixed_sub_0"

    def test_alias_to_map_like_model(self):
        raw = load_widgets()
        schemas = raw["components"]["schemas"]
        schemas["LabelAlias"] = {"$ref": "#/components/schemas/Labels"}
        schemas["Widget"]["properties"]["extra_labels"] = {"$ref": "#/components/schemas/LabelAlias"}

        ir, context = analyze(raw)

        assert set(context.map_like_models) == {"Labels"}
        extra = next(p for p in ir.models["Widget"].properties if p.base_name == "extra_labels")
        assert extra.type.name == "LabelAlias"
        assert_references_resolve(ir, context)

    def test_to_dict_is_json(self):
        data = json.loads(json.dumps(self.ir.to_dict()))
        assert data["models"]["WidgetLabel"]["flags"] == ["union"]
        assert data["models"]["PostCreateWidget"]["synthetic"] == "body"


class TestNamePatching:
    def test_body_and_response_rename(self):
        ir, _ = analyze(load_widgets())
        create = operation(ir, "create_widget")

        assert create.body.type.name == "PostCreateWidget"
        assert create.responses[0].type.name == "PostCreateWidgetResponse201"
        assert "Body1" not in ir.models
        assert "InlineResponse201" not in ir.models

    def test_explicit_operation_name(self):
        raw = load_widgets()
        raw["paths"]["/widgets"]["post"]["requestBody"]["x-codegen-operation-name"] = "makeWidget"
        ir, _ = analyze(raw)
        assert operation(ir, "create_widget").body.type.name == "MakeWidget"

    def test_patch_response_names_win(self):
        config = GeneratorConfig(patch_response_names={"InlineResponse201": "WidgetCreated"})
        ir, context = analyze(load_widgets(), config)

        assert operation(ir, "create_widget").responses[0].type.name == "WidgetCreated"
        assert context.patch_table.lookup("InlineResponse201") == "WidgetCreated"

    def test_excluded_body_keeps_generated_name(self):
        ir, _ = analyze(load_widgets(), GeneratorConfig(exclude_body_names=["Body1"]))
        body = ir.models["Body1"]
        assert ModelFlag.BODY_MODEL not in body.flags
        assert operation(ir, "create_widget").body.type.name == "Body1"

    def test_union_body_gets_enum_suffix(self):
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
        ir, _ = analyze(raw)
        assert list(ir.models) == ["PutPutThingEnum"]
        assert operation(ir, "put_thing").body.type.name == "PutPutThingEnum"

    def test_union_marker_kept_on_collision(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "components": {
                "schemas": {
                    "RepoOwner": {"type": "object", "properties": {"login": {"type": "string"}}},
                    "Repo": {
                        "type": "object",
                        "properties": {"owner": {"oneOf": [{"$ref": "#/components/schemas/RepoOwner"}, {"type": "string"}]}},
                    },
                }
            },
        }
        ir, _ = analyze(raw)
        assert "OneOfRepoOwner" in ir.models
        assert ir.models["Repo"].properties[0].type.name == "OneOfRepoOwner"

    def test_inline_union_in_alias_target_is_kept(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "components": {
                "schemas": {
                    "Things": {"type": "array", "items": {"oneOf": [{"type": "string"}, {"type": "integer"}]}},
                    "Scores": {"type": "object", "additionalProperties": {"oneOf": [{"type": "string"}, {"type": "number"}]}},
                }
            },
        }
        ir, context = analyze(raw)

        assert list(ir.models) == ["Things", "Scores", "ThingsItems", "ScoresValue"]
        assert ir.models["Things"].data_type.name == "Vec<ThingsItems>"
        assert ir.models["Scores"].data_type.name == "HashMap<String, ScoresValue>"
        assert ir.models["ThingsItems"].union.variants[0].name == "ThingsItems_sub_0"
        assert_references_resolve(ir, context)

    def test_inline_union_in_nested_array_is_kept(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "components": {
                "schemas": {
                    "Grid": {
                        "type": "object",
                        "properties": {
                            "cells": {
                                "type": "array",
                                "items": {"type": "array", "items": {"anyOf": [{"type": "string"}, {"type": "number"}]}},
                            }
                        },
                    }
                }
            },
        }
        ir, context = analyze(raw)

        assert "GridItems" in ir.models
        assert ir.models["Grid"].properties[0].type.name == "Vec<Vec<GridItems>>"
        assert_references_resolve(ir, context)

    def test_inline_union_in_union_variant_is_kept(self):
        document = ApiDocument(
            title="T",
            version="1",
            models={
                "Choice": UnionNode(variants=[ArrayNode(items=RefNode(name="OneOfChoiceItems")), ScalarNode(kind="boolean")]),
                "OneOfChoiceItems": UnionNode(variants=[ScalarNode(kind="string"), ScalarNode(kind="integer")]),
            },
            synthetic={"OneOfChoiceItems": SyntheticKind.INLINE_UNION},
        )
        context = GenerationContext()
        ir = SchemaAnalyzer(context).analyze(document)

        assert list(ir.models) == ["Choice", "ChoiceItems"]
        assert ir.models["Choice"].union.variants[0].type.name == "Vec<ChoiceItems>"
        assert_references_resolve(ir, context)

    def test_inline_union_used_by_operation_is_kept(self):
        document = ApiDocument(
            title="T",
            version="1",
            models={"OneOfOrphan": UnionNode(variants=[ScalarNode(kind="string"), ScalarNode(kind="integer")])},
            synthetic={"OneOfOrphan": SyntheticKind.INLINE_UNION},
            operations=[
                OperationNode(
                    operation_id="listOrphans",
                    path="/orphans",
                    http_method="get",
                    tags=["orphans"],
                    responses=[ResponseNode(code="200", node=ArrayNode(items=RefNode(name="OneOfOrphan")))],
                )
            ],
        )
        context = GenerationContext()
        ir = SchemaAnalyzer(context).analyze(document)

        assert list(ir.models) == ["Orphan"]
        assert operation(ir, "list_orphans").responses[0].type.name == "Vec<Orphan>"
        assert_references_resolve(ir, context)

    def test_unused_inline_union_is_dropped(self):
        document = ApiDocument(
            title="T",
            version="1",
            models={
                "Widget": ObjectNode(properties=[PropertyDef(name="name", node=ScalarNode(kind="string"))]),
                "OneOfOrphan": UnionNode(variants=[ScalarNode(kind="string"), ScalarNode(kind="integer")]),
            },
            synthetic={"OneOfOrphan": SyntheticKind.INLINE_UNION},
        )
        ir = SchemaAnalyzer(GenerationContext()).analyze(document)
        assert list(ir.models) == ["Widget"]


class TestOperations:
    def setup_method(self):
        self.ir, _ = analyze(load_widgets())

    def test_pagination(self):
        list_widgets = operation(self.ir, "list_widgets")
        params = {p.base_name: p for p in list_widgets.query_params}

        assert params["page"].type.name == "u16"
        assert params["per_page"].type.name == "u16"
        assert params["page"].metadata["x-is-string"] is False
        assert params["state"].metadata["x-is-string"] is True

        metadata = list_widgets.metadata
        assert metadata["x-codegen-impl-per-page"]
        assert metadata["x-codegen-has-optional-query-params"]
        assert metadata["x-codegen-has-string-params"]
        assert metadata["x-codegen-response-empty-default"]

    def test_path_metadata(self):
        get_widget = operation(self.ir, "get_widget")
        metadata = get_widget.metadata

        assert get_widget.nickname == "GetWidget"
        assert get_widget.path_params[0].type.name == "u16"
        assert get_widget.path_params[0].required
        assert metadata["path"] == "/widgets/:widget_id"
        assert metadata["PATH_ID"] == "WIDGETS_WIDGET_ID"
        assert metadata["pathRegEx"] == "/widgets/(?P<widget_id>[^/?#]*)$"
        assert metadata["hasPathParams"]
        assert metadata["HttpMethod"] == "Get"
        assert metadata["uppercase_operation_id"] == "GET_WIDGET"

    def test_shared_path_shares_path_id(self):
        assert operation(self.ir, "list_widgets").metadata["PATH_ID"] == "WIDGETS"
        assert operation(self.ir, "create_widget").metadata["PATH_ID"] == "WIDGETS"

    def test_response_ids(self):
        create = operation(self.ir, "create_widget")
        created, not_found = create.responses

        assert created.response_id == "CreatedWidget"
        assert created.metadata["producesJson"]
        assert not_found.response_id == "ResourceNotFound"
        assert not_found.metadata["x-uppercaseResponseId"] == "RESOURCE_NOT_FOUND"
        assert not_found.type is None

    def test_body_metadata(self):
        body = operation(self.ir, "create_widget").body
        assert body.required
        assert body.metadata["consumesJson"]
        assert "x-codegen-body-bytes" not in body.metadata

    def test_binary_body(self):
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
        ir, _ = analyze(raw)
        body = operation(ir, "upload").body
        assert body.type.name == "Vec<u8>"
        assert body.metadata["x-codegen-body-bytes"]

    def test_path_id_tiebreaker(self):
        raw = {
            "info": {"title": "T", "version": "1"},
            "paths": {
                "/a-b": {"get": {"operationId": "first", "responses": {}}},
                "/a_b": {"get": {"operationId": "second", "responses": {}}},
            },
        }
        ir, context = analyze(raw)
        assert operation(ir, "first").metadata["PATH_ID"] == "A_B"
        assert operation(ir, "second").metadata["PATH_ID"] == "A_B2"
        assert context.path_ids == {"A_B": "/a-b", "A_B2": "/a_b"}

    def test_previews(self):
        raw = load_widgets()
        raw["paths"]["/widgets"]["get"]["x-github"] = {"previews": [{"name": "squirrel-girl"}]}
        ir, _ = analyze(raw)
        assert operation(ir, "list_widgets").metadata["x-codegen-has-previews"]


class TestErrors:
    def test_unresolved_reference_aborts(self):
        raw = load_widgets()
        raw["components"]["schemas"]["Widget"]["properties"]["owner"] = {"$ref": "#/components/schemas/Missing"}
        with pytest.raises(UnresolvedReferenceError):
            analyze(raw)

    def test_invalid_bound_aborts(self):
        raw = load_widgets()
        raw["components"]["schemas"]["Widget"]["properties"]["id"]["maximum"] = 2.5
        with pytest.raises(InvalidBoundError) as exc_info:
            analyze(raw)
        assert exc_info.value.schema_path == "#/components/schemas/Widget/properties/id"


class TestRuns:
    def test_runs_are_independent(self):
        document = DocumentParser().parse(load_widgets())
        snapshot = copy.deepcopy(document)

        first = SchemaAnalyzer(GenerationContext()).analyze(document)
        second = SchemaAnalyzer(GenerationContext()).analyze(document)

        assert list(first.models) == list(second.models)
        assert len(second.warnings) == 1
        assert document == snapshot


class TestHelpers:
    def test_pad_version(self):
        assert pad_version("1.2") == "1.2.0"
        assert pad_version("3") == "3.0.0"
        assert pad_version("1.2.3") == "1.2.3"
        assert pad_version("") == "1.0.0"

    def test_rewrite_notes(self):
        assert rewrite_notes("a\n```\ncode\n```") == "a\n    /// ```nocompile\n    /// code\n    /// ```"
        assert "```json,nocompile" in rewrite_notes("Example:\n```json\n{}\n```")
        assert rewrite_notes(None) is None


if __name__ == "__main__":
    pytest.main([__file__])
