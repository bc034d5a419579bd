"""
OpenAPI document parser that builds the schema node graph.

Phase 1 of the pipeline: turn a raw OpenAPI 3 dictionary into an
ApiDocument. Inline request bodies, inline responses and inline unions
are hoisted into generated models, the way upstream OpenAPI tooling
does, and recorded as synthetic so the analyzer can rename them once
their usage context is known.
"""

from __future__ import annotations

import logging
from typing import Any

from ...utils import camelize, sanitize_name, underscore
from .nodes import (
    ApiDocument,
    ArrayNode,
    MapNode,
    ObjectNode,
    OperationNode,
    ParameterNode,
    PropertyDef,
    RefNode,
    RequestBodyNode,
    ResponseNode,
    ScalarNode,
    SchemaNode,
    SyntheticKind,
    UnionNode,
)

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class DocumentParser:
    """Parses an OpenAPI 3 document into an ApiDocument."""

    # Scalar type names
    SCALAR_TYPES = {"string", "integer", "number", "boolean"}

    def __init__(self) -> None:
        self.raw: dict[str, Any] = {}
        self._hoisted: dict[str, SchemaNode] = {}
        self._synthetic: dict[str, SyntheticKind] = {}
        self._body_counter = 0

    def parse(self, raw: dict[str, Any]) -> ApiDocument:
        """
        Parse an OpenAPI document.

        Args:
            raw: The decoded OpenAPI document

        Returns:
            ApiDocument with models and operations
        """
        self.raw = raw
        self._hoisted = {}
        self._synthetic = {}
        self._body_counter = 0

        info = raw.get("info") or {}
        document = ApiDocument(
            title=info.get("title", ""),
            version=str(info.get("version", "")),
            raw=raw,
        )

        schemas = self._components("schemas")
        for name, schema in schemas.items():
            document.models[name] = self._parse_model(schema, f"#/components/schemas/{name}", name)

        for path, path_item in (raw.get("paths") or {}).items():
            shared_params = path_item.get("parameters", [])
            for method in HTTP_METHODS:
                if method not in path_item:
                    continue
                document.operations.append(self._parse_operation(path, method, path_item[method], shared_params))

        # Hoisted models follow the author's models
        for name, node in self._hoisted.items():
            document.models[name] = node
        document.synthetic = dict(self._synthetic)

        return document

    def _components(self, section: str) -> dict[str, Any]:
        return (self.raw.get("components") or {}).get(section) or {}

    def _extract_metadata(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Extract x-* extension metadata from schema."""
        return {key: value for key, value in schema.items() if key.startswith("x-")}

    def _follow_ref(self, obj: dict[str, Any], section: str) -> dict[str, Any]:
        """Follow a $ref into a components section (requestBodies, responses, ...)."""
        ref = obj.get("$ref")
        if not ref:
            return obj
        name = ref.split("/")[-1]
        return self._components(section).get(name, {})

    def _unique_model_name(self, base: str) -> str:
        """Return base, or base followed by a counter, not used by any model yet."""
        taken = set(self._components("schemas")) | set(self._hoisted)
        if base not in taken:
            return base
        counter = 1
        while f"{base}{counter}" in taken:
            counter += 1
        return f"{base}{counter}"

    def _hoist(self, name: str, node: SchemaNode, kind: SyntheticKind | None = None) -> RefNode:
        self._hoisted[name] = node
        if kind is not None:
            self._synthetic[name] = kind
        return RefNode(name=name, source_path=node.source_path)

    def _parse_model(self, schema: Any, path: str, owner: str) -> SchemaNode:
        """Parse a named model; its inline properties are hoisted under the owner's name."""
        return self._parse_schema_node(schema, path, owner)

    def _parse_schema_node(self, schema: Any, path: str, owner: str | None = None) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary
            path: Current path in document (for error messages)
            owner: Model that owns this node, used to name hoisted properties

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            # `true` / missing schemas accept anything
            return ObjectNode(source_path=path)

        metadata = self._extract_metadata(schema)
        description = schema.get("description")

        if "$ref" in schema:
            return RefNode(
                name=schema["$ref"].split("/")[-1],
                source_path=path,
                metadata=metadata,
                description=description,
            )

        if "oneOf" in schema or "anyOf" in schema:
            kind = "oneOf" if "oneOf" in schema else "anyOf"
            variants = [self._parse_schema_node(variant, f"{path}/{kind}/{i}") for i, variant in enumerate(schema[kind])]
            return UnionNode(
                kind=kind,
                variants=variants,
                source_path=path,
                metadata=metadata,
                description=description,
            )

        if "allOf" in schema:
            return self._parse_allof(schema, path, owner)

        type_name = schema.get("type")
        if isinstance(type_name, list):
            # OpenAPI 3.1 nullable form: ["string", "null"]
            non_null = [t for t in type_name if t != "null"]
            type_name = non_null[0] if non_null else None

        if type_name == "array":
            items = schema.get("items")
            return ArrayNode(
                items=None if items is None else self._parse_property_type(items, f"{path}/items", owner, "items"),
                source_path=path,
                metadata=metadata,
                description=description,
            )

        if type_name == "object" or "properties" in schema or "additionalProperties" in schema:
            return self._parse_object(schema, path, owner, metadata)

        if type_name in self.SCALAR_TYPES or "enum" in schema:
            return self._parse_scalar(schema, type_name or "string", path, metadata)

        # No declared kind: an open-ended payload
        return ObjectNode(source_path=path, metadata=metadata, description=description)

    def _parse_allof(self, schema: dict[str, Any], path: str, owner: str | None) -> SchemaNode:
        """Parse allOf by merging the properties of its parts."""
        parts = schema["allOf"]
        if len(parts) == 1:
            return self._parse_schema_node(parts[0], f"{path}/allOf/0", owner)

        merged: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
        for part in parts:
            if "$ref" in part:
                part = self._components("schemas").get(part["$ref"].split("/")[-1], {})
            merged["properties"].update(part.get("properties", {}))
            merged["required"].extend(part.get("required", []))

        if not merged["properties"]:
            logger.warning("Found more than one type in composed schema at %s, using the first one", path)
            return self._parse_schema_node(parts[0], f"{path}/allOf/0", owner)

        merged.update({k: v for k, v in schema.items() if k.startswith("x-") or k == "description"})
        return self._parse_schema_node(merged, path, owner)

    def _parse_object(self, schema: dict[str, Any], path: str, owner: str | None, metadata: dict[str, Any]) -> SchemaNode:
        """Parse an object, or a map when it only has additionalProperties."""
        declared = schema.get("properties") or {}
        additional = schema.get("additionalProperties")

        if not declared and additional is not None and additional is not False:
            values: SchemaNode | bool = True
            if isinstance(additional, dict) and additional:
                values = self._parse_property_type(additional, f"{path}/additionalProperties", owner, "value")
            return MapNode(values=values, source_path=path, metadata=metadata, description=schema.get("description"))

        required = schema.get("required", [])
        properties = []
        for prop_name, prop_schema in declared.items():
            prop_path = f"{path}/properties/{prop_name}"
            properties.append(
                PropertyDef(
                    name=prop_name,
                    node=self._parse_property_type(prop_schema, prop_path, owner, prop_name),
                    required=prop_name in required,
                    source_path=prop_path,
                    description=prop_schema.get("description") if isinstance(prop_schema, dict) else None,
                )
            )

        if isinstance(additional, dict):
            additional = self._parse_schema_node(additional, f"{path}/additionalProperties") if additional else True

        return ObjectNode(
            properties=properties,
            required=list(required),
            additional_properties=additional,
            source_path=path,
            metadata=metadata,
            description=schema.get("description"),
        )

    def _parse_property_type(self, schema: Any, path: str, owner: str | None, prop_name: str) -> SchemaNode:
        """Parse a property schema, hoisting inline objects and unions into models."""
        if owner is None or not isinstance(schema, dict) or "$ref" in schema:
            return self._parse_schema_node(schema, path, owner)

        if "oneOf" in schema or "anyOf" in schema:
            marker = "OneOf" if "oneOf" in schema else "AnyOf"
            name = self._unique_model_name(f"{marker}{camelize(owner)}{camelize(prop_name)}")
            return self._hoist(name, self._parse_schema_node(schema, path), SyntheticKind.INLINE_UNION)

        if schema.get("properties") and schema.get("type", "object") == "object":
            name = self._unique_model_name(f"{camelize(owner)}{camelize(prop_name)}")
            node = self._parse_schema_node(schema, path, name)
            return self._hoist(name, node)

        return self._parse_schema_node(schema, path, owner)

    def _parse_scalar(self, schema: dict[str, Any], kind: str, path: str, metadata: dict[str, Any]) -> ScalarNode:
        """Parse a scalar node, normalizing OpenAPI 3.1 numeric exclusive bounds."""
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        exclusive_minimum = schema.get("exclusiveMinimum", False)
        exclusive_maximum = schema.get("exclusiveMaximum", False)

        if not isinstance(exclusive_minimum, bool):
            minimum, exclusive_minimum = exclusive_minimum, True
        if not isinstance(exclusive_maximum, bool):
            maximum, exclusive_maximum = exclusive_maximum, True

        return ScalarNode(
            kind=kind,
            format=schema.get("format"),
            minimum=minimum,
            maximum=maximum,
            exclusive_minimum=exclusive_minimum,
            exclusive_maximum=exclusive_maximum,
            enum_values=schema.get("enum"),
            default=schema.get("default"),
            source_path=path,
            metadata=metadata,
            description=schema.get("description"),
        )

    def _pick_content(self, content: dict[str, Any]) -> tuple[dict[str, Any] | None, list[str]]:
        """Pick the JSON media type when there is one, else the first one."""
        if not content:
            return None, []
        content_types = list(content)
        chosen = content.get("application/json") or content[content_types[0]]
        return chosen.get("schema"), content_types

    def _is_hoistable(self, schema: Any) -> bool:
        if not isinstance(schema, dict) or "$ref" in schema:
            return False
        return bool(schema.get("properties")) or "oneOf" in schema or "anyOf" in schema

    def _parse_operation(
        self,
        path: str,
        method: str,
        operation: dict[str, Any],
        shared_params: list[dict[str, Any]],
    ) -> OperationNode:
        """Parse one operation of a path item."""
        op_path = f"#/paths/{path}/{method}"
        operation_id = operation.get("operationId") or underscore(sanitize_name(f"{method}{path}"))

        op = OperationNode(
            operation_id=operation_id,
            path=path,
            http_method=method,
            tags=list(operation.get("tags") or ["default"]),
            summary=operation.get("summary"),
            notes=operation.get("description"),
            source_path=op_path,
            metadata=self._extract_metadata(operation),
        )

        params: dict[tuple[str, str], ParameterNode] = {}
        for raw_param in list(shared_params) + list(operation.get("parameters", [])):
            raw_param = self._follow_ref(raw_param, "parameters")
            param = ParameterNode(
                name=raw_param.get("name", ""),
                location=raw_param.get("in", "query"),
                node=self._parse_schema_node(raw_param.get("schema", {"type": "string"}), f"{op_path}/parameters/{raw_param.get('name')}"),
                required=bool(raw_param.get("required", False)),
                metadata=self._extract_metadata(raw_param),
                description=raw_param.get("description"),
            )
            params[(param.location, param.name)] = param
        op.parameters = list(params.values())

        if "requestBody" in operation:
            raw_body = self._follow_ref(operation["requestBody"], "requestBodies")
            schema, content_types = self._pick_content(raw_body.get("content") or {})
            node = None
            if schema is not None:
                body_path = f"{op_path}/requestBody"
                if self._is_hoistable(schema):
                    self._body_counter += 1
                    name = self._unique_model_name(f"Body{self._body_counter}")
                    node = self._hoist(name, self._parse_schema_node(schema, body_path, name), SyntheticKind.BODY)
                else:
                    node = self._parse_schema_node(schema, body_path)
            op.request_body = RequestBodyNode(
                node=node,
                content_types=content_types,
                required=bool(raw_body.get("required", False)),
                metadata=self._extract_metadata(raw_body),
                description=raw_body.get("description"),
            )

        for code, raw_response in (operation.get("responses") or {}).items():
            raw_response = self._follow_ref(raw_response, "responses")
            schema, content_types = self._pick_content(raw_response.get("content") or {})
            node = None
            if schema is not None:
                response_path = f"{op_path}/responses/{code}"
                if self._is_hoistable(schema):
                    name = self._unique_model_name(f"InlineResponse{camelize(str(code))}")
                    node = self._hoist(name, self._parse_schema_node(schema, response_path, name), SyntheticKind.RESPONSE)
                else:
                    node = self._parse_schema_node(schema, response_path)
            op.responses.append(
                ResponseNode(
                    code=str(code),
                    node=node,
                    content_types=content_types,
                    metadata=self._extract_metadata(raw_response),
                    description=raw_response.get("description"),
                )
            )

        return op
