"""
Schema analyzer that transforms the document into the IR.

Phase 2 of the pipeline: register every model, resolve model and
operation types, rename synthetic models once their operations are
known, and assemble the IR ready for rendering.
"""

from __future__ import annotations

import logging
import re

from ...utils import camelize, sanitize_name, underscore
from ..schema_ast.nodes import (
    ApiDocument,
    MapNode,
    ObjectNode,
    OperationNode,
    ParameterNode,
    RequestBodyNode,
    ResponseNode,
    ScalarNode,
    SchemaNode,
    UnionNode,
)
from .context import GenerationContext
from .ir_nodes import (
    DYNAMIC_TYPE,
    IR,
    ModelDescriptor,
    ModelFlag,
    OperationDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    ResponseDescriptor,
    TagGroup,
    TypeDescriptor,
)
from .map_like import MAP_LIKE_KEY, is_map_like
from .name_patcher import NamePatcher
from .reference_resolver import ReferenceResolver
from .walker import SchemaWalker

logger = logging.getLogger(__name__)

DEFAULT_TAG = "default"

# Query parameters of a paginated operation
PER_PAGE_PARAMS = {"page", "per_page"}

_FENCE_WITH_LANG = re.compile(r"```(.+)\n(.+)\n")
_BARE_FENCE = re.compile(r"```\n(.+)\n")
_RESPONSE_WORDS = re.compile(r"[^A-Za-z ]")

# Alias shapes the renderer wraps in a newtype
SCALAR_SHAPE_KEYS = (
    "x-rustgen-is-bool",
    "x-rustgen-is-integer",
    "x-rustgen-is-datetime",
    "x-rustgen-is-string",
    "x-rustgen-is-array",
)


def rewrite_notes(notes: str | None) -> str | None:
    """Mark fenced code blocks as not compiled and continue lines as doc comments."""
    if notes is None:
        return None
    notes = _FENCE_WITH_LANG.sub(r"```\1,nocompile\n\2\n", notes)
    notes = _BARE_FENCE.sub(r"```nocompile\n\1\n", notes)
    return notes.replace("\n", "\n    /// ")


def pad_version(version: str) -> str:
    """Pad a version to three components: "1.2" -> "1.2.0"."""
    components = [c for c in version.split(".") if c] or ["1"]
    while len(components) < 3:
        components.append("0")
    return ".".join(components)


class SchemaAnalyzer:
    """Analyzes an ApiDocument and builds the IR."""

    def __init__(self, context: GenerationContext):
        """
        Initialize the analyzer.

        Args:
            context: State of this run; must not be shared with another run
        """
        self.context = context
        self.config = context.config
        self.name_resolver = context.name_resolver
        self.registry = context.registry
        self.patcher = NamePatcher(context)

        # Will be set during analysis
        self.document: ApiDocument | None = None
        self.walker: SchemaWalker | None = None

    def analyze(self, document: ApiDocument) -> IR:
        """
        Analyze the document and build the IR.

        Args:
            document: The parsed document

        Returns:
            IR ready for rendering

        Raises:
            ResolutionError: On unresolved references or invalid integer bounds
        """
        self.document = document
        self.walker = SchemaWalker(self.context, ReferenceResolver(document, self.registry))

        # Every model is registered before any type is resolved, so references
        # can point forward
        for name in document.models:
            self.registry.register(name, ModelDescriptor(synthetic=document.synthetic.get(name)))

        for name, node in document.models.items():
            self._build_model(self.registry.get(name), node)

        # Pass 1: operations suggest names for the synthetic models they use
        self.patcher.seed()
        operations = [self._build_operation(op) for op in document.operations]
        for model in self.registry.models():
            self.patcher.record_model(model)
        for operation in operations:
            self.patcher.record_operation(operation)

        # Pass 2
        self.patcher.apply(operations)

        for model in self.registry.models():
            self._finalize_model(model)

        return self._assemble(operations)

    # Models

    def _build_model(self, model: ModelDescriptor, node: SchemaNode) -> None:
        """Fill a registered model from its document node."""
        model.description = node.description
        model.metadata.update(node.metadata)

        if isinstance(node, ObjectNode) and is_map_like(node):
            memo = self.walker.map_like.detect_and_rewrite(model.canonical_key, node)
            model.flags.add(ModelFlag.MAP_LIKE)
            model.properties = memo.properties
            model.data_type = memo.data_type
            model.metadata[MAP_LIKE_KEY] = True
        elif isinstance(node, ObjectNode) and node.properties:
            model.flags.add(ModelFlag.OBJECT)
            model.properties = self.walker.resolve_properties(node)
        elif isinstance(node, ObjectNode):
            model.flags.add(ModelFlag.DYNAMIC)
            model.data_type = self.walker.types.dynamic()
        elif isinstance(node, UnionNode):
            model.flags.add(ModelFlag.UNION)
            model.union = self.walker.unions.flatten(node, model.class_name)
        elif isinstance(node, ScalarNode) and node.enum_values:
            model.flags.add(ModelFlag.ENUM)
            model.enum = self.walker.types.resolve_enum(node, model.class_name)
            model.data_type = self.walker.resolve(node)
        else:
            model.flags.add(ModelFlag.ALIAS)
            model.data_type = self.walker.resolve(node)

    def _finalize_model(self, model: ModelDescriptor) -> None:
        """Set the renderer flags that depend on the final model shape and name."""
        metadata = model.metadata
        data_type = model.data_type

        if ModelFlag.ALIAS in model.flags and data_type is not None:
            if data_type.name == "bool":
                metadata["x-rustgen-is-bool"] = True
            elif data_type.kind == "integer":
                metadata["x-rustgen-is-integer"] = True
            elif data_type.is_datetime:
                metadata["x-rustgen-is-datetime"] = True
            elif data_type.name == "String":
                metadata["x-rustgen-is-string"] = True
            elif data_type.is_container and not data_type.is_map:
                metadata["x-rustgen-is-array"] = True
            if any(key in metadata for key in SCALAR_SHAPE_KEYS):
                metadata["has-vars"] = True

        if ModelFlag.ENUM in model.flags:
            metadata["is-enum"] = True

        if model.union is not None:
            metadata["x-rustgen-enum-one-of"] = True
            if model.union.is_displayable:
                metadata["x-rustgen-is-display"] = True
            # What the renderer iterates: the kept variants
            metadata["count"] = len(model.union.variants)

        if any(prop.type.name == "String" for prop in model.properties):
            metadata["x-rustgen-has-string"] = True

        metadata["upperCaseName"] = underscore(model.class_name).upper()

    # Operations

    def _build_operation(self, op: OperationNode) -> OperationDescriptor:
        """Build an operation and record name suggestions for its synthetic models."""
        nickname = self.name_resolver.to_operation_id(op.operation_id)
        operation_id = underscore(nickname)

        operation = OperationDescriptor(
            operation_id=operation_id,
            nickname=nickname,
            path=op.path,
            http_method=op.http_method.upper(),
            tag=op.tags[0] if op.tags else DEFAULT_TAG,
            summary=op.summary,
            notes=rewrite_notes(op.notes),
            metadata=dict(op.metadata),
        )

        for param in op.parameters:
            self._add_parameter(operation, param)

        if op.request_body is not None and op.request_body.node is not None:
            operation.body = self._build_body(op, op.request_body)

        for response in op.responses:
            operation.responses.append(self._build_response(op, response))

        self._set_operation_metadata(operation, op)
        return operation

    def _add_parameter(self, operation: OperationDescriptor, param: ParameterNode) -> None:
        type_descriptor = self.walker.resolve(param.node)
        descriptor = ParameterDescriptor(
            name=self.name_resolver.to_var_name(param.name),
            base_name=param.name,
            type=type_descriptor,
            items=type_descriptor.inner if type_descriptor.is_container else None,
            required=param.required or param.location == "path",
            description=param.description,
            metadata=dict(param.metadata),
            location=param.location,
        )

        if param.location == "query" and param.name in self.config.pagination_params:
            descriptor.type = TypeDescriptor(name="u16", is_primitive=True, is_displayable=True, kind="integer")
            descriptor.items = None
            descriptor.metadata["x-is-string"] = False
        elif type_descriptor.kind == "string" or type_descriptor.name == "uuid::Uuid":
            descriptor.metadata["x-is-string"] = True

        if param.location == "query":
            operation.query_params.append(descriptor)
        elif param.location == "path":
            operation.path_params.append(descriptor)
        elif param.location == "header":
            operation.header_params.append(descriptor)
        else:
            logger.debug("Ignoring %s parameter %s of %s", param.location, param.name, operation.operation_id)

    def _build_body(self, op: OperationNode, body: RequestBodyNode) -> PropertyDescriptor:
        type_descriptor = self.walker.resolve(body.node)
        self.patcher.record_body(self.patcher.operation_hint(op, body), type_descriptor)

        descriptor = PropertyDescriptor(
            name="body",
            base_name="body",
            type=type_descriptor,
            items=type_descriptor.inner if type_descriptor.is_container else None,
            required=body.required,
            description=body.description,
            metadata=dict(body.metadata),
        )

        if type_descriptor.is_map and isinstance(body.node, (ObjectNode, MapNode)):
            descriptor.metadata["x-is-map-container"] = True
            descriptor.metadata["x-is-container"] = True

        # Uploads and raw payloads are sent as bytes
        if type_descriptor.name in (DYNAMIC_TYPE, "Vec<u8>") or "application/octet-stream" in body.content_types:
            descriptor.type = TypeDescriptor(name="Vec<u8>", is_primitive=True)
            descriptor.items = None
            descriptor.metadata["x-codegen-body-bytes"] = True

        if any("json" in content_type for content_type in body.content_types):
            descriptor.metadata["consumesJson"] = True
        elif any(content_type.startswith("text/plain") for content_type in body.content_types):
            descriptor.metadata["consumesPlainText"] = True

        return descriptor

    def _build_response(self, op: OperationNode, response: ResponseNode) -> ResponseDescriptor:
        type_descriptor = self.walker.resolve(response.node) if response.node is not None else None
        if type_descriptor is not None:
            self.patcher.record_response(self.patcher.operation_hint(op, response), response.code, type_descriptor)

        descriptor = ResponseDescriptor(
            code=response.code,
            type=type_descriptor,
            is_default=response.code == "default",
            response_id=self._response_id(response),
            description=response.description,
            metadata=dict(response.metadata),
        )
        descriptor.metadata["x-responseId"] = descriptor.response_id
        descriptor.metadata["x-uppercaseResponseId"] = underscore(descriptor.response_id).upper()

        if type_descriptor is not None:
            if any("json" in content_type for content_type in response.content_types):
                descriptor.metadata["producesJson"] = True
            elif any(content_type.startswith("text/plain") for content_type in response.content_types):
                descriptor.metadata["producesPlainText"] = True

        return descriptor

    def _response_id(self, response: ResponseNode) -> str:
        """
        Identifier of a response.

        An explicit x-responseId wins, then the first words of the
        description, else Status<code>.
        """
        if response.metadata.get("x-responseId"):
            return str(response.metadata["x-responseId"])
        if response.description:
            words = _RESPONSE_WORDS.split(response.description)[0].strip()
            if words:
                return camelize(words.replace(" ", "_"))
        return f"Status{response.code}"

    def _path_id(self, path: str) -> str:
        """Unique constant name for a path; distinct paths never share one."""
        base = sanitize_name(path.replace("/", "_").replace("{", "").replace("}", "").lstrip("_")).upper()
        path_id = base
        tiebreaker = 2
        while path_id in self.context.path_ids and self.context.path_ids[path_id] != path:
            path_id = f"{base}{tiebreaker}"
            tiebreaker += 1
        self.context.path_ids[path_id] = path
        return path_id

    def _set_operation_metadata(self, operation: OperationDescriptor, op: OperationNode) -> None:
        metadata = operation.metadata
        metadata["operation_id"] = operation.operation_id
        metadata["uppercase_operation_id"] = operation.operation_id.upper()
        metadata["path"] = op.path.replace("{", ":").replace("}", "")
        metadata["PATH_ID"] = self._path_id(op.path)
        metadata["pathRegEx"] = op.path.replace("{", "(?P<").replace("}", ">[^/?#]*)") + "$"
        metadata["hasPathParams"] = bool(operation.path_params)
        metadata["HttpMethod"] = op.http_method.capitalize()

        query_names = {param.base_name for param in operation.query_params}
        if PER_PAGE_PARAMS <= query_names:
            metadata["x-codegen-impl-per-page"] = True
        if not any(param.required for param in operation.query_params):
            metadata["x-codegen-has-optional-query-params"] = True
        if any(param.metadata.get("x-is-string") for param in operation.query_params):
            metadata["x-codegen-has-string-params"] = True

        if not any(response.is_default for response in operation.responses if response.type is not None):
            metadata["x-codegen-response-empty-default"] = True

        previews = (op.metadata.get("x-github") or {}).get("previews") or []
        if previews:
            metadata["x-codegen-has-previews"] = True
            for preview in previews:
                logger.debug("GitHub preview token: %s", preview.get("name") if isinstance(preview, dict) else preview)

    # Assembly

    def _assemble(self, operations: list[OperationDescriptor]) -> IR:
        ir = IR(
            title=self.document.title,
            api_version=pad_version(self.document.version or "1"),
            package_name=self.config.package_name,
            package_version=self.config.package_version,
            warnings=list(self.context.warnings),
        )

        for model in self.registry.models():
            ir.models[model.class_name] = model

        groups: dict[str, TagGroup] = {}
        for operation in operations:
            if operation.tag not in groups:
                groups[operation.tag] = TagGroup(base_name=underscore(operation.tag), class_name=operation.tag)
            groups[operation.tag].operations.append(operation)
            ir.operations.setdefault(operation.tag, []).append(operation)
        ir.tags = list(groups.values())

        ir.metadata["apiUsesUuid"] = any(
            param.type.name == "uuid::Uuid" for op in operations for param in op.query_params + op.path_params + op.header_params
        )
        return ir
