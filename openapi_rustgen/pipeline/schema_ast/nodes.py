"""
Schema node definitions for an API document.

These nodes represent the parsed structure of an API document before any
type resolution or naming takes place. The analyzer treats them as
read-only: nothing downstream of the parser writes to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Metadata key carrying the owning operation name of a body or response
OPERATION_NAME_HINT = "x-codegen-operation-name"


class SyntheticKind(Enum):
    """Why a model was generated instead of named by the document author."""

    BODY = "body"  # Inline request body, Body<N>
    RESPONSE = "response"  # Inline response, InlineResponse<Code>
    INLINE_UNION = "inline_union"  # Inline oneOf/anyOf property, OneOf.../AnyOf...


@dataclass
class SchemaNode:
    """Base class for all schema nodes."""

    # Original source location in document (for error messages)
    source_path: str = ""

    # Raw schema metadata (x-* extensions, context hints)
    metadata: dict[str, Any] = field(default_factory=dict)

    description: str | None = None


@dataclass
class ScalarNode(SchemaNode):
    """A string, integer, number or boolean schema."""

    kind: str = ""  # "string", "integer", "number", "boolean"
    format: str | None = None

    # Numeric bounds; exclusivity flags follow OpenAPI 3.0
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False

    enum_values: list[Any] | None = None
    default: Any = None


@dataclass
class ArrayNode(SchemaNode):
    """An array schema. ``items`` is None when the document omits it."""

    items: SchemaNode | None = None


@dataclass
class MapNode(SchemaNode):
    """An object schema made only of ``additionalProperties``."""

    values: SchemaNode | bool = True


@dataclass
class PropertyDef(SchemaNode):
    """A property in an object."""

    name: str = ""
    node: SchemaNode | None = None
    required: bool = False


@dataclass
class ObjectNode(SchemaNode):
    """An object schema with declared properties."""

    properties: list[PropertyDef] = field(default_factory=list)
    required: list[str] = field(default_factory=list)

    # None when absent, True/False for the boolean form, a node for the schema form
    additional_properties: SchemaNode | bool | None = None


@dataclass
class UnionNode(SchemaNode):
    """A oneOf or anyOf schema."""

    kind: str = "oneOf"  # "oneOf" or "anyOf"
    variants: list[SchemaNode] = field(default_factory=list)


@dataclass
class RefNode(SchemaNode):
    """A reference to a model of the same document."""

    name: str = ""


@dataclass
class ParameterNode(SchemaNode):
    """An operation parameter."""

    name: str = ""
    location: str = "query"  # "query", "path", "header", "cookie"
    node: SchemaNode | None = None
    required: bool = False


@dataclass
class RequestBodyNode(SchemaNode):
    """An operation request body."""

    node: SchemaNode | None = None
    content_types: list[str] = field(default_factory=list)
    required: bool = False


@dataclass
class ResponseNode(SchemaNode):
    """A response for a single status code (or "default")."""

    code: str = ""
    node: SchemaNode | None = None
    content_types: list[str] = field(default_factory=list)


@dataclass
class OperationNode(SchemaNode):
    """A single path + method operation."""

    operation_id: str = ""
    path: str = ""
    http_method: str = ""  # lower case
    tags: list[str] = field(default_factory=list)
    parameters: list[ParameterNode] = field(default_factory=list)
    request_body: RequestBodyNode | None = None
    responses: list[ResponseNode] = field(default_factory=list)
    summary: str | None = None
    notes: str | None = None


@dataclass
class ApiDocument:
    """Root of a parsed API document."""

    title: str = ""
    version: str = ""

    # Model name -> schema, in document order (hoisted inline models appended)
    models: dict[str, SchemaNode] = field(default_factory=dict)

    # Models generated by the parser rather than named by the author
    synthetic: dict[str, SyntheticKind] = field(default_factory=dict)

    operations: list[OperationNode] = field(default_factory=list)

    # Raw document for reference
    raw: dict[str, Any] = field(default_factory=dict)
