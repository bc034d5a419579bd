"""
Schema AST (Abstract Syntax Tree) module.

Contains the node definitions and the parser for OpenAPI documents.
"""

from __future__ import annotations

from .nodes import (
    OPERATION_NAME_HINT,
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
from .parser import DocumentParser

__all__ = [
    "OPERATION_NAME_HINT",
    "SchemaNode",
    "ScalarNode",
    "ArrayNode",
    "MapNode",
    "ObjectNode",
    "PropertyDef",
    "UnionNode",
    "RefNode",
    "ParameterNode",
    "RequestBodyNode",
    "ResponseNode",
    "OperationNode",
    "ApiDocument",
    "SyntheticKind",
    "DocumentParser",
]
