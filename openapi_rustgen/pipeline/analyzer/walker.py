"""
Schema walker.

Visits schema nodes and dispatches each node kind to its resolution rule.
The walker never writes to the nodes it visits.
"""

from __future__ import annotations

import logging

from ..schema_ast.nodes import (
    ArrayNode,
    MapNode,
    ObjectNode,
    PropertyDef,
    RefNode,
    ScalarNode,
    SchemaNode,
    UnionNode,
)
from .context import GenerationContext
from .ir_nodes import PropertyDescriptor, TypeDescriptor
from .map_like import MapLikeDetector
from .reference_resolver import ReferenceResolver
from .type_resolver import TypeResolver
from .union_flattener import UnionFlattener

logger = logging.getLogger(__name__)


class SchemaWalker:
    """Resolves schema nodes to type descriptors."""

    def __init__(self, context: GenerationContext, references: ReferenceResolver):
        """
        Initialize the walker.

        Args:
            context: State of the current run
            references: Resolver for model references
        """
        self.context = context
        self.references = references
        self.types = TypeResolver(context)
        self.unions = UnionFlattener(self)
        self.map_like = MapLikeDetector(self)

    def resolve(self, node: SchemaNode | None) -> TypeDescriptor:
        """
        Resolve a schema node to a type descriptor.

        Args:
            node: Node to resolve; None resolves to the dynamic type

        Returns:
            A new TypeDescriptor
        """
        match node:
            case RefNode():
                resolved = self.references.resolve(node)
                if isinstance(resolved.target_node, ObjectNode):
                    self.map_like.detect_and_rewrite(resolved.target_key, resolved.target_node)
                return self.references.type_of(node)
            case ScalarNode():
                return self.types.resolve_scalar(node)
            case ArrayNode(items=None):
                return self.types.array_of(self.types.placeholder_item(node.source_path))
            case ArrayNode(items=items):
                return self.types.array_of(self.resolve(items))
            case MapNode(values=SchemaNode() as values):
                return self.types.map_of(self.resolve(values))
            case MapNode():
                return self.types.map_of(self.types.dynamic())
            case ObjectNode() | UnionNode() | None:
                # Named objects and unions are models; anything left inline is opaque
                return self.types.dynamic()
            case _:
                logger.warning("Unclassifiable schema %r, using the dynamic type", node)
                return self.types.dynamic()

    def resolve_property(self, prop: PropertyDef) -> PropertyDescriptor:
        """
        Build the descriptor of a named property.

        Args:
            prop: The property definition

        Returns:
            PropertyDescriptor with its Rust name, type and metadata
        """
        resolver = self.context.name_resolver
        type_descriptor = self.resolve(prop.node)

        descriptor = PropertyDescriptor(
            name=resolver.to_var_name(prop.name),
            base_name=prop.name,
            type=type_descriptor,
            items=type_descriptor.inner if type_descriptor.is_container else None,
            required=prop.required,
            description=prop.description or (prop.node.description if prop.node else None),
            metadata=dict(prop.node.metadata) if prop.node else {},
        )

        if isinstance(prop.node, ScalarNode) and prop.node.enum_values:
            descriptor.enum_values = self.types.resolve_enum(prop.node, resolver.to_enum_name(prop.name))
            if descriptor.enum_values.has_empty:
                descriptor.metadata["x-rustgen-has-empty-enum"] = True

        if descriptor.base_name == descriptor.name:
            descriptor.metadata["x-rustgen-serde-no-rename"] = True
        if type_descriptor.name == "String":
            descriptor.metadata["x-rustgen-is-string"] = True

        return descriptor

    def resolve_properties(self, node: ObjectNode) -> list[PropertyDescriptor]:
        return [self.resolve_property(prop) for prop in node.properties]
