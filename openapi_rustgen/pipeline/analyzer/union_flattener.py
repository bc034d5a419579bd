"""
Union flattener for oneOf/anyOf schemas.

Turns the variants of a union into an ordered, deduplicated list of
variant properties, and decides whether every variant can be formatted
for display (needed when the union appears in a URL).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..schema_ast.nodes import ArrayNode, ObjectNode, SchemaNode, UnionNode
from .ir_nodes import PropertyDescriptor, UnionDescriptor
from .type_resolver import DISPLAYABLE_KINDS

if TYPE_CHECKING:
    from .walker import SchemaWalker


class UnionFlattener:
    """Flattens oneOf/anyOf variants."""

    def __init__(self, walker: SchemaWalker):
        self.walker = walker

    def flatten(self, union: UnionNode, model_name: str) -> UnionDescriptor:
        """
        Flatten a union into variant properties.

        A variant is kept only if no kept variant has the same type name,
        so the first of several same-typed variants wins.

        Args:
            union: The union node
            model_name: Class name of the union model, used for variant names

        Returns:
            UnionDescriptor with the kept variants
        """
        descriptor = UnionDescriptor(declared_count=len(union.variants))

        for variant_node in union.variants:
            variant = self._variant(variant_node, f"{model_name}_sub_{len(descriptor.variants)}")

            if not self._is_displayable(variant_node, variant):
                descriptor.is_displayable = False

            if any(kept.type.same_type(variant.type) for kept in descriptor.variants):
                continue
            descriptor.variants.append(variant)

        return descriptor

    def _variant(self, node: SchemaNode, name: str) -> PropertyDescriptor:
        """Resolve one variant and classify its container shape."""
        walker = self.walker
        variant = PropertyDescriptor(name=name, base_name=name, description=node.description)

        if isinstance(node, ArrayNode):
            variant.type = walker.resolve(node)
            variant.items = variant.type.inner
            variant.metadata["x-is-list-container"] = True
            variant.metadata["x-is-container"] = True
        elif isinstance(node, ObjectNode) and node.properties:
            # Only the first declared property decides the value type
            inner = walker.resolve(node.properties[0].node)
            variant.type = walker.types.map_of(inner)
            variant.items = inner
            variant.metadata["x-is-object"] = True
            variant.metadata["x-is-map-container"] = True
            variant.metadata["x-is-container"] = True
        else:
            variant.type = walker.resolve(node)

        return variant

    @staticmethod
    def _is_displayable(node: SchemaNode, variant: PropertyDescriptor) -> bool:
        if isinstance(node, (ArrayNode, ObjectNode)):
            return False
        return variant.type.is_primitive and variant.type.kind in DISPLAYABLE_KINDS
