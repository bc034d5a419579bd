"""
Map-like model detection.

Some objects allow any additional property but still declare a few
example properties. They are maps, not records: the model is rendered
as a map with the declared properties attached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..schema_ast.nodes import ObjectNode, SchemaNode
from .ir_nodes import ModelDescriptor, ModelFlag

if TYPE_CHECKING:
    from .walker import SchemaWalker

MAP_LIKE_KEY = "x-rustgen-map-like"


def is_map_like(node: SchemaNode | None) -> bool:
    """additionalProperties is literally true and properties are declared."""
    return isinstance(node, ObjectNode) and node.additional_properties is True and bool(node.properties)


class MapLikeDetector:
    """Detects map-like models, once per model name."""

    def __init__(self, walker: SchemaWalker):
        self.walker = walker

    def detect_and_rewrite(self, name: str, node: ObjectNode) -> ModelDescriptor | None:
        """
        Build the map-like model for a name, or return the memoized one.

        Args:
            name: Model name in the document
            node: The model's object node

        Returns:
            The memoized map-like model, or None if the node is not map-like
        """
        if not is_map_like(node):
            return None

        memo = self.walker.context.map_like_models
        if name in memo:
            return memo[name]

        registered = self.walker.context.registry.get(name)
        model = ModelDescriptor(
            canonical_key=name,
            class_name=registered.class_name if registered else self.walker.context.name_resolver.to_model_name(name),
            flags={ModelFlag.MAP_LIKE},
            data_type=self.walker.types.map_of(self.walker.types.dynamic()),
            description=node.description,
            metadata={MAP_LIKE_KEY: True},
        )
        # Memoized before resolving so self-referencing properties terminate
        memo[name] = model
        model.properties = self.walker.resolve_properties(node)
        return model
