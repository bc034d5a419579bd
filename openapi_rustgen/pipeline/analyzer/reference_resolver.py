"""
Reference resolver for model references.

Resolves RefNode names to registered models. An unknown name is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import UnresolvedReferenceError
from ..schema_ast.nodes import ApiDocument, RefNode, ScalarNode, SchemaNode
from .ir_nodes import ModelDescriptor, TypeDescriptor
from .registry import ModelRegistry
from .type_resolver import DISPLAYABLE_KINDS


@dataclass
class ResolvedRef:
    """A resolved reference."""

    key: str = ""  # Canonical key of the target model
    model: ModelDescriptor | None = None
    target_node: SchemaNode | None = None  # Document node behind any alias chain
    target_key: str = ""  # Model name of target_node


class ReferenceResolver:
    """Resolves references against the registry of one run."""

    def __init__(self, document: ApiDocument, registry: ModelRegistry):
        """
        Initialize the resolver.

        Args:
            document: The parsed document
            registry: Registry holding every model of the document
        """
        self.document = document
        self.registry = registry

    def resolve(self, ref_node: RefNode) -> ResolvedRef:
        """
        Resolve a reference to its model.

        Raises:
            UnresolvedReferenceError: If the name is not a model of the document
        """
        model = self.registry.get(ref_node.name)
        if model is None or ref_node.name not in self.document.models:
            raise UnresolvedReferenceError(ref_node.name, ref_node.source_path)
        target_key, target_node = self._follow(ref_node.name)
        return ResolvedRef(key=ref_node.name, model=model, target_node=target_node, target_key=target_key)

    def _follow(self, name: str) -> tuple[str, SchemaNode | None]:
        """
        Follow model aliases (a model that is just a reference) to the final node.

        Returns:
            Name of the final model and its node
        """
        seen: set[str] = set()
        node = self.document.models.get(name)
        while isinstance(node, RefNode) and node.name not in seen:
            seen.add(node.name)
            name = node.name
            node = self.document.models.get(name)
        return name, node

    def type_of(self, ref_node: RefNode) -> TypeDescriptor:
        """TypeDescriptor naming the referenced model."""
        resolved = self.resolve(ref_node)
        descriptor = TypeDescriptor(name=resolved.model.class_name, model_key=resolved.key)
        target = resolved.target_node
        if isinstance(target, ScalarNode):
            descriptor.kind = target.kind
            descriptor.format = target.format
            descriptor.is_primitive = True
            descriptor.is_displayable = target.kind in DISPLAYABLE_KINDS
        return descriptor
