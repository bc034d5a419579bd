"""
Two-pass renaming of synthetic models.

Inline bodies, inline responses and inline unions only get a mechanical
name when the document is parsed (Body3, InlineResponse200, OneOfRepoOwner).
Which operation uses them is known only once operations are built, so:

1. while operations and properties are built, the operation that first
   uses a synthetic model records a name suggestion for it;
2. once everything is built, synthetic models are renamed from their
   suggestion and every reference to them is rewritten.

Synthetic unions nobody suggested a name for, and nothing refers to, are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ...utils import camelize
from ..schema_ast.nodes import OPERATION_NAME_HINT, OperationNode, SchemaNode, SyntheticKind
from .context import GenerationContext
from .ir_nodes import ModelDescriptor, ModelFlag, OperationDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)

BODY_MODEL_KEY = "x-rustgen-body-model"

# Suffix of renamed body/response unions, so they do not collide with a record of the same name
UNION_SUFFIX = "Enum"


class NamePatcher:
    """Records name suggestions for synthetic models and applies them."""

    def __init__(self, context: GenerationContext):
        self.context = context

    @property
    def table(self):
        return self.context.patch_table

    def seed(self) -> None:
        """Record the configured response renames before any operation does."""
        for old, new in self.context.config.patch_response_names.items():
            self.table.record(camelize(old), new)

    def synthetic_key(self, model: ModelDescriptor) -> str:
        return camelize(model.class_name)

    def _synthetic_model(self, descriptor: TypeDescriptor | None) -> ModelDescriptor | None:
        if descriptor is None or descriptor.model_key is None:
            return None
        model = self.context.registry.get(descriptor.model_key)
        if model is None or model.synthetic is None:
            return None
        return model

    # Pass 1

    def operation_hint(self, operation: OperationNode, node: SchemaNode | None = None) -> str:
        """
        Name suggested by an operation for the models it uses.

        An explicit x-codegen-operation-name on the body/response wins,
        then the one on the operation, else method + camelized id.

        Examples:
            createWidget, POST -> "postCreateWidget"
        """
        for source in (node, operation):
            if source is not None and source.metadata.get(OPERATION_NAME_HINT):
                return str(source.metadata[OPERATION_NAME_HINT])
        return operation.http_method.lower() + camelize(self.context.name_resolver.to_operation_id(operation.operation_id))

    def record_body(self, hint: str, body_type: TypeDescriptor) -> bool:
        """Record a suggestion for a synthetic request body model."""
        model = self._synthetic_model(body_type)
        if model is None or model.synthetic is SyntheticKind.INLINE_UNION:
            return False
        key = self.synthetic_key(model)
        if key in self.context.config.exclude_body_names:
            logger.debug("Body %s keeps its generated name", key)
            return False
        return self.table.record(key, hint)

    def record_response(self, hint: str, code: str, response_type: TypeDescriptor | None) -> bool:
        """Record a suggestion for a synthetic response model."""
        model = self._synthetic_model(response_type)
        if model is None or model.synthetic is SyntheticKind.INLINE_UNION:
            return False
        return self.table.record(self.synthetic_key(model), f"{hint}Response{code}")

    def _record_union(self, descriptor: TypeDescriptor) -> bool:
        model = self._synthetic_model(descriptor)
        if model is None or model.synthetic is not SyntheticKind.INLINE_UNION:
            return False
        stripped = self.context.name_resolver.strip_union_marker(model.class_name) or model.class_name
        return self.table.record(self.synthetic_key(model), stripped)

    def _record_all(self, descriptors: Iterable[TypeDescriptor]) -> bool:
        recorded = False
        for descriptor in descriptors:
            recorded = self._record_union(descriptor) or recorded
        return recorded

    def record_model(self, model: ModelDescriptor) -> bool:
        """Record the inline unions used by a model's properties, alias target and union variants."""
        return self._record_all(model.type_descriptors())

    def record_operation(self, operation: OperationDescriptor) -> bool:
        """Record the inline unions used by an operation's body, parameters and responses."""
        return self._record_all(operation.type_descriptors())

    # Pass 2

    def apply(self, operations: list[OperationDescriptor]) -> list[str]:
        """
        Rename synthetic models and rewrite every reference to them.

        Args:
            operations: All operations of the run

        Returns:
            Canonical keys of the dropped models
        """
        registry = self.context.registry
        resolver = self.context.name_resolver
        dropped: list[str] = []

        for model in registry.models():
            if model.synthetic is None:
                continue

            key = model.canonical_key
            old_name = model.class_name
            suggestion = self.table.lookup(self.synthetic_key(model))
            is_union = ModelFlag.UNION in model.flags

            if suggestion is None:
                if not is_union or self.synthetic_key(model) in self.context.config.exclude_body_names:
                    continue
                if self.is_referenced(key, operations):
                    logger.debug("Union %s has no suggestion but is still referenced", old_name)
                    continue
                logger.info("Dropping unused union model %s", old_name)
                registry.drop(key)
                dropped.append(key)
                continue

            if model.synthetic is SyntheticKind.INLINE_UNION:
                new_name = registry.strip_union_marker(key)
            elif is_union:
                new_name = registry.rename(key, camelize(suggestion) + UNION_SUFFIX)
            else:
                new_name = registry.rename(key, resolver.to_model_name(suggestion))
                if model.synthetic is SyntheticKind.BODY:
                    model.flags.add(ModelFlag.BODY_MODEL)
                    model.metadata[BODY_MODEL_KEY] = True

            if new_name != old_name:
                logger.debug("Renamed %s to %s", old_name, new_name)
                self.rename_variants(model)
                self.rewrite_references(key, new_name, operations)

        return dropped

    def is_referenced(self, key: str, operations: list[OperationDescriptor]) -> bool:
        """True if any other model or any operation refers to the model."""
        for model in self.context.registry.models():
            if model.canonical_key != key and any(d.model_key == key for d in model.type_descriptors()):
                return True
        return any(d.model_key == key for operation in operations for d in operation.type_descriptors())

    @staticmethod
    def rename_variants(model: ModelDescriptor) -> None:
        """Name union variants after the model's current class name."""
        for index, variant in enumerate(model.union_variants or []):
            variant.name = variant.base_name = f"{model.class_name}_sub_{index}"

    def rewrite_references(self, key: str, new_name: str, operations: list[OperationDescriptor]) -> None:
        """Point every reference to a model at its new class name."""
        for model in self.context.registry.models():
            model.rename_reference(key, new_name)
        for operation in operations:
            operation.rename_reference(key, new_name)
