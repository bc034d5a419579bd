"""
Model registry.

Owns the canonical key -> ModelDescriptor table of one run and keeps
class names unique. Allocation never fails: a taken name gets a numeric
suffix.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .ir_nodes import ModelDescriptor
from .name_resolver import NameResolver

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Canonical key -> model table with unique class names."""

    def __init__(self, name_resolver: NameResolver | None = None):
        self.name_resolver = name_resolver or NameResolver()
        self._models: dict[str, ModelDescriptor] = {}
        self._class_names: dict[str, str] = {}  # class name -> canonical key

    def __contains__(self, key: str) -> bool:
        return key in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(list(self._models.values()))

    def get(self, key: str) -> ModelDescriptor | None:
        return self._models.get(key)

    def models(self) -> list[ModelDescriptor]:
        return list(self._models.values())

    def class_name_taken(self, class_name: str, exclude_key: str | None = None) -> bool:
        """Whether another model already owns a class name."""
        owner = self._class_names.get(class_name)
        return owner is not None and owner != exclude_key

    def find_by_class_name(self, class_name: str) -> ModelDescriptor | None:
        key = self._class_names.get(class_name)
        return None if key is None else self._models[key]

    def allocate(self, wanted: str, key: str | None = None) -> str:
        """
        Return wanted, or wanted with the first free numeric suffix.

        Args:
            wanted: Preferred class name
            key: Canonical key the name is allocated for (its own name is free)
        """
        if not self.class_name_taken(wanted, key):
            return wanted
        counter = 2
        while self.class_name_taken(f"{wanted}{counter}", key):
            counter += 1
        allocated = f"{wanted}{counter}"
        logger.debug("Class name %s is taken, using %s", wanted, allocated)
        return allocated

    def register(self, key: str, model: ModelDescriptor | None = None) -> ModelDescriptor:
        """
        Register a model under its canonical key and give it a unique class name.

        Args:
            key: Canonical key (the model name in the document)
            model: Existing descriptor to register; a new one is created if None

        Returns:
            The registered model
        """
        if key in self._models:
            existing = self._models[key]
            if model is not None and model is not existing:
                self._class_names.pop(existing.class_name, None)
                model.canonical_key = key
                model.class_name = existing.class_name
                self._models[key] = model
                self._class_names[model.class_name] = key
                return model
            return existing

        if model is None:
            model = ModelDescriptor(canonical_key=key)
        model.canonical_key = key
        model.class_name = self.allocate(self.name_resolver.to_model_name(model.class_name or key), key)
        self._models[key] = model
        self._class_names[model.class_name] = key
        return model

    def rename(self, key: str, wanted: str) -> str:
        """
        Rename a model, keeping class names unique.

        Returns:
            The class name the model ended up with
        """
        model = self._models[key]
        new_name = self.allocate(wanted, key)
        if self._class_names.get(model.class_name) == key:
            del self._class_names[model.class_name]
        model.class_name = new_name
        self._class_names[new_name] = key
        return new_name

    def strip_union_marker(self, key: str) -> str:
        """
        Remove a leading OneOf/AnyOf from a model's class name if the result is free.

        Checked against the registry as it is now, so earlier renames count.

        Returns:
            The class name after the attempt
        """
        model = self._models[key]
        stripped = self.name_resolver.strip_union_marker(model.class_name)
        if stripped is None or self.class_name_taken(stripped, key):
            return model.class_name
        return self.rename(key, stripped)

    def drop(self, key: str) -> ModelDescriptor | None:
        model = self._models.pop(key, None)
        if model is not None and self._class_names.get(model.class_name) == key:
            del self._class_names[model.class_name]
        return model
