"""
Per-run generation state.

Everything mutable during an analysis lives here: the model registry,
the name patch table, the map-like memo, the operation path ids and the
collected warnings. A new context is created for every run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import GeneratorConfig
from .ir_nodes import ModelDescriptor, NamePatchTable
from .name_resolver import NameResolver
from .registry import ModelRegistry

logger = logging.getLogger(__name__)


@dataclass
class GenerationContext:
    """State scoped to a single generation run."""

    config: GeneratorConfig = field(default_factory=GeneratorConfig)
    name_resolver: NameResolver | None = None
    registry: ModelRegistry | None = None
    patch_table: NamePatchTable = field(default_factory=NamePatchTable)

    # Model name -> memoized map-like model
    map_like_models: dict[str, ModelDescriptor] = field(default_factory=dict)

    # PATH_ID -> number of operations that used it
    path_ids: dict[str, int] = field(default_factory=dict)

    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.name_resolver is None:
            self.name_resolver = NameResolver(self.config.reserved_word_mappings)
        if self.registry is None:
            self.registry = ModelRegistry(self.name_resolver)

    def warn(self, message: str, *args: object) -> None:
        """Log a non-fatal condition and keep it for the IR."""
        logger.warning(message, *args)
        self.warnings.append(message % args if args else message)
