"""
Pipeline - OpenAPI to Rust client generator.

This module provides a multi-phase architecture for generating a Rust
client from an OpenAPI document:

1. Phase 1 (Parser): Parse the document into schema nodes, hoisting inline models
2. Phase 2 (Analyzer): Resolve types, flatten unions, name models, build IR
3. Phase 3 (Backend): Render the IR with Jinja2 templates
4. Phase 4 (Writer): Write rendered files atomically
"""

from __future__ import annotations

from .config import GeneratorConfig, OutputConfig, OutputMode
from .generator import PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "AtomicWriter",
]
