"""OpenAPI to Rust client generator

A Python package for generating a Rust API client from an OpenAPI
document. Resolves schemas to Rust types, flattens unions, names
inline models and renders the client with Jinja2 templates.
"""

__version__ = "0.3.0"
__author__ = "François Lagunas"

from .pipeline import (
    AtomicWriter,
    GeneratorConfig,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
)

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "OutputConfig",
    "OutputMode",
    "AtomicWriter",
]
