"""
Analyzer module.

Contains type resolution, union flattening, map-like detection, model
naming and the two-pass rename of synthetic models.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .context import GenerationContext
from .ir_nodes import (
    IR,
    EnumDescriptor,
    EnumValue,
    ModelDescriptor,
    ModelFlag,
    NamePatchTable,
    OperationDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    ResponseDescriptor,
    TagGroup,
    TypeDescriptor,
    UnionDescriptor,
)
from .name_resolver import NameResolver
from .registry import ModelRegistry

__all__ = [
    "TypeDescriptor",
    "EnumValue",
    "EnumDescriptor",
    "PropertyDescriptor",
    "ParameterDescriptor",
    "UnionDescriptor",
    "ModelFlag",
    "ModelDescriptor",
    "ResponseDescriptor",
    "OperationDescriptor",
    "TagGroup",
    "NamePatchTable",
    "IR",
    "GenerationContext",
    "ModelRegistry",
    "NameResolver",
    "SchemaAnalyzer",
]
