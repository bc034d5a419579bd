"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed API document, ready for rendering.
All references are resolved and every type carries its final Rust name.
The renderer is a pure consumer: it never infers anything on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from collections.abc import Iterator
from typing import Any

from ..schema_ast.nodes import SyntheticKind

# Name of the dynamic value type used for open-ended payloads
DYNAMIC_TYPE = "Value"


class ModelFlag(Enum):
    """Shape of a model in the IR."""

    OBJECT = "object"  # A struct with declared properties
    ENUM = "enum"  # A string enum
    UNION = "union"  # A flattened oneOf/anyOf
    MAP_LIKE = "map_like"  # An object with example properties that is really a map
    ALIAS = "alias"  # A named array, map or scalar
    DYNAMIC = "dynamic"  # An object with nothing declared
    BODY_MODEL = "body_model"  # A renamed synthetic request body


@dataclass
class TypeDescriptor:
    """A resolved target type.

    Two descriptors denote the same type when their names are equal.
    """

    name: str = ""
    is_container: bool = False
    is_map: bool = False
    is_primitive: bool = False
    is_displayable: bool = False

    # Item type of a Vec, value type of a HashMap
    inner: TypeDescriptor | None = None

    # Canonical key of the referenced model, for model references
    model_key: str | None = None

    # Source scalar kind ("string", "integer", ...) and format
    kind: str | None = None
    format: str | None = None

    is_datetime: bool = False

    # Placeholder produced for an array without an item schema
    is_synthesized: bool = False

    def same_type(self, other: TypeDescriptor) -> bool:
        return self.name == other.name

    def rename_reference(self, model_key: str, new_name: str) -> bool:
        """
        Rename every reference to a model, recomposing container names.

        Returns:
            True if anything was renamed
        """
        changed = False
        if self.inner is not None and self.inner.rename_reference(model_key, new_name):
            changed = True
            self._recompose()
        if self.model_key == model_key:
            self.name = new_name
            changed = True
        return changed

    def walk(self) -> Iterator[TypeDescriptor]:
        """Yield this descriptor and every nested item or value type."""
        yield self
        if self.inner is not None:
            yield from self.inner.walk()

    def _recompose(self) -> None:
        if self.inner is None or self.model_key is not None:
            return
        if self.is_map:
            self.name = f"HashMap<String, {self.inner.name}>"
        elif self.is_container:
            self.name = f"Vec<{self.inner.name}>"


@dataclass
class EnumValue:
    """A single enum variant."""

    name: str = ""  # Rust variant name, e.g. "ACTIVE" or "EMPTY"
    value: Any = None  # JSON value


@dataclass
class EnumDescriptor:
    """An enum attached to a property or a model."""

    name: str = ""
    values: list[EnumValue] = field(default_factory=list)

    @property
    def has_empty(self) -> bool:
        return any(v.value == "" for v in self.values)


@dataclass
class PropertyDescriptor:
    """A property of a model, a union variant, or an operation body."""

    name: str = ""  # Rust field name
    base_name: str = ""  # Name in the document
    type: TypeDescriptor = field(default_factory=TypeDescriptor)
    items: TypeDescriptor | None = None
    required: bool = False
    enum_values: EnumDescriptor | None = None
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def rename_reference(self, model_key: str, new_name: str) -> bool:
        changed = self.type.rename_reference(model_key, new_name)
        if self.items is not None and self.items is not self.type.inner:
            changed = self.items.rename_reference(model_key, new_name) or changed
        return changed

    def type_descriptors(self) -> Iterator[TypeDescriptor]:
        yield from self.type.walk()
        if self.items is not None and self.items is not self.type.inner:
            yield from self.items.walk()


@dataclass
class ParameterDescriptor(PropertyDescriptor):
    """An operation parameter."""

    location: str = "query"


@dataclass
class UnionDescriptor:
    """Flattened oneOf/anyOf."""

    variants: list[PropertyDescriptor] = field(default_factory=list)
    is_displayable: bool = True

    # Number of variants in the document, before deduplication
    declared_count: int = 0


@dataclass
class ModelDescriptor:
    """A model in the IR."""

    canonical_key: str = ""  # Name of the model in the document
    class_name: str = ""

    properties: list[PropertyDescriptor] = field(default_factory=list)
    union: UnionDescriptor | None = None
    flags: set[ModelFlag] = field(default_factory=set)

    # Target type of alias models (Vec<..>, HashMap<..>, scalars)
    data_type: TypeDescriptor | None = None

    enum: EnumDescriptor | None = None
    synthetic: SyntheticKind | None = None
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def union_variants(self) -> list[PropertyDescriptor] | None:
        return None if self.union is None else self.union.variants

    def rename_reference(self, model_key: str, new_name: str) -> bool:
        changed = False
        for prop in self.properties:
            changed = prop.rename_reference(model_key, new_name) or changed
        for variant in self.union_variants or []:
            changed = variant.rename_reference(model_key, new_name) or changed
        if self.data_type is not None:
            changed = self.data_type.rename_reference(model_key, new_name) or changed
        return changed

    def type_descriptors(self) -> Iterator[TypeDescriptor]:
        """Every type this model refers to, containers included."""
        for prop in self.properties + (self.union_variants or []):
            yield from prop.type_descriptors()
        if self.data_type is not None:
            yield from self.data_type.walk()


@dataclass
class ResponseDescriptor:
    """A response for a single status code."""

    code: str = ""
    type: TypeDescriptor | None = None
    is_default: bool = False
    response_id: str = ""
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def rename_reference(self, model_key: str, new_name: str) -> bool:
        return self.type is not None and self.type.rename_reference(model_key, new_name)

    def type_descriptors(self) -> Iterator[TypeDescriptor]:
        if self.type is not None:
            yield from self.type.walk()


@dataclass
class OperationDescriptor:
    """An operation in the IR."""

    operation_id: str = ""
    nickname: str = ""  # Camelized id used for generated type names
    path: str = ""
    http_method: str = ""  # upper case
    tag: str = "default"

    body: PropertyDescriptor | None = None
    query_params: list[ParameterDescriptor] = field(default_factory=list)
    path_params: list[ParameterDescriptor] = field(default_factory=list)
    header_params: list[ParameterDescriptor] = field(default_factory=list)
    responses: list[ResponseDescriptor] = field(default_factory=list)

    summary: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def rename_reference(self, model_key: str, new_name: str) -> bool:
        changed = False
        if self.body is not None:
            changed = self.body.rename_reference(model_key, new_name)
        for response in self.responses:
            changed = response.rename_reference(model_key, new_name) or changed
        for param in self.query_params + self.path_params + self.header_params:
            changed = param.rename_reference(model_key, new_name) or changed
        return changed

    def type_descriptors(self) -> Iterator[TypeDescriptor]:
        """Every type used by the body, the parameters and the responses."""
        if self.body is not None:
            yield from self.body.type_descriptors()
        for param in self.query_params + self.path_params + self.header_params:
            yield from param.type_descriptors()
        for response in self.responses:
            yield from response.type_descriptors()


@dataclass
class TagGroup:
    """Operations sharing a tag, rendered as one API module."""

    base_name: str = ""  # snake_case module name
    class_name: str = ""
    operations: list[OperationDescriptor] = field(default_factory=list)


@dataclass
class NamePatchTable:
    """Write-once mapping from a camelized synthetic key to a name suggestion."""

    entries: dict[str, str] = field(default_factory=dict)

    def record(self, key: str, suggestion: str) -> bool:
        """
        Record a suggestion unless the key already has one.

        Returns:
            True if the suggestion was stored
        """
        if key in self.entries:
            return False
        self.entries[key] = suggestion
        return True

    def lookup(self, key: str) -> str | None:
        return self.entries.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class IR:
    """The complete Intermediate Representation."""

    title: str = ""
    api_version: str = ""
    package_name: str = ""
    package_version: str = ""

    # Class name -> model, in generation order
    models: dict[str, ModelDescriptor] = field(default_factory=dict)

    # Tag -> operations
    operations: dict[str, list[OperationDescriptor]] = field(default_factory=dict)

    tags: list[TagGroup] = field(default_factory=list)

    # Non-fatal conditions met during analysis
    warnings: list[str] = field(default_factory=list)

    # Generation comment
    generation_comment: str = ""

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert the IR to JSON-compatible data."""
        return {
            "title": self.title,
            "api_version": self.api_version,
            "package_name": self.package_name,
            "package_version": self.package_version,
            "models": {name: _to_plain(model) for name, model in self.models.items()},
            "operations": {tag: [_to_plain(op) for op in ops] for tag, ops in self.operations.items()},
            "warnings": list(self.warnings),
            "metadata": _to_plain(self.metadata),
        }


def _to_plain(value: Any) -> Any:
    """Recursively convert IR values to JSON-compatible data."""
    if is_dataclass(value):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, set):
        return sorted(_to_plain(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    return value
