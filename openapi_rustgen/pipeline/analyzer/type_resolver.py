"""
Type resolver for scalar and container types.

Maps scalar schemas to Rust types, choosing the narrowest integer type
that covers the declared bounds, and builds Vec/HashMap container types.
"""

from __future__ import annotations

import logging

from ...errors import InvalidBoundError
from ..schema_ast.nodes import ScalarNode
from .context import GenerationContext
from .ir_nodes import DYNAMIC_TYPE, EnumDescriptor, EnumValue, TypeDescriptor

logger = logging.getLogger(__name__)

DATETIME_TYPE = "DateTime<Utc>"

# (kind, format) -> Rust type; a None format is the default for the kind
SCALAR_TYPES: dict[tuple[str, str | None], str] = {
    ("string", None): "String",
    ("string", "date-time"): DATETIME_TYPE,
    ("string", "date"): DATETIME_TYPE,
    ("string", "uuid"): "uuid::Uuid",
    ("string", "binary"): "Vec<u8>",
    ("string", "password"): "String",
    ("number", None): "f64",
    ("number", "float"): "f32",
    ("number", "double"): "f64",
    ("boolean", None): "bool",
}

INT_WIDTHS = (8, 16, 32, 64)

# Arch-sized integers pinned to a fixed width
PINNED_INT_TYPES = {"isize": "i64", "usize": "u64"}

# Scalar kinds that can be formatted directly
DISPLAYABLE_KINDS = {"string", "integer", "number"}


def _integral(bound: int | float | None, schema_path: str | None = None) -> int | None:
    if bound is None:
        return None
    if isinstance(bound, bool) or not isinstance(bound, (int, float)):
        raise InvalidBoundError(bound, "not a number", schema_path)
    if isinstance(bound, float):
        if not bound.is_integer():
            raise InvalidBoundError(bound, "not an integer", schema_path)
        return int(bound)
    return bound


def required_bits(bound: int | None, unsigned: bool) -> int:
    """
    Number of bits needed to store a bound.

    Signed bounds cover -n .. n-1, so -128 needs 8 bits but 128 needs 9.

    Args:
        bound: Inclusive bound, or None when absent
        unsigned: Whether the value is stored unsigned

    Returns:
        0 for an absent bound, the bit count otherwise

    Raises:
        InvalidBoundError: If an unsigned bound is negative
    """
    if bound is None:
        return 0
    if unsigned:
        if bound < 0:
            raise InvalidBoundError(bound, "unsigned bound is negative")
        return (bound >> 1).bit_length() + 1
    return (abs(bound) - 1 if bound < 0 else bound).bit_length() + 1


def matching_int_type(unsigned: bool, inclusive_min: int | None, inclusive_max: int | None) -> str:
    """
    Pick the narrowest Rust integer type for inclusive bounds.

    Without a maximum, and with a minimum that fits in 16 bits, the
    arch-sized type is used.

    Examples:
        (True, 0, 100) -> "u8"
        (False, -5, 1000) -> "i16"
        (False, None, None) -> "isize"
    """
    min_bits = required_bits(inclusive_min, unsigned)
    max_bits = required_bits(inclusive_max, unsigned)

    if max_bits == 0 and min_bits <= 16:
        return "usize" if unsigned else "isize"

    bits = max(min_bits, max_bits)
    for width in INT_WIDTHS:
        if bits <= width:
            return f"{'u' if unsigned else 'i'}{width}"

    bound = inclusive_max if max_bits >= min_bits else inclusive_min
    raise InvalidBoundError(bound, f"needs {bits} bits, more than 64")


class TypeResolver:
    """Resolves scalar schemas and wraps container types."""

    def __init__(self, context: GenerationContext):
        self.context = context

    def resolve_scalar(self, node: ScalarNode) -> TypeDescriptor:
        """
        Resolve a scalar schema to a Rust type.

        Args:
            node: The scalar node

        Returns:
            TypeDescriptor for the scalar
        """
        if node.kind == "integer":
            name = self.resolve_integer(node)
        else:
            name = SCALAR_TYPES.get((node.kind, node.format)) or SCALAR_TYPES.get((node.kind, None))
            if name is None:
                logger.warning("Unknown scalar kind '%s' at %s, using %s", node.kind, node.source_path, DYNAMIC_TYPE)
                return self.dynamic()

        return TypeDescriptor(
            name=name,
            is_primitive=True,
            is_displayable=node.kind in DISPLAYABLE_KINDS,
            kind=node.kind,
            format=node.format,
            is_datetime=name == DATETIME_TYPE,
        )

    def resolve_integer(self, node: ScalarNode) -> str:
        """
        Resolve an integer schema to a Rust integer type.

        Raises:
            InvalidBoundError: For non-integral bounds or bounds wider than 64 bits
        """
        # Legacy unsigned formats
        if node.format == "uint32":
            return "u32"
        if node.format == "uint64":
            return "u64"

        try:
            inclusive_min = _integral(node.minimum, node.source_path)
            if inclusive_min is not None and node.exclusive_minimum:
                inclusive_min += 1

            # Signed unless a non-negative minimum is set
            unsigned = inclusive_min is not None and inclusive_min >= 0

            inclusive_max = _integral(node.maximum, node.source_path)
            if inclusive_max is not None and node.exclusive_maximum:
                inclusive_max -= 1

            if node.format == "int32":
                return "u32" if unsigned else "i32"
            if node.format == "int64":
                return "u64" if unsigned else "i64"

            name = matching_int_type(unsigned, inclusive_min, inclusive_max)
        except InvalidBoundError as e:
            if e.schema_path is None:
                raise InvalidBoundError(e.bound, e.reason, node.source_path) from e
            raise

        if self.context.config.pin_arch_sized_integers:
            name = PINNED_INT_TYPES.get(name, name)
        return name

    def resolve_enum(self, node: ScalarNode, name: str) -> EnumDescriptor:
        """Build the enum descriptor of a scalar with enum values."""
        resolver = self.context.name_resolver
        values = [EnumValue(name=resolver.to_enum_var_name(value), value=value) for value in node.enum_values or []]
        return EnumDescriptor(name=name, values=values)

    def array_of(self, inner: TypeDescriptor) -> TypeDescriptor:
        return TypeDescriptor(name=f"Vec<{inner.name}>", is_container=True, inner=inner)

    def map_of(self, inner: TypeDescriptor) -> TypeDescriptor:
        return TypeDescriptor(name=f"HashMap<String, {inner.name}>", is_container=True, is_map=True, inner=inner)

    def placeholder_item(self, schema_path: str) -> TypeDescriptor:
        """String item type for an array that declares no items."""
        self.context.warn("Array at %s has no item schema, defaulting to String items", schema_path or "<root>")
        return TypeDescriptor(
            name="String",
            is_primitive=True,
            is_displayable=True,
            kind="string",
            is_synthesized=True,
        )

    def dynamic(self) -> TypeDescriptor:
        """The opaque value type for open-ended payloads."""
        return TypeDescriptor(name=DYNAMIC_TYPE)
