"""
Name resolver for Rust identifiers.

Converts document names to Rust model, field, enum variant and method
names, escaping reserved words and names starting with a digit.
"""

from __future__ import annotations

import logging
import re

from ...utils import camelize, sanitize_name, underscore

logger = logging.getLogger(__name__)

# Rust keywords, reserved and legacy reserved words
RUST_RESERVED_WORDS = {
    "abstract",
    "alignof",
    "as",
    "become",
    "box",
    "break",
    "const",
    "continue",
    "crate",
    "do",
    "else",
    "enum",
    "extern",
    "false",
    "final",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "macro",
    "match",
    "mod",
    "move",
    "mut",
    "offsetof",
    "override",
    "priv",
    "proc",
    "pub",
    "pure",
    "ref",
    "return",
    "self",
    "sizeof",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "typeof",
    "unsafe",
    "unsized",
    "use",
    "virtual",
    "where",
    "while",
    "yield",
}

# Prefix for model names that are reserved words or start with a digit
MODEL_PREFIX = "Model"

UNION_MARKERS = ("OneOf", "AnyOf")

_LEADING_DIGIT = re.compile(r"^\d")
_SIGNED_NUMBER = re.compile(r"^[-+][0-9]+$")
_NON_WORD = re.compile(r"\W+")
_OPERATION_PREFIX = re.compile(r"^[a-zA-Z0-9]+/")


def is_reserved_word(name: str) -> bool:
    return name.lower() in RUST_RESERVED_WORDS


class NameResolver:
    """Converts document names to Rust identifiers."""

    def __init__(self, reserved_word_mappings: dict[str, str] | None = None):
        """
        Initialize the resolver.

        Args:
            reserved_word_mappings: Fixed replacements for reserved variable names
        """
        self.reserved_word_mappings = dict(reserved_word_mappings or {})

    def to_model_name(self, name: str) -> str:
        """
        Convert a document name to a model class name.

        Examples:
            "phone_number" -> "PhoneNumber"
            "return" -> "ModelReturn"
            "200_response" -> "Model200Response"
        """
        camelized = camelize(sanitize_name(name))
        if not camelized:
            camelized = MODEL_PREFIX

        if is_reserved_word(camelized):
            renamed = MODEL_PREFIX + camelized
            logger.warning("%s (reserved word) cannot be used as model name. Renamed to %s", camelized, renamed)
            return renamed

        if _LEADING_DIGIT.match(camelized):
            renamed = MODEL_PREFIX + camelized
            logger.warning("%s (model name starts with number) cannot be used as model name. Renamed to %s", name, renamed)
            return renamed

        return camelized

    def escape_reserved_word(self, name: str) -> str:
        if name in self.reserved_word_mappings:
            return self.reserved_word_mappings[name]
        return "_" + name

    def to_var_name(self, name: str) -> str:
        """
        Convert a document name to a field or parameter name.

        Examples:
            "createdAt" -> "created_at"
            "ref" -> "git_ref" (with the default mappings)
            "type" -> "_type"
            "-1" -> "minus_1"
        """
        if _SIGNED_NUMBER.match(name):
            name = name.replace("-", "MINUS_").replace("+", "PLUS_")
        sanitized = sanitize_name(name)
        if is_reserved_word(sanitized) or _LEADING_DIGIT.match(sanitized):
            sanitized = self.escape_reserved_word(sanitized)
        return underscore(sanitized)

    def to_enum_var_name(self, value: object) -> str:
        """
        Convert an enum value to a variant name.

        Examples:
            "in-progress" -> "IN_PROGRESS"
            "" -> "EMPTY"
            "1st" -> "_1ST"
        """
        text = "" if value is None else str(value)
        if not text:
            return "EMPTY"
        var = _NON_WORD.sub("_", text).upper()
        if _LEADING_DIGIT.match(var):
            var = "_" + var
        return var

    def to_enum_name(self, property_name: str) -> str:
        """Name of the enum generated for an enum property."""
        return sanitize_name(camelize(property_name)) + "Enum"

    def to_operation_id(self, operation_id: str) -> str:
        """
        Convert an operation id to a camelized method name.

        Examples:
            "repos/get-content" -> "GetContent"
            "return" -> "CallReturn"
        """
        operation_id = _OPERATION_PREFIX.sub("", operation_id)
        if is_reserved_word(operation_id):
            renamed = "call_" + operation_id
            logger.warning("%s (reserved word) cannot be used as method name. Renamed to %s", operation_id, camelize(renamed))
            operation_id = renamed
        return camelize(sanitize_name(operation_id))

    @staticmethod
    def strip_union_marker(name: str) -> str | None:
        """Return name without its OneOf/AnyOf marker, or None if it has none."""
        for marker in UNION_MARKERS:
            if name.startswith(marker) and len(name) > len(marker):
                return name[len(marker) :]
        return None
