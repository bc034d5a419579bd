"""
Utility functions for case conversion.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z]+(?![a-z])|[A-Z][a-z]*|[0-9]+")

_NON_WORD = re.compile(r"[^A-Za-z0-9_]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots, slashes) to spaces."""
    return re.sub(r"[_\-./\s]+", " ", text)


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def camelize(text: str) -> str:
    """Convert snake_case, kebab-case or camelCase text to PascalCase.

    Only the first letter of each word is touched, so acronyms survive.

    Examples:
        "phone_number" -> "PhoneNumber"
        "createWidget" -> "CreateWidget"
        "inline_response_200" -> "InlineResponse200"
        "OAuth" -> "OAuth"
    """
    if not text:
        return ""
    words = _normalize_separators(text).split(" ")
    return "".join(word[0].upper() + word[1:] for word in words if word)


def underscore(text: str) -> str:
    """Convert PascalCase or camelCase text to snake_case.

    Examples:
        "CreateWidget" -> "create_widget"
        "PhoneNumber" -> "phone_number"
        "HTTPMethod" -> "http_method"
        "per-page" -> "per_page"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    result = "_".join(word.lower() for word in words)
    if text.startswith("_"):
        result = "_" + result
    return result


def sanitize_name(text: str) -> str:
    """Replace characters that cannot appear in an identifier with underscores."""
    return _NON_WORD.sub("_", text)
