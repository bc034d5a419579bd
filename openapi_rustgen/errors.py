"""Exceptions raised while resolving an API document."""

from __future__ import annotations


class ResolutionError(Exception):
    """Base exception for fatal resolution errors."""

    def __init__(self, message: str, schema_path: str | None = None) -> None:
        self.schema_path = schema_path
        full_message = f"{message}" if not schema_path else f"[{schema_path}] {message}"
        super().__init__(full_message)


class UnresolvedReferenceError(ResolutionError):
    """Raised when a schema references a model that is not in the document."""

    def __init__(self, name: str, schema_path: str | None = None) -> None:
        self.name = name
        super().__init__(f"Reference to unknown model '{name}'", schema_path)


class InvalidBoundError(ResolutionError):
    """Raised when an integer bound cannot be mapped to a machine integer."""

    def __init__(self, bound: object, reason: str, schema_path: str | None = None) -> None:
        self.bound = bound
        self.reason = reason
        super().__init__(f"Invalid integer bound {bound!r}: {reason}", schema_path)


class OutputError(Exception):
    """Raised when rendered output cannot be written."""
