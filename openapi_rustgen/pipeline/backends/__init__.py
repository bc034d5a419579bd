"""
Rendering backends.

Contains language-specific renderers of the IR.
"""

from __future__ import annotations

from .base import RenderBackend
from .rust_backend import RustBackend

__all__ = [
    "RenderBackend",
    "RustBackend",
]
