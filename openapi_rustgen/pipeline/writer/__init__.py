"""
Writer module.

Writes rendered files to disk, atomically.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter

__all__ = [
    "AtomicWriter",
]
