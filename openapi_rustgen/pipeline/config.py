"""
Configuration for the resolution pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when an output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    atomic_write: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for a generation run."""

    # Crate name and version for the rendered output
    package_name: str = "swagger_client"
    package_version: str = "1.0.0"

    # Synthetic body keys (camelized, e.g. "Body12") that keep their generated name
    exclude_body_names: list[str] = field(default_factory=list)

    # Explicit response renames: resolved response type name -> new name
    patch_response_names: dict[str, str] = field(default_factory=dict)

    # Variable names with a fixed replacement instead of the generic escape
    reserved_word_mappings: dict[str, str] = field(default_factory=lambda: {"ref": "git_ref"})

    # Map usize/isize to u64/i64 (arch-sized integers break on some targets)
    pin_arch_sized_integers: bool = False

    # Query parameters that are always paginated as u16
    pagination_params: list[str] = field(default_factory=lambda: ["page", "per_page"])

    # Add generation comment at top of rendered files
    add_generation_comment: bool = True

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    atomic_write=v.get("atomic_write", True),
                )
            elif k == "exclude_body_names" and isinstance(v, str):
                # "Body1+Body2" form used on the command line
                config.exclude_body_names = [name for name in v.split("+") if name]
            elif k == "patch_response_names" and isinstance(v, str):
                # "Old:New+Old2:New2" form used on the command line
                config.patch_response_names = dict(entry.split(":", 1) for entry in v.split("+") if ":" in entry)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "package_name": self.package_name,
            "package_version": self.package_version,
            "exclude_body_names": self.exclude_body_names,
            "patch_response_names": self.patch_response_names,
            "reserved_word_mappings": self.reserved_word_mappings,
            "pin_arch_sized_integers": self.pin_arch_sized_integers,
            "pagination_params": self.pagination_params,
            "add_generation_comment": self.add_generation_comment,
            "output": {
                "mode": self.output.mode.value,
                "atomic_write": self.output.atomic_write,
            },
        }
