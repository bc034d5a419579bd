"""
Atomic file writer for rendered output.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ...errors import OutputError
from ..config import OutputConfig, OutputMode

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    An interrupted write never leaves the target file incomplete.
    """

    def __init__(self, validate_rust: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_rust: Optional validation function for Rust code
        """
        self._validate_rust = validate_rust or self._default_validate_rust

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate .rs files before finalizing

        Raises:
            OutputError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate and path.suffix == ".rs":
                self._validate_rust(content)

            temp_path.replace(path)

        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def write_if_not_exists(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content only if the file doesn't exist.

        Raises:
            FileExistsError: If the file already exists
            OutputError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")
        self.write(path, content, validate)

    def write_files(self, output_dir: Path, files: dict[str, str], output: OutputConfig) -> list[Path]:
        """
        Write rendered files under an output directory.

        Existing files are checked before anything is written, so in the
        default mode a conflict leaves the directory untouched.

        Returns:
            Paths written
        """
        targets = [(output_dir / relative, content) for relative, content in files.items()]

        if output.mode == OutputMode.ERROR_IF_EXISTS:
            existing = [str(path) for path, _ in targets if path.exists()]
            if existing:
                raise FileExistsError(f"Output files already exist: {', '.join(existing)}. Use force mode to overwrite.")

        written = []
        for path, content in targets:
            if output.atomic_write:
                self.write(path, content)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
            logger.info("Wrote %s", path)
            written.append(path)
        return written

    def _default_validate_rust(self, content: str) -> None:
        """Default Rust validation.

        Raises:
            OutputError: If validation fails
        """
        # Balanced braces (simple heuristic)
        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise OutputError(f"Rendered Rust code has unbalanced braces: {open_braces} open, {close_braces} close")
