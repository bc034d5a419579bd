"""
Base class for rendering backends.

A backend turns the IR into output files. It consumes the IR as is and
never infers types on its own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.ir_nodes import IR
from ..config import GeneratorConfig


class RenderBackend(ABC):
    """Abstract base class for rendering backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # Comment prefix of the target language
    COMMENT_PREFIX: str = "//"

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self._register_filters(self.jinja_env)

    def _register_filters(self, env: jinja2.Environment) -> None:
        """Hook for language-specific filters."""

    @abstractmethod
    def generate(self, ir: IR) -> dict[str, str]:
        """
        Render the IR.

        Args:
            ir: The intermediate representation

        Returns:
            Relative file path -> file content
        """

    def format_comment(self, text: str) -> str:
        """Prefix every line of text with the language comment marker."""
        if not text:
            return ""
        return "\n".join(f"{self.COMMENT_PREFIX} {line}".rstrip() for line in text.splitlines()) + "\n"
