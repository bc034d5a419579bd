"""
Pipeline generator.

Runs the whole pipeline for one document: parse, analyze, render, write.
Each call to analyze() starts from a fresh GenerationContext, so runs
never share state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .analyzer import IR, GenerationContext, SchemaAnalyzer
from .backends import RustBackend
from .config import GeneratorConfig
from .schema_ast import ApiDocument, DocumentParser
from .writer import AtomicWriter

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates a Rust client from an OpenAPI document."""

    def __init__(
        self,
        name: str,
        document: dict[str, Any] | ApiDocument,
        config: GeneratorConfig | None = None,
        command_line: str | None = None,
    ):
        """
        Initialize the generator.

        Args:
            name: Name of the generated client (used in the generation comment)
            document: Raw OpenAPI document or an already parsed ApiDocument
            config: Generation configuration
            command_line: Command line recorded in the generation comment
        """
        self.name = name
        self.config = config or GeneratorConfig()
        self.command_line = command_line
        if isinstance(document, ApiDocument):
            self.document = document
        else:
            self.document = DocumentParser().parse(document)

    def analyze(self) -> IR:
        """
        Build the IR with a fresh context.

        Raises:
            ResolutionError: On fatal resolution errors; no IR is produced
        """
        context = GenerationContext(config=self.config)
        ir = SchemaAnalyzer(context).analyze(self.document)
        ir.generation_comment = self._generation_comment(ir)
        for warning in ir.warnings:
            logger.debug("Analysis warning: %s", warning)
        return ir

    def generate(self, ir: IR | None = None) -> dict[str, str]:
        """
        Analyze and render.

        Args:
            ir: An IR returned by analyze(); the document is analyzed when omitted

        Returns:
            Relative file path -> rendered content
        """
        if ir is None:
            ir = self.analyze()
        return RustBackend(self.config).generate(ir)

    def write(self, output_dir: str | Path, ir: IR | None = None) -> list[Path]:
        """Render ir (analyzing first when omitted) and write every file under output_dir."""
        files = self.generate(ir)
        return AtomicWriter().write_files(Path(output_dir), files, self.config.output)

    def _generation_comment(self, ir: IR) -> str:
        lines = [f"Generated by openapi_rustgen for {self.name}", f"{ir.title} {ir.api_version}".strip()]
        if self.command_line:
            lines.append(f"Command: {self.command_line}")
        return "\n".join(lines)
