#!/usr/bin/env python3

import click
import pytest
from click.testing import CliRunner

from openapi_rustgen.cli_utils import reconstruct_command_line
from openapi_rustgen.openapi_rustgen import openapi_rustgen


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        assert reconstruct_command_line(openapi_rustgen) == "openapi_rustgen"

    def test_reconstruct_command_line_with_context(self):
        captured = {}

        @click.command()
        @click.option("--name", "-n", default=None)
        @click.option("--force", is_flag=True, default=False)
        @click.argument("path")
        def command(name, force, path):
            captured["line"] = reconstruct_command_line(command)

        result = CliRunner().invoke(command, ["/no/such/api.json", "-n", "widgets", "--force"])

        assert result.exit_code == 0, result.output
        assert captured["line"] == "openapi_rustgen /no/such/api.json -n widgets --force"


if __name__ == "__main__":
    pytest.main([__file__])
