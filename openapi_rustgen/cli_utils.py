"""
CLI utilities for command line reconstruction.
"""

from pathlib import Path

import click

PROGRAM_NAME = "openapi_rustgen"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the invoking command line from the current Click context.

    Paths that exist are shortened to their file name so generated
    headers stay stable across machines.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM_NAME

    cli_args = ctx.params
    if not cli_args:
        return PROGRAM_NAME

    arguments = []
    options = []

    for param in click_command.params:
        value = cli_args.get(param.name)
        if not value:
            continue

        if isinstance(param, click.Argument):
            arguments.append(_format_value(value))
        elif isinstance(param, click.Option):
            if value == param.default:
                continue
            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, _format_value(value)])

    return " ".join([PROGRAM_NAME, *arguments, *options])


def _format_value(value) -> str:
    if isinstance(value, (str, Path)):
        path = Path(str(value))
        return path.name if path.exists() else str(value)
    return str(value)
