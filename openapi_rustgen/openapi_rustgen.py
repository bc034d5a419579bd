import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .errors import OutputError, ResolutionError
from .pipeline import GeneratorConfig, OutputMode, PipelineGenerator

logger = logging.getLogger(__name__)


@click.command()
@click.option("--name", "-n", default=None, type=str)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--force", is_flag=True, default=False, help="Overwrite existing output files")
@click.option(
    "--dump-ir",
    default=None,
    type=click.Path(resolve_path=True),
    help="Also write the resolved IR as JSON to this file",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log resolution details")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def openapi_rustgen(name, config, force, dump_ir, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    with open(path) as f:
        document = json.load(f)

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    if force:
        config.output.mode = OutputMode.FORCE

    if name is None:
        name = Path(path).stem

    try:
        generator = PipelineGenerator(name, document, config, reconstruct_command_line(openapi_rustgen))
        ir = generator.analyze()
        if dump_ir is not None:
            with open(dump_ir, "w") as f:
                json.dump(ir.to_dict(), f, indent=2)
        written = generator.write(output, ir)
    except ResolutionError as e:
        raise click.ClickException(f"Resolution failed: {e}") from e
    except (FileExistsError, OutputError) as e:
        raise click.ClickException(str(e)) from e

    logger.info("Generated %d files in %s", len(written), output)
