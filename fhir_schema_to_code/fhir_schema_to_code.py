import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import GenSubset, PipelineGenerator, ResolutionError, ResolverConfig
from .pipeline.config import TARGET_STYLES


@click.command()
@click.option("--name", "-n", default=None, type=str)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--language", "-l", default=None, type=click.Choice(sorted(TARGET_STYLES)), help="Naming styles to apply")
@click.option(
    "--subset",
    "-s",
    default=None,
    type=click.Choice([subset.value for subset in GenSubset]),
    help="Part of the schema to resolve",
)
@click.option("--format", "-f", "output_format", default="info", type=click.Choice(["info", "json"]))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every resolution decision")
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def fhir_schema_to_code(name, config, language, subset, output_format, verbose, path, output):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    with open(path) as f:
        schema = json.load(f)

    if config is not None:
        with open(config) as f:
            config = json.load(f)
        try:
            config = ResolverConfig.from_dict(config)
        except ValueError as e:
            raise click.ClickException(f"Invalid config file: {e}") from e
    else:
        config = ResolverConfig()

    # Command line flags override the config file
    if language is not None:
        config.language = language
    if subset is not None:
        config.subset = GenSubset(subset)

    if name is None:
        name = Path(path).stem

    header = f"Generated by {reconstruct_command_line(fhir_schema_to_code)}"
    codegen = PipelineGenerator(name, schema, config)

    try:
        out = codegen.generate(output_format, header=header)
    except ResolutionError as e:
        raise click.ClickException(f"Resolution of {name} failed: {e}") from e

    with open(output, "w") as f:
        f.write(out)
