import json
import logging

import click

from .pipeline import CodeGeneratorConfig, GenerationError, PipelineGenerator


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--no-format", is_flag=True, default=False, help="Write units without running the formatter")
@click.option("--no-case", is_flag=True, default=False, help="Keep raw schema names as identifiers (debugging)")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every patch and document loaded")
@click.argument("schema_dir", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.argument("output_dir", type=click.Path(file_okay=False, resolve_path=True))
def api_schema_to_code(config, no_format, no_case, verbose, schema_dir, output_dir):
    """Generate API bindings from SCHEMA_DIR into OUTPUT_DIR.

    SCHEMA_DIR must contain objects.json, responses.json and methods.json.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s: %(message)s")

    if config is not None:
        with open(config) as f:
            try:
                config = CodeGeneratorConfig.from_dict(json.load(f))
            except (ValueError, TypeError) as e:
                raise click.ClickException(f"Invalid configuration {config}: {e}") from e
    else:
        config = CodeGeneratorConfig()

    # CLI flags override the configuration file
    if no_format:
        config.formatter.enabled = False
    if no_case:
        config.case_identifiers = False

    try:
        codegen = PipelineGenerator.from_directory(schema_dir, config)
        written = codegen.write(output_dir)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Generated {len(written)} units in {output_dir}")
