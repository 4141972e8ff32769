"""CLI entry point for swagger-forge."""

import importlib
import json
import sys
import traceback
from pathlib import Path
from typing import Any, List, Optional

import click

from .config import Config
from .exceptions import DereferenceError, EndpointLoadError
from .logging_config import configure_logging
from .models.endpoint import Endpoint
from .schema_gen.builder import DocumentBuilder


def load_endpoints(target: str) -> List[Endpoint]:
    """Import ``module:attribute`` and return it as a list of Endpoint models.

    The attribute may be a list of Endpoint objects or dicts, or a callable returning one.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise EndpointLoadError(target, "expected MODULE:ATTRIBUTE")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EndpointLoadError(target, str(e)) from e
    try:
        value: Any = getattr(module, attr)
    except AttributeError as e:
        raise EndpointLoadError(target, f"module has no attribute '{attr}'") from e
    if callable(value):
        value = value()
    if not isinstance(value, (list, tuple)):
        raise EndpointLoadError(target, "attribute is not a list of endpoints")
    return [item if isinstance(item, Endpoint) else Endpoint.model_validate(item) for item in value]


@click.group()
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="SWAGGER_FORGE_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the logging level (e.g., DEBUG, INFO).",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Override logging format.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str], log_format: Optional[str]) -> None:
    """swagger-forge - build Swagger 2.0 documents from endpoint validation trees."""
    try:
        if config_file:
            cfg = Config.from_file(Path(config_file))
        else:
            cfg = Config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)

    if log_level:
        cfg.logging.level = log_level.upper()
    if log_format:
        cfg.logging.format = log_format.lower()

    configure_logging(cfg.logging)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command()
@click.argument("target")
@click.option(
    "--output-file", "-o",
    type=click.Path(dir_okay=False, writable=True, resolve_path=True),
    help="Write the document to this file instead of stdout.",
)
@click.option("--dereference/--no-dereference", default=None, help="Inline every $ref in the output.")
@click.pass_context
def build(ctx: click.Context, target: str, output_file: Optional[str], dereference: Optional[bool]) -> None:
    """Build a document from the endpoint list at TARGET (MODULE:ATTRIBUTE)."""
    config: Config = ctx.obj["config"]
    settings = config.builder
    if dereference is not None:
        settings = settings.model_copy(update={"de_reference": dereference})

    try:
        endpoints = load_endpoints(target)
        document = DocumentBuilder(settings).build(endpoints)
    except (EndpointLoadError, DereferenceError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    rendered = json.dumps(document, indent=2, default=str)
    if output_file:
        try:
            with open(output_file, "w") as f:
                f.write(rendered)
            click.echo(f"Document written to {output_file}")
        except IOError as e:
            click.echo(f"Error writing output file {output_file}: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered)


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from . import __version__
    click.echo(f"swagger-forge v{__version__}")


@cli.command()
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config = ctx.obj["config"]
    click.echo(json.dumps(config.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    cli()
