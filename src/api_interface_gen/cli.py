"""CLI entry point for api-interface-gen."""

from pathlib import Path

import click

from api_interface_gen.config import STRATEGY_NAMESPACES, GeneratorConfig, load_config
from api_interface_gen.errors import GenerationError
from api_interface_gen.generator.driver import InterfaceGenerator
from api_interface_gen.generator.emitter import PythonEmitter
from api_interface_gen.generator.validator import validate_files
from api_interface_gen.parser.raml import parse_raml


def _build_config(
    config_path: Path | None,
    base_package: str | None,
    async_trait: str | None,
    empty_response_void: bool | None,
) -> GeneratorConfig:
    """Load the config file, then apply command line overrides."""
    config = load_config(config_path) if config_path else GeneratorConfig()
    overrides = {}
    if base_package is not None:
        overrides["base_package"] = base_package
    if async_trait is not None:
        overrides["async_trait"] = async_trait
    if empty_response_void is not None:
        overrides["empty_response_returns_void"] = empty_response_void
    if not overrides:
        return config
    return GeneratorConfig.model_validate({**config.model_dump(), **overrides})


@click.group()
def main():
    """API Interface Gen: synthesize resource interfaces from RAML descriptions."""
    pass


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for generated modules.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--strategy", default="service", type=click.Choice(sorted(STRATEGY_NAMESPACES)), help="Generate service interfaces or client proxies.")
@click.option("--base-package", default=None, help="Base package of the generated code.")
@click.option("--async-trait", default=None, help="Trait marking asynchronous actions.")
@click.option("--empty-response-void/--empty-response-wrapper", "empty_response_void", default=None, help="Return None for actions without response bodies.")
def generate(
    doc_path: Path,
    output: Path,
    config_path: Path | None,
    strategy: str,
    base_package: str | None,
    async_trait: str | None,
    empty_response_void: bool | None,
):
    """Generate interface modules from a RAML document."""
    config = _build_config(config_path, base_package, async_trait, empty_response_void)

    click.echo(f"Parsing {doc_path}...")
    try:
        description = parse_raml(doc_path)
        click.echo(f"Generating {strategy} interfaces...")
        result = InterfaceGenerator(config, strategy=strategy).generate(description)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Found {len(result.interfaces)} resources.")

    files = PythonEmitter(config).emit(result)
    errors = validate_files(files)
    if errors:
        for fname, err in errors.items():
            click.echo(f"  {fname}: {err}", err=True)
        raise click.ClickException(f"{len(errors)} generated files failed validation")

    for filename, content in files.items():
        file_path = output / filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        click.echo(f"  Created {file_path}")

    click.echo(f"Generated {len(files)} files in {output}")
