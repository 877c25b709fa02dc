"""SledTuner CLI entry point.

Provides commands for inspecting presets, the parameter schema and the
[tool.sledtuner] settings.
"""

import json
import logging
import sys
from pathlib import Path

import typer

from .presets import delete_command, diff_command, list_command, show_command

# Create the main app
app = typer.Typer(
    name="sledtuner",
    help="SledTuner CLI for parameter presets and settings",
    invoke_without_command=True,
)

# Create subcommands
presets_app = typer.Typer(help="Inspect and manage saved presets")
config_app = typer.Typer(help="Check [tool.sledtuner] settings")

app.add_typer(presets_app, name="presets")
app.add_typer(config_app, name="config")

presets_app.command("list")(list_command)
presets_app.command("show")(show_command)
presets_app.command("diff")(diff_command)
presets_app.command("delete")(delete_command)


@app.command("version")
def version():
    """Show version information."""
    from .. import __version__
    typer.echo(f"SledTuner CLI version {__version__}")


@app.command("schema")
def schema(
    as_json: bool = typer.Option(False, "--json", help="Print the schema as JSON"),
):
    """Show the tunable components and their fields."""
    from ..parameters import DEFAULT_SCHEMA

    if as_json:
        typer.echo(json.dumps(DEFAULT_SCHEMA.to_dict(), indent=2))
        return

    for spec in DEFAULT_SCHEMA.components:
        header = f"{spec.name} ({len(spec.fields)} fields)"
        if spec.doc:
            header += f" - {spec.doc}"
        typer.echo(header)
        for name in spec.fields:
            marker = " [channel]" if spec.is_channel(name) else ""
            typer.echo(f"  {name}{marker}")


@config_app.command("validate")
def validate(
    file: Path = typer.Option(Path("pyproject.toml"), "--file", "-f", help="TOML file holding [tool.sledtuner]"),
):
    """Validate the [tool.sledtuner] table of a TOML file."""
    from ..config import read_settings_table, validate_settings

    try:
        table = read_settings_table(file)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"Error: Malformed TOML in {file}: {e}", err=True)
        raise typer.Exit(1)

    if not table:
        typer.echo(f"No [tool.sledtuner] table in {file}; defaults apply")
        return

    errors = validate_settings(table)
    if errors:
        typer.echo(f"✗ {len(errors)} problem(s) in {file}:", err=True)
        for error in errors:
            typer.echo(f"  - {error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ {file} is valid")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
):
    """SledTuner CLI for parameter presets and settings."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        typer.echo("\nError: Missing command.", err=True)
        raise typer.Exit(1)


def cli_main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\nAborted", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
