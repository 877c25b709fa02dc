"""Preset inspection commands."""

from pathlib import Path
from typing import Optional

import polars as pl
import typer

from ..config import load_settings
from ..presets import PresetStore, preset_hash
from ..reports import diff_frame, snapshot_frame


def _open_store(presets_dir: Optional[Path]) -> PresetStore:
    if presets_dir is None:
        try:
            presets_dir = load_settings().presets_dir
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    store = PresetStore(presets_dir)
    store.refresh()
    return store


def print_frame(frame: pl.DataFrame) -> None:
    with pl.Config(tbl_rows=-1, tbl_width_chars=160, fmt_str_lengths=64, tbl_hide_dataframe_shape=True):
        typer.echo(str(frame))


DIR_OPTION = typer.Option(None, "--dir", "-d", help="Presets folder (defaults to [tool.sledtuner] presets_dir)")
VEHICLE_OPTION = typer.Option(None, "--vehicle", help="Only presets captured for this vehicle")


def list_command(
    presets_dir: Optional[Path] = DIR_OPTION,
    vehicle: Optional[str] = VEHICLE_OPTION,
):
    """List stored presets."""
    store = _open_store(presets_dir)
    presets = store.list(vehicle)
    if not presets:
        typer.echo(f"No presets in {store.folder}")
        return

    typer.echo(f"{len(presets)} preset(s) in {store.folder}:")
    for preset in presets:
        values = sum(len(f) for f in preset.parameters.values())
        typer.echo(
            f"  {preset.name:<24} {preset.vehicle:<20} {preset.created:%Y-%m-%d %H:%M}  "
            f"{values:>4} values  {preset_hash(preset)}"
        )
        if preset.description:
            typer.echo(f"      {preset.description}")


def show_command(
    name: str = typer.Argument(..., help="Preset name (case-insensitive)"),
    presets_dir: Optional[Path] = DIR_OPTION,
    vehicle: Optional[str] = VEHICLE_OPTION,
    component: Optional[str] = typer.Option(None, "--component", "-c", help="Only show this component"),
):
    """Show the values stored in a preset."""
    store = _open_store(presets_dir)
    preset = store.get(name, vehicle)
    if preset is None:
        typer.echo(f"Error: Preset '{name}' not found", err=True)
        raise typer.Exit(1)

    typer.echo(f"{preset.name} ({preset.vehicle}), created {preset.created:%Y-%m-%d %H:%M}")
    if preset.description:
        typer.echo(preset.description)
    frame = snapshot_frame(preset.parameters)
    if component is not None:
        frame = frame.filter(pl.col("component") == component)
    print_frame(frame)


def diff_command(
    before: str = typer.Argument(..., help="Baseline preset name"),
    after: str = typer.Argument(..., help="Preset to compare"),
    presets_dir: Optional[Path] = DIR_OPTION,
    vehicle: Optional[str] = VEHICLE_OPTION,
    show_all: bool = typer.Option(False, "--all", help="Include unchanged fields"),
):
    """Compare two presets field by field."""
    store = _open_store(presets_dir)
    left = store.get(before, vehicle)
    right = store.get(after, vehicle)
    for label, preset in ((before, left), (after, right)):
        if preset is None:
            typer.echo(f"Error: Preset '{label}' not found", err=True)
            raise typer.Exit(1)

    frame = diff_frame(left.parameters, right.parameters, changed_only=not show_all)
    if frame.is_empty():
        typer.echo("No differences")
        return
    print_frame(frame)


def delete_command(
    name: str = typer.Argument(..., help="Preset name (case-insensitive)"),
    presets_dir: Optional[Path] = DIR_OPTION,
    vehicle: Optional[str] = VEHICLE_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a preset file."""
    store = _open_store(presets_dir)
    preset = store.get(name, vehicle)
    if preset is None:
        typer.echo(f"Error: Preset '{name}' not found", err=True)
        raise typer.Exit(1)

    if not yes:
        typer.confirm(f"Delete preset '{preset.name}' for {preset.vehicle}?", abort=True)
    if not store.delete(preset.name, preset.vehicle):
        typer.echo(f"Error: Could not delete preset '{preset.name}'", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Deleted preset '{preset.name}'")
