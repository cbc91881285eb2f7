"""Command line for batch work on saved presets and I²t sample files."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .export_csv import curve_csv_string, guide_csv_string, long_csv_string, write_long_csv, write_text
from .guides import guide_rows
from .i2t import build, parse_samples
from .number_utils import format_number
from .preset import MalformedPresetError, encode_share_fragment, load_preset


def _load_or_exit(preset: Path):
    try:
        doc, _images = load_preset(preset)
    except MalformedPresetError as e:
        click.echo(f"Error: {preset}: {e}", err=True)
        sys.exit(1)
    return doc


@click.group(name="log-digitizer")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def main(verbose: bool) -> None:
    """Log-scale chart digitizer tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("samples_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--current", type=float, help="Constant current for the equivalent time")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Write the cumulative I²t curve here")
def i2t(samples_file: Path, current: Optional[float], csv_path: Optional[Path]) -> None:
    """Integrate (t, i) samples from a CSV/TSV/whitespace text file."""
    samples = parse_samples(samples_file.read_text(encoding="utf-8"))
    if not samples:
        click.echo(f"Error: no usable (t, i) rows in {samples_file}", err=True)
        sys.exit(1)

    result = build(samples, current)
    click.echo(f"samples: {len(samples)}")
    click.echo(f"I2t: {result.total:.6g}")
    if current is not None:
        if result.equivalent_time is None:
            click.echo("Warning: current must be > 0 for an equivalent time", err=True)
        else:
            click.echo(f"t_eq @ {format_number(current)} A: {result.equivalent_time:.6g} s")

    if csv_path is not None:
        write_text(csv_path, curve_csv_string(result.curve, "t", "i2t"))
        click.echo(f"curve: {csv_path}")


@main.command()
@click.argument("preset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--out", type=click.Path(dir_okay=False, path_type=Path),
              help="Output CSV file (default: stdout)")
def export(preset: Path, out: Optional[Path]) -> None:
    """Digitized points of every series as series,x,y CSV."""
    doc = _load_or_exit(preset)
    if out is None:
        click.echo(long_csv_string(doc.series))
        return
    write_long_csv(out, doc.series)
    click.echo(f"Wrote {sum(len(s.points) for s in doc.series)} points to {out}")


@main.command()
@click.argument("preset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def guides(preset: Path) -> None:
    """Guide-line intersections with every series."""
    doc = _load_or_exit(preset)
    rows = guide_rows(doc)
    if not rows:
        click.echo("No guides in preset", err=True)
        return
    click.echo(guide_csv_string(rows))


@main.command()
@click.argument("preset", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def share(preset: Path) -> None:
    """Print the share-link fragment for a preset."""
    click.echo(encode_share_fragment(_load_or_exit(preset)))


if __name__ == "__main__":
    main()
