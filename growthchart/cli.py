"""
Growth chart CLI

Command-line access to the growth calculations and to saved snapshots.
"""

import json
import math
from pathlib import Path
from typing import Optional

import click
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.table import Table

from growthchart import __version__
from growthchart.exceptions import ReferenceDataError

console = Console()


def _fmt(value: Optional[float], digits: int = 2) -> str:
    """Format a number, showing N/A for NaN or missing values."""
    if value is None or math.isnan(value):
        return "N/A"
    return f"{value:.{digits}f}"


@click.group()
@click.version_option(version=__version__, prog_name="growthchart")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Diagnostic log level (defaults to GROWTHCHART_LOG_LEVEL)")
def cli(log_level: Optional[str]):
    """
    Growth Chart - pediatric growth metrics

    Unit conversion, BMI, age, growth velocity and LMS Z-scores for
    pediatric growth measurements.
    """
    from growthchart.logging_config import setup_logging

    setup_logging(log_level)


@cli.command()
@click.argument("weight", type=float)
@click.argument("height", type=float)
@click.option("--weight-unit", type=click.Choice(["kg", "lbs"]), default="kg", help="Unit of WEIGHT")
@click.option("--height-unit", type=click.Choice(["cm", "in"]), default="cm", help="Unit of HEIGHT")
def bmi(weight: float, height: float, weight_unit: str, height_unit: str):
    """
    Calculate BMI from a weight and a height.

    Example:

        growthchart bmi 10 75
    """
    from growthchart.growth import calculate_bmi, convert_to_metric_for_calc

    value = calculate_bmi(
        convert_to_metric_for_calc(weight, weight_unit),
        convert_to_metric_for_calc(height, height_unit),
    )
    console.print(f"BMI: [bold]{_fmt(value, 1)}[/bold] kg/m²")


@cli.command()
@click.argument("dob")
@click.argument("observation_date")
def age(dob: str, observation_date: str):
    """
    Age in months at an observation date (dates as YYYY-MM-DD).
    """
    from growthchart.growth import calculate_age_in_months

    months = calculate_age_in_months(dob, observation_date)
    console.print(f"Age: [bold]{_fmt(months)}[/bold] months")


@cli.command()
@click.argument("value", type=float)
@click.argument("unit", type=click.Choice(["kg", "lbs", "cm", "in"]))
@click.option("--to", "target", type=click.Choice(["Metric", "Imperial"]), default=None,
              help="Target unit system (defaults to GROWTHCHART_UNITS)")
def convert(value: float, unit: str, target: Optional[str]):
    """
    Convert a weight or length for display.
    """
    from growthchart.config import get_config
    from growthchart.growth import convert_height_for_display, convert_weight_for_display

    target = target or get_config().display_units.value
    if unit in ("kg", "lbs"):
        result = convert_weight_for_display(value, unit, target)
    else:
        result = convert_height_for_display(value, unit, target)
    console.print(f"{value} {unit} = [bold]{result.value:g}[/bold] {result.unit}")


@cli.command()
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def velocity(records_file: Path):
    """
    Growth velocity series from a JSON list of growth records.
    """
    from growthchart.growth import generate_velocity_data_series
    from growthchart.models import GrowthRecordCreate

    try:
        records = TypeAdapter(list[GrowthRecordCreate]).validate_json(records_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise click.ClickException(f"Invalid records file: {e}") from e

    series = generate_velocity_data_series(records)
    if not series:
        console.print("[yellow]No velocity could be calculated from these records[/yellow]")
        return

    table = Table(title="Growth Velocity")
    table.add_column("Age (months)", style="cyan", justify="right")
    table.add_column("Velocity", style="green", justify="right")
    table.add_column("Unit")
    table.add_column("From")
    table.add_column("To")

    for point in series:
        table.add_row(
            _fmt(point.age_months_midpoint),
            _fmt(point.velocity),
            point.velocity_unit,
            point.record1_date.isoformat(),
            point.record2_date.isoformat(),
        )

    console.print(table)


@cli.command()
@click.argument("value", type=float)
@click.argument("age_months", type=float)
@click.option("--chart", "chart_file", type=click.Path(dir_okay=False, path_type=Path), required=True,
              help="Reference chart file with L/M/S columns (relative to GROWTHCHART_REFERENCE_DIR when set)")
def zscore(value: float, age_months: float, chart_file: Path):
    """
    Z-score and percentile of a measurement against a reference chart.

    Example:

        growthchart zscore 10.2 12 --chart data/wfa_boys.json
    """
    from growthchart.charts import load_centile_data, resolve_reference_file
    from growthchart.growth import get_z_score_for_measurement, percentile_from_z

    try:
        chart = load_centile_data(resolve_reference_file(chart_file))
    except ReferenceDataError as e:
        raise click.ClickException(str(e)) from e
    if not chart.has_lms:
        raise click.ClickException(f"{chart.name} does not provide L, M and S parameters")

    z = get_z_score_for_measurement(value, age_months, chart.sorted_points())
    console.print(f"{chart.name} ({chart.source})")
    console.print(f"Z-score: [bold]{_fmt(z)}[/bold]  Percentile: [bold]{_fmt(percentile_from_z(z), 1)}[/bold]")


@cli.command()
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--patient", "patient_id", type=str, help="Patient id (defaults to the selected patient)")
@click.option("--units", type=click.Choice(["Metric", "Imperial"]), default=None,
              help="Display units (defaults to the snapshot's settings)")
def records(snapshot_file: Path, patient_id: Optional[str], units: Optional[str]):
    """
    Table of a patient's growth records from a saved snapshot.
    """
    from growthchart.charts import sort_for_table
    from growthchart.db import GrowthStore
    from growthchart.exporters import load_snapshot
    from growthchart.growth import convert_height_for_display, convert_weight_for_display
    from growthchart.models import MeasurementType

    try:
        store = GrowthStore.from_snapshot(load_snapshot(snapshot_file))
    except (ValidationError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Invalid snapshot file: {e}") from e

    patient = store.get_patient(patient_id) if patient_id else store.selected_patient
    if patient is None:
        raise click.ClickException("No such patient; pass --patient with a patient id")

    system = units or store.settings.units.value
    table = Table(title=f"Growth Records - {patient.name}")
    table.add_column("Date", style="cyan")
    table.add_column("Age (months)", justify="right")
    table.add_column("Measurement")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Unit")
    table.add_column("Notes", style="dim")

    for record in sort_for_table(store.records_for_patient(patient.id)):
        value, unit = record.value, record.unit
        if record.measurement_type == MeasurementType.WEIGHT:
            shown = convert_weight_for_display(value, unit, system)
            value, unit = shown.value, shown.unit
        elif record.measurement_type in (
            MeasurementType.HEIGHT, MeasurementType.LENGTH, MeasurementType.HEAD_CIRCUMFERENCE,
        ):
            shown = convert_height_for_display(value, unit, system)
            value, unit = shown.value, shown.unit

        table.add_row(
            record.observation_date.isoformat(),
            _fmt(record.age_months),
            record.display_name,
            f"{value:.2f}".rstrip("0").rstrip("."),
            unit,
            record.notes or "",
        )

    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
