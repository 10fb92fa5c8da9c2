"""
roofplan CLI.

Command-line interface for roof scene assembly and PV proposal sizing.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.models import GeoPoint
from .export.scene_json import SceneJSONExporter
from .flux.energy import enrich_view_from_raster
from .geometry.scene import build_roof_scene
from .ingest.survey_mapper import SurveyFormatError, map_building_survey
from .roi.proposals import compute_proposal
from .utils.logging_config import setup_logging
from .utils.validation import ValidationError, parse_coordinate_pair

app = typer.Typer(
    name="roofplan",
    help="roofplan - Rooftop PV scene assembly and proposal sizing",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Log level"),
    log_file: bool = typer.Option(False, "--log-file/--no-log-file", help="Also log to logs/"),
):
    setup_logging(level=log_level, log_to_file=log_file)


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _fmt(value, spec: str = "", suffix: str = "") -> str:
    if value is None:
        return "n/a"
    return f"{value:{spec}}{suffix}"


@app.command()
def propose(
    monthly_usage: float = typer.Option(..., "--monthly-usage", "-u", help="Monthly electricity usage (kWh)"),
    roof_analysis: Optional[Path] = typer.Option(
        None, "--roof-analysis", "-r", help="Roof analysis JSON (capacity and yield)"
    ),
    buy_price: Optional[float] = typer.Option(None, "--buy-price", help="Grid price (PLN/kWh)"),
    sell_price: Optional[float] = typer.Option(None, "--sell-price", help="Export credit (PLN/kWh)"),
    capex_per_kwp: Optional[float] = typer.Option(None, "--capex-per-kwp", help="Installed cost (PLN/kWp)"),
    self_consumption: Optional[float] = typer.Option(
        None, "--self-consumption", help="Share of production used on site (0-1)"
    ),
    lifetime: Optional[int] = typer.Option(None, "--lifetime", help="System lifetime (years)"),
    module_wattage: Optional[int] = typer.Option(None, "--module-wattage", help="Module rating (W)"),
):
    """
    Size a PV system three ways: SMART_MATCH, MAX_ROI and MAX_ROOF.
    """
    overrides = {
        "buy_price_per_kwh": buy_price,
        "sell_price_per_kwh": sell_price,
        "capex_per_kwp": capex_per_kwp,
        "self_consumption_ratio": self_consumption,
        "lifetime_years": lifetime,
        "module_wattage_w": module_wattage,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    analysis = _load_json(roof_analysis) if roof_analysis else None

    outcome = compute_proposal(monthly_usage, overrides or None, analysis)
    if not outcome.ok:
        console.print(f"[red]{escape(outcome.error)}[/red]")
        raise typer.Exit(1)

    result = outcome.data
    console.print(Panel.fit(
        f"[bold blue]PV Proposal[/bold blue]\n"
        f"Annual usage: {result.annual_usage_kwh:,} kWh",
        border_style="blue"
    ))

    table = Table(title="Scenarios")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Panels", justify="right")
    table.add_column("kWp", justify="right")
    table.add_column("Production", justify="right")
    table.add_column("CAPEX", justify="right")
    table.add_column("Savings/yr", justify="right")
    table.add_column("Payback", justify="right")
    table.add_column("ROI", justify="right")
    table.add_column("LCOE", justify="right")

    for metrics in result.scenarios:
        table.add_row(
            metrics.strategy.value,
            str(metrics.panels),
            f"{metrics.size_kwp:.2f}",
            f"{metrics.annual_production_kwh:,} kWh",
            f"{metrics.capex:,.0f} PLN",
            f"{metrics.annual_savings:,} PLN",
            _fmt(metrics.payback_years, ".1f", " yr"),
            f"{metrics.roi_pct:.1f}%",
            _fmt(metrics.lcoe_per_kwh, ".2f"),
        )
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")


@app.command()
def view(
    survey_file: Path = typer.Argument(..., help="Building survey JSON file"),
    flux: Optional[Path] = typer.Option(None, "--flux", "-f", help="Annual flux GeoTIFF"),
    panels: Optional[int] = typer.Option(None, "--panels", "-n", help="Number of panels to place"),
    order: str = typer.Option("yield", "--order", help="Panel order: yield, as-is"),
    exaggeration: float = typer.Option(1.0, "--exaggeration", "-x", help="Vertical exaggeration"),
    show_steep: bool = typer.Option(False, "--show-steep/--hide-steep", help="Keep near-vertical segments"),
    origin: Optional[str] = typer.Option(None, "--origin", help="Fixed scene origin as 'lat,lon'"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write scene JSON"),
):
    """
    Build the 3D roof scene for a building survey.
    """
    if order not in ("yield", "as-is"):
        console.print(f"[red]Unknown panel order '{order}' (use yield or as-is)[/red]")
        raise typer.Exit(1)

    try:
        view_data = map_building_survey(_load_json(survey_file))
        if origin:
            lat, lon = parse_coordinate_pair(origin)
            view_data = view_data.model_copy(update={"origin": GeoPoint(latitude=lat, longitude=lon)})
    except (SurveyFormatError, ValidationError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Loaded:[/cyan] {survey_file} "
                  f"({len(view_data.segments)} segments, {len(view_data.panels)} panels)")

    if flux:
        console.print(f"[cyan]Sampling flux:[/cyan] {flux}")
        view_data = enrich_view_from_raster(view_data, flux)

    scene = build_roof_scene(
        view_data,
        vertical_exaggeration=exaggeration,
        hide_steep=not show_steep,
        panel_count=panels,
        panel_order=order,
    )

    table = Table(title="Roof Segments")
    table.add_column("Segment", style="cyan")
    table.add_column("Tilt", justify="right")
    table.add_column("Azimuth", justify="right")
    table.add_column("Footprint", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("Avg flux", justify="right")
    table.add_column("Panels", justify="right")
    table.add_column("Visible")

    for frame in scene.segments:
        placed = sum(1 for p in scene.panels if p.segment_id == frame.id)
        table.add_row(
            str(frame.id),
            f"{frame.segment.tilt_deg:.1f}°",
            f"{frame.segment.azimuth_deg:.0f}°",
            f"{frame.footprint.width_u:.1f} x {frame.footprint.height_v:.1f} m",
            f"{frame.height_at_center:.2f} m",
            _fmt(frame.segment.avg_flux, ".0f"),
            str(placed),
            "no" if frame.hidden else "yes",
        )
    console.print(table)
    console.print(
        f"Origin: {scene.origin.latitude:.6f}, {scene.origin.longitude:.6f} | "
        f"Panels placed: {len(scene.panels)}/{scene.total_panels}"
    )

    if output:
        SceneJSONExporter().export(scene, output)


@app.command()
def version():
    """Show version information."""
    from . import __version__
    console.print(f"roofplan v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
