"""Command-line interface for off-grid solar system sizing."""

import calendar
import json
import logging
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .appliances import filter_category, load_appliances_from_yaml
from .catalog import DEFAULT_CATALOG
from .collectors import pvgis
from .config import FALLBACK_POLICIES, load_policy
from .demand import (
    aggregate_critical_load,
    aggregate_demand,
    item_daily_energy,
    item_daily_hours,
    summarize_demand,
)
from .engine import size_system
from .errors import CatalogExhaustedError, DomainError, SizeCeilingExceeded
from .irradiance import compute_worst_month_yield, worst_month
from .reports.bill import format_bill_text, result_to_dict

console = Console()


@click.group()
@click.option("--config", type=click.Path(), help="Path to sizing.yaml")
@click.option("-v", "--verbose", is_flag=True, help="Show informational log messages")
@click.pass_context
def cli(ctx, config, verbose):
    """Solar sizer - size an off-grid solar system for a daily load."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_yield(worst_yield, latitude, longitude) -> float:
    if worst_yield is not None:
        return worst_yield
    if latitude is None or longitude is None:
        console.print("[yellow]No location or yield given, using the default worst-month yield[/yellow]")
        return compute_worst_month_yield(None)

    series = pvgis.fetch_monthly_yield(latitude, longitude)
    if series.is_estimated:
        console.print("[yellow]Could not fetch PVGIS data, using estimated regional values[/yellow]")
    return compute_worst_month_yield(series)


@cli.command()
@click.option("--demand", type=float, help="Daily energy demand in kWh")
@click.option("--loads", "loads_path", type=click.Path(exists=True), help="YAML load list (selected items count)")
@click.option("--critical-only", is_flag=True, help="Size for critical loads only (with --loads)")
@click.option("--backup-hours", type=float, default=12, show_default=True, help="Hours of battery backup")
@click.option("--yield", "worst_yield", type=float, help="Worst-month yield in kWh/kWp/day")
@click.option("--latitude", type=float, help="Site latitude (fetches PVGIS data)")
@click.option("--longitude", type=float, help="Site longitude (fetches PVGIS data)")
@click.option("--strict-ceiling/--no-strict-ceiling", default=None, help="Fail when the array exceeds 12.6 kWp")
@click.option("--fallback", type=click.Choice(FALLBACK_POLICIES), help="Policy when no catalog entry fits")
@click.option("--efficiency-factor/--no-efficiency-factor", default=None, help="Apply 85% battery efficiency")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def size(
    ctx,
    demand,
    loads_path,
    critical_only,
    backup_hours,
    worst_yield,
    latitude,
    longitude,
    strict_ceiling,
    fallback,
    efficiency_factor,
    as_json,
):
    """Size inverter, batteries, panels and protection for a daily load."""
    if demand is None and not loads_path:
        console.print("[red]Please specify --demand or --loads[/red]")
        ctx.exit(1)

    policy = load_policy(ctx.obj["config_path"])
    if strict_ceiling is not None:
        policy = replace(policy, strict_ceiling=strict_ceiling)
    if fallback:
        policy = replace(policy, catalog_fallback=fallback)
    if efficiency_factor is not None:
        policy = replace(policy, apply_battery_efficiency_factor=efficiency_factor)

    demand_summary = None
    if loads_path:
        items = load_appliances_from_yaml(Path(loads_path))
        demand_summary = summarize_demand(items)
        demand = aggregate_critical_load(items) if critical_only else aggregate_demand(items)

    try:
        pvout = _resolve_yield(worst_yield, latitude, longitude)
        result = size_system(demand, backup_hours, pvout, policy)
    except DomainError as e:
        console.print(f"[red]Invalid input: {e}[/red]")
        ctx.exit(1)
    except SizeCeilingExceeded as e:
        console.print(f"[red]{e}[/red]")
        ctx.exit(1)
    except CatalogExhaustedError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Try --fallback closest-match to accept the nearest model[/dim]")
        ctx.exit(1)

    if as_json:
        data = result_to_dict(result)
        data["inputs"] = {
            "daily_energy_demand_kwh": round(demand, 3),
            "backup_hours": backup_hours,
            "worst_month_yield": round(pvout, 3),
        }
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"System Design - {demand:.2f} kWh/day, {backup_hours:g}h backup")
    table.add_column("Component", style="cyan")
    table.add_column("Specification")
    table.add_column("Qty", justify="right")

    battery = result.battery
    table.add_row("Inverter", f"{result.inverter_rating} W hybrid, {result.system_voltage} V", "1")
    table.add_row("Battery", f"{battery.chemistry} {battery.capacity_ah:.0f} Ah ({battery.series}S{battery.parallel}P)", str(battery.total_units))
    table.add_row("Solar panel", f"{result.panels.wattage} W", str(result.panels.count))
    table.add_row("Charge controller", f"{result.charge_controller.type} {result.charge_controller.rating} A", str(result.charge_controller.count))
    table.add_row("DC cable", f"{result.cables.dc_size_mm2} mm²", "")
    table.add_row("AC cable", f"{result.cables.ac_size_mm2} mm²", "")
    table.add_row("DC breaker", f"{result.breakers.dc_rating} A", "1")
    table.add_row("AC breaker", f"{result.breakers.ac_rating} A", "1")
    table.add_row("Surge protection", "Recommended" if result.accessories.spd else "-", "1" if result.accessories.spd else "")
    table.add_row("Voltage regulator", "Recommended" if result.accessories.avr else "-", "1" if result.accessories.avr else "")
    console.print(table)

    if demand_summary:
        console.print(
            f"Demand: {demand_summary['total_kwh']} kWh total, "
            f"{demand_summary['critical_kwh']} kWh critical, "
            f"{demand_summary['night_kwh']} kWh at night"
        )
    console.print(f"Array: {result.panels.total_wattage / 1000:.2f} kWp installed ({result.required_kwp:.2f} kWp required)")
    if result.exceeds_ceiling:
        console.print("[yellow]System exceeds the recommended 12.6 kWp maximum[/yellow]")


@cli.command("bill")
@click.option("--demand", type=float, required=True, help="Daily energy demand in kWh")
@click.option("--backup-hours", type=float, default=12, show_default=True, help="Hours of battery backup")
@click.option("--yield", "worst_yield", type=float, help="Worst-month yield in kWh/kWp/day")
@click.pass_context
def bill(ctx, demand, backup_hours, worst_yield):
    """Print a plain-text bill of components."""
    policy = load_policy(ctx.obj["config_path"])
    if worst_yield is None:
        worst_yield = compute_worst_month_yield(None)
    try:
        result = size_system(demand, backup_hours, worst_yield, policy)
    except (DomainError, SizeCeilingExceeded, CatalogExhaustedError) as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)
    click.echo(format_bill_text(result))


@cli.command()
@click.option("--latitude", type=float, required=True, help="Site latitude")
@click.option("--longitude", type=float, required=True, help="Site longitude")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def irradiance(latitude, longitude, as_json):
    """Fetch the monthly PV yield for a location from PVGIS."""
    series = pvgis.fetch_monthly_yield(latitude, longitude)
    worst = worst_month(series)

    if as_json:
        data = {
            "source": series.source,
            "estimated": series.is_estimated,
            "monthly": [{"month": m.month, "value": m.value} for m in series],
            "worst_month": worst.month,
            "worst_month_yield": round(compute_worst_month_yield(series), 3),
        }
        click.echo(json.dumps(data, indent=2))
        return

    if series.is_estimated:
        console.print(f"[yellow]Using estimated values ({series.source})[/yellow]")

    table = Table(title=f"Monthly PV yield per kWp ({latitude}, {longitude})")
    table.add_column("Month", style="cyan")
    table.add_column("kWh/month", justify="right")
    table.add_column("kWh/day", justify="right")
    for m in series:
        style = "bold red" if m is worst else None
        table.add_row(calendar.month_abbr[m.month], f"{m.value:.1f}", f"{m.value / 30:.2f}", style=style)
    console.print(table)
    console.print(
        f"Worst month: {calendar.month_name[worst.month]} "
        f"({compute_worst_month_yield(series):.2f} kWh/kWp/day)"
    )


@cli.command()
@click.option("--file", "file_path", type=click.Path(exists=True), help="YAML load list (default: presets)")
@click.option("--category", type=click.Choice(["home", "office", "custom"]), help="Only show one category")
def loads(file_path, category):
    """Show daily energy per load item and the aggregate demand."""
    items = load_appliances_from_yaml(Path(file_path) if file_path else None)
    if category:
        items = filter_category(items, category)

    if not items:
        console.print("[yellow]No load items found[/yellow]")
        return

    table = Table(title="Load Items")
    table.add_column("Name", style="cyan")
    table.add_column("Watts", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Hours/day", justify="right")
    table.add_column("kWh/day", justify="right")
    table.add_column("Selected", justify="center")
    table.add_column("Critical", justify="center")

    for item in items:
        table.add_row(
            item.name,
            f"{item.watts:g}",
            str(item.quantity),
            f"{item_daily_hours(item):.2f}",
            f"{item_daily_energy(item):.2f}",
            "[green]✓[/green]" if item.selected else "",
            "[red]✓[/red]" if item.critical else "",
        )
    console.print(table)

    summary = summarize_demand(items)
    console.print(f"Selected items: {summary['selected_count']}")
    console.print(f"Total demand: {summary['total_kwh']:.2f} kWh/day")
    console.print(f"Critical demand: {summary['critical_kwh']:.2f} kWh/day")
    console.print(f"Night demand: {summary['night_kwh']:.2f} kWh/day")


@cli.command()
def catalog():
    """List the inverter, battery and panel catalog."""
    table = Table(title="Inverters")
    table.add_column("Rated power", justify="right", style="cyan")
    table.add_column("DC bus", justify="right")
    table.add_column("MPPT", justify="right")
    table.add_column("Max PV input", justify="right")
    for inv in DEFAULT_CATALOG.inverters:
        table.add_row(f"{inv.watts} W", f"{inv.voltage} V", f"{inv.mppt_amps} A", f"{inv.max_pv_input} W")
    console.print(table)

    table = Table(title="Batteries")
    table.add_column("Type", style="cyan")
    table.add_column("Voltage", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("Ah", justify="right")
    for b in DEFAULT_CATALOG.batteries:
        table.add_row(b.chemistry, f"{b.voltage} V", f"{b.kwh:g} kWh", f"{b.capacity_ah:.0f}")
    console.print(table)

    table = Table(title="Panels")
    table.add_column("Unit", justify="right", style="cyan")
    table.add_column("Recommended up to", justify="right")
    for p in DEFAULT_CATALOG.panels:
        table.add_row(f"{p.watts} W", f"{p.max_system_kw:g} kWp")
    console.print(table)


if __name__ == "__main__":
    cli()
