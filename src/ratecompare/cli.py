"""Command-line interface for Green Button tariff comparison."""

import json
import logging
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analysis.comparison import best_tariff, compare_tariffs, rank_for_display
from .analysis.coverage import data_coverage
from .analysis.gas import calculate_gas_comparison, calculate_gas_savings_from_electrification
from .analysis.simulation import apply_simulated_loads, simulated_monthly_kwh
from .collectors.green_button import (
    ELECTRICITY,
    GreenButtonParseError,
    detect_interval_size,
    parse_electricity_csv,
    parse_gas_csv,
)
from .models import LoadPreset
from .tariffs import TariffConfig, TariffConfigError, load_tariff_config

console = Console()

# Simulated load spacing when the export is too short to measure
DEFAULT_INTERVAL_MINUTES = 15


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def read_export(csv_path: str) -> str:
    # utf-8-sig drops the BOM some utilities prepend
    return Path(csv_path).read_text(encoding="utf-8-sig", errors="replace")


def print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")


def fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise SystemExit(1)


def select_loads(config: TariffConfig, load_ids: tuple[str, ...]) -> list[LoadPreset]:
    presets = {p.id: p for p in config.load_presets}
    unknown = [load_id for load_id in load_ids if load_id not in presets]
    if unknown:
        fail(f"Unknown load preset(s): {', '.join(unknown)}")
    return [presets[load_id] for load_id in load_ids]


@click.group()
@click.option("--config", "config_path", type=click.Path(), help="Path to tariffs.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Compare electricity and gas rate plans using Green Button interval exports."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None


@cli.command("parse")
@click.argument("csv_path", type=click.Path(exists=True))
@click.option("--gas", is_flag=True, help="Treat the file as a gas (therm) export")
def parse_cmd(csv_path, gas):
    """Parse an export and show what was found."""
    parser = parse_gas_csv if gas else parse_electricity_csv
    try:
        result = parser(read_export(csv_path))
    except GreenButtonParseError as e:
        fail(str(e))

    unit = "therms" if gas else "kWh"
    total = sum(r.value for r in result.readings)
    console.print(f"[green]Parsed {len(result.readings)} readings ({total:,.2f} {unit})[/green]")
    print_warnings(result.warnings)

    coverage = data_coverage(result.readings)
    if coverage:
        seasons = [name for name, seen in (("summer", coverage.has_summer), ("winter", coverage.has_winter)) if seen]
        console.print(
            f"[cyan]{coverage.start:%Y-%m-%d} → {coverage.end:%Y-%m-%d}: "
            f"{coverage.days} days (~{coverage.months} months), "
            f"seasons: {', '.join(seasons) or 'none'}[/cyan]"
        )


@cli.command("compare")
@click.argument("csv_path", type=click.Path(exists=True))
@click.option("--current", "current_id", help="Your current tariff ID (default: first in roster)")
@click.option("--add-load", "load_ids", multiple=True, help="Simulated load preset ID (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def compare_cmd(ctx, csv_path, current_id, load_ids, as_json):
    """Rank every tariff by estimated monthly cost."""
    try:
        config = load_tariff_config(ctx.obj["config_path"])
        if current_id:
            config.get_tariff(current_id)
        result = parse_electricity_csv(read_export(csv_path))
    except (GreenButtonParseError, TariffConfigError) as e:
        fail(str(e))

    if not config.tariffs:
        fail("No tariffs configured")

    loads = select_loads(config, load_ids)
    current_id = current_id or config.tariffs[0].id
    interval = detect_interval_size(result.readings, ELECTRICITY.interval_unit, ELECTRICITY.interval_sample_size)
    readings = apply_simulated_loads(result.readings, loads, interval or DEFAULT_INTERVAL_MINUTES)
    results = rank_for_display(compare_tariffs(readings, current_id, config.tariffs), current_id)

    if as_json:
        click.echo(json.dumps([asdict(r) for r in results], indent=2))
        return

    print_warnings(result.warnings)
    if loads:
        console.print(f"[magenta]Including +{simulated_monthly_kwh(loads):.0f} kWh/mo of simulated load[/magenta]")

    table = Table(title="Tariff Comparison")
    table.add_column("Tariff", style="cyan")
    table.add_column("Type")
    table.add_column("Total cost", justify="right")
    table.add_column("Est. monthly", justify="right")
    table.add_column("Savings/mo", justify="right")

    types = {t.id: t.type for t in config.tariffs}
    for r in results:
        name = f"{r.tariff_name} [dim](current)[/dim]" if r.tariff_id == current_id else r.tariff_name
        savings_style = "green" if r.savings_vs_current > 0 else "red" if r.savings_vs_current < 0 else "dim"
        table.add_row(
            name,
            types[r.tariff_id],
            f"${r.total_cost:,.2f}",
            f"${r.estimated_monthly_cost:,.2f}",
            f"[{savings_style}]${r.savings_vs_current:,.2f}[/{savings_style}]",
        )

    console.print(table)

    best = best_tariff(results)
    if best and best.tariff_id != current_id and best.savings_vs_current > 0:
        console.print(f"[green]Cheapest: {best.tariff_name}, saving ${best.savings_vs_current:,.2f}/mo[/green]")


@cli.command("gas")
@click.argument("csv_path", type=click.Path(exists=True))
@click.option("--add-load", "load_ids", multiple=True, help="Electric load preset replacing a gas appliance")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def gas_cmd(ctx, csv_path, load_ids, as_json):
    """Estimate the monthly gas bill."""
    try:
        config = load_tariff_config(ctx.obj["config_path"])
        result = parse_gas_csv(read_export(csv_path))
    except (GreenButtonParseError, TariffConfigError) as e:
        fail(str(e))

    if config.gas_tariff is None:
        fail("No gas_tariff configured")

    comparison = calculate_gas_comparison(result.readings, config.gas_tariff)
    loads = select_loads(config, load_ids)
    savings = calculate_gas_savings_from_electrification(loads, config.gas_tariff)

    if as_json:
        data = asdict(comparison)
        data["electrification"] = savings
        click.echo(json.dumps(data, indent=2))
        return

    print_warnings(result.warnings)

    table = Table(title=comparison.tariff_name)
    table.add_column("Month", style="cyan")
    table.add_column("Therms", justify="right")
    table.add_column("Cost", justify="right")
    for month in comparison.breakdown:
        table.add_row(month.month_key, f"{month.usage:,.1f}", f"${month.cost:,.2f}")
    console.print(table)

    console.print(f"Average monthly cost: [bold]${comparison.estimated_monthly_cost:,.2f}[/bold]")
    if savings["appliances"]:
        console.print(
            f"[green]Replacing {', '.join(savings['appliances'])} saves "
            f"~{savings['monthly_therms_offset']:.0f} therms (${savings['monthly_savings']:,.2f})/mo[/green]"
        )


@cli.command("tariffs")
@click.pass_context
def tariffs_cmd(ctx):
    """List configured tariffs and load presets."""
    try:
        config = load_tariff_config(ctx.obj["config_path"])
    except TariffConfigError as e:
        fail(str(e))

    table = Table(title="Tariffs")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Fixed/mo", justify="right")
    table.add_column("Periods")

    for t in config.tariffs:
        periods = ", ".join(f"{p.name} {p.start_hour}-{p.end_hour}h ${p.rate:.2f}" for p in t.periods)
        table.add_row(t.id, t.name, t.type, f"${t.fixed_monthly_charge:.2f}", periods)
    console.print(table)

    if config.load_presets:
        presets = Table(title="Load Presets")
        presets.add_column("ID", style="cyan")
        presets.add_column("Name")
        presets.add_column("kWh/mo", justify="right")
        for p in config.load_presets:
            presets.add_row(p.id, p.name, f"{p.monthly_kwh:.0f}")
        console.print(presets)


if __name__ == "__main__":
    cli()
