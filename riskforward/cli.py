"""
riskforward CLI - exposure, simulation and forward projection over a risk register file

Register files are YAML or JSON with a top-level ``risks:`` list.
"""
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from riskforward import __version__
from riskforward.decision import compute_decision_metrics
from riskforward.exposure import compute_portfolio_exposure
from riskforward.forecast import (
    ScoreHistoryLookup,
    compute_scenario_comparison,
    load_profiles,
    run_forward_projection,
    use_profiles,
)
from riskforward.governance import calculate_instability_drivers
from riskforward.models import Risk, Scenario
from riskforward.settings import get_settings, reload_settings
from riskforward.simulation import compute_mitigation_optimisation, simulate_portfolio
from riskforward.utils import RiskForwardError, get_logger, read_structured, setup_logging

console = Console()
logger = get_logger(__name__)

SCENARIOS = [s.value for s in Scenario]


def load_register(path: str | Path) -> list[Risk]:
    """Parse a register file into risks."""
    data = read_structured(path)
    raw_risks = data.get("risks") if isinstance(data, dict) else data
    if not isinstance(raw_risks, list):
        raise RiskForwardError(f"{path}: expected a 'risks' list")
    return [Risk.model_validate(r) for r in raw_risks]


def _write_output(output, payload) -> None:
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2)
    console.print(f"\n[green]✓ Saved to {output}[/green]")


def _fmt_money(value: float) -> str:
    return f"${value:,.0f}"


# ═══════════════════════════════════════════════════════════════════
# MAIN CLI GROUP
# ═══════════════════════════════════════════════════════════════════

@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', type=click.Path(exists=True), help='Settings YAML file')
@click.option('--log-level', default=None, help='Override log level')
def main(config_path, log_level):
    """
    riskforward - forward-looking project risk engine

    Scenario exposure curves, Monte Carlo cost ranges and
    forward score projection for a risk register.
    """
    settings = reload_settings(config_path) if config_path else get_settings()
    setup_logging(log_level or settings.log_level)
    if settings.profiles_path:
        use_profiles(load_profiles(settings.profiles_path))


# ═══════════════════════════════════════════════════════════════════
# EXPOSURE COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.argument('register', type=click.Path(exists=True))
@click.option('--scenario', type=click.Choice(SCENARIOS), default='neutral', help='Scenario lens')
@click.option('--horizon', type=int, default=None, help='Horizon in months')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file')
def exposure(register, scenario, horizon, output):
    """Forward exposure by month, category and top driver"""
    settings = get_settings()
    risks = load_register(register)
    horizon = settings.exposure_horizon_months if horizon is None else horizon

    console.print(f"\n[bold blue]Forward exposure:[/bold blue] {scenario}, {horizon} months")
    result = compute_portfolio_exposure(risks, scenario, horizon, top_n=settings.top_drivers)

    table = Table(title="Top Drivers")
    table.add_column("Risk", style="cyan")
    table.add_column("Category")
    table.add_column("Exposure", style="magenta", justify="right")
    for d in result.top_drivers:
        table.add_row(d.risk_id, d.category, _fmt_money(d.total))
    console.print(table)

    console.print(f"  • Total exposure: [cyan]{_fmt_money(result.total)}[/cyan]")
    console.print(f"  • Top-3 share: [cyan]{result.concentration.top3_share:.1%}[/cyan]")
    console.print(f"  • HHI: [cyan]{result.concentration.hhi:.3f}[/cyan]")

    if output:
        _write_output(output, result.model_dump(mode='json'))


# ═══════════════════════════════════════════════════════════════════
# SIMULATION COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.argument('register', type=click.Path(exists=True))
@click.option('--scenario', type=click.Choice(SCENARIOS), default=None, help='Scenario lens')
@click.option('--iterations', '-n', type=int, default=None, help='Monte Carlo iterations')
@click.option('--seed', type=int, default=None, help='PRNG seed')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file')
def simulate(register, scenario, iterations, seed, output):
    """Monte Carlo cost and schedule percentiles"""
    settings = get_settings()
    risks = load_register(register)
    iterations = settings.mc_iterations if iterations is None else iterations
    seed = settings.mc_seed if seed is None else seed

    with console.status("[bold green]Simulating..."):
        result = simulate_portfolio(
            risks,
            iterations=iterations,
            seed=seed,
            scenario=scenario,
            cost_spread_pct=settings.mc_cost_spread_pct,
            sample_limit=settings.mc_sample_limit,
        )

    table = Table(title=f"Monte Carlo ({result.iterations:,} iterations, seed {result.seed})")
    table.add_column("Metric", style="cyan")
    table.add_column("Cost", style="magenta", justify="right")
    table.add_column("Schedule (days)", justify="right")
    for label in ("mean", "p50", "p80", "p90"):
        table.add_row(
            label.upper() if label != "mean" else "Mean",
            _fmt_money(getattr(result.cost, label)),
            f"{getattr(result.schedule, label):.1f}",
        )
    console.print(table)

    if output:
        _write_output(output, result.model_dump(mode='json'))


@main.command()
@click.argument('register', type=click.Path(exists=True))
@click.option('--budget', type=float, default=None, help='Mitigation budget cap')
def optimise(register, budget):
    """Rank mitigation spend by leverage on neutral P80"""
    settings = get_settings()
    risks = load_register(register)

    with console.status("[bold green]Simulating neutral baseline..."):
        neutral = simulate_portfolio(
            risks,
            iterations=settings.mc_iterations,
            seed=settings.mc_seed,
            scenario=Scenario.neutral,
            cost_spread_pct=settings.mc_cost_spread_pct,
            sample_limit=0,
        )
    result = compute_mitigation_optimisation(risks, neutral, budget_cap=budget)

    console.print(f"\n[bold cyan]Neutral P80:[/bold cyan] {_fmt_money(result.neutral_p80)}")
    table = Table(title="Mitigation Leverage")
    table.add_column("Risk", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Leverage", style="magenta", justify="right")
    table.add_column("Best band", justify="right")
    for r in result.ranked:
        table.add_row(
            r.risk_name,
            f"{r.materiality_weight:.3f}",
            f"{r.leverage_score:.4f}",
            f"{_fmt_money(r.best_roi_band.start)}-{_fmt_money(r.best_roi_band.end)}",
        )
    console.print(table)

    if result.budget_plan is not None:
        plan = result.budget_plan
        console.print(f"\n[bold cyan]Budget plan ({_fmt_money(plan.budget_cap)}):[/bold cyan]")
        for a in plan.allocations:
            console.print(f"  • {a.risk_name}: {_fmt_money(a.spend)} -> {_fmt_money(a.marginal_benefit)}")
        console.print(f"  Projected benefit: [green]{_fmt_money(plan.total_projected_benefit)}[/green]")


# ═══════════════════════════════════════════════════════════════════
# FORECAST COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.argument('register', type=click.Path(exists=True))
@click.option('--profile', type=click.Choice(SCENARIOS), default=None, help='Projection profile')
@click.option('--horizon', type=int, default=None, help='Review cycles to project')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file')
def forecast(register, profile, horizon, output):
    """Forward score projection and portfolio pressure"""
    risks = load_register(register)
    history = ScoreHistoryLookup.from_risks(risks)
    result = run_forward_projection(risks, history, profile=profile, horizon=horizon)

    table = Table(title=f"Forward Projection ({result.projection_profile_used.value})")
    table.add_column("Risk", style="cyan")
    table.add_column("TtC", justify="right")
    table.add_column("Mitigated TtC", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("EII", justify="right")
    table.add_column("Signals")
    for f in result.risk_forecasts_by_id.values():
        signals = []
        if f.baseline_forecast.projected_critical:
            signals.append("[red]projected critical[/red]")
        if f.mitigation_insufficient:
            signals.append("[yellow]mitigation insufficient[/yellow]")
        if f.early_warning:
            signals.append("[magenta]early warning[/magenta]")
        table.add_row(
            f.risk_id,
            "—" if f.time_to_critical_baseline is None else str(f.time_to_critical_baseline),
            "—" if f.time_to_critical_mitigated is None else str(f.time_to_critical_mitigated),
            f"{f.forecast_confidence} ({f.confidence_band.value})",
            f"{f.instability.index} {f.instability.level.value}",
            ", ".join(signals),
        )
    console.print(table)

    p = result.forward_pressure
    console.print(f"\n[bold cyan]Forward pressure:[/bold cyan] {p.pressure_class.value}")
    console.print(f"  • Projected critical: {p.projected_critical_count}/{p.total_risks} ({p.pct_projected_critical:.0%})")
    console.print(f"  • Mitigation insufficient: {p.mitigation_insufficient_count}/{p.total_risks}")
    if p.weighted is not None:
        console.print(f"  • Confidence-weighted: {p.weighted.pct_projected_critical:.0%} ({p.weighted.pressure_class.value})")

    titles = {r.id: r.title or r.id for r in risks}
    drivers = calculate_instability_drivers(result.risk_forecasts_by_id.values(), titles)
    if drivers.top_contributors:
        console.print("\n[bold yellow]Top instability contributors:[/bold yellow]")
        for i, c in enumerate(drivers.top_contributors, 1):
            console.print(f"  {i}. {c.title} (EII {c.eii}, {c.level.value})")

    if output:
        _write_output(output, result.model_dump(mode='json'))


@main.command()
@click.argument('register', type=click.Path(exists=True))
def compare(register):
    """Compare forward pressure across projection profiles"""
    risks = load_register(register)
    history = ScoreHistoryLookup.from_risks(risks)
    comparison = compute_scenario_comparison(risks, history)

    table = Table(title="Scenario Comparison")
    table.add_column("Profile", style="cyan")
    table.add_column("Projected critical", justify="right")
    table.add_column("Median TtC", justify="right")
    table.add_column("Pressure", style="magenta")
    for name in SCENARIOS:
        summary = getattr(comparison, name)
        table.add_row(
            name,
            str(summary.projected_critical_count),
            "—" if summary.median_ttc is None else f"{summary.median_ttc:g}",
            summary.forward_pressure.pressure_class.value,
        )
    console.print(table)


@main.command()
@click.argument('register', type=click.Path(exists=True))
@click.option('--top', type=int, default=None, help='Show only the top N risks')
def rank(register, top):
    """Rank risks by composite concern score with alert tags"""
    risks = load_register(register)
    result = compute_decision_metrics(risks, ScoreHistoryLookup.from_risks(risks))

    table = Table(title="Decision Ranking")
    table.add_column("#", justify="right")
    table.add_column("Risk", style="cyan")
    table.add_column("Score", style="magenta", justify="right")
    table.add_column("Alerts")
    rows = result.ranked if top is None else result.ranked[:max(0, top)]
    for r in rows:
        tags = result.metrics_by_id[r.risk_id].alert_tags
        table.add_row(
            str(r.rank),
            r.title or r.risk_id,
            f"{r.composite_score:.1f}",
            ", ".join(t.value for t in tags),
        )
    console.print(table)


# ═══════════════════════════════════════════════════════════════════
# STATUS COMMANDS
# ═══════════════════════════════════════════════════════════════════

@main.command()
def status():
    """Show active configuration"""
    settings = get_settings()

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


# ═══════════════════════════════════════════════════════════════════
# ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

if __name__ == '__main__':
    main()
