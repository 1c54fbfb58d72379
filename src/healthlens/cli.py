"""CLI interface using Typer."""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from healthlens.config import get_settings, reload_settings
from healthlens.config.settings import Settings
from healthlens.engine import analyze_meals, analyze_water, analyze_weight
from healthlens.goals.source import AutomaticGoal, ManualGoal, goal_source_kind
from healthlens.goals.water import ExternalSignals
from healthlens.insights.composer import compose
from healthlens.io.loader import ProfileFile, load_meal_log, load_profile, load_value_log
from healthlens.profiles.body_calc import Profile
from healthlens.tracking.models import UNKNOWN_ETA_DAYS, Severity

app = typer.Typer(
    help="Adaptive analytics for weight, hydration and nutrition logs",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or create the settings file")
app.add_typer(config_app, name="config")

SEVERITY_STYLES = {
    Severity.SUCCESS: "green",
    Severity.INFO: "blue",
    Severity.WARNING: "yellow",
    Severity.CRITICAL: "bold red",
}


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def to_jsonable(obj: Any) -> Any:
    """Convert analysis results (dataclasses, enums, dates) to plain JSON types."""
    if isinstance(obj, (ManualGoal, AutomaticGoal)):
        data = {"kind": goal_source_kind(obj), "value": obj.value}
        if isinstance(obj, AutomaticGoal):
            data["rationale"] = to_jsonable(obj.rationale)
        return data
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def fail(command: str, message: str, json_output: bool) -> None:
    """Report an error and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _parse_day(date_str: Optional[str]) -> date:
    return date.fromisoformat(date_str) if date_str else date.today()


def _read_profile(profile_path: Optional[Path], today: date) -> ProfileFile:
    if profile_path is None:
        return ProfileFile(profile=Profile())
    return load_profile(profile_path, today=today)


def _eta(days: int) -> str:
    return "unknown" if days == UNKNOWN_ETA_DAYS else f"{days} days"


def _use_json(json_output: bool, settings: Settings) -> bool:
    return json_output or settings.defaults.output_format == "json"


# ============================================================================
# Main callback
# ============================================================================


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to config.yaml (default: ~/.healthlens/config.yaml)"
    ),
) -> None:
    """Analyze weight, water and meal logs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if config_path is not None:
        try:
            reload_settings(config_path)
        except ValueError as e:
            console.print(f"[red]Invalid config: {escape(str(e))}[/red]")
            raise typer.Exit(1)


# ============================================================================
# Metric commands
# ============================================================================


@app.command()
def weight(
    log_path: Path = typer.Argument(..., help="Weight log (CSV or JSON: date,value in kg)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile YAML file"),
    goal_kg: Optional[float] = typer.Option(None, "--goal", help="Manual target weight (kg)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Analyze a weight log: statistics, trend, goal, prediction and alerts."""
    try:
        settings = get_settings()
        json_output = _use_json(json_output, settings)
        logs = load_value_log(log_path)
        profile_file = _read_profile(profile_path, date.today())
        manual = goal_kg if goal_kg is not None else profile_file.manual_weight_kg
        bundle = analyze_weight(
            logs, profile_file.profile, manual_goal_kg=manual, settings=settings
        )
    except (ValueError, FileNotFoundError) as e:
        fail("weight", str(e), json_output)
        return

    if json_output:
        output_json({
            "success": True,
            "command": "weight",
            "data": to_jsonable({
                "statistics": bundle.statistics,
                "trend": bundle.trend,
                "goal": bundle.goal,
                "prediction": bundle.prediction,
                "alerts": bundle.alerts,
            }),
            "human_summary": (
                f"{bundle.trend.direction.value} trend, "
                f"{bundle.trend.slope_per_week:+.2f} kg/week, "
                f"goal {bundle.goal.target_kg:.1f} kg"
            ),
        })
        return

    stats, trend, goal, prediction = (
        bundle.statistics, bundle.trend, bundle.goal, bundle.prediction
    )

    table = Table(title="Weight analysis")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Current", f"{goal.current_kg:.1f} kg")
    table.add_row("Goal", f"{goal.target_kg:.1f} kg ({goal_source_kind(goal.source)})")
    if goal.bmi is not None:
        table.add_row("BMI", f"{goal.bmi} ({goal.health_status.value})")
    table.add_row("7-day mean", f"{stats.mean_7d:.1f} kg")
    table.add_row("30-day mean", f"{stats.mean_30d:.1f} kg")
    table.add_row("Volatility", f"{stats.volatility:.2f} kg")
    table.add_row("Regularity", f"{stats.regularity_pct}%")
    table.add_row(
        "Trend",
        f"{trend.direction.value}, {trend.velocity.value} ({trend.slope_per_week:+.2f} kg/week)",
    )
    table.add_row("Consistency", trend.consistency.value)
    table.add_row("Confidence", f"{trend.confidence}%")
    table.add_row("In 30 days", f"{prediction.horizon_30:.1f} kg")
    table.add_row("In 90 days", f"{prediction.horizon_90:.1f} kg")
    table.add_row("Time to goal", _eta(prediction.eta_to_goal_days))
    console.print(table)

    for alert in bundle.alerts:
        style = SEVERITY_STYLES[alert.severity]
        body = alert.message if alert.action is None else f"{alert.message}\n[dim]{alert.action}[/dim]"
        console.print(Panel(body, title=f"{alert.icon} {alert.title}", border_style=style))


@app.command()
def water(
    log_path: Path = typer.Argument(..., help="Water log (CSV or JSON: date,value in mL)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile YAML file"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Today (YYYY-MM-DD, default: today)"),
    cups: Optional[int] = typer.Option(None, "--cups", help="Manual goal in cups"),
    cup_ml: Optional[int] = typer.Option(None, "--cup-ml", help="Cup size in mL"),
    temperature: Optional[float] = typer.Option(None, "--temperature", "-t", help="Ambient temperature (°C)"),
    hour: Optional[int] = typer.Option(None, "--hour", min=0, max=23, help="Local hour for tips (default: now)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Analyze water intake: goal, today's progress, weekly summary and tips."""
    try:
        settings = get_settings()
        json_output = _use_json(json_output, settings)
        today = _parse_day(date_str)
        intakes = load_value_log(log_path)
        profile_file = _read_profile(profile_path, today)
        signals = profile_file.signals
        if temperature is not None:
            signals = ExternalSignals(ambient_temperature_c=temperature)
        bundle = analyze_water(
            intakes,
            profile_file.profile,
            today,
            signals=signals,
            manual_cups=cups if cups is not None else profile_file.manual_water_cups,
            cup_ml=cup_ml if cup_ml is not None else profile_file.cup_ml,
            hour=hour if hour is not None else datetime.now().hour,
            settings=settings,
        )
    except (ValueError, FileNotFoundError) as e:
        fail("water", str(e), json_output)
        return

    goal, progress, week = bundle.goal, bundle.today, bundle.week

    if json_output:
        output_json({
            "success": True,
            "command": "water",
            "data": to_jsonable({
                "goal": goal,
                "today": progress,
                "week": week,
                "statistics": bundle.statistics,
                "trend": bundle.trend,
                "tips": bundle.tips,
            }),
            "human_summary": (
                f"{progress.consumed_ml:.0f} of {goal.target_ml} mL today ({progress.percent}%)"
            ),
        })
        return

    table = Table(title=f"Hydration on {today}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Goal", f"{goal.target_ml} mL ({goal.cups} × {goal.cup_ml} mL, {goal_source_kind(goal.source)})")
    table.add_row("Consumed", f"{progress.consumed_ml:.0f} mL ({progress.consumed_cups} cups)")
    table.add_row("Progress", f"{progress.percent}% ({progress.status.value})")
    table.add_row("Remaining", f"{progress.remaining_ml:.0f} mL ({progress.remaining_cups} cups)")
    table.add_row("Weekly mean", f"{week.mean_ml} mL")
    table.add_row("Days goal met", f"{week.days_met}")
    table.add_row("Weekly trend", week.trend.value)
    console.print(table)

    for tip in bundle.tips:
        console.print(f"{tip.icon} [bold]{tip.title}[/bold] {tip.message}")


@app.command()
def meals(
    log_path: Path = typer.Argument(..., help="Meal log (CSV or JSON: date,calories,protein_g,carbs_g,fat_g)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile YAML file"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Today (YYYY-MM-DD, default: today)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Analyze meals: nutrition goals, today's progress, weekly summary and tips."""
    try:
        settings = get_settings()
        json_output = _use_json(json_output, settings)
        today = _parse_day(date_str)
        logs = load_meal_log(log_path)
        profile_file = _read_profile(profile_path, today)
        bundle = analyze_meals(
            logs, profile_file.profile, today, manual=profile_file.manual_macros, settings=settings
        )
    except (ValueError, FileNotFoundError) as e:
        fail("meals", str(e), json_output)
        return

    goals, progress, week = bundle.goals, bundle.today, bundle.week

    if json_output:
        output_json({
            "success": True,
            "command": "meals",
            "data": to_jsonable({
                "goals": goals,
                "today": progress,
                "today_totals": bundle.today_totals,
                "week": week,
                "statistics": bundle.statistics,
                "trend": bundle.trend,
                "tips": bundle.tips,
            }),
            "human_summary": f"{progress.calories_pct}% of {goals.calories} kcal today",
        })
        return

    totals = bundle.today_totals
    table = Table(title=f"Nutrition on {today} ({goal_source_kind(goals.source)} goals)")
    table.add_column("Nutrient", style="cyan")
    table.add_column("Eaten", justify="right")
    table.add_column("Goal", justify="right")
    table.add_column("%", justify="right")
    rows = [
        ("Calories", totals.calories if totals else 0, goals.calories, progress.calories_pct, "kcal"),
        ("Protein", totals.protein_g if totals else 0, goals.protein_g, progress.protein_pct, "g"),
        ("Carbs", totals.carbs_g if totals else 0, goals.carbs_g, progress.carbs_pct, "g"),
        ("Fat", totals.fat_g if totals else 0, goals.fat_g, progress.fat_pct, "g"),
    ]
    for name, eaten, target, pct, unit in rows:
        table.add_row(name, f"{eaten:.0f} {unit}", f"{target} {unit}", f"{pct}%")
    console.print(table)
    console.print(
        f"Status: [bold]{progress.status.value}[/bold]  "
        f"Week: {week.days_on_target} days on target, mean {week.mean_calories} kcal, "
        f"trend {week.trend.value}"
    )

    for tip in bundle.tips:
        console.print(f"{tip.icon} [bold]{tip.title}[/bold] {tip.message}")


@app.command()
def dashboard(
    weight_log: Path = typer.Option(..., "--weight-log", help="Weight log file"),
    water_log: Path = typer.Option(..., "--water-log", help="Water log file"),
    meals_log: Path = typer.Option(..., "--meals-log", help="Meal log file"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile YAML file"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Today (YYYY-MM-DD, default: today)"),
    hour: Optional[int] = typer.Option(None, "--hour", min=0, max=23, help="Local hour (default: now)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Combine all three metrics into insights and a wellness score."""
    try:
        settings = get_settings()
        json_output = _use_json(json_output, settings)
        today = _parse_day(date_str)
        hour = hour if hour is not None else datetime.now().hour
        profile_file = _read_profile(profile_path, today)
        profile = profile_file.profile

        weight_bundle = analyze_weight(
            load_value_log(weight_log),
            profile,
            manual_goal_kg=profile_file.manual_weight_kg,
            settings=settings,
        )
        water_bundle = analyze_water(
            load_value_log(water_log),
            profile,
            today,
            signals=profile_file.signals,
            manual_cups=profile_file.manual_water_cups,
            cup_ml=profile_file.cup_ml,
            hour=hour,
            settings=settings,
        )
        meal_bundle = analyze_meals(
            load_meal_log(meals_log),
            profile,
            today,
            manual=profile_file.manual_macros,
            settings=settings,
        )
    except (ValueError, FileNotFoundError) as e:
        fail("dashboard", str(e), json_output)
        return

    report = compose(weight_bundle, water_bundle, meal_bundle, hour=hour)

    if json_output:
        output_json({
            "success": True,
            "command": "dashboard",
            "data": to_jsonable(report),
            "human_summary": (
                f"Wellness score {report.wellness_score} ({report.wellness_band.value}), "
                f"{len(report.insights)} insights"
            ),
        })
        return

    table = Table(title="Wellness")
    table.add_column("Domain", style="cyan")
    table.add_column("Score", justify="right")
    for domain, score in report.domain_scores.items():
        table.add_row(domain.capitalize(), str(score))
    table.add_row("[bold]Overall[/bold]", f"[bold]{report.wellness_score}[/bold]")
    console.print(table)
    console.print(f"Band: [bold]{report.wellness_band.value.replace('_', ' ')}[/bold]")

    if not report.insights:
        console.print("[dim]No insights for today[/dim]")
    for insight in report.insights:
        lines = [insight.description, *insight.metrics]
        if insight.action:
            lines.append(f"[dim]{insight.action}[/dim]")
        console.print(Panel(
            "\n".join(lines),
            title=f"{insight.icon} {insight.title}",
            subtitle=insight.priority.value,
        ))


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the effective settings."""
    try:
        settings = get_settings()
    except ValueError as e:
        fail("config show", f"Invalid config: {e}", json_output)
        return
    if json_output:
        output_json({"success": True, "command": "config show", "data": settings.to_dict()})
        return

    for section, values in settings.to_dict().items():
        table = Table(title=section)
        table.add_column("Key", style="cyan")
        table.add_column("Value", justify="right")
        for key, value in values.items():
            if isinstance(value, dict):
                value = ", ".join(f"{k}={v:g}" for k, v in value.items())
            table.add_row(key, str(value))
        console.print(table)


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config.yaml with default settings."""
    target = path or Path.home() / ".healthlens" / "config.yaml"
    if target.exists() and not force:
        console.print(f"[yellow]Config already exists at {target}. Use --force to overwrite.[/yellow]")
        raise typer.Exit(1)

    Settings().save(target)
    console.print(f"[green]Wrote default settings to {target}[/green]")


if __name__ == "__main__":
    app()
