"""Rich terminal report for score results."""

from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import (
    STATUS_ADJUST,
    STATUS_FIX,
    STATUS_IDEAL,
    STATUS_UNAVAILABLE,
    ScoreResult,
    ToleranceResult,
    is_available,
)

STATUS_STYLES = {
    STATUS_IDEAL: "green",
    STATUS_ADJUST: "yellow",
    STATUS_FIX: "bold red",
    STATUS_UNAVAILABLE: "dim",
}

STATUS_LABELS = {
    STATUS_IDEAL: "IDEAL",
    STATUS_ADJUST: "ADJUST",
    STATUS_FIX: "FIX",
    STATUS_UNAVAILABLE: "N/A",
}


def status_style(status: str) -> str:
    """Rich style for a metric status."""
    return STATUS_STYLES.get(status, "dim")


def _score_color(score: float) -> str:
    if score >= 75:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def format_value(value, unit: str = "") -> str:
    """Number with unit, or N/A."""
    if not is_available(value):
        return "N/A"
    return f"{value:.2f} {unit}".rstrip()


def format_suggestion(result: ToleranceResult) -> str:
    """Arrow plus suggestion text, e.g. '↑ Increase lufs_integrated by 3.00 LUFS ...'."""
    if result.suggestion is None:
        return ""
    return f"{result.suggestion.arrow} {result.suggestion.text}"


def _category_table(result: ScoreResult) -> Table:
    table = Table(title="Categories", expand=False)
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Metrics", justify="right")
    for cat in result.per_category:
        if cat.available:
            score = Text(f"{cat.value:.1f}", style=_score_color(cat.value))
        else:
            score = Text("N/A (insufficient data)", style="dim")
        members = f"{cat.member_count}/{cat.member_count + cat.excluded_count}"
        table.add_row(cat.name, score, f"{cat.weight:.2f}", members)
    return table


def _metric_table(result: ScoreResult) -> Table:
    table = Table(title="Metrics", expand=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Suggestion")
    for m in result.per_metric:
        target = format_value(m.target, m.unit)
        if is_available(m.tolerance):
            target += f" ±{m.tolerance:g}"
        score = f"{m.score:.1f}" if is_available(m.score) else "N/A"
        table.add_row(
            m.metric,
            format_value(m.value, m.unit),
            target,
            Text(STATUS_LABELS.get(m.status, m.status), style=status_style(m.status)),
            score,
            format_suggestion(m),
        )
    return table


def build_report(result: ScoreResult) -> Panel:
    """Assemble the report panel for a score result."""
    header = Text()
    header.append(f"Score: {result.score_pct:.1f}%", style=f"bold {_score_color(result.score_pct)}")
    header.append(f"  ({result.classification})")
    if result.applied_gates:
        header.append(f"  raw {result.raw_score:.1f}%", style="dim")

    parts = [header, _category_table(result), _metric_table(result)]

    if result.applied_gates:
        gates = Text("Quality gates\n", style="bold")
        for gate in result.applied_gates:
            gates.append(f"⚠ {gate.message}\n", style="red")
        parts.append(gates)

    if result.partial:
        missing = Text("Insufficient data for: ", style="bold yellow")
        missing.append(", ".join(result.excluded_metrics + result.excluded_categories))
        parts.append(missing)

    if result.recommendations:
        recs = Text("Recommendations\n", style="bold")
        for i, rec in enumerate(result.recommendations, 1):
            recs.append(f"{i}. [{rec.priority}] {rec.suggestion.arrow} {rec.suggestion.text}\n")
        parts.append(recs)

    title = f"Mix score: {result.genre}" if result.genre else "Mix score"
    return Panel(Group(*parts), title=title, expand=False)


def render_report(result: ScoreResult, console: Optional[Console] = None) -> None:
    """Print a score report to the terminal."""
    console = console or Console()
    console.print(build_report(result))


def render_unavailable(message: str, console: Optional[Console] = None) -> None:
    """Print the insufficient-data panel in place of a score."""
    console = console or Console()
    body = Text("Score unavailable: insufficient data\n", style="bold yellow")
    body.append(message, style="dim")
    console.print(Panel(body, title="Mix score", expand=False))
