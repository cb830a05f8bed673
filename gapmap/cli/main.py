"""
Typer CLI for gapmap.

Commands:
    gapmap analyze SNAPSHOT TARGET        - Gap analysis for one target node
    gapmap path SNAPSHOT FROM TO          - Learning path between two nodes
    gapmap metrics SNAPSHOT TARGET...     - Aggregate gap metrics for several targets

Usage:
    gapmap --help
    gapmap analyze snapshot.json college_concept --level 2
    gapmap path snapshot.json basic_vocabulary college_concept --alternatives
    gapmap metrics snapshot.json middle_concept college_concept --json

Exit codes:
    0 - success
    1 - unknown node or unresolvable current level
    2 - invalid snapshot file
"""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from gapmap.adaptive.gap_analyzer import GapAnalyzer, summarize_gaps
from gapmap.adaptive.path_finder import PathOptions
from gapmap.config import Settings, get_settings
from gapmap.core.errors import GapAnalysisError, SnapshotError
from gapmap.core.models import GapLevel, HeuristicMode, LearningNode
from gapmap.snapshot import load_snapshot

app = typer.Typer(
    help="gapmap CLI: learning gap analysis and path recommendation",
    no_args_is_help=True,
)

console = Console()

LEVEL_STYLES = {
    GapLevel.LOW: "green",
    GapLevel.MEDIUM: "yellow",
    GapLevel.HIGH: "red",
}


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and optionally a file) at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Learning gap analysis over a JSON snapshot of nodes and mastery."""
    settings = get_settings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    configure_logging(settings)


# ========================================
# Helpers
# ========================================


def _build_analyzer(snapshot_path: Path, options: Optional[PathOptions] = None) -> GapAnalyzer:
    settings = get_settings()
    try:
        snapshot = load_snapshot(snapshot_path)
    except SnapshotError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    return GapAnalyzer(
        snapshot.learning_nodes(),
        snapshot.mastery,
        weights=settings.gap_weights(),
        heuristic=settings.heuristic_config(),
        options=options or settings.path_options(),
        thresholds=settings.gap_thresholds(),
    )


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _path_label(path: list[LearningNode]) -> str:
    return " -> ".join(node.id for node in path) or "(empty)"


# ========================================
# Commands
# ========================================


@app.command("analyze")
def analyze(
    snapshot: Path = typer.Argument(..., help="Path to a JSON snapshot"),
    target: str = typer.Argument(..., help="Target node id"),
    level: Optional[float] = typer.Option(
        None, "--level", "-l", help="Current difficulty hint (1-10)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """
    Analyze the gap between the learner and a target node.

    Examples:
        gapmap analyze snapshot.json college_concept
        gapmap analyze snapshot.json college_concept --level 2 --json
    """
    analyzer = _build_analyzer(snapshot)
    try:
        result = analyzer.analyze_gap(target, current_level=level)
    except GapAnalysisError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        _emit_json(result.to_dict())
        return

    style = LEVEL_STYLES[result.gap_level]
    rprint(f"\n[bold cyan]Gap Analysis: {result.target_node.display_name}[/bold cyan]")
    if result.current_node:
        rprint(f"  Current node: {result.current_node.display_name}")
    rprint(f"  Gap score: [{style}]{result.gap_score:.1f} ({result.gap_level.value})[/{style}]")
    rprint(f"  Confidence: {result.confidence:.0f}/100")
    rprint(f"  Estimated time: {result.estimated_time_minutes:.0f} min")
    rprint(f"  Recommended path: {_path_label(result.recommended_path)}\n")

    if result.missing_prerequisites:
        table = Table(title="Missing Prerequisites", show_header=True)
        table.add_column("Node", style="cyan")
        table.add_column("Layer")
        table.add_column("Difficulty", justify="right")
        table.add_column("Mastery", justify="right")
        for node in result.missing_prerequisites:
            table.add_row(
                node.display_name,
                f"{node.layer.value} {node.layer.display_name}",
                str(node.difficulty),
                f"{analyzer.mastery_of(node.id):.0%}",
            )
        console.print(table)

    if result.recommendations:
        table = Table(title="Recommendations", show_header=True)
        table.add_column("Type", style="cyan")
        table.add_column("Node")
        table.add_column("Priority")
        table.add_column("Minutes", justify="right")
        table.add_column("Impact", justify="right")
        for rec in result.recommendations:
            table.add_row(
                rec.type.value,
                rec.node.display_name,
                rec.priority,
                str(rec.estimated_time_minutes),
                f"{rec.impact:.1f}",
            )
        console.print(table)


@app.command("path")
def path(
    snapshot: Path = typer.Argument(..., help="Path to a JSON snapshot"),
    from_id: str = typer.Argument(..., help="Start node id"),
    to_id: str = typer.Argument(..., help="Goal node id"),
    alternatives: Optional[bool] = typer.Option(
        None, "--alternatives/--no-alternatives", "-a", help="Also compute alternative paths"
    ),
    heuristic: Optional[HeuristicMode] = typer.Option(
        None, "--heuristic", help="Heuristic mode (only linear is admissible)"
    ),
    max_length: Optional[int] = typer.Option(
        None, "--max-length", min=1, help="Maximum A* closed-set size"
    ),
    time_limit: Optional[int] = typer.Option(
        None, "--time-limit", min=0, help="Search budget in ms"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """
    Find a learning path between two nodes.

    Options left unset fall back to the GAPMAP_* settings.

    Examples:
        gapmap path snapshot.json basic_vocabulary college_concept
        gapmap path snapshot.json basic_vocabulary college_concept -a --heuristic exponential
    """
    defaults = get_settings().path_options()
    options = replace(
        defaults,
        max_path_length=max_length if max_length is not None else defaults.max_path_length,
        include_alternatives=(
            alternatives if alternatives is not None else defaults.include_alternatives
        ),
        time_limit_ms=time_limit if time_limit is not None else defaults.time_limit_ms,
        heuristic_mode=heuristic or defaults.heuristic_mode,
    )
    analyzer = _build_analyzer(snapshot, options)
    try:
        result = analyzer.path_finder.find_path(from_id, to_id, options)
    except GapAnalysisError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        _emit_json(result.to_dict())
        return

    rprint(f"\n[bold cyan]Learning Path: {from_id} -> {to_id}[/bold cyan]")
    if result.is_fallback:
        rprint("  [yellow]Search did not reach the goal; showing fallback path[/yellow]")
    if not options.heuristic_mode.is_admissible:
        rprint(f"  [dim]{options.heuristic_mode.value} heuristic is greedy; the path may not be cost-optimal[/dim]")
    rprint(f"  Path: {_path_label(result.path)}")
    rprint(f"  Cost: {result.total_cost:.1f}")
    rprint(f"  Time: {result.total_time_minutes:.0f} min")
    rprint(f"  Confidence: {result.confidence:.2f}")
    for i, alt in enumerate(result.alternative_paths, start=1):
        rprint(f"  [dim]Alternative {i}: {_path_label(alt)}[/dim]")


@app.command("metrics")
def metrics(
    snapshot: Path = typer.Argument(..., help="Path to a JSON snapshot"),
    targets: list[str] = typer.Argument(..., help="Target node ids"),
    level: Optional[float] = typer.Option(
        None, "--level", "-l", help="Current difficulty hint (1-10)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """
    Aggregate gap metrics across several targets.

    Examples:
        gapmap metrics snapshot.json middle_concept college_concept
    """
    analyzer = _build_analyzer(snapshot)
    try:
        details = analyzer.analyze_multiple_gaps(targets, current_level=level)
        summary = summarize_gaps(details)
    except GapAnalysisError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        _emit_json({
            "analyses": [d.to_dict() for d in details],
            "metrics": summary.to_dict(),
        })
        return

    table = Table(title=f"Gap Analyses ({len(details)} targets)", show_header=True)
    table.add_column("Target", style="cyan")
    table.add_column("Gap", justify="right")
    table.add_column("Level")
    table.add_column("Priority")
    table.add_column("Minutes", justify="right")
    for d in details:
        style = LEVEL_STYLES[d.gap_level]
        table.add_row(
            d.target_node_id,
            f"{d.gap_score:.1f}",
            f"[{style}]{d.gap_level.value}[/{style}]",
            d.priority.value,
            f"{d.estimated_time_minutes:.0f}",
        )
    console.print(table)

    rprint(f"\n  Total gap score: {summary.total_gap_score:.1f}")
    rprint(f"  Average gap score: {summary.average_gap_score:.1f}")
    distribution = ", ".join(
        f"{level.value}={count}" for level, count in summary.gap_distribution.items()
    )
    rprint(f"  Distribution: {distribution}")
    common = ", ".join(
        f"{gap.node_id} x{gap.gap_count} ({gap.gap_score:.1f})" for gap in summary.most_common_gaps
    )
    rprint(f"  Most common gaps: {common or '(none)'}")


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
