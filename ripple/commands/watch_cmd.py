"""Watch command - keep an impact report current while artifacts change."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.rule import Rule

from ..analysis.impact import ImpactAnalyzer
from ..errors import RippleError
from ..formatter import ReportFormatter
from ..watcher import run_watch_loop


def make_refresh(
    analyzer: ImpactAnalyzer,
    artifact_id: str,
    operation: str,
    console: Console,
    *,
    verbose: bool = False,
):
    """Build the callback that re-analyzes after artifact files change."""
    formatter = ReportFormatter("cli", verbose=verbose)

    def refresh(changed: list[Path]) -> None:
        analyzer.clear_cache()
        timestamp = datetime.now().strftime("%H:%M:%S")
        label = f"{len(changed)} file{'' if len(changed) == 1 else 's'} changed" if changed else "initial"
        console.print(Rule(f"[dim]{timestamp}[/dim] {label}"))
        try:
            report = analyzer.analyze(artifact_id, operation)
        except RippleError as e:
            # Artifacts may be mid-edit; keep watching
            console.print(str(e), style="bold red")
            return
        console.print(formatter.render(report))

    return refresh


def run_impact_watch(
    artifacts_dir: Path,
    artifact_id: str,
    operation: str,
    *,
    verbose: bool = False,
    no_color: bool = False,
) -> int:
    """
    Re-render the impact report for artifact_id whenever artifact files change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(no_color=no_color)
    err = Console(stderr=True, no_color=no_color)

    if not artifacts_dir.is_dir():
        err.print(f"Artifacts directory not found: {artifacts_dir}", style="bold red")
        return 1

    analyzer = ImpactAnalyzer.for_directory(artifacts_dir)
    refresh = make_refresh(analyzer, artifact_id, operation, console, verbose=verbose)

    err.print(f"[bold]Watching[/bold] {artifacts_dir} for {operation} {artifact_id}")
    err.print("[dim]Press Ctrl+C to stop watching[/dim]")
    refresh([])

    run_watch_loop(artifacts_dir, refresh)
    err.print("[bold]Stopped.[/bold]")
    return 0
