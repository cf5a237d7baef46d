"""Impact analysis CLI commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..analysis.impact import ImpactAnalyzer
from ..errors import RippleError
from ..formatter import ReportFormatter
from ..models import is_terminal
from ..store.loader import ArtifactFilter, ArtifactStore

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FORCE_REQUIRED = 2


def _analyzer(artifacts_dir: Path) -> ImpactAnalyzer:
    return ImpactAnalyzer.for_directory(artifacts_dir)


def _emit(console: Console, formatter: ReportFormatter, report) -> None:
    rendered = formatter.render(report)
    if formatter.fmt == "json":
        print(rendered)
    else:
        console.print(rendered)


def run_analyze(
    artifacts_dir: Path,
    artifact_id: str,
    operation: str,
    *,
    output_json: bool = False,
    verbose: bool = False,
    fail_on_impact: bool = False,
    no_color: bool = False,
) -> int:
    console = Console(no_color=no_color)
    err = Console(stderr=True, no_color=no_color)
    try:
        report = _analyzer(artifacts_dir).analyze(artifact_id, operation)
    except RippleError as e:
        err.print(str(e), style="bold red")
        return EXIT_ERROR

    _emit(console, ReportFormatter("json" if output_json else "cli", verbose=verbose), report)
    if fail_on_impact and report.has_impact:
        return EXIT_ERROR
    return EXIT_OK


def run_cancel(
    artifacts_dir: Path,
    artifact_id: str,
    *,
    output_json: bool = False,
    verbose: bool = False,
    no_color: bool = False,
) -> int:
    console = Console(no_color=no_color)
    err = Console(stderr=True, no_color=no_color)
    try:
        report = _analyzer(artifacts_dir).analyze_cancellation(artifact_id)
    except RippleError as e:
        err.print(str(e), style="bold red")
        return EXIT_ERROR

    _emit(console, ReportFormatter("json" if output_json else "cli", verbose=verbose), report)
    return EXIT_OK


def run_delete(
    artifacts_dir: Path,
    artifact_id: str,
    *,
    force: bool = False,
    output_json: bool = False,
    verbose: bool = False,
    no_color: bool = False,
) -> int:
    console = Console(no_color=no_color)
    err = Console(stderr=True, no_color=no_color)
    try:
        report = _analyzer(artifacts_dir).analyze_deletion(artifact_id)
    except RippleError as e:
        err.print(str(e), style="bold red")
        return EXIT_ERROR

    _emit(console, ReportFormatter("json" if output_json else "cli", verbose=verbose), report)
    if report.requires_force and not force:
        err.print(f"Refusing {artifact_id}: dependents would be orphaned (pass --force to acknowledge)", style="yellow")
        return EXIT_FORCE_REQUIRED
    return EXIT_OK


def run_artifact_list(
    artifacts_dir: Path,
    *,
    kind: str | None = None,
    prefix: str | None = None,
    open_only: bool = False,
    no_color: bool = False,
) -> int:
    console = Console(no_color=no_color)
    err = Console(stderr=True, no_color=no_color)
    store = ArtifactStore(artifacts_dir)
    artifact_filter = ArtifactFilter(kind=kind, prefix=prefix, terminal=False if open_only else None)
    try:
        records = store.find_artifacts(artifact_filter)
    except RippleError as e:
        err.print(str(e), style="bold red")
        return EXIT_ERROR

    table = Table(title="Artifacts")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("kind", style="magenta")
    table.add_column("title")
    table.add_column("status")
    table.add_column("blocked_by", style="dim")

    for r in records:
        status = r.artifact.status
        table.add_row(
            r.id,
            r.artifact.kind,
            escape(r.artifact.title or "Untitled"),
            f"[green]{status}[/green]" if is_terminal(r.artifact) else status,
            ", ".join(r.artifact.blocked_by),
        )

    console.print(table)
    return EXIT_OK
