"""Rendering of impact reports for the terminal (rich) and as JSON."""

from __future__ import annotations

import io
import json
from typing import Literal, Union

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.text import Text

from .analysis.reports import (
    CancellationImpactReport,
    DeletionImpactReport,
    ImpactOperation,
    ImpactReport,
    ImpactType,
)
from .models import Artifact

OutputFormat = Literal["cli", "json"]

AnyReport = Union[ImpactReport, CancellationImpactReport, DeletionImpactReport]

SYM_ERROR = "✗"
SYM_WARNING = "⚠"
SYM_SUCCESS = "✓"
SYM_INFO = "ℹ"
SYM_BULLET = "•"

SAFE_TO_PROCEED = "Safe to proceed without --force flag"

# Generic report sections: (impact type, heading, symbol, style)
_GENERIC_SECTIONS = [
    (ImpactType.BLOCKS_PARENT_COMPLETION, "Blocks Parent Completion", SYM_WARNING, "yellow"),
    (ImpactType.BREAKS_DEPENDENCY, "Breaks Dependencies", SYM_ERROR, "red"),
    (ImpactType.ORPHANS_CHILDREN, "Orphans Children", SYM_WARNING, "yellow"),
]


def _title(artifact: Artifact) -> str:
    return artifact.title or "Untitled"


def _item(artifact_id: str, artifact: Artifact, tag: str = "") -> str:
    line = f"  {SYM_BULLET} {escape(artifact_id)} - {escape(_title(artifact))}"
    return f"{line} {tag}" if tag else line


def _operation_name(operation: ImpactOperation) -> str:
    if operation is ImpactOperation.REMOVE_DEPENDENCY:
        return "Remove Dependency"
    return operation.value.capitalize()


class ReportFormatter:
    """
    Formats impact reports.

    With fmt="cli", render() returns a rich renderable; with fmt="json" it
    returns the report's to_dict() as an indented JSON string.
    """

    def __init__(self, fmt: OutputFormat = "cli", *, verbose: bool = False):
        self.fmt = fmt
        self.verbose = verbose

    def render(self, report: AnyReport) -> RenderableType:
        if self.fmt == "json":
            return json.dumps(report.to_dict(), indent=2)
        if isinstance(report, CancellationImpactReport):
            lines = self._cancellation_lines(report)
        elif isinstance(report, DeletionImpactReport):
            lines = self._deletion_lines(report)
        else:
            lines = self._generic_lines(report)
        return Text.from_markup("\n".join(lines))

    def _detail(self, lines: list[str], message: str) -> None:
        if self.verbose:
            lines.append(f"    [dim]{escape(message)}[/dim]")

    @staticmethod
    def _header(operation: str, artifact_id: str) -> list[str]:
        return [f"[bold cyan]Impact Analysis:[/bold cyan] {operation} {escape(artifact_id)}", ""]

    def _generic_lines(self, report: ImpactReport) -> list[str]:
        lines = self._header(_operation_name(report.operation), report.artifact_id)

        by_type = {t: [a for a in report.impacted_artifacts if a.impact_type is t] for t in ImpactType}
        for impact_type, heading, symbol, style in _GENERIC_SECTIONS:
            items = by_type[impact_type]
            if not items:
                continue
            lines.append(f"[{style}]{symbol} {heading} ({len(items)})[/{style}]")
            for impacted in items:
                lines.append(_item(impacted.id, impacted.artifact))
                self._detail(lines, impacted.reason)
            lines.append("")

        total = len(report.impacted_artifacts)
        lines.append(f"[bold]Summary:[/bold] {total} artifact{'' if total == 1 else 's'} affected")

        if not report.has_impact:
            lines.append(f"[green]{SAFE_TO_PROCEED}[/green]")
        elif by_type[ImpactType.BREAKS_DEPENDENCY]:
            lines.append(f"[red]{SYM_ERROR} --force flag may be required[/red]")
        return lines

    def _cancellation_lines(self, report: CancellationImpactReport) -> list[str]:
        lines = self._header("Cancel", report.artifact_id)

        if report.parent_completion_affected:
            lines.append(f"[green]{SYM_SUCCESS} Parent Completion[/green]")
            for parent in report.parent_completion_affected:
                lines.append(_item(parent.id, parent.artifact))
                self._detail(lines, parent.message)
            lines.append("")

        if report.dependents_unblocked:
            lines.append(f"[yellow]{SYM_WARNING} Dependents Unblocked ({len(report.dependents_unblocked)})[/yellow]")
            for dependent in report.dependents_unblocked:
                lines.append(_item(dependent.id, dependent.artifact))
                self._detail(lines, dependent.message)
            lines.append("")

        if report.children:
            lines.append(f"[blue]{SYM_INFO} Children ({len(report.children)})[/blue]")
            for child in report.children:
                lines.append(_item(child.id, child.artifact))
            self._detail(lines, "Will remain in current state")
            lines.append("")

        lines.append(f"[bold]Summary:[/bold] {escape(report.summary)}")
        if not report.has_impact:
            lines.append(f"[green]{SAFE_TO_PROCEED}[/green]")
        return lines

    def _deletion_lines(self, report: DeletionImpactReport) -> list[str]:
        lines = self._header("Delete", report.artifact_id)

        if report.orphaned_dependents:
            any_full = any(d.fully_orphaned for d in report.orphaned_dependents)
            symbol, style = (SYM_ERROR, "red") if any_full else (SYM_WARNING, "yellow")
            lines.append(f"[{style}]{symbol} Orphaned Dependents ({len(report.orphaned_dependents)})[/{style}]")
            for dependent in report.orphaned_dependents:
                if dependent.fully_orphaned:
                    tag = "[red]\\[FULLY ORPHANED][/red]"
                else:
                    tag = "[yellow]\\[PARTIAL][/yellow]"
                lines.append(_item(dependent.id, dependent.artifact, tag))
                self._detail(lines, dependent.message)
            lines.append("")

        if report.broken_parent is not None:
            lines.append(f"[red]{SYM_ERROR} Broken Parent[/red]")
            lines.append(_item(report.broken_parent.id, report.broken_parent.artifact))
            self._detail(lines, report.broken_parent.message)
            lines.append("")

        if report.affected_siblings:
            lines.append(f"[blue]{SYM_INFO} Affected Siblings ({len(report.affected_siblings)})[/blue]")
            for sibling in report.affected_siblings:
                if sibling.can_help_complete:
                    tag = "[green]\\[CAN HELP COMPLETE][/green]"
                else:
                    tag = "[yellow]\\[BLOCKING][/yellow]"
                lines.append(_item(sibling.id, sibling.artifact, tag))
                self._detail(lines, sibling.message)
            lines.append("")

        if report.orphaned_children:
            lines.append(f"[yellow]{SYM_WARNING} Orphaned Children ({len(report.orphaned_children)})[/yellow]")
            for child in report.orphaned_children:
                lines.append(_item(child.id, child.artifact))
            lines.append("")

        lines.append(f"[bold]Summary:[/bold] {escape(report.summary)}")
        if report.requires_force:
            lines.append(f"[red]{SYM_ERROR} --force flag required due to dependent artifacts[/red]")
        elif not report.has_impact:
            lines.append(f"[green]{SAFE_TO_PROCEED}[/green]")
        return lines


def render_text(report: AnyReport, *, verbose: bool = False, width: int = 120) -> str:
    """Render a report to plain, uncoloured text."""
    buffer = io.StringIO()
    console = Console(file=buffer, no_color=True, highlight=False, width=width)
    console.print(ReportFormatter("cli", verbose=verbose).render(report))
    return buffer.getvalue()
