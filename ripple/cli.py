"""CLI entrypoint for ripple."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .models import ARTIFACT_KINDS

ARTIFACTS_DIRNAME = Path(".ripple") / "artifacts"

OPERATIONS = ["cancel", "delete", "remove_dependency"]


def _auto_detect_artifacts(start: Path) -> Path | None:
    """Find a .ripple/artifacts folder by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / ARTIFACTS_DIRNAME
        if candidate.is_dir():
            return candidate
    return None


def _configure_logging(verbose: bool) -> None:
    """Route ripple's loggers to stderr through rich."""
    pkg_logger = logging.getLogger("ripple")
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(RichHandler(console=Console(stderr=True), show_time=False, show_path=False))
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(__version__, prog_name="ripple")
@click.option(
    "--artifacts",
    "-a",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    envvar="RIPPLE_ARTIFACTS",
    default=None,
    help="Path to the artifacts directory (defaults to auto-detected .ripple/artifacts)",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--verbose", "-V", is_flag=True, help="Show debug logging and per-artifact reasons")
@click.pass_context
def cli(ctx: click.Context, artifacts: Path | None, no_color: bool, verbose: bool) -> None:
    """ripple - see what breaks before you cancel or delete an artifact.

    Analyzes the hierarchy (A -> A.1 -> A.1.2) and blocked_by dependencies
    of your work artifacts. Nothing is modified.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if artifacts is None:
        detected = _auto_detect_artifacts(Path.cwd())
        if detected is None:
            raise click.ClickException(
                "Artifacts directory not found. Pass --artifacts /path/to/artifacts or run from inside the repo."
            )
        artifacts = detected

    if not artifacts.exists() or not artifacts.is_dir():
        raise click.BadParameter(f"Directory '{artifacts}' does not exist.", param_hint="--artifacts / -a")

    ctx.obj["artifacts"] = artifacts.resolve()
    ctx.obj["no_color"] = no_color
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("artifact_id")
@click.option(
    "--operation",
    "-o",
    type=click.Choice(OPERATIONS),
    required=True,
    help="Operation to analyze",
)
@click.option("--json", "output_json", is_flag=True, help="Output report as JSON")
@click.option(
    "--fail-on-impact",
    is_flag=True,
    help="Exit with status 1 if any artifact is impacted",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    artifact_id: str,
    operation: str,
    output_json: bool,
    fail_on_impact: bool,
) -> None:
    """Classify artifacts affected by an operation.

    Examples:

        ripple analyze A.1.2 --operation cancel

        ripple analyze C.1.3 -o remove_dependency --json
    """
    from .commands.impact_cmd import run_analyze

    exit_code = run_analyze(
        ctx.obj["artifacts"],
        artifact_id,
        operation,
        output_json=output_json,
        verbose=ctx.obj["verbose"],
        fail_on_impact=fail_on_impact,
        no_color=ctx.obj["no_color"],
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("artifact_id")
@click.option("--json", "output_json", is_flag=True, help="Output report as JSON")
@click.pass_context
def cancel(ctx: click.Context, artifact_id: str, output_json: bool) -> None:
    """Show what cancelling an artifact would unblock or complete.

    Cancelled artifacts count as done for their parent, and dependents lose
    this artifact as a blocker. Children keep their state.
    """
    from .commands.impact_cmd import run_cancel

    exit_code = run_cancel(
        ctx.obj["artifacts"],
        artifact_id,
        output_json=output_json,
        verbose=ctx.obj["verbose"],
        no_color=ctx.obj["no_color"],
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("artifact_id")
@click.option("--json", "output_json", is_flag=True, help="Output report as JSON")
@click.option(
    "--force",
    is_flag=True,
    help="Acknowledge orphaned dependents (exit 0 instead of 2)",
)
@click.pass_context
def delete(ctx: click.Context, artifact_id: str, output_json: bool, force: bool) -> None:
    """Show what deleting an artifact would orphan or break.

    Exits with status 2 when dependents would be orphaned and --force was
    not given, so hooks can gate on it. No files are deleted.
    """
    from .commands.impact_cmd import run_delete

    exit_code = run_delete(
        ctx.obj["artifacts"],
        artifact_id,
        force=force,
        output_json=output_json,
        verbose=ctx.obj["verbose"],
        no_color=ctx.obj["no_color"],
    )
    sys.exit(exit_code)


@cli.command("artifacts")
@click.option(
    "--kind",
    type=click.Choice(list(ARTIFACT_KINDS)),
    default=None,
    help="Only list artifacts of this kind",
)
@click.option("--prefix", type=str, default=None, metavar="ID", help="Only list ID and its descendants")
@click.option("--open", "open_only", is_flag=True, help="Hide completed and cancelled artifacts")
@click.pass_context
def artifacts_list(ctx: click.Context, kind: str | None, prefix: str | None, open_only: bool) -> None:
    """List loaded artifacts with their status and blockers."""
    from .commands.impact_cmd import run_artifact_list

    exit_code = run_artifact_list(
        ctx.obj["artifacts"],
        kind=kind,
        prefix=prefix,
        open_only=open_only,
        no_color=ctx.obj["no_color"],
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("artifact_id")
@click.option(
    "--operation",
    "-o",
    type=click.Choice(OPERATIONS),
    required=True,
    help="Operation to analyze",
)
@click.pass_context
def watch(ctx: click.Context, artifact_id: str, operation: str) -> None:
    """Re-run impact analysis whenever artifact files change.

    Runs until interrupted (Ctrl+C).

    Examples:

        ripple watch A.1 --operation delete
    """
    from .commands.watch_cmd import run_impact_watch

    exit_code = run_impact_watch(
        ctx.obj["artifacts"],
        artifact_id,
        operation,
        verbose=ctx.obj["verbose"],
        no_color=ctx.obj["no_color"],
    )
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
