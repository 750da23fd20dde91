"""Run command implementation.

Force-deletes a folder, keeping items that match exclusion patterns.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from forcerm.cli.display import print_run_summary
from forcerm.cli.types import create_engine, get_settings
from forcerm.engine import DeletionEngine, ForcermError
from forcerm.models.progress import ProgressEvent
from forcerm.models.results import DeletionSummary
from forcerm.utils.formatting import console, print_error, print_info


def run_deletion(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="Folder to delete."),
    ],
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Glob pattern for items to keep (repeatable).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    log_dir: Annotated[
        Path | None,
        typer.Option("--log-dir", help="Directory for the per-run log."),
    ] = None,
    no_prepare: Annotated[
        bool,
        typer.Option(
            "--no-prepare",
            help="Skip taking ownership, granting permissions and closing handles.",
        ),
    ] = False,
) -> None:
    """Force-delete a folder and everything in it.

    Locked, read-only and permission-protected items are retried with
    increasingly forceful strategies. Items matching an exclusion
    pattern (and the folders that contain them) are kept.

    Examples:
        forcerm run ./build                  # Delete after confirmation
        forcerm run ./build --dry-run        # Show what would be deleted
        forcerm run ./cache -x "*.log"       # Keep log files
        forcerm run ./tmp --yes              # Skip confirmation
    """
    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    patterns = exclude or []

    settings = get_settings()
    if no_prepare:
        settings = settings.model_copy(update={"prepare": False})
    engine = create_engine(settings)

    # Confirm unless --yes or --dry-run
    if not dry_run and not yes:
        try:
            preview = engine.preview(path, patterns)
        except ForcermError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        confirmed = typer.confirm(
            f"Permanently delete {preview.to_delete} item(s) in {path}?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    try:
        summary = _execute(engine, path, patterns, dry_run, log_dir, quiet)
    except ForcermError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not quiet:
        print_run_summary(summary)

    if not summary.success:
        print_error(f"Deletion failed: {summary.failed_count} item(s) could not be removed.")
        raise typer.Exit(code=1)


def _execute(
    engine: DeletionEngine,
    path: Path,
    patterns: list[str],
    dry_run: bool,
    log_dir: Path | None,
    quiet: bool,
) -> DeletionSummary:
    """Run the engine, rendering a progress bar unless quiet."""
    if quiet:
        return engine.run(path, dry_run=dry_run, exclusion_patterns=patterns, log_dir=log_dir)

    with Progress(
        TextColumn("[header]{task.fields[stage]:<9}[/header]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[muted]{task.description}[/muted]"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=100, stage="")

        def on_progress(event: ProgressEvent) -> None:
            progress.update(
                task,
                completed=event.percent,
                description=event.message,
                stage=event.stage.value,
            )

        return engine.run(
            path,
            dry_run=dry_run,
            exclusion_patterns=patterns,
            on_progress=on_progress,
            log_dir=log_dir,
        )
