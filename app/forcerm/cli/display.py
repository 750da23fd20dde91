"""Shared Rich display functions for previews, folder info and run summaries."""

from rich.table import Table

from forcerm.models.results import DeletionSummary, FolderInfo, PreviewResult
from forcerm.utils.formatting import console, format_size, print_success


def create_preview_table(preview: PreviewResult) -> Table:
    """Create a Rich table listing sample paths of a preview.

    Included paths are styled as removed, excluded paths as kept.

    Args:
        preview: Preview to display.

    Returns:
        Rich Table configured for preview display.
    """
    table = Table(
        title="Deletion Preview",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Path")

    for path in preview.sample_included:
        table.add_row("[removed]delete[/removed]", f"[removed]{path}[/removed]")
    for path in preview.sample_excluded:
        table.add_row("[kept]keep[/kept]", f"[kept]{path}[/kept]")

    return table


def print_preview_summary(preview: PreviewResult) -> None:
    """Print preview counts and note truncated samples."""
    console.print(
        f"\nSummary: [removed]{preview.to_delete} to delete[/removed], "
        f"[kept]{preview.excluded} excluded[/kept] "
        f"[muted]({preview.total} items scanned)[/muted]"
    )
    shown = len(preview.sample_included) + len(preview.sample_excluded)
    if shown < preview.to_delete + preview.excluded:
        console.print(f"[muted](showing {shown} sample paths)[/muted]")


def create_info_table(path: str, info: FolderInfo) -> Table:
    """Create a Rich table with the size and item counts of a folder.

    Args:
        path: Folder the info was computed for.
        info: Computed folder info.

    Returns:
        Rich Table configured for folder info display.
    """
    table = Table(
        title=f"Folder Info: {path}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Property", style="header")
    table.add_column("Value", justify="right")

    table.add_row("Size", format_size(info.size))
    table.add_row("Files", str(info.file_count))
    table.add_row("Folders", str(info.folder_count))
    if info.limited:
        table.add_row("Limited", "[warning]yes (counts are lower bounds)[/warning]")

    return table


def create_summary_table(summary: DeletionSummary) -> Table:
    """Create a Rich table describing the outcome of a run.

    Args:
        summary: Summary returned by the engine.

    Returns:
        Rich Table configured for run summary display.
    """
    title = "Dry Run Summary" if summary.dry_run else "Deletion Summary"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Metric", style="header")
    table.add_column("Value", justify="right")

    if summary.dry_run:
        directories = summary.would_delete - summary.would_delete_files
        table.add_row(
            "Would delete",
            f"{summary.would_delete} items "
            f"({summary.would_delete_files} files, {directories} directories)",
        )
    else:
        table.add_row("Files deleted", f"[success]{summary.deleted_count}[/success]")
        failed_style = "error" if summary.failed_count else "muted"
        table.add_row("Files failed", f"[{failed_style}]{summary.failed_count}[/{failed_style}]")
        table.add_row("Directories removed", str(summary.directories_removed))
        table.add_row("Root removed", "yes" if summary.root_removed else "[warning]no[/warning]")
    table.add_row("Excluded", f"[kept]{summary.excluded_count}[/kept]")
    table.add_row("Elapsed", f"{summary.elapsed_seconds:.2f}s")
    table.add_row("Warnings", str(summary.warning_count))
    table.add_row("Errors", str(summary.error_count))

    return table


def print_run_summary(summary: DeletionSummary) -> None:
    """Print the summary table followed by failure samples and the log location.

    Args:
        summary: Summary returned by the engine.
    """
    console.print(create_summary_table(summary))

    if summary.failed_paths:
        console.print("\n[error]Could not delete:[/error]")
        for path in summary.failed_paths:
            console.print(f"  [muted]{path}[/muted]")
        remaining = summary.failed_count - len(summary.failed_paths)
        if remaining > 0:
            console.print(f"  [muted]... and {remaining} more[/muted]")

    if summary.sample_errors and not summary.failed_paths:
        console.print("\n[error]Errors:[/error]")
        for message in summary.sample_errors:
            console.print(f"  [muted]{message}[/muted]")

    if summary.log_path:
        console.print(f"\n[muted]Full log: {summary.log_path}[/muted]")

    if summary.success and not summary.dry_run:
        print_success("Deletion completed.")
