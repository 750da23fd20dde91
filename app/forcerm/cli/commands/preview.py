"""Preview command implementation.

Shows what a run would delete without touching anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from forcerm.cli.display import create_preview_table, print_preview_summary
from forcerm.cli.types import OutputFormat, create_engine
from forcerm.engine import ForcermError
from forcerm.utils.formatting import console, print_error


def preview_deletion(
    path: Annotated[
        Path,
        typer.Argument(help="Folder to inspect."),
    ],
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Glob pattern for items to keep (repeatable).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Preview which items a run would delete and which it would keep."""
    engine = create_engine()
    try:
        preview = engine.preview(path, exclude or [])
    except ForcermError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        data = {
            "total": preview.total,
            "toDelete": preview.to_delete,
            "excluded": preview.excluded,
            "sampleIncluded": list(preview.sample_included),
            "sampleExcluded": list(preview.sample_excluded),
        }
        console.print_json(json.dumps(data))
        return

    console.print(create_preview_table(preview))
    print_preview_summary(preview)
