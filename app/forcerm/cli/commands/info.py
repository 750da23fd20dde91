"""Info command implementation.

Reports the size and item counts of a folder.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from forcerm.cli.display import create_info_table
from forcerm.cli.types import OutputFormat, create_engine
from forcerm.engine import ForcermError
from forcerm.utils.formatting import console, print_error


def folder_info(
    path: Annotated[
        Path,
        typer.Argument(help="Folder to measure."),
    ],
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
    """Show total size, file count and folder count of a folder.

    Very large or deep trees are measured up to a cap; the output says
    so when counts are lower bounds.
    """
    engine = create_engine()
    try:
        info = engine.get_info(path)
    except ForcermError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        data = {
            "size": info.size,
            "fileCount": info.file_count,
            "folderCount": info.folder_count,
            "limited": info.limited,
        }
        console.print_json(json.dumps(data))
        return

    console.print(create_info_table(str(path), info))
