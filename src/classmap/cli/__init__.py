"""CLI module for classmap.

Commands to generate, inspect and query static tables.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from classmap.cli.commands import run_dump, run_find, run_show
from classmap.config import DEFAULT_TABLE_PATH
from classmap.utils.logging import set_verbose

app = typer.Typer(
    name="classmap",
    help="classmap - lazy symbol resolution from static tables",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
) -> None:
    """Generate, inspect and query static tables."""
    set_verbose(verbose)


@app.command()
def dump(
    src: List[Path] = typer.Argument(..., help="Source roots to scan"),
    output: Path = typer.Option(
        DEFAULT_TABLE_PATH, "--output", "-o", help="Table file to write"
    ),
    vendor_dir: Optional[Path] = typer.Option(
        None, "--vendor-dir", help="Base for relative paths in the table"
    ),
    file: Optional[List[Path]] = typer.Option(
        None, "--file", "-f", help="Always-load file (repeatable, kept in order)"
    ),
    authoritative: bool = typer.Option(
        False, "--authoritative", help="Resolve from the class map only"
    ),
    min_python: Optional[str] = typer.Option(
        None, "--min-python", help="Minimum interpreter version, e.g. 3.10"
    ),
) -> None:
    """Scan source roots and write a static table."""
    run_dump(
        src_dirs=src,
        output=output,
        vendor_dir=vendor_dir,
        files=file,
        authoritative=authoritative,
        min_python=min_python,
        console=console,
    )


@app.command()
def find(
    symbol: str = typer.Argument(..., help="Dotted symbol, e.g. acme.report"),
    table: Path = typer.Option(
        DEFAULT_TABLE_PATH, "--table", "-t", help="Static table file"
    ),
    vendor_dir: Optional[Path] = typer.Option(
        None, "--vendor-dir", help="Base for relative paths in the table"
    ),
) -> None:
    """Show which file a symbol resolves to."""
    run_find(symbol=symbol, table_path=table, vendor_dir=vendor_dir, console=console)


@app.command()
def show(
    table: Path = typer.Option(
        DEFAULT_TABLE_PATH, "--table", "-t", help="Static table file"
    ),
) -> None:
    """Print the contents of a static table."""
    run_show(table_path=table, console=console)


if __name__ == "__main__":
    app()
