"""Implementation of the classmap CLI commands.

Each command takes an explicit Rich console so tests can capture output.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from classmap.dumper import dump_table
from classmap.exceptions import TableFormatError
from classmap.loader import ClassLoader
from classmap.table import StaticTable


def _parse_min_python(value: Optional[str]) -> Optional[Tuple[int, int]]:
    if value is None:
        return None
    try:
        major, minor = (int(part) for part in value.split(".")[:2])
    except ValueError as e:
        raise typer.BadParameter(
            f"expected MAJOR.MINOR, got {value!r}", param_hint="--min-python"
        ) from e
    return major, minor


def _read_table(table_path: Path, console: Console) -> StaticTable:
    try:
        return StaticTable.from_file(table_path)
    except FileNotFoundError as e:
        console.print(f"[red]✗[/red] Table not found: {table_path}")
        raise typer.Exit(code=1) from e
    except TableFormatError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1) from e


def run_dump(
    src_dirs: List[Path],
    output: Path,
    vendor_dir: Optional[Path] = None,
    files: Optional[List[Path]] = None,
    authoritative: bool = False,
    min_python: Optional[str] = None,
    console: Optional[Console] = None,
) -> StaticTable:
    """Scan source roots and write a static table to *output*.

    The vendor dir defaults to one level above the output's directory,
    matching what the bootstrap assumes when reading the table back.
    """
    if console is None:
        console = Console()

    missing = [d for d in src_dirs if not d.is_dir()]
    if missing:
        for directory in missing:
            console.print(f"[red]✗[/red] Not a directory: {directory}")
        raise typer.Exit(code=1)

    if vendor_dir is None:
        vendor_dir = output.resolve().parent.parent

    table = dump_table(
        src_dirs,
        vendor_dir=vendor_dir,
        files=files or None,
        authoritative=authoritative,
        min_python=_parse_min_python(min_python),
    )
    table.to_file(output)

    console.print(
        f"[green]✓[/green] Wrote {len(table.class_map)} symbol(s) and "
        f"{len(table.files)} always-load file(s) to [bold]{output}[/bold]"
    )
    return table


def run_find(
    symbol: str,
    table_path: Path,
    vendor_dir: Optional[Path] = None,
    console: Optional[Console] = None,
) -> Path:
    """Print the file *symbol* resolves to; exit 1 if it resolves nowhere."""
    if console is None:
        console = Console()

    table = _read_table(table_path, console)
    if vendor_dir is None:
        vendor_dir = table_path.resolve().parent.parent

    loader = ClassLoader(vendor_dir)
    loader.add_class_map(table.class_map)
    for prefix, dirs in table.prefixes.items():
        loader.add_prefix(prefix, dirs)
    for directory in table.fallback_dirs:
        loader.add_fallback_dir(directory)
    loader.set_authoritative(table.authoritative)

    found = loader.find_file(symbol)
    if found is None:
        console.print(f"[red]✗[/red] Symbol not found: [bold]{symbol}[/bold]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{symbol}[/bold] -> {found}", soft_wrap=True)
    return found


def run_show(table_path: Path, console: Optional[Console] = None) -> None:
    """Render the contents of a static table."""
    if console is None:
        console = Console()

    table = _read_table(table_path, console)

    symbols = Table(title="Class map", show_header=True, header_style="bold")
    symbols.add_column("Symbol", style="cyan", no_wrap=True)
    symbols.add_column("File", style="green")
    for symbol, path in sorted(table.class_map.items()):
        symbols.add_row(symbol, path)
    console.print(symbols)

    if table.prefixes:
        prefixes = Table(title="Prefixes", show_header=True, header_style="bold")
        prefixes.add_column("Prefix", style="cyan", no_wrap=True)
        prefixes.add_column("Directories", style="green")
        for prefix, dirs in table.prefixes.items():
            prefixes.add_row(prefix, ", ".join(dirs))
        console.print(prefixes)

    if table.files:
        eager = Table(title="Always-load files", show_header=True, header_style="bold")
        eager.add_column("#", style="dim")
        eager.add_column("Identifier", style="magenta", no_wrap=True)
        eager.add_column("File", style="green")
        for index, (identifier, path) in enumerate(table.files.items(), start=1):
            eager.add_row(str(index), identifier, path)
        console.print(eager)

    mode = "authoritative" if table.authoritative else "lookup"
    console.print(f"[dim]Mode:[/dim] {mode}")
    if table.min_python is not None:
        console.print(
            f"[dim]Requires Python:[/dim] >= {table.min_python[0]}.{table.min_python[1]}"
        )
