"""Generate static tables by scanning source roots.

Every ``*.py`` file under a root becomes a class map entry named after
its dotted path relative to that root; ``pkg/__init__.py`` maps to
``pkg``. Hidden directories and ``__pycache__`` are skipped, as are files
whose path is not a valid dotted name.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from classmap.table import StaticTable
from classmap.utils.identifiers import compute_file_identifier
from classmap.utils.logging import configure_module_logger

logger = configure_module_logger(__name__, level=logging.WARNING)

PathLike = Union[str, Path]


def iter_modules(root: PathLike) -> Iterator[Tuple[str, Path]]:
    """Yield ``(symbol, file)`` for every importable module under *root*.

    Results are sorted by path so generated tables are stable.
    """
    root = Path(root)
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if any(part.startswith(".") or part == "__pycache__" for part in rel.parts):
            continue
        parts = list(rel.with_suffix("").parts)
        if parts[-1] == "__init__":
            parts.pop()
        if not parts or not all(part.isidentifier() for part in parts):
            continue
        yield ".".join(parts), path


def relative_to_vendor(path: Path, vendor_dir: Optional[Path]) -> str:
    """Return *path* relative to *vendor_dir* when under it, else absolute."""
    resolved = path.resolve()
    if vendor_dir is not None:
        try:
            return resolved.relative_to(vendor_dir.resolve()).as_posix()
        except ValueError:
            pass
    return resolved.as_posix()


def dump_table(
    src_dirs: Sequence[PathLike],
    vendor_dir: Optional[PathLike] = None,
    files: Optional[Union[Sequence[PathLike], Mapping[str, PathLike]]] = None,
    prefixes: Optional[Mapping[str, Sequence[PathLike]]] = None,
    authoritative: bool = False,
    min_python: Optional[Tuple[int, int]] = None,
    package: str = "",
) -> StaticTable:
    """Scan *src_dirs* and build a static table.

    Args:
        src_dirs: Source roots; a module's symbol is its path relative to
            its root. When two roots define the same symbol the first wins.
        vendor_dir: Paths under it are stored relative to it.
        files: Always-load files. A sequence gets generated identifiers; a
            mapping supplies identifiers explicitly. Order is preserved.
        prefixes: Dotted prefix -> directories, copied into the table.
        authoritative: Mark the table class-map-only.
        min_python: Minimum ``(major, minor)`` for the platform check.
        package: Project name mixed into generated file identifiers.

    Returns:
        The generated table (not yet written).
    """
    vendor = Path(vendor_dir) if vendor_dir is not None else None

    class_map: Dict[str, str] = {}
    for src in src_dirs:
        for symbol, path in iter_modules(src):
            if symbol in class_map:
                logger.warning(
                    f"Ambiguous symbol {symbol}: keeping {class_map[symbol]}, "
                    f"ignoring {path}"
                )
                continue
            class_map[symbol] = relative_to_vendor(path, vendor)

    eager: Dict[str, str] = {}
    if isinstance(files, Mapping):
        for identifier, path in files.items():
            eager[identifier] = relative_to_vendor(Path(path), vendor)
    elif files is not None:
        for path in files:
            rel = relative_to_vendor(Path(path), vendor)
            eager[compute_file_identifier(package=package, relative_path=rel)] = rel

    prefix_map: Dict[str, List[str]] = {
        prefix: [relative_to_vendor(Path(d), vendor) for d in dirs]
        for prefix, dirs in (prefixes or {}).items()
    }

    logger.debug(f"Generated table with {len(class_map)} symbol(s)")
    return StaticTable(
        class_map=class_map,
        prefixes=prefix_map,
        files=eager,
        authoritative=authoritative,
        min_python=min_python,
    )
