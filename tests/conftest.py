"""Shared fixtures for classmap tests."""

import sys
import tempfile
from pathlib import Path
from types import ModuleType
from typing import Callable, Iterator, List

import pytest

from classmap.bootstrap import reset_default


_TMP_ROOT = Path(tempfile.gettempdir()).resolve()


def _created_by_test(name: str, module: ModuleType) -> bool:
    if name.startswith("_classmap_files."):
        return True
    spec = getattr(module, "__spec__", None)
    origin = getattr(spec, "origin", None)
    if origin is None:
        # namespace packages synthesized for class map entries
        return getattr(module, "__path__", None) == []
    return _TMP_ROOT in Path(origin).resolve().parents


@pytest.fixture(autouse=True)
def isolate_imports() -> Iterator[None]:
    """Restore sys.meta_path and drop modules imported during a test."""
    meta_path = list(sys.meta_path)
    modules = set(sys.modules)
    yield
    reset_default()
    sys.meta_path[:] = meta_path
    for name in set(sys.modules) - modules:
        if _created_by_test(name, sys.modules[name]):
            del sys.modules[name]


@pytest.fixture
def trace_file(tmp_path: Path) -> Path:
    return tmp_path / "trace.log"


@pytest.fixture
def write_module(tmp_path: Path, trace_file: Path) -> Callable[..., Path]:
    """Write a source file that appends *tag* to the trace file when executed."""

    def _write(relative: str, tag: str, body: str = "") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"with open({str(trace_file)!r}, 'a', encoding='utf-8') as _trace:\n"
            f"    _trace.write({tag!r} + '\\n')\n" + body,
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def read_trace(trace_file: Path) -> Callable[[], List[str]]:
    """Return the tags recorded so far, in execution order."""

    def _read() -> List[str]:
        if not trace_file.exists():
            return []
        return trace_file.read_text(encoding="utf-8").splitlines()

    return _read
