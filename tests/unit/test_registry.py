"""Test cases for the guarded always-load registry."""

import sys
import threading
from pathlib import Path
from typing import Callable, List
from unittest.mock import patch

import pytest

from classmap.exceptions import BootstrapError
from classmap.registry import LoadRegistry, execute_file
from classmap.utils.identifiers import module_name_for


class TestLoadOnce:
    """Test cases for LoadRegistry.load_once."""

    def test_second_call_is_noop(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        path = write_module("boot.py", "boot")
        registry = LoadRegistry()

        registry.load_once("init-config", path)
        registry.load_once("init-config", path)

        assert read_trace() == ["boot"]

    def test_same_identifier_different_path_not_loaded(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        first = write_module("a.py", "a")
        second = write_module("b.py", "b")
        registry = LoadRegistry()

        registry.load_once("shared", first)
        registry.load_once("shared", second)

        assert read_trace() == ["a"]
        assert registry.path_of("shared") == first

    def test_distinct_identifiers_load_in_order(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        registry = LoadRegistry()
        for tag in ("one", "two", "three"):
            registry.load_once(tag, write_module(f"{tag}.py", tag))

        assert read_trace() == ["one", "two", "three"]
        assert registry.loaded() == ["one", "two", "three"]
        assert len(registry) == 3
        assert "two" in registry

    def test_registries_are_independent(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        path = write_module("boot.py", "boot")

        LoadRegistry().load_once("boot", path)
        LoadRegistry().load_once("boot", path)

        assert read_trace() == ["boot", "boot"]

    def test_missing_file_is_fatal(self, tmp_path: Path) -> None:
        registry = LoadRegistry()

        with pytest.raises(BootstrapError) as exc_info:
            registry.load_once("gone", tmp_path / "gone.py")

        assert exc_info.value.path == tmp_path / "gone.py"

    def test_failing_file_is_not_retried(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        path = write_module("bad.py", "bad", body="raise RuntimeError('boom')\n")
        registry = LoadRegistry()

        with pytest.raises(RuntimeError, match="boom"):
            registry.load_once("bad", path)
        registry.load_once("bad", path)

        assert read_trace() == ["bad"]
        assert module_name_for("bad") not in sys.modules

    def test_concurrent_calls_load_once(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        path = write_module("boot.py", "boot", body="import time\ntime.sleep(0.05)\n")
        registry = LoadRegistry()
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            registry.load_once("boot", path)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert read_trace() == ["boot"]


class TestExecuteFile:
    """Test cases for execute_file."""

    def test_any_extension_is_executed(
        self,
        write_module: Callable[..., Path],
        read_trace: Callable[[], List[str]],
    ) -> None:
        path = write_module("bootstrap.ext", "ext", body="VALUE = 42\n")

        module = execute_file("_classmap_files.ext_test", path)

        assert module.VALUE == 42
        assert sys.modules["_classmap_files.ext_test"] is module
        assert read_trace() == ["ext"]

    def test_unbuildable_spec_raises_import_error(
        self, write_module: Callable[..., Path]
    ) -> None:
        path = write_module("nospec.py", "nospec")

        with patch("importlib.util.spec_from_file_location", return_value=None):
            with pytest.raises(ImportError, match="Cannot build a module spec"):
                execute_file("nospec_mod", path)

        assert "nospec_mod" not in sys.modules
