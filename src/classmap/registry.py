"""Guarded execution of always-load files.

A ``LoadRegistry`` remembers which identifiers it has already executed so
that each file runs at most once per registry. Code that executes the
same file by path without going through the registry bypasses the guard.
"""

import importlib.machinery
import importlib.util
import logging
import sys
import threading
from pathlib import Path
from types import ModuleType
from typing import Dict, List, Union

from classmap.exceptions import BootstrapError
from classmap.utils.identifiers import module_name_for
from classmap.utils.logging import configure_module_logger

logger = configure_module_logger(__name__, level=logging.WARNING)


def execute_file(module_name: str, path: Union[str, Path]) -> ModuleType:
    """Execute the Python source at *path* as module *module_name*.

    The module is placed in ``sys.modules`` before execution and removed
    again if execution raises. Any file extension is accepted.

    Raises:
        BootstrapError: If *path* does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise BootstrapError(f"Required file not found: {path}", path=path)

    loader = importlib.machinery.SourceFileLoader(module_name, str(path))
    spec = importlib.util.spec_from_file_location(module_name, path, loader=loader)
    if spec is None:
        raise ImportError(f"Cannot build a module spec for {path}", name=module_name)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


class LoadRegistry:
    """Set of eager-file identifiers already loaded.

    Entries are added, never removed. An identifier is recorded before its
    file executes, so a file that raises is not retried.
    """

    def __init__(self) -> None:
        self._loaded: Dict[str, Path] = {}
        self._lock = threading.RLock()

    def load_once(self, identifier: str, path: Union[str, Path]) -> None:
        """Execute *path* unless *identifier* has been loaded already.

        Args:
            identifier: Stable name of the eager resource.
            path: File to execute on first request.

        Raises:
            BootstrapError: If the file is missing on first request.
        """
        with self._lock:
            if identifier in self._loaded:
                logger.debug(f"Skipping {identifier}: already loaded")
                return
            self._loaded[identifier] = Path(path)
            logger.debug(f"Loading always-load file {identifier} from {path}")
            execute_file(module_name_for(identifier), path)

    def loaded(self) -> List[str]:
        """Identifiers in the order they were loaded."""
        with self._lock:
            return list(self._loaded)

    def path_of(self, identifier: str) -> Path:
        return self._loaded[identifier]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._loaded

    def __len__(self) -> int:
        return len(self._loaded)
