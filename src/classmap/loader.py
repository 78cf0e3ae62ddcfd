"""Lazy symbol resolver.

``ClassLoader`` is a ``sys.meta_path`` finder that resolves dotted module
names to source files. Lookup order:

1. the class map (exact symbol -> file, no filesystem access);
2. package prefixes, longest first (``acme.`` -> ``src/acme``);
3. fallback directories, searched with the full dotted path.

Steps 2 and 3 are skipped when the loader is authoritative. Symbols that
resolve nowhere are cached as missing, so asking again costs a set lookup.
Intermediate names of class-map symbols (``acme`` for ``acme.util``) are
served as empty namespace packages when nothing else provides them.
"""

import importlib.abc
import importlib.machinery
import importlib.util
import logging
import sys
import threading
from pathlib import Path
from types import MappingProxyType, ModuleType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from classmap.utils.logging import configure_module_logger

logger = configure_module_logger(__name__, level=logging.WARNING)

PathLike = Union[str, Path]


class ClassLoader(importlib.abc.MetaPathFinder):
    """Resolve dotted symbols to files and load them on demand.

    Example::

        loader = ClassLoader("/app/vendor")
        loader.add_class_map({"acme.report": "src/acme/report.py"})
        loader.register()

        import acme.report  # executes /app/vendor/src/acme/report.py
    """

    def __init__(self, vendor_dir: PathLike) -> None:
        self.vendor_dir = Path(vendor_dir)
        self._class_map: Dict[str, Path] = {}
        self._namespaces: Set[str] = set()
        self._prefixes: Dict[str, List[Path]] = {}
        self._fallback_dirs: List[Path] = []
        self._authoritative = False
        self._missing: Set[str] = set()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _resolve(self, path: PathLike) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.vendor_dir / path

    @property
    def class_map(self) -> Mapping[str, Path]:
        """Read-only view of the symbol-to-location map."""
        return MappingProxyType(self._class_map)

    @property
    def prefixes(self) -> Mapping[str, List[Path]]:
        return MappingProxyType(self._prefixes)

    @property
    def fallback_dirs(self) -> List[Path]:
        return list(self._fallback_dirs)

    @property
    def authoritative(self) -> bool:
        return self._authoritative

    def add_class_map(self, mapping: Mapping[str, PathLike]) -> None:
        """Merge symbol -> path entries. Entries already present are kept."""
        with self._lock:
            for symbol, path in mapping.items():
                if symbol in self._class_map:
                    continue
                self._class_map[symbol] = self._resolve(path)
                parts = symbol.split(".")
                for i in range(1, len(parts)):
                    self._namespaces.add(".".join(parts[:i]))
            self._missing.clear()

    def add_prefix(
        self,
        prefix: str,
        paths: Union[PathLike, Sequence[PathLike]],
        prepend: bool = False,
    ) -> None:
        """Add base directories for a dotted package prefix such as ``acme.``.

        Raises:
            ValueError: If *prefix* does not end with a dot.
        """
        if not prefix.endswith("."):
            raise ValueError(f"A non-empty prefix must end with '.': {prefix!r}")
        dirs = [self._resolve(p) for p in _as_list(paths)]
        with self._lock:
            current = self._prefixes.setdefault(prefix, [])
            if prepend:
                current[:0] = dirs
            else:
                current.extend(dirs)
            self._missing.clear()

    def set_prefix(self, prefix: str, paths: Union[PathLike, Sequence[PathLike]]) -> None:
        """Replace the base directories for *prefix*."""
        with self._lock:
            self._prefixes.pop(prefix, None)
        self.add_prefix(prefix, paths)

    def add_fallback_dir(self, path: PathLike, prepend: bool = False) -> None:
        with self._lock:
            resolved = self._resolve(path)
            if prepend:
                self._fallback_dirs.insert(0, resolved)
            else:
                self._fallback_dirs.append(resolved)
            self._missing.clear()

    def set_authoritative(self, authoritative: bool) -> None:
        """Restrict lookups to the class map."""
        self._authoritative = authoritative

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_file(self, symbol: str) -> Optional[Path]:
        """Return the file that defines *symbol*, or ``None``.

        Class map hits are returned without checking the filesystem.
        """
        found = self._class_map.get(symbol)
        if found is not None:
            return found
        if self._authoritative or symbol in self._missing:
            return None

        found = self._find_with_prefixes(symbol)
        if found is None:
            found = self._find_in_dirs(symbol.split("."), self._fallback_dirs)
        if found is None:
            self._missing.add(symbol)
            logger.debug(f"No file for symbol {symbol}")
        return found

    def _find_with_prefixes(self, symbol: str) -> Optional[Path]:
        for prefix in sorted(self._prefixes, key=len, reverse=True):
            if not symbol.startswith(prefix):
                continue
            rest = symbol[len(prefix) :].split(".")
            found = self._find_in_dirs(rest, self._prefixes[prefix])
            if found is not None:
                return found
        return None

    @staticmethod
    def _find_in_dirs(parts: List[str], dirs: Iterable[Path]) -> Optional[Path]:
        for base in dirs:
            candidate = base.joinpath(*parts)
            module_file = candidate.with_name(candidate.name + ".py")
            if module_file.is_file():
                return module_file
            package_file = candidate / "__init__.py"
            if package_file.is_file():
                return package_file
        return None

    # ------------------------------------------------------------------
    # Import protocol
    # ------------------------------------------------------------------

    def find_spec(
        self,
        fullname: str,
        path: Optional[Sequence[str]] = None,
        target: object = None,
    ) -> Optional[importlib.machinery.ModuleSpec]:
        found = self.find_file(fullname)
        if found is not None:
            return _spec_for(fullname, found)
        if fullname in self._namespaces:
            real = importlib.machinery.PathFinder.find_spec(fullname, path)
            if real is not None:
                return real
            return importlib.machinery.ModuleSpec(fullname, None, is_package=True)
        return None

    def invalidate_caches(self) -> None:
        """Forget cached misses. Called by ``importlib.invalidate_caches``."""
        with self._lock:
            self._missing.clear()

    def load_symbol(self, symbol: str) -> bool:
        """Load the file for *symbol* unless it is already loaded.

        Works whether or not the loader is registered.

        Returns:
            ``True`` if *symbol* is (now) loaded, ``False`` if it is unknown.
        """
        with self._lock:
            if symbol in sys.modules:
                return True
            found = self.find_file(symbol)
            if found is None:
                return False
            self._import(symbol)
            logger.debug(f"Loaded symbol {symbol} from {found}")
            return True

    def _import(self, name: str) -> ModuleType:
        """Import *name*, parents first, binding it on its parent package.

        Names this loader cannot resolve go through the regular import system.
        """
        module = sys.modules.get(name)
        if module is not None:
            return module

        parent_name, _, child = name.rpartition(".")
        parent = self._import(parent_name) if parent_name else None
        spec = self.find_spec(name, getattr(parent, "__path__", None))
        if spec is None:
            return importlib.import_module(name)

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            if spec.loader is not None:
                spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        if parent is not None:
            setattr(parent, child, module)
        return module

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, prepend: bool = True) -> None:
        """Install this loader on ``sys.meta_path``. Idempotent."""
        if self in sys.meta_path:
            return
        if prepend:
            sys.meta_path.insert(0, self)
        else:
            sys.meta_path.append(self)
        logger.debug(f"Registered loader for vendor dir {self.vendor_dir}")

    def unregister(self) -> None:
        if self in sys.meta_path:
            sys.meta_path.remove(self)
            logger.debug(f"Unregistered loader for vendor dir {self.vendor_dir}")

    @property
    def is_registered(self) -> bool:
        return self in sys.meta_path

    def __repr__(self) -> str:
        return (
            f"ClassLoader(vendor_dir={str(self.vendor_dir)!r}, "
            f"symbols={len(self._class_map)}, prefixes={len(self._prefixes)})"
        )


def registered_loaders() -> List[ClassLoader]:
    """Every ``ClassLoader`` currently on ``sys.meta_path``, in lookup order."""
    return [finder for finder in sys.meta_path if isinstance(finder, ClassLoader)]


def _spec_for(fullname: str, path: Path) -> importlib.machinery.ModuleSpec:
    is_package = path.name == "__init__.py"
    loader = importlib.machinery.SourceFileLoader(fullname, str(path))
    spec = importlib.util.spec_from_file_location(
        fullname,
        path,
        loader=loader,
        submodule_search_locations=[str(path.parent)] if is_package else None,
    )
    if spec is None:
        raise ImportError(f"Cannot build a module spec for {path}", name=fullname)
    return spec


def _as_list(paths: Union[PathLike, Sequence[PathLike]]) -> List[PathLike]:
    if isinstance(paths, (str, Path)):
        return [paths]
    return list(paths)
