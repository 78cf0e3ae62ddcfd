"""One-time construction of the resolver from a static table.

``AutoloadBootstrap.get_loader()`` brings the resolver up in a fixed order:

1. platform check (fatal on failure);
2. construct the ``ClassLoader`` for the vendor dir;
3. populate it from the static table;
4. register it on ``sys.meta_path``;
5. execute every always-load file through the ``LoadRegistry``.

Later calls return the same loader without side effects. The loader
implementation is an ordinary import of this package, so no temporary
hook is needed to find it.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from classmap.config import ClassmapConfig, load_config
from classmap.exceptions import BootstrapError
from classmap.loader import ClassLoader
from classmap.platform_check import check_platform
from classmap.registry import LoadRegistry
from classmap.table import StaticTable
from classmap.utils.logging import configure_module_logger, set_verbose

logger = configure_module_logger(__name__, level=logging.WARNING)


class AutoloadBootstrap:
    """Owns one resolver and the registry of its always-load files.

    Args:
        table: Parsed static table.
        vendor_dir: Base for relative paths in *table*.
        registry: Registry shared with other bootstraps, if any.
        prepend: Insert the loader at the front of ``sys.meta_path``.
        authoritative: Force class-map-only lookups even if the table
            does not ask for it.
        platform_check: Enforce ``table.min_python``.
        verbose: Switch classmap loggers to DEBUG and report bootstrap
            completion at INFO.
    """

    def __init__(
        self,
        table: StaticTable,
        vendor_dir: Union[str, Path],
        registry: Optional[LoadRegistry] = None,
        prepend: bool = True,
        authoritative: bool = False,
        platform_check: bool = True,
        verbose: bool = False,
    ) -> None:
        self.table = table
        self.vendor_dir = Path(vendor_dir)
        self.registry = registry if registry is not None else LoadRegistry()
        self.prepend = prepend
        self.authoritative = authoritative
        self.platform_check = platform_check
        self.verbose = verbose
        if self.verbose:
            set_verbose(True)
        self._loader: Optional[ClassLoader] = None
        self._lock = threading.Lock()

    @classmethod
    def from_file(
        cls,
        table_path: Union[str, Path],
        vendor_dir: Optional[Union[str, Path]] = None,
        **kwargs: object,
    ) -> "AutoloadBootstrap":
        """Build a bootstrap from a table file.

        The vendor dir defaults to one level above the table's directory
        (``vendor/autoload/autoload_static.json`` -> ``vendor``).

        Raises:
            BootstrapError: If the table file does not exist.
            TableFormatError: If the table cannot be parsed.
        """
        table_path = Path(table_path)
        if not table_path.is_file():
            raise BootstrapError(
                f"Static table not found: {table_path}. "
                "Generate it with `classmap dump`.",
                path=table_path,
            )
        table = StaticTable.from_file(table_path)
        if vendor_dir is None:
            vendor_dir = table_path.resolve().parent.parent
        return cls(table, vendor_dir, **kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_config(
        cls,
        config: ClassmapConfig,
        registry: Optional[LoadRegistry] = None,
    ) -> "AutoloadBootstrap":
        return cls.from_file(
            config.table_path,
            vendor_dir=config.vendor_dir,
            registry=registry,
            prepend=config.prepend,
            authoritative=config.authoritative,
            platform_check=config.platform_check,
            verbose=config.verbose,
        )

    @property
    def initialized(self) -> bool:
        return self._loader is not None

    def get_loader(self) -> ClassLoader:
        """Return the resolver, bringing it up on first call.

        Raises:
            BootstrapError: If the platform check fails or an always-load
                file is missing. Initialization is not retried afterwards
                for the files already recorded.
        """
        loader = self._loader
        if loader is not None:
            return loader

        with self._lock:
            if self._loader is not None:
                return self._loader

            if self.platform_check:
                check_platform(self.table.min_python)

            loader = ClassLoader(self.vendor_dir)
            loader.add_class_map(self.table.class_map)
            for prefix, dirs in self.table.prefixes.items():
                loader.add_prefix(prefix, dirs)
            for directory in self.table.fallback_dirs:
                loader.add_fallback_dir(directory)
            loader.set_authoritative(self.authoritative or self.table.authoritative)

            loader.register(prepend=self.prepend)
            self._loader = loader

            for identifier, path in self.table.files.items():
                self.load_once(identifier, path)

            message = (
                f"Bootstrap complete: {len(self.table.class_map)} symbol(s), "
                f"{len(self.table.files)} always-load file(s), "
                f"vendor dir {self.vendor_dir}"
            )
            if self.verbose:
                logger.info(message)
            else:
                logger.debug(message)
            return loader

    def load_once(self, identifier: str, path: Union[str, Path]) -> None:
        """Execute *path* once for *identifier*; relative paths use the vendor dir."""
        path = Path(path)
        if not path.is_absolute():
            path = self.vendor_dir / path
        self.registry.load_once(identifier, path)

    def shutdown(self) -> None:
        """Unregister the loader. Loaded modules stay loaded."""
        with self._lock:
            if self._loader is not None:
                self._loader.unregister()
                self._loader = None


_DEFAULT_REGISTRY = LoadRegistry()
_DEFAULT_BOOTSTRAP: Optional[AutoloadBootstrap] = None
_DEFAULT_LOCK = threading.Lock()


def get_bootstrap(**config_overrides: object) -> AutoloadBootstrap:
    """Get or create the process-wide bootstrap.

    The first call reads configuration (``CLASSMAP_*`` environment,
    ``[tool.classmap]`` in pyproject.toml, then *config_overrides*).
    Overrides passed on later calls are ignored.
    """
    global _DEFAULT_BOOTSTRAP

    with _DEFAULT_LOCK:
        if _DEFAULT_BOOTSTRAP is None:
            config = load_config(**config_overrides)  # type: ignore[arg-type]
            _DEFAULT_BOOTSTRAP = AutoloadBootstrap.from_config(
                config, registry=_DEFAULT_REGISTRY
            )
        return _DEFAULT_BOOTSTRAP


def get_loader(**config_overrides: object) -> ClassLoader:
    """Return the process-wide resolver, initializing it exactly once."""
    return get_bootstrap(**config_overrides).get_loader()


def load_once(identifier: str, path: Union[str, Path]) -> None:
    """Execute *path* at most once per process for *identifier*.

    Once the process-wide bootstrap exists, relative paths resolve against
    its vendor dir. Before that they resolve against the working directory.
    """
    bootstrap = _DEFAULT_BOOTSTRAP
    if bootstrap is not None:
        bootstrap.load_once(identifier, path)
    else:
        _DEFAULT_REGISTRY.load_once(identifier, path)


def reset_default() -> None:
    """Unregister and drop the process-wide bootstrap.

    The process-wide registry is kept: files already loaded stay loaded.
    """
    global _DEFAULT_BOOTSTRAP

    with _DEFAULT_LOCK:
        if _DEFAULT_BOOTSTRAP is not None:
            _DEFAULT_BOOTSTRAP.shutdown()
        _DEFAULT_BOOTSTRAP = None
