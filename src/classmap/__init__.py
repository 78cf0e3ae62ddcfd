"""classmap: lazy symbol resolution from a generated static table.

Example::

    import classmap

    loader = classmap.get_loader(table_path="vendor/autoload/autoload_static.json")
    import acme.report  # resolved through the table on first import
"""

from classmap._version import __version__
from classmap.bootstrap import (
    AutoloadBootstrap,
    get_bootstrap,
    get_loader,
    load_once,
    reset_default,
)
from classmap.config import ClassmapConfig, load_config
from classmap.dumper import dump_table
from classmap.exceptions import (
    BootstrapError,
    ClassmapError,
    PlatformCheckError,
    TableFormatError,
)
from classmap.loader import ClassLoader, registered_loaders
from classmap.registry import LoadRegistry
from classmap.table import StaticTable

__all__ = [
    "__version__",
    "AutoloadBootstrap",
    "BootstrapError",
    "ClassLoader",
    "ClassmapConfig",
    "ClassmapError",
    "LoadRegistry",
    "PlatformCheckError",
    "StaticTable",
    "TableFormatError",
    "dump_table",
    "get_bootstrap",
    "get_loader",
    "load_config",
    "load_once",
    "registered_loaders",
    "reset_default",
]
