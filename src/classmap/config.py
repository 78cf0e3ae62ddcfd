"""Configuration for the default bootstrap.

Values are merged with the following priority (highest to lowest):
1. Runtime Parameters (passed directly to functions)
2. Environment Variables (prefixed with CLASSMAP_)
3. Project Config ([tool.classmap] in pyproject.toml)
4. Defaults (hardcoded fallbacks)
"""

import os
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

DEFAULT_TABLE_PATH = Path("vendor") / "autoload" / "autoload_static.json"

_TRUTHY = ("true", "1", "yes", "on")


class ClassmapConfig(BaseModel):
    """Settings used to build the process-wide bootstrap."""

    table_path: Path = Field(
        default=DEFAULT_TABLE_PATH,
        description="Static table JSON file",
    )

    vendor_dir: Optional[Path] = Field(
        default=None,
        description="Base for relative table paths (default: table dir's parent)",
    )

    authoritative: bool = Field(
        default=False,
        description="Resolve from the class map only",
    )

    prepend: bool = Field(
        default=True,
        description="Insert the loader at the front of sys.meta_path",
    )

    platform_check: bool = Field(
        default=True,
        description="Verify the table's minimum Python version on bootstrap",
    )

    verbose: bool = Field(
        default=False,
        description="Log every resolution and load",
    )

    model_config = {
        "extra": "forbid",
    }


def _load_from_pyproject_toml() -> dict[str, Any]:
    """Load configuration from [tool.classmap] section in pyproject.toml.

    Returns:
        Dictionary with config values, or empty dict if not found.
    """
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        try:
            import tomli as tomllib  # noqa: F401
        except ImportError:
            return {}

    current_dir = Path.cwd()
    for path in [current_dir] + list(current_dir.parents):
        pyproject_path = path / "pyproject.toml"
        if pyproject_path.exists():
            try:
                with open(pyproject_path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError):
                continue
            section = data.get("tool", {}).get("classmap")
            if section is None:
                continue
            result: dict[str, Any] = dict(section)
            # Relative paths in pyproject.toml are relative to that file.
            for key in ("table_path", "vendor_dir"):
                if key in result and not Path(result[key]).is_absolute():
                    result[key] = path / result[key]
            return result

    return {}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables (prefixed with CLASSMAP_).

    Returns:
        Dictionary with config values from environment.
    """
    config: dict[str, Any] = {}

    env_mapping = {
        "CLASSMAP_TABLE": "table_path",
        "CLASSMAP_VENDOR_DIR": "vendor_dir",
        "CLASSMAP_AUTHORITATIVE": "authoritative",
        "CLASSMAP_PREPEND": "prepend",
        "CLASSMAP_PLATFORM_CHECK": "platform_check",
        "CLASSMAP_VERBOSE": "verbose",
    }
    bool_keys = {"authoritative", "prepend", "platform_check", "verbose"}

    for env_var, config_key in env_mapping.items():
        value = os.getenv(env_var)
        if value is None:
            continue
        if config_key in bool_keys:
            config[config_key] = value.lower() in _TRUTHY
        else:
            config[config_key] = value

    return config


def load_config(
    table_path: Optional[Union[str, Path]] = None,
    vendor_dir: Optional[Union[str, Path]] = None,
    authoritative: Optional[bool] = None,
    prepend: Optional[bool] = None,
    platform_check: Optional[bool] = None,
    verbose: Optional[bool] = None,
) -> ClassmapConfig:
    """Load configuration with hierarchical priority.

    Priority order (highest to lowest):
    1. Runtime Parameters (passed to this function)
    2. Environment Variables (CLASSMAP_*)
    3. Project Config ([tool.classmap] in pyproject.toml)
    4. Defaults (hardcoded in ClassmapConfig)

    Returns:
        ClassmapConfig instance with merged configuration.
    """
    runtime_config: dict[str, Any] = {
        key: value
        for key, value in {
            "table_path": table_path,
            "vendor_dir": vendor_dir,
            "authoritative": authoritative,
            "prepend": prepend,
            "platform_check": platform_check,
            "verbose": verbose,
        }.items()
        if value is not None
    }

    merged_config = ClassmapConfig().model_dump()
    merged_config.update(_load_from_pyproject_toml())
    merged_config.update(_load_from_env())
    merged_config.update(runtime_config)

    return ClassmapConfig(**merged_config)
