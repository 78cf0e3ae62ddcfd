"""Static table model.

The static table is the generated input of the resolver: a flat
symbol-to-path map, optional package prefixes and fallback directories,
and an ordered list of always-load files. Paths may be absolute or
relative to the vendor dir.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from classmap.exceptions import TableFormatError


def _is_dotted_name(name: str) -> bool:
    return bool(name) and all(part.isidentifier() for part in name.split("."))


class StaticTable(BaseModel):
    """Validated contents of a generated autoload table."""

    class_map: Dict[str, str] = Field(
        default_factory=dict,
        description="Dotted symbol -> source file",
    )

    prefixes: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Dotted package prefix (ending in '.') -> base directories",
    )

    fallback_dirs: List[str] = Field(
        default_factory=list,
        description="Directories searched when no prefix matches",
    )

    files: Dict[str, str] = Field(
        default_factory=dict,
        description="Always-load identifier -> file, in load order",
    )

    authoritative: bool = Field(
        default=False,
        description="Resolve from class_map only, never probing the filesystem",
    )

    min_python: Optional[Tuple[int, int]] = Field(
        default=None,
        description="Minimum (major, minor) interpreter version",
    )

    model_config = {
        "extra": "forbid",
    }

    @field_validator("class_map")
    @classmethod
    def _check_symbols(cls, value: Dict[str, str]) -> Dict[str, str]:
        bad = [name for name in value if not _is_dotted_name(name)]
        if bad:
            raise ValueError(f"invalid symbol name(s): {', '.join(sorted(bad))}")
        return value

    @field_validator("prefixes")
    @classmethod
    def _check_prefixes(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for prefix in value:
            if not prefix.endswith(".") or not _is_dotted_name(prefix[:-1]):
                raise ValueError(
                    f"prefix {prefix!r} must be a dotted name ending in '.'"
                )
        return value

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticTable":
        """Read a table from a JSON file.

        Args:
            path: Location of the table.

        Returns:
            Parsed table.

        Raises:
            FileNotFoundError: If *path* does not exist.
            TableFormatError: If the file is not valid JSON or fails validation.
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TableFormatError(f"{path}: not valid JSON ({e})", path=path) from e
        if not isinstance(data, dict):
            raise TableFormatError(f"{path}: top level must be an object", path=path)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise TableFormatError(f"{path}: {e}", path=path) from e

    def to_file(self, path: Union[str, Path]) -> Path:
        """Write the table as indented JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.model_dump(mode="json", exclude_defaults=False)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return path
