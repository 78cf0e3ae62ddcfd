"""Deterministic identifiers for always-load files."""

from __future__ import annotations

import hashlib
import re

_UNSAFE_CHARS = re.compile(r"\W")


def compute_file_identifier(*, package: str, relative_path: str) -> str:
    """Build a SHA256 identifier for an always-load file.

    Implements ``Key = H(package + ":" + relative_path)`` with the path
    normalized to forward slashes, so the same file yields the same
    identifier on every platform.

    Args:
        package: Owning project name (may be empty).
        relative_path: Path of the file relative to the vendor dir.

    Returns:
        Hex-encoded SHA256 digest.
    """
    payload = f"{package}:{relative_path.replace(chr(92), '/')}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def module_name_for(identifier: str) -> str:
    """Return the private ``sys.modules`` key used for an eager file."""
    return "_classmap_files." + _UNSAFE_CHARS.sub("_", identifier)
