"""Interpreter compatibility check run before the resolver comes up."""

import sys
from typing import Optional, Sequence, Tuple

from classmap.exceptions import PlatformCheckError


def check_platform(
    min_python: Optional[Sequence[int]],
    version_info: Optional[Sequence[int]] = None,
) -> None:
    """Fail fast when the interpreter is older than *min_python*.

    Args:
        min_python: Required ``(major, minor)``, or ``None`` to skip.
        version_info: Version to check instead of ``sys.version_info``.

    Raises:
        PlatformCheckError: If the running version is too old.
    """
    if min_python is None:
        return

    required: Tuple[int, int] = (int(min_python[0]), int(min_python[1]))
    current = version_info if version_info is not None else sys.version_info
    actual: Tuple[int, int] = (int(current[0]), int(current[1]))

    if actual < required:
        raise PlatformCheckError(
            "Your dependencies require Python "
            f">= {required[0]}.{required[1]}. "
            f"You are running {actual[0]}.{actual[1]}.",
            required=required,
            actual=actual,
        )
