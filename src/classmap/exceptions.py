"""Exception hierarchy for classmap.

Only initialization failures are modeled. A symbol missing from the table
is not an error of this package: the finder declines it and the import
system raises its usual ``ModuleNotFoundError``.
"""

from pathlib import Path
from typing import Optional, Tuple, Union


class ClassmapError(Exception):
    """Base class for all classmap errors."""


class BootstrapError(ClassmapError):
    """Fatal failure while bringing up the resolver.

    Raised when the static table or an always-load file is missing. The
    process cannot continue without its name-resolution mechanism.

    Attributes:
        path: The file that could not be found, if any.
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class PlatformCheckError(BootstrapError):
    """The running interpreter is older than the table requires.

    Attributes:
        required: Minimum ``(major, minor)`` version from the table.
        actual: ``(major, minor)`` of the running interpreter.
    """

    def __init__(
        self,
        message: str,
        required: Tuple[int, int],
        actual: Tuple[int, int],
    ) -> None:
        super().__init__(message)
        self.required = required
        self.actual = actual


class TableFormatError(ClassmapError):
    """A static table file could not be parsed or failed validation."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
