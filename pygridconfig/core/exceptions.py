"""Exceptions raised by pygridconfig.

Reads of a missing path never raise; they return the caller's default. The
errors below cover malformed paths, unknown formats and unreadable sources.
"""


class GridConfigError(Exception):
    """Base class for all pygridconfig errors."""


class PathSegmentError(GridConfigError, TypeError):
    """Raised when a dotted path descends through a value that is not a group.

    Attributes:
        path (str): The full dotted path being resolved.
        segment (str): The segment whose value is not a group.
    """

    def __init__(self, path: str, segment: str) -> None:
        self.path = path
        self.segment = segment
        super().__init__(f"Path segment '{segment}' of '{path}' is not a group")


class UnsupportedFormatError(GridConfigError, ValueError):
    """Raised when no format adapter matches a name or file suffix."""


class SourceError(GridConfigError):
    """Raised when a configuration source cannot be read or parsed."""
