"""
grove - A multitree task organizer for the command line

Tasks are nodes in a multitree: a node may have several parents, but no
node is reachable from another along two different paths. Completion is
derived bottom-up, and every day gets its own date node to hang tasks on.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("grove")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from grove.errors import (
    Conflict,
    Forbidden,
    GroveError,
    InvalidName,
    InvalidSelector,
    NotFound,
    StorageFailure,
)

__all__ = [
    "__version__",
    "GroveError",
    "NotFound",
    "InvalidName",
    "InvalidSelector",
    "Forbidden",
    "Conflict",
    "StorageFailure",
]
