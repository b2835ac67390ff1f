from __future__ import annotations


class LichkingError(Exception):
    """Base class for failures that abort a whole run."""


class GraphError(LichkingError):
    """The resolve graph is missing or references an unknown package."""


class MetadataError(LichkingError):
    """Package metadata could not be produced or parsed."""


class DiscoveryIoError(LichkingError):
    """A package directory could not be listed."""

    def __init__(self, directory, cause: OSError) -> None:
        self.directory = directory
        self.cause = cause
        super().__init__(f"Unable to list package directory {directory}: {cause}")


class PolicyError(LichkingError):
    """A check policy file could not be loaded."""
