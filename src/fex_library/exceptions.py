"""Library exceptions.

Catalog errors abort a run before any fetch. Fetch and extraction errors are
raised by the low-level helpers and converted into outcomes by the installer.
"""


class FexLibraryError(Exception):
    """Base exception for library operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (URLs, paths, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class CatalogError(FexLibraryError):
    """Catalog rows are malformed."""


class FetchError(FexLibraryError):
    """A network request failed for transport reasons."""


class ResourceNotFoundError(FetchError):
    """The requested resource does not exist upstream (HTTP 404)."""


class ExtractionError(FexLibraryError):
    """Downloaded bytes are not a usable zip archive."""
