"""Protocols for the collaborators the installer depends on.

The installer only needs these interfaces. Apps provide the implementations
(HttpFetcher, LockVersionChecker, or test doubles).
"""

from pathlib import Path
from typing import Protocol
from typing import runtime_checkable

from .outcome import VersionCheck


class FetcherProtocol(Protocol):
    """Protocol for network access.

    Implementations must raise ResourceNotFoundError for a missing resource
    and FetchError for any other transport failure.
    """

    async def fetch_text(self, url: str) -> str:
        """Fetch a page and return its decoded text.

        Args:
            url: Page URL

        Raises:
            ResourceNotFoundError: If the page does not exist
            FetchError: If the request fails for any other reason
        """
        ...

    async def download(self, url: str, destination: Path) -> Path:
        """Download a binary artifact to destination.

        Args:
            url: Artifact URL
            destination: File path to write (parent must exist)

        Returns:
            The written path

        Raises:
            ResourceNotFoundError: If the artifact does not exist
            FetchError: If the request fails for any other reason
        """
        ...


@runtime_checkable
class VersionCheckerProtocol(Protocol):
    """Protocol for the optional "current version" collaborator.

    Only the "up-to-date" and "downloaded" statuses are acted upon; every
    other status makes the installer resolve the entry itself.
    """

    async def check(self, name: str, identifier: int) -> VersionCheck:
        """Check whether the named entry is current.

        Args:
            name: Catalog entry name (directory name)
            identifier: Catalog identifier
        """
        ...
