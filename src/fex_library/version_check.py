"""Lock-backed version checker.

Reports "up-to-date" when the install lock records the same version that the
catalog page currently advertises and the install directory is populated.
Anything else is "unknown" (or "error" when the page cannot be read), which
sends the entry through normal resolution.
"""

import logging
from pathlib import Path

from .exceptions import FetchError
from .lock import InstallLock
from .outcome import VersionCheck
from .outcome import VersionCheckStatus
from .protocols import FetcherProtocol
from .resolver import find_version_markers
from .settings import LibrarySettings
from .shortcuts import has_content

logger = logging.getLogger(__name__)


class LockVersionChecker:
    """VersionCheckerProtocol implementation backed by InstallLock."""

    def __init__(
        self,
        lock: InstallLock,
        fetcher: FetcherProtocol,
        destination: Path,
        settings: LibrarySettings | None = None,
    ):
        self.lock = lock
        self.fetcher = fetcher
        self.destination = destination
        self.settings = settings or LibrarySettings()

    async def check(self, name: str, identifier: int) -> VersionCheck:
        recorded = self.lock.get_entry(name)
        if recorded is None or recorded.identifier != identifier or recorded.version is None:
            return VersionCheck(status=VersionCheckStatus.UNKNOWN)

        install_dir = self.destination / name
        if not install_dir.is_dir() or not has_content(install_dir):
            logger.debug(f"{name}: recorded in lock but {install_dir} is empty")
            return VersionCheck(status=VersionCheckStatus.UNKNOWN, version_label=recorded.version)

        try:
            page = await self.fetcher.fetch_text(self.settings.page_url(identifier))
        except FetchError as e:
            logger.debug(f"{name}: version check could not read catalog page: {e}")
            return VersionCheck(status=VersionCheckStatus.ERROR, version_label=recorded.version)

        markers = find_version_markers(page, identifier)
        if markers and markers[0] == recorded.version:
            return VersionCheck(status=VersionCheckStatus.UP_TO_DATE, version_label=recorded.version)

        return VersionCheck(status=VersionCheckStatus.UNKNOWN, version_label=recorded.version)
