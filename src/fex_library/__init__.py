"""fex-library - Bulk-install File Exchange entries into a local library.

Public API exports.

Library mechanism only: apps inject the catalog, destination, fetcher and
version checker.
"""

__version__ = "0.1.0"

from .catalog import Catalog
from .catalog import CatalogEntry
from .default_list import CHECK_VERSION_ENTRY
from .default_list import default_catalog
from .exceptions import CatalogError
from .exceptions import ExtractionError
from .exceptions import FetchError
from .exceptions import FexLibraryError
from .exceptions import ResourceNotFoundError
from .fetch import HttpFetcher
from .installer import bootstrap_companion
from .installer import build_library
from .installer import install_entry
from .lock import InstallLock
from .lock import InstallLockEntry
from .outcome import CleanupResult
from .outcome import FailureReason
from .outcome import LibraryReport
from .outcome import OutcomeStatus
from .outcome import ResolutionOutcome
from .outcome import SourceKind
from .outcome import VersionCheck
from .outcome import VersionCheckStatus
from .protocols import FetcherProtocol
from .protocols import VersionCheckerProtocol
from .resolver import ResolvedSource
from .resolver import SourceResolver
from .resolver import find_repository_marker
from .resolver import find_version_markers
from .settings import LibrarySettings
from .shortcuts import write_shortcut
from .version_check import LockVersionChecker

__all__ = [
    # Catalog
    "Catalog",
    "CatalogEntry",
    "CHECK_VERSION_ENTRY",
    "default_catalog",
    # Settings
    "LibrarySettings",
    # Resolution
    "SourceResolver",
    "ResolvedSource",
    "find_version_markers",
    "find_repository_marker",
    # Installation
    "install_entry",
    "build_library",
    "bootstrap_companion",
    "HttpFetcher",
    "FetcherProtocol",
    "VersionCheckerProtocol",
    "LockVersionChecker",
    "write_shortcut",
    # Outcomes
    "ResolutionOutcome",
    "LibraryReport",
    "OutcomeStatus",
    "FailureReason",
    "SourceKind",
    "CleanupResult",
    "VersionCheck",
    "VersionCheckStatus",
    # Lock file
    "InstallLock",
    "InstallLockEntry",
    # Exceptions
    "FexLibraryError",
    "CatalogError",
    "FetchError",
    "ResourceNotFoundError",
    "ExtractionError",
]
