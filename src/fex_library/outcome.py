"""Resolution outcomes - What happened to each catalog entry.

Outcomes are values, not exceptions: every entry ends in exactly one
ResolutionOutcome, and failures carry a pointer to the catalog page so the
user can finish the install by hand.
"""

from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .catalog import CatalogEntry


class OutcomeStatus(str, Enum):
    ALREADY_CURRENT = "already-current"
    INSTALLED = "installed"
    VERSION_UNKNOWN_INSTALLED = "installed (version unknown)"
    FAILED = "failed"


class FailureReason(str, Enum):
    UNKNOWN_IDENTIFIER = "unknown identifier"
    EXTRACTION_FAILED = "extraction failed"
    NO_RESOLVABLE_SOURCE = "no resolvable source"
    NETWORK_FAILURE = "network failure"


class SourceKind(str, Enum):
    VERSIONED_ARCHIVE = "versioned archive"
    REPOSITORY_ARCHIVE = "repository archive"
    SINGLE_FILE = "single file"


class CleanupResult(str, Enum):
    """Result of best-effort removal of a temporary download."""

    NOT_NEEDED = "not needed"
    REMOVED = "removed"
    FAILED = "failed"


class VersionCheckStatus(str, Enum):
    UP_TO_DATE = "up-to-date"
    DOWNLOADED = "downloaded"
    UNKNOWN = "unknown"
    ERROR = "error"
    SKIPPED = "version check skipped"


class VersionCheck(BaseModel):
    """Answer from a version-check collaborator."""

    model_config = ConfigDict(frozen=True)

    status: VersionCheckStatus
    version_label: str = ""

    @property
    def is_current(self) -> bool:
        """True for the two statuses that make further work unnecessary."""
        return self.status in (VersionCheckStatus.UP_TO_DATE, VersionCheckStatus.DOWNLOADED)


class ResolutionOutcome(BaseModel):
    """Terminal outcome of resolving one catalog entry."""

    model_config = ConfigDict(frozen=True)

    entry: CatalogEntry
    status: OutcomeStatus
    page_url: str
    reason: FailureReason | None = None
    version: str | None = None
    source_kind: SourceKind | None = None
    source_url: str | None = None
    ambiguous_versions: list[str] = Field(default_factory=list)
    cleanup: CleanupResult = CleanupResult.NOT_NEEDED
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    def manual_pointer(self) -> str | None:
        """Catalog page to visit when automated installation failed."""
        if self.succeeded:
            return None
        return f"FEX page of failed download: {self.entry.name} | {self.page_url}"

    def describe(self) -> str:
        """One human-readable status line."""
        name = self.entry.name
        if self.status is OutcomeStatus.FAILED:
            reason = self.reason.value if self.reason else "unknown error"
            line = f"something went wrong ({reason}): {name}"
            if self.detail:
                line += f" - {self.detail}"
            return line
        if self.version:
            return f"{self.status.value} (version {self.version}): {name}"
        return f"{self.status.value}: {name}"


class LibraryReport(BaseModel):
    """Outcomes of one library build, in catalog order."""

    outcomes: list[ResolutionOutcome] = Field(default_factory=list)
    companion: ResolutionOutcome | None = None

    @property
    def installed(self) -> list[ResolutionOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[ResolutionOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed
