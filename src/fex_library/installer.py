"""Entry installation - Resolve, fetch and unpack catalog entries.

install_entry() runs the per-entry protocol and always returns a
ResolutionOutcome; fetch and extraction errors are converted, never raised:

1. Optional version check (short-circuits on "up-to-date"/"downloaded")
2. Catalog page probe (404 -> UNKNOWN_IDENTIFIER, no further attempts)
3. Versioned archive, with a legacy single-file fallback
4. Repository archive (only when the page has no version marker)
5. Manual fallback: FAILED with a pointer to the catalog page

build_library() runs install_entry() over a catalog, one entry at a time,
after bootstrapping the companion version checker when asked to.

All paths are explicit; the process working directory is never changed.
"""

import logging
import os
import shutil
import tempfile
import zipfile
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .catalog import Catalog
from .catalog import CatalogEntry
from .exceptions import ExtractionError
from .exceptions import FetchError
from .exceptions import ResourceNotFoundError
from .lock import InstallLock
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
from .settings import LibrarySettings
from .shortcuts import has_content
from .shortcuts import write_shortcut
from .version_check import LockVersionChecker

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[ResolutionOutcome], None]


def _temp_download_path(target_dir: Path) -> Path:
    """Reserve a hidden temporary file inside the entry's directory."""
    fd, name = tempfile.mkstemp(prefix=".fex-", suffix=".download", dir=target_dir)
    os.close(fd)
    return Path(name)


def _remove_temp(path: Path) -> CleanupResult:
    """Best-effort removal of a temporary download; failure is reported, not raised."""
    if not path.exists():
        return CleanupResult.NOT_NEEDED
    try:
        path.unlink()
    except OSError as e:
        logger.debug(f"Could not remove temporary download {path}: {e}")
        return CleanupResult.FAILED
    return CleanupResult.REMOVED


def _extract_zip(archive: Path, target_dir: Path) -> None:
    """Unzip archive into target_dir.

    Raises:
        ExtractionError: If archive is not a zip file or a member would land
            outside target_dir
    """
    root = target_dir.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            for member in zf.infolist():
                destination = (root / member.filename).resolve()
                if not destination.is_relative_to(root):
                    raise ExtractionError(
                        f"Archive member {member.filename!r} escapes {target_dir}",
                        context={"archive": str(archive), "member": member.filename},
                    )
            zf.extractall(root)
    except (zipfile.BadZipFile, EOFError) as e:
        raise ExtractionError(f"Not a zip archive: {e}", context={"archive": str(archive)}) from e
    except OSError as e:
        raise ExtractionError(f"Could not unpack archive: {e}", context={"archive": str(archive)}) from e


class _EntryInstall:
    """State for one run of the per-entry protocol."""

    def __init__(
        self,
        entry: CatalogEntry,
        target_dir: Path,
        fetcher: FetcherProtocol,
        settings: LibrarySettings,
    ):
        self.entry = entry
        self.target_dir = target_dir
        self.fetcher = fetcher
        self.settings = settings
        self.page_url = settings.page_url(entry.identifier)

    def outcome(self, status: OutcomeStatus, **fields: Any) -> ResolutionOutcome:
        return ResolutionOutcome(entry=self.entry, status=status, page_url=self.page_url, **fields)

    def failed(self, reason: FailureReason, detail: str = "", **fields: Any) -> ResolutionOutcome:
        outcome = self.outcome(OutcomeStatus.FAILED, reason=reason, detail=detail, **fields)
        logger.warning(f"{outcome.describe()} | {outcome.manual_pointer()}")
        return outcome

    def reserve_temp(self) -> Path | None:
        try:
            return _temp_download_path(self.target_dir)
        except OSError as e:
            logger.debug(f"{self.entry.name}: cannot write to {self.target_dir}: {e}")
            return None

    async def check_version(self, checker: VersionCheckerProtocol) -> VersionCheck:
        try:
            return await checker.check(self.entry.name, self.entry.identifier)
        except Exception as e:  # pluggable collaborator; any failure falls through
            logger.warning(f"{self.entry.name}: version check raised {type(e).__name__}: {e}")
            return VersionCheck(status=VersionCheckStatus.ERROR)

    async def acquire_versioned(self, source: ResolvedSource) -> ResolutionOutcome:
        """Versioned archive; on failure, the same artifact as a single .m file."""
        fields: dict[str, Any] = {"version": source.version, "ambiguous_versions": source.ambiguous_versions}
        single_file = self.target_dir / f"{self.entry.name}.m"
        kind = SourceKind.VERSIONED_ARCHIVE
        failure: tuple[FailureReason, str] | None = None

        temp = self.reserve_temp()
        if temp is None:
            return self.failed(FailureReason.EXTRACTION_FAILED, f"cannot write to {self.target_dir}", **fields)
        try:
            try:
                await self.fetcher.download(source.url, temp)
                _extract_zip(temp, self.target_dir)
            except ExtractionError as e:
                logger.warning(f"{self.entry.name} failed ({e.message}); making attempt assuming non-zipped m-file")
                kind = SourceKind.SINGLE_FILE
                try:
                    shutil.copyfile(temp, single_file)
                except OSError as copy_error:
                    single_file.unlink(missing_ok=True)
                    failure = (FailureReason.EXTRACTION_FAILED, str(copy_error))
            except FetchError as e:
                logger.warning(f"{self.entry.name} failed ({e.message}); making attempt assuming non-zipped m-file")
                kind = SourceKind.SINGLE_FILE
                try:
                    await self.fetcher.download(source.url, single_file)
                except FetchError as retry_error:
                    single_file.unlink(missing_ok=True)
                    failure = (FailureReason.NETWORK_FAILURE, retry_error.message)
        finally:
            cleanup = _remove_temp(temp)

        if failure is not None:
            reason, detail = failure
            return self.failed(reason, detail, source_url=source.url, cleanup=cleanup, **fields)
        return self.outcome(
            OutcomeStatus.INSTALLED,
            source_kind=kind,
            source_url=source.url,
            cleanup=cleanup,
            **fields,
        )

    async def acquire_repository(self, source: ResolvedSource) -> ResolutionOutcome:
        """Default-branch archive of the alternate repository."""
        temp = self.reserve_temp()
        if temp is None:
            return self.failed(FailureReason.EXTRACTION_FAILED, f"cannot write to {self.target_dir}")
        failure: tuple[FailureReason, str] | None = None
        try:
            await self.fetcher.download(source.url, temp)
            _extract_zip(temp, self.target_dir)
        except FetchError as e:
            failure = (FailureReason.NETWORK_FAILURE, e.message)
        except ExtractionError as e:
            failure = (FailureReason.EXTRACTION_FAILED, e.message)
        finally:
            cleanup = _remove_temp(temp)

        if failure is not None:
            reason, detail = failure
            return self.failed(reason, detail, source_url=source.url, cleanup=cleanup)
        return self.outcome(
            OutcomeStatus.VERSION_UNKNOWN_INSTALLED,
            source_kind=SourceKind.REPOSITORY_ARCHIVE,
            source_url=source.url,
            cleanup=cleanup,
        )


async def install_entry(
    entry: CatalogEntry,
    target_dir: Path,
    fetcher: FetcherProtocol,
    settings: LibrarySettings | None = None,
    version_checker: VersionCheckerProtocol | None = None,
) -> ResolutionOutcome:
    """
    Install one catalog entry into target_dir.

    Passing no version_checker disables step 1; the companion bootstrap relies
    on this to keep its recursion one level deep.

    Args:
        entry: Catalog entry to install
        target_dir: Directory owned by this entry (created if missing)
        fetcher: Network access (HttpFetcher or a test double)
        settings: URL layout; defaults to LibrarySettings()
        version_checker: Optional "current version" collaborator

    Returns:
        ResolutionOutcome; this function does not raise for fetch or
        extraction problems

    Example:
        >>> async with HttpFetcher() as fetcher:
        ...     outcome = await install_entry(
        ...         CatalogEntry(name="export_fig", identifier=23629),
        ...         Path("~/fex/export_fig").expanduser(),
        ...         fetcher,
        ...     )
        >>> print(outcome.describe())
        installed (version 96): export_fig
    """
    settings = settings or LibrarySettings()
    run = _EntryInstall(entry, target_dir, fetcher, settings)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return run.failed(FailureReason.EXTRACTION_FAILED, f"cannot create {target_dir}: {e}")

    prefix = ""
    if version_checker is None:
        check = VersionCheck(status=VersionCheckStatus.SKIPPED)
    else:
        check = await run.check_version(version_checker)
        prefix = f"version check failed with status: {check.status.value} | "
    if check.is_current:
        status = OutcomeStatus.INSTALLED
        if check.status is VersionCheckStatus.UP_TO_DATE:
            status = OutcomeStatus.ALREADY_CURRENT
        return run.outcome(status, version=check.version_label or None)
    logger.debug(f"{entry.name}: {check.status.value}")

    logger.info(f"{prefix}downloading: {entry.name}")

    page = ""
    page_error: FetchError | None = None
    try:
        page = await fetcher.fetch_text(run.page_url)
    except ResourceNotFoundError as e:
        return run.failed(FailureReason.UNKNOWN_IDENTIFIER, e.message)
    except FetchError as e:
        logger.warning(f"{entry.name}: could not read catalog page: {e.message}")
        page_error = e

    resolver = SourceResolver(settings)
    source = resolver.resolve(entry, page)
    if source is None:
        if page_error is not None:
            return run.failed(FailureReason.NETWORK_FAILURE, page_error.message)
        return run.failed(FailureReason.NO_RESOLVABLE_SOURCE, "no version or repository marker on catalog page")

    if source.kind is SourceKind.VERSIONED_ARCHIVE:
        return await run.acquire_versioned(source)
    return await run.acquire_repository(source)


def is_companion_present(destination: Path, settings: LibrarySettings) -> bool:
    """True if the companion version checker is already installed under destination."""
    companion_dir = destination / settings.companion.name
    return companion_dir.is_dir() and has_content(companion_dir)


def _finish_entry(
    outcome: ResolutionOutcome,
    install_dir: Path,
    settings: LibrarySettings,
    lock: InstallLock | None,
) -> None:
    """Write the bookmark file and record a fresh install in the lock."""
    name = outcome.entry.name
    if settings.make_shortcut:
        try:
            write_shortcut(install_dir, name, outcome.page_url)
        except OSError as e:
            logger.warning(f"Could not write shortcut for {name}: {e}")

    if lock is not None and outcome.succeeded and outcome.source_url:
        lock.record(outcome, install_dir)


async def bootstrap_companion(
    destination: Path,
    fetcher: FetcherProtocol,
    settings: LibrarySettings,
    lock: InstallLock | None = None,
) -> ResolutionOutcome | None:
    """
    Install the companion version checker if it is not present.

    The nested install runs without a version checker, so it cannot trigger
    another bootstrap. It gets the same bookmark file and lock record as a
    catalog entry.

    Returns:
        Outcome of the companion install, or None if it was already present
    """
    if is_companion_present(destination, settings):
        return None

    companion = settings.companion
    install_dir = destination / companion.name
    logger.info(f"{companion.name} not available - installing...")
    outcome = await install_entry(companion, install_dir, fetcher, settings, version_checker=None)
    if outcome.succeeded:
        _finish_entry(outcome, install_dir, settings, lock)
    else:
        logger.warning(f"Could not install {companion.name}; continuing without it")
    return outcome


async def build_library(
    catalog: Catalog | Iterable[Sequence[Any]],
    destination: Path,
    fetcher: FetcherProtocol,
    settings: LibrarySettings | None = None,
    version_checker: VersionCheckerProtocol | None = None,
    lock: InstallLock | None = None,
    on_outcome: OutcomeCallback | None = None,
) -> LibraryReport:
    """
    Install every catalog entry into its own directory under destination.

    Process:
    1. Validate the catalog (raises CatalogError before any network access)
    2. Bootstrap the companion checker (settings.use_version_check only)
    3. For each entry, in order: install_entry() into its own directory,
       write the bookmark file, record successful installs in the lock

    Args:
        catalog: Catalog or raw rows
        destination: Library root (created if missing)
        fetcher: Network access
        settings: Run options; defaults to LibrarySettings()
        version_checker: Checker to use when settings.use_version_check is set;
            defaults to a LockVersionChecker over the lock
        lock: Install lock; defaults to destination / settings.lock_filename
        on_outcome: Called with each outcome as soon as it is known

    Returns:
        LibraryReport with one outcome per entry, in catalog order
    """
    if not isinstance(catalog, Catalog):
        catalog = Catalog.from_rows(catalog)
    settings = settings or LibrarySettings()

    destination.mkdir(parents=True, exist_ok=True)
    lock = lock if lock is not None else InstallLock(destination / settings.lock_filename)
    report = LibraryReport()

    checker: VersionCheckerProtocol | None = None
    if settings.use_version_check:
        report.companion = await bootstrap_companion(destination, fetcher, settings, lock)
        if report.companion is not None and on_outcome is not None:
            on_outcome(report.companion)
        checker = version_checker or LockVersionChecker(lock, fetcher, destination, settings)

    for entry in catalog:
        install_dir = destination / entry.name
        outcome = await install_entry(entry, install_dir, fetcher, settings, version_checker=checker)
        if install_dir.is_dir():
            _finish_entry(outcome, install_dir, settings, lock)

        logger.info(outcome.describe())
        report.outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)

    logger.info(f"Finished: {len(report.installed)} ok, {len(report.failed)} failed")
    return report
