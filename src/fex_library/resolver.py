"""Source resolver - Pick the download URL for a catalog entry.

Resolution is pure: it looks at the catalog page text (already fetched) and
the entry, and returns where to download from. Fetching and unpacking live
in the installer.

Resolution order:
1. Version marker on the page -> versioned archive
2. Repository marker on the page (or the entry's alternate_repo) -> repository archive
3. Nothing -> None (caller falls back to manual installation)
"""

import logging
import re

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .catalog import CatalogEntry
from .outcome import SourceKind
from .settings import LibrarySettings

logger = logging.getLogger(__name__)

_REPO_LINK = re.compile(
    r"github\.com/(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?\.?(?=[\"'/?#<\s]|$)"
)

# The "View on GitHub" badge File Exchange renders for GitHub-hosted entries
_ANCHOR = re.compile(r"<a\b(?P<attrs>[^>]*)>(?P<text>(?:(?!<a\b).)*?)</a>", re.IGNORECASE | re.DOTALL)
_BADGE_CLASS = re.compile(r"class\s*=\s*[\"'][^\"']*\bgithub\b", re.IGNORECASE)

# Owner path segments on github.com that are site pages, not accounts
_NON_OWNERS = {"about", "features", "login", "marketplace", "orgs", "pricing", "site", "sponsors", "topics"}


class ResolvedSource(BaseModel):
    """Concrete download source for one entry."""

    model_config = ConfigDict(frozen=True)

    kind: SourceKind
    url: str
    version: str | None = None
    repo: str | None = None
    ambiguous_versions: list[str] = Field(default_factory=list)


def find_version_markers(page: str, identifier: int) -> list[str]:
    """Return the version markers for identifier, in page order.

    A marker is the "submissions/<identifier>/versions/<version>/download"
    path the catalog page embeds in its download link.
    """
    pattern = re.compile(rf"submissions/{identifier}/versions/(\d+)/download")
    return pattern.findall(page)


def _repo_in(text: str) -> str | None:
    for match in _REPO_LINK.finditer(text):
        owner = match.group("owner")
        if owner.lower() in _NON_OWNERS:
            continue
        return f"{owner}/{match.group('repo')}"
    return None


def _is_badge(attrs: str, text: str) -> bool:
    if _BADGE_CLASS.search(attrs):
        return True
    return "view on github" in " ".join(text.split()).lower()


def find_repository_marker(page: str) -> str | None:
    """Return the "owner/repo" the page's GitHub badge points at.

    Links in the description (dependencies, forks) are only used when the
    page carries no badge, and then the first one wins.
    """
    for anchor in _ANCHOR.finditer(page):
        if _is_badge(anchor.group("attrs"), anchor.group("text")):
            repo = _repo_in(anchor.group("attrs"))
            if repo is not None:
                return repo
    return _repo_in(page)


class SourceResolver:
    """
    Resolve catalog entries to download sources (with injected settings).

    Example:
        >>> resolver = SourceResolver(LibrarySettings())
        >>> page = '<a href="/matlabcentral/mlc-downloads/downloads/submissions/12345/versions/7/download/zip">'
        >>> resolver.resolve(CatalogEntry(name="widget", identifier=12345), page).url
        'https://www.mathworks.com/matlabcentral/mlc-downloads/downloads/submissions/12345/versions/7/download/zip'
    """

    def __init__(self, settings: LibrarySettings):
        self.settings = settings

    def resolve(self, entry: CatalogEntry, page: str) -> ResolvedSource | None:
        """
        Resolve entry to a download source.

        Args:
            entry: Catalog entry
            page: Catalog page text ("" when the page could not be fetched)

        Returns:
            ResolvedSource, or None when neither marker is available
        """
        source = self.resolve_versioned(entry, page)
        if source is not None:
            return source
        return self.resolve_repository(entry, page)

    def resolve_versioned(self, entry: CatalogEntry, page: str) -> ResolvedSource | None:
        """Versioned archive from the first version marker on the page."""
        markers = find_version_markers(page, entry.identifier)
        if not markers:
            return None

        # First occurrence wins, even if a later marker is higher
        version = markers[0]
        others = sorted(set(markers) - {version}, key=markers.index)
        if others:
            logger.warning(
                f"{entry.name}: multiple versions on catalog page ({', '.join([version, *others])}), using {version}"
            )

        url = self.settings.versioned_archive_url(entry.identifier, version)
        logger.debug(f"{entry.name}: resolved version {version} -> {url}")
        return ResolvedSource(
            kind=SourceKind.VERSIONED_ARCHIVE,
            url=url,
            version=version,
            ambiguous_versions=others,
        )

    def resolve_repository(self, entry: CatalogEntry, page: str) -> ResolvedSource | None:
        """Default-branch archive of the page's repository marker or the entry's alternate_repo."""
        repo = find_repository_marker(page)
        if repo is None:
            repo = entry.alternate_repo
            if repo is None:
                return None
            logger.debug(f"{entry.name}: no repository marker on page, using catalog reference {repo}")

        url = self.settings.repository_archive_url(repo)
        logger.debug(f"{entry.name}: resolved repository {repo} -> {url}")
        return ResolvedSource(kind=SourceKind.REPOSITORY_ARCHIVE, url=url, repo=repo)
