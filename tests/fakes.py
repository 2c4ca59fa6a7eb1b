"""In-memory collaborators and page/archive builders shared by the tests."""

import io
import zipfile
from pathlib import Path

from fex_library import CatalogEntry
from fex_library import OutcomeStatus
from fex_library import ResolutionOutcome
from fex_library import ResourceNotFoundError
from fex_library import VersionCheck
from fex_library import VersionCheckStatus

PAGE = "https://www.mathworks.com/matlabcentral/fileexchange/{}"
ARCHIVE = "https://www.mathworks.com/matlabcentral/mlc-downloads/downloads/submissions/{}/versions/{}/download/zip"


def make_zip(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def fex_page(identifier: int, *versions: str, repo: str | None = None) -> str:
    """Minimal catalog page with download links for versions and an optional GitHub badge."""
    links = "".join(
        f'<a href="/matlabcentral/mlc-downloads/downloads/submissions/{identifier}/versions/{v}/download/zip">'
        for v in versions
    )
    badge = f'<a class="github" href="https://github.com/{repo}">View on GitHub</a>' if repo else ""
    return f"<html><body>{links}{badge}</body></html>"


def installed_outcome(name: str, identifier: int, version: str | None, source: str = "src") -> ResolutionOutcome:
    return ResolutionOutcome(
        entry=CatalogEntry(name=name, identifier=identifier),
        status=OutcomeStatus.INSTALLED,
        page_url=PAGE.format(identifier),
        version=version,
        source_url=source,
    )


class MockFetcher:
    """In-memory fetcher; unknown pages and artifacts are 404s.

    Artifact values may be bytes, an exception, or a list of those consumed
    one per request.
    """

    def __init__(self, pages=None, artifacts=None):
        self.pages = pages or {}
        self.artifacts = artifacts or {}
        self.page_requests: list[str] = []
        self.downloads: list[str] = []

    async def __aenter__(self) -> "MockFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def fetch_text(self, url: str) -> str:
        self.page_requests.append(url)
        value = self.pages.get(url, ResourceNotFoundError(f"Not found: {url}"))
        if isinstance(value, Exception):
            raise value
        return value

    async def download(self, url: str, destination: Path) -> Path:
        self.downloads.append(url)
        value = self.artifacts.get(url, ResourceNotFoundError(f"Not found: {url}"))
        if isinstance(value, list):
            value = value.pop(0)
        if isinstance(value, Exception):
            raise value
        destination.write_bytes(value)
        return destination


class StaticChecker:
    def __init__(self, status: VersionCheckStatus, label: str = ""):
        self.result = VersionCheck(status=status, version_label=label)
        self.calls: list[tuple[str, int]] = []

    async def check(self, name: str, identifier: int) -> VersionCheck:
        self.calls.append((name, identifier))
        return self.result


class RaisingChecker:
    async def check(self, name: str, identifier: int) -> VersionCheck:
        raise RuntimeError("checker exploded")
