"""Library settings - Hosts, URL layout and run options.

Apps build a LibrarySettings and pass it in; nothing in the library reads
global configuration.
"""

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator

from .catalog import CatalogEntry
from .default_list import CHECK_VERSION_ENTRY


class LibrarySettings(BaseModel):
    """Run options and upstream URL layout (immutable)."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://www.mathworks.com/matlabcentral/fileexchange/"
    download_base: str = "https://www.mathworks.com/matlabcentral/mlc-downloads/downloads/submissions/"
    repository_host: str = "https://github.com/"

    make_shortcut: bool = True
    use_version_check: bool = False
    # None blocks until the server answers or drops the connection
    timeout: float | None = None

    companion: CatalogEntry = CHECK_VERSION_ENTRY
    lock_filename: str = "fex-library.lock"

    @field_validator("base_url", "download_base", "repository_host")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    def page_url(self, identifier: int) -> str:
        """Catalog page of an entry."""
        return f"{self.base_url}{identifier}"

    def versioned_archive_url(self, identifier: int, version: str) -> str:
        """Download URL of a specific published version."""
        return f"{self.download_base}{identifier}/versions/{version}/download/zip"

    def repository_archive_url(self, repo: str) -> str:
        """Default-branch archive URL of an "owner/repo" repository."""
        return f"{self.repository_host}{repo}/archive/HEAD.zip"
