"""HTTP fetcher - httpx-based implementation of FetcherProtocol.

Every failure is mapped onto the library's two fetch errors:
ResourceNotFoundError for HTTP 404, FetchError for everything else. There is
no retry; callers move on to the next resolution strategy instead.
"""

import logging
from pathlib import Path
from types import TracebackType

import httpx

from .exceptions import FetchError
from .exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)

USER_AGENT = "fex-library/0.1.0"


class HttpFetcher:
    """
    Fetch catalog pages and artifacts over HTTP.

    Redirects are followed (File Exchange serves GitHub-hosted entries via a
    redirect). Use as an async context manager, or pass in a client you own.

    Example:
        >>> async with HttpFetcher(timeout=None) as fetcher:
        ...     page = await fetcher.fetch_text("https://www.mathworks.com/matlabcentral/fileexchange/23629")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def fetch_text(self, url: str) -> str:
        """GET url and return the decoded body."""
        logger.debug(f"GET {url}")
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} failed: {e}", context={"url": url}) from e

        _raise_for_status(response, url)
        return response.text

    async def download(self, url: str, destination: Path) -> Path:
        """Stream url into destination; a partial file is removed on failure."""
        logger.debug(f"GET {url} -> {destination}")
        try:
            async with self.client.stream("GET", url) as response:
                _raise_for_status(response, url)
                with open(destination, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Download of {url} failed: {e}", context={"url": url}) from e
        except FetchError:
            destination.unlink(missing_ok=True)
            raise
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Could not write {destination}: {e}", context={"url": url}) from e
        return destination


def _raise_for_status(response: httpx.Response, url: str) -> None:
    if response.status_code == httpx.codes.NOT_FOUND:
        raise ResourceNotFoundError(f"Not found: {url}", context={"url": url, "status": 404})
    if response.is_error:
        raise FetchError(
            f"HTTP {response.status_code} from {url}",
            context={"url": url, "status": response.status_code},
        )
