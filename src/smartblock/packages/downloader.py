"""Archive downloader with explicit redirect handling and progress tracking.

This module streams a remote file to disk. Redirects are followed by hand so
that the redirect budget and cycle detection are enforced here rather than
inside ``requests``.
"""

from pathlib import Path
from typing import Optional, Set
from urllib.parse import urljoin, urlparse

import requests
from tqdm import tqdm

from smartblock.errors import AgentError

# Redirect budget for a single fetch
MAX_REDIRECTS = 5


class NetworkError(AgentError):
    """Raised when a download fails at the transport or HTTP level."""

    status_code = 502


class HttpError(NetworkError):
    """Raised when the server answers with a non-redirect, non-200 status."""

    def __init__(self, status: int, url: str):
        super().__init__(f"HTTP error {status} while downloading {url}")
        self.status = status
        self.url = url


class TooManyRedirectsError(NetworkError):
    """Raised when the redirect budget is exhausted."""

    pass


class CyclicRedirectError(NetworkError):
    """Raised when a redirect chain revisits a URL."""

    pass


class InsecureUrlError(NetworkError):
    """Raised when a fetch or one of its redirects leaves https."""

    pass


class PackageDownloader:
    """Downloads files over HTTPS, following a bounded chain of redirects."""

    def __init__(
        self,
        chunk_size: int = 8192,
        timeout: float = 60,
        max_redirects: int = MAX_REDIRECTS,
        show_progress: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """Initialize downloader.

        Args:
            chunk_size: Size of chunks streamed to disk
            timeout: Connect/read timeout in seconds for each request
            max_redirects: Number of redirects allowed per fetch
            show_progress: Whether to show a tqdm progress bar
            session: Optional requests session (a fresh one is used otherwise)
        """
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.show_progress = show_progress
        self.session = session or requests.Session()

    def download(self, url: str, dest_path: Path) -> Path:
        """Download ``url`` to ``dest_path``.

        Redirect statuses (300-399) carrying a Location header are followed,
        resolving relative locations against the current URL. Every hop must
        stay on https. The destination file only exists after this method
        returns successfully.

        Args:
            url: URL to download from
            dest_path: Destination file path

        Returns:
            Path to the downloaded file

        Raises:
            TooManyRedirectsError: If more than ``max_redirects`` redirects occur
            CyclicRedirectError: If a URL is visited twice
            InsecureUrlError: If the URL or any redirect target is not https
            HttpError: On any other non-200 status
            NetworkError: On transport failures
        """
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            return self._fetch(url, dest_path)
        except NetworkError:
            self._discard(dest_path)
            raise

    def _fetch(self, url: str, dest_path: Path) -> Path:
        visited: Set[str] = set()
        redirects_left = self.max_redirects
        current_url = url

        while True:
            if urlparse(current_url).scheme != "https":
                raise InsecureUrlError(f"Refusing non-https URL {current_url}")
            if current_url in visited:
                raise CyclicRedirectError(f"Cyclic redirect detected at {current_url}")
            visited.add(current_url)

            try:
                response = self.session.get(
                    current_url,
                    stream=True,
                    timeout=self.timeout,
                    allow_redirects=False,
                )
            except requests.RequestException as e:
                raise NetworkError(f"Failed to download {current_url}: {e}")

            try:
                location = response.headers.get("location")
                if 300 <= response.status_code < 400 and location:
                    if redirects_left <= 0:
                        raise TooManyRedirectsError(
                            f"Too many redirects (limit {self.max_redirects}) while downloading {url}"
                        )
                    redirects_left -= 1
                    current_url = urljoin(current_url, location)
                    continue

                if response.status_code != 200:
                    raise HttpError(response.status_code, current_url)

                self._write_body(response, current_url, dest_path)
                return dest_path
            finally:
                response.close()

    def _write_body(self, response: requests.Response, url: str, dest_path: Path) -> None:
        """Stream the response body to ``dest_path``, removing it on any failure."""
        total_size = int(response.headers.get("content-length", 0) or 0)

        progress_bar = None
        if self.show_progress and total_size > 0:
            filename = Path(urlparse(url).path).name
            progress_bar = tqdm(
                total=total_size,
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                desc=f"Downloading {filename}",
            )

        try:
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        if progress_bar:
                            progress_bar.update(len(chunk))
                f.flush()
        except requests.RequestException as e:
            self._discard(dest_path)
            raise NetworkError(f"Failed to download {url}: {e}")
        except BaseException:
            self._discard(dest_path)
            raise
        finally:
            if progress_bar:
                progress_bar.close()

    @staticmethod
    def _discard(dest_path: Path) -> None:
        dest_path.unlink(missing_ok=True)
