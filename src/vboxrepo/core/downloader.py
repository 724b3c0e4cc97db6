from __future__ import annotations

"""
HTTP download manager.

All remote resources (signing keys, vendor .repo files, the LATEST-STABLE
marker and the Extension Pack) are fetched through Downloader, which applies
proxy and SSL settings, retries with exponential backoff, and writes files
atomically.
"""

import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

import requests
from requests.utils import should_bypass_proxies

from vboxrepo import __version__
from vboxrepo.core.config import DownloadConfig, ProxyConfig, SSLConfig
from vboxrepo.core.errors import DownloadError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int | None], None]


class Downloader:
    """Download manager using the requests library."""

    def __init__(
        self,
        download_config: DownloadConfig | None = None,
        proxy_config: ProxyConfig | None = None,
        ssl_config: SSLConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize downloader.

        Args:
            download_config: Download configuration (timeout, retries, backoff)
            proxy_config: Optional proxy configuration
            ssl_config: Optional SSL/TLS configuration
            sleep: Sleep function used between retries
        """
        self.download_config = download_config or DownloadConfig()
        self.proxy_config = proxy_config
        self.ssl_config = ssl_config
        self.sleep = sleep

        self.session = self._setup_session()

    def _setup_session(self) -> requests.Session:
        """Setup requests session with proxy and SSL configuration.

        Returns:
            Configured requests session
        """
        session = requests.Session()
        session.headers.update({"User-Agent": f"vboxrepo/{__version__}"})

        if self.proxy_config:
            proxies = {}
            if self.proxy_config.http_proxy:
                proxies["http"] = self.proxy_config.http_proxy
            if self.proxy_config.https_proxy:
                proxies["https"] = self.proxy_config.https_proxy
            session.proxies.update(proxies)

            if self.proxy_config.username and self.proxy_config.password:
                session.auth = (self.proxy_config.username, self.proxy_config.password)

        if self.ssl_config:
            if not self.ssl_config.verify:
                session.verify = False
            elif self.ssl_config.ca_bundle:
                session.verify = self.ssl_config.ca_bundle

        return session

    def _proxies_for(self, url: str) -> dict[str, None] | None:
        """Per-request proxy override that bypasses the session proxies for no_proxy hosts."""
        no_proxy = self.proxy_config.no_proxy if self.proxy_config else None
        if no_proxy and should_bypass_proxies(url, no_proxy=no_proxy):
            # None values drop the session proxies when requests merges settings
            return {"http": None, "https": None}
        return None

    def _backoff(self, attempt: int) -> float:
        return self.download_config.backoff_factor * (2**attempt)

    def _with_retries(self, url: str, action: Callable[[], object]) -> object:
        """Run action, retrying on request errors.

        Raises:
            DownloadError: After the last attempt fails, or on a local OSError
        """
        attempts = self.download_config.retry_attempts + 1
        for attempt in range(attempts):
            try:
                return action()
            except requests.RequestException as e:
                if attempt < attempts - 1:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"Download failed (attempt {attempt + 1}/{attempts}): {e}; "
                        f"retrying in {delay:.1f}s"
                    )
                    self.sleep(delay)
                    continue
                raise DownloadError(f"Failed to download {url} after {attempts} attempt(s): {e}")
            except OSError as e:
                # Local write errors (disk full, permissions) are not retried
                raise DownloadError(f"Failed to save {url}: {e}")

        # retry_attempts is validated >= 0, so the loop always runs
        raise DownloadError(f"Failed to download {url}")

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch a small resource into memory.

        Raises:
            DownloadError: On HTTP or network errors after retries
        """

        def _get() -> bytes:
            response = self.session.get(
                url, timeout=self.download_config.timeout, proxies=self._proxies_for(url)
            )
            response.raise_for_status()
            return response.content

        logger.debug(f"Fetching {url}")
        return self._with_retries(url, _get)

    def fetch_text(self, url: str) -> str:
        """Fetch a small text resource."""
        return self.fetch_bytes(url).decode("utf-8", errors="replace")

    def download_file(
        self, url: str, dest: Path, progress: ProgressCallback | None = None
    ) -> Path:
        """Download a file with retry, writing atomically to dest.

        Args:
            url: Source URL
            dest: Destination path (parent directories are created)
            progress: Optional callback(bytes_written, total_bytes)

        Returns:
            Path to downloaded file

        Raises:
            DownloadError: On HTTP or network errors after retries, or local write errors
        """

        def _get() -> Path:
            dest.parent.mkdir(parents=True, exist_ok=True)
            response = self.session.get(
                url,
                stream=True,
                timeout=self.download_config.timeout,
                proxies=self._proxies_for(url),
            )
            with response:
                response.raise_for_status()

                total = response.headers.get("Content-Length")
                total_bytes = int(total) if total and total.isdigit() else None

                # Download to temporary file first
                fd, tmp_name = tempfile.mkstemp(dir=dest.parent, suffix=".part")
                tmp_path = Path(tmp_name)
                try:
                    with os.fdopen(fd, "wb") as tmp_file:
                        written = 0
                        for chunk in response.iter_content(chunk_size=65536):
                            if not chunk:
                                continue
                            tmp_file.write(chunk)
                            written += len(chunk)
                            if progress:
                                progress(written, total_bytes)
                    # Move to final destination
                    tmp_path.replace(dest)
                except BaseException:
                    tmp_path.unlink(missing_ok=True)
                    raise
            return dest

        logger.info(f"Downloading {url} -> {dest}")
        return self._with_retries(url, _get)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> Downloader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
