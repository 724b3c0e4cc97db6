from __future__ import annotations

"""
VirtualBox Extension Pack retrieval.

The trimmed body of Oracle's LATEST-STABLE.TXT marker is the authoritative
version; the archive URL is built from it by plain substitution.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from packaging.version import InvalidVersion, Version

from vboxrepo.core.config import ExtpackConfig, VendorConfig
from vboxrepo.core.downloader import Downloader, ProgressCallback
from vboxrepo.core.errors import DownloadError
from vboxrepo.core.system import InvokingUser

logger = logging.getLogger(__name__)


@dataclass
class ExtensionPack:
    """A resolved Extension Pack download."""

    version: str
    url: str
    path: Path

    @property
    def install_command(self) -> str:
        return f'sudo VBoxManage extpack install --replace "{self.path}"'


def validate_version(text: str) -> str:
    """Return the trimmed marker body if it parses as a version.

    Raises:
        DownloadError: If the body is empty or not a version (e.g. an HTML error page)
    """
    version = text.strip()
    if not version:
        raise DownloadError("Latest version marker is empty")
    try:
        Version(version)
    except InvalidVersion:
        raise DownloadError(f"Latest version marker is not a version: {version[:40]!r}")
    return version


class ExtensionPackDownloader:
    """Downloads the Extension Pack into the invoking user's Downloads folder."""

    def __init__(
        self,
        downloader: Downloader,
        vendor: VendorConfig,
        extpack_config: ExtpackConfig,
        user: InvokingUser,
    ):
        self.downloader = downloader
        self.vendor = vendor
        self.extpack_config = extpack_config
        self.user = user

    @property
    def target_dir(self) -> Path:
        return self.user.downloads_dir(self.extpack_config.downloads_subdir)

    def latest_version(self) -> str:
        """Fetch and validate the latest stable version.

        Falls back to extpack.fallback_version (if configured) when the
        marker cannot be fetched or is not a version.
        """
        url = self.vendor.latest_marker_url
        try:
            return validate_version(self.downloader.fetch_text(url))
        except DownloadError as e:
            fallback = self.extpack_config.fallback_version
            if not fallback:
                raise
            logger.warning(f"Unable to detect latest VirtualBox version ({e}), using {fallback}")
            return validate_version(fallback)

    def resolve(self, version: str | None = None) -> ExtensionPack:
        """Build the download URL and destination path for a version."""
        version = validate_version(version) if version else self.latest_version()
        url = self.vendor.extpack_url(version)
        return ExtensionPack(version=version, url=url, path=self.target_dir / url.rsplit("/", 1)[-1])

    def download(
        self, version: str | None = None, progress: ProgressCallback | None = None
    ) -> ExtensionPack:
        """Download the Extension Pack.

        Raises:
            DownloadError: If the marker or the archive cannot be fetched
        """
        pack = self.resolve(version)
        self.target_dir.mkdir(parents=True, exist_ok=True)
        self.user.give_ownership(self.target_dir)

        self.downloader.download_file(pack.url, pack.path, progress=progress)
        self.user.give_ownership(pack.path)
        logger.info(f"Extension Pack {pack.version} saved to {pack.path}")
        return pack
