"""Tests for Extension Pack retrieval."""

from unittest.mock import Mock

import pytest

from vboxrepo.core.config import ExtpackConfig, VendorConfig
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.errors import DownloadError
from vboxrepo.core.extpack import ExtensionPackDownloader, validate_version


@pytest.fixture
def http():
    mock = Mock(spec=Downloader)
    mock.download_file.side_effect = lambda url, dest, progress=None: dest
    return mock


def make_downloader(http, user, **extpack):
    return ExtensionPackDownloader(http, VendorConfig(), ExtpackConfig(**extpack), user)


def test_validate_version():
    assert validate_version(" 7.1.6\n") == "7.1.6"

    with pytest.raises(DownloadError, match="empty"):
        validate_version("  \n")

    with pytest.raises(DownloadError, match="not a version"):
        validate_version("<html>Not Found</html>")


def test_resolve_embeds_marker_version(http, user):
    """A marker of 7.1.6 appears verbatim in the path segment and filename."""
    http.fetch_text.return_value = "7.1.6\n"

    pack = make_downloader(http, user).resolve()

    assert pack.version == "7.1.6"
    assert pack.url == (
        "https://download.virtualbox.org/virtualbox/7.1.6/"
        "Oracle_VirtualBox_Extension_Pack-7.1.6.vbox-extpack"
    )
    assert pack.url.split("/")[-2] == "7.1.6"
    assert pack.path == user.home / "Downloads" / "Oracle_VirtualBox_Extension_Pack-7.1.6.vbox-extpack"
    http.fetch_text.assert_called_once_with(
        "https://download.virtualbox.org/virtualbox/LATEST-STABLE.TXT"
    )


def test_download_creates_downloads_dir(http, user):
    http.fetch_text.return_value = "7.1.6"

    pack = make_downloader(http, user).download()

    assert (user.home / "Downloads").is_dir()
    http.download_file.assert_called_once_with(pack.url, pack.path, progress=None)
    assert pack.install_command == f'sudo VBoxManage extpack install --replace "{pack.path}"'


def test_download_explicit_version_skips_marker(http, user):
    pack = make_downloader(http, user).download("7.0.20")

    assert pack.version == "7.0.20"
    http.fetch_text.assert_not_called()


def test_download_failure_is_fatal(http, user):
    http.fetch_text.return_value = "7.1.6"
    http.download_file.side_effect = DownloadError("Failed to download")

    with pytest.raises(DownloadError):
        make_downloader(http, user).download()


def test_marker_failure_without_fallback(http, user):
    http.fetch_text.side_effect = DownloadError("connection refused")

    with pytest.raises(DownloadError, match="connection refused"):
        make_downloader(http, user).latest_version()


def test_marker_failure_with_fallback(http, user):
    http.fetch_text.side_effect = DownloadError("connection refused")

    assert make_downloader(http, user, fallback_version="7.1.6").latest_version() == "7.1.6"
