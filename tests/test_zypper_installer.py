"""Tests for the Zypper repository installer."""

import subprocess
from pathlib import Path

import pytest

from vboxrepo.core.distro import DistroInfo, classify
from vboxrepo.core.errors import PackageManagerError
from vboxrepo.core.versions import PackageCandidate
from vboxrepo.plugins.zypper import ZypperInstaller
from vboxrepo.plugins.zypper.parsers import parse_info, parse_search_table

SEARCH_OUTPUT = """\
S | Name           | Summary                  | Type
--+----------------+--------------------------+--------
  | VirtualBox-7.0 | Oracle VirtualBox        | package
i | VirtualBox-7.1 | Oracle VirtualBox        | package
"""

INFO_OUTPUT = """\
Information for package VirtualBox-7.0:
---------------------------------------
Repository     : VirtualBox for openSUSE 15.6
Name           : VirtualBox-7.0
Version        : 7.0.20_163906_openSUSE156-1
Arch           : x86_64

Information for package VirtualBox-7.1:
---------------------------------------
Repository     : VirtualBox for openSUSE 15.6
Name           : VirtualBox-7.1
Version        : 7.1.4_165100_openSUSE156-1
Arch           : x86_64
"""


def make_installer(config, runner, downloader, distro):
    return ZypperInstaller(config, distro, classify(distro), runner, downloader)


def test_parse_search_table():
    assert parse_search_table(SEARCH_OUTPUT) == ["VirtualBox-7.0", "VirtualBox-7.1"]


def test_parse_info():
    assert parse_info(INFO_OUTPUT) == [
        PackageCandidate(name="VirtualBox-7.0", version="7.0.20_163906_openSUSE156-1"),
        PackageCandidate(name="VirtualBox-7.1", version="7.1.4_165100_openSUSE156-1"),
    ]


@pytest.mark.parametrize(
    "distro,tree",
    [
        (DistroInfo(id="opensuse-leap", version_id="15.6"), "openSUSE_Leap_15.6"),
        (
            DistroInfo(id="opensuse-tumbleweed", version_id="20241001",
                       pretty_name="openSUSE Tumbleweed"),
            "openSUSE_Tumbleweed",
        ),
    ],
)
def test_write_repository(config, runner, downloader, distro, tree):
    downloader.fetch_bytes.return_value = b"[virtualbox]\nenabled=1\n"
    installer = make_installer(config, runner, downloader, distro)

    path = installer.write_repository()

    downloader.fetch_bytes.assert_called_once_with(
        f"https://download.virtualbox.org/virtualbox/rpm/{tree}/virtualbox.repo"
    )
    assert path == Path(config.paths.zypper_repo_file)
    assert path.read_bytes() == b"[virtualbox]\nenabled=1\n"


def test_refresh_metadata(config, runner, downloader):
    installer = make_installer(config, runner, downloader, DistroInfo(id="opensuse-leap", version_id="15.6"))
    installer.install_dependencies()
    installer.refresh_metadata()

    # No default dependencies on openSUSE
    assert [c.args[0] for c in runner.run.call_args_list] == [
        ["zypper", "--non-interactive", "--gpg-auto-import-keys", "refresh"],
    ]


def test_list_versions(config, runner, downloader):
    runner.run.side_effect = lambda args, **kwargs: subprocess.CompletedProcess(
        list(args), 0, stdout=SEARCH_OUTPUT, stderr=""
    )
    runner.output.return_value = INFO_OUTPUT
    installer = make_installer(config, runner, downloader, DistroInfo(id="opensuse-leap", version_id="15.6"))

    candidates = installer.list_versions()

    assert [c.name for c in candidates] == ["VirtualBox-7.0", "VirtualBox-7.1"]
    assert runner.output.call_args.args[0] == [
        "zypper", "--non-interactive", "--quiet", "info", "VirtualBox-7.0", "VirtualBox-7.1",
    ]


def test_list_versions_no_match(config, runner, downloader):
    """zypper exit code 104 means nothing matched."""
    runner.run.side_effect = lambda args, **kwargs: subprocess.CompletedProcess(
        list(args), 104, stdout="No matching items found.\n", stderr=""
    )
    installer = make_installer(config, runner, downloader, DistroInfo(id="opensuse-leap", version_id="15.6"))

    assert installer.list_versions() == []
    runner.output.assert_not_called()


def test_list_versions_failure(config, runner, downloader):
    runner.run.side_effect = lambda args, **kwargs: subprocess.CompletedProcess(
        list(args), 7, stdout="", stderr="System management is locked"
    )
    installer = make_installer(config, runner, downloader, DistroInfo(id="sles", version_id="15.6"))

    with pytest.raises(PackageManagerError, match="locked"):
        installer.list_versions()
