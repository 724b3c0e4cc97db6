from __future__ import annotations

"""
Installer plugins for vboxrepo.

One installer per distribution family; get_installer dispatches on the
classification of the running system.
"""

from vboxrepo.core.config import GlobalConfig
from vboxrepo.core.distro import DistroClassification, DistroFamily, DistroInfo
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.errors import UnsupportedDistroError
from vboxrepo.core.runner import CommandRunner
from vboxrepo.plugins.apt import AptInstaller
from vboxrepo.plugins.base import RepositoryInstaller
from vboxrepo.plugins.rpm import DnfInstaller
from vboxrepo.plugins.zypper import ZypperInstaller

INSTALLERS: dict[DistroFamily, type[RepositoryInstaller]] = {
    DistroFamily.DEBIAN: AptInstaller,
    DistroFamily.FEDORA: DnfInstaller,
    DistroFamily.OPENSUSE: ZypperInstaller,
}


def get_installer(
    config: GlobalConfig,
    distro: DistroInfo,
    classification: DistroClassification,
    runner: CommandRunner,
    downloader: Downloader,
) -> RepositoryInstaller:
    """Return the installer for a classified distribution.

    Raises:
        UnsupportedDistroError: If the family has no installer
    """
    installer_cls = INSTALLERS.get(classification.family)
    if installer_cls is None:
        raise UnsupportedDistroError(distro.id)
    return installer_cls(config, distro, classification, runner, downloader)


__all__ = [
    "AptInstaller",
    "DnfInstaller",
    "INSTALLERS",
    "RepositoryInstaller",
    "ZypperInstaller",
    "get_installer",
]
