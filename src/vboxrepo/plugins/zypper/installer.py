from __future__ import annotations

"""Zypper repository installer for openSUSE Leap, Tumbleweed and SLES."""

import logging
from pathlib import Path

from vboxrepo.core.errors import PackageManagerError
from vboxrepo.core.versions import PackageCandidate, SortVComparator, VersionComparator
from vboxrepo.plugins.base import RepositoryInstaller, write_descriptor
from vboxrepo.plugins.rpm.installer import import_rpm_key
from vboxrepo.plugins.zypper.parsers import parse_info, parse_search_table

logger = logging.getLogger(__name__)

ZYPPER = ["zypper", "--non-interactive"]


class ZypperInstaller(RepositoryInstaller):
    """Installer for the openSUSE family."""

    package_manager = "zypper"
    default_package = "VirtualBox-7.1"

    @property
    def descriptor_path(self) -> Path:
        return Path(self.config.paths.zypper_repo_file)

    @property
    def suse_version(self) -> str:
        """Oracle's rpm tree name for this release."""
        if self.distro.is_tumbleweed:
            return "openSUSE_Tumbleweed"
        return f"openSUSE_Leap_{self.distro.version_id}"

    def install_dependencies(self) -> None:
        deps = self.config.zypper.dependencies
        if deps:
            self.runner.run([*ZYPPER, "install", *deps])

    def import_keys(self) -> None:
        import_rpm_key(self.runner, self.downloader, self.config.vendor.rpm_key_url)

    def write_repository(self) -> Path:
        url = self.config.vendor.rpm_repo_file_url(self.suse_version)
        return write_descriptor(self.descriptor_path, self.downloader.fetch_bytes(url))

    def refresh_metadata(self) -> None:
        self.runner.run([*ZYPPER, "--gpg-auto-import-keys", "refresh"])

    def list_versions(self) -> list[PackageCandidate]:
        search = self.runner.run(
            [*ZYPPER, "--quiet", "search", "--type", "package", self.config.vendor.package_pattern],
            check=False,
            capture=True,
        )
        # zypper exits 104 when nothing matches
        if search.returncode == 104:
            return []
        if search.returncode != 0:
            raise PackageManagerError(search.args, search.returncode, search.stderr or "")

        names = [n for n in parse_search_table(search.stdout or "") if self.matches_pattern(n)]
        if not names:
            return []

        info = self.runner.output([*ZYPPER, "--quiet", "info", *names])
        return parse_info(info)

    def install_package(self, name: str) -> None:
        self.runner.run([*ZYPPER, "install", name])

    def comparator(self) -> VersionComparator:
        return SortVComparator(self.runner)
