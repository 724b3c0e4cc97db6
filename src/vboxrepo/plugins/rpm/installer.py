from __future__ import annotations

"""
DNF repository installer for Fedora and RHEL-compatible distributions.

Fedora uses Oracle's rpm/fedora tree, RHEL, CentOS, Rocky, AlmaLinux and
Oracle Linux use rpm/el.
"""

import logging
import tempfile
from pathlib import Path

from vboxrepo.core.downloader import Downloader
from vboxrepo.core.runner import CommandRunner
from vboxrepo.core.versions import PackageCandidate, SortVComparator, VersionComparator
from vboxrepo.plugins.base import RepositoryInstaller, write_descriptor
from vboxrepo.plugins.rpm.parsers import QUERY_FORMAT, case_insensitive_glob, parse_repoquery

logger = logging.getLogger(__name__)


def import_rpm_key(runner: CommandRunner, downloader: Downloader, url: str) -> None:
    """Download an armored key and import it into the rpm database."""
    armored = downloader.fetch_bytes(url)
    with tempfile.NamedTemporaryFile(suffix=".asc") as key_file:
        key_file.write(armored)
        key_file.flush()
        runner.run(["rpm", "--import", key_file.name])
    logger.info(f"Imported rpm key {url}")


class DnfInstaller(RepositoryInstaller):
    """Installer for the Fedora family."""

    package_manager = "dnf"
    default_package = "VirtualBox-7.1"

    @property
    def descriptor_path(self) -> Path:
        return Path(self.config.paths.yum_repo_file)

    @property
    def repo_flavor(self) -> str:
        return "el" if self.classification.flavor == "el" else "fedora"

    def install_dependencies(self) -> None:
        deps = self.config.rpm.dependencies
        if deps:
            self.runner.run(["dnf", "install", "-y", "-q", *deps])

    def import_keys(self) -> None:
        import_rpm_key(self.runner, self.downloader, self.config.vendor.rpm_key_url)

    def write_repository(self) -> Path:
        url = self.config.vendor.rpm_repo_file_url(self.repo_flavor)
        return write_descriptor(self.descriptor_path, self.downloader.fetch_bytes(url))

    def refresh_metadata(self) -> None:
        self.runner.run(["dnf", "-q", "-y", "makecache"])

    def list_versions(self) -> list[PackageCandidate]:
        output = self.runner.output(
            [
                "dnf",
                "-q",
                "repoquery",
                "--latest-limit",
                "1",
                "--queryformat",
                QUERY_FORMAT,
                case_insensitive_glob(self.config.vendor.package_pattern),
            ]
        )
        return [c for c in parse_repoquery(output) if self.matches_pattern(c.name)]

    def install_package(self, name: str) -> None:
        self.runner.run(["dnf", "install", "-y", name])

    def comparator(self) -> VersionComparator:
        return SortVComparator(self.runner)
