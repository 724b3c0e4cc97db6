from __future__ import annotations

"""
APT repository installer for Debian, Ubuntu and their derivatives.

Only pure Debian and Ubuntu use their native codename (when Oracle publishes
it); every derivative is pointed at the Ubuntu LTS repository.
"""

import logging
from pathlib import Path

from vboxrepo.core.errors import PackageManagerError
from vboxrepo.core.locks import AptLockWaiter
from vboxrepo.core.versions import DpkgComparator, PackageCandidate, VersionComparator
from vboxrepo.plugins.apt.parsers import parse_policy_candidates, parse_search_names
from vboxrepo.plugins.base import RepositoryInstaller, write_descriptor

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptInstaller(RepositoryInstaller):
    """Installer for the Debian family."""

    package_manager = "apt"
    default_package = "virtualbox-7.1"

    def __init__(self, *args, lock_waiter: AptLockWaiter | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        apt = self.config.apt
        self.lock_waiter = lock_waiter or AptLockWaiter(
            apt.lock_files,
            timeout=apt.lock_timeout,
            poll_interval=apt.lock_poll_interval,
        )
        self._architecture: str | None = None

    @property
    def descriptor_path(self) -> Path:
        return Path(self.config.paths.apt_sources_file)

    @property
    def keyring_dir(self) -> Path:
        return Path(self.config.paths.apt_keyring_dir)

    @property
    def signed_by(self) -> Path:
        """Keyring referenced by the sources line (the first configured key)."""
        return self.keyring_dir / self.config.vendor.signing_keys[0].keyring

    def apt_get(self, *args: str) -> None:
        """Run apt-get after waiting for dpkg/apt locks."""
        self.lock_waiter.wait()
        self.runner.run(["apt-get", *args], env=APT_ENV)

    def install_dependencies(self) -> None:
        self.apt_get("update", "-qq")
        deps = self.config.apt.dependencies
        if deps:
            self.apt_get("install", "-y", "-qq", *deps)

    def import_keys(self) -> None:
        """Download the armored Oracle keys and de-armor them into the keyring dir."""
        self.keyring_dir.mkdir(parents=True, exist_ok=True)
        for key in self.config.vendor.signing_keys:
            keyring = self.keyring_dir / key.keyring
            armored = self.downloader.fetch_bytes(key.url)
            self.runner.run(
                ["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)],
                input=armored,
                capture=True,
            )
            keyring.chmod(0o644)
            logger.info(f"Imported {key.url} into {keyring}")

    def resolve_codename(self) -> str:
        """Pick the repository codename for this distribution.

        - debian: native codename if supported, otherwise the Debian fallback
        - ubuntu: native codename if supported, otherwise the Ubuntu LTS
        - anything else: the Ubuntu LTS
        """
        apt = self.config.apt
        codename = self.distro.codename

        if self.distro.id == "debian":
            if codename in apt.supported_debian:
                return codename
            logger.warning(
                f"Debian codename '{codename}' not supported, using {apt.debian_fallback}"
            )
            return apt.debian_fallback

        if self.distro.id == "ubuntu":
            if codename in apt.supported_ubuntu:
                return codename
            logger.warning(
                f"Ubuntu codename '{codename}' not supported, using LTS {apt.ubuntu_lts}"
            )
            return apt.ubuntu_lts

        logger.info(f"Derivative distribution {self.distro.id}, using Ubuntu LTS {apt.ubuntu_lts}")
        return apt.ubuntu_lts

    def architecture(self) -> str:
        """Native dpkg architecture, falling back to the configured one."""
        if self._architecture is None:
            try:
                arch = self.runner.output(["dpkg", "--print-architecture"]).strip()
            except PackageManagerError as e:
                logger.warning(f"Could not determine dpkg architecture: {e}")
                arch = ""
            self._architecture = arch or self.config.apt.architecture
        return self._architecture

    def repository_line(self) -> str:
        return (
            f"deb [arch={self.architecture()} signed-by={self.signed_by}] "
            f"{self.config.vendor.apt_repo_url} {self.resolve_codename()} "
            f"{self.config.apt.component}"
        )

    def write_repository(self) -> Path:
        return write_descriptor(self.descriptor_path, self.repository_line() + "\n")

    def refresh_metadata(self) -> None:
        self.apt_get("update")

    def list_versions(self) -> list[PackageCandidate]:
        pattern = f"^{self.config.vendor.package_pattern}"
        search = self.runner.output(["apt-cache", "search", "--names-only", pattern])
        names = [name for name in parse_search_names(search) if self.matches_pattern(name)]
        if not names:
            logger.info("No VirtualBox packages found in apt metadata")
            return []

        policy = self.runner.output(["apt-cache", "policy", *names])
        return parse_policy_candidates(policy)

    def install_package(self, name: str) -> None:
        self.apt_get("install", "-y", name)

    def comparator(self) -> VersionComparator:
        return DpkgComparator(self.runner)

    def search_hint(self) -> str:
        return "apt-cache search virtualbox"
