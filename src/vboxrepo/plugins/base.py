"""
Base installer plugin interface for vboxrepo.

This module defines the abstract base class for repository installer plugins.
Each distribution family (APT, DNF, Zypper) implements its own installer.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Tuple

from vboxrepo.core.config import GlobalConfig
from vboxrepo.core.distro import DistroClassification, DistroInfo
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.runner import CommandRunner
from vboxrepo.core.versions import PackageCandidate, VersionComparator, pick_latest

logger = logging.getLogger(__name__)


def write_descriptor(path: Path, content: str | bytes, mode: int = 0o644) -> Path:
    """Atomically replace path with content.

    The file is fully rewritten on every call, so repeated runs leave it
    byte-identical.

    Args:
        path: Destination file
        content: Text or bytes to write
        mode: Permission bits of the final file

    Returns:
        The destination path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        tmp_path.chmod(mode)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Wrote {path}")
    return path


class RepositoryInstaller(ABC):
    """Abstract base class for repository installers.

    Each distribution family must implement this interface to install its
    prerequisites, import the vendor key, write the repository descriptor,
    refresh metadata and query candidate versions.
    """

    #: Package manager name shown to the user
    package_manager: str = ""
    #: Package suggested when no candidate list is available
    default_package: str = ""

    def __init__(
        self,
        config: GlobalConfig,
        distro: DistroInfo,
        classification: DistroClassification,
        runner: CommandRunner,
        downloader: Downloader,
    ):
        """Initialize installer plugin.

        Args:
            config: Global configuration
            distro: Detected distribution
            classification: Classification of the distribution
            runner: External command runner
            downloader: HTTP downloader
        """
        self.config = config
        self.distro = distro
        self.classification = classification
        self.runner = runner
        self.downloader = downloader

    def steps(self) -> List[Tuple[str, Callable[[], object]]]:
        """Ordered repository setup steps.

        Key import comes before the descriptor so the first metadata refresh
        can verify signatures.
        """
        return [
            ("Installing required dependencies", self.install_dependencies),
            ("Importing Oracle signing key", self.import_keys),
            ("Adding VirtualBox repository", self.write_repository),
            ("Refreshing package metadata", self.refresh_metadata),
        ]

    @property
    @abstractmethod
    def descriptor_path(self) -> Path:
        """Canonical location of the repository descriptor."""
        raise NotImplementedError

    @abstractmethod
    def install_dependencies(self) -> None:
        """Install packages the setup needs (gnupg, certificates, ...)."""
        raise NotImplementedError

    @abstractmethod
    def import_keys(self) -> None:
        """Import Oracle's public signing key(s)."""
        raise NotImplementedError

    @abstractmethod
    def write_repository(self) -> Path:
        """Write the repository descriptor, overwriting prior content.

        Returns:
            Path of the written descriptor
        """
        raise NotImplementedError

    @abstractmethod
    def refresh_metadata(self) -> None:
        """Refresh the package manager's metadata cache."""
        raise NotImplementedError

    @abstractmethod
    def list_versions(self) -> List[PackageCandidate]:
        """Return VirtualBox packages with their install candidate versions."""
        raise NotImplementedError

    @abstractmethod
    def install_package(self, name: str) -> None:
        """Install a package by name."""
        raise NotImplementedError

    @abstractmethod
    def comparator(self) -> VersionComparator:
        """Native version comparator of this package manager."""
        raise NotImplementedError

    def install_hint(self, package: str | None = None) -> str:
        """Command the operator can run to install VirtualBox manually."""
        return f"sudo {self.package_manager} install {package or self.default_package}"

    def search_hint(self) -> str:
        """Command the operator can run to see available versions."""
        return f"{self.package_manager} search virtualbox"

    def latest_candidate(
        self, candidates: List[PackageCandidate] | None = None
    ) -> PackageCandidate | None:
        """Return the highest-versioned candidate, or None if nothing matched.

        Args:
            candidates: Already queried candidates (queried via list_versions if None)
        """
        if candidates is None:
            candidates = self.list_versions()
        return pick_latest(candidates, self.comparator())

    def matches_pattern(self, name: str) -> bool:
        """Return True if name matches the vendor package name pattern."""
        return name.lower().startswith(self.config.vendor.package_pattern.lower())
