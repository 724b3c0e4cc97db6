from __future__ import annotations

"""
Package candidates and native version ordering.

Version strings are opaque: ordering is delegated to the package manager's
own tooling (dpkg --compare-versions, sort -V) and never re-implemented here.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from vboxrepo.core.errors import PackageManagerError
from vboxrepo.core.runner import CommandRunner

logger = logging.getLogger(__name__)


class PackageCandidate(BaseModel):
    """A package name with the install candidate version reported by the package manager."""

    name: str = Field(..., description="Package name (e.g. virtualbox-7.1)")
    version: str = Field(..., description="Candidate version string, opaque")

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


class VersionComparator(ABC):
    """Orders version strings with a package manager's semantics."""

    @abstractmethod
    def latest(self, versions: list[str]) -> str:
        """Return the highest version of a non-empty list."""
        raise NotImplementedError


class DpkgComparator(VersionComparator):
    """Debian ordering via dpkg --compare-versions."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def greater_than(self, left: str, right: str) -> bool:
        """Return True if left sorts after right."""
        result = self.runner.run(
            ["dpkg", "--compare-versions", left, "gt", right], check=False, capture=True
        )
        if result.returncode not in (0, 1):
            raise PackageManagerError(
                ["dpkg", "--compare-versions", left, "gt", right],
                result.returncode,
                result.stderr or "",
            )
        return result.returncode == 0

    def latest(self, versions: list[str]) -> str:
        best = versions[0]
        for candidate in versions[1:]:
            if self.greater_than(candidate, best):
                best = candidate
        return best


class SortVComparator(VersionComparator):
    """Natural version ordering via sort -V (used on RPM based systems)."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def latest(self, versions: list[str]) -> str:
        result = self.runner.run(
            ["sort", "-V"], capture=True, input="\n".join(versions) + "\n"
        )
        ordered = [line for line in (result.stdout or "").splitlines() if line.strip()]
        if not ordered:
            raise PackageManagerError(["sort", "-V"], result.returncode, "no output")
        return ordered[-1]


def pick_latest(
    candidates: list[PackageCandidate], comparator: VersionComparator
) -> PackageCandidate | None:
    """Select the candidate with the highest version.

    Args:
        candidates: Package candidates (may be empty)
        comparator: Native version comparator

    Returns:
        Highest candidate, or None if there are no candidates
    """
    if not candidates:
        return None

    by_version: dict[str, PackageCandidate] = {}
    for candidate in candidates:
        by_version.setdefault(candidate.version, candidate)

    latest_version = comparator.latest(list(by_version))
    logger.debug(f"Latest of {list(by_version)}: {latest_version}")
    return by_version[latest_version]
