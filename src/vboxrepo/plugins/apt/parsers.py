from __future__ import annotations

"""
Parsers for apt-cache output.

apt-cache search prints one "name - description" line per package.
apt-cache policy prints one block per package:

    virtualbox-7.1:
      Installed: (none)
      Candidate: 7.1.4-165100~Ubuntu~noble
      Version table:
         7.1.4-165100~Ubuntu~noble 500
"""

import logging

from vboxrepo.core.versions import PackageCandidate

logger = logging.getLogger(__name__)

NO_CANDIDATE = "(none)"


def parse_search_names(output: str) -> list[str]:
    """
    Extract package names from apt-cache search output.

    Example:
        >>> parse_search_names("virtualbox-7.1 - Oracle VM VirtualBox\\n")
        ['virtualbox-7.1']
    """
    names: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        name = line.split(" - ", 1)[0].strip()
        if name and name not in names:
            names.append(name)
    return names


def parse_policy_candidates(output: str) -> list[PackageCandidate]:
    """
    Extract install candidates from apt-cache policy output.

    Packages without a candidate ("(none)") are skipped.
    """
    candidates: list[PackageCandidate] = []
    current: str | None = None

    for line in output.splitlines():
        if not line.strip():
            continue
        # Package header: unindented "name:"
        if line[0] not in (" ", "\t") and line.rstrip().endswith(":"):
            current = line.rstrip()[:-1].strip()
            continue
        stripped = line.strip()
        if current and stripped.startswith("Candidate:"):
            version = stripped.split(":", 1)[1].strip()
            if version and version != NO_CANDIDATE:
                candidates.append(PackageCandidate(name=current, version=version))
            else:
                logger.debug(f"No install candidate for {current}")
            current = None

    return candidates
