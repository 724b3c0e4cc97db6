from __future__ import annotations

"""Parsers for dnf repoquery output."""

import logging

from vboxrepo.core.versions import PackageCandidate

logger = logging.getLogger(__name__)

QUERY_FORMAT = "%{name} %{evr}\n"


def parse_repoquery(output: str) -> list[PackageCandidate]:
    """
    Parse "name evr" lines produced with QUERY_FORMAT.

    dnf 4 appends its own newline after every record, so blank lines are
    ignored. The first record per name wins (one per architecture may appear).

    Example:
        >>> parse_repoquery("VirtualBox-7.1 7.1.4_165100_fedora40-1\\n")
        [PackageCandidate(name='VirtualBox-7.1', version='7.1.4_165100_fedora40-1')]
    """
    candidates: dict[str, PackageCandidate] = {}
    for line in output.splitlines():
        parts = line.split()
        if not parts:
            continue
        if len(parts) != 2:
            logger.warning(f"Unexpected repoquery line: {line!r}")
            continue
        name, evr = parts
        candidates.setdefault(name, PackageCandidate(name=name, version=evr))
    return list(candidates.values())


def case_insensitive_glob(pattern: str) -> str:
    """
    Turn a literal name prefix into a case-insensitive dnf glob.

    Example:
        >>> case_insensitive_glob("vbox")
        '[vV][bB][oO][xX]*'
    """
    parts = []
    for char in pattern:
        if char.isalpha():
            parts.append(f"[{char.lower()}{char.upper()}]")
        else:
            parts.append(char)
    return "".join(parts) + "*"
