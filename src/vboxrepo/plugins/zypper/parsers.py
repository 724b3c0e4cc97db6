from __future__ import annotations

"""
Parsers for zypper output.

zypper search prints a table:

    S | Name           | Summary            | Type
    --+----------------+--------------------+--------
      | VirtualBox-7.1 | Oracle VirtualBox  | package

zypper info prints "Key : Value" blocks, one per package.
"""

import logging

from vboxrepo.core.versions import PackageCandidate

logger = logging.getLogger(__name__)


def parse_search_table(output: str) -> list[str]:
    """Extract package names from zypper search table output."""
    names: list[str] = []
    header_seen = False
    for line in output.splitlines():
        if "|" not in line:
            continue
        columns = [col.strip() for col in line.split("|")]
        if len(columns) < 2:
            continue
        if not header_seen and columns[1] == "Name":
            header_seen = True
            continue
        # Separator row: --+-----
        if set(line.strip()) <= {"-", "+"}:
            continue
        name = columns[1]
        if name and name not in names:
            names.append(name)
    return names


def parse_info(output: str) -> list[PackageCandidate]:
    """Extract Name/Version pairs from zypper info output."""
    candidates: list[PackageCandidate] = []
    name: str | None = None

    for line in output.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if key == "Name":
            name = value
        elif key == "Version" and name:
            candidates.append(PackageCandidate(name=name, version=value))
            name = None

    return candidates
