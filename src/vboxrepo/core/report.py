from __future__ import annotations

"""Version report written to the invoking user's Downloads folder."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from vboxrepo.core.distro import DistroInfo
from vboxrepo.core.system import InvokingUser
from vboxrepo.core.versions import PackageCandidate

logger = logging.getLogger(__name__)


def render_report(
    distro: DistroInfo,
    candidates: list[PackageCandidate],
    latest: PackageCandidate | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Render the version report text."""
    generated_at = generated_at or datetime.now(timezone.utc)
    name = distro.pretty_name or distro.id
    lines = [
        "VirtualBox packages available from the configured repositories",
        f"Distribution: {name} ({distro.codename or distro.version_id or 'unknown'})",
        f"Generated: {generated_at.isoformat(timespec='seconds')}",
        "",
    ]
    if candidates:
        width = max(len(c.name) for c in candidates)
        lines.extend(f"{c.name.ljust(width)}  {c.version}" for c in candidates)
    else:
        lines.append("No VirtualBox packages found.")
    if latest:
        lines.extend(["", f"Latest: {latest.name} {latest.version}"])
    return "\n".join(lines) + "\n"


def write_report(
    user: InvokingUser,
    filename: str,
    distro: DistroInfo,
    candidates: list[PackageCandidate],
    latest: PackageCandidate | None = None,
    downloads_subdir: str = "Downloads",
) -> Path:
    """Write the version report and hand it to the invoking user.

    Returns:
        Path of the written report
    """
    target_dir = user.downloads_dir(downloads_subdir)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / filename
    path.write_text(render_report(distro, candidates, latest))
    user.give_ownership(path)
    logger.info(f"Version report written to {path}")
    return path
