from __future__ import annotations

"""Privilege checks and invoking-user helpers."""

import logging
import os
import pwd
from dataclasses import dataclass
from pathlib import Path

from vboxrepo.core.errors import NotRootError

logger = logging.getLogger(__name__)


def is_root() -> bool:
    """Return True if the effective UID is root."""
    return os.geteuid() == 0


def require_root() -> None:
    """Abort unless running as root.

    Raises:
        NotRootError: If the effective UID is not 0
    """
    if not is_root():
        raise NotRootError("Please run this command as root (use sudo)")


@dataclass(frozen=True)
class InvokingUser:
    """The user on whose behalf the tool runs (the sudo caller, if any)."""

    name: str
    home: Path
    uid: int | None = None
    gid: int | None = None

    def downloads_dir(self, subdir: str = "Downloads") -> Path:
        return self.home / subdir

    def give_ownership(self, path: Path) -> None:
        """Hand a file written as root back to the invoking user.

        No-op when not root or when the user has no passwd entry.
        """
        if self.uid is None or self.gid is None or not is_root():
            return
        try:
            os.chown(path, self.uid, self.gid)
        except OSError as e:
            logger.warning(f"Could not change ownership of {path} to {self.name}: {e}")


def invoking_user(home_base: str = "/home") -> InvokingUser:
    """Resolve the invoking user from SUDO_USER, then USER.

    Args:
        home_base: Home root used when the user has no passwd entry

    Returns:
        InvokingUser
    """
    name = os.environ.get("SUDO_USER") or os.environ.get("USER") or ""
    if not name:
        try:
            name = pwd.getpwuid(os.getuid()).pw_name
        except KeyError:
            name = "root"

    try:
        entry = pwd.getpwnam(name)
    except KeyError:
        logger.debug(f"No passwd entry for {name}, assuming {home_base}/{name}")
        return InvokingUser(name=name, home=Path(home_base) / name)

    return InvokingUser(
        name=name,
        home=Path(entry.pw_dir),
        uid=entry.pw_uid,
        gid=entry.pw_gid,
    )
