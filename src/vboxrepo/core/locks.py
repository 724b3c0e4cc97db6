from __future__ import annotations

"""
Bounded waiting for dpkg/apt locks.

apt-get fails immediately when another process (unattended-upgrades, a
software center) holds the dpkg or apt lists lock. AptLockWaiter polls the
lock files in fixed increments until they are free or the timeout expires.
"""

import fcntl
import logging
import os
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from vboxrepo.core.errors import LockTimeoutError

logger = logging.getLogger(__name__)


def lock_held(path: Path) -> bool:
    """Return True if another process holds an fcntl lock on path.

    dpkg and apt take F_SETLK write locks, so a non-blocking lockf probe
    detects them. A missing file is never locked.
    """
    try:
        fd = os.open(path, os.O_RDWR)
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.debug(f"Cannot open lock file {path}: {e}")
        return False

    try:
        fcntl.lockf(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        return True
    else:
        fcntl.lockf(fd, fcntl.LOCK_UN)
        return False
    finally:
        os.close(fd)


class AptLockWaiter:
    """Waits until none of the configured lock files is held."""

    def __init__(
        self,
        lock_files: Iterable[str | Path],
        timeout: float = 300.0,
        poll_interval: float = 5.0,
        is_locked: Callable[[Path], bool] = lock_held,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize lock waiter.

        Args:
            lock_files: Lock files to poll
            timeout: Maximum total wait in seconds
            poll_interval: Sleep between polls in seconds
            is_locked: Probe returning True for a held lock
            sleep: Sleep function
        """
        self.lock_files = [Path(p) for p in lock_files]
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.is_locked = is_locked
        self.sleep = sleep

    def held_locks(self) -> list[Path]:
        """Return the lock files currently held."""
        return [path for path in self.lock_files if self.is_locked(path)]

    def wait(self) -> float:
        """Block until all locks are free.

        Returns:
            Seconds spent waiting

        Raises:
            LockTimeoutError: If a lock is still held after the timeout
        """
        waited = 0.0
        while True:
            held = self.held_locks()
            if not held:
                if waited:
                    logger.info(f"Package manager locks released after {waited:.0f}s")
                return waited

            if waited >= self.timeout:
                names = ", ".join(str(p) for p in held)
                raise LockTimeoutError(
                    f"Package manager still locked after {self.timeout:.0f}s: {names}"
                )

            logger.info(
                f"Waiting for package manager lock ({held[0]}), "
                f"{waited:.0f}/{self.timeout:.0f}s elapsed"
            )
            step = min(self.poll_interval, self.timeout - waited)
            self.sleep(step)
            waited += step
