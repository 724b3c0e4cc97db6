from __future__ import annotations

"""
vboxrepo - Oracle VirtualBox repository setup

A CLI tool that adds Oracle's VirtualBox package repository to Debian/Ubuntu,
Fedora/RHEL and openSUSE systems and fetches the matching Extension Pack.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Make version accessible
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("vboxrepo")
except PackageNotFoundError:
    # Package not installed yet
    pass
