from __future__ import annotations

"""
Zypper plugin for vboxrepo.

Provides the openSUSE repository installer.
"""

from vboxrepo.plugins.zypper.installer import ZypperInstaller

__all__ = ["ZypperInstaller"]
