from __future__ import annotations

"""
APT plugin for vboxrepo.

Provides the Debian/Ubuntu repository installer.
"""

from vboxrepo.plugins.apt.installer import AptInstaller

__all__ = ["AptInstaller"]
