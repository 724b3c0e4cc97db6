from __future__ import annotations

"""
RPM/DNF plugin for vboxrepo.

Provides the Fedora/RHEL repository installer.
"""

from vboxrepo.plugins.rpm.installer import DnfInstaller, import_rpm_key

__all__ = ["DnfInstaller", "import_rpm_key"]
