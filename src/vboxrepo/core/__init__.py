"""
Core functionality for vboxrepo.

This package provides configuration, distribution detection, command
execution, downloads and output handling shared by the installer plugins.
"""

from vboxrepo.core.config import (
    AptConfig,
    ConfigLoader,
    DownloadConfig,
    ExtpackConfig,
    GlobalConfig,
    PathsConfig,
    ProxyConfig,
    SSLConfig,
    VendorConfig,
    create_example_config,
    load_config,
)

__all__ = [
    "AptConfig",
    "ConfigLoader",
    "DownloadConfig",
    "ExtpackConfig",
    "GlobalConfig",
    "PathsConfig",
    "ProxyConfig",
    "SSLConfig",
    "VendorConfig",
    "create_example_config",
    "load_config",
]
