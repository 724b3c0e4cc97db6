"""
Configuration management for vboxrepo.

This module provides Pydantic models for configuration validation and
YAML-based configuration loading. Every setting has a default, so running
without a configuration file is the normal case.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class ProxyConfig(BaseModel):
    """HTTP proxy configuration."""

    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None
    no_proxy: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class SSLConfig(BaseModel):
    """SSL/TLS configuration for HTTPS connections."""

    # Path to CA bundle file (PEM format)
    ca_bundle: Optional[str] = None

    # Disable SSL verification (not recommended)
    verify: bool = True


class SigningKey(BaseModel):
    """Vendor signing key and the keyring file it is de-armored into (APT)."""

    url: str
    keyring: str  # file name inside paths.apt_keyring_dir


class VendorConfig(BaseModel):
    """Oracle download locations."""

    base_url: str = "https://download.virtualbox.org/virtualbox"
    signing_keys: List[SigningKey] = Field(
        default_factory=lambda: [
            SigningKey(
                url="https://www.virtualbox.org/download/oracle_vbox_2016.asc",
                keyring="oracle-virtualbox-2016.gpg",
            ),
            SigningKey(
                url="https://www.virtualbox.org/download/oracle_vbox.asc",
                keyring="oracle-virtualbox.gpg",
            ),
        ]
    )
    # Key used by rpm --import on Fedora/EL/openSUSE
    rpm_key_url: str = "https://www.virtualbox.org/download/oracle_vbox_2016.asc"
    latest_marker: str = "LATEST-STABLE.TXT"
    extpack_template: str = "{version}/Oracle_VirtualBox_Extension_Pack-{version}.vbox-extpack"
    package_pattern: str = "virtualbox"  # matched case-insensitively as a name prefix
    manual_downloads_url: str = "https://www.virtualbox.org/wiki/Linux_Downloads"

    @property
    def apt_repo_url(self) -> str:
        return f"{self.base_url}/debian"

    @property
    def latest_marker_url(self) -> str:
        return f"{self.base_url}/{self.latest_marker}"

    def rpm_repo_file_url(self, flavor: str) -> str:
        """URL of the vendor .repo file for an rpm/<flavor> tree."""
        return f"{self.base_url}/rpm/{flavor}/virtualbox.repo"

    def extpack_url(self, version: str) -> str:
        """Extension Pack download URL for a version string."""
        return f"{self.base_url}/{self.extpack_template.format(version=version)}"


class AptConfig(BaseModel):
    """Debian/Ubuntu specific settings."""

    supported_debian: List[str] = Field(
        default_factory=lambda: ["trixie", "bookworm", "bullseye", "buster"]
    )
    supported_ubuntu: List[str] = Field(
        default_factory=lambda: ["noble", "jammy", "focal", "bionic"]
    )
    debian_fallback: str = "bookworm"
    ubuntu_lts: str = "noble"  # Ubuntu 24.04 LTS, used for every derivative
    architecture: str = "amd64"  # used when dpkg --print-architecture fails
    component: str = "contrib"
    dependencies: List[str] = Field(
        default_factory=lambda: ["gnupg", "apt-transport-https", "ca-certificates"]
    )
    lock_files: List[str] = Field(
        default_factory=lambda: [
            "/var/lib/dpkg/lock-frontend",
            "/var/lib/dpkg/lock",
            "/var/lib/apt/lists/lock",
            "/var/cache/apt/archives/lock",
        ]
    )
    lock_timeout: float = 300.0  # seconds
    lock_poll_interval: float = 5.0  # seconds

    @field_validator("lock_timeout", "lock_poll_interval")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate lock wait durations."""
        if v <= 0:
            raise ValueError("lock wait durations must be positive")
        return v

    @model_validator(mode="after")
    def validate_poll_within_timeout(self) -> "AptConfig":
        """Validate that at least one poll fits in the timeout."""
        if self.lock_poll_interval > self.lock_timeout:
            raise ValueError(
                f"lock_poll_interval ({self.lock_poll_interval}) cannot exceed "
                f"lock_timeout ({self.lock_timeout})"
            )
        return self


class RpmConfig(BaseModel):
    """Fedora/RHEL specific settings."""

    dependencies: List[str] = Field(default_factory=lambda: ["ca-certificates"])


class ZypperConfig(BaseModel):
    """openSUSE specific settings."""

    dependencies: List[str] = Field(default_factory=list)


class PathsConfig(BaseModel):
    """Filesystem locations read or written by the installers."""

    os_release: str = "/etc/os-release"
    apt_sources_file: str = "/etc/apt/sources.list.d/virtualbox.list"
    apt_keyring_dir: str = "/etc/apt/keyrings"
    yum_repo_file: str = "/etc/yum.repos.d/virtualbox.repo"
    zypper_repo_file: str = "/etc/zypp/repos.d/virtualbox.repo"
    home_base: str = "/home"  # home directory root when the user has no passwd entry


class DownloadConfig(BaseModel):
    """Download configuration for HTTP fetches."""

    timeout: int = 60  # Request timeout in seconds
    retry_attempts: int = 3  # Number of retry attempts on failure
    backoff_factor: float = 2.0  # Sleep backoff_factor * 2**attempt between attempts

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout value."""
        if v < 1:
            raise ValueError("timeout must be at least 1 second")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry attempts."""
        if v < 0:
            raise ValueError("retry_attempts cannot be negative")
        if v > 10:
            raise ValueError("retry_attempts cannot exceed 10")
        return v

    @field_validator("backoff_factor")
    @classmethod
    def validate_backoff(cls, v: float) -> float:
        if v < 0:
            raise ValueError("backoff_factor cannot be negative")
        return v


class ExtpackConfig(BaseModel):
    """Extension Pack and version report settings."""

    downloads_subdir: str = "Downloads"
    fallback_version: Optional[str] = None  # used only when the marker cannot be fetched
    report_filename: str = "virtualbox-versions.txt"


class GlobalConfig(BaseModel):
    """Global vboxrepo configuration."""

    vendor: VendorConfig = Field(default_factory=VendorConfig)
    apt: AptConfig = Field(default_factory=AptConfig)
    rpm: RpmConfig = Field(default_factory=RpmConfig)
    zypper: ZypperConfig = Field(default_factory=ZypperConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    extpack: ExtpackConfig = Field(default_factory=ExtpackConfig)
    proxy: Optional[ProxyConfig] = None
    ssl: Optional[SSLConfig] = None


class ConfigLoader:
    """Configuration file loader."""

    def __init__(self, config_path: Path):
        """Initialize config loader.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path

    def load(self) -> GlobalConfig:
        """Load configuration from YAML file.

        Returns:
            GlobalConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path) as f:
                config_data: Dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"YAML syntax error in {self.config_path}:\n{e}")

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration in {self.config_path} must be a mapping")

        try:
            return GlobalConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Configuration validation error in {self.config_path}:\n{e}")


def load_config(config_path: Optional[Path] = None) -> GlobalConfig:
    """Load configuration from file.

    Priority:
    1. Explicit config_path parameter (--config CLI flag)
    2. VBOXREPO_CONFIG environment variable
    3. Default locations (/etc/vboxrepo/config.yaml,
       ~/.config/vboxrepo/config.yaml, ./vboxrepo.yaml)

    Args:
        config_path: Path to config file. If None, tries VBOXREPO_CONFIG env or default locations.

    Returns:
        GlobalConfig instance

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    default_paths = [
        Path("/etc/vboxrepo/config.yaml"),
        Path.home() / ".config" / "vboxrepo" / "config.yaml",
        Path("vboxrepo.yaml"),
    ]

    if config_path:
        paths_to_try = [config_path]
    elif os.environ.get("VBOXREPO_CONFIG"):
        paths_to_try = [Path(os.environ["VBOXREPO_CONFIG"])]
    else:
        paths_to_try = default_paths

    for path in paths_to_try:
        if path.exists():
            return ConfigLoader(path).load()

    if config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    elif os.environ.get("VBOXREPO_CONFIG"):
        raise FileNotFoundError(
            f"Configuration file not found: {os.environ['VBOXREPO_CONFIG']} (from VBOXREPO_CONFIG)"
        )
    else:
        # Return default config if no file found
        return GlobalConfig()


def create_example_config(output_path: Path) -> None:
    """Create an example configuration file.

    Args:
        output_path: Path to write example config
    """
    example_config = {
        "apt": {
            "ubuntu_lts": "noble",
            "debian_fallback": "bookworm",
            "lock_timeout": 300,
            "lock_poll_interval": 5,
        },
        "download": {
            "timeout": 60,
            "retry_attempts": 3,
            "backoff_factor": 2.0,
        },
        "extpack": {
            "downloads_subdir": "Downloads",
            "fallback_version": None,
            "report_filename": "virtualbox-versions.txt",
        },
        "proxy": {
            "http_proxy": "http://proxy.example.com:8080",
            "https_proxy": "http://proxy.example.com:8080",
            "no_proxy": "localhost,127.0.0.1",
        },
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(example_config, f, default_flow_style=False, sort_keys=False)
