"""Tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from vboxrepo.core.config import (
    AptConfig,
    ConfigLoader,
    DownloadConfig,
    GlobalConfig,
    VendorConfig,
    create_example_config,
    load_config,
)


def test_global_config_defaults():
    """Test global config with defaults."""
    config = GlobalConfig()
    assert config.proxy is None
    assert config.ssl is None
    assert config.paths.apt_sources_file == "/etc/apt/sources.list.d/virtualbox.list"
    assert config.paths.yum_repo_file == "/etc/yum.repos.d/virtualbox.repo"
    assert config.apt.ubuntu_lts == "noble"
    assert config.apt.debian_fallback == "bookworm"
    assert config.extpack.fallback_version is None


def test_vendor_urls():
    """Test vendor URL helpers."""
    vendor = VendorConfig()
    assert vendor.apt_repo_url == "https://download.virtualbox.org/virtualbox/debian"
    assert vendor.latest_marker_url == (
        "https://download.virtualbox.org/virtualbox/LATEST-STABLE.TXT"
    )
    assert vendor.rpm_repo_file_url("el") == (
        "https://download.virtualbox.org/virtualbox/rpm/el/virtualbox.repo"
    )
    assert [key.keyring for key in vendor.signing_keys] == [
        "oracle-virtualbox-2016.gpg",
        "oracle-virtualbox.gpg",
    ]


def test_download_config_validation():
    """Test download config validators."""
    assert DownloadConfig(retry_attempts=0).retry_attempts == 0

    with pytest.raises(ValueError, match="retry_attempts cannot be negative"):
        DownloadConfig(retry_attempts=-1)

    with pytest.raises(ValueError, match="retry_attempts cannot exceed 10"):
        DownloadConfig(retry_attempts=11)

    with pytest.raises(ValueError, match="timeout must be at least 1 second"):
        DownloadConfig(timeout=0)


def test_apt_config_lock_validation():
    """Test lock wait validation."""
    with pytest.raises(ValueError, match="lock wait durations must be positive"):
        AptConfig(lock_timeout=0)

    with pytest.raises(ValueError, match="cannot exceed"):
        AptConfig(lock_timeout=5, lock_poll_interval=10)


def test_config_loader(tmp_path):
    """Test loading configuration from YAML."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        yaml.dump(
            {
                "apt": {"ubuntu_lts": "jammy", "lock_timeout": 60},
                "download": {"retry_attempts": 5},
                "extpack": {"fallback_version": "7.1.6"},
            }
        )
    )

    config = ConfigLoader(config_file).load()
    assert config.apt.ubuntu_lts == "jammy"
    assert config.apt.lock_timeout == 60
    assert config.download.retry_attempts == 5
    assert config.extpack.fallback_version == "7.1.6"
    # Untouched sections keep defaults
    assert config.apt.debian_fallback == "bookworm"


def test_config_loader_empty_file(tmp_path):
    """Test that an empty file yields defaults."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")
    assert ConfigLoader(config_file).load() == GlobalConfig()


def test_config_loader_invalid_yaml(tmp_path):
    """Test YAML syntax errors are reported as ValueError."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("apt: [unclosed\n")

    with pytest.raises(ValueError, match="YAML syntax error"):
        ConfigLoader(config_file).load()


def test_config_loader_invalid_values(tmp_path):
    """Test validation errors are reported as ValueError."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump({"download": {"retry_attempts": -3}}))

    with pytest.raises(ValueError, match="Configuration validation error"):
        ConfigLoader(config_file).load()


def test_load_config_missing_explicit_path(tmp_path):
    """Test that an explicit missing path raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_from_env(tmp_path, monkeypatch):
    """Test VBOXREPO_CONFIG environment variable."""
    config_file = tmp_path / "env.yaml"
    config_file.write_text(yaml.dump({"apt": {"architecture": "arm64"}}))
    monkeypatch.setenv("VBOXREPO_CONFIG", str(config_file))

    assert load_config().apt.architecture == "arm64"


def test_load_config_defaults_without_file(tmp_path, monkeypatch):
    """Test defaults are returned when no config file exists."""
    monkeypatch.delenv("VBOXREPO_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    if Path("/etc/vboxrepo/config.yaml").exists():
        pytest.skip("system configuration present")

    assert load_config() == GlobalConfig()


def test_create_example_config(tmp_path):
    """Test example config is loadable."""
    output = tmp_path / "example" / "config.yaml"
    create_example_config(output)

    config = ConfigLoader(output).load()
    assert config.download.retry_attempts == 3
    assert config.proxy is not None
    assert config.proxy.https_proxy == "http://proxy.example.com:8080"
