"""Shared fixtures."""

import subprocess
from unittest.mock import Mock

import pytest

from vboxrepo.core.config import GlobalConfig, PathsConfig
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.runner import CommandRunner
from vboxrepo.core.system import InvokingUser


@pytest.fixture
def config(tmp_path):
    """Configuration with every system path redirected under tmp_path."""
    root = tmp_path / "root"
    return GlobalConfig(
        paths=PathsConfig(
            os_release=str(root / "etc" / "os-release"),
            apt_sources_file=str(root / "etc/apt/sources.list.d/virtualbox.list"),
            apt_keyring_dir=str(root / "etc/apt/keyrings"),
            yum_repo_file=str(root / "etc/yum.repos.d/virtualbox.repo"),
            zypper_repo_file=str(root / "etc/zypp/repos.d/virtualbox.repo"),
            home_base=str(tmp_path / "home"),
        )
    )


@pytest.fixture
def runner():
    """Command runner mock returning success with empty output."""
    mock = Mock(spec=CommandRunner)
    mock.run.side_effect = lambda args, **kwargs: subprocess.CompletedProcess(
        list(args), 0, stdout="", stderr=""
    )
    mock.output.return_value = ""
    return mock


@pytest.fixture
def downloader():
    return Mock(spec=Downloader)


@pytest.fixture
def user(tmp_path):
    return InvokingUser(name="alice", home=tmp_path / "home" / "alice")
