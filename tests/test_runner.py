"""Tests for the external command runner."""

import subprocess
from unittest.mock import patch

import pytest

from vboxrepo.core.errors import PackageManagerError
from vboxrepo.core.runner import CommandRunner


@patch("vboxrepo.core.runner.subprocess.run")
def test_run_success(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(["true"], 0, stdout="ok", stderr="")

    result = CommandRunner(env={"LC_ALL": "C"}).run(["true"], capture=True, env={"A": "1"})

    assert result.stdout == "ok"
    kwargs = mock_run.call_args.kwargs
    assert kwargs["env"]["LC_ALL"] == "C"
    assert kwargs["env"]["A"] == "1"
    assert kwargs["text"] is True
    assert kwargs["stdin"] is subprocess.DEVNULL


@patch("vboxrepo.core.runner.subprocess.run")
def test_run_failure_raises(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(
        ["apt-get", "update"], 100, stdout="", stderr="E: Could not get lock"
    )

    with pytest.raises(PackageManagerError) as exc_info:
        CommandRunner().run(["apt-get", "update"], capture=True)

    assert exc_info.value.returncode == 100
    assert exc_info.value.command == ["apt-get", "update"]
    assert "Could not get lock" in str(exc_info.value)


@patch("vboxrepo.core.runner.subprocess.run")
def test_run_failure_without_check(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(["false"], 1)

    assert CommandRunner().run(["false"], check=False).returncode == 1


@patch("vboxrepo.core.runner.subprocess.run", side_effect=FileNotFoundError("zypper"))
def test_run_missing_command(mock_run):
    with pytest.raises(PackageManagerError, match="Command not found: zypper refresh"):
        CommandRunner().run(["zypper", "refresh"])


@patch("vboxrepo.core.runner.subprocess.run")
def test_run_binary_input(mock_run):
    """Bytes input switches the pipe to binary mode."""
    mock_run.return_value = subprocess.CompletedProcess(["gpg"], 0, stdout=b"", stderr=b"")

    CommandRunner().run(["gpg", "--dearmor"], input=b"-----BEGIN PGP", capture=True)

    kwargs = mock_run.call_args.kwargs
    assert kwargs["text"] is False
    assert kwargs["input"] == b"-----BEGIN PGP"
    assert kwargs["stdin"] is None


@patch("vboxrepo.core.runner.subprocess.run")
def test_output(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(["dpkg"], 0, stdout="amd64\n", stderr="")
    assert CommandRunner().output(["dpkg", "--print-architecture"]) == "amd64\n"
