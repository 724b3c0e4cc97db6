from __future__ import annotations

"""Centralized console output for setup runs."""

from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class OutputLevel(Enum):
    """Output verbosity level."""

    QUIET = 0  # Only errors
    NORMAL = 1  # Standard with progress bar
    VERBOSE = 2  # All details


class Outputter:
    """Console output handler for quiet/normal/verbose modes."""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """Initialize outputter.

        Args:
            level: Output verbosity level
        """
        self.level = level
        self.console = Console()
        self.err_console = Console(stderr=True)
        self.progress: Progress | None = None
        self.task: TaskID | None = None

    def banner(self, title: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        rule = "━" * 50
        self.console.print(rule, style="blue")
        self.console.print(f"   {title}", style="bold blue")
        self.console.print(rule, style="blue")
        self.console.print()

    def header(self, title: str, **kwargs: Any) -> None:
        """Show a section header followed by key/value details.

        Args:
            title: Header text
            **kwargs: Additional key-value pairs to display
        """
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(title, style="bold")
        for key, value in kwargs.items():
            # Convert key from snake_case to Title Case
            display_key = key.replace("_", " ").title()
            self.console.print(f"{display_key}: {value}")
        self.console.print()

    def step(self, number: int, total: int, name: str) -> None:
        """Show step marker like [2/5] Adding VirtualBox repository."""
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(f"[{number}/{total}] {name}", style="bold green", markup=False)

    def start_download_progress(
        self, total_bytes: int | None, description: str = "Downloading"
    ) -> None:
        """Start download progress bar with transfer speed.

        Args:
            total_bytes: Total bytes to download (None if unknown)
            description: Progress description
        """
        if self.level != OutputLevel.NORMAL:
            return

        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )
        self.progress.start()
        self.task = self.progress.add_task(description, total=total_bytes)

    def download_callback(self, description: str = "Downloading"):
        """Return a Downloader progress callback that drives a progress bar."""

        def _callback(written: int, total: int | None) -> None:
            if self.progress is None:
                self.start_download_progress(total, description)
            if self.progress and self.task is not None:
                self.progress.update(self.task, completed=written)

        return _callback

    def finish_progress(self) -> None:
        """Finish and cleanup progress bar."""
        if self.progress:
            self.progress.stop()
            self.progress = None
            self.task = None

    def info(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(message, markup=False)

    def verbose(self, message: str) -> None:
        if self.level != OutputLevel.VERBOSE:
            return

        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(f"✓ {message}", style="green", markup=False)

    def warning(self, message: str) -> None:
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(f"⚠️  {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        """Show error message (always shown, even in quiet mode)."""
        self.err_console.print(f"✗ {message}", style="red", markup=False, soft_wrap=True)

    def hint(self, label: str, command: str) -> None:
        """Show a follow-up command suggestion."""
        if self.level == OutputLevel.QUIET:
            return

        self.console.print(label, style="yellow", markup=False)
        self.console.print(f"   {command}", style="blue", markup=False)
