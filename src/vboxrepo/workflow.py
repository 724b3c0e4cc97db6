from __future__ import annotations

"""
Setup workflow.

Control flows top to bottom: privilege check, probe, confirm, install
dependencies, import key, add repository, refresh metadata, then the optional
version report, latest-version install and Extension Pack download. Any
VBoxRepoError aborts the run; nothing is rolled back.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from vboxrepo.core.config import GlobalConfig
from vboxrepo.core.distro import (
    DistroClassification,
    DistroFamily,
    DistroInfo,
    classify,
    read_distro_info,
)
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.errors import SetupAborted, UnsupportedDistroError, VBoxRepoError
from vboxrepo.core.extpack import ExtensionPack, ExtensionPackDownloader
from vboxrepo.core.output import Outputter
from vboxrepo.core.report import write_report
from vboxrepo.core.runner import CommandRunner
from vboxrepo.core.system import InvokingUser, invoking_user, require_root
from vboxrepo.core.versions import PackageCandidate
from vboxrepo.plugins import RepositoryInstaller, get_installer

logger = logging.getLogger(__name__)

SUPPORTED_HELP = (
    "Supported distributions: Ubuntu, Debian, Fedora, RHEL, CentOS, Rocky, AlmaLinux, "
    "openSUSE. Ubuntu/Debian derivatives are detected automatically."
)


@dataclass
class SetupOptions:
    """Optional parts of the setup run."""

    latest_vbox: bool = False
    version_txt: bool = False
    extpack: bool = True
    assume_yes: bool = False


@dataclass
class SetupResult:
    """What a setup run did."""

    distro: DistroInfo
    classification: DistroClassification
    descriptor: Path | None = None
    candidates: list[PackageCandidate] = field(default_factory=list)
    latest: PackageCandidate | None = None
    installed: str | None = None
    report: Path | None = None
    extension_pack: ExtensionPack | None = None
    notice: str | None = None


def probe(
    config: GlobalConfig, runner: CommandRunner
) -> tuple[DistroInfo, DistroClassification]:
    """Read and classify the running distribution."""
    distro = read_distro_info(Path(config.paths.os_release), runner)
    classification = classify(distro, config.vendor.manual_downloads_url)
    logger.info(
        f"Detected {distro.id} ({distro.codename or distro.version_id}): "
        f"{classification.family.value}"
    )
    return distro, classification


def ensure_supported(distro: DistroInfo, classification: DistroClassification) -> None:
    """Raise for distributions without installer and without a documented notice."""
    if classification.family == DistroFamily.UNSUPPORTED and classification.notice is None:
        raise UnsupportedDistroError(
            distro.id, f"Unsupported distribution: {distro.id}\n{SUPPORTED_HELP}"
        )


class SetupWorkflow:
    """Runs the repository setup for the detected distribution."""

    def __init__(
        self,
        config: GlobalConfig,
        outputter: Outputter,
        confirm: Callable[[str], bool],
        runner: CommandRunner | None = None,
        downloader: Downloader | None = None,
        user: InvokingUser | None = None,
        check_root: Callable[[], None] = require_root,
    ):
        """Initialize setup workflow.

        Args:
            config: Global configuration
            outputter: Console output handler
            confirm: Prompt returning True to proceed
            runner: External command runner
            downloader: HTTP downloader
            user: Invoking user (resolved from the environment if None)
            check_root: Privilege check, raises NotRootError
        """
        self.config = config
        self.out = outputter
        self.confirm = confirm
        self.runner = runner or CommandRunner()
        self.downloader = downloader or Downloader(config.download, config.proxy, config.ssl)
        self.user = user
        self.check_root = check_root

    def _user(self) -> InvokingUser:
        if self.user is None:
            self.user = invoking_user(self.config.paths.home_base)
        return self.user

    def run(self, options: SetupOptions) -> SetupResult:
        """Run the full setup.

        Raises:
            VBoxRepoError: On any fatal condition
        """
        # Must precede any filesystem or network access
        self.check_root()

        self.out.banner("Oracle VirtualBox Repository Configuration")
        distro, classification = probe(self.config, self.runner)
        self.out.header(
            f"Detected distribution: {distro.pretty_name or distro.id}",
            id=distro.id,
            codename=distro.codename or "(none)",
            family=classification.family.value,
        )
        if classification.reasons:
            self.out.verbose(f"Matched: {', '.join(classification.reasons)}")

        result = SetupResult(distro=distro, classification=classification)
        if classification.notice:
            self.out.warning(classification.notice)
            result.notice = classification.notice
            return result
        ensure_supported(distro, classification)

        installer = get_installer(
            self.config, distro, classification, self.runner, self.downloader
        )

        if not options.assume_yes and not self.confirm(
            f"Add the Oracle VirtualBox repository to {installer.descriptor_path}?"
        ):
            raise SetupAborted("Aborted by user")

        steps = list(installer.steps())
        if options.version_txt or options.latest_vbox:
            steps.append(
                ("Querying available VirtualBox versions", lambda: self._versions(installer, result))
            )
        if options.version_txt:
            steps.append(("Writing version report", lambda: self._report(result)))
        if options.latest_vbox:
            steps.append(
                ("Installing latest VirtualBox", lambda: self._install_latest(installer, result))
            )
        if options.extpack:
            steps.append(("Downloading Extension Pack", lambda: self._extpack(result)))

        total = len(steps)
        for number, (name, action) in enumerate(steps, start=1):
            self.out.step(number, total, name)
            value = action()
            if isinstance(value, Path) and result.descriptor is None:
                result.descriptor = value

        self._finish(installer, result)
        return result

    def _versions(self, installer: RepositoryInstaller, result: SetupResult) -> None:
        result.candidates = installer.list_versions()
        if not result.candidates:
            self.out.warning("No VirtualBox packages found in the repository metadata")
            return
        for candidate in result.candidates:
            self.out.info(f"  {candidate.name}  {candidate.version}")
        result.latest = installer.latest_candidate(result.candidates)
        if result.latest:
            self.out.info(f"Latest: {result.latest.name} {result.latest.version}")

    def _report(self, result: SetupResult) -> None:
        result.report = write_report(
            self._user(),
            self.config.extpack.report_filename,
            result.distro,
            result.candidates,
            result.latest,
            downloads_subdir=self.config.extpack.downloads_subdir,
        )
        self.out.success(f"Version report saved to {result.report}")

    def _install_latest(self, installer: RepositoryInstaller, result: SetupResult) -> None:
        if result.latest is None:
            raise VBoxRepoError("No VirtualBox package available to install")
        installer.install_package(result.latest.name)
        result.installed = result.latest.name
        self.out.success(f"Installed {result.latest.name} {result.latest.version}")

    def _extpack(self, result: SetupResult) -> None:
        downloader = ExtensionPackDownloader(
            self.downloader, self.config.vendor, self.config.extpack, self._user()
        )
        try:
            pack = downloader.download(progress=self.out.download_callback("Extension Pack"))
        finally:
            self.out.finish_progress()
        result.extension_pack = pack
        self.out.success(f"Extension Pack {pack.version} downloaded to {pack.path}")

    def _finish(self, installer: RepositoryInstaller, result: SetupResult) -> None:
        self.out.info("")
        self.out.success("Repository configured successfully!")
        if not result.installed:
            package = result.latest.name if result.latest else None
            self.out.hint("To install VirtualBox, run:", installer.install_hint(package))
            self.out.hint("To see available versions:", installer.search_hint())
        if result.extension_pack:
            self.out.hint(
                "To install the Extension Pack after installing VirtualBox, run:",
                result.extension_pack.install_command,
            )
        self.out.info("Remember to install Guest Additions inside your VMs if needed.")
