from __future__ import annotations

"""
Distribution detection.

Reads /etc/os-release (falling back to lsb_release for the codename) and
classifies the running system into one of the installer families.
"""

import logging
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from vboxrepo.core.errors import DistroDetectionError, PackageManagerError
from vboxrepo.core.runner import CommandRunner

logger = logging.getLogger(__name__)

# Ubuntu derivatives recognised by ID alone; they all use the Ubuntu LTS repository
UBUNTU_DERIVATIVES = frozenset(
    {
        "pop",
        "elementary",
        "zorin",
        "zorinos",
        "neon",
        "kubuntu",
        "xubuntu",
        "lubuntu",
        "ubuntumate",
        "ubuntubudgie",
        "ubuntustudio",
        "ubuntukylin",
        "ubuntucinnamon",
        "bodhi",
        "peppermint",
        "feren",
        "voyager",
        "lxle",
        "linux-lite",
        "galliumos",
    }
)

EL_IDS = frozenset({"rhel", "centos", "rocky", "almalinux", "ol"})
ARCH_IDS = frozenset({"arch", "manjaro", "endeavouros"})

LINUX_MINT_NOTICE = (
    "Linux Mint is not supported by the VirtualBox repository setup. "
    "Download the .deb from {downloads_url} and install it with: sudo apt -f install"
)
ARCH_NOTICE = (
    "VirtualBox is available in the official Arch Linux repositories. "
    "Install with: sudo pacman -S virtualbox"
)


class DistroFamily(Enum):
    """Installer family of a distribution."""

    DEBIAN = "debian-like"
    FEDORA = "fedora-like"
    OPENSUSE = "opensuse-like"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class DistroInfo:
    """Distribution descriptor read from os-release."""

    id: str
    id_like: tuple[str, ...] = ()
    codename: str = ""
    version_id: str = ""
    pretty_name: str = ""
    ubuntu_codename: str = ""

    @property
    def is_tumbleweed(self) -> bool:
        return self.version_id.lower() == "tumbleweed" or "tumbleweed" in self.pretty_name.lower()


@dataclass(frozen=True)
class DistroClassification:
    """Result of classifying a DistroInfo."""

    family: DistroFamily
    flavor: str = ""
    notice: str | None = None
    reasons: list[str] = field(default_factory=list, compare=False)

    @property
    def supported(self) -> bool:
        return self.family != DistroFamily.UNSUPPORTED and self.notice is None


def parse_os_release(text: str) -> dict[str, str]:
    """
    Parse os-release content into a dictionary.

    Values may be quoted with single or double quotes; shell quoting rules apply.

    Example:
        >>> parse_os_release('ID=ubuntu\\nVERSION_CODENAME="noble"')
        {'ID': 'ubuntu', 'VERSION_CODENAME': 'noble'}
    """
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw_value = line.partition("=")
        try:
            parts = shlex.split(raw_value)
        except ValueError:
            logger.warning(f"Malformed os-release line: {line}")
            continue
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def read_distro_info(
    os_release: Path = Path("/etc/os-release"),
    runner: CommandRunner | None = None,
) -> DistroInfo:
    """Read the distribution descriptor of the running system.

    Args:
        os_release: Path to the os-release file
        runner: Command runner used for the lsb_release codename fallback

    Returns:
        DistroInfo

    Raises:
        DistroDetectionError: If os-release is missing, unreadable or has no ID
    """
    try:
        text = os_release.read_text()
    except OSError as e:
        raise DistroDetectionError(f"Unable to detect distribution: cannot read {os_release}: {e}")

    fields = parse_os_release(text)
    distro_id = fields.get("ID", "").strip().lower()
    if not distro_id:
        raise DistroDetectionError(f"Unable to detect distribution: no ID in {os_release}")

    ubuntu_codename = fields.get("UBUNTU_CODENAME", "").strip().lower()
    codename = fields.get("VERSION_CODENAME", "").strip() or ubuntu_codename
    if not codename:
        codename = _lsb_codename(runner or CommandRunner())

    return DistroInfo(
        id=distro_id,
        id_like=tuple(token.lower() for token in fields.get("ID_LIKE", "").split()),
        codename=codename.lower(),
        version_id=fields.get("VERSION_ID", "").strip(),
        pretty_name=fields.get("PRETTY_NAME", "").strip(),
        ubuntu_codename=ubuntu_codename,
    )


def _lsb_codename(runner: CommandRunner) -> str:
    try:
        return runner.output(["lsb_release", "-cs"]).strip()
    except PackageManagerError as e:
        logger.debug(f"lsb_release fallback failed: {e}")
        return ""


def classify(distro: DistroInfo, downloads_url: str = "") -> DistroClassification:
    """Classify a distribution into exactly one installer family.

    Matching against ID and ID_LIKE is case-insensitive. Documented
    manual-install distributions carry a notice instead of an installer.
    """
    distro_id = distro.id.lower()
    id_like = {token.lower() for token in distro.id_like}

    if distro_id == "linuxmint":
        return DistroClassification(
            DistroFamily.DEBIAN,
            "ubuntu-derivative",
            notice=LINUX_MINT_NOTICE.format(downloads_url=downloads_url or "the VirtualBox website"),
        )
    if distro_id in ("ubuntu", "debian"):
        return DistroClassification(DistroFamily.DEBIAN, distro_id, reasons=[f"ID is {distro_id}"])
    if distro_id in UBUNTU_DERIVATIVES:
        return DistroClassification(
            DistroFamily.DEBIAN, "ubuntu-derivative", reasons=["known Ubuntu derivative"]
        )
    if distro_id == "fedora":
        return DistroClassification(DistroFamily.FEDORA, "fedora", reasons=["ID is fedora"])
    if distro_id in EL_IDS:
        return DistroClassification(DistroFamily.FEDORA, "el", reasons=["RHEL-compatible ID"])
    if distro_id.startswith("opensuse") or distro_id == "sles":
        return DistroClassification(DistroFamily.OPENSUSE, "opensuse", reasons=["SUSE ID"])
    if distro_id in ARCH_IDS:
        return DistroClassification(DistroFamily.UNSUPPORTED, "arch", notice=ARCH_NOTICE)

    # Derivatives only recognisable through ID_LIKE
    if "ubuntu" in id_like:
        return DistroClassification(
            DistroFamily.DEBIAN, "ubuntu-derivative", reasons=["ID_LIKE contains ubuntu"]
        )
    if "debian" in id_like:
        return DistroClassification(
            DistroFamily.DEBIAN, "ubuntu-derivative", reasons=["ID_LIKE contains debian"]
        )
    if id_like & {"rhel", "centos"}:
        return DistroClassification(DistroFamily.FEDORA, "el", reasons=["ID_LIKE matches RHEL"])
    if "fedora" in id_like:
        return DistroClassification(
            DistroFamily.FEDORA, "fedora", reasons=["ID_LIKE contains fedora"]
        )
    if id_like & {"suse", "opensuse"}:
        return DistroClassification(
            DistroFamily.OPENSUSE, "opensuse", reasons=["ID_LIKE matches SUSE"]
        )

    return DistroClassification(DistroFamily.UNSUPPORTED)
