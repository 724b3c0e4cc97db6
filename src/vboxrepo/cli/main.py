"""
Main CLI entry point for vboxrepo.

This module provides the Click-based command-line interface for vboxrepo.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from vboxrepo import __version__
from vboxrepo.cli.config_commands import create_config_group
from vboxrepo.core.config import GlobalConfig, load_config
from vboxrepo.core.downloader import Downloader
from vboxrepo.core.errors import VBoxRepoError
from vboxrepo.core.extpack import ExtensionPackDownloader
from vboxrepo.core.output import OutputLevel, Outputter
from vboxrepo.core.report import write_report
from vboxrepo.core.runner import CommandRunner
from vboxrepo.core.system import invoking_user
from vboxrepo.plugins import get_installer
from vboxrepo.workflow import SetupOptions, SetupWorkflow, ensure_supported, probe

# Click context settings to enable -h as alias for --help
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _fail(ctx: click.Context, error: Exception) -> None:
    outputter: Outputter = ctx.obj["output"]
    outputter.finish_progress()
    outputter.error(f"Error: {error}")
    ctx.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: /etc/vboxrepo/config.yaml, or $VBOXREPO_CONFIG)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output and debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only print errors")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool, quiet: bool) -> None:
    """vboxrepo - Oracle VirtualBox repository setup.

    Adds Oracle's VirtualBox package repository to Debian/Ubuntu,
    Fedora/RHEL and openSUSE and downloads the Extension Pack.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)

    if verbose:
        level = OutputLevel.VERBOSE
    elif quiet:
        level = OutputLevel.QUIET
    else:
        level = OutputLevel.NORMAL
    ctx.obj["output"] = Outputter(level)

    try:
        ctx.obj["config"] = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        # Missing file, YAML syntax error or validation error
        _fail(ctx, e)


@cli.command()
@click.option(
    "--latest-vbox",
    is_flag=True,
    help="Install the highest VirtualBox version available in the repository",
)
@click.option(
    "--vbox-version-txt",
    is_flag=True,
    help="Write the available VirtualBox versions to ~/Downloads",
)
@click.option("--no-extpack", is_flag=True, help="Skip the Extension Pack download")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def setup(
    ctx: click.Context,
    latest_vbox: bool,
    vbox_version_txt: bool,
    no_extpack: bool,
    yes: bool,
) -> None:
    """Add the Oracle VirtualBox repository (requires root)."""
    config: GlobalConfig = ctx.obj["config"]
    outputter: Outputter = ctx.obj["output"]

    options = SetupOptions(
        latest_vbox=latest_vbox,
        version_txt=vbox_version_txt,
        extpack=not no_extpack,
        assume_yes=yes,
    )

    with Downloader(config.download, config.proxy, config.ssl) as downloader:
        workflow = SetupWorkflow(
            config,
            outputter,
            confirm=lambda message: click.confirm(message, default=True),
            downloader=downloader,
        )
        try:
            workflow.run(options)
        except VBoxRepoError as e:
            _fail(ctx, e)


@cli.command()
@click.pass_context
def detect(ctx: click.Context) -> None:
    """Show the detected distribution and how it is handled."""
    config: GlobalConfig = ctx.obj["config"]

    try:
        distro, classification = probe(config, CommandRunner())
    except VBoxRepoError as e:
        _fail(ctx, e)
        return

    click.echo(f"ID: {distro.id}")
    click.echo(f"ID_LIKE: {' '.join(distro.id_like) or '-'}")
    click.echo(f"Codename: {distro.codename or '-'}")
    if distro.ubuntu_codename and distro.ubuntu_codename != distro.codename:
        click.echo(f"Ubuntu base: {distro.ubuntu_codename}")
    click.echo(f"Version: {distro.version_id or '-'}")
    click.echo(f"Family: {classification.family.value}")
    if classification.flavor:
        click.echo(f"Flavor: {classification.flavor}")
    if classification.reasons:
        click.echo(f"Matched: {', '.join(classification.reasons)}")
    if classification.notice:
        click.echo(f"Note: {classification.notice}")
        return

    try:
        ensure_supported(distro, classification)
    except VBoxRepoError as e:
        _fail(ctx, e)


@cli.command()
@click.option("--format", "output_format", type=click.Choice(["table", "json"]),
              default="table", help="Output format")
@click.option("--write-txt", is_flag=True, help="Also write the report to ~/Downloads")
@click.pass_context
def versions(ctx: click.Context, output_format: str, write_txt: bool) -> None:
    """List VirtualBox versions available from the configured repositories."""
    config: GlobalConfig = ctx.obj["config"]
    runner = CommandRunner()

    try:
        distro, classification = probe(config, runner)
        if classification.notice:
            click.echo(classification.notice)
            return
        ensure_supported(distro, classification)

        with Downloader(config.download, config.proxy, config.ssl) as downloader:
            installer = get_installer(config, distro, classification, runner, downloader)
            candidates = installer.list_versions()
            latest = installer.latest_candidate(candidates)

        report = None
        if write_txt:
            report = write_report(
                invoking_user(config.paths.home_base),
                config.extpack.report_filename,
                distro,
                candidates,
                latest,
                downloads_subdir=config.extpack.downloads_subdir,
            )
    except VBoxRepoError as e:
        _fail(ctx, e)
        return

    if output_format == "json":
        click.echo(json.dumps({
            "distribution": distro.id,
            "packages": [c.model_dump() for c in candidates],
            "latest": latest.model_dump() if latest else None,
        }, indent=2))
    else:
        if not candidates:
            click.echo("No VirtualBox packages found.")
        else:
            width = max(len(c.name) for c in candidates)
            click.echo(f"{'Package'.ljust(width)}  Version")
            click.echo(f"{'-' * width}  -------")
            for candidate in candidates:
                click.echo(f"{candidate.name.ljust(width)}  {candidate.version}")
            if latest:
                click.echo(f"\nLatest: {latest.name} {latest.version}")

    if report:
        click.echo(f"Report written to {report}", err=output_format == "json")


@cli.command()
@click.option("--ext-version", default=None, help="Download this version instead of the latest")
@click.pass_context
def extpack(ctx: click.Context, ext_version: Optional[str]) -> None:
    """Download the VirtualBox Extension Pack to ~/Downloads."""
    config: GlobalConfig = ctx.obj["config"]
    outputter: Outputter = ctx.obj["output"]

    with Downloader(config.download, config.proxy, config.ssl) as http:
        downloader = ExtensionPackDownloader(
            http, config.vendor, config.extpack, invoking_user(config.paths.home_base)
        )
        try:
            pack = downloader.download(
                ext_version, progress=outputter.download_callback("Extension Pack")
            )
        except VBoxRepoError as e:
            outputter.finish_progress()
            outputter.info(
                f"You can download it manually from: {config.vendor.manual_downloads_url}"
            )
            _fail(ctx, e)
            return
    outputter.finish_progress()

    outputter.success(f"Extension Pack {pack.version} downloaded to {pack.path}")
    outputter.hint("To install it after installing VirtualBox, run:", pack.install_command)


create_config_group(cli)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
