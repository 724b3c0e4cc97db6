"""Configuration commands."""

from pathlib import Path

import click
import yaml

from vboxrepo.core.config import GlobalConfig, create_example_config

# Click context settings to enable -h as alias for --help
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def create_config_group(cli: click.Group) -> click.Group:
    """Create and return the config command group.

    Args:
        cli: Parent CLI group to attach to

    Returns:
        The config command group
    """

    @cli.group(context_settings=CONTEXT_SETTINGS)
    def config() -> None:
        """Configuration file commands."""
        pass

    @config.command("example")
    @click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
    @click.option("--force", is_flag=True, help="Overwrite an existing file")
    def config_example(output: Path, force: bool) -> None:
        """Write an example configuration file to OUTPUT."""
        if output.exists() and not force:
            click.echo(f"Error: {output} already exists (use --force to overwrite)", err=True)
            raise click.Abort()

        create_example_config(output)
        click.echo(f"✓ Example configuration written to {output}")

    @config.command("show")
    @click.pass_context
    def config_show(ctx: click.Context) -> None:
        """Show the effective configuration as YAML."""
        effective: GlobalConfig = ctx.obj["config"]
        click.echo(yaml.dump(effective.model_dump(), default_flow_style=False, sort_keys=False))

    return config
