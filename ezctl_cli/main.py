"""ezctl - manage named cluster contexts on a shared workspace."""

import logging
from pathlib import Path

import click

from . import __version__
from .app_context import AppContext
from .commands.cluster import NODE_COMMANDS
from .commands.cluster import setup_cmd
from .commands.cluster import upgrade_cmd
from .commands.context import checkout_cmd
from .commands.context import current_cmd
from .commands.context import destroy_cmd
from .commands.context import install_cmd
from .commands.context import list_cmd
from .commands.context import save_cmd
from .errors import EzctlError
from .logging_setup import init_json_logging
from .settings import load_settings
from .ui.error_display import exit_with_error

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="ezctl")
@click.option(
    "--base-dir",
    "-b",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace holding hosts, roles and .cluster (overrides settings and EZCTL_BASE_DIR)",
)
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.ezctl/settings.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, base_dir: Path | None, settings_path: Path | None, verbose: bool):
    """ezctl - switch safely between named cluster contexts."""
    init_json_logging(level="DEBUG" if verbose else None)

    if ctx.obj is None:
        try:
            settings = load_settings(settings_path, base_dir=base_dir)
        except EzctlError as exc:
            exit_with_error(exc)
        ctx.obj = AppContext(settings)
    logger.debug(f"ezctl {ctx.invoked_subcommand} in {ctx.obj.settings.base_dir}")

    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


# Context lifecycle
cli.add_command(checkout_cmd)
cli.add_command(current_cmd)
cli.add_command(list_cmd)
cli.add_command(save_cmd)
cli.add_command(install_cmd)
cli.add_command(destroy_cmd)

# Cluster operations
cli.add_command(setup_cmd)
cli.add_command(upgrade_cmd)
for _command in NODE_COMMANDS:
    cli.add_command(_command)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
