"""
marznode: MarzNode installer and lifecycle CLI.

Usage:
    marznode <command>
    python -m marznodectl.main --help
    python -m marznodectl.main status
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from marznodectl import __version__
from marznodectl.core.config.settings import SCRIPT_NAME
from marznodectl.core.observability.logging_config import (
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    resolve_log_file,
    setup_logging,
)

# Verbs that run without root
_UNPRIVILEGED = frozenset({"help", "version"})


class VerbGroup(click.Group):
    """Group that maps aliases and sends unknown verbs to ``help``."""

    aliases = {"log": "logs"}

    def resolve_command(self, ctx: click.Context, args: list[str]):
        name = self.aliases.get(args[0], args[0])
        if name not in self.commands:
            name = "help"
        return super().resolve_command(ctx, [name, *args[1:]])


@click.group(cls=VerbGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name=SCRIPT_NAME)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a settings YAML (default: $MARZNODE_CONFIG or /etc/marznode/marznodectl.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: Path | None,
) -> None:
    """MarzNode: install and manage a MarzNode proxy node."""
    from marznodectl.core.config.loader import load_settings
    from marznodectl.core.services.host import require_root
    from marznodectl.ui.cli.helpers import fatal_errors

    ctx.ensure_object(dict)

    with fatal_errors(ctx):
        if "settings" not in ctx.obj:
            ctx.obj["settings"] = load_settings(config_path)
    settings = ctx.obj["settings"]

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=resolve_log_file(settings.log_file),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV, "INFO"),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(help_command)
        sys.exit(0)

    if ctx.invoked_subcommand not in _UNPRIVILEGED:
        with fatal_errors(ctx):
            require_root()


@cli.command("help", context_settings={"ignore_unknown_options": True})
@click.argument("ignored", nargs=-1, type=click.UNPROCESSED)
def help_command(ignored: tuple[str, ...] = ()) -> None:
    """Show this help message."""
    click.echo()
    click.echo(f"Usage: {SCRIPT_NAME} <command>")
    click.echo()
    click.echo(f"Commands [v{__version__}]:")
    for name in _HELP_ORDER:
        command = cli.commands[name]
        click.echo(f"  {name:<17}{command.get_short_help_str(limit=60)}")
    click.echo()


# ── Register verbs ──────────────────────────────────────────────

from marznodectl.ui.cli.node import (  # noqa: E402
    install,
    logs,
    restart,
    start,
    status,
    stop,
    uninstall,
    update,
)
from marznodectl.ui.cli.script import (  # noqa: E402
    install_script,
    uninstall_script,
    update_script,
    version,
)

cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(update)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(restart)
cli.add_command(status)
cli.add_command(logs)
cli.add_command(version)
cli.add_command(install_script)
cli.add_command(uninstall_script)
cli.add_command(update_script)

_HELP_ORDER = (
    "install",
    "uninstall",
    "update",
    "start",
    "stop",
    "restart",
    "status",
    "logs",
    "version",
    "install-script",
    "uninstall-script",
    "update-script",
    "help",
)


if __name__ == "__main__":
    cli()
