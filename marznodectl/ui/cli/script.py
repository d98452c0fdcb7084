"""
CLI commands for managing the ``marznode`` command itself.
"""

from __future__ import annotations

import click

from marznodectl.ui.cli.helpers import fatal_errors, get_registry, get_settings, get_terminal


@click.command("install-script")
@click.pass_context
def install_script(ctx: click.Context) -> None:
    """Install this script to /usr/local/bin."""
    from marznodectl.core.services.script import install_script as _install

    with fatal_errors(ctx):
        _install(get_settings(ctx), get_terminal(ctx))


@click.command("uninstall-script")
@click.pass_context
def uninstall_script(ctx: click.Context) -> None:
    """Uninstall this script from /usr/local/bin."""
    from marznodectl.core.services.script import uninstall_script as _uninstall

    with fatal_errors(ctx):
        _uninstall(get_settings(ctx), get_terminal(ctx))


@click.command("update-script")
@click.pass_context
def update_script(ctx: click.Context) -> None:
    """Update this script to the latest version."""
    from marznodectl.core.services.script import update_script as _update

    with fatal_errors(ctx):
        _update(get_settings(ctx), get_registry(ctx), get_terminal(ctx))


@click.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show script version."""
    from marznodectl.core.services.script import script_version

    get_terminal(ctx).info(f"MarzNode Script Version: {script_version()}")
