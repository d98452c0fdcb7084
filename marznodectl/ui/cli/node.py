"""
CLI commands for the node lifecycle.

Thin wrappers over ``marznodectl.core.services.node.NodeManager``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from marznodectl.ui.cli.helpers import fatal_errors, get_manager, get_terminal


@click.command()
@click.option(
    "--cert-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the panel certificate from a file instead of stdin.",
)
@click.option("--port", type=int, default=None, help="Service port (skip the prompt).")
@click.option("--xray-version", default=None, help="Xray-core release tag (skip the prompt).")
@click.pass_context
def install(
    ctx: click.Context,
    cert_file: Path | None,
    port: int | None,
    xray_version: str | None,
) -> None:
    """Install MarzNode."""
    from marznodectl.core.models.report import InstallOptions

    with fatal_errors(ctx):
        options = InstallOptions(
            certificate=cert_file.read_text(encoding="utf-8") if cert_file else None,
            port=port,
            xray_version=xray_version,
        )
        get_manager(ctx).install(options)


@click.command()
@click.pass_context
def uninstall(ctx: click.Context) -> None:
    """Uninstall MarzNode."""
    with fatal_errors(ctx):
        get_manager(ctx).uninstall()


@click.command()
@click.option("--xray-version", default=None, help="Xray-core release tag (skip the prompt).")
@click.pass_context
def update(ctx: click.Context, xray_version: str | None) -> None:
    """Update MarzNode to the latest version."""
    with fatal_errors(ctx):
        get_manager(ctx).update(xray_version)


@click.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start MarzNode service."""
    with fatal_errors(ctx):
        get_manager(ctx).start()


@click.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop MarzNode service."""
    with fatal_errors(ctx):
        get_manager(ctx).stop()


@click.command()
@click.pass_context
def restart(ctx: click.Context) -> None:
    """Restart MarzNode service."""
    with fatal_errors(ctx):
        get_manager(ctx).restart()


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show MarzNode and Xray status."""
    terminal = get_terminal(ctx)
    with fatal_errors(ctx):
        report = get_manager(ctx).status()

    if not report.installed:
        terminal.error("Status: Not Installed")
        sys.exit(1)

    if not report.running:
        terminal.error("Status: Stopped")
        sys.exit(1)

    terminal.success(f"Status: Up and Running [uptime: {report.uptime or 'unknown'}]")
    if report.service_port:
        terminal.echo(f"   Port:  {report.service_port}")
    if report.xray_version:
        terminal.echo(f"   Xray:  {report.xray_version}")


@click.command()
@click.option("--no-follow", is_flag=True, help="Print recent logs and exit.")
@click.option("--tail", default=100, show_default=True, help="Lines of history to show.")
@click.pass_context
def logs(ctx: click.Context, no_follow: bool, tail: int) -> None:
    """Show MarzNode logs."""
    with fatal_errors(ctx):
        get_manager(ctx).logs(follow=not no_follow, tail=tail)
