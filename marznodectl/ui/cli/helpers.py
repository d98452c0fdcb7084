"""
Shared CLI plumbing: settings, collaborators and fatal-error exit.

Tests inject collaborators through the click context object:

    runner.invoke(cli, ["start"], obj={"settings": s, "registry": r, "terminal": t})
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

import click

from marznodectl.core.config.loader import ConfigError
from marznodectl.core.config.settings import Settings
from marznodectl.core.errors import MarzNodeError
from marznodectl.core.terminal import ClickTerminal, Terminal


def get_settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def get_terminal(ctx: click.Context) -> Terminal:
    terminal = ctx.obj.get("terminal")
    if terminal is None:
        terminal = ctx.obj["terminal"] = ClickTerminal()
    return terminal


def get_registry(ctx: click.Context):
    registry = ctx.obj.get("registry")
    if registry is None:
        from marznodectl.adapters.registry import default_registry

        registry = ctx.obj["registry"] = default_registry()
    return registry


def get_manager(ctx: click.Context):
    from marznodectl.core.services.arch import detect_host
    from marznodectl.core.services.node import NodeManager

    return NodeManager(
        get_settings(ctx),
        get_registry(ctx),
        get_terminal(ctx),
        host_probe=ctx.obj.get("host_probe") or detect_host,
    )


@contextmanager
def fatal_errors(ctx: click.Context) -> Iterator[None]:
    """Print a MarzNodeError/ConfigError and exit 1."""
    try:
        yield
    except (MarzNodeError, ConfigError) as e:
        get_terminal(ctx).error(str(e))
        sys.exit(1)
