"""
Self-management: install, remove and upgrade the ``marznode`` command.

The launcher is a small shell script that execs this interpreter with
``-m marznodectl.main``, so the command keeps working from any directory
and after the package is upgraded in place.
"""

from __future__ import annotations

import logging
import sys

from marznodectl import __version__
from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.config.settings import SCRIPT_NAME, Settings
from marznodectl.core.errors import ExternalToolFailure
from marznodectl.core.models.report import OperationResult
from marznodectl.core.terminal import Terminal

logger = logging.getLogger(__name__)


def script_version() -> str:
    return f"v{__version__}"


def render_launcher(python: str | None = None) -> str:
    """Launcher script text for the given interpreter."""
    python = python or sys.executable
    return (
        "#!/bin/sh\n"
        f"# {SCRIPT_NAME} launcher (marznodectl {script_version()})\n"
        f'exec "{python}" -m marznodectl.main "$@"\n'
    )


def install_script(settings: Settings, terminal: Terminal) -> OperationResult:
    path = settings.script_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_launcher(), encoding="utf-8")
    path.chmod(0o755)
    terminal.success(
        f"Script installed successfully. You can now use '{SCRIPT_NAME}' command from anywhere."
    )
    return OperationResult(verb="install-script", message=str(path))


def uninstall_script(settings: Settings, terminal: Terminal) -> OperationResult:
    path = settings.script_path
    if not path.is_file():
        terminal.warn(f"Script not found at {path}. Nothing to uninstall.")
        return OperationResult(verb="uninstall-script", status="noop", message="Not installed")
    path.unlink()
    terminal.success(f"Script uninstalled successfully from {path}")
    return OperationResult(verb="uninstall-script", message=str(path))


def update_script(
    settings: Settings,
    registry: AdapterRegistry,
    terminal: Terminal,
) -> OperationResult:
    path = settings.script_path
    if not path.is_file():
        terminal.warn(
            "Script is not installed. Use 'install-script' command to install the script first."
        )
        return OperationResult(verb="update-script", status="noop", message="Not installed")

    terminal.info("Updating the script...")
    receipt = registry.run(
        "shell",
        "script.upgrade",
        argv=[sys.executable, "-m", "pip", "install", "--upgrade", settings.script_source],
        timeout=600,
    )
    if receipt.failed:
        raise ExternalToolFailure.from_receipt(receipt, f"Upgrading {settings.script_source}")

    path.write_text(render_launcher(), encoding="utf-8")
    path.chmod(0o755)
    terminal.success("Script updated to the latest version!")
    terminal.echo(f"Current version: {script_version()}")
    return OperationResult(verb="update-script", message=str(path))
