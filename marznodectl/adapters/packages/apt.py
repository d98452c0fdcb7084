"""
APT adapter: Debian/Ubuntu package manager operations.

Runs ``apt`` non-interactively. Per-package success is not parsed from
apt's output; callers re-probe the binaries afterwards.
"""

from __future__ import annotations

import logging
import os
import shutil

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.adapters.shell.command import run_command
from marznodectl.core.models.action import Receipt

logger = logging.getLogger(__name__)


class AptAdapter(Adapter):
    """Package index refresh and installs through apt.

    Action params:
        operation (str): 'update' or 'install'.
        packages (list[str]): Package names (for 'install').
        timeout (int): Timeout in seconds (default: 900).
    """

    @property
    def name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return shutil.which("apt") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if operation not in ("update", "install"):
            return False, f"Unknown operation '{operation}'. Valid: install, update"
        if operation == "install" and not context.action.params.get("packages"):
            return False, "Missing required param: 'packages' for install"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        if params["operation"] == "update":
            cmd = ["apt", "update"]
        else:
            cmd = ["apt", "install", "-y", *params["packages"]]
        logger.info("Running: %s", " ".join(cmd))

        return run_command(
            self.name,
            context.action.id,
            cmd,
            env={**os.environ, "DEBIAN_FRONTEND": "noninteractive"},
            timeout=params.get("timeout", 900),
        )
