"""
Firewall adapter: open ports with ufw.

Best-effort: callers check ``is_available`` and only warn when ufw is
absent.
"""

from __future__ import annotations

import shutil

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.adapters.shell.command import run_command
from marznodectl.core.models.action import Receipt


class FirewallAdapter(Adapter):
    """Action params:
        operation (str): 'allow'.
        port (int): Port to open.
    """

    @property
    def name(self) -> str:
        return "firewall"

    def is_available(self) -> bool:
        return shutil.which("ufw") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        if params.get("operation") != "allow":
            return False, f"Unknown operation '{params.get('operation', '')}'. Valid: allow"
        if not isinstance(params.get("port"), int):
            return False, "Missing required param: 'port'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        port = context.action.params["port"]
        return run_command(self.name, context.action.id, ["ufw", "allow", str(port)], timeout=30)
