"""
Git adapter: repository clone.

Uses the git CLI, never raw API calls.
"""

from __future__ import annotations

import shutil

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.adapters.shell.command import run_command
from marznodectl.core.models.action import Receipt


class GitAdapter(Adapter):
    """Git version control operations.

    Action params:
        operation (str): 'clone'.
        url (str): Remote repository URL.
        dest (str): Local destination path.
        depth (int): Shallow clone depth (default: full clone).
        timeout (int): Timeout in seconds (default: 300).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        if params.get("operation") != "clone":
            return False, f"Unknown operation '{params.get('operation', '')}'. Valid: clone"
        if not params.get("url") or not params.get("dest"):
            return False, "Missing required params: 'url' and 'dest'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        cmd = ["git", "clone"]
        if params.get("depth"):
            cmd += ["--depth", str(params["depth"])]
        cmd += [params["url"], params["dest"]]

        receipt = run_command(
            self.name, context.action.id, cmd, timeout=params.get("timeout", 300),
        )
        if receipt.ok:
            receipt.output = params["dest"]
        return receipt
