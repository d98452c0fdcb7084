"""
Docker adapter: container and compose operations.

Provides the docker / compose operations the node lifecycle needs.
Uses the docker CLI, never the Docker API directly. Compose commands
go through the standalone ``docker-compose`` binary when it is on PATH
(that is what dependency bootstrap installs), else ``docker compose``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.adapters.shell.command import run_command
from marznodectl.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {"ps", "up", "down", "pull", "logs", "compose_version"}
_COMPOSE_OPERATIONS = {"up", "down", "pull", "logs"}


def compose_command() -> list[str]:
    """The compose invocation available on this host."""
    if shutil.which("docker-compose"):
        return ["docker-compose"]
    return ["docker", "compose"]


class DockerAdapter(Adapter):
    """Docker and Docker Compose container operations.

    Action params:
        operation (str): One of 'ps', 'up', 'down', 'pull', 'logs',
                         'compose_version'.
        compose_file (str): Descriptor path (compose operations).
        name_filter (str): Container name filter (for 'ps').
        format (str): Go template for 'ps' output.
        remove_orphans (bool): Pass --remove-orphans to 'down'.
        tail (int): Lines of history for 'logs' (default: 100).
        follow (bool): Attach 'logs' to the terminal until interrupted.
        timeout (int): Timeout in seconds (default: 300).
    """

    @property
    def name(self) -> str:
        return "docker"

    def is_available(self) -> bool:
        return shutil.which("docker") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.params.get("operation", "")
        if not operation:
            return False, "Missing required param: 'operation'"

        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"

        if operation in _COMPOSE_OPERATIONS and not context.action.params.get("compose_file"):
            return False, f"Missing required param: 'compose_file' for {operation}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.action.params["operation"]
        params = context.action.params
        try:
            if operation == "ps":
                args = ["docker", "ps"]
                if params.get("name_filter"):
                    args += ["--filter", f"name={params['name_filter']}"]
                args += ["--format", params.get("format", "{{.Names}}\t{{.Status}}")]
                return self._run(context, args)
            elif operation == "compose_version":
                return self._run(context, [*compose_command(), "version"], timeout=15)

            base = [*compose_command(), "-f", params["compose_file"]]
            if operation == "up":
                return self._run(context, [*base, "up", "-d"])
            elif operation == "down":
                args = [*base, "down"]
                if params.get("remove_orphans"):
                    args.append("--remove-orphans")
                return self._run(context, args)
            elif operation == "pull":
                return self._run(context, [*base, "pull"], timeout=600)
            elif operation == "logs":
                args = [*base, "logs", f"--tail={params.get('tail', 100)}"]
                if params.get("follow"):
                    return self._attach(context, [*args, "-f"])
                return self._run(context, args, timeout=15)
            else:
                return Receipt.failure(
                    adapter=self.name,
                    action_id=context.action.id,
                    error=f"Unknown operation: {operation}",
                )
        except Exception as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Docker error: {e}",
            )

    # ── Helpers ─────────────────────────────────────────────────

    def _run(self, ctx: ExecutionContext, args: list[str], timeout: int = 300) -> Receipt:
        """Run a docker command with captured output."""
        return run_command(
            self.name,
            ctx.action.id,
            args,
            cwd=ctx.working_dir,
            timeout=ctx.action.params.get("timeout", timeout),
        )

    def _attach(self, ctx: ExecutionContext, args: list[str]) -> Receipt:
        """Run with the terminal attached; Ctrl+C ends the follow normally."""
        try:
            code = subprocess.call(args, cwd=ctx.working_dir)
        except KeyboardInterrupt:
            code = 0
        if code == 0:
            return Receipt.success(adapter=self.name, action_id=ctx.action.id)
        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=f"Exit code {code}",
            metadata={"command": args, "return_code": code},
        )
