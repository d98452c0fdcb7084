"""
Shell command adapter, plus the process runner every CLI-backed adapter
uses to turn a subprocess outcome into a Receipt.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.core.models.action import Receipt

logger = logging.getLogger(__name__)


def run_command(
    adapter: str,
    action_id: str,
    command: str | list[str],
    *,
    cwd: str | None = None,
    input: str | None = None,
    env: dict[str, str] | None = None,
    timeout: int = 300,
) -> Receipt:
    """Run ``command`` with captured output.

    A string runs through ``sh``; a list runs without a shell. A
    missing executable, a timeout, or a non-zero exit all come back
    as a failed Receipt whose error is stderr when there is any.
    """
    use_shell = isinstance(command, str)
    program = command.split()[0] if use_shell else command[0]
    logger.debug("Executing: %s (cwd=%s)", command, cwd)
    start = time.monotonic()

    try:
        result = subprocess.run(
            command,
            shell=use_shell,
            cwd=cwd,
            input=input,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"{program} timed out after {timeout}s",
            metadata={"command": command, "timeout": timeout},
        )
    except FileNotFoundError:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"{program} not found on this host",
            metadata={"command": command},
        )
    except OSError as e:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Cannot run {program}: {e}",
            metadata={"command": command},
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout.strip()
    stderr = result.stderr.strip()
    meta = {"command": command, "return_code": result.returncode}

    if result.returncode == 0:
        return Receipt.success(
            adapter=adapter,
            action_id=action_id,
            output=stdout,
            duration_ms=elapsed_ms,
            metadata={**meta, "stderr": stderr},
        )
    return Receipt.failure(
        adapter=adapter,
        action_id=action_id,
        error=stderr or f"{program} exited with code {result.returncode}",
        duration_ms=elapsed_ms,
        metadata={**meta, "stdout": stdout},
    )


class ShellCommandAdapter(Adapter):
    """Arbitrary commands: ``ss``, the Docker bootstrap pipe, pip.

    Action params:
        command (str): Shell command line (run through ``sh``).
        argv (list[str]): Command vector (run without a shell).
        input (str): Text fed to stdin.
        timeout (int): Timeout in seconds (default: 300).
        cwd (str): Override working directory (default: context.working_dir).
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        if not params.get("command") and not params.get("argv"):
            return False, "Missing required param: 'command' or 'argv'"

        cwd = params.get("cwd", context.working_dir)
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        return run_command(
            self.name,
            context.action.id,
            params.get("argv") or params["command"],
            cwd=params.get("cwd", context.working_dir),
            input=params.get("input"),
            timeout=params.get("timeout", 300),
        )
