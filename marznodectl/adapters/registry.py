"""
Adapter registry: the only way services reach external tools.

In mock mode every action goes to a single mock adapter regardless of
``Action.adapter``, which lets a whole install run against a fake host.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus dispatch.

    ``execute_action`` always returns a Receipt: unknown adapters,
    validation errors and adapter bugs all become failed receipts.
    """

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every action to ``mock_adapter`` (or a canned success)."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def is_available(self, name: str) -> bool:
        """Whether the named adapter exists and its tool is on this host."""
        if self._mock_mode:
            return self._mock_adapter.is_available() if self._mock_adapter else True
        adapter = self._adapters.get(name)
        if adapter is None:
            return False
        try:
            return adapter.is_available()
        except Exception:
            return False

    def execute_action(self, action: Action, working_dir: str = ".") -> Receipt:
        """Validate and run ``action`` on its adapter. Never raises."""
        start = time.monotonic()
        context = ExecutionContext(action=action, working_dir=working_dir, params=action.params)

        if self._mock_mode and self._mock_adapter is None:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.adapter}:{action.id} executed",
                metadata={"mock": True},
            )
        adapter = self._mock_adapter if self._mock_mode else self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            valid, reason = False, f"validator raised {e}"
        if not valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {reason}",
            )

        logger.debug("Executing %s:%s %s", action.adapter, action.id, action.description)
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            # Adapters should never raise
            logger.error("Adapter %s raised during %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - start) * 1000)
        if receipt.failed:
            logger.info("%s:%s failed: %s", action.adapter, action.id, receipt.error)
        return receipt

    def run(self, adapter: str, action_id: str, working_dir: str = ".", **params: Any) -> Receipt:
        """Shorthand: build an Action from keyword params and execute it."""
        return self.execute_action(
            Action(id=action_id, adapter=adapter, params=params),
            working_dir=working_dir,
        )


def default_registry() -> AdapterRegistry:
    """Registry wired with every real adapter the node manager uses."""
    from marznodectl.adapters.archive.zip import ArchiveAdapter
    from marznodectl.adapters.containers.docker import DockerAdapter
    from marznodectl.adapters.firewall.ufw import FirewallAdapter
    from marznodectl.adapters.net.http import HttpAdapter
    from marznodectl.adapters.packages.apt import AptAdapter
    from marznodectl.adapters.shell.command import ShellCommandAdapter
    from marznodectl.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry()
    for adapter in (
        ShellCommandAdapter(),
        AptAdapter(),
        DockerAdapter(),
        GitAdapter(),
        HttpAdapter(),
        ArchiveAdapter(),
        FirewallAdapter(),
    ):
        registry.register(adapter)
    return registry
