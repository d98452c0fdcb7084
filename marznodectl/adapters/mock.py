"""
Mock adapter: stands in for every tool when the registry is in mock mode.

Each step of a flow is addressed by its action id. A step can be given
fixed output, a failure, or a handler that also performs the side
effect the real tool would have had (for example writing the file a
download would have produced). Unconfigured steps succeed.
"""

from __future__ import annotations

from collections.abc import Callable

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.core.models.action import Receipt

Handler = Callable[[ExecutionContext], Receipt]


class MockAdapter(Adapter):
    """Scriptable fake host. Records every context it is handed."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._handlers: dict[str, Handler] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def called_ids(self) -> list[str]:
        """Action ids in call order."""
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return self._available

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    # ── Scripting ───────────────────────────────────────────────

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._responses[action_id] = receipt

    def set_output(self, action_id: str, output: str) -> None:
        self.set_response(action_id, Receipt.success(self._name, action_id, output=output))

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self.set_response(action_id, Receipt.failure(self._name, action_id, error=error))

    def set_handler(self, action_id: str, handler: Handler) -> None:
        """Answer ``action_id`` by calling ``handler``; wins over responses."""
        self._handlers[action_id] = handler

    def reset(self) -> None:
        self.call_log.clear()
        self._responses.clear()
        self._handlers.clear()

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action_id = context.action.id

        handler = self._handlers.get(action_id)
        if handler is not None:
            return handler(context)
        if action_id in self._responses:
            return self._responses[action_id].model_copy()
        return Receipt.success(
            self._name, action_id, output=self._default_output, metadata={"mock": True},
        )
