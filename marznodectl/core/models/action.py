"""
Action and Receipt: what a service asks a tool to do, and what came back.

Services build Actions and hand them to the adapter registry; adapters
answer with a Receipt and never raise. A failed Receipt for a step the
flow cannot do without is turned into ``ExternalToolFailure`` by the
service that asked.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """One tool invocation.

    Ids name the step, not the tool (``"node.up"``, ``"xray.download"``),
    so the same adapter operation can be answered differently per step
    in mock mode.
    """

    id: str
    adapter: str
    description: str = ""
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of one Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def lines(self) -> list[str]:
        """Non-empty output lines."""
        return [line for line in self.output.splitlines() if line.strip()]

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)
