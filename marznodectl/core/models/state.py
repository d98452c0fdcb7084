"""
NodeState: the explicit installation state descriptor.

Serialized to ``<install_dir>/state.json`` on install and update.
Presence of an installation is answered by one accessor,
``marznodectl.core.services.installation.get_installation``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field


def now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class NodeState(BaseModel):
    """What was installed, and when."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Timestamps ───────────────────────────────────────────────
    installed_at: str | None = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    # ── Service ──────────────────────────────────────────────────
    service_port: int | None = None
    xray_version: str = ""
    asset_suffix: str = ""

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = now_iso()


class Installation(BaseModel):
    """Read model: is MarzNode installed, and what do we know about it."""

    installed: bool
    install_dir: Path
    compose_file: Path
    state: NodeState | None = None
