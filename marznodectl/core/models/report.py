"""
Reports returned by services to the CLI layer.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class DependencyReport(BaseModel):
    """Outcome of the dependency-check phase.

    Attributes:
        installed: Present before or after the install attempt.
        missing:   Absent and not yet attempted.
        failed:    Attempted but still absent afterwards.
    """

    installed: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing and not self.failed

    def blocking(self, required: list[str]) -> list[str]:
        """Required dependencies that are still unavailable."""
        absent = set(self.missing) | set(self.failed)
        return [name for name in required if name in absent]


class OperationResult(BaseModel):
    """Outcome of a lifecycle verb.

    ``noop`` means the requested state already held (e.g. start while
    running) and nothing was executed.
    """

    verb: str
    status: Literal["ok", "noop"] = "ok"
    message: str = ""

    @property
    def changed(self) -> bool:
        return self.status == "ok"


class StatusReport(BaseModel):
    """What ``status`` observed."""

    installed: bool
    running: bool = False
    uptime: str = ""
    service_port: int | None = None
    xray_version: str = ""


class InstallOptions(BaseModel):
    """Answers supplied up front instead of prompting.

    Any field left as None is asked interactively.
    """

    certificate: str | None = None
    port: int | None = None
    xray_version: str | None = None
