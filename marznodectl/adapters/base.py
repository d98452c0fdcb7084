"""
Adapter base: one class per external tool.

Services never call apt, docker, git or the network themselves. They
send an Action through the registry, which hands the matching adapter
an ExecutionContext and gets a Receipt back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from marznodectl.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """An Action plus the directory it runs in."""

    action: Action
    working_dir: str = "."
    params: dict[str, Any] = Field(default_factory=dict)


class Adapter(ABC):
    """Binding for one external tool.

    Subclasses implement the four members below and are registered in
    ``default_registry()``. ``execute`` reports every failure in the
    returned Receipt instead of raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, matched against ``Action.adapter``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the tool exists on this host. Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the params before running. Returns (ok, error_message)."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt: ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
