"""
Error taxonomy: every fatal condition a verb can end with.

Adapters never raise: they return failed Receipts. Services convert
a failed receipt for a required step into ``ExternalToolFailure``.
The CLI catches ``MarzNodeError`` and exits with status 1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marznodectl.core.models.action import Receipt


class MarzNodeError(Exception):
    """Base class for all errors that abort a verb."""


class PrivilegeError(MarzNodeError):
    """Not running with the required elevated privilege."""

    def __init__(self, message: str = "This command must be run as root"):
        super().__init__(message)


class UnsupportedArchitecture(MarzNodeError):
    """The host architecture has no matching Xray-core release asset."""

    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(f"The architecture is not supported: {machine!r}")


class ExternalToolFailure(MarzNodeError):
    """An external tool (package manager, docker, download...) failed."""

    def __init__(self, message: str, receipt: Receipt | None = None):
        self.receipt = receipt
        super().__init__(message)

    @classmethod
    def from_receipt(cls, receipt: Receipt, what: str = "") -> ExternalToolFailure:
        label = what or f"{receipt.adapter}:{receipt.action_id}"
        return cls(f"{label} failed: {receipt.error or 'unknown error'}", receipt)


class DependencyError(ExternalToolFailure):
    """A required host dependency could not be installed."""


class NotInstalledError(MarzNodeError):
    """The verb needs an existing installation."""

    def __init__(self, message: str = "MarzNode is not installed. Please install it first."):
        super().__init__(message)


class UserInputError(MarzNodeError):
    """Interactive or scripted input was invalid or missing."""


class VersionSelectionError(UserInputError):
    """A version index outside the offered list."""
