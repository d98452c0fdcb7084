"""
Domain models: Pydantic types for the node manager.

All models are re-exported here for convenient access:

    from marznodectl.core.models import Action, Receipt, NodeState
"""

from marznodectl.core.models.action import Action, Receipt
from marznodectl.core.models.release import HostArch, XrayAsset
from marznodectl.core.models.report import (
    DependencyReport,
    InstallOptions,
    OperationResult,
    StatusReport,
)
from marznodectl.core.models.state import Installation, NodeState

__all__ = [
    "Action",
    "DependencyReport",
    "HostArch",
    "InstallOptions",
    "Installation",
    "NodeState",
    "OperationResult",
    "Receipt",
    "StatusReport",
    "XrayAsset",
]
