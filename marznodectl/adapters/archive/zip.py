"""
Archive adapter: expand zip release archives.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from marznodectl.adapters.base import Adapter, ExecutionContext
from marznodectl.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ArchiveAdapter(Adapter):
    """Extract archives, overwriting existing files.

    Action params:
        operation (str): 'extract'.
        archive (str): Path to the .zip file.
        dest (str): Directory to extract into.
    """

    @property
    def name(self) -> str:
        return "archive"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        if params.get("operation") != "extract":
            return False, f"Unknown operation '{params.get('operation', '')}'. Valid: extract"
        if not params.get("archive") or not params.get("dest"):
            return False, "Missing required params: 'archive' and 'dest'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        archive = Path(context.action.params["archive"])
        dest = Path(context.action.params["dest"])
        try:
            dest.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive) as zf:
                names = zf.namelist()
                zf.extractall(dest)
        except (zipfile.BadZipFile, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Cannot extract {archive}: {e}",
            )
        logger.debug("Extracted %d entries from %s into %s", len(names), archive, dest)
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output="\n".join(names),
            metadata={"count": len(names)},
        )
