"""
state.json: what was installed, written atomically.

The file is written beside its final location and renamed into place,
so readers see either the previous descriptor or the new one. An
unreadable descriptor is treated as absent; the installation itself is
still detected from the directory and compose file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from marznodectl.core.models.state import NodeState

logger = logging.getLogger(__name__)


def load_state(path: Path) -> NodeState | None:
    """Read ``path``; None when it is missing, corrupt or invalid."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No state file at %s", path)
        return None
    except OSError as e:
        logger.warning("Cannot read state file %s: %s", path, e)
        return None

    try:
        return NodeState.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring invalid state file %s: %s", path, e)
        return None


def save_state(state: NodeState, path: Path) -> None:
    """Stamp ``updated_at`` and write ``state`` to ``path``."""
    state.touch()
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(state.model_dump(mode="json"), indent=2) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".state_", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    logger.debug("State saved to %s", path)
