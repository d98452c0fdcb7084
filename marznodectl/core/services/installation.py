"""
Installation state: the one accessor for "is MarzNode installed".

Installed means the installation directory and the compose descriptor
both exist. The state descriptor (state.json) adds what was installed;
it is optional so installs made by older tools are still recognised.
"""

from __future__ import annotations

import logging

from marznodectl.core.config.settings import Settings
from marznodectl.core.errors import NotInstalledError
from marznodectl.core.models.state import Installation, NodeState
from marznodectl.core.persistence.state_file import load_state, save_state
from marznodectl.core.services.compose import read_service_port

logger = logging.getLogger(__name__)


def get_installation(settings: Settings) -> Installation:
    """Read the current installation status."""
    installed = settings.install_dir.is_dir() and settings.compose_file.is_file()
    state = load_state(settings.state_file) if installed else None
    return Installation(
        installed=installed,
        install_dir=settings.install_dir,
        compose_file=settings.compose_file,
        state=state,
    )


def require_installation(settings: Settings) -> Installation:
    """``get_installation`` that raises when nothing is installed."""
    installation = get_installation(settings)
    if not installation.installed:
        raise NotInstalledError()
    return installation


def record_installation(settings: Settings, **fields) -> NodeState:
    """Create or update state.json with ``fields``.

    Without an existing state.json, the port is read back from the
    compose descriptor and the install time is left unknown unless
    ``fields`` supply them.
    """
    state = load_state(settings.state_file)
    if state is None:
        state = NodeState(installed_at=None, service_port=read_service_port(settings))
    for key, value in fields.items():
        setattr(state, key, value)
    save_state(state, settings.state_file)
    logger.debug("Recorded installation state: %s", fields)
    return state
