"""
Shared test fixtures and configuration.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from marznodectl.adapters.base import ExecutionContext
from marznodectl.adapters.mock import MockAdapter
from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.config.settings import Settings
from marznodectl.core.models.action import Receipt
from marznodectl.core.models.release import HostArch
from marznodectl.core.services.node import NodeManager
from marznodectl.core.terminal import ScriptedTerminal

RELEASE_TAGS = ["v25.1.1", "v25.1.0", "v24.12.31", "v24.12.18", "v24.11.30"]
CERTIFICATE = "-----BEGIN CERTIFICATE-----\nMIIBfake\n-----END CERTIFICATE-----\n"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a temporary directory."""
    return Settings(
        install_dir=tmp_path / "var" / "marznode",
        script_path=tmp_path / "bin" / "marznode",
        compose_binary_path=tmp_path / "bin" / "docker-compose",
    )


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def registry(mock_adapter: MockAdapter) -> AdapterRegistry:
    """Registry in mock mode: every action goes to ``mock_adapter``."""
    registry = AdapterRegistry()
    registry.set_mock_mode(True, mock_adapter)
    return registry


@pytest.fixture
def all_tools_present():
    """Every dependency binary resolves on PATH."""
    with patch(
        "marznodectl.core.services.dependencies.shutil.which",
        side_effect=lambda name: f"/usr/bin/{name}",
    ):
        yield


@pytest.fixture
def fake_host(mock_adapter: MockAdapter) -> MockAdapter:
    """Mock adapter that behaves like a healthy host for install flows.

    The releases API answers with ``RELEASE_TAGS``, git clone produces a
    repository with xray_config.json, and extraction produces ``xray``.
    """

    def clone(ctx: ExecutionContext) -> Receipt:
        dest = Path(ctx.params["dest"])
        dest.mkdir(parents=True)
        (dest / "xray_config.json").write_text('{"log": {"loglevel": "warning"}}\n')
        return Receipt.success(adapter="git", action_id=ctx.action.id, output=str(dest))

    def extract(ctx: ExecutionContext) -> Receipt:
        dest = Path(ctx.params["dest"])
        (dest / "xray").write_text("#!/bin/sh\n")
        return Receipt.success(adapter="archive", action_id=ctx.action.id)

    mock_adapter.set_output(
        "xray.releases",
        json.dumps([{"tag_name": tag} for tag in RELEASE_TAGS]),
    )
    mock_adapter.set_handler("node.clone", clone)
    mock_adapter.set_handler("xray.extract", extract)
    return mock_adapter


@pytest.fixture
def running(mock_adapter: MockAdapter) -> MockAdapter:
    """Make ``docker ps`` report the marznode container."""
    mock_adapter.set_output("docker.ps", "marznode_marznode_1")
    mock_adapter.set_output("docker.uptime", "Up 3 hours")
    return mock_adapter


@pytest.fixture
def host_probe():
    return lambda: HostArch(machine="x86_64")


@pytest.fixture
def make_manager(settings, registry, host_probe):
    """Build a NodeManager around a ScriptedTerminal."""

    def _make(answers=(), certificate=CERTIFICATE):
        terminal = ScriptedTerminal(answers=answers, block=certificate)
        return NodeManager(settings, registry, terminal, host_probe=host_probe), terminal

    return _make


@pytest.fixture
def installed(settings: Settings) -> Settings:
    """An installation directory with a compose descriptor."""
    settings.data_dir.mkdir(parents=True)
    settings.compose_file.write_text("services: {}\n")
    return settings


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr("marznodectl.core.services.host.os.geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch):
    monkeypatch.setattr("marznodectl.core.services.host.os.geteuid", lambda: 1000)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    raise_exceptions = logging.raiseExceptions
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.raiseExceptions = raise_exceptions
