"""
Xray-core releases: list, select, download.

Release tags come from the GitHub releases API. Selection is
bounds-checked: an index outside the offered list raises
``VersionSelectionError`` instead of yielding an empty tag.
"""

from __future__ import annotations

import json
import logging
import stat
import tempfile
from pathlib import Path

from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.config.settings import Settings
from marznodectl.core.errors import ExternalToolFailure, VersionSelectionError
from marznodectl.core.models.release import XrayAsset
from marznodectl.core.services.arch import build_asset
from marznodectl.core.terminal import Terminal

logger = logging.getLogger(__name__)

_YES = frozenset({"", "y", "Y"})
_NO = frozenset({"n", "N"})


def list_versions(registry: AdapterRegistry, settings: Settings) -> list[str]:
    """Most recent ``settings.version_choices`` release tags, newest first."""
    receipt = registry.run(
        "http",
        "xray.releases",
        operation="fetch",
        url=settings.xray_releases_api,
        headers={"Accept": "application/vnd.github+json"},
    )
    if receipt.failed:
        raise ExternalToolFailure.from_receipt(receipt, "Fetching Xray releases")

    try:
        releases = json.loads(receipt.output)
    except json.JSONDecodeError as e:
        raise ExternalToolFailure(f"Invalid releases response: {e}", receipt) from e
    if not isinstance(releases, list):
        raise ExternalToolFailure("Unexpected releases response (expected a list)", receipt)

    tags = [r["tag_name"] for r in releases if isinstance(r, dict) and r.get("tag_name")]
    if not tags:
        raise ExternalToolFailure("No Xray-core releases found", receipt)
    return tags[: settings.version_choices]


def select_version(tags: list[str], choice: str | int) -> str:
    """Return the tag at 1-based ``choice``.

    Raises:
        VersionSelectionError: ``choice`` is not a number in 1..len(tags).
    """
    try:
        index = int(choice)
    except (TypeError, ValueError):
        raise VersionSelectionError(f"Invalid selection: {choice!r}") from None
    if not 1 <= index <= len(tags):
        raise VersionSelectionError(
            f"Selection {index} is out of range (1-{len(tags)})"
        )
    return tags[index - 1]


def _confirm(terminal: Terminal) -> bool:
    """Y/n confirmation; empty means yes, anything else re-prompts."""
    while True:
        answer = terminal.prompt("Confirm selection? (Y/n)", default="")
        if answer in _YES:
            return True
        if answer in _NO:
            return False
        terminal.echo("Invalid input. Please enter Y or n.")


def choose_version(
    registry: AdapterRegistry,
    settings: Settings,
    terminal: Terminal,
) -> str:
    """Interactive version pick: list, select, confirm; repeat until confirmed."""
    tags = list_versions(registry, settings)
    while True:
        terminal.info("Available Xray versions:")
        for number, tag in enumerate(tags, start=1):
            terminal.echo(f"{number:>6}\t{tag}")

        raw = terminal.prompt(f"Select Xray version (1-{len(tags)})")
        try:
            version = select_version(tags, raw)
        except VersionSelectionError as e:
            terminal.warn(str(e))
            continue

        terminal.echo(f"Selected Xray version: {version}")
        if _confirm(terminal):
            return version
        terminal.echo("Selection cancelled. Please choose again.")


def download_xray(
    registry: AdapterRegistry,
    settings: Settings,
    asset: XrayAsset,
    terminal: Terminal,
) -> None:
    """Install ``asset`` and the geo-data files into the installation directory."""
    archive = Path(tempfile.gettempdir()) / asset.filename
    terminal.info(f"Downloading {asset.filename} ({asset.version})...")

    try:
        _require(registry.run(
            "http", "xray.download", operation="download", url=asset.url, dest=str(archive),
        ), f"Downloading {asset.url}")
        _require(registry.run(
            "archive", "xray.extract", operation="extract",
            archive=str(archive), dest=str(settings.install_dir),
        ), f"Extracting {asset.filename}")
    finally:
        archive.unlink(missing_ok=True)

    executable = settings.xray_executable
    if not executable.is_file():
        raise ExternalToolFailure(f"{asset.filename} did not contain an xray executable")
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    for action_id, url, name in (
        ("xray.geoip", settings.geoip_url, "geoip.dat"),
        ("xray.geosite", settings.geosite_url, "geosite.dat"),
    ):
        _require(registry.run(
            "http", action_id, operation="download", url=url, dest=str(settings.data_dir / name),
        ), f"Downloading {name}")

    terminal.success(f"Xray-core {asset.version} installed successfully.")


def resolve_and_download(
    registry: AdapterRegistry,
    settings: Settings,
    terminal: Terminal,
    version: str,
    suffix: str,
) -> XrayAsset:
    asset = build_asset(version, suffix, settings.xray_download_base)
    logger.info("Xray asset: %s", asset.url)
    download_xray(registry, settings, asset, terminal)
    return asset


def _require(receipt, what: str) -> None:
    if receipt.failed:
        raise ExternalToolFailure.from_receipt(receipt, what)
