"""
Host dependency check and bootstrap.

The check phase reports what is present; the install phase tries apt,
the Docker convenience script and the standalone compose binary, then
re-checks. The caller decides whether the resulting report is good
enough to continue.
"""

from __future__ import annotations

import logging
import platform
import shutil

from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.config.settings import Settings
from marznodectl.core.models.report import DependencyReport
from marznodectl.core.terminal import Terminal

logger = logging.getLogger(__name__)

# Dependencies apt cannot provide under their command name
_NOT_FROM_APT = frozenset({"docker"})


def _compose_available(registry: AdapterRegistry) -> bool:
    """Standalone docker-compose binary, or the ``docker compose`` plugin."""
    if shutil.which("docker-compose"):
        return True
    if not shutil.which("docker"):
        return False
    receipt = registry.run("docker", "deps.compose_plugin", operation="compose_version")
    return receipt.ok


def is_available(name: str, registry: AdapterRegistry) -> bool:
    if name == "docker-compose":
        return _compose_available(registry)
    return shutil.which(name) is not None


def check_dependencies(names: list[str], registry: AdapterRegistry) -> DependencyReport:
    """Report which of ``names`` are available on PATH."""
    report = DependencyReport()
    for name in names:
        if is_available(name, registry):
            report.installed.append(name)
        else:
            report.missing.append(name)
    logger.debug("Dependency check: installed=%s missing=%s", report.installed, report.missing)
    return report


def ensure_dependencies(
    registry: AdapterRegistry,
    settings: Settings,
    terminal: Terminal,
) -> DependencyReport:
    """Install whatever is missing, then return the re-checked report.

    Anything still absent after the attempt lands in ``failed``.
    """
    before = check_dependencies(settings.dependencies, registry)
    if before.complete:
        return before

    from_apt = [name for name in before.missing if name not in _NOT_FROM_APT]
    if from_apt:
        terminal.info(f"Installing missing dependencies: {' '.join(from_apt)}")
        updated = registry.run("apt", "deps.apt_update", operation="update")
        installed = (
            registry.run("apt", "deps.apt_install", operation="install", packages=from_apt)
            if updated.ok
            else updated
        )
        if installed.failed:
            terminal.warn("Some dependencies might have failed to install.")

    if "docker" in before.missing and not shutil.which("docker"):
        terminal.info("Installing Docker...")
        receipt = registry.run(
            "shell",
            "deps.docker_bootstrap",
            command=f"curl -fsSL {settings.docker_bootstrap_url} | sh",
            timeout=1800,
        )
        if receipt.failed:
            terminal.warn(f"Docker installation failed: {receipt.error}")

    if "docker-compose" in before.missing and not _compose_available(registry):
        terminal.info("Installing Docker Compose...")
        url = settings.compose_binary_url.format(
            system=platform.system(),
            machine=platform.machine(),
        )
        receipt = registry.run(
            "http",
            "deps.compose_binary",
            operation="download",
            url=url,
            dest=str(settings.compose_binary_path),
            mode=0o755,
        )
        if receipt.failed:
            terminal.warn(f"Docker Compose installation failed: {receipt.error}")

    after = check_dependencies(settings.dependencies, registry)
    report = DependencyReport(installed=after.installed, failed=after.missing)
    if report.failed:
        logger.warning("Dependencies still missing after install: %s", report.failed)
    return report
