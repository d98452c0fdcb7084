"""
Node lifecycle: install, uninstall, update, start, stop, restart,
status and logs for the MarzNode service.

Every external effect goes through the adapter registry; every
question to the operator goes through the Terminal. Files inside the
installation directory are written directly.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable

from marznodectl.adapters.registry import AdapterRegistry
from marznodectl.core.config.settings import Settings
from marznodectl.core.errors import (
    DependencyError,
    ExternalToolFailure,
    UserInputError,
)
from marznodectl.core.models.action import Receipt
from marznodectl.core.models.release import HostArch
from marznodectl.core.models.report import InstallOptions, OperationResult, StatusReport
from marznodectl.core.models.state import now_iso
from marznodectl.core.services.arch import detect_host, resolve_host
from marznodectl.core.services.compose import write_compose
from marznodectl.core.services.dependencies import ensure_dependencies
from marznodectl.core.services.host import is_port_in_use, prompt_port, validate_port
from marznodectl.core.services.installation import (
    get_installation,
    record_installation,
    require_installation,
)
from marznodectl.core.services.xray import choose_version, resolve_and_download
from marznodectl.core.terminal import Terminal

logger = logging.getLogger(__name__)

CERTIFICATE_PROMPT = (
    "Please paste the Marznode certificate from the Marzneshin panel "
    "(press Ctrl+D when finished):"
)


class NodeManager:
    """Lifecycle operations over one installation directory.

    Args:
        settings: Installer settings (paths, URLs, image...).
        registry: Adapter registry used for every external tool call.
        terminal: Input provider and message sink.
        host_probe: Returns the host's architecture facts.
    """

    def __init__(
        self,
        settings: Settings,
        registry: AdapterRegistry,
        terminal: Terminal,
        host_probe: Callable[[], HostArch] = detect_host,
    ):
        self.settings = settings
        self.registry = registry
        self.terminal = terminal
        self._host_probe = host_probe

    # ── Install / uninstall / update ────────────────────────────

    def install(self, options: InstallOptions | None = None) -> OperationResult:
        options = options or InstallOptions()
        s = self.settings

        # Resolve first: an unsupported host must not touch network or disk
        suffix = resolve_host(self._host_probe())

        if get_installation(s).installed:
            self.terminal.warn("MarzNode is already installed. Removing previous installation...")
            self.uninstall()

        report = ensure_dependencies(self.registry, s, self.terminal)
        blocking = report.blocking(s.required_dependencies)
        if blocking:
            raise DependencyError(f"Required dependencies unavailable: {', '.join(blocking)}")
        if report.failed:
            self.terminal.warn(f"Optional dependencies unavailable: {', '.join(report.failed)}")

        s.install_dir.mkdir(parents=True, exist_ok=True)
        s.data_dir.mkdir(parents=True, exist_ok=True)

        self.terminal.echo()
        self._save_certificate(options.certificate)
        self.terminal.echo()

        port = self._choose_port(options.port)
        self._fetch_node_config()

        version = options.xray_version or choose_version(self.registry, s, self.terminal)
        resolve_and_download(self.registry, s, self.terminal, version, suffix)

        write_compose(s, port)
        self.terminal.success(f"Docker Compose file created at {s.compose_file}")
        self._compose("node.up", "up")

        self._open_firewall(port)

        record_installation(
            s, installed_at=now_iso(), service_port=port, xray_version=version, asset_suffix=suffix,
        )
        self.terminal.success("MarzNode installed successfully!")
        return OperationResult(verb="install", message=f"Installed on port {port} with Xray-core {version}")

    def uninstall(self) -> OperationResult:
        s = self.settings
        if not s.install_dir.exists():
            self.terminal.warn("MarzNode is not installed.")
            return OperationResult(verb="uninstall", status="noop", message="Not installed")

        self.terminal.info("Uninstalling MarzNode...")
        if s.compose_file.is_file():
            receipt = self._compose_receipt("node.down", "down", remove_orphans=True)
            if receipt.failed:
                self.terminal.warn(f"Stopping the service failed: {receipt.error}")

        shutil.rmtree(s.install_dir)
        self.terminal.success("MarzNode uninstalled successfully")
        return OperationResult(verb="uninstall", message=f"Removed {s.install_dir}")

    def update(self, xray_version: str | None = None) -> OperationResult:
        s = self.settings
        require_installation(s)
        suffix = resolve_host(self._host_probe())

        version = xray_version or choose_version(self.registry, s, self.terminal)
        resolve_and_download(self.registry, s, self.terminal, version, suffix)

        self.terminal.info("Pulling the latest MarzNode image...")
        self._compose("node.pull", "pull")
        self._compose("node.down", "down")
        self._compose("node.up", "up")

        record_installation(s, xray_version=version, asset_suffix=suffix)
        self.terminal.success(f"MarzNode updated (Xray-core {version})")
        return OperationResult(verb="update", message=f"Xray-core {version}")

    # ── Service control ─────────────────────────────────────────

    def is_running(self) -> bool:
        """Whether ``docker ps`` lists a container named like the service."""
        receipt = self.registry.run("docker", "docker.ps", operation="ps", format="{{.Names}}")
        if receipt.failed:
            raise ExternalToolFailure.from_receipt(receipt, "Listing containers")
        return any(self.settings.service_name in line for line in receipt.lines)

    def start(self) -> OperationResult:
        require_installation(self.settings)
        if self.is_running():
            self.terminal.warn("MarzNode is already running.")
            return OperationResult(verb="start", status="noop", message="Already running")
        self.terminal.info("Starting MarzNode...")
        self._compose("node.up", "up")
        self.terminal.success("MarzNode started")
        return OperationResult(verb="start", message="Started")

    def stop(self) -> OperationResult:
        require_installation(self.settings)
        if not self.is_running():
            self.terminal.warn("MarzNode is not running.")
            return OperationResult(verb="stop", status="noop", message="Not running")
        self.terminal.info("Stopping MarzNode...")
        self._compose("node.down", "down")
        self.terminal.success("MarzNode stopped")
        return OperationResult(verb="stop", message="Stopped")

    def restart(self) -> OperationResult:
        require_installation(self.settings)
        self.terminal.info("Restarting MarzNode...")
        self._compose("node.down", "down")
        self._compose("node.up", "up")
        self.terminal.success("MarzNode restarted")
        return OperationResult(verb="restart", message="Restarted")

    def status(self) -> StatusReport:
        installation = get_installation(self.settings)
        if not installation.installed:
            return StatusReport(installed=False)

        state = installation.state
        report = StatusReport(
            installed=True,
            service_port=state.service_port if state else None,
            xray_version=state.xray_version if state else "",
        )
        if not self.is_running():
            return report

        receipt = self.registry.run(
            "docker",
            "docker.uptime",
            operation="ps",
            name_filter=self.settings.service_name,
            format="{{.Status}}",
        )
        report.running = True
        report.uptime = receipt.lines[0] if receipt.ok and receipt.lines else ""
        return report

    def logs(self, follow: bool = True, tail: int = 100) -> OperationResult:
        require_installation(self.settings)
        if follow:
            self.terminal.info("Showing MarzNode logs (press Ctrl+C to exit):")
        receipt = self._compose_receipt("node.logs", "logs", follow=follow, tail=tail)
        if receipt.failed:
            raise ExternalToolFailure.from_receipt(receipt, "Showing logs")
        if receipt.output:
            self.terminal.echo(receipt.output)
        return OperationResult(verb="logs")

    # ── Install steps ───────────────────────────────────────────

    def _save_certificate(self, certificate: str | None) -> None:
        if certificate is None:
            certificate = self.terminal.read_block(CERTIFICATE_PROMPT)
        if not certificate.strip():
            raise UserInputError("No certificate provided")

        path = self.settings.certificate_file
        path.write_text(certificate if certificate.endswith("\n") else certificate + "\n")
        path.chmod(0o600)
        self.terminal.success(f"Certificate saved to {path}")

    def _choose_port(self, requested: int | None) -> int:
        if requested is None:
            return prompt_port(self.registry, self.terminal, self.settings.default_port)
        port = validate_port(requested)
        if is_port_in_use(self.registry, port):
            raise UserInputError(f"Port {port} is already in use")
        return port

    def _fetch_node_config(self) -> None:
        """Clone the node repository and copy its stock xray_config.json."""
        s = self.settings
        if s.repo_dir.exists():
            shutil.rmtree(s.repo_dir)
        receipt = self.registry.run(
            "git", "node.clone", operation="clone", url=s.node_repo, dest=str(s.repo_dir),
        )
        if receipt.failed:
            raise ExternalToolFailure.from_receipt(receipt, f"Cloning {s.node_repo}")

        source = s.repo_dir / "xray_config.json"
        if not source.is_file():
            raise ExternalToolFailure(f"{source} not found in the cloned repository")
        shutil.copyfile(source, s.xray_config_file)

    def _open_firewall(self, port: int) -> None:
        if not self.registry.is_available("firewall"):
            self.terminal.warn(f"ufw not found. Please manually open port {port} in your firewall.")
            return
        receipt = self.registry.run("firewall", "node.firewall", operation="allow", port=port)
        if receipt.ok:
            self.terminal.info(f"Firewall rule added for port {port}")
        else:
            self.terminal.warn(f"Could not open port {port}: {receipt.error}")

    # ── Compose helpers ─────────────────────────────────────────

    def _compose_receipt(self, action_id: str, operation: str, **params) -> Receipt:
        return self.registry.run(
            "docker",
            action_id,
            working_dir=str(self.settings.install_dir),
            operation=operation,
            compose_file=str(self.settings.compose_file),
            **params,
        )

    def _compose(self, action_id: str, operation: str, **params) -> None:
        receipt = self._compose_receipt(action_id, operation, **params)
        if receipt.failed:
            raise ExternalToolFailure.from_receipt(receipt, f"docker compose {operation}")
