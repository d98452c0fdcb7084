"""
Settings: every constant the installer works with.

Defaults reproduce the stock MarzNode layout. Any field can be
overridden from the YAML config file (see ``loader.py``).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

SCRIPT_NAME = "marznode"

DEFAULT_DEPENDENCIES = [
    "docker",
    "docker-compose",
    "curl",
    "wget",
    "unzip",
    "git",
    "jq",
]


class Settings(BaseModel):
    """Installer configuration."""

    # ── Layout ──────────────────────────────────────────────────
    install_dir: Path = Path("/var/lib/marznode")
    compose_filename: str = "docker-compose.yml"
    state_filename: str = "state.json"
    log_filename: str = "marznode.log"

    # ── Service ─────────────────────────────────────────────────
    service_name: str = "marznode"
    image: str = "dawsh/marznode:latest"
    default_port: int = 5566
    container_dir: str = "/var/lib/marznode"

    # ── Upstream sources ────────────────────────────────────────
    node_repo: str = "https://github.com/marzneshin/marznode.git"
    xray_releases_api: str = "https://api.github.com/repos/XTLS/Xray-core/releases"
    xray_download_base: str = "https://github.com/XTLS/Xray-core/releases/download"
    geoip_url: str = (
        "https://github.com/Loyalsoldier/v2ray-rules-dat/releases/latest/download/geoip.dat"
    )
    geosite_url: str = (
        "https://github.com/Loyalsoldier/v2ray-rules-dat/releases/latest/download/geosite.dat"
    )
    version_choices: int = 10

    # ── Host dependencies ───────────────────────────────────────
    dependencies: list[str] = Field(default_factory=lambda: list(DEFAULT_DEPENDENCIES))
    required_dependencies: list[str] = Field(
        default_factory=lambda: ["docker", "docker-compose", "git"]
    )
    docker_bootstrap_url: str = "https://get.docker.com"
    compose_binary_url: str = (
        "https://github.com/docker/compose/releases/download/1.29.2/"
        "docker-compose-{system}-{machine}"
    )
    compose_binary_path: Path = Path("/usr/local/bin/docker-compose")

    # ── Self-install ────────────────────────────────────────────
    script_path: Path = Path(f"/usr/local/bin/{SCRIPT_NAME}")
    script_source: str = "marznodectl"

    @field_validator("default_port")
    @classmethod
    def _port_range(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"default_port must be 1-65535, got {v}")
        return v

    @field_validator("version_choices")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("version_choices must be at least 1")
        return v

    # ── Derived paths ───────────────────────────────────────────

    @property
    def compose_file(self) -> Path:
        return self.install_dir / self.compose_filename

    @property
    def state_file(self) -> Path:
        return self.install_dir / self.state_filename

    @property
    def log_file(self) -> Path:
        return self.install_dir / self.log_filename

    @property
    def data_dir(self) -> Path:
        return self.install_dir / "data"

    @property
    def repo_dir(self) -> Path:
        return self.install_dir / "repo"

    @property
    def certificate_file(self) -> Path:
        return self.install_dir / "client.pem"

    @property
    def xray_config_file(self) -> Path:
        return self.install_dir / "xray_config.json"

    @property
    def xray_executable(self) -> Path:
        return self.install_dir / "xray"
