"""Compose descriptor generation for the marznode service."""

from __future__ import annotations

import logging

import yaml

from marznodectl.core.config.settings import Settings

logger = logging.getLogger(__name__)


def compose_document(settings: Settings, port: int) -> dict:
    """The compose mapping for one ``marznode`` service on ``port``."""
    inner = settings.container_dir.rstrip("/")
    return {
        "services": {
            settings.service_name: {
                "image": settings.image,
                "restart": "always",
                "network_mode": "host",
                "environment": {
                    "SERVICE_PORT": str(port),
                    "XRAY_EXECUTABLE_PATH": f"{inner}/xray",
                    "XRAY_ASSETS_PATH": f"{inner}/data",
                    "XRAY_CONFIG_PATH": f"{inner}/xray_config.json",
                    "SSL_CLIENT_CERT_FILE": f"{inner}/client.pem",
                    "SSL_KEY_FILE": "./server.key",
                    "SSL_CERT_FILE": "./server.cert",
                },
                "volumes": [f"{settings.install_dir}:{inner}"],
            },
        },
    }


def render_compose(settings: Settings, port: int) -> str:
    """Compose YAML text for the node service."""
    return yaml.dump(
        compose_document(settings, port),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def write_compose(settings: Settings, port: int) -> None:
    """Write the descriptor to ``settings.compose_file``."""
    settings.compose_file.parent.mkdir(parents=True, exist_ok=True)
    settings.compose_file.write_text(render_compose(settings, port), encoding="utf-8")
    logger.info("Compose file written: %s (port %d)", settings.compose_file, port)


def read_service_port(settings: Settings) -> int | None:
    """``SERVICE_PORT`` from the existing descriptor, or None if unreadable."""
    try:
        document = yaml.safe_load(settings.compose_file.read_text(encoding="utf-8"))
        raw = document["services"][settings.service_name]["environment"]["SERVICE_PORT"]
        return int(raw)
    except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        logger.debug("No service port in %s: %s", settings.compose_file, e)
        return None
