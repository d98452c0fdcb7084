"""
Configuration loader: reads the optional YAML config into Settings.

Lookup order:
    explicit --config path  >  MARZNODE_CONFIG env var  >
    /etc/marznode/marznodectl.yml (if present)  >  built-in defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from marznodectl.core.config.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MARZNODE_CONFIG"
SYSTEM_CONFIG_FILE = Path("/etc/marznode/marznodectl.yml")


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing."""


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Resolve which config file applies, if any.

    An explicit path or the env var must exist; the system-wide file is
    only used when present.
    """
    if explicit is not None:
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    if SYSTEM_CONFIG_FILE.is_file():
        return SYSTEM_CONFIG_FILE

    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate installer settings.

    Args:
        path: Explicit config path. If None, see ``find_config_file``.

    Returns:
        Validated Settings (defaults when no file applies).

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = find_config_file(path)
    if path is None:
        logger.debug("No config file, using defaults")
        return Settings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (install_dir=%s)", path, settings.install_dir)
    return settings
