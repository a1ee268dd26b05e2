"""
Configuration loading

Reads the optional project configuration file (JSON or YAML) into a
GuardianConfig. Every field is optional; a missing file means built-in
rules only.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .models import GuardianConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KEYGUARDIAN_CONFIG"

# Searched in this order in the project root
CONFIG_FILE_NAMES = (
    ".keyguardian.json",
    ".keyguardian.yml",
    ".keyguardian.yaml",
    ".apiguardian.json",
)


class ConfigError(ValueError):
    """Configuration could not be read or is invalid"""


def find_config_file(root: Union[str, Path, None] = None) -> Optional[Path]:
    """Locate the configuration file for a project, if any"""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)

    root_path = Path(root) if root else Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = root_path / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Union[str, Path, None] = None, root: Union[str, Path, None] = None
) -> GuardianConfig:
    """
    Load the scan configuration

    Args:
        path: Explicit configuration file; searched for in root when omitted
        root: Project root used for the search

    Returns:
        GuardianConfig, the defaults when no file exists

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    config_path = Path(path) if path else find_config_file(root)
    if config_path is None:
        logger.debug("No configuration file found, using built-in rules only")
        return GuardianConfig()

    if not config_path.exists():
        if path:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug(f"Configured file {config_path} does not exist, using defaults")
        return GuardianConfig()

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e

    raw = _parse_document(text, config_path)
    if raw is None:
        return GuardianConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain an object")

    try:
        config = GuardianConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def _parse_document(text: str, config_path: Path):
    if config_path.suffix.lower() in (".yml", ".yaml"):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse config file {config_path}: {e}") from e

    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse config file {config_path}: {e}") from e
