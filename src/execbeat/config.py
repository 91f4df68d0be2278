"""Configuration loading for execbeat."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from execbeat.models import BeatConfig

CONFIG_ENV_VAR = "EXECBEAT_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".execbeat" / "execbeat.yaml"


class ConfigError(Exception):
    """Error loading or validating configuration."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Resolve which configuration file to use.

    Checks in order of priority:
    1. Explicit path argument
    2. EXECBEAT_CONFIG environment variable
    3. ~/.execbeat/execbeat.yaml

    Returns:
        Path to the configuration file (which may not exist).
    """
    if path:
        return Path(path).expanduser()
    if env_path := os.environ.get(CONFIG_ENV_VAR):
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | str | None = None) -> BeatConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the file, resolved with resolve_config_path().

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the file cannot be parsed or is invalid.
        FileNotFoundError: If the file does not exist.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise ConfigError(f"Empty config file: {config_path}")

    return parse_config(data, source=str(config_path))


def load_config_string(content: str) -> BeatConfig:
    """Load configuration from a YAML string.

    Raises:
        ConfigError: If the content cannot be parsed or is invalid.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise ConfigError("Empty config content")

    return parse_config(data)


def parse_config(data: Any, source: str = "<dict>") -> BeatConfig:
    """Validate configuration data.

    Args:
        data: Configuration as a dictionary.
        source: Source identifier for error messages.

    Returns:
        Validated configuration.

    Raises:
        ConfigError: If the data is invalid.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping ({source}), got {type(data).__name__}")

    try:
        return BeatConfig.model_validate(data)
    except ValidationError as e:
        # Convert Pydantic errors to more readable format
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(
                {
                    "location": loc,
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

        error_messages = [f"  {err['location']}: {err['message']}" for err in errors]
        msg = f"Config validation failed ({source}):\n" + "\n".join(error_messages)
        raise ConfigError(msg, errors=errors) from e
