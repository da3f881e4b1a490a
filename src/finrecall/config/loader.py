"""Configuration loading and validation."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from finrecall.config.schema import FinrecallConfig

DEFAULT_CONFIG_PATH = Path.home() / ".finrecall" / "finrecall.yaml"


class ConfigError(Exception):
    """Configuration loading or validation error."""


def load_config(path: str | Path | None = None) -> FinrecallConfig:
    """Load and validate finrecall configuration from a YAML file.

    Args:
        path: Path to config file. If None, tries the default location.
              A missing or empty file yields the default config.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If the file exists but is invalid
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if not path.exists():
        return FinrecallConfig()

    try:
        with open(path) as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config from {path}: {e}") from e

    if config_data is None:
        return FinrecallConfig()
    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")

    try:
        return FinrecallConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e


def save_config(config: FinrecallConfig, path: str | Path | None = None) -> None:
    """Save configuration to a YAML file.

    Args:
        config: Configuration object to save
        path: Destination path. If None, uses the default location.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
