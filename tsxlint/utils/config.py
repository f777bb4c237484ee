"""
Configuration management for tsxlint.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "tsxlint"
    version: str = "0.1.0"
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: str | None = None


class LocatorConfig(BaseModel):
    """Marker locator configuration."""

    model_config = ConfigDict(extra="forbid")

    # Comment token that flags the following template literal
    marker: str = "tsx"
    node_types: list[str] = Field(default_factory=lambda: ["template_string"])
    # Grammar used when the file suffix is not recognized
    default_language: str = "typescript"


class FormatterConfig(BaseModel):
    """External formatter configuration.

    Notes:
    - `command` is executed without a shell; `--parser <parser>` is appended.
    - timeout_seconds / max_concurrency of 0 mean "no limit".
    - jitter_max_seconds delays each call by a random amount before it starts.
    """

    model_config = ConfigDict(extra="forbid")

    command: list[str] = Field(
        default_factory=lambda: ["npx", "--no-install", "prettier"]
    )
    parser: str = "typescript"
    timeout_seconds: float = 30.0
    max_concurrency: int = 8
    jitter_max_seconds: float = 0.0


class OutputConfig(BaseModel):
    """Output file configuration."""

    model_config = ConfigDict(extra="forbid")

    # exhibitA.ts -> exhibitA-linted.ts
    suffix: str = "-linted"


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    formatter: FormatterConfig = Field(default_factory=FormatterConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_yaml_config(config_dir: Path) -> dict[str, Any]:
    """Load settings.yaml with local.yaml overrides.

    local.yaml uses the same layout as settings.yaml, e.g.:
        formatter:
          timeout_seconds: 120

    Args:
        config_dir: Configuration directory path.

    Returns:
        Merged configuration dictionary.
    """
    config = _read_yaml(config_dir / "settings.yaml")
    return _deep_merge(config, _read_yaml(config_dir / "local.yaml"))


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables should be prefixed with TSXLINT_ and use
    double underscores for nested keys.

    Example:
        TSXLINT_FORMATTER__TIMEOUT_SECONDS=60

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment overrides.
    """
    prefix = "TSXLINT_"

    for key, value in os.environ.items():
        if not key.startswith(prefix) or "__" not in key:
            continue

        key_path = key[len(prefix) :].lower().split("__")

        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        final_key = key_path[-1]
        try:
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif "." in value:
                current[final_key] = float(value)
            else:
                current[final_key] = int(value)
        except ValueError:
            current[final_key] = value

    return config


def get_config_dir() -> Path:
    """Return the configuration directory (TSXLINT_CONFIG_DIR or ./config)."""
    return Path(os.environ.get("TSXLINT_CONFIG_DIR", "config"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Settings are loaded from:
    1. Default values
    2. YAML configuration files
    3. Environment variables (highest priority)

    Returns:
        Settings instance.
    """
    config = _load_yaml_config(get_config_dir())
    config = _apply_env_overrides(config)
    return Settings(**config)
