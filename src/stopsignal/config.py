"""Configuration loading and management."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from stopsignal.core.delay import CHUNK_SIZE
from stopsignal.errors import ConfigurationError

CONFIG_FILENAME = "stopsignal.yaml"
ENV_PREFIX = "STOPSIGNAL_"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(slots=True)
class StopSignalConfig:
    """Merged configuration from all sources.

    Priority: CLI args > env vars > config file > defaults
    """

    # Longest raw delay inside a cancelable delay (seconds)
    chunk_size: float = CHUNK_SIZE
    # Timeout applied by the CLI when none is given (seconds, None = no timeout)
    default_timeout: float | None = None

    # Logging
    debug: bool = False
    json_logs: bool = False

    def validate(self) -> None:
        """Raise ConfigurationError on out-of-range values."""
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be > 0, got {self.chunk_size}")
        if self.default_timeout is not None and self.default_timeout < 0:
            raise ConfigurationError(
                f"default_timeout must be >= 0, got {self.default_timeout}"
            )


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if chunk := os.environ.get(f"{ENV_PREFIX}CHUNK_SIZE"):
        overrides["chunk_size"] = chunk
    if timeout := os.environ.get(f"{ENV_PREFIX}DEFAULT_TIMEOUT"):
        overrides["default_timeout"] = timeout
    if debug := os.environ.get(f"{ENV_PREFIX}DEBUG"):
        overrides["debug"] = debug.lower() in _TRUTHY
    if json_logs := os.environ.get(f"{ENV_PREFIX}JSON_LOGS"):
        overrides["json_logs"] = json_logs.lower() in _TRUTHY
    return overrides


def _coerce(name: str, value: Any) -> Any:
    if name in ("chunk_size", "default_timeout"):
        if value is None and name == "default_timeout":
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if isinstance(value, str):
        return value.lower() in _TRUTHY
    return bool(value)


def _apply_dict(config: StopSignalConfig, data: dict[str, Any]) -> None:
    """Apply dictionary values to config, only for known fields."""
    known = {f.name for f in fields(config)}
    for key, value in data.items():
        name = key.replace("-", "_")
        if name in known:
            setattr(config, name, _coerce(name, value))


def load_config(
    *,
    cli_args: dict[str, Any] | None = None,
    config_path: Path | None = None,
    working_dir: str | None = None,
) -> StopSignalConfig:
    """Load configuration from all sources with proper priority.

    Priority: CLI args > env vars (and ``.env``) > config file > defaults.
    Without *config_path*, ``stopsignal.yaml`` in the working directory is
    used when present.
    """
    config = StopSignalConfig()

    base_dir = Path(working_dir or os.getcwd())

    # 1. Config file
    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        path = config_path
    else:
        path = base_dir / CONFIG_FILENAME
    _apply_dict(config, load_yaml_config(path))

    # 2. Environment variables
    load_dotenv(base_dir / ".env")
    _apply_dict(config, _env_overrides())

    # 3. CLI args (highest priority)
    _apply_dict(config, cli_args or {})

    config.validate()
    return config
