"""
Configuration loading for procexit.

Config extends DotDict to load a YAML file, resolve ${dotted.key}
substitutions and apply environment overrides of the form
PROCEXIT_<SECTION>_<KEY>=value.

Example:
    config = Config("etc/procexit.yaml")
    config.get("lifecycle.signals")       # ['SIGINT', 'SIGTERM']

    # PROCEXIT_LOGGING_LEVEL=debug overrides logging.level
"""

import copy
import os
import re
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .dot_dict import DotDict
from .exceptions import ConfigError

MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

ENV_PREFIX = "PROCEXIT_"

DEFAULTS: dict[str, Any] = {
    "lifecycle": {
        "signals": ["SIGINT", "SIGTERM"],
    },
    "logging": {
        "level": "info",
        "location": 0,
        "micros": False,
        "colors": False,
    },
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, val in override.items():
        if isinstance(val, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], val)
        else:
            result[key] = val
    return result


def _convert_env_value(value: str) -> bool | int | float | str | list[Any] | None:
    """
    Convert environment variable string to appropriate type.

    Args:
        value: Environment variable value as string

    Returns:
        None, bool, list (comma-separated), int, float or the original string
    """
    if value.lower() in ("null", "none", ""):
        return None

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    if "," in value:
        return [_convert_env_value(v.strip()) for v in value.split(",")]

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


class Config(DotDict):
    """
    Configuration loaded from YAML on top of DEFAULTS.

    Args:
        fname: Path to the YAML file, or None for defaults only
        enable_env_overrides: Whether to apply PROCEXIT_* environment overrides
        env_prefix: Prefix for environment variables
    """

    def __init__(
        self,
        fname: str | None = None,
        enable_env_overrides: bool = True,
        env_prefix: str = ENV_PREFIX,
    ):
        super().__init__()
        self._enable_env_overrides = enable_env_overrides
        self._env_prefix = env_prefix
        self._config_path: Path | None = None

        data: dict[str, Any] = {}
        if fname is not None:
            self._config_path = Path(fname).resolve()
            data = self._read(self._config_path)
        self._load(data)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], enable_env_overrides: bool = False
    ) -> "Config":
        """Build a Config from an in-memory mapping layered over DEFAULTS."""
        config = cls(enable_env_overrides=enable_env_overrides)
        config._load(data)
        return config

    @property
    def path(self) -> Path | None:
        """Resolved path of the source file, if loaded from one."""
        return self._config_path

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise ConfigError("config file not found", path=str(path))

        file_size = os.path.getsize(path)
        if file_size > MAX_CONFIG_SIZE_BYTES:
            raise ConfigError(
                "config file exceeds maximum size",
                path=str(path),
                size=file_size,
                limit=MAX_CONFIG_SIZE_BYTES,
            )

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"invalid YAML: {e}", path=str(path)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("config root must be a mapping", path=str(path))
        return data

    def _load(self, data: dict[str, Any]) -> None:
        merged = _merge(DEFAULTS, data)
        if self._enable_env_overrides:
            merged = self._apply_env_overrides(merged)

        self.clear()
        self.set(**merged)
        self.set(**self._resolve(self.to_dict()))

    def _resolve(self, content: Any) -> Any:
        """Recursively replace ${dotted.key} references with config values."""
        if isinstance(content, dict):
            return {k: self._resolve(v) for k, v in content.items()}
        if isinstance(content, list):
            return [self._resolve(v) for v in content]
        if isinstance(content, str):
            return re.sub(r"\$\{([a-zA-Z0-9_.]+)\}", self._substitute_var, content)
        return content

    def _substitute_var(self, match: re.Match) -> str:
        name = match.group(1)
        if not self.has(name):
            raise ConfigError("undefined variable in config", variable=name)
        return str(self.get(name))

    def _apply_env_overrides(self, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply PROCEXIT_SECTION_KEY=value overrides to config_data."""
        for env_key, env_value in self.get_env_overrides().items():
            self._set_nested_value(config_data, env_key.split("."), env_value)
        return config_data

    @staticmethod
    def _set_nested_value(data: dict[str, Any], path: list[str], value: Any) -> None:
        current = data
        for part in path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[path[-1]] = value

    def get_env_overrides(self) -> dict[str, Any]:
        """
        Get all environment variable overrides that would be applied.

        Returns:
            Mapping of dotted config path to converted value
        """
        if not self._enable_env_overrides:
            return {}

        overrides = {}
        for key, value in os.environ.items():
            if key.startswith(self._env_prefix) and len(key) > len(self._env_prefix):
                path = key[len(self._env_prefix) :].lower().split("_")
                overrides[".".join(path)] = _convert_env_value(value)
        return overrides
