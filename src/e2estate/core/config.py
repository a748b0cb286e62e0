"""Configuration resolver with 4-level priority.

Priority (highest to lowest):
1. CLI arguments
2. Environment variables (E2ESTATE_*)
3. Config files (user > system)
4. Defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from e2estate.core.errors import ConfigError

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigResolver:
    """Resolve configuration with strict priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'lock': {'timeout_ms': 250}},
            user_config_path=Path('~/.config/e2estate/config.yaml'),
        )

        timeout, source = resolver.resolve('lock.timeout_ms')
        # timeout = 250, source = 'cli'
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        """Initialize config resolver.

        Args:
            cli_args: Arguments from CLI (highest priority); nested dicts or
                dotted keys are both accepted
            user_config_path: Path to user config file
            system_config_path: Path to system config file
            defaults: Default values (lowest priority)
        """
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or Path.home() / ".config/e2estate/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/e2estate/config.yaml")
        self.defaults = defaults if defaults is not None else self._default_config()

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (supports dot notation: 'lock.timeout_ms')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self._from_cli(key)
        if value is not None:
            return value, "cli"

        value = self._from_env(key)
        if value is not None:
            return value, "env"

        value = self._get_nested(self._get_user_config(), key)
        if value is not None:
            return value, "user_config"

        value = self._get_nested(self._get_system_config(), key)
        if value is not None:
            return value, "system_config"

        value = self._get_nested(self.defaults, key)
        if value is not None:
            return value, "default"

        raise ConfigError(f"Config key '{key}' not found in any source")

    def resolve_optional(self, key: str) -> Any | None:
        """Resolve a key, returning None when no source provides it."""
        try:
            value, _src = self.resolve(key)
        except ConfigError:
            return None
        return value

    def resolve_int(self, key: str, *, minimum: int = 0) -> int:
        """Resolve an integer key; numeric strings (from env) are accepted."""
        value, source = self.resolve(key)
        if isinstance(value, bool):
            raise ConfigError(f"Config key '{key}' must be an int, got bool")
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ConfigError(
                    f"Config key '{key}' must be an int, got {value!r} (from {source})"
                ) from None
        if not isinstance(value, int):
            raise ConfigError(f"Config key '{key}' must be an int, got {type(value).__name__}")
        if value < minimum:
            raise ConfigError(f"Config key '{key}' must be >= {minimum}, got {value}")
        return value

    def resolve_bool(self, key: str, *, default: bool = False) -> bool:
        value = self.resolve_optional(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return bool(value)
        s = str(value).strip().lower()
        if s in _TRUE_VALUES:
            return True
        if s in _FALSE_VALUES:
            return False
        raise ConfigError(f"Config key '{key}' must be a bool, got {value!r}")

    def resolve_path(self, key: str) -> Path:
        value, _src = self.resolve(key)
        if not isinstance(value, (str, Path)) or str(value).strip() == "":
            raise ConfigError(f"Config key '{key}' must be a non-empty path string")
        return Path(str(value)).expanduser()

    def resolve_logging_level(self) -> str:
        """Resolve and validate logging.level.

        Allowed values (after normalization): quiet | normal | verbose | debug.
        Missing everywhere -> DEFAULT_LOGGING_LEVEL.

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        key = "logging.level"
        value = self.resolve_optional(key)
        if value is None:
            return DEFAULT_LOGGING_LEVEL
        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {allowed}")
        return norm

    def _from_cli(self, key: str) -> Any | None:
        if key in self.cli_args:
            return self.cli_args[key]
        return self._get_nested(self.cli_args, key)

    def _from_env(self, key: str) -> Any | None:
        """Environment variable format: E2ESTATE_LOCK_TIMEOUT_MS for lock.timeout_ms."""
        env_key = f"E2ESTATE_{key.upper().replace('.', '_')}"
        value = os.environ.get(env_key)
        if value is None or value.strip() == "":
            return None
        return value

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _get_system_config(self) -> dict[str, Any]:
        if self._system_config is None:
            self._system_config = self._load_yaml(self.system_config_path)
        return self._system_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except Exception as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'lock': {'stale_seconds': 120}}
            _get_nested(data, 'lock.stale_seconds') -> 120
        """
        current: Any = data

        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None

        return current

    @staticmethod
    def _default_config() -> dict[str, Any]:
        cache_dir = Path.home() / ".cache" / "e2estate"
        return {
            "state": {
                "path": str(cache_dir / "preferred-ids.json"),
            },
            "lock": {
                "timeout_ms": 5000,
                "retry_delay_ms": 100,
                "stale_seconds": 120,
            },
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
            },
            "diagnostics": {
                "enabled": False,
                "path": str(cache_dir / "diagnostics.jsonl"),
            },
        }
