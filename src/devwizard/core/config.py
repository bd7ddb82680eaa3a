"""Configuration resolver with 4-level priority.

Priority (highest to lowest):
1. CLI arguments
2. Environment variables (DEV_WIZARD_*)
3. Config files (user > system)
4. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from devwizard.core.errors import ConfigError

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"
DEFAULT_ANSWERS_DIR = ".dev-wizard/answers"

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


@dataclass
class ConfigSource:
    """Represents where a config value came from."""

    value: Any
    source: str  # 'cli' | 'env' | 'user_config' | 'system_config' | 'default'


@dataclass(frozen=True)
class LoggingPolicy:
    """Resolved, immutable logging policy."""

    level_name: str  # quiet | normal | verbose | debug
    emit_info: bool
    emit_debug: bool
    source: ConfigSource


@dataclass(frozen=True)
class ExecutionSettings:
    """Sandbox metadata recorded under ``meta.execution`` of an answers file."""

    sandbox: bool | None = None
    sandbox_slug: str | None = None

    def to_metadata(self) -> dict[str, Any] | None:
        if self.sandbox is None and not self.sandbox_slug:
            return None
        out: dict[str, Any] = {}
        if self.sandbox is not None:
            out["sandbox"] = self.sandbox
        if self.sandbox_slug:
            out["sandboxSlug"] = self.sandbox_slug
        return out


class ConfigResolver:
    """Resolve configuration with strict 4-level priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'logging': {'level': 'debug'}},
            user_config_path=Path('~/.config/dev-wizard/config.yaml')
        )

        level, source = resolver.resolve('logging.level')
        # level = 'debug', source = 'cli'
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
            cli_args: Arguments from CLI (highest priority)
            user_config_path: Path to user config file
            system_config_path: Path to system config file
            defaults: Default values (lowest priority)
        """
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or Path.home() / ".config/dev-wizard/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/dev-wizard/config.yaml")
        self.defaults = defaults if defaults is not None else self._default_config()

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (supports dot notation: 'logging.level')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self._get_nested(self.cli_args, key)
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

    def try_resolve(self, key: str) -> tuple[Any, str] | None:
        try:
            return self.resolve(key)
        except ConfigError as e:
            if "not found in any source" in str(e):
                return None
            raise

    def resolve_logging_level(self) -> str:
        """Resolve and validate logging.level.

        If the key is not provided by any source, returns DEFAULT_LOGGING_LEVEL.

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        return self._resolve_logging_level_and_source()[0]

    def resolve_logging_policy(self) -> LoggingPolicy:
        level_name, source = self._resolve_logging_level_and_source()
        return LoggingPolicy(
            level_name=level_name,
            emit_info=level_name != "quiet",
            emit_debug=level_name in {"verbose", "debug"},
            source=source,
        )

    def resolve_flag(self, key: str, default: bool = False) -> bool:
        """Resolve a boolean key; strings such as "0", "off" or "false" are False."""
        found = self.try_resolve(key)
        if found is None:
            return default
        value = found[0]
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        raise ConfigError(f"Config key '{key}' must be a bool, got {type(value).__name__}")

    def resolve_answers_dir(self, repo_root: Path) -> Path:
        """Directory holding answers files, anchored at ``repo_root`` when relative."""
        found = self.try_resolve("answers.dir")
        raw = found[0] if found is not None else DEFAULT_ANSWERS_DIR
        if not isinstance(raw, str) or raw.strip() == "":
            raise ConfigError("Config key 'answers.dir' must be a non-empty string")
        path = Path(raw.strip()).expanduser()
        return path if path.is_absolute() else repo_root / path

    def resolve_execution_settings(self) -> ExecutionSettings:
        """Resolve sandbox flags (``sandbox`` / ``sandbox_slug``)."""
        sandbox: bool | None = None
        found = self.try_resolve("sandbox")
        if found is not None:
            value, source = found
            if isinstance(value, bool):
                sandbox = value
            elif isinstance(value, str):
                enabled = value.strip().lower() not in _FALSE_STRINGS
                # An env flag only ever switches the sandbox on.
                if enabled or source != "env":
                    sandbox = enabled
            else:
                raise ConfigError(
                    f"Config key 'sandbox' must be a bool, got {type(value).__name__}"
                )

        slug: str | None = None
        found = self.try_resolve("sandbox_slug")
        if found is not None and isinstance(found[0], str) and found[0].strip():
            slug = found[0].strip()

        return ExecutionSettings(sandbox=sandbox, sandbox_slug=slug)

    def _resolve_logging_level_and_source(self) -> tuple[str, ConfigSource]:
        key = "logging.level"
        found = self.try_resolve(key)
        if found is None:
            return DEFAULT_LOGGING_LEVEL, ConfigSource(value=DEFAULT_LOGGING_LEVEL, source="default")

        value, source = found
        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {allowed}")

        return norm, ConfigSource(value=norm, source=source)

    def _from_env(self, key: str) -> Any | None:
        """Get value from environment variables.

        Environment variable format: DEV_WIZARD_KEY_NAME
        Example: DEV_WIZARD_SANDBOX, DEV_WIZARD_LOGGING_LEVEL
        """
        env_key = f"DEV_WIZARD_{key.upper().replace('.', '_')}"
        return os.environ.get(env_key)

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
            data = {'logging': {'level': 'debug'}}
            _get_nested(data, 'logging.level') -> 'debug'
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
        """Default configuration."""
        return {
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
                "color": True,
            },
            "answers": {
                "dir": DEFAULT_ANSWERS_DIR,
            },
        }
