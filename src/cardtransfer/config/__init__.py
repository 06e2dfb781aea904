"""Configuration management for cardtransfer."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import CardTransferConfig
from .resolver import (
    ENV_PREFIX,
    flatten_for_env,
    parse_env,
    resolve_with_precedence,
    split_key,
)

DEFAULT_CONFIG_PATH = Path("~/.cardtransfer/config.yaml")
_CONFIG_HEADER = (
    "# cardtransfer configuration file\n"
    "# Edit by hand or with `cardtransfer config set SECTION.FIELD --value VALUE`.\n"
)


class ConfigManager:
    """Read and write the YAML settings file and resolve effective settings."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> CardTransferConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides such as ``{"transfer.gap_hours": 2}``.
            include_env: Whether ``CARDTRANSFER__*`` variables are applied.
            ensure_file: Create the settings file with defaults when missing.
            env_overrides: Environment to read instead of the process environment.

        Raises:
            ConfigError: If the file or an override is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        env = None
        if include_env:
            env = parse_env(env_overrides if env_overrides is not None else self._env)
        return resolve_with_precedence(
            defaults=CardTransferConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the sections stored in the settings file."""
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{self._config_path} must contain a mapping of sections.")
        return raw

    def save(self, config: CardTransferConfig | Mapping[str, Any]) -> None:
        """Write settings to the file, replacing its contents."""
        if isinstance(config, CardTransferConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        text = _CONFIG_HEADER + yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(text, encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Create the settings file with defaults if it does not exist."""
        if not self._config_path.exists():
            self.save(CardTransferConfig())
        return self._config_path

    def read_text(self) -> str:
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, raw_value: str) -> CardTransferConfig:
        """Persist one setting given as ``section.field`` and a YAML literal.

        The file is only rewritten when the result validates.

        Returns:
            CardTransferConfig: Configuration resolved from the updated file.

        Raises:
            ConfigError: If the key is unknown or the value is invalid.
        """
        section, field = split_key(key)
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value for {key}: {exc}") from exc

        data = self.load_file_overrides()
        current = data.get(section)
        if current is None:
            current = data[section] = {}
        elif not isinstance(current, dict):
            raise ConfigError(f"Section '{section}' in {self._config_path} is not a mapping.")
        current[field] = value

        resolved = resolve_with_precedence(defaults=CardTransferConfig(), file_overrides=data)
        self.save(data)
        return resolved


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "CardTransferConfig",
    "ConfigError",
    "ENV_PREFIX",
    "flatten_for_env",
    "resolve_with_precedence",
]
