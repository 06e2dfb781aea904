"""Combine configuration sources into a validated ``CardTransferConfig``.

Settings are always two levels deep (``section.field``), so every source is
normalized to a ``{section: {field: value}}`` mapping before merging.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import CardTransferConfig

ENV_PREFIX = "CARDTRANSFER__"

SectionOverrides = Dict[str, Dict[str, Any]]


def known_keys() -> Dict[str, Tuple[str, ...]]:
    """Return the field names of every configuration section."""
    return {
        section: tuple(values)
        for section, values in CardTransferConfig().model_dump(mode="python").items()
    }


def split_key(key: str) -> Tuple[str, str]:
    """Split a dotted ``section.field`` key such as ``transfer.gap_hours``.

    Raises:
        ConfigError: If the key does not name a known setting.
    """
    section, _, field = key.strip().partition(".")
    fields = known_keys()
    if section not in fields:
        raise ConfigError(
            f"Unknown configuration section '{section}'. "
            f"Expected one of: {', '.join(sorted(fields))}."
        )
    if field not in fields[section]:
        raise ConfigError(
            f"Unknown setting '{key}'. '{section}' accepts: {', '.join(fields[section])}."
        )
    return section, field


def env_key(section: str, field: str) -> str:
    """Return the environment variable that overrides ``section.field``."""
    return f"{ENV_PREFIX}{section.upper()}__{field.upper()}"


def parse_env(env: Mapping[str, str]) -> SectionOverrides:
    """Collect ``CARDTRANSFER__SECTION__FIELD`` variables as section overrides.

    Values are parsed as YAML scalars so ``true``, ``4.5`` and ``[cr2, jpg]``
    arrive typed; unparsable text is kept verbatim.
    """
    overrides: SectionOverrides = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, sep, field = name[len(ENV_PREFIX) :].lower().partition("__")
        if not sep:
            raise ConfigError(f"{name} must name a setting as {ENV_PREFIX}SECTION__FIELD.")
        section, field = split_key(f"{section}.{field}")
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        overrides.setdefault(section, {})[field] = value
    return overrides


def parse_dotted(overrides: Mapping[str, Any]) -> SectionOverrides:
    """Convert ``{"transfer.gap_hours": 2.0}`` style overrides to sections."""
    sections: SectionOverrides = {}
    for key, value in overrides.items():
        section, field = split_key(key)
        sections.setdefault(section, {})[field] = value
    return sections


def resolve_with_precedence(
    *,
    defaults: CardTransferConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: SectionOverrides | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> CardTransferConfig:
    """Merge configuration sources: defaults < file < environment < CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: Section mapping read from the YAML file.
        env_overrides: Section mapping produced by :func:`parse_env`.
        cli_overrides: Dotted-key overrides from the command line.

    Returns:
        CardTransferConfig: Validated configuration.

    Raises:
        ConfigError: If a source is malformed or a value fails validation.
    """
    merged = defaults.model_dump(mode="python")
    layers = (
        ("file", file_overrides or {}),
        ("environment", env_overrides or {}),
        ("cli", parse_dotted(cli_overrides or {})),
    )
    for source, layer in layers:
        for section, values in layer.items():
            if not isinstance(values, Mapping):
                raise ConfigError(f"The {source} value for '{section}' must be a mapping.")
            # Unknown sections fall through to validation, which rejects them.
            merged.setdefault(section, {}).update(values)

    try:
        return CardTransferConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: CardTransferConfig) -> Dict[str, str]:
    """Render every setting as the environment variable that would set it."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for field, value in values.items():
            if isinstance(value, list):
                rendered = yaml.safe_dump(value, default_flow_style=True).strip()
            else:
                rendered = str(value)
            flat[env_key(section, field)] = rendered
    return flat


__all__ = [
    "ENV_PREFIX",
    "env_key",
    "flatten_for_env",
    "known_keys",
    "parse_dotted",
    "parse_env",
    "resolve_with_precedence",
    "split_key",
]
