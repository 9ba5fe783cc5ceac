from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTION_KEYS: tuple[str, ...] = ("logging", "streaming")
_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment")

# Flat keys (ENV / CLI) -> (section, key)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    **{
        f"streaming_{name}": ("streaming", name)
        for name in (
            "profile_id",
            "allow_uncached",
            "auto_play",
            "duplicate_policy",
            "max_concurrent_addons",
            "addon_timeout_seconds",
        )
    },
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` in place; nested mappings merge."""
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, Mapping):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape of config.yaml.

    Sectioned blocks pass through; flat ``streaming_*``/``log_*`` keys
    are moved under their section.
    """
    out: dict[str, Any] = {
        section: deepcopy(dict(data[section]))
        for section in _SECTION_KEYS
        if isinstance(data.get(section), Mapping)
    }
    out.update({key: data[key] for key in _TOP_LEVEL_KEYS if key in data})

    for flat_key, (section, section_key) in _FLAT_KEYS.items():
        if flat_key in data:
            out.setdefault(section, {})[section_key] = data[flat_key]
    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load config with precedence defaults < YAML < env vars < CLI.

    A given ``.env`` file feeds the env-var layer without overriding
    variables that are already set. Missing files raise FileNotFoundError.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    merged = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        _deep_merge(merged, _normalize_layer(_read_yaml_config(config_path)))

    _deep_merge(merged, _normalize_layer(EnvOverrides().to_update_dict()))
    _deep_merge(merged, _normalize_layer(cli_overrides or {}))

    return AppConfig.model_validate(merged)
