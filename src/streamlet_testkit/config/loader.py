from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from streamlet_testkit.config.models import HarnessSettings


class ConfigError(ValueError):
    # Raised for invalid harness config (fail fast).
    pass


def load_yaml_config(path: Path) -> dict[str, object]:
    # Returns the raw mapping; validation happens in `settings_from_mapping`.
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def settings_from_mapping(raw: dict[str, object]) -> HarnessSettings:
    # Harness settings may live at the root or under a `harness` section.
    section = raw.get("harness", raw)
    if not isinstance(section, dict):
        raise ConfigError("harness must be a mapping when provided")
    try:
        return HarnessSettings.model_validate(section)
    except ValidationError as exc:
        raise ConfigError(f"Invalid harness config: {exc}") from exc


def load_settings(path: Path) -> HarnessSettings:
    return settings_from_mapping(load_yaml_config(path))
