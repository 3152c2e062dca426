import os
from collections.abc import Mapping
from typing import Any

import yaml

from pod_reaper.errors import ConfigurationError

# ----------------------------
# Configuration source
# ----------------------------


def _to_setting(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def load_config_file(path: str) -> dict[str, str]:
    """
    Read a flat YAML mapping of setting names to values.

    Lists become comma-separated strings; null entries are dropped.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"could not read config file {path}: {exc}") from exc

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    settings: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            raise ConfigurationError(f"config value for {key} must be a scalar or a list")
        setting = _to_setting(value)
        if setting is not None:
            settings[str(key)] = setting
    return settings


def load_config(
    path: str | None = None, environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """
    Merge the optional YAML file with the environment, environment winning.
    """
    environ = os.environ if environ is None else environ
    config = load_config_file(path) if path else {}
    config.update(environ)
    return config
