"""Runtime settings: defaults, optional YAML file, environment overrides.

Precedence, lowest to highest: ``Constants`` defaults, the YAML file
(argument or ``GEMLOAD_CONFIG``), environment variables. Configuration
problems never abort the host: they are logged and defaults are kept.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .constants import Constants, EnvVars

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Effective gemload settings."""
    require_paths: Tuple[str, ...] = field(default_factory=lambda: tuple(Constants.REQUIRE_PATHS))
    loadable_suffixes: Tuple[str, ...] = field(default_factory=lambda: tuple(Constants.LOADABLE_SUFFIXES))
    load_path: Tuple[str, ...] = ()
    try_activate: bool = Constants.TRY_ACTIVATE
    log_level: str = Constants.LOG_LEVEL


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def _read_yaml(config_path: str) -> Dict[str, Any]:
    """Return the gemload section of a YAML file, or {} when unusable."""
    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}
    if not isinstance(data, dict):
        return {}
    section = data.get(Constants.CONFIG_SECTION, data)
    return section if isinstance(section, dict) else {}


def apply_mapping(settings: Settings, data: Mapping[str, Any]) -> Settings:
    """Return ``settings`` updated from a config mapping; bad values are skipped."""
    updates: Dict[str, Any] = {}
    for key in ("require_paths", "loadable_suffixes", "load_path"):
        if data.get(key) is not None:
            try:
                updates[key] = _as_tuple(data[key])
            except TypeError:
                logger.warning("Ignoring invalid %s: %r", key, data[key])
    if "try_activate" in data:
        flag = _as_bool(data["try_activate"])
        if flag is None:
            logger.warning("Ignoring invalid try_activate: %r", data["try_activate"])
        else:
            updates["try_activate"] = flag
    if data.get("log_level"):
        updates["log_level"] = str(data["log_level"]).upper()
    return replace(settings, **updates)


def apply_env_overrides(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Apply ``GEMLOAD_*`` environment overrides."""
    env = os.environ if environ is None else environ
    updates: Dict[str, Any] = {}
    level = env.get(EnvVars.LOG_LEVEL.value)
    if level:
        updates["log_level"] = level.strip().upper()
    raw = env.get(EnvVars.TRY_ACTIVATE.value)
    if raw is not None:
        flag = _as_bool(raw)
        if flag is None:
            logger.warning("Ignoring invalid %s=%r", EnvVars.TRY_ACTIVATE.value, raw)
        else:
            updates["try_activate"] = flag
    return replace(settings, **updates)


def load_settings(config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build the effective Settings.

    Args:
        config_path: YAML file; defaults to ``$GEMLOAD_CONFIG`` when set.
        environ: Environment mapping, ``os.environ`` by default.
    """
    env = os.environ if environ is None else environ
    settings = Settings()
    path = config_path or env.get(EnvVars.CONFIG.value)
    if path:
        settings = apply_mapping(settings, _read_yaml(path))
    return apply_env_overrides(settings, env)
