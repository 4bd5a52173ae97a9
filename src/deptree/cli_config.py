"""Runtime configuration: YAML config file, environment and CLI overrides.

Everything lands on ``Constants``. Sources are applied lowest precedence
first (config file, then environment, then CLI flags), and a bad value is
logged and skipped rather than aborting the run.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import yaml

from .constants import Constants

logger = logging.getLogger(__name__)

# config key -> (Constants attribute, converter)
_SETTINGS: Dict[str, tuple] = {
    "registry": ("REGISTRY_URL_NPM", str),
    "request_timeout": ("REQUEST_TIMEOUT", float),
    "retries": ("HTTP_RETRY_MAX", int),
    "concurrency": ("PACKUMENT_FETCH_CONCURRENCY", int),
    "cache_max_age": ("PACKUMENT_CACHE_MAX_AGE_SEC", int),
    "cache_max_entries": ("PACKUMENT_CACHE_MAX_ENTRIES", int),
}
_PLATFORM_SETTINGS = {"os": "TARGET_OS", "cpu": "TARGET_CPU", "libc": "TARGET_LIBC"}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the ``deptree`` section of a YAML (or JSON) config file.

    Args:
        config_path: Path to the config file.

    Returns:
        Configuration dict; empty when the file is missing or unreadable.
    """
    if not config_path:
        return {}

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


def _set_constant(attr: str, raw: Any, convert: Callable[[Any], Any], source: str) -> None:
    try:
        value = convert(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s value for %s: %r", source, attr, raw)
        return
    if isinstance(value, (int, float)) and value <= 0:
        logger.warning("Ignoring non-positive %s value for %s: %r", source, attr, raw)
        return
    setattr(Constants, attr, value)


def apply_config(config: Dict[str, Any]) -> None:
    """Apply config-file settings to Constants."""
    for key, (attr, convert) in _SETTINGS.items():
        if config.get(key) is not None:
            _set_constant(attr, config[key], convert, "config")

    platform = config.get("platform")
    if isinstance(platform, dict):
        for key, attr in _PLATFORM_SETTINGS.items():
            if platform.get(key):
                _set_constant(attr, platform[key], str, "config")


def apply_env_overrides() -> None:
    """Apply environment overrides (registry URL)."""
    registry = os.environ.get(Constants.ENV_REGISTRY_URL)
    if registry and registry.strip():
        Constants.REGISTRY_URL_NPM = registry.strip()


def apply_cli_overrides(args) -> None:
    """Apply CLI flags, which take precedence over every other source."""
    if getattr(args, "REGISTRY", None):
        Constants.REGISTRY_URL_NPM = args.REGISTRY
    if getattr(args, "CONCURRENCY", None) is not None:
        _set_constant("PACKUMENT_FETCH_CONCURRENCY", args.CONCURRENCY, int, "CLI")
    if getattr(args, "TIMEOUT", None) is not None:
        _set_constant("REQUEST_TIMEOUT", args.TIMEOUT, float, "CLI")
    for attr in _PLATFORM_SETTINGS.values():
        if getattr(args, attr, None):
            setattr(Constants, attr, getattr(args, attr))


def configure_runtime(args) -> None:
    """Load config file, then environment, then CLI flags onto Constants."""
    apply_config(load_config(getattr(args, "CONFIG", None)))
    apply_env_overrides()
    apply_cli_overrides(args)
