"""Runtime configuration: YAML config file plus CLI overrides.

Precedence, lowest to highest: built-in Constants, the YAML file
(``--config`` or the NIXPIN_CONFIG environment variable), CLI flags.
Applied once at startup, before any resolution starts.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)

_INT_KEYS = {
    "request_timeout": "REQUEST_TIMEOUT",
    "max_concurrency": "MAX_CONCURRENCY",
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration file.

    Args:
        config_path: Explicit path; falls back to NIXPIN_CONFIG.

    Returns:
        Configuration dict; empty when no file is configured or it is unusable.
    """
    config_path = config_path or os.environ.get(Constants.ENV_CONFIG)
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
    # Allow nesting under a top-level "nixpin" key
    section = data.get("nixpin", data)
    return section if isinstance(section, dict) else {}


def apply_config(config: Dict[str, Any]) -> None:
    """Apply config file values to Constants, skipping invalid entries."""
    registry_url = config.get("registry_url")
    if isinstance(registry_url, str) and registry_url:
        Constants.REGISTRY_URL_PYPI = registry_url if registry_url.endswith("/") else registry_url + "/"

    for key, attr in _INT_KEYS.items():
        if key not in config:
            continue
        try:
            value = int(config[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid %s in config: %r", key, config[key])
            continue
        if value > 0:
            setattr(Constants, attr, value)

    strategy = config.get("build_strategy")
    if strategy is not None:
        if str(strategy).lower() in Constants.BUILD_STRATEGIES:
            Constants.BUILD_STRATEGY = str(strategy).lower()
        else:
            logger.warning("Ignoring unknown build_strategy in config: %r", strategy)


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides for runtime tunables (highest precedence)."""
    overrides: Dict[str, Any] = {}
    if getattr(args, "REGISTRY_URL", None):
        overrides["registry_url"] = args.REGISTRY_URL
    if getattr(args, "TIMEOUT", None) is not None:
        overrides["request_timeout"] = args.TIMEOUT
    if getattr(args, "JOBS", None) is not None:
        overrides["max_concurrency"] = args.JOBS
    if getattr(args, "BUILD_STRATEGY", None):
        overrides["build_strategy"] = args.BUILD_STRATEGY
    apply_config(overrides)
