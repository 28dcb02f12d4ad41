"""Repository priority configuration loading.

The configuration is a YAML (or JSON) document listing repository base URLs
with their APT-style pin priority:

    repositories:
      - url: https://deb.example.org/debian
        priority: 990
      - url: https://mirror.example.org/unwanted
        priority: -1

A bare list of entries is accepted as well. The file named on the command
line wins over the DEBSOLVE_PRIORITY_CONFIG environment variable; with neither,
every repository runs at the default priority.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml
from jsonschema import Draft7Validator

from constants import Constants
from resolver.errors import ConfigError
from resolver.models import PriorityConfig, RepositoryPriorityEntry

logger = logging.getLogger(__name__)

_ENTRY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {"type": "string", "minLength": 1},
        "priority": {"type": "integer"},
        "name": {"type": "string"},
    },
    "required": ["url"],
}

PRIORITY_CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "oneOf": [
        {
            "type": "object",
            "properties": {"repositories": {"type": "array", "items": _ENTRY_SCHEMA}},
            "required": ["repositories"],
        },
        {"type": "array", "items": _ENTRY_SCHEMA},
    ],
}


def validate_priority_config(data: Any) -> None:
    """Validate raw configuration data and raise on the first error.

    Raises:
        ConfigError: with the JSON path of the first schema violation.
    """
    validator = Draft7Validator(PRIORITY_CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join(str(p) for p in first.absolute_path)
        raise ConfigError(f"Invalid priority configuration at '{path}': {first.message}")


def priority_config_from_data(data: Any) -> PriorityConfig:
    """Build a PriorityConfig from already-parsed YAML/JSON data."""
    if data is None:
        return PriorityConfig()
    validate_priority_config(data)
    raw_entries = data["repositories"] if isinstance(data, dict) else data
    entries = [
        RepositoryPriorityEntry(
            repo_base_url_prefix=str(item["url"]).rstrip("/"),
            priority=int(item.get("priority", 0) or 0),
        )
        for item in raw_entries
    ]
    return PriorityConfig.from_entries(entries)


def load_priority_config(path: str) -> PriorityConfig:
    """Read and validate a priority configuration file.

    Raises:
        ConfigError: the file is missing, unreadable, not YAML or invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config {path}: {exc}") from exc
    config = priority_config_from_data(data)
    logger.info("Loaded %d repository priorities from %s", len(config.entries), path)
    return config


def resolve_priority_config_path(cli_path: Optional[str]) -> Optional[str]:
    """Pick the config path: CLI argument first, then the environment."""
    if cli_path:
        return cli_path
    env_path = os.environ.get(Constants.ENV_PRIORITY_CONFIG, "").strip()
    return env_path or None


def get_priority_config(args) -> PriorityConfig:
    """Priority configuration for parsed CLI args (empty when none is configured)."""
    path = resolve_priority_config_path(getattr(args, "PRIORITY_CONFIG", None))
    if path is None:
        logger.debug("No repository priority configuration; using defaults")
        return PriorityConfig()
    return load_priority_config(path)
