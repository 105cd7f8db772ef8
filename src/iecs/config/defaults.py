"""Configuration management utilities for iecs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

__all__ = [
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
    "merge_config",
]

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}

# Environment variable -> (section, key); section None means top level.
_ENV_TO_CONFIG_KEY = {
    "IECS_THEME": (None, "theme"),
    "IECS_DEMO": (None, "demo"),
    "IECS_SESSION_PLUGIN": ("exec", "session_plugin"),
    "IECS_LOG_DIR": ("logging", "dir"),
    "AWS_REGION": ("aws", "region"),
    "AWS_DEFAULT_REGION": ("aws", "region"),
    "AWS_PROFILE": ("aws", "profile"),
}
_BOOL_KEYS = {"demo"}


def merge_config(
    cli_args: Dict[str, Any],
    env_config: Dict[str, Any],
    dotenv_config: Dict[str, Any],
    file_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = deepcopy_dict(defaults)
    deep_merge(merged, file_config)
    deep_merge(merged, dotenv_config)
    deep_merge(merged, env_config)
    deep_merge(merged, _drop_none(cli_args))
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def deepcopy_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: deepcopy_dict(value) if isinstance(value, dict) else value
        for key, value in data.items()
    }


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            nested = _drop_none(value)
            if nested:
                out[key] = nested
        elif value is not None:
            out[key] = value
    return out


def load_yaml_config(yaml_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from ``iecs.yaml`` or return an empty dict."""
    path = yaml_path or Path("iecs.yaml")
    if not path.exists():
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.warning("Failed to load %s: %s", path, exc)
        return {}

    return data if isinstance(data, dict) else {}


def load_global_config() -> Dict[str, Any]:
    """Load user-level configuration from standard locations."""
    try:
        home = Path.home()
    except (OSError, RuntimeError):
        return {}

    for candidate in (
        home / ".iecs" / "config.yaml",
        home / ".config" / "iecs" / "config.yaml",
    ):
        try:
            if candidate.exists():
                with candidate.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
                if isinstance(data, dict):
                    return data
        except (yaml.YAMLError, OSError):
            continue
    return {}


def load_dotenv_config(dotenv_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load supported variables from a ``.env`` file."""
    path = dotenv_path or Path(".env")
    if not path.exists():
        return {}
    return _from_variables(dotenv_values(path))


def load_env_config() -> Dict[str, Any]:
    """Load supported variables from the current environment."""
    return _from_variables(os.environ)


def _from_variables(values) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for env_key, (section, key) in _ENV_TO_CONFIG_KEY.items():
        raw = values.get(env_key)
        if raw is None or raw == "":
            continue
        value: Any = raw
        if key in _BOOL_KEYS:
            value = str(raw).strip().lower() in _TRUE_VALUES
        target = config if section is None else config.setdefault(section, {})
        # AWS_REGION wins over AWS_DEFAULT_REGION (listed first).
        target.setdefault(key, value)
    return config


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return {
        "theme": "charm",
        "demo": False,
        "form": False,
        "cluster": None,
        "service": None,
        "aws": {
            "region": None,
            "profile": None,
        },
        "exec": {
            "command": "/bin/bash",
            "interactive": True,
            "session_plugin": "session-manager-plugin",
        },
        "logs": {
            "timestamps": True,
        },
        "logging": {
            "level": "INFO",
            "dir": str(Path.home() / ".iecs" / "logs"),
            "verbose": False,
        },
    }


def load_config(
    cli_args: Optional[Dict[str, Any]] = None,
    yaml_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration from defaults, files, environment, and CLI."""
    file_config = load_global_config()
    deep_merge(file_config, load_yaml_config(yaml_path))
    return merge_config(
        cli_args=cli_args or {},
        env_config=load_env_config(),
        dotenv_config=load_dotenv_config(dotenv_path),
        file_config=file_config,
        defaults=get_default_config(),
    )
