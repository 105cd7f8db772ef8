"""Validation of the merged configuration before any AWS call is made."""

from __future__ import annotations

from typing import Any, Dict

from ..exceptions import ConfigurationError
from ..selector.themes import theme_by_name

__all__ = ["validate_config"]


def _require_str(value: Any, key: str, *, optional: bool = False) -> None:
    if value is None and optional:
        return
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"config value '{key}' must be a non-empty string")


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the merged config in place and return it.

    Raises ``PreflightError`` for an unknown theme and ``ConfigurationError``
    for malformed values.
    """
    theme_by_name(str(config.get("theme", "")))

    for key in ("cluster", "service"):
        _require_str(config.get(key), key, optional=True)

    aws = config.get("aws") or {}
    if not isinstance(aws, dict):
        raise ConfigurationError("config section 'aws' must be a mapping")
    _require_str(aws.get("region"), "aws.region", optional=True)
    _require_str(aws.get("profile"), "aws.profile", optional=True)

    exec_cfg = config.get("exec") or {}
    if not isinstance(exec_cfg, dict):
        raise ConfigurationError("config section 'exec' must be a mapping")
    _require_str(exec_cfg.get("command"), "exec.command")
    _require_str(exec_cfg.get("session_plugin"), "exec.session_plugin")
    if not isinstance(exec_cfg.get("interactive"), bool):
        raise ConfigurationError("config value 'exec.interactive' must be a boolean")

    logs_cfg = config.get("logs") or {}
    if not isinstance(logs_cfg.get("timestamps", True), bool):
        raise ConfigurationError("config value 'logs.timestamps' must be a boolean")

    return config
