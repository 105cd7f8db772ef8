"""Config, logging and gateway wiring shared by the commands."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from ..config import load_config, validate_config
from ..gateway import Gateway, create_gateway
from ..selector import Picker, Selectors, theme_by_name
from ..selector.stages import compile_pattern
from ..utils import setup_structured_logging

__all__ = ["build_selectors", "load_effective_config", "setup_logging"]

logger = logging.getLogger(__name__)


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "theme": getattr(args, "theme", None),
        "form": True if getattr(args, "form", False) else None,
        "cluster": getattr(args, "cluster", None),
        "service": getattr(args, "service", None),
        "aws": {
            "region": getattr(args, "region", None),
            "profile": getattr(args, "profile", None),
        },
        "exec": {
            "command": getattr(args, "command", None),
            "interactive": getattr(args, "interactive", None),
        },
        "logs": {"timestamps": getattr(args, "timestamps", None)},
        "logging": {
            "dir": getattr(args, "log_dir", None),
            "verbose": True if getattr(args, "verbose", False) else None,
        },
    }


def load_effective_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge defaults, files, environment and flags, then validate.

    Raises ``PreflightError``/``ConfigurationError`` before any network I/O,
    including for malformed ``--cluster``/``--service`` patterns.
    """
    config_path = getattr(args, "config", None)
    config = load_config(
        cli_args=_cli_overrides(args),
        yaml_path=Path(config_path) if config_path else None,
    )
    validate_config(config)
    compile_pattern(config.get("cluster"), "--cluster")
    compile_pattern(config.get("service"), "--service")
    return config


def setup_logging(config: Dict[str, Any]) -> Optional[Path]:
    log_cfg = config.get("logging", {}) or {}
    log_dir = log_cfg.get("dir")
    path = setup_structured_logging(
        Path(log_dir).expanduser() if log_dir else None,
        verbose=bool(log_cfg.get("verbose", False)),
        level=str(log_cfg.get("level", "INFO")),
    )
    logger.debug("logging configured", extra={"log_file": str(path) if path else None})
    return path


def build_selectors(
    console: Console, config: Dict[str, Any], gateway: Optional[Gateway] = None
) -> Selectors:
    """Create the picker (one theme per invocation) and the gateway."""
    picker = Picker(theme_by_name(str(config.get("theme"))), console)
    return Selectors(gateway or create_gateway(config), picker, console)
