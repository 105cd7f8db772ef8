"""``iecs exec``: hand the terminal to session-manager-plugin."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import re
import shlex
from typing import Any, Dict, List

from rich.console import Console

from ..exceptions import SessionPluginError
from ..gateway.base import Gateway
from ..selector import run_exec_form, select_exec_target
from ..shared.models import ExecSelection, ExecSession
from .preflight import find_session_plugin
from .runner_setup import build_selectors, load_effective_config, setup_logging
from .signals import SignalForwarder

__all__ = [
    "equivalent_command",
    "run_exec",
    "session_plugin_args",
    "start_session",
    "target_descriptor",
]

logger = logging.getLogger(__name__)


def target_descriptor(selection: ExecSelection) -> str:
    """Return the SSM target for the selected container.

    Raises ``PreflightError`` when the task ARN has no '/' segment.
    """
    return (
        f"ecs:{selection.cluster.name}_{selection.task.tail}"
        f"_{selection.container.runtime_id}"
    )


def session_plugin_args(session: ExecSession, region: str, target: str) -> List[str]:
    """Positional arguments understood by session-manager-plugin."""
    return [
        session.to_json(),
        region,
        "StartSession",
        "",
        json.dumps({"Target": target}),
        f"https://ssm.{region}.amazonaws.com",
    ]


def equivalent_command(
    selection: ExecSelection, command: str, interactive: bool
) -> str:
    """Non-interactive command line that reaches the same container."""
    return shlex.join(
        [
            "iecs",
            "--cluster",
            f"^{re.escape(selection.cluster.name)}$",
            "--service",
            f"^{re.escape(selection.service.name)}$",
            "exec",
            "--command",
            command,
            "--interactive",
            "true" if interactive else "false",
        ]
    )


def _exit_status(returncode: int) -> int:
    # A child killed by signal N reports -N; shells report 128 + N.
    return 128 - returncode if returncode < 0 else returncode


async def start_session(
    gateway: Gateway,
    selection: ExecSelection,
    command: str,
    interactive: bool,
    plugin: str,
) -> int:
    """Request an exec session and supervise the plugin until it exits."""
    target = target_descriptor(selection)
    session = await gateway.execute_command(
        selection.cluster.arn,
        selection.task.arn,
        selection.container.name,
        command,
        interactive,
    )
    logger.info(
        "exec session created",
        extra={"session_id": session.session_id, "target": target},
    )
    args = session_plugin_args(session, gateway.region, target)
    try:
        process = await asyncio.create_subprocess_exec(plugin, *args)
    except OSError as exc:
        raise SessionPluginError(f"failed to start {plugin}: {exc}") from exc

    try:
        with SignalForwarder(process):
            returncode = await process.wait()
    finally:
        if process.returncode is None:
            process.terminate()
            await process.wait()
    logger.info("session plugin exited", extra={"returncode": returncode})
    return _exit_status(returncode)


async def run_exec(console: Console, args: argparse.Namespace) -> int:
    config = load_effective_config(args)
    setup_logging(config)
    exec_cfg: Dict[str, Any] = config["exec"]
    plugin = find_session_plugin(str(exec_cfg["session_plugin"]))

    selectors = build_selectors(console, config)
    if config.get("form"):
        selection = await run_exec_form(
            selectors.gateway,
            selectors.picker,
            console,
            config.get("cluster"),
            config.get("service"),
        )
    else:
        selection = await select_exec_target(
            selectors, config.get("cluster"), config.get("service")
        )

    command = str(exec_cfg["command"])
    interactive = bool(exec_cfg["interactive"])
    logger.info(
        "equivalent command: %s",
        equivalent_command(selection, command, interactive),
    )
    return await start_session(
        selectors.gateway, selection, command, interactive, plugin
    )
