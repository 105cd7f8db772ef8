"""``iecs logs``: follow CloudWatch log streams of selected containers."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Mapping, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from ..exceptions import ConfigurationError
from ..gateway.base import Gateway
from ..selector import run_logs_form, select_log_targets
from ..shared.models import LiveTailHandlers, LogEvent, LogsSelection
from .runner_setup import build_selectors, load_effective_config, setup_logging

__all__ = ["LogPrinter", "follow_logs", "plan_live_tails", "run_logs"]

logger = logging.getLogger(__name__)

LOG_GROUP_OPTION = "awslogs-group"
STREAM_PREFIX_OPTION = "awslogs-stream-prefix"
# StartLiveTail accepts at most this many stream names per session.
LIVE_TAIL_STREAM_LIMIT = 100


def plan_live_tails(selection: LogsSelection) -> Dict[str, List[str]]:
    """Map each log group to the stream names to follow in it.

    Streams are named ``<prefix>/<container>/<task-id>``; containers that
    share a log group share one live tail.
    """
    plan: Dict[str, List[str]] = {}
    for definition in selection.container_definitions:
        log_cfg = definition.log_configuration
        if log_cfg is None:
            raise ConfigurationError(
                f"no log configuration found for container {definition.name}"
            )
        options = log_cfg.options or {}
        group = options.get(LOG_GROUP_OPTION)
        prefix = options.get(STREAM_PREFIX_OPTION)
        if not group or not prefix:
            raise ConfigurationError(
                f"no log options found for container {definition.name}"
            )
        streams = plan.setdefault(group, [])
        for task in selection.tasks:
            name = f"{prefix}/{definition.name}/{task.task_id}"
            if name not in streams:
                streams.append(name)
    return plan


class LogPrinter:
    """Live tail handlers printing one line per log event."""

    def __init__(
        self,
        console: Console,
        out: Optional[TextIO] = None,
        timestamps: bool = True,
    ) -> None:
        self.console = console
        self.out = out or sys.stdout
        self.timestamps = timestamps

    def on_start(self, event: Mapping[str, Any]) -> None:
        groups = ", ".join(event.get("logGroupIdentifiers") or []) or "log group"
        streams = event.get("logStreamNames") or []
        self.console.print(
            f"[blue]Tailing[/blue] {escape(groups)} "
            f"({len(streams)} stream{'s' if len(streams) != 1 else ''}); Ctrl-C to stop"
        )

    def on_batch(self, event: LogEvent) -> None:
        if self.timestamps:
            line = f"{event.timestamp.isoformat(timespec='milliseconds')}\t{event.message}"
        else:
            line = event.message
        self.out.write(line.rstrip("\n") + "\n")
        self.out.flush()

    def handlers(self) -> LiveTailHandlers:
        return LiveTailHandlers(on_start=self.on_start, on_batch=self.on_batch)


async def follow_logs(
    gateway: Gateway,
    selection: LogsSelection,
    handlers: LiveTailHandlers,
) -> None:
    """Tail every planned log group concurrently through ``handlers``.

    Groups with more streams than one session accepts get several sessions.
    When one tail fails the others are cancelled and the error surfaces.
    """
    sessions = [
        (group, streams[start : start + LIVE_TAIL_STREAM_LIMIT])
        for group, streams in plan_live_tails(selection).items()
        for start in range(0, len(streams), LIVE_TAIL_STREAM_LIMIT)
    ]
    tails = [
        asyncio.ensure_future(gateway.start_live_tail(group, streams, handlers))
        for group, streams in sessions
    ]
    for group, streams in sessions:
        logger.info("starting live tail", extra={"log_group": group, "streams": streams})
    try:
        await asyncio.gather(*tails)
    finally:
        for tail in tails:
            tail.cancel()
        await asyncio.gather(*tails, return_exceptions=True)


async def run_logs(console: Console, args: argparse.Namespace) -> int:
    config = load_effective_config(args)
    setup_logging(config)

    selectors = build_selectors(console, config)
    if config.get("form"):
        selection = await run_logs_form(
            selectors.gateway,
            selectors.picker,
            console,
            config.get("cluster"),
            config.get("service"),
        )
    else:
        selection = await select_log_targets(
            selectors, config.get("cluster"), config.get("service")
        )

    printer = LogPrinter(console, timestamps=bool(config["logs"].get("timestamps", True)))
    try:
        await follow_logs(selectors.gateway, selection, printer.handlers())
    except asyncio.CancelledError:
        logger.info("log tail cancelled")
        console.print("[yellow]Stopped following logs[/yellow]")
        return 0
    return 0
