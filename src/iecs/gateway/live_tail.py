"""Dispatch of CloudWatch Logs live tail events to handlers."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Mapping

from ..exceptions import StreamClosedError, UnknownEventError
from ..shared.models import LiveTailHandlers, LogEvent

__all__ = ["dispatch_live_tail_events"]

logger = logging.getLogger(__name__)

SESSION_START = "sessionStart"
SESSION_UPDATE = "sessionUpdate"


def _event_type(event: Any) -> str:
    if isinstance(event, Mapping) and event:
        return ",".join(str(key) for key in event.keys())
    return type(event).__name__


async def dispatch_live_tail_events(
    events: AsyncIterator[Mapping[str, Any]], handlers: LiveTailHandlers
) -> None:
    """Feed stream events to ``handlers`` until the stream fails or ends.

    Never returns normally: the end of the stream raises
    ``StreamClosedError`` and anything that is neither a session start nor
    a session update raises ``UnknownEventError``.
    """
    async for event in events:
        if isinstance(event, Mapping) and SESSION_START in event:
            start = event[SESSION_START] or {}
            logger.info(
                "live tail session started",
                extra={
                    "request_id": start.get("requestId"),
                    "session_id": start.get("sessionId"),
                },
            )
            handlers.on_start(start)
            continue
        if isinstance(event, Mapping) and SESSION_UPDATE in event:
            update = event[SESSION_UPDATE] or {}
            for result in update.get("sessionResults") or []:
                handlers.on_batch(LogEvent.from_api(result))
            continue
        raise UnknownEventError(_event_type(event))
    raise StreamClosedError("stream is closed")
