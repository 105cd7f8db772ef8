"""Relay terminal signals to the session broker while it runs."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import List, Optional

__all__ = ["FORWARDED_SIGNALS", "SignalForwarder"]

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS = tuple(
    sig
    for sig in (
        getattr(signal, "SIGHUP", None),
        getattr(signal, "SIGINT", None),
        getattr(signal, "SIGQUIT", None),
        getattr(signal, "SIGTERM", None),
    )
    if sig is not None
)


class SignalForwarder:
    """
    Forward the first HUP/INT/QUIT/TERM received by iecs to ``process``.

    Later signals are ignored: the child owns the terminal from then on and
    decides how to wind down. Handlers are installed on entry and removed on
    exit, restoring the default disposition.
    """

    def __init__(self, process, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.process = process
        self.loop = loop or asyncio.get_event_loop()
        self.forwarded: Optional[int] = None
        self._installed: List[int] = []

    def __enter__(self) -> "SignalForwarder":
        for sig in FORWARDED_SIGNALS:
            try:
                self.loop.add_signal_handler(sig, self._handle, sig)
            except (NotImplementedError, RuntimeError, ValueError) as exc:
                logger.debug("cannot forward signal %s: %s", sig, exc)
                continue
            self._installed.append(sig)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        for sig in self._installed:
            self.loop.remove_signal_handler(sig)
        self._installed.clear()

    def _handle(self, sig: int) -> None:
        if self.forwarded is not None:
            logger.debug("ignoring signal %s; already forwarded %s", sig, self.forwarded)
            return
        self.forwarded = sig
        if self.process.returncode is not None:
            return
        logger.info("forwarding signal %s to session plugin", sig)
        try:
            self.process.send_signal(sig)
        except ProcessLookupError:
            logger.debug("session plugin exited before signal %s", sig)
