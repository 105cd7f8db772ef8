"""Checks that run before any AWS call."""

from __future__ import annotations

import shutil
from typing import Iterable

from rich.console import Console
from rich.markup import escape

from ..exceptions import PreflightError

__all__ = ["find_session_plugin", "print_hint"]

_INSTALL_DOCS = (
    "https://docs.aws.amazon.com/systems-manager/latest/userguide/"
    "session-manager-working-with-install-plugin.html"
)


def print_hint(console: Console, message: str, bullets: Iterable[str]) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    bullets = list(bullets)
    if bullets:
        console.print("Try:")
        for b in bullets[:3]:
            console.print(f"  • {escape(b)}")


def find_session_plugin(name: str = "session-manager-plugin") -> str:
    """Return the absolute path of the session broker binary."""
    path = shutil.which(name)
    if not path:
        raise PreflightError(
            f"{name} not found in PATH",
            hints=[
                f"install it: {_INSTALL_DOCS}",
                f"check: which {name}",
                "or point IECS_SESSION_PLUGIN at the binary",
            ],
        )
    return path
