"""Themed single and multiple choice prompts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar

import questionary
from questionary import Style
from rich.console import Console

from ..exceptions import NotFoundError, SelectionCancelled

__all__ = ["Option", "Picker"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Option(Generic[T]):
    label: str
    value: T

    @classmethod
    def of(cls, value: T) -> "Option[T]":
        return cls(label=str(value), value=value)


class Picker:
    """
    Prompt the operator for a choice among labelled options.

    One instance is shared by every prompt of an invocation so all prompts
    use the same style. A single option is returned without prompting.
    """

    def __init__(self, style: Optional[Style] = None, console: Optional[Console] = None):
        self.style = style
        self.console = console or Console()

    async def choose(self, title: str, options: Sequence[Option[T]]) -> T:
        if not options:
            raise NotFoundError(f"no options to choose from for {title.lower()}")
        if len(options) == 1:
            logger.debug("single option for %s; not prompting", title)
            return options[0].value
        answer = await self._ask_one(title, options)
        if answer is None:
            raise SelectionCancelled(title)
        return answer

    async def choose_many(self, title: str, options: Sequence[Option[T]]) -> List[T]:
        """Return at least one chosen value, in option order."""
        if not options:
            raise NotFoundError(f"no options to choose from for {title.lower()}")
        if len(options) == 1:
            return [options[0].value]
        answers = await self._ask_many(title, options)
        if not answers:
            raise SelectionCancelled(title)
        return [opt.value for opt in options if opt.value in answers]

    def notice(self, message: str) -> None:
        self.console.print(f"[yellow]{message}[/yellow]")

    async def _ask_one(self, title: str, options: Sequence[Option[T]]) -> Any:
        question = questionary.select(
            title,
            choices=[questionary.Choice(opt.label, value=opt.value) for opt in options],
            style=self.style,
            use_shortcuts=False,
        )
        try:
            return await question.unsafe_ask_async()
        except (KeyboardInterrupt, EOFError):
            raise SelectionCancelled(title) from None

    async def _ask_many(self, title: str, options: Sequence[Option[T]]) -> Any:
        question = questionary.checkbox(
            title,
            choices=[questionary.Choice(opt.label, value=opt.value) for opt in options],
            style=self.style,
            validate=lambda picked: True if picked else "Select at least one option",
        )
        try:
            return await question.unsafe_ask_async()
        except (KeyboardInterrupt, EOFError):
            raise SelectionCancelled(title) from None
