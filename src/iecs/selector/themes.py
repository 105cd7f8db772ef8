"""Prompt styles selectable with ``--theme``."""

from __future__ import annotations

from typing import Dict, List, Tuple

from questionary import Style

from ..exceptions import PreflightError

__all__ = ["THEMES", "theme_by_name", "theme_names"]

_Rules = List[Tuple[str, str]]

# Palette roles: accent, highlight, muted, answer.
_PALETTES: Dict[str, Tuple[str, str, str, str]] = {
    "base": ("", "bold", "", "bold"),
    "base16": ("#81a2be", "#b5bd68", "#969896", "#f0c674"),
    "catppuccin": ("#cba6f7", "#89b4fa", "#6c7086", "#a6e3a1"),
    "dracula": ("#bd93f9", "#ff79c6", "#6272a4", "#50fa7b"),
    "charm": ("#7571f9", "#f780e2", "#6c6c6c", "#02bf87"),
}


def _rules(accent: str, highlight: str, muted: str, answer: str) -> _Rules:
    return [
        ("qmark", f"fg:{accent} bold" if accent else "bold"),
        ("question", "bold"),
        ("answer", f"fg:{answer} bold" if answer != "bold" else "bold"),
        ("pointer", f"fg:{highlight} bold" if highlight != "bold" else "bold"),
        ("highlighted", f"fg:{highlight} bold" if highlight != "bold" else "bold"),
        ("selected", f"fg:{answer}" if answer != "bold" else "reverse"),
        ("instruction", f"fg:{muted}" if muted else ""),
        ("disabled", f"fg:{muted} italic" if muted else "italic"),
    ]


THEMES: Dict[str, Style] = {
    name: Style(_rules(*palette)) for name, palette in _PALETTES.items()
}


def theme_names() -> List[str]:
    return sorted(THEMES)


def theme_by_name(name: str) -> Style:
    """Return the style for ``name`` or raise ``PreflightError``."""
    try:
        return THEMES[name]
    except KeyError:
        raise PreflightError(
            f'unsupported theme "{name}" expecting one of: {" ".join(theme_names())}',
            hints=[f"iecs --theme {theme_names()[0]} ..."],
        ) from None
