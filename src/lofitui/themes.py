"""Theme and palette definitions for LofiTUI."""
from __future__ import annotations

from typing import Mapping

from textual.theme import Theme

__all__ = [
    "ACCENT",
    "CUSTOM_THEMES",
    "DANGER",
    "DEFAULT_THEME_NAME",
    "HINT",
    "SPINNER",
    "WARNING",
]

# xterm-256 palette entries used by the dialogs.
ACCENT = "#d75fd7"  # 170
SPINNER = "#ff5faf"  # 205
HINT = "#585858"  # 240
DANGER = "#ff0000"  # 196
WARNING = "#ff8700"  # 208

_LOFI_NIGHT = Theme(
    "lofi-night",
    primary=ACCENT,
    secondary="#5f5fd7",
    warning=WARNING,
    error=DANGER,
    success="#87d787",
    accent=SPINNER,
    foreground="#d0d0d0",
    background="#1c1c1c",
    surface="#262626",
    panel="#303030",
    dark=True,
)

CUSTOM_THEMES: Mapping[str, Theme] = {
    _LOFI_NIGHT.name: _LOFI_NIGHT,
}
"""Themes bundled with the application keyed by their names."""

DEFAULT_THEME_NAME = _LOFI_NIGHT.name
"""Default theme to apply when none is specified explicitly."""
