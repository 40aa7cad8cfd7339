"""Navigable preset list used by the main and manage views."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from rich.text import Text

from .config import StreamEntry

TITLE_STYLE = "bold white on #5f5fd7"
ITEM_STYLE = ""
SELECTED_STYLE = "#d75fd7"
PAGINATION_ACTIVE_STYLE = "#d0d0d0"
PAGINATION_INACTIVE_STYLE = "#585858"
EMPTY_STYLE = "#585858"

ITEM_INDENT = 4
SELECTED_INDENT = 2

# Title line, blank line after the title, pagination line.
_CHROME_LINES = 3


def _truncate(label: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(label) <= width:
        return label
    if width == 1:
        return "…"
    return label[: width - 1] + "…"


@dataclass(frozen=True, slots=True)
class PresetList:
    """Ordered presets plus the highlighted index.

    Movement is clamped at both ends; there is no wraparound. The list never
    changes its entries on its own, callers hand it a new sequence through
    :meth:`replace`.
    """

    entries: tuple[StreamEntry, ...] = ()
    index: int = 0

    @classmethod
    def from_entries(cls, entries: Iterable[StreamEntry]) -> "PresetList":
        return cls(tuple(entries), 0)

    def __len__(self) -> int:
        return len(self.entries)

    def _with_index(self, index: int) -> "PresetList":
        if not self.entries:
            index = 0
        else:
            index = max(0, min(index, len(self.entries) - 1))
        if index == self.index:
            return self
        return PresetList(self.entries, index)

    def move_up(self) -> "PresetList":
        return self._with_index(self.index - 1)

    def move_down(self) -> "PresetList":
        return self._with_index(self.index + 1)

    def page_up(self, per_page: int) -> "PresetList":
        return self._with_index(self.index - max(per_page, 1))

    def page_down(self, per_page: int) -> "PresetList":
        return self._with_index(self.index + max(per_page, 1))

    def first(self) -> "PresetList":
        return self._with_index(0)

    def last(self) -> "PresetList":
        return self._with_index(len(self.entries) - 1)

    def selected(self) -> Optional[StreamEntry]:
        """Return the highlighted entry, or ``None`` for an empty list."""

        if not self.entries:
            return None
        return self.entries[self.index]

    def replace(self, entries: Iterable[StreamEntry]) -> "PresetList":
        """Swap the backing sequence and clamp the highlight into range."""

        new_entries = tuple(entries)
        if not new_entries:
            return PresetList((), 0)
        return PresetList(new_entries, max(0, min(self.index, len(new_entries) - 1)))

    @staticmethod
    def per_page(height: int) -> int:
        """Number of entries that fit in a viewport of *height* lines."""

        return max(height - _CHROME_LINES, 1)

    def render(self, title: str, width: int, height: int) -> list[Text]:
        """Return the lines for the page containing the highlighted entry."""

        lines = [Text(f" {title} ", style=TITLE_STYLE), Text("")]
        if not self.entries:
            lines.append(Text(" " * ITEM_INDENT + "No presets.", style=EMPTY_STYLE))
            return lines

        per_page = self.per_page(height)
        page = self.index // per_page
        pages = (len(self.entries) + per_page - 1) // per_page
        start = page * per_page
        for position in range(start, min(start + per_page, len(self.entries))):
            entry = self.entries[position]
            label = f"{position + 1}. {entry.name}"
            if position == self.index:
                label = _truncate("• " + label, width - SELECTED_INDENT)
                lines.append(Text(" " * SELECTED_INDENT + label, style=SELECTED_STYLE))
            else:
                label = _truncate(label, width - ITEM_INDENT)
                lines.append(Text(" " * ITEM_INDENT + label, style=ITEM_STYLE))

        if pages > 1:
            dots = Text(" " * ITEM_INDENT)
            for number in range(pages):
                style = PAGINATION_ACTIVE_STYLE if number == page else PAGINATION_INACTIVE_STYLE
                dots.append("•" if number == page else "○", style=style)
            lines.append(dots)
        return lines


__all__ = ["PresetList"]
