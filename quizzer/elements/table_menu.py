"""Row picker over an InteractiveTable.

Up/Down move within the visible page (no wrap), Enter returns the absolute
row index of the highlighted row, and Escape, q or Ctrl+C return None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import ActiveElement, InputEvent

if TYPE_CHECKING:
    from ..table import InteractiveTable


@dataclass
class TableMenu(ActiveElement[int]):
    table: InteractiveTable
    cursor: int = 0
    _picked: int | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._clamp()

    def _clamp(self) -> None:
        count = len(self.table.visible_rows())
        self.cursor = min(max(self.cursor, 0), max(count - 1, 0))

    def get_lines(self) -> list[str]:
        lines = self.table.render_lines(highlight=self.cursor)
        lines.append(
            self.table.styling.paint(
                "Use ↑/↓ to navigate, Enter to select, Esc to cancel", "muted"
            )
        )
        return lines

    def handle_input(self, event: InputEvent) -> tuple[bool, int | None]:
        if event.key == "Up":
            self.cursor -= 1
            self._clamp()
            return (False, None)
        if event.key == "Down":
            self.cursor += 1
            self._clamp()
            return (False, None)
        if event.key == "Enter":
            visible = self.table.visible_rows()
            if not visible:
                return (True, None)
            self._picked = visible[self.cursor][0]
            return (True, self._picked)
        if event.key == "Escape" or event.char == "q" or event.is_interrupt:
            return (True, None)
        return (False, None)
