"""Masked text entry.

Each typed character is echoed as one mask character. Ctrl+C aborts the
whole program with exit status 130 once the terminal has been restored.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..styling import Styling
from .base import ActiveElement, InputEvent

# Conventional exit status for SIGINT
INTERRUPT_EXIT_CODE = 130


@dataclass
class PasswordInput(ActiveElement[str]):
    message: str = "Enter password:"
    mask: str = "*"
    styling: Styling = field(default_factory=Styling)
    color: str | None = None
    error: str | None = None
    buffer: str = ""

    def get_lines(self) -> list[str]:
        s = self.styling
        icon = s.icon("lock")
        prefix = f"{icon} " if icon else ""
        lines = [s.paint(prefix + self.message, self.color or "primary") + " " + self.mask * len(self.buffer)]
        if self.error:
            lines.append(s.paint(f"{s.icon('error')} {self.error}".strip(), "error"))
        return lines

    def get_summary(self) -> str | None:
        return self.styling.paint(self.message, self.color or "primary") + " " + self.mask * len(self.buffer)

    def handle_input(self, event: InputEvent) -> tuple[bool, str | None]:
        if event.is_interrupt:
            raise SystemExit(INTERRUPT_EXIT_CODE)
        if event.key == "Enter":
            return (True, self.buffer)
        if event.key == "Backspace":
            self.buffer = self.buffer[:-1]
        elif event.key == "Paste" and event.char:
            self.buffer += event.char.replace("\r", "").replace("\n", "")
        elif event.is_printable:
            self.buffer += event.char
        return (False, None)
