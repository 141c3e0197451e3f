"""Base types shared by every interactive element.

An element owns the state of one prompt invocation. It renders itself to a
list of lines and reacts to one key event at a time; the ElementManager
drives the loop and owns the terminal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class InputEvent:
    """A single decoded keystroke.

    `key` is a symbolic name ("Up", "Enter", "Escape", ...) or the typed
    character itself; `char` carries the printable text when there is one.
    """

    key: str
    char: str | None = None
    ctrl: bool = False

    @property
    def is_printable(self) -> bool:
        return (
            not self.ctrl
            and self.char is not None
            and len(self.char) == 1
            and self.char.isprintable()
        )

    @property
    def is_interrupt(self) -> bool:
        """True for Ctrl+C."""
        return self.ctrl and self.char == "c"


class ActiveElement(ABC, Generic[T]):
    """An element that controls a terminal region while it is active."""

    def on_activate(self) -> None:
        """Called once before the first render."""

    def on_deactivate(self) -> None:
        """Called once after the element finished (or failed)."""

    def completion_delay(self) -> float:
        """Seconds to keep the final frame visible before clearing it."""
        return 0.0

    def notice_timeout(self) -> float | None:
        """Seconds until a transient notice expires, or None when none is shown."""
        return None

    def expire_notice(self) -> None:
        """Drop the transient notice; the manager redraws afterwards."""

    def get_summary(self) -> str | None:
        """Line left in the scrollback once the element is done."""
        return None

    @abstractmethod
    def get_lines(self) -> list[str]:
        """Render the current state as terminal lines."""

    @abstractmethod
    def handle_input(self, event: InputEvent) -> tuple[bool, T | None]:
        """Apply one event. Returns (done, result)."""
