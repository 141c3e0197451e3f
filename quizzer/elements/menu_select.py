"""Menu selection elements.

Navigate with the arrow keys (or j/k in the plain list menus).
- SelectMenu: Enter picks the highlighted choice; the cursor wraps around.
- SearchableSelectMenu: typing filters by name; the cursor clamps at the ends.
- MultiSelectMenu: Space toggles, Enter confirms within min/max bounds.

Cancelling resolves None for the single-choice menus and an empty list
for MultiSelectMenu.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from ..data_structures import Choice
from ..styling import Styling
from .base import ActiveElement, InputEvent
from .terminal import ANSI

# Seconds a constraint message stays on screen
NOTICE_DURATION = 1.5


@dataclass
class _ChoiceMenu(ActiveElement[Any]):
    """Rendering and cursor bookkeeping shared by the menus."""

    message: str = "Select an option:"
    choices: list[Choice] = field(default_factory=list)
    styling: Styling = field(default_factory=Styling)
    title: str | None = None
    color: str | None = None
    selected: int = 0
    _done_label: str | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._clamp()

    def view(self) -> list[Choice]:
        return self.choices

    def _clamp(self) -> None:
        count = len(self.view())
        self.selected = min(max(self.selected, 0), max(count - 1, 0))

    def _move(self, step: int, wrap: bool) -> None:
        count = len(self.view())
        if count == 0:
            self.selected = 0
            return
        if wrap:
            self.selected = (self.selected + step) % count
        else:
            self.selected = min(max(self.selected + step, 0), count - 1)

    def _header_lines(self) -> list[str]:
        s = self.styling
        lines: list[str] = []
        if self.title:
            lines.extend(
                s.create_box(self.title, style="rounded", border_color="primary").split("\n")
            )
            lines.append("")
        icon = s.icon("question")
        prefix = f"{icon} " if icon else ""
        lines.append(s.paint(prefix + self.message, self.color or "primary"))
        return lines

    def _choice_line(self, index: int, choice: Choice, mark: str = "") -> str:
        s = self.styling
        is_selected = index == self.selected
        pointer = s.icon("pointer")
        cursor = pointer + " " if is_selected else " " * (len(pointer) + 1)
        text = cursor + (f"{mark} " if mark else "") + choice.name
        if is_selected:
            return s.paint(text, "primary", bold=True)
        return s.paint(text, "text")

    def _help(self, text: str) -> str:
        return self.styling.paint(text, "muted")

    def _wrap(self, lines: list[str]) -> list[str]:
        width = max(1, ANSI.get_terminal_width())
        wrapped: list[str] = []
        for line in lines:
            wrapped.extend(ANSI.wrap_to_width(line, width) or [""])
        return wrapped

    def get_summary(self) -> str | None:
        if self._done_label is None:
            return None
        s = self.styling
        return f"{s.paint(self.message, self.color or 'primary')} {s.paint(self._done_label, 'info')}"


@dataclass
class SelectMenu(_ChoiceMenu):
    """Single choice from a fixed list, with cyclic cursor movement."""

    def get_lines(self) -> list[str]:
        lines = self._header_lines()
        lines.append("")
        for i, choice in enumerate(self.choices):
            lines.append(self._choice_line(i, choice))
        lines.append("")
        lines.append(self._help("Use ↑/↓ to navigate, Enter to select, Esc to cancel"))
        return self._wrap(lines)

    def handle_input(self, event: InputEvent) -> tuple[bool, Any]:
        if event.key == "Up" or event.char == "k":
            self._move(-1, wrap=True)
            return (False, None)
        if event.key == "Down" or event.char == "j":
            self._move(1, wrap=True)
            return (False, None)
        if event.key == "Enter":
            if not self.choices:
                self._done_label = "(none)"
                return (True, None)
            choice = self.choices[self.selected]
            self._done_label = choice.name
            return (True, choice.result)
        if event.key == "Escape" or event.char == "q" or event.is_interrupt:
            self._done_label = "(cancelled)"
            return (True, None)
        return (False, None)


@dataclass
class SearchableSelectMenu(_ChoiceMenu):
    """Single choice with a type-to-filter query.

    The view is the first `page_size` choices whose names contain the query
    (case-insensitive). The cursor clamps at both ends of the view.
    """

    page_size: int = 10
    query: str = ""

    def view(self) -> list[Choice]:
        if self.query:
            needle = self.query.lower()
            matches = [c for c in self.choices if needle in str(c.name).lower()]
        else:
            matches = self.choices
        return matches[: max(self.page_size, 1)]

    def get_lines(self) -> list[str]:
        s = self.styling
        lines = self._header_lines()
        lines.append(self._help("Type to search, ↑/↓ navigate, Enter select, Esc cancel"))
        lines.append(s.paint(f"Search: {self.query}", "info"))
        lines.append("")
        visible = self.view()
        if not visible:
            lines.append(s.paint("No matches", "muted"))
        for i, choice in enumerate(visible):
            lines.append(self._choice_line(i, choice))
        return self._wrap(lines)

    def _set_query(self, query: str) -> None:
        self.query = query
        self.selected = 0
        self._clamp()

    def handle_input(self, event: InputEvent) -> tuple[bool, Any]:
        if event.key == "Up":
            self._move(-1, wrap=False)
            return (False, None)
        if event.key == "Down":
            self._move(1, wrap=False)
            return (False, None)
        if event.key == "Backspace":
            self._set_query(self.query[:-1])
            return (False, None)
        if event.key == "Enter":
            visible = self.view()
            if not visible:
                self._done_label = "(no match)"
                return (True, None)
            choice = visible[self.selected]
            self._done_label = choice.name
            return (True, choice.result)
        if event.key == "Escape" or event.is_interrupt:
            self._done_label = "(cancelled)"
            return (True, None)
        if event.key == "Paste" and event.char:
            self._set_query(self.query + " ".join(event.char.split()))
            return (False, None)
        if event.is_printable:
            self._set_query(self.query + event.char)
            return (False, None)
        return (False, None)


@dataclass
class MultiSelectMenu(_ChoiceMenu):
    """Checkbox list resolving to the values of the checked choices."""

    message: str = "Select options (space to toggle, enter to confirm):"
    min: int = 0
    max: int | None = None
    validate: Callable[[list[Any]], bool | str] | None = None
    notice: str | None = None

    def __post_init__(self) -> None:
        # Work on copies so the caller's choices keep their checked flags
        self.choices = [replace(choice) for choice in self.choices]
        super().__post_init__()

    def checked(self) -> list[Choice]:
        return [choice for choice in self.choices if choice.checked]

    def get_lines(self) -> list[str]:
        s = self.styling
        lines = self._header_lines()
        lines.append("")
        for i, choice in enumerate(self.choices):
            mark = s.icon("checked") if choice.checked else s.icon("unchecked")
            lines.append(self._choice_line(i, choice, mark))
        lines.append("")
        lines.append(self._help(f"Selected: {len(self.checked())}"))
        if self.notice:
            lines.append(s.paint(self.notice, "error"))
        lines.append(
            self._help("Use ↑/↓ to navigate, Space to toggle, Enter to confirm")
        )
        return self._wrap(lines)

    def notice_timeout(self) -> float | None:
        return NOTICE_DURATION if self.notice else None

    def expire_notice(self) -> None:
        self.notice = None

    def _violation(self, values: list[Any]) -> str | None:
        if len(values) < self.min:
            return f"Please select at least {self.min} options"
        if self.max is not None and len(values) > self.max:
            return f"Please select at most {self.max} options"
        if self.validate is not None:
            verdict = self.validate(values)
            if inspect.isawaitable(verdict):
                if inspect.iscoroutine(verdict):
                    verdict.close()
                raise TypeError("multiselect validate must be synchronous")
            if verdict is not True:
                return str(verdict)
        return None

    def handle_input(self, event: InputEvent) -> tuple[bool, Any]:
        self.notice = None
        if event.key == "Up" or event.char == "k":
            self._move(-1, wrap=True)
            return (False, None)
        if event.key == "Down" or event.char == "j":
            self._move(1, wrap=True)
            return (False, None)
        if event.char == " ":
            if self.choices:
                choice = self.choices[self.selected]
                choice.checked = not choice.checked
            return (False, None)
        if event.key == "Enter":
            picked = self.checked()
            values = [choice.result for choice in picked]
            problem = self._violation(values)
            if problem is not None:
                self.notice = problem
                return (False, None)
            self._done_label = ", ".join(choice.name for choice in picked) or "(none)"
            return (True, values)
        if event.key == "Escape" or event.is_interrupt:
            self._done_label = "(cancelled)"
            return (True, [])
        return (False, None)
