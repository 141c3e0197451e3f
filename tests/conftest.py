"""Pytest fixtures: scripted keyboard and line input instead of a TTY."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from quizzer.capabilities import TerminalCapabilities
from quizzer.elements.base import InputEvent
from quizzer.elements.manager import ElementManager
from quizzer.elements.surface import InputSurface
from quizzer.questioner import Questioner

_NAMED_KEYS = {
    "up": InputEvent(key="Up"),
    "down": InputEvent(key="Down"),
    "left": InputEvent(key="Left"),
    "right": InputEvent(key="Right"),
    "return": InputEvent(key="Enter"),
    "escape": InputEvent(key="Escape"),
    "space": InputEvent(key="Space", char=" "),
    "backspace": InputEvent(key="Backspace"),
    "ctrl-c": InputEvent(key="c", char="c", ctrl=True),
}


def key(name: str) -> InputEvent:
    """Event for a key name ("down", "return", "ctrl-c") or a single character."""
    if name in _NAMED_KEYS:
        return _NAMED_KEYS[name]
    return InputEvent(key=name, char=name)


def keys(*names: str) -> list[InputEvent]:
    return [key(name) for name in names]


class ScriptedKeys:
    """KeyReader that replays events; running out means end of input."""

    def __init__(self) -> None:
        self.events: list[InputEvent] = []
        self.calls: list[str] = []

    def feed(self, *names: str) -> None:
        self.events.extend(keys(*names))

    def start(self) -> None:
        self.calls.append("start")

    def stop(self) -> None:
        self.calls.append("stop")

    def flush(self) -> None:
        self.calls.append("flush")

    async def read(self) -> InputEvent:
        if not self.events:
            raise EOFError("no scripted keys left")
        return self.events.pop(0)


class ScriptedLines:
    """LineSource that replays submitted lines and records prompts."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.prompts: list[str] = []
        self.closed = 0

    def feed(self, *lines: str) -> None:
        self.lines.extend(lines)

    async def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError("no scripted lines left")
        return self.lines.pop(0)

    def close(self) -> None:
        self.closed += 1


class FakeRegion:
    def __init__(self) -> None:
        self.calls: list[tuple[object, ...]] = []
        self.num_lines = 0

    def activate(self, num_lines: int) -> None:
        self.calls.append(("activate", num_lines))
        self.num_lines = num_lines

    def render(self, lines: list[str]) -> None:
        self.calls.append(("render", list(lines)))

    def update_size(self, num_lines: int) -> None:
        self.calls.append(("update_size", num_lines))
        self.num_lines = num_lines

    def deactivate(self) -> None:
        self.calls.append(("deactivate",))
        self.num_lines = 0

    @property
    def frames(self) -> list[list[str]]:
        return [call[1] for call in self.calls if call[0] == "render"]  # type: ignore[misc]


@dataclass
class Terminal:
    keys: ScriptedKeys = field(default_factory=ScriptedKeys)
    lines: ScriptedLines = field(default_factory=ScriptedLines)
    regions: list[FakeRegion] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.surface = InputSurface(
            key_reader_factory=lambda: self.keys,
            line_reader_factory=lambda: self.lines,
        )
        self.manager = ElementManager(self.surface, region_factory=self._new_region)

    def _new_region(self) -> FakeRegion:
        region = FakeRegion()
        self.regions.append(region)
        return region

    @property
    def last_frame(self) -> list[str]:
        return self.regions[-1].frames[-1]


# Plain output: no colour, unicode glyphs
PLAIN_CAPABILITIES = TerminalCapabilities(supports_color=False, supports_unicode=True)


@pytest.fixture
def terminal() -> Terminal:
    return Terminal()


@pytest.fixture
def questioner(terminal: Terminal) -> Questioner:
    return Questioner(elements=terminal.manager, capabilities=PLAIN_CAPABILITIES)
