"""Interactive terminal elements.

This package provides the pieces every prompt is built from: decoded key
events, the input surface that owns stdin, the repaintable terminal region
and the manager that drives one element at a time.

The concrete prompt elements (menus, password entry, table overlay) live in
their own modules and depend on `quizzer.styling`; import them directly.

Usage:
    from quizzer.elements import ElementManager, InputSurface
    from quizzer.elements.menu_select import SelectMenu

    manager = ElementManager(InputSurface())
    value = await manager.run(SelectMenu(message="Pick", choices=choices))
"""

from .base import ActiveElement, InputEvent
from .manager import ElementManager
from .surface import InputChannel, InputSurface, LineReader
from .terminal import ANSI, RawInputReader, TerminalRegion

__all__ = [
    # Base
    "ActiveElement",
    "InputEvent",
    # Manager
    "ElementManager",
    # Surface
    "InputChannel",
    "InputSurface",
    "LineReader",
    # Terminal
    "ANSI",
    "RawInputReader",
    "TerminalRegion",
]
