"""Element manager for running interactive elements.

This module provides ElementManager which:
- Takes the input surface for exactly the lifetime of one element
- Repaints the element's region after every key event
- Expires transient notices on a timer
- Releases the terminal before returning the element's result
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol, TypeVar

from ..errors import SurfaceBusyError
from .base import ActiveElement
from .surface import InputChannel, InputSurface
from .terminal import ANSI, TerminalRegion

T = TypeVar("T")

_logging = logging.getLogger(__name__)


class Region(Protocol):
    """Where an element's lines are painted."""

    num_lines: int

    def activate(self, num_lines: int) -> None: ...

    def render(self, lines: list[str]) -> None: ...

    def update_size(self, num_lines: int) -> None: ...

    def deactivate(self) -> None: ...


class ElementManager:
    """Coordinates active elements with terminal I/O.

    Only one element can be active at a time, and the surface is acquired
    and released around each run, so a finished element can never receive
    keystrokes meant for the next prompt.
    """

    def __init__(
        self,
        surface: InputSurface | None = None,
        region_factory: Callable[[], Region] = TerminalRegion,
    ) -> None:
        self.surface = surface if surface is not None else InputSurface()
        self._region_factory = region_factory
        self._active: ActiveElement[Any] | None = None

    @property
    def active(self) -> ActiveElement[Any] | None:
        return self._active

    async def run(self, element: ActiveElement[T]) -> T | None:
        """Run an element until it returns a result."""
        if self._active is not None:
            raise SurfaceBusyError("Another element is already active")

        region = self._region_factory()
        channel = self.surface.acquire()
        self._active = element
        _logging.debug("Element %s started", type(element).__name__)

        try:
            element.on_activate()
            channel.enter_raw()
            result = await self._drive(element, channel, region)
        finally:
            # Detach before the surface goes back to the pool
            self._active = None
            channel.exit_raw()
            element.on_deactivate()
            region.deactivate()
            self.surface.release()

        _logging.debug("Element %s finished", type(element).__name__)
        summary = element.get_summary()
        if summary is not None:
            ANSI.write_lines([summary])
        return result

    async def _drive(
        self, element: ActiveElement[T], channel: InputChannel, region: Region
    ) -> T | None:
        lines = element.get_lines()
        region.activate(len(lines))
        region.render(lines)

        # Drop keystrokes typed before the element was on screen
        channel.flush()

        pending: asyncio.Future[Any] | None = None
        try:
            while True:
                if pending is None:
                    pending = asyncio.ensure_future(channel.read_key())

                done, _ = await asyncio.wait(
                    {pending}, timeout=element.notice_timeout()
                )
                if not done:
                    element.expire_notice()
                    self._render(element, region)
                    continue

                event = pending.result()
                pending = None

                finished, result = element.handle_input(event)
                self._render(element, region)

                if finished:
                    delay = element.completion_delay()
                    if delay > 0:
                        await asyncio.sleep(delay)
                    return result
        finally:
            if pending is not None and not pending.done():
                pending.cancel()

    def _render(self, element: ActiveElement[Any], region: Region) -> None:
        lines = element.get_lines()
        if len(lines) > region.num_lines:
            region.update_size(len(lines))
        region.render(lines)
