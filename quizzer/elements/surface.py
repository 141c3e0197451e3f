"""The input surface: the single gateway between the terminal and prompts.

Every prompt acquires the surface, reads lines or keystrokes through the
returned channel, and releases it before handing control back to its
caller. Only one channel can exist at a time, so two prompts can never
listen to the same keystrokes.

Readers are created through factories so that tests (and non-terminal
hosts) can substitute scripted input.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import ANSI as FormattedANSI

from ..errors import SurfaceBusyError
from .base import InputEvent
from .terminal import ANSI, RawInputReader

_logging = logging.getLogger(__name__)

__all__ = ["InputChannel", "InputSurface", "KeyReader", "LineReader", "LineSource"]


class KeyReader(Protocol):
    """Source of single keystroke events."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def flush(self) -> None: ...

    async def read(self) -> InputEvent: ...


class LineSource(Protocol):
    """Source of whole submitted lines."""

    async def read_line(self, prompt: str) -> str: ...

    def close(self) -> None: ...


class LineReader:
    """Line-buffered input.

    Uses prompt_toolkit's PromptSession on a real terminal (line editing,
    Ctrl+C raises KeyboardInterrupt, Ctrl+D raises EOFError). On pipes it
    reads the file descriptor byte by byte up to the newline, so nothing
    past the line is buffered away from the key reader sharing the fd.
    """

    def __init__(self, fd: int | None = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.interactive = os.isatty(self.fd)
        self._session: PromptSession[str] | None = None

    async def read_line(self, prompt: str) -> str:
        if self.interactive:
            if self._session is None:
                # Disable CPR to prevent "9;1R" garbage appearing as input
                os.environ.setdefault("PROMPT_TOOLKIT_NO_CPR", "1")
                self._session = PromptSession()
            return await self._session.prompt_async(FormattedANSI(prompt))

        ANSI._write(prompt)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_line_sync)

    def _read_line_sync(self) -> str:
        buf = bytearray()
        while True:
            b = os.read(self.fd, 1)
            if not b:
                if not buf:
                    raise EOFError("stdin closed")
                break
            if b == b"\n":
                break
            buf.extend(b)
        return buf.decode("utf-8", errors="replace").rstrip("\r")

    def close(self) -> None:
        self._session = None


class InputChannel:
    """Line and keystroke access handed to the current surface holder."""

    def __init__(
        self,
        key_reader_factory: Callable[[], KeyReader],
        line_reader_factory: Callable[[], LineSource],
    ) -> None:
        self._key_reader_factory = key_reader_factory
        self._line_reader_factory = line_reader_factory
        self._keys: KeyReader | None = None
        self._lines: LineSource | None = None
        self.raw = False

    @property
    def keys(self) -> KeyReader:
        if self._keys is None:
            self._keys = self._key_reader_factory()
        return self._keys

    @property
    def lines(self) -> LineSource:
        if self._lines is None:
            self._lines = self._line_reader_factory()
        return self._lines

    def enter_raw(self) -> None:
        """Switch to unbuffered, no-echo keystroke input."""
        if not self.raw:
            self.keys.start()
            self.raw = True

    def exit_raw(self) -> None:
        """Restore buffered/echo input."""
        if self.raw and self._keys is not None:
            self._keys.stop()
        self.raw = False

    def flush(self) -> None:
        if self._keys is not None:
            self._keys.flush()

    async def read_key(self) -> InputEvent:
        return await self.keys.read()

    async def read_line(self, prompt: str) -> str:
        if self.raw:
            raise RuntimeError("Cannot read a line while in raw mode")
        return await self.lines.read_line(prompt)

    def close(self) -> None:
        self.exit_raw()
        if self._lines is not None:
            self._lines.close()
        self._keys = None
        self._lines = None


class InputSurface:
    """Owner of the one input channel bound to stdin/stdout."""

    def __init__(
        self,
        key_reader_factory: Callable[[], KeyReader] = RawInputReader,
        line_reader_factory: Callable[[], LineSource] = LineReader,
    ) -> None:
        self._key_reader_factory = key_reader_factory
        self._line_reader_factory = line_reader_factory
        self._channel: InputChannel | None = None

    @property
    def is_held(self) -> bool:
        return self._channel is not None

    def acquire(self) -> InputChannel:
        """Create the channel. Fails if another prompt still holds it."""
        if self._channel is not None:
            raise SurfaceBusyError("Input surface is already held by another prompt")
        self._channel = InputChannel(
            self._key_reader_factory, self._line_reader_factory
        )
        _logging.debug("Input surface acquired")
        return self._channel

    def release(self) -> None:
        """Restore terminal modes and discard the channel. Safe to repeat."""
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        channel.close()
        _logging.debug("Input surface released")

    @contextmanager
    def hold(self) -> Iterator[InputChannel]:
        """Acquire for the duration of a block, releasing even on error."""
        channel = self.acquire()
        try:
            yield channel
        finally:
            self.release()
