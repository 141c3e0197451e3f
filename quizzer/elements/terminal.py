"""Terminal control for interactive elements.

This module provides:
- ANSI: escape sequences and width-aware helpers for styled text
- RawInputReader: decodes keystrokes read in raw mode into InputEvents
- TerminalRegion: a block of lines repainted in place
"""

from __future__ import annotations

import asyncio
import fcntl
import logging
import os
import re
import shutil
import sys
import termios
import tty
from typing import Any, Iterator

import wcwidth

from .base import InputEvent

_logging = logging.getLogger(__name__)


class ANSI:
    """Escape sequences and text measurement that ignores escape codes.

    Widths are terminal columns: wide glyphs (CJK, most emoji) count 2,
    combining and control characters count 0.
    """

    RESET = "\033[0m"
    BOLD = "\033[1m"

    HIDE_CURSOR = "\033[?25l"
    SHOW_CURSOR = "\033[?25h"

    CLEAR_LINE = "\033[2K"
    CLEAR_TO_END = "\033[K"
    ENABLE_BRACKETED_PASTE = "\033[?2004h"
    DISABLE_BRACKETED_PASTE = "\033[?2004l"

    # CSI sequences: SGR colours and cursor movement
    _ANSI_PATTERN = re.compile(r"\033\[[0-9;?]*[A-Za-z]")

    @classmethod
    def cursor_up(cls, n: int = 1) -> str:
        return f"\033[{n}A" if n > 0 else ""

    @classmethod
    def cursor_down(cls, n: int = 1) -> str:
        return f"\033[{n}B" if n > 0 else ""

    @classmethod
    def get_terminal_width(cls) -> int:
        return shutil.get_terminal_size().columns

    @classmethod
    def char_width(cls, char: str) -> int:
        return max(wcwidth.wcwidth(char), 0)

    @classmethod
    def _tokens(cls, s: str) -> Iterator[tuple[str, bool]]:
        """Yield (piece, is_code): escape codes whole, text one char at a time."""
        pos = 0
        for match in cls._ANSI_PATTERN.finditer(s):
            for char in s[pos : match.start()]:
                yield char, False
            yield match.group(), True
            pos = match.end()
        for char in s[pos:]:
            yield char, False

    @classmethod
    def strip_ansi(cls, s: str) -> str:
        return cls._ANSI_PATTERN.sub("", s)

    @classmethod
    def visual_len(cls, s: str) -> int:
        """Columns `s` occupies once printed."""
        return sum(cls.char_width(char) for char in cls.strip_ansi(s))

    @classmethod
    def pad_to_width(cls, s: str, width: int, align: str = "left") -> str:
        """Pad to `width` columns (left, center or right). Never truncates."""
        gap = max(0, width - cls.visual_len(s))
        if align == "right":
            return " " * gap + s
        if align == "center":
            left = gap // 2
            return " " * left + s + " " * (gap - left)
        return s + " " * gap

    @classmethod
    def truncate_to_width(cls, s: str, max_width: int, ellipsis: str = "…") -> str:
        """Cut `s` to `max_width` columns, ending in `ellipsis` when cut.

        Escape codes are kept. A cut styled string is closed with RESET.
        """
        if max_width <= 0:
            return ""
        if cls.visual_len(s) <= max_width:
            return s

        budget = max_width - cls.visual_len(ellipsis)
        if budget <= 0:
            return ellipsis[:max_width]

        out: list[str] = []
        used = 0
        styled = False
        for piece, is_code in cls._tokens(s):
            if is_code:
                out.append(piece)
                styled = True
                continue
            width = cls.char_width(piece)
            if used + width > budget:
                break
            out.append(piece)
            used += width
        return "".join(out) + ellipsis + (cls.RESET if styled else "")

    @classmethod
    def wrap_to_width(cls, s: str, max_width: int) -> list[str]:
        """Hard-wrap to `max_width` columns.

        Styles open at a break are closed at the end of the line and
        re-opened at the start of the next one.
        """
        if max_width <= 0:
            return [s] if s else []
        if cls.visual_len(s) <= max_width:
            return [s]

        lines: list[str] = []
        line: list[str] = []
        used = 0
        open_codes: list[str] = []
        for piece, is_code in cls._tokens(s):
            if is_code:
                line.append(piece)
                if piece == cls.RESET:
                    open_codes = []
                elif piece.endswith("m"):
                    open_codes.append(piece)
                continue
            width = cls.char_width(piece)
            if used and used + width > max_width:
                lines.append("".join(line) + (cls.RESET if open_codes else ""))
                line = list(open_codes)
                used = 0
            line.append(piece)
            used += width
        lines.append("".join(line))
        return lines

    @classmethod
    def _write(cls, s: str) -> None:
        """Write to stdout and flush."""
        sys.stdout.write(s)
        sys.stdout.flush()

    @classmethod
    def write_lines(cls, lines: list[str]) -> None:
        """Print complete lines below the cursor."""
        cls._write("".join(line + "\n" for line in lines))


# Sequence after ESC -> key name (CSI and SS3 forms of the arrows)
_ESCAPE_KEYS = {
    "[A": "Up",
    "OA": "Up",
    "[B": "Down",
    "OB": "Down",
    "[C": "Right",
    "OC": "Right",
    "[D": "Left",
    "OD": "Left",
    "[Z": "BackTab",
}

_PASTE_START = "[200~"
_PASTE_END = b"\x1b[201~"

# Control bytes that have a key name of their own
_CONTROL_KEYS = {"\r": "Enter", "\t": "Tab", "\x7f": "Backspace", "\x08": "Backspace"}

# Longest escape sequence read before giving up on it
_MAX_SEQUENCE = 12


class RawInputReader:
    """Reads single keystrokes from the terminal in raw mode.

    When stdin is not a TTY (pipes, CI), raw mode is skipped and bytes are
    still decoded one by one; a newline then counts as Enter. Interactive
    prompts keep working, but only once the upstream writer flushes a line.
    """

    def __init__(self, fd: int | None = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.interactive = os.isatty(self.fd)
        self.old_settings: list[Any] | None = None

    def start(self) -> None:
        """Switch to raw mode. Idempotent; a no-op off a TTY."""
        if self.old_settings is not None or not self.interactive:
            return
        self.old_settings = termios.tcgetattr(self.fd)
        tty.setraw(self.fd, termios.TCSANOW)
        # Keep output post-processing so '\n' still returns to column 1
        attrs = termios.tcgetattr(self.fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)
        ANSI._write(ANSI.ENABLE_BRACKETED_PASTE)
        _logging.debug("Raw mode enabled on fd %d", self.fd)

    def stop(self) -> None:
        """Restore the settings saved by start()."""
        if self.old_settings is None:
            return
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
        self.old_settings = None
        ANSI._write(ANSI.DISABLE_BRACKETED_PASTE)
        _logging.debug("Raw mode disabled on fd %d", self.fd)

    def flush(self) -> None:
        """Drop keystrokes typed before the element was drawn."""
        if self.interactive:
            termios.tcflush(self.fd, termios.TCIFLUSH)

    async def read(self) -> InputEvent:
        """Read one event without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_sync)

    def _read_sync(self) -> InputEvent:
        ch = self._read_char()
        if ch == "\x1b":
            return self._read_escape()
        if ch == "\n" and not self.interactive:
            # Piped input ends every line with LF; in raw mode LF is Ctrl+J
            return InputEvent(key="Enter")
        if ch in _CONTROL_KEYS:
            return InputEvent(key=_CONTROL_KEYS[ch])
        if ch == " ":
            return InputEvent(key="Space", char=" ")
        if ord(ch) < 32:
            # Ctrl+<letter> arrives as its control code (Ctrl+A -> 1)
            letter = chr(ord(ch) + 96)
            if "a" <= letter <= "z":
                return InputEvent(key=letter, char=letter, ctrl=True)
            return InputEvent(key=ch, ctrl=True)
        return InputEvent(key=ch, char=ch)

    def _read_char(self) -> str:
        """One UTF-8 character. Raises EOFError at end of input."""
        buf = bytearray(os.read(self.fd, 1))
        if not buf:
            raise EOFError("stdin closed")
        while True:
            try:
                return buf.decode("utf-8")
            except UnicodeDecodeError:
                if len(buf) >= 4:
                    return buf.decode("utf-8", errors="replace")
            more = os.read(self.fd, 1)
            if not more:
                raise EOFError("stdin closed inside a character")
            buf.extend(more)

    def _read_escape(self) -> InputEvent:
        seq = self._read_pending()
        if seq == _PASTE_START:
            return InputEvent(key="Paste", char=self._read_paste())
        if seq in _ESCAPE_KEYS:
            return InputEvent(key=_ESCAPE_KEYS[seq])
        if seq:
            _logging.debug("Ignoring unknown escape sequence %r", seq)
        return InputEvent(key="Escape")

    def _read_pending(self) -> str:
        """Read the rest of an escape sequence without blocking.

        A lone Escape press has nothing queued behind it and yields "".
        """
        flags = fcntl.fcntl(self.fd, fcntl.F_GETFL)
        fcntl.fcntl(self.fd, fcntl.F_SETFL, flags | os.O_NONBLOCK)
        seq = bytearray()
        try:
            while len(seq) < _MAX_SEQUENCE:
                try:
                    b = os.read(self.fd, 1)
                except BlockingIOError:
                    break
                if not b:
                    break
                seq.extend(b)
                if seq[:1] == b"[":
                    # CSI runs up to a final byte in 0x40-0x7E
                    if len(seq) > 1 and 0x40 <= b[0] <= 0x7E:
                        break
                elif seq[:1] != b"O" or len(seq) == 2:
                    break
        finally:
            fcntl.fcntl(self.fd, fcntl.F_SETFL, flags)
        return seq.decode("utf-8", errors="ignore")

    def _read_paste(self) -> str:
        """Text of a bracketed paste, up to ESC [ 201 ~."""
        buf = bytearray()
        while not buf.endswith(_PASTE_END):
            b = os.read(self.fd, 1)
            if not b:
                return buf.decode("utf-8", errors="ignore")
            buf.extend(b)
        return buf[: -len(_PASTE_END)].decode("utf-8", errors="ignore")


class TerminalRegion:
    """A block of lines below the cursor that is repainted in place.

    Every render rewrites all reserved lines in a single write, so the
    screen always shows exactly the last frame. Between writes the cursor
    rests at column 1 of the region's first line.
    """

    def __init__(self) -> None:
        self.num_lines = 0
        self._active = False

    def activate(self, num_lines: int) -> None:
        """Reserve space at the cursor position."""
        self.num_lines = max(1, num_lines)
        self._active = True
        # Elements draw their own cursor glyph
        ANSI._write(ANSI.HIDE_CURSOR + "\r" + ANSI.CLEAR_LINE)

    def render(self, lines: list[str]) -> None:
        if not self._active:
            return
        width = ANSI.get_terminal_width()
        rows = []
        for i in range(self.num_lines):
            text = lines[i] if i < len(lines) else ""
            # A line that exactly fills the terminal auto-wraps, and
            # clearing to the end would then wipe the next row
            tail = ANSI.CLEAR_TO_END if ANSI.visual_len(text) < width else ""
            rows.append("\r" + text + tail)
        ANSI._write("\n".join(rows) + ANSI.cursor_up(self.num_lines - 1) + "\r")

    def update_size(self, num_lines: int) -> None:
        """Grow the region, scrolling earlier output up if needed."""
        if num_lines <= self.num_lines:
            return
        ANSI._write(
            ANSI.cursor_down(self.num_lines - 1)
            + "\n" * (num_lines - self.num_lines)
            + ANSI.cursor_up(num_lines - 1)
            + "\r"
        )
        self.num_lines = num_lines

    def deactivate(self) -> None:
        """Blank the region and show the cursor again."""
        if not self._active:
            return
        clear = "\r" + ANSI.CLEAR_LINE
        ANSI._write(
            (clear + ANSI.cursor_down(1)) * (self.num_lines - 1)
            + clear
            + ANSI.cursor_up(self.num_lines - 1)
            + ANSI.SHOW_CURSOR
        )
        self._active = False
        self.num_lines = 0
