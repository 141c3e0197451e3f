"""Terminal capability detection from the process environment."""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from typing import Mapping, TextIO

from rich.color import ColorSystem


@dataclass(frozen=True)
class TerminalCapabilities:
    """What the attached console can display."""

    supports_color: bool = False
    supports_unicode: bool = False
    supports_ansi: bool = False
    width: int = 80
    height: int = 24
    color_system: ColorSystem | None = None

    @classmethod
    def detect(
        cls, environ: Mapping[str, str] | None = None, stream: TextIO | None = None
    ) -> "TerminalCapabilities":
        env = os.environ if environ is None else environ
        out = sys.stdout if stream is None else stream

        try:
            is_tty = out.isatty()
        except (AttributeError, ValueError):
            is_tty = False

        term = env.get("TERM", "")
        colorterm = env.get("COLORTERM", "")
        supports_color = (
            is_tty and ("color" in term or bool(colorterm)) and "NO_COLOR" not in env
        )

        locale = env.get("LC_ALL") or env.get("LC_CTYPE") or env.get("LANG") or ""
        supports_unicode = "UTF" in locale.upper()

        size = shutil.get_terminal_size((80, 24))

        color_system: ColorSystem | None = None
        if supports_color:
            if colorterm.lower() in ("truecolor", "24bit"):
                color_system = ColorSystem.TRUECOLOR
            elif "256" in term:
                color_system = ColorSystem.EIGHT_BIT
            else:
                color_system = ColorSystem.STANDARD

        return cls(
            supports_color=supports_color,
            supports_unicode=supports_unicode,
            supports_ansi=is_tty,
            width=size.columns,
            height=size.lines,
            color_system=color_system,
        )
