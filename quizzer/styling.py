"""Themes, glyphs and styled-text primitives.

A Styling value is owned by each Questioner or table. Nothing here is
process-global, so two prompts with different themes never interfere.
Colours are rendered through rich, which also downgrades hex colours for
terminals without truecolor support.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from rich.color import ColorSystem
from rich.style import Style

from .elements.terminal import ANSI

_logging = logging.getLogger(__name__)

__all__ = [
    "BOX_STYLES",
    "BoxChars",
    "ICONS",
    "SPINNERS",
    "Spinner",
    "Styling",
    "THEMES",
    "Theme",
]


@dataclass(frozen=True)
class Theme:
    """Named colour palette (hex strings)."""

    primary: str
    secondary: str
    success: str
    warning: str
    error: str
    info: str
    muted: str
    background: str
    text: str
    border: str


THEMES: dict[str, Theme] = {
    "default": Theme(
        primary="#00d4aa",
        secondary="#0066cc",
        success="#28a745",
        warning="#ffc107",
        error="#dc3545",
        info="#17a2b8",
        muted="#6c757d",
        background="#000000",
        text="#ffffff",
        border="#444444",
    ),
    "dark": Theme(
        primary="#61dafb",
        secondary="#ffd700",
        success="#00ff7f",
        warning="#ffa500",
        error="#ff6b6b",
        info="#87ceeb",
        muted="#888888",
        background="#0d1117",
        text="#f0f6fc",
        border="#30363d",
    ),
    "light": Theme(
        primary="#0066cc",
        secondary="#6f42c1",
        success="#198754",
        warning="#fd7e14",
        error="#dc3545",
        info="#0dcaf0",
        muted="#6c757d",
        background="#ffffff",
        text="#212529",
        border="#dee2e6",
    ),
}


@dataclass(frozen=True)
class BoxChars:
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str
    left_tee: str
    right_tee: str
    top_tee: str
    bottom_tee: str
    cross: str


BOX_STYLES: dict[str, BoxChars] = {
    "single": BoxChars("┌", "┐", "└", "┘", "─", "│", "├", "┤", "┬", "┴", "┼"),
    "double": BoxChars("╔", "╗", "╚", "╝", "═", "║", "╠", "╣", "╦", "╩", "╬"),
    "rounded": BoxChars("╭", "╮", "╰", "╯", "─", "│", "├", "┤", "┬", "┴", "┼"),
    "thick": BoxChars("┏", "┓", "┗", "┛", "━", "┃", "┣", "┫", "┳", "┻", "╋"),
}

ASCII_BOX = BoxChars("+", "+", "+", "+", "-", "|", "+", "+", "+", "+", "+")


@dataclass(frozen=True)
class Spinner:
    frames: tuple[str, ...]
    interval: float  # seconds per frame


SPINNERS: dict[str, Spinner] = {
    "dots": Spinner(("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"), 0.08),
    "line": Spinner(("-", "\\", "|", "/"), 0.13),
    "star": Spinner(("✶", "✸", "✹", "✺", "✹", "✷"), 0.12),
    "toggle": Spinner(("⊶", "⊷"), 0.25),
    "arrow": Spinner(("←", "↖", "↑", "↗", "→", "↘", "↓", "↙"), 0.12),
}

ICONS: dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "question": "❓",
    "lock": "🔒",
    "checked": "☑",
    "unchecked": "☐",
    "radio_selected": "●",
    "radio_unselected": "○",
    "pointer": "→",
    "arrow_left": "←",
    "arrow_up": "↑",
    "arrow_down": "↓",
    "ellipsis": "…",
    "bar_complete": "█",
    "bar_incomplete": "░",
}

ASCII_ICONS: dict[str, str] = {
    "success": "[ok]",
    "error": "[x]",
    "warning": "[!]",
    "info": "[i]",
    "question": "?",
    "lock": "*",
    "checked": "[x]",
    "unchecked": "[ ]",
    "radio_selected": "(*)",
    "radio_unselected": "( )",
    "pointer": ">",
    "arrow_left": "<",
    "arrow_up": "^",
    "arrow_down": "v",
    "ellipsis": "...",
    "bar_complete": "#",
    "bar_incomplete": "-",
}


class Styling:
    """Colours, icons and box drawing bound to one theme.

    `color_system=None` disables colour entirely: every paint() call then
    returns its text unchanged. `unicode=False` swaps icons and box glyphs
    for ASCII fallbacks.
    """

    def __init__(
        self,
        theme: str | Theme = "default",
        *,
        color_system: ColorSystem | None = ColorSystem.TRUECOLOR,
        unicode: bool = True,
    ) -> None:
        self.color_system = color_system
        self.unicode = unicode
        self._theme_name = "default"
        self._theme = THEMES["default"]
        self.set_theme(theme)

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def theme_name(self) -> str:
        return self._theme_name

    @property
    def colors_enabled(self) -> bool:
        return self.color_system is not None

    def set_theme(self, theme: str | Theme) -> None:
        """Switch palette. Unknown theme names keep the current palette."""
        if isinstance(theme, Theme):
            self._theme = theme
            self._theme_name = "custom"
            return
        if theme in THEMES:
            self._theme = THEMES[theme]
            self._theme_name = theme
        else:
            _logging.debug("Unknown theme %r, keeping %r", theme, self._theme_name)

    def _resolve_color(self, color: str | None) -> str | None:
        if color is None:
            return None
        if color in Theme.__dataclass_fields__:
            return getattr(self._theme, color)
        return color

    def paint(
        self,
        text: str,
        color: str | None = None,
        *,
        bold: bool = False,
        dim: bool = False,
        background: str | None = None,
    ) -> str:
        """Style text. Colours may be theme keys, hex/rich colours or raw escapes."""
        if not self.colors_enabled or not text:
            return text
        if color is not None and color.startswith("\033"):
            # Legacy callers pass ready-made escape sequences
            prefix = color + (ANSI.BOLD if bold else "")
            return prefix + text + ANSI.RESET
        style = Style(
            color=self._resolve_color(color),
            bgcolor=self._resolve_color(background),
            bold=bold or None,
            dim=dim or None,
        )
        return style.render(text, color_system=self.color_system)

    def gradient(self, text: str, colors: list[str]) -> str:
        """Colour consecutive equal-sized segments of text with each colour."""
        if not colors or not text:
            return text
        segment = math.ceil(len(text) / len(colors))
        return "".join(
            self.paint(char, colors[min(index // segment, len(colors) - 1)])
            for index, char in enumerate(text)
        )

    def icon(self, name: str) -> str:
        icons = ICONS if self.unicode else ASCII_ICONS
        return icons.get(name, "")

    def box_chars(self, style: str = "single") -> BoxChars:
        if not self.unicode:
            return ASCII_BOX
        return BOX_STYLES.get(style, BOX_STYLES["single"])

    def spinner(self, name: str = "dots") -> Spinner:
        if not self.unicode:
            return SPINNERS["line"]
        return SPINNERS.get(name, SPINNERS["dots"])

    def create_box(
        self,
        content: str,
        *,
        style: str = "single",
        padding: int = 1,
        margin: int = 0,
        title: str = "",
        border_color: str | None = "border",
        background: str | None = None,
        width: int | None = None,
    ) -> str:
        """Draw content inside a box; returns the lines joined by newlines."""
        chars = self.box_chars(style)
        lines = content.split("\n")
        widest = max(
            [ANSI.visual_len(line) for line in lines] + [ANSI.visual_len(title)]
        )
        inner = width if width is not None else widest + padding * 2
        body_width = max(0, inner - padding * 2)

        def border(text: str) -> str:
            return self.paint(text, border_color)

        side = border(chars.vertical)
        blank_row = side + " " * inner + side

        out: list[str] = [""] * margin
        out.append(border(chars.top_left + chars.horizontal * inner + chars.top_right))
        if title:
            out.append(
                side
                + ANSI.pad_to_width(self.paint(title, bold=True), inner, "center")
                + side
            )
            out.append(border(chars.left_tee + chars.horizontal * inner + chars.right_tee))
        out.extend([blank_row] * padding)
        for line in lines:
            cell = ANSI.pad_to_width(ANSI.truncate_to_width(line, body_width), body_width)
            if background:
                cell = self.paint(cell, background=background)
            out.append(side + " " * padding + cell + " " * padding + side)
        out.extend([blank_row] * padding)
        out.append(
            border(chars.bottom_left + chars.horizontal * inner + chars.bottom_right)
        )
        out.extend([""] * margin)
        return "\n".join(out)

    def progress_bar(
        self,
        current: float,
        total: float,
        *,
        width: int = 40,
        show_percentage: bool = True,
        show_fraction: bool = True,
        complete_char: str | None = None,
        incomplete_char: str | None = None,
        color: str = "primary",
        background: str = "muted",
    ) -> str:
        ratio = 1.0 if total <= 0 else min(max(current / total, 0.0), 1.0)
        completed = round(ratio * width)
        complete_char = complete_char or self.icon("bar_complete")
        incomplete_char = incomplete_char or self.icon("bar_incomplete")

        bar = self.paint(complete_char * completed, color) + self.paint(
            incomplete_char * (width - completed), background
        )
        if show_percentage:
            bar += f" {round(ratio * 100)}%"
        if show_fraction:
            bar += f" ({current}/{total})"
        return bar
