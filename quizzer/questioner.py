"""Prompt API.

Questioner is the entry point for asking things at the terminal. Each
prompt is a coroutine that returns the user's answer:

    q = Questioner(theme="dark")
    name = await q.input(message="Name?", required=True)
    age = await q.number({"message": "Age?", "min": 0})
    lang = await q.select(message="Language", choices=["Python", "Go"])

Options may be given as a config dataclass, a mapping, keyword arguments or
a combination (keywords win). Line prompts re-ask until their validator
accepts the answer; key-driven prompts run as elements on the shared
ElementManager, which owns the terminal while they are active.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from rich.color import ColorSystem

from .capabilities import TerminalCapabilities
from .config import DEFAULT_CONFIG_PATH, load_quizzer_config
from .data_structures import (
    Choice,
    ColumnSpec,
    ConfirmConfig,
    FormConfig,
    InputConfig,
    MultilineConfig,
    MultiSelectConfig,
    NumberConfig,
    PasswordConfig,
    SelectConfig,
    coerce_choices,
)
from .elements.manager import ElementManager
from .elements.menu_select import MultiSelectMenu, SearchableSelectMenu, SelectMenu
from .elements.password_input import PasswordInput
from .elements.terminal import ANSI
from .styling import Styling
from .table import InteractiveTable, TableOptions

_logging = logging.getLogger(__name__)

__all__ = ["ProgressReporter", "Questioner"]


async def _settle(value: Any) -> Any:
    """Await validator results that are awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class ProgressReporter:
    """In-place progress bar returned by Questioner.show_progress()."""

    styling: Styling
    total: float
    message: str = "Processing..."
    current: float = 0

    def _bar(self) -> str:
        return self.styling.progress_bar(self.current, self.total, color="success")

    def increment(self, amount: float = 1) -> None:
        self.current += amount
        ANSI._write(f"\r{self.message} {self._bar()}")
        if self.current >= self.total:
            ANSI._write("\n")

    def complete(self) -> None:
        self.current = self.total
        icon = self.styling.icon("success")
        prefix = f"{icon} " if icon else ""
        ANSI._write(f"\r{ANSI.CLEAR_LINE}{prefix}{self.message} {self._bar()}\n")


class Questioner:
    """Themed prompts over one terminal.

    Colours are used only when requested and supported by the terminal;
    the same goes for unicode icons. `fallback_mode` forces plain ASCII.
    """

    # Legacy colour escapes for the ask_*/show_* helpers
    NORMAL = "\033[0m"
    GREEN = "\033[32;01m"
    CYAN = "\033[0;36m"
    RED = "\033[0;31m"

    DEFAULT_RESPONSE_PREFIX = "\n"
    PROMPT_PREFIX = "> "

    def __init__(
        self,
        theme: str = "default",
        *,
        animations: bool = True,
        icons: bool = True,
        colors: bool = True,
        fallback_mode: bool = False,
        elements: ElementManager | None = None,
        capabilities: TerminalCapabilities | None = None,
    ) -> None:
        self.capabilities = (
            capabilities if capabilities is not None else TerminalCapabilities.detect()
        )
        self.theme = theme
        self.animations = animations
        self.icons = icons
        self.colors = colors
        self.fallback_mode = fallback_mode
        self.elements = elements if elements is not None else ElementManager()
        self.styling = self._new_styling()

    @classmethod
    def from_config(cls, path: str = DEFAULT_CONFIG_PATH, **overrides: Any) -> Questioner:
        """Build from the JSON config file; keyword arguments win."""
        settings = load_quizzer_config(path)
        settings.update(overrides)
        return cls(**settings)

    def _new_styling(self) -> Styling:
        caps = self.capabilities
        color_system = None
        if self.colors and caps.supports_color and not self.fallback_mode:
            color_system = caps.color_system or ColorSystem.STANDARD
        unicode = self.icons and caps.supports_unicode and not self.fallback_mode
        return Styling(self.theme, color_system=color_system, unicode=unicode)

    def set_theme(self, theme: str) -> None:
        self.theme = theme
        self.styling.set_theme(theme)

    # -------------------------------------------------------------------------
    # Output helpers
    # -------------------------------------------------------------------------

    def _say(self, *lines: str) -> None:
        ANSI.write_lines(list(lines))

    def _with_icon(self, name: str, text: str) -> str:
        icon = self.styling.icon(name)
        return f"{icon} {text}" if icon else text

    def _show_error(self, message: Any) -> None:
        _logging.debug("Rejected answer: %s", message)
        self._say(self.styling.paint(self._with_icon("error", str(message)), "error"))

    def _show_title(self, title: str | None, style: str) -> None:
        if title:
            self._say(self.styling.create_box(title, style=style, border_color="primary"), "")

    # -------------------------------------------------------------------------
    # Line prompts
    # -------------------------------------------------------------------------

    async def _read_line(self, prompt: str) -> str:
        with self.elements.surface.hold() as channel:
            return await channel.read_line(prompt)

    async def input(self, config: InputConfig | Mapping[str, Any] | None = None, **options: Any) -> Any:
        """Ask for one line of text.

        Empty answers take `default`. The answer must then pass `required`
        and `validate` (sync or async; anything but True is shown as the
        error) before `transform` is applied. Rejected answers re-prompt.
        """
        cfg = InputConfig.resolve(config, options)
        s = self.styling
        prompt = s.paint(self._with_icon("question", cfg.message), cfg.color or "primary") + " "

        while True:
            if cfg.placeholder:
                self._say(s.paint(f"({cfg.placeholder})", "muted"))

            answer: Any = await self._read_line(prompt)
            if answer == "" and cfg.default is not None:
                answer = cfg.default

            if cfg.required and (answer is None or answer == ""):
                self._show_error("This field is required")
                continue

            if cfg.validate is not None:
                verdict = await _settle(cfg.validate(answer))
                if verdict is not True:
                    self._show_error(verdict)
                    continue

            if cfg.transform is not None:
                answer = cfg.transform(answer)
            return answer

    async def number(self, config: NumberConfig | Mapping[str, Any] | None = None, **options: Any) -> int | float:
        """Ask for an int (or a float with `decimal=True`) within [min, max]."""
        cfg = NumberConfig.resolve(config, options)
        convert: Callable[[str], int | float] = float if cfg.decimal else int

        def parse(value: Any) -> int | float | None:
            try:
                number = convert(str(value).strip())
            except ValueError:
                return None
            if isinstance(number, float) and not math.isfinite(number):
                return None
            return number

        async def validate(value: Any) -> bool | str:
            number = parse(value)
            if number is None:
                return "Please enter a valid number"
            if cfg.min is not None and number < cfg.min:
                return f"Number must be at least {cfg.min}"
            if cfg.max is not None and number > cfg.max:
                return f"Number must be at most {cfg.max}"
            if cfg.validate is not None:
                return await _settle(cfg.validate(number))
            return True

        return await self.input(
            InputConfig(
                message=cfg.message,
                default=cfg.default,
                validate=validate,
                transform=parse,
                required=cfg.required,
                style=cfg.style,
            )
        )

    async def confirm(self, config: ConfirmConfig | Mapping[str, Any] | None = None, **options: Any) -> bool:
        cfg = ConfirmConfig.resolve(config, options)
        hint = "[Y/n]" if cfg.default else "[y/N]"

        def validate(value: str) -> bool | str:
            if value == "" or value.lower() in ("y", "yes", "n", "no"):
                return True
            return "Please enter y/yes or n/no"

        def transform(value: str) -> bool:
            if value == "":
                return bool(cfg.default)
            return value.lower() in ("y", "yes")

        return await self.input(
            InputConfig(
                message=f"{cfg.message} {self.styling.paint(hint, 'muted')}",
                validate=validate,
                transform=transform,
                style=cfg.style,
            )
        )

    async def multiline(self, config: MultilineConfig | Mapping[str, Any] | None = None, **options: Any) -> str:
        """Collect lines until the terminator line; each is stored as prefix + line + newline."""
        cfg = MultilineConfig.resolve(config, options)
        s = self.styling
        self._say(
            s.paint(self._with_icon("question", cfg.message), cfg.color or "primary"),
            s.paint(f"[{cfg.terminator!r} to finish]", "muted"),
        )

        response = ""
        with self.elements.surface.hold() as channel:
            while True:
                line = await channel.read_line(self.PROMPT_PREFIX)
                if line == cfg.terminator:
                    return response
                response += cfg.prefix + line + "\n"

    # -------------------------------------------------------------------------
    # Key-driven prompts
    # -------------------------------------------------------------------------

    async def password(self, config: PasswordConfig | Mapping[str, Any] | None = None, **options: Any) -> str:
        """Masked entry. Ctrl+C exits the process with status 130."""
        cfg = PasswordConfig.resolve(config, options)
        error: str | None = None
        while True:
            element = PasswordInput(
                message=cfg.message,
                mask=cfg.mask,
                styling=self.styling,
                color=cfg.color,
                error=error,
            )
            value = await self.elements.run(element) or ""

            if cfg.required and not value:
                error = "Password is required"
            elif cfg.validate is not None:
                verdict = await _settle(cfg.validate(value))
                error = None if verdict is True else str(verdict)
            else:
                error = None

            if error is None:
                return value
            _logging.debug("Rejected password: %s", error)

    async def select(self, config: SelectConfig | Mapping[str, Any] | None = None, **options: Any) -> Any:
        """Pick one choice. Returns its value (or name), or None when cancelled."""
        cfg = SelectConfig.resolve(config, options)
        choices = coerce_choices(cfg.choices)

        if cfg.searchable:
            menu: SelectMenu | SearchableSelectMenu = SearchableSelectMenu(
                message=cfg.message,
                choices=choices,
                styling=self.styling,
                title=cfg.title,
                color=cfg.color,
                page_size=cfg.page_size,
            )
        else:
            start = 0
            if cfg.default is not None:
                start = next(
                    (i for i, choice in enumerate(choices) if choice.result == cfg.default),
                    0,
                )
            menu = SelectMenu(
                message=cfg.message,
                choices=choices,
                styling=self.styling,
                title=cfg.title,
                color=cfg.color,
                selected=start,
            )
        return await self.elements.run(menu)

    async def multiselect(
        self, config: MultiSelectConfig | Mapping[str, Any] | None = None, **options: Any
    ) -> list[Any]:
        """Check any number of choices. Returns their values; [] when cancelled."""
        cfg = MultiSelectConfig.resolve(config, options)
        menu = MultiSelectMenu(
            message=cfg.message,
            choices=coerce_choices(cfg.choices),
            styling=self.styling,
            color=cfg.color,
            min=cfg.min,
            max=cfg.max,
            validate=cfg.validate,
        )
        result = await self.elements.run(menu)
        return result if result is not None else []

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    async def form(self, config: FormConfig | Mapping[str, Any] | None = None, **options: Any) -> dict[str, Any]:
        """Ask each field in order and collect the answers by field name."""
        cfg = FormConfig.resolve(config, options)
        self._show_title(cfg.title, "double")

        prompts: dict[str, Callable[[Mapping[str, Any]], Awaitable[Any]]] = {
            "input": self.input,
            "password": self.password,
            "number": self.number,
            "confirm": self.confirm,
            "select": self.select,
            "multiselect": self.multiselect,
        }

        results: dict[str, Any] = {}
        for spec in cfg.field_specs():
            prompt = prompts.get(spec.kind, self.input)
            results[spec.name] = await prompt(spec.prompt_options())
            self._say("")
        return results

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def table(self, options: TableOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> InteractiveTable:
        """New table sharing this questioner's theme and terminal."""
        kwargs.setdefault("theme", self.theme)
        return InteractiveTable(options, styling=self._new_styling(), elements=self.elements, **kwargs)

    # -------------------------------------------------------------------------
    # Legacy API
    # -------------------------------------------------------------------------

    async def ask_question(self, question: str, colour: str = GREEN) -> Any:
        return await self.input(message=question, style={"color": colour})

    async def ask_multiline_question(
        self, question: str, response_prefix: str = DEFAULT_RESPONSE_PREFIX, colour: str = GREEN
    ) -> str:
        return await self.multiline(message=question, prefix=response_prefix, style={"color": colour})

    async def show_menu(
        self, question: str, options: Mapping[Any, str], title: str | None = None, colour: str = GREEN
    ) -> Any:
        """Menu over a key -> label mapping; returns the chosen key."""
        choices = [Choice(name=label, value=key) for key, label in options.items()]
        return await self.select(message=question, choices=choices, title=title, style={"color": colour})

    async def show_yes_no_menu(self, question: str, title: str | None = None, colour: str = GREEN) -> bool:
        return await self.confirm(message=question, title=title, style={"color": colour})

    def show_table(
        self,
        columns: Sequence[ColumnSpec | str | Mapping[str, Any]] = (),
        rows: Sequence[Mapping[str, Any]] = (),
        selected_task: int | None = None,
        title: str | None = None,
    ) -> InteractiveTable:
        return (
            self.table()
            .set_title(title or "")
            .set_columns(columns)
            .set_rows(rows)
            .set_selected_row(selected_task)
            .render()
        )

    async def show_table_menu(
        self,
        question: str,
        columns: Sequence[ColumnSpec | str | Mapping[str, Any]],
        rows: Sequence[Mapping[str, Any]],
    ) -> int | None:
        table = self.table().set_title(question).set_columns(columns).set_rows(rows)
        return await table.show_table_menu()

    # -------------------------------------------------------------------------
    # Visual helpers
    # -------------------------------------------------------------------------

    async def show_spinner(self, message: str, duration: float = 2.0) -> None:
        """Animate a spinner next to `message` for `duration` seconds."""
        s = self.styling
        if self.animations:
            spinner = s.spinner("dots")
            loop = asyncio.get_running_loop()
            deadline = loop.time() + duration
            frame = 0
            while loop.time() < deadline:
                glyph = s.paint(spinner.frames[frame % len(spinner.frames)], "primary")
                ANSI._write(f"\r{glyph} {message}")
                frame += 1
                await asyncio.sleep(min(spinner.interval, max(deadline - loop.time(), 0)))
        ANSI._write(f"\r{ANSI.CLEAR_LINE}{self._with_icon('success', message)} - Complete!\n")

    def show_progress(self, total: float, message: str = "Processing...") -> ProgressReporter:
        return ProgressReporter(self.styling, total, message)

    def close(self) -> None:
        """Release the terminal if a prompt was interrupted mid-read."""
        self.elements.surface.release()
