"""quizzer - themed interactive prompts, menus, forms and tables for the terminal."""

from .elements import ElementManager, InputEvent, InputSurface
from .capabilities import TerminalCapabilities
from .data_structures import (
    Choice,
    ColumnSpec,
    ConfirmConfig,
    FieldSpec,
    FormConfig,
    InputConfig,
    MultilineConfig,
    MultiSelectConfig,
    NumberConfig,
    PasswordConfig,
    SelectConfig,
)
from .errors import QuizzerError, StageNotFoundError, SurfaceBusyError
from .questioner import ProgressReporter, Questioner
from .stages import StageRunner
from .styling import THEMES, Styling, Theme
from .table import InteractiveTable, TableOptions

__version__ = "0.1.0"

__all__ = [
    # Prompts
    "Questioner",
    "ProgressReporter",
    # Tables
    "InteractiveTable",
    "TableOptions",
    # Stages
    "StageRunner",
    # Styling
    "Styling",
    "Theme",
    "THEMES",
    "TerminalCapabilities",
    # Options
    "Choice",
    "ColumnSpec",
    "ConfirmConfig",
    "FieldSpec",
    "FormConfig",
    "InputConfig",
    "MultilineConfig",
    "MultiSelectConfig",
    "NumberConfig",
    "PasswordConfig",
    "SelectConfig",
    # Terminal
    "ElementManager",
    "InputEvent",
    "InputSurface",
    # Errors
    "QuizzerError",
    "StageNotFoundError",
    "SurfaceBusyError",
]
