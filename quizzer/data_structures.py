"""
Core data structures for prompts and tables.

Every prompt kind has its own option dataclass. Options are resolved once
when a prompt is called: from a dataclass instance, a mapping (camelCase
keys such as ``pageSize`` are accepted), keyword arguments, or a mix of
these. Unrecognised keys are kept in ``extra`` rather than rejected, so
option bags can be forwarded between prompt kinds.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Any, Awaitable, Callable, Literal, Self, TypeAlias

# =============================================================================
# Callback types
# =============================================================================

# A validator returns True to accept, anything else is the message to show.
Validator: TypeAlias = Callable[[Any], "bool | str | Awaitable[bool | str]"]
Transform: TypeAlias = Callable[[Any], Any]
Formatter: TypeAlias = Callable[[Any, Mapping[str, Any]], Any]

Align: TypeAlias = Literal["left", "center", "right"]
SortDirection: TypeAlias = Literal["asc", "desc"]


# =============================================================================
# Choices and columns
# =============================================================================


@dataclass
class Choice:
    """One selectable option.

    Identity is positional. `value` falls back to `name` when it is None.
    """

    name: str
    value: Any = None
    checked: bool = False

    @property
    def result(self) -> Any:
        return self.name if self.value is None else self.value

    @classmethod
    def coerce(cls, item: Choice | str | Mapping[str, Any]) -> Choice:
        if isinstance(item, Choice):
            return item
        if isinstance(item, str):
            return cls(name=item)
        if isinstance(item, Mapping):
            if "name" not in item:
                raise ValueError(f"choice needs a 'name': {item!r}")
            return cls(
                name=str(item["name"]),
                value=item.get("value"),
                checked=bool(item.get("checked", False)),
            )
        raise TypeError(f"cannot build a Choice from {type(item).__name__}")


def coerce_choices(items: Sequence[Choice | str | Mapping[str, Any]]) -> list[Choice]:
    return [Choice.coerce(item) for item in items]


@dataclass
class ColumnSpec:
    """Table column.

    `width` is the content width in columns (cell padding and borders are
    added on top), or "auto" to size from the data.
    """

    name: str
    label: str = ""
    width: int | Literal["auto"] = "auto"
    align: Align = "left"
    sortable: bool = True
    formatter: Formatter | None = None

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.name
        if self.align not in ("left", "center", "right"):
            raise ValueError(f"invalid align {self.align!r} for column {self.name!r}")
        if self.width != "auto" and (
            not isinstance(self.width, int) or self.width < 1
        ):
            raise ValueError(f"invalid width {self.width!r} for column {self.name!r}")

    @classmethod
    def coerce(cls, item: ColumnSpec | str | Mapping[str, Any]) -> ColumnSpec:
        if isinstance(item, ColumnSpec):
            return item
        if isinstance(item, str):
            return cls(name=item)
        if isinstance(item, Mapping):
            return cls(
                name=str(item["name"]),
                label=str(item.get("label") or item["name"]),
                width=item.get("width") or "auto",
                align=item.get("align", "left"),
                sortable=item.get("sortable", True) is not False,
                formatter=item.get("formatter"),
            )
        raise TypeError(f"cannot build a ColumnSpec from {type(item).__name__}")

    def display(self, row: Mapping[str, Any]) -> str:
        """Display text of this column's cell in `row`."""
        value = row.get(self.name)
        if self.formatter is not None:
            value = self.formatter(value, row)
        return "" if value is None else str(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "width": self.width,
            "align": self.align,
            "sortable": self.sortable,
        }


# =============================================================================
# Prompt options
# =============================================================================

# Keys whose snake_case spelling is not a plain conversion
_ALIASES = {"float": "decimal", "type": "kind"}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _field_name(key: str) -> str:
    key = _ALIASES.get(key, key)
    return _CAMEL_BOUNDARY.sub("_", key).lower()


@dataclass(kw_only=True)
class PromptOptions:
    """Shared option resolution for every prompt kind."""

    style: Mapping[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def resolve(
        cls,
        config: PromptOptions | Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Self:
        if isinstance(config, cls) and not options:
            return config

        merged: dict[str, Any] = {}
        if isinstance(config, PromptOptions):
            merged.update(config.as_dict())
        elif config is not None:
            merged.update(config)
        if options:
            merged.update(options)

        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in merged.items():
            name = key if key in known else _field_name(key)
            if name in known:
                kwargs[name] = value
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)

    def as_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        data.update(self.extra)
        return data

    @property
    def color(self) -> str | None:
        return self.style.get("color")


@dataclass(kw_only=True)
class InputConfig(PromptOptions):
    message: str = "Enter value:"
    default: Any = None
    placeholder: str | None = None
    validate: Validator | None = None
    transform: Transform | None = None
    required: bool = False


@dataclass(kw_only=True)
class PasswordConfig(PromptOptions):
    message: str = "Enter password:"
    mask: str = "*"
    validate: Validator | None = None
    required: bool = True


@dataclass(kw_only=True)
class NumberConfig(PromptOptions):
    message: str = "Enter number:"
    default: Any = None
    min: float | None = None
    max: float | None = None
    decimal: bool = False  # parse with float() instead of int()
    validate: Validator | None = None
    required: bool = False


@dataclass(kw_only=True)
class ConfirmConfig(PromptOptions):
    message: str = "Confirm?"
    default: bool = True


@dataclass(kw_only=True)
class SelectConfig(PromptOptions):
    message: str = "Select an option:"
    choices: Sequence[Choice | str | Mapping[str, Any]] = field(default_factory=list)
    default: Any = None
    searchable: bool = False
    page_size: int = 10
    title: str | None = None


@dataclass(kw_only=True)
class MultiSelectConfig(PromptOptions):
    """Options for multiselect.

    `validate` runs inside the key handler, so it must be a plain function
    returning True or an error message; an awaitable result raises TypeError.
    """

    message: str = "Select options (space to toggle, enter to confirm):"
    choices: Sequence[Choice | str | Mapping[str, Any]] = field(default_factory=list)
    min: int = 0
    max: int | None = None
    validate: Callable[[list[Any]], bool | str] | None = None


@dataclass(kw_only=True)
class MultilineConfig(PromptOptions):
    message: str = "Enter multiple lines (Q to finish):"
    prefix: str = "\n"
    terminator: str = "Q"


@dataclass(kw_only=True)
class FieldSpec(PromptOptions):
    """One form field; everything besides name/type/label goes to the prompt."""

    name: str = ""
    kind: str = "input"
    label: str | None = None

    def prompt_options(self) -> dict[str, Any]:
        options = {"message": self.label or self.name}
        if self.style:
            options["style"] = self.style
        options.update(self.extra)
        return options


@dataclass(kw_only=True)
class FormConfig(PromptOptions):
    title: str | None = "Form"
    fields: Sequence[FieldSpec | Mapping[str, Any]] = field(default_factory=list)

    def field_specs(self) -> list[FieldSpec]:
        specs = [FieldSpec.resolve(item) for item in self.fields]
        for spec in specs:
            if not spec.name:
                raise ValueError("form fields need a 'name'")
        return specs
