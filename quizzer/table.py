"""Interactive table rendering.

An InteractiveTable owns its rows, columns, sort/filter state, selection and
paging, and renders them into bordered text lines. It is meant to be built
once and re-rendered as the data changes:

    table = (
        InteractiveTable(TableOptions(show_pagination=True, page_size=5))
        .set_title("Users")
        .set_columns(["name", {"name": "age", "align": "right"}])
        .set_rows(rows)
        .sort("age", "desc")
    )
    table.render()
    index = await table.show_table_menu()

Row indices everywhere (selection, the table menu result) refer to the
unfiltered, unsorted row list.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Self

from .data_structures import ColumnSpec, PromptOptions, SortDirection
from .elements.manager import ElementManager
from .elements.table_menu import TableMenu
from .elements.terminal import ANSI
from .styling import Styling

_logging = logging.getLogger(__name__)

__all__ = ["InteractiveTable", "TableOptions", "compare_values", "wrap_text"]


@dataclass(kw_only=True)
class TableOptions(PromptOptions):
    theme: str = "default"
    border_style: str = "single"
    alternate_rows: bool = True
    show_header: bool = True
    sortable: bool = False
    filterable: bool = False
    selectable: bool = False
    multi_select: bool = False
    page_size: int = 10
    show_pagination: bool = False
    selected_row: int = 0
    terminal_width: int | None = None


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison with None first and str() for mixed types."""
    if a is None or b is None:
        return (a is not None) - (b is not None)
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        sa, sb = str(a), str(b)
        return (sa > sb) - (sa < sb)


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap to `width` columns.

    A word wider than the column on its own is truncated with an ellipsis.
    Embedded newlines start new lines. Always returns at least one line.
    """
    width = max(width, 1)
    lines: list[str] = []
    for paragraph in text.split("\n"):
        start = len(lines)
        current = ""
        for word in paragraph.split():
            word_width = ANSI.visual_len(word)
            if word_width > width:
                if current:
                    lines.append(current)
                    current = ""
                lines.append(ANSI.truncate_to_width(word, width))
                continue
            if not current:
                current = word
            elif ANSI.visual_len(current) + 1 + word_width <= width:
                current += " " + word
            else:
                lines.append(current)
                current = word
        if current or len(lines) == start:
            lines.append(current)
    return lines or [""]


class InteractiveTable:
    """Tabular data with sorting, filtering, paging and row selection."""

    # Narrowest an auto column is squeezed to when the terminal is too small
    MIN_AUTO_WIDTH = 3

    def __init__(
        self,
        options: TableOptions | Mapping[str, Any] | None = None,
        *,
        styling: Styling | None = None,
        elements: ElementManager | None = None,
        **kwargs: Any,
    ) -> None:
        self.options = TableOptions.resolve(options, kwargs)
        self.styling = styling if styling is not None else Styling(self.options.theme)
        self.elements = elements

        self.title = ""
        self.columns: list[ColumnSpec] = []
        self.rows: list[Mapping[str, Any]] = []
        self.selected_rows: set[int] = set()
        self.current_page = 0
        self.sort_column: str | None = None
        self.sort_direction: SortDirection = "asc"
        self.filters: dict[str, str] = {}

    @classmethod
    def plain(cls, options: TableOptions | Mapping[str, Any] | None = None) -> Self:
        """A table rendered without colour, using ASCII borders."""
        return cls(options, styling=Styling(color_system=None, unicode=False))

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def set_title(self, title: str) -> Self:
        self.title = title
        return self

    def set_columns(self, columns: Sequence[ColumnSpec | str | Mapping[str, Any]]) -> Self:
        self.columns = [ColumnSpec.coerce(column) for column in columns]
        return self

    def set_rows(self, rows: Sequence[Mapping[str, Any]]) -> Self:
        self.rows = list(rows)
        self.selected_rows.clear()
        self._clamp_page()
        return self

    def add_row(self, row: Mapping[str, Any]) -> Self:
        self.rows.append(row)
        return self

    def remove_row(self, index: int) -> Self:
        if 0 <= index < len(self.rows):
            del self.rows[index]
            self.selected_rows = {
                i if i < index else i - 1 for i in self.selected_rows if i != index
            }
            self._clamp_page()
        return self

    # -------------------------------------------------------------------------
    # Sorting and filtering
    # -------------------------------------------------------------------------

    def _column(self, name: str) -> ColumnSpec | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def sort(self, column: str, direction: SortDirection = "asc") -> Self:
        if direction not in ("asc", "desc"):
            raise ValueError(f"invalid sort direction {direction!r}")
        spec = self._column(column)
        if spec is not None and not spec.sortable:
            _logging.debug("Column %r is not sortable", column)
            return self
        self.sort_column = column
        self.sort_direction = direction
        self._clamp_page()
        return self

    def filter(self, column: str, value: Any) -> Self:
        """Keep rows whose `column` contains `value`; an empty value clears it."""
        if value is None or value == "":
            self.filters.pop(column, None)
        else:
            self.filters[column] = str(value)
        self._clamp_page()
        return self

    def _processed(self) -> list[tuple[int, Mapping[str, Any]]]:
        indexed = list(enumerate(self.rows))
        for name, needle in self.filters.items():
            needle = needle.lower()
            indexed = [
                (i, row)
                for i, row in indexed
                if needle in ("" if row.get(name) is None else str(row.get(name))).lower()
            ]
        if self.sort_column is not None:
            key = self.sort_column
            sign = -1 if self.sort_direction == "desc" else 1
            indexed.sort(
                key=cmp_to_key(
                    lambda a, b: sign * compare_values(a[1].get(key), b[1].get(key))
                )
            )
        return indexed

    def processed_rows(self) -> list[Mapping[str, Any]]:
        """Rows after filtering and sorting, ignoring pagination."""
        return [row for _, row in self._processed()]

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self._processed()) / max(self.options.page_size, 1)))

    def _clamp_page(self) -> None:
        last = self.total_pages - 1
        if self.current_page > last:
            _logging.debug("Page %d out of range, clamping to %d", self.current_page, last)
            self.current_page = last
        self.current_page = max(self.current_page, 0)

    def next_page(self) -> Self:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> Self:
        return self.go_to_page(self.current_page - 1)

    def go_to_page(self, page: int) -> Self:
        self.current_page = min(max(page, 0), self.total_pages - 1)
        return self

    def visible_rows(self) -> list[tuple[int, Mapping[str, Any]]]:
        """(absolute index, row) pairs on the current page."""
        rows = self._processed()
        if not self.options.show_pagination:
            return rows
        size = max(self.options.page_size, 1)
        start = self.current_page * size
        return rows[start : start + size]

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def set_selected_row(self, index: int | None) -> Self:
        self.selected_rows.clear()
        if index is not None and index >= 0:
            self.selected_rows.add(index)
        return self

    def select_row(self, index: int) -> Self:
        if self.options.multi_select:
            self.selected_rows ^= {index}
        else:
            self.selected_rows = {index}
        return self

    def clear_selection(self) -> Self:
        self.selected_rows.clear()
        return self

    def get_selected_rows(self) -> list[Mapping[str, Any]]:
        return [self.rows[i] for i in sorted(self.selected_rows) if i < len(self.rows)]

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def _terminal_width(self) -> int:
        if self.options.terminal_width is not None:
            return self.options.terminal_width
        return ANSI.get_terminal_width()

    def column_widths(self, rows: Sequence[Mapping[str, Any]] | None = None) -> list[int]:
        """Content width of each column for the given (default: visible) rows."""
        if rows is None:
            rows = [row for _, row in self.visible_rows()]

        widths: list[int] = []
        auto: list[int] = []
        for index, column in enumerate(self.columns):
            if column.width != "auto":
                widths.append(column.width)
                continue
            widest = ANSI.visual_len(self._header_text(column))
            for row in rows:
                for line in column.display(row).split("\n"):
                    widest = max(widest, ANSI.visual_len(line))
            widths.append(max(widest, 1))
            auto.append(index)

        # Each column adds one space of padding per side, plus n+1 borders
        total = sum(widths) + 3 * len(widths) + 1
        overflow = total - self._terminal_width()
        while overflow > 0:
            # Split what is left over the columns that can still give
            shrinkable = [i for i in auto if widths[i] > self.MIN_AUTO_WIDTH]
            if not shrinkable:
                break
            share, extra = divmod(overflow, len(shrinkable))
            for n, index in enumerate(shrinkable):
                want = share + (1 if n < extra else 0)
                cut = min(want, widths[index] - self.MIN_AUTO_WIDTH)
                widths[index] -= cut
                overflow -= cut
        return widths

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _header_text(self, column: ColumnSpec) -> str:
        label = column.label
        if self.options.sortable and column.sortable and self.sort_column == column.name:
            arrow = "arrow_up" if self.sort_direction == "asc" else "arrow_down"
            label += " " + self.styling.icon(arrow)
        return label

    def _border(self, position: str, widths: list[int]) -> str:
        chars = self.styling.box_chars(self.options.border_style)
        left, join, right = {
            "top": (chars.top_left, chars.top_tee, chars.top_right),
            "middle": (chars.left_tee, chars.cross, chars.right_tee),
            "bottom": (chars.bottom_left, chars.bottom_tee, chars.bottom_right),
        }[position]
        line = left + join.join(chars.horizontal * (w + 2) for w in widths) + right
        return self.styling.paint(line, "border")

    def _cells_line(self, cells: list[str]) -> str:
        side = self.styling.paint(self.styling.box_chars(self.options.border_style).vertical, "border")
        return side + side.join(cells) + side

    def _header_row(self, widths: list[int]) -> str:
        cells = []
        for column, width in zip(self.columns, widths):
            text = ANSI.truncate_to_width(self._header_text(column), width)
            text = ANSI.pad_to_width(text, width, column.align)
            cells.append(" " + self.styling.paint(text, "primary", bold=True) + " ")
        return self._cells_line(cells)

    def _data_row(
        self, position: int, absolute: int, row: Mapping[str, Any], widths: list[int], highlighted: bool
    ) -> list[str]:
        s = self.styling
        wrapped = [
            wrap_text(column.display(row), width)
            for column, width in zip(self.columns, widths)
        ]
        height = max((len(lines) for lines in wrapped), default=1)

        selected = absolute in self.selected_rows
        color = "text"
        if self.options.alternate_rows and position % 2 == 1:
            color = "muted"

        out = []
        for line_no in range(height):
            cells = []
            for index, (column, width, lines) in enumerate(zip(self.columns, widths, wrapped)):
                text = lines[line_no] if line_no < len(lines) else ""
                text = ANSI.pad_to_width(text, width, column.align)
                # The cursor row carries a pointer in its first padding cell
                lead = s.icon("pointer") if highlighted and index == 0 and line_no == 0 else " "
                if highlighted:
                    text = s.paint(f"{lead}{text} ", "background", bold=True, background="primary")
                elif selected:
                    text = s.paint(f" {text} ", "text", background="secondary")
                else:
                    text = " " + s.paint(text, color) + " "
                cells.append(text)
            out.append(self._cells_line(cells))
        return out

    def pagination_info(self) -> str:
        total = len(self._processed())
        size = max(self.options.page_size, 1)
        start = self.current_page * size + 1 if total else 0
        end = min(self.current_page * size + size, total)
        return (
            f"Page {self.current_page + 1} of {self.total_pages}"
            f" | Showing {start}-{end} of {total} rows"
        )

    def render_lines(self, highlight: int | None = None) -> list[str]:
        """Render to lines; `highlight` is a position on the visible page."""
        s = self.styling
        lines: list[str] = []
        if self.title:
            lines.extend(
                s.create_box(
                    self.title, style="rounded", border_color="primary", margin=1
                ).split("\n")
            )

        visible = self.visible_rows()
        widths = self.column_widths([row for _, row in visible])

        lines.append(self._border("top", widths))
        if self.options.show_header:
            lines.append(self._header_row(widths))
            lines.append(self._border("middle", widths))
        for position, (absolute, row) in enumerate(visible):
            lines.extend(self._data_row(position, absolute, row, widths, position == highlight))
        lines.append(self._border("bottom", widths))

        if self.options.show_pagination:
            lines.append(s.paint(self.pagination_info(), "muted"))
        if self.options.selectable and self.selected_rows:
            lines.append(s.paint(f"Selected: {len(self.selected_rows)} rows", "info"))
        return lines

    def render(self) -> Self:
        """Print the table below the cursor."""
        ANSI.write_lines(self.render_lines())
        return self

    async def show_table_menu(self, elements: ElementManager | None = None) -> int | None:
        """Let the user pick a row; returns its absolute index or None."""
        manager = elements or self.elements
        if manager is None:
            manager = self.elements = ElementManager()
        menu = TableMenu(table=self, cursor=self.options.selected_row)
        return await manager.run(menu)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_csv(self) -> str:
        """Filtered and sorted rows as CSV, every field quoted."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow([column.label for column in self.columns])
        for row in self.processed_rows():
            writer.writerow(
                ["" if row.get(column.name) is None else row.get(column.name) for column in self.columns]
            )
        return buffer.getvalue().removesuffix("\n")

    def to_json(self) -> dict[str, Any]:
        rows = self.processed_rows()
        return {
            "columns": [column.to_dict() for column in self.columns],
            "rows": [dict(row) for row in rows],
            "selected_rows": sorted(self.selected_rows),
            "pagination": {
                "current_page": self.current_page,
                "page_size": self.options.page_size,
                "total_rows": len(rows),
            },
        }

