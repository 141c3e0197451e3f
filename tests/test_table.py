"""Tests for table layout, sorting, filtering, paging and export."""

from __future__ import annotations

import csv
import io

import pytest
from rich.color import ColorSystem

from quizzer.data_structures import ColumnSpec
from quizzer.elements.terminal import ANSI
from quizzer.styling import Styling
from quizzer.table import InteractiveTable, compare_values, wrap_text


def _people() -> list[dict]:
    return [
        {"name": "Ada", "age": 36, "city": "London"},
        {"name": "Grace", "age": 85, "city": "New York"},
        {"name": "Alan", "age": 41, "city": "london"},
        {"name": "Linus", "age": 36, "city": "Helsinki"},
    ]


def _table(**options) -> InteractiveTable:
    options.setdefault("terminal_width", 80)
    return (
        InteractiveTable.plain(options)
        .set_columns(["name", {"name": "age", "align": "right"}, "city"])
        .set_rows(_people())
    )


class TestHelpers:
    def test_compare_values_orders_none_first(self) -> None:
        assert compare_values(None, 1) == -1
        assert compare_values(1, None) == 1
        assert compare_values(None, None) == 0

    def test_compare_values_mixed_types_compare_as_text(self) -> None:
        assert compare_values(10, "9") == -1  # "10" < "9"
        assert compare_values(2, 10) == -1

    def test_wrap_text_words(self) -> None:
        assert wrap_text("the quick brown fox", 9) == ["the quick", "brown fox"]

    def test_wrap_text_truncates_long_words(self) -> None:
        assert wrap_text("hello", 3) == ["he…"]

    def test_wrap_text_keeps_newlines(self) -> None:
        assert wrap_text("a\n\nb", 5) == ["a", "", "b"]

    def test_wrap_text_empty(self) -> None:
        assert wrap_text("", 4) == [""]


class TestLayout:
    def test_plain_render(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 80})
            .set_columns(["name", "age"])
            .set_rows([{"name": "Ada", "age": 36}])
        )
        assert table.render_lines() == [
            "+------+-----+",
            "| name | age |",
            "+------+-----+",
            "| Ada  | 36  |",
            "+------+-----+",
        ]

    def test_fixed_width_truncates_cell(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 80})
            .set_columns([ColumnSpec("word", width=3)])
            .set_rows([{"word": "hello"}])
        )
        assert "| he… |" in table.render_lines()

    def test_wrapped_cell_makes_taller_row(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 80, "show_header": False})
            .set_columns([ColumnSpec("text", width=5), "n"])
            .set_rows([{"text": "aa bb cc", "n": 1}])
        )
        lines = table.render_lines()
        assert lines[1:4] == ["| aa bb | 1 |", "| cc    |   |", "+-------+---+"]

    def test_auto_columns_shrink_to_terminal(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 20})
            .set_columns(["a", "b"])
            .set_rows([{"a": "x" * 20, "b": "y" * 20}])
        )
        widths = table.column_widths()
        assert sum(widths) + 3 * len(widths) + 1 <= 20
        assert all(ANSI.visual_len(line) <= 20 for line in table.render_lines())

    def test_narrow_column_passes_its_cut_to_wide_one(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 40})
            .set_columns(["a", "b"])
            .set_rows([{"a": "x", "b": "word " * 12}])
        )
        widths = table.column_widths()
        assert widths[0] == 1
        assert sum(widths) + 3 * len(widths) + 1 == 40
        assert all(ANSI.visual_len(line) <= 40 for line in table.render_lines())

    def test_auto_columns_never_below_minimum(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 5})
            .set_columns(["a", "b"])
            .set_rows([{"a": "xxxxxx", "b": "yyyyyy"}])
        )
        assert table.column_widths() == [3, 3]

    def test_right_alignment(self) -> None:
        lines = _table().render_lines()
        assert any("|  36 |" in line for line in lines)

    def test_formatter_receives_row(self) -> None:
        table = (
            InteractiveTable.plain({"terminal_width": 80})
            .set_columns([{"name": "age", "formatter": lambda v, row: f"{row['name']}:{v}"}])
            .set_rows([{"name": "Ada", "age": 36}])
        )
        assert "| Ada:36 |" in table.render_lines()

    def test_sort_arrow_in_header(self) -> None:
        table = _table(sortable=True).sort("age", "desc")
        assert "age v" in table.render_lines()[1]

    def test_title_box_and_selection_count(self) -> None:
        table = _table(selectable=True).set_title("People").select_row(1)
        lines = table.render_lines()
        assert any("People" in line for line in lines[:4])
        assert lines[-1] == "Selected: 1 rows"


class TestSortAndFilter:
    def test_sort_is_stable(self) -> None:
        names = [row["name"] for row in _table().sort("age").processed_rows()]
        assert names == ["Ada", "Linus", "Alan", "Grace"]

    def test_sort_desc_reverses_keys(self) -> None:
        names = [row["name"] for row in _table().sort("age", "desc").processed_rows()]
        assert names == ["Grace", "Alan", "Ada", "Linus"]

    def test_sorting_twice_is_idempotent(self) -> None:
        table = _table().sort("name")
        first = table.processed_rows()
        assert table.sort("name").processed_rows() == first

    def test_missing_values_sort_first(self) -> None:
        table = _table().add_row({"name": "Nobody"})
        assert table.sort("age").processed_rows()[0]["name"] == "Nobody"

    def test_unsortable_column_is_ignored(self) -> None:
        table = InteractiveTable.plain().set_columns([{"name": "a", "sortable": False}])
        table.sort("a")
        assert table.sort_column is None

    def test_bad_direction(self) -> None:
        with pytest.raises(ValueError):
            _table().sort("age", "sideways")  # type: ignore[arg-type]

    def test_filters_combine_case_insensitively(self) -> None:
        table = _table().filter("city", "LONDON").filter("name", "a")
        assert [row["name"] for row in table.processed_rows()] == ["Ada", "Alan"]

    def test_filter_numbers_as_text(self) -> None:
        assert len(_table().filter("age", 36).processed_rows()) == 2

    def test_empty_filter_clears(self) -> None:
        table = _table().filter("city", "london").filter("city", "")
        assert len(table.processed_rows()) == 4

    def test_selection_survives_filtering(self) -> None:
        table = _table(multi_select=True).select_row(1).select_row(2)
        table.filter("name", "grace")
        assert [row["name"] for row in table.get_selected_rows()] == ["Grace", "Alan"]


class TestPagination:
    def _paged(self) -> InteractiveTable:
        return (
            InteractiveTable.plain({"terminal_width": 80, "show_pagination": True})
            .set_columns(["n"])
            .set_rows([{"n": i} for i in range(25)])
        )

    def test_pages(self) -> None:
        table = self._paged()
        assert table.total_pages == 3
        assert [row["n"] for _, row in table.next_page().visible_rows()][0] == 10

    def test_go_to_page_clamps(self) -> None:
        table = self._paged()
        assert table.go_to_page(5).current_page == 2
        assert table.go_to_page(-3).current_page == 0

    def test_pagination_info(self) -> None:
        table = self._paged().go_to_page(2)
        assert table.pagination_info() == "Page 3 of 3 | Showing 21-25 of 25 rows"
        assert table.render_lines()[-1] == table.pagination_info()

    def test_filter_pulls_page_back_in_range(self) -> None:
        table = self._paged().go_to_page(2)
        table.filter("n", "1")
        assert table.current_page == table.total_pages - 1

    def test_empty_table(self) -> None:
        table = InteractiveTable.plain({"show_pagination": True}).set_columns(["n"])
        assert table.total_pages == 1
        assert table.pagination_info() == "Page 1 of 1 | Showing 0-0 of 0 rows"


class TestSelection:
    def test_single_select_replaces(self) -> None:
        table = _table().select_row(0).select_row(2)
        assert table.selected_rows == {2}

    def test_multi_select_toggles(self) -> None:
        table = _table(multi_select=True).select_row(0).select_row(2).select_row(0)
        assert table.selected_rows == {2}

    def test_remove_row_shifts_selection(self) -> None:
        table = _table(multi_select=True).select_row(1).select_row(3)
        table.remove_row(1)
        assert table.selected_rows == {2}
        assert [row["name"] for row in table.get_selected_rows()] == ["Linus"]

    def test_set_rows_clears_selection(self) -> None:
        table = _table().select_row(1).set_rows(_people())
        assert table.selected_rows == set()


class TestExport:
    def test_csv_quotes_every_field(self) -> None:
        table = (
            InteractiveTable.plain()
            .set_columns([{"name": "q", "label": "Quote"}, "n"])
            .set_rows([{"q": 'say "hi"', "n": 1}, {"q": None, "n": 2}])
        )
        assert table.to_csv() == '"Quote","n"\n"say ""hi""","1"\n"","2"'

    def test_csv_parses_back(self) -> None:
        table = _table().sort("name")
        parsed = list(csv.reader(io.StringIO(table.to_csv())))
        assert parsed[0] == ["name", "age", "city"]
        assert [r[0] for r in parsed[1:]] == ["Ada", "Alan", "Grace", "Linus"]

    def test_to_json(self) -> None:
        table = _table(page_size=2).filter("city", "london").select_row(2)
        data = table.to_json()
        assert [c["name"] for c in data["columns"]] == ["name", "age", "city"]
        assert data["columns"][1]["align"] == "right"
        assert [r["name"] for r in data["rows"]] == ["Ada", "Alan"]
        assert data["selected_rows"] == [2]
        assert data["pagination"] == {"current_page": 0, "page_size": 2, "total_rows": 2}


class TestTableMenu:
    @pytest.mark.asyncio
    async def test_returns_absolute_index_under_sorting(self, terminal) -> None:
        terminal.keys.feed("down", "return")
        table = _table().sort("age", "desc")
        # Sorted: Grace, Alan, Ada, Linus
        assert await table.show_table_menu(terminal.manager) == 2

    @pytest.mark.asyncio
    async def test_cursor_stays_on_page(self, terminal) -> None:
        terminal.keys.feed("up", "down", "down", "down", "down", "down", "return")
        assert await _table().show_table_menu(terminal.manager) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["escape", "q", "ctrl-c"])
    async def test_cancel(self, terminal, name) -> None:
        terminal.keys.feed(name)
        assert await _table().show_table_menu(terminal.manager) is None

    @pytest.mark.asyncio
    async def test_empty_table_returns_none(self, terminal) -> None:
        terminal.keys.feed("return")
        table = InteractiveTable.plain({"terminal_width": 80}).set_columns(["n"])
        assert await table.show_table_menu(terminal.manager) is None

    @pytest.mark.asyncio
    async def test_renders_help_line(self, terminal) -> None:
        terminal.keys.feed("return")
        await _table().show_table_menu(terminal.manager)
        assert "Esc to cancel" in terminal.last_frame[-1]

    def test_cursor_row_has_a_pointer(self) -> None:
        table = _table(selectable=True).select_row(1)
        lines = table.render_lines(highlight=0)
        assert lines[3].startswith("|>Ada   |")
        assert lines[4].startswith("| Grace |")

    def test_cursor_and_selection_use_different_colours(self) -> None:
        table = InteractiveTable(
            {"terminal_width": 80, "selectable": True},
            styling=Styling(color_system=ColorSystem.TRUECOLOR, unicode=True),
        )
        table.set_columns(["name"]).set_rows(_people()).select_row(1)
        lines = table.render_lines(highlight=0)
        # Primary (#00d4aa) behind the cursor, secondary (#0066cc) behind the selection
        assert "48;2;0;212;170" in lines[3] and "→" in lines[3]
        assert "48;2;0;102;204" in lines[4]
        assert "48;2;0;212;170" not in lines[4]
