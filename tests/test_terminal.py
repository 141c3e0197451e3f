"""Tests for the ANSI helpers, the raw key decoder and the repaint region."""

from __future__ import annotations

import os

import pytest

from quizzer.elements.terminal import ANSI, RawInputReader, TerminalRegion


class TestAnsiText:
    def test_visual_len_strips_escape_codes(self) -> None:
        assert ANSI.visual_len("\033[31mred\033[0m") == 3
        assert ANSI.visual_len("plain") == 5

    def test_visual_len_counts_wide_characters(self) -> None:
        assert ANSI.visual_len("日本") == 4

    def test_pad_to_width_alignments(self) -> None:
        assert ANSI.pad_to_width("ab", 5) == "ab   "
        assert ANSI.pad_to_width("ab", 5, "right") == "   ab"
        assert ANSI.pad_to_width("ab", 5, "center") == " ab  "

    def test_pad_to_width_never_truncates(self) -> None:
        assert ANSI.pad_to_width("abcdef", 3) == "abcdef"

    def test_truncate_plain_text_adds_ellipsis(self) -> None:
        assert ANSI.truncate_to_width("hello", 3) == "he…"
        assert ANSI.truncate_to_width("hi", 3) == "hi"

    def test_truncate_keeps_codes_and_resets(self) -> None:
        result = ANSI.truncate_to_width("\033[1mhello\033[0m", 3)
        assert ANSI.strip_ansi(result) == "he…"
        assert result.endswith(ANSI.RESET)

    def test_wrap_to_width_hard_wraps(self) -> None:
        assert ANSI.wrap_to_width("abcdefg", 3) == ["abc", "def", "g"]


class TestRawInputReader:
    """Decoding runs on a pipe, which is never a TTY."""

    @pytest.fixture
    def pipe(self):
        read_fd, write_fd = os.pipe()
        yield read_fd, write_fd
        for fd in (read_fd, write_fd):
            try:
                os.close(fd)
            except OSError:
                pass

    def test_pipe_is_not_interactive(self, pipe) -> None:
        reader = RawInputReader(fd=pipe[0])
        assert not reader.interactive
        reader.start()
        assert reader.old_settings is None
        reader.stop()

    def test_decodes_plain_and_control_keys(self, pipe) -> None:
        read_fd, write_fd = pipe
        os.write(write_fd, b"a\r \x7f\x03\n")
        reader = RawInputReader(fd=read_fd)

        events = [reader._read_sync() for _ in range(6)]

        assert [e.key for e in events] == ["a", "Enter", "Space", "Backspace", "c", "Enter"]
        assert events[2].char == " "
        assert events[4].is_interrupt

    def test_decodes_arrow_sequences(self, pipe) -> None:
        read_fd, write_fd = pipe
        os.write(write_fd, b"\x1b[A\x1b[B\x1b[Z")
        reader = RawInputReader(fd=read_fd)

        assert [reader._read_sync().key for _ in range(3)] == ["Up", "Down", "BackTab"]

    def test_lone_escape(self, pipe) -> None:
        read_fd, write_fd = pipe
        os.write(write_fd, b"\x1b")
        os.close(write_fd)
        reader = RawInputReader(fd=read_fd)

        assert reader._read_sync().key == "Escape"

    def test_multibyte_character(self, pipe) -> None:
        read_fd, write_fd = pipe
        os.write(write_fd, "é".encode("utf-8"))
        reader = RawInputReader(fd=read_fd)

        event = reader._read_sync()
        assert event.char == "é"
        assert event.is_printable

    def test_end_of_input_raises_eof(self, pipe) -> None:
        read_fd, write_fd = pipe
        os.close(write_fd)
        reader = RawInputReader(fd=read_fd)

        with pytest.raises(EOFError):
            reader._read_sync()


class TestTerminalRegion:
    def test_render_repaints_and_parks_cursor(self, capsys) -> None:
        region = TerminalRegion()
        region.activate(2)
        capsys.readouterr()

        region.render(["one", "two"])

        assert capsys.readouterr().out == "\rone\033[K\n\rtwo\033[K\033[1A\r"

    def test_missing_lines_are_blanked(self, capsys) -> None:
        region = TerminalRegion()
        region.activate(2)
        capsys.readouterr()

        region.render(["only"])

        assert "\n\r\033[K" in capsys.readouterr().out

    def test_grow_scrolls_in_new_rows(self, capsys) -> None:
        region = TerminalRegion()
        region.activate(1)
        capsys.readouterr()

        region.update_size(3)

        assert capsys.readouterr().out == "\n\n\033[2A\r"
        assert region.num_lines == 3

    def test_deactivate_clears_and_shows_cursor(self, capsys) -> None:
        region = TerminalRegion()
        region.activate(2)
        region.deactivate()
        out = capsys.readouterr().out

        assert out.startswith(ANSI.HIDE_CURSOR)
        assert out.endswith(ANSI.SHOW_CURSOR)
        assert region.num_lines == 0

    def test_inactive_region_writes_nothing(self, capsys) -> None:
        TerminalRegion().render(["x"])
        assert capsys.readouterr().out == ""
