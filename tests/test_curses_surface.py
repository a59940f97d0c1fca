"""
Tests for snowfall/curses_surface.py - Terminal drawing surface

Windows are MagicMocks; nothing here calls initscr().
"""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

curses = pytest.importorskip("curses")

from snowfall.curses_surface import (
    Colors,
    CursesHost,
    CursesSurface,
    fill_attributes,
    glyph_for,
)
from snowfall.particle import FillStyle
from snowfall.renderer import BatchedRenderer
from snowfall.utils.error_handling import SurfaceUnavailableError


def make_surface(width=640, height=384, encoding="utf-8"):
    return CursesSurface(MagicMock(), width, height, use_color=False, encoding=encoding)


def plotted(surface):
    return [c.args[:3] for c in surface.window.addstr.call_args_list]


class TestFillAttributes:
    @pytest.mark.unit
    @pytest.mark.parametrize("tenths, attr", [
        (10, "A_BOLD"),
        (7, "A_BOLD"),
        (5, "A_NORMAL"),
        (4, "A_NORMAL"),
        (3, "A_DIM"),
        (0, "A_DIM"),
    ])
    def test_monochrome_attributes(self, tenths, attr):
        assert fill_attributes(FillStyle(1, tenths), use_color=False) == getattr(curses, attr)

    @pytest.mark.unit
    def test_color_pair_by_opacity(self):
        with patch("snowfall.curses_surface.curses.color_pair", side_effect=lambda n: n << 8):
            assert fill_attributes(FillStyle(2, 9)) == (Colors.SNOW_BRIGHT << 8) | curses.A_BOLD
            assert fill_attributes(FillStyle(0, 2)) == (Colors.SNOW_FADE << 8) | curses.A_DIM


class TestCursesSurface:
    @pytest.mark.unit
    def test_grid_from_drawing_units(self):
        surface = make_surface(640, 384)
        assert (surface.rows, surface.cols) == (24, 80)

    @pytest.mark.unit
    def test_circles_plot_to_cells(self):
        surface = make_surface()
        surface.set_fill(FillStyle(2, 8))
        surface.fill_circles([(20.0, 40.0, 2.5), (100.0, 100.0, 3.5)])
        assert plotted(surface) == [(2, 2, "*"), (6, 12, "❄")]

    @pytest.mark.unit
    @pytest.mark.parametrize("encoding, faint, star", [
        ("utf-8", "·", "❄"),
        ("latin-1", "·", "*"),
        ("ascii", ".", "*"),
        ("no-such-codec", ".", "*"),
    ])
    def test_glyphs_follow_window_encoding(self, encoding, faint, star):
        surface = make_surface(encoding=encoding)
        surface.set_fill(FillStyle(0, 2))
        surface.fill_rects([(7.0, 15.0, 2.0, 2.0)])
        surface.fill_circles([(100.0, 100.0, 3.5)])
        assert plotted(surface) == [(1, 1, faint), (6, 12, star)]

    @pytest.mark.unit
    def test_encoding_read_from_window(self):
        window = MagicMock()
        window.encoding = "ascii"
        surface = CursesSurface(window, 640, 384, use_color=False)
        assert surface.encoding == "ascii"
        assert (surface.faint_char, surface.star_char) == (".", "*")

    @pytest.mark.unit
    def test_glyph_for_ascii_stand_ins(self):
        assert glyph_for("\u00b7", "ascii") == "."
        assert glyph_for("\u2744", "ascii") == "*"
        assert glyph_for("\u2744", "utf-8") == "\u2744"

    @pytest.mark.unit
    def test_rects_plot_cell_of_centre(self):
        surface = make_surface()
        surface.set_fill(FillStyle(0, 2))
        surface.fill_rects([(7.0, 15.0, 2.0, 2.0)])
        assert plotted(surface) == [(1, 1, "·")]

    @pytest.mark.unit
    def test_off_screen_points_skipped(self):
        surface = make_surface()
        surface.set_fill(FillStyle(1, 5))
        surface.fill_circles([(-5.0, 10.0, 2.5), (10.0, -5.0, 2.5), (700.0, 10.0, 2.5),
                              (10.0, 400.0, 2.5)])
        assert plotted(surface) == []

    @pytest.mark.unit
    def test_write_errors_swallowed(self):
        surface = make_surface()
        surface.window.addstr.side_effect = curses.error
        surface.set_fill(FillStyle(1, 5))
        surface.fill_circles([(10.0, 10.0, 2.5)])

    @pytest.mark.unit
    def test_resize_resizes_window(self):
        surface = make_surface()
        surface.resize(320, 160)
        surface.window.resize.assert_called_with(10, 40)
        surface.window.erase.assert_called()
        assert surface.width == 320

    @pytest.mark.unit
    def test_batched_render(self, rng):
        from snowfall.particle import Snowflake
        surface = make_surface()
        flakes = [Snowflake(640, 384, i % 3, rng=rng) for i in range(30)]
        stats = BatchedRenderer().draw(surface, flakes)
        surface.window.erase.assert_called_once()
        assert stats.flakes == 30


class TestCursesHost:
    def _host(self, rows=25, cols=80):
        stdscr = MagicMock()
        stdscr.getmaxyx.return_value = (rows, cols)
        return CursesHost(stdscr)

    @pytest.mark.unit
    def test_viewport_excludes_status_row(self):
        assert self._host(25, 80).viewport_size() == (640, 384)

    @pytest.mark.unit
    def test_create_surface(self):
        host = self._host()
        window = MagicMock()
        with patch.object(Colors, "init_colors", return_value=False), \
                patch("snowfall.curses_surface.curses.newwin", return_value=window) as newwin:
            surface = host.create_surface(640, 384)
        newwin.assert_called_once_with(24, 80, 0, 0)
        assert surface.window is window
        assert surface.use_color is False

    @pytest.mark.unit
    def test_monochrome_terminal_still_gets_surface(self):
        host = self._host()
        with patch("snowfall.curses_surface.curses.has_colors", return_value=False), \
                patch("snowfall.curses_surface.curses.newwin", return_value=MagicMock()):
            surface = host.create_surface(640, 384)
        assert surface.use_color is False
        surface.set_fill(FillStyle(2, 9))
        surface.fill_circles([(10.0, 10.0, 2.5)])
        surface.window.addstr.assert_called_once_with(0, 1, "*", curses.A_BOLD)

    @pytest.mark.unit
    def test_create_surface_failure(self):
        host = self._host()
        with patch.object(Colors, "init_colors", return_value=False), \
                patch("snowfall.curses_surface.curses.newwin", side_effect=curses.error("no")):
            with pytest.raises(SurfaceUnavailableError):
                host.create_surface(640, 384)

    @pytest.mark.unit
    def test_attach_refresh_detach(self):
        host = self._host()
        surface = make_surface()
        host.attach(surface)
        host.attach(surface)
        with patch("snowfall.curses_surface.curses.doupdate") as doupdate:
            host.refresh()
        surface.window.noutrefresh.assert_called_once()
        doupdate.assert_called_once()

        host.detach(surface)
        host.detach(surface)
        surface.window.erase.assert_called_once()

    @pytest.mark.unit
    def test_notify_resize_calls_listeners(self):
        host = self._host()
        calls = []
        listener = lambda: calls.append(1)
        host.add_resize_listener(listener)
        with patch("snowfall.curses_surface.curses.update_lines_cols", create=True):
            host.notify_resize()
            host.remove_resize_listener(listener)
            host.notify_resize()
        assert calls == [1]

    @pytest.mark.unit
    def test_show_status_on_bottom_row(self):
        host = self._host(25, 80)
        host.show_status("Snow Effect: ON")
        host.stdscr.addstr.assert_called_once_with(24, 0, "Snow Effect: ON", curses.A_BOLD)

        host.stdscr.addstr.reset_mock()
        host.show_status("")
        host.stdscr.clrtoeol.assert_called()
        host.stdscr.addstr.assert_not_called()
