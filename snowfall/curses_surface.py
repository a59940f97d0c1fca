"""
Terminal drawing surface for the snow overlay.

Maps the overlay's drawing units onto terminal cells: each cell covers a
fixed block of drawing units (8x16 by default, roughly the pixel size of
a terminal glyph). Fill translucency becomes one of three snow colour
pairs plus a dim/bold attribute; monochrome terminals get the attribute
alone. Small flakes plot as dots, large ones as stars. Non-ASCII glyphs
are only used when the window encoding can represent them.

The bottom terminal row is kept for the host's status line.
"""

import locale
import logging
from typing import List, Optional, Sequence, Tuple

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

from .particle import FillStyle
from .surface import Circle, DrawingSurface, Rect, ResizeListener, SurfaceHost
from .utils.error_handling import SurfaceUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_CELL_WIDTH = 8
DEFAULT_CELL_HEIGHT = 16

# Rows reserved at the bottom of the screen for host text
STATUS_ROWS = 1

SMALL_GLYPH = "."
LARGE_GLYPH = "*"

# Richer glyphs, used when the terminal encoding can represent them
FAINT_GLYPH = "\u00b7"   # middle dot, for faint small flakes
STAR_GLYPH = "\u2744"    # snowflake, for the biggest foreground flakes
STAR_RADIUS = 3.0


def glyph_for(glyph: str, encoding: str) -> str:
    """glyph if the encoding can represent it, otherwise its ASCII stand-in."""
    try:
        glyph.encode(encoding)
    except (UnicodeEncodeError, LookupError):
        return SMALL_GLYPH if glyph == FAINT_GLYPH else LARGE_GLYPH
    return glyph


class Colors:
    """Color pairs for curses."""
    NORMAL = 0
    SNOW_BRIGHT = 1      # Bright white snow
    SNOW_DIM = 2         # Dim gray snow
    SNOW_FADE = 3        # Faded gray snow
    STATUS = 4           # Status / notification line

    @staticmethod
    def init_colors() -> bool:
        """
        Initialize curses color pairs.

        Returns False on monochrome terminals, where only attributes are used.
        """
        if not CURSES_AVAILABLE or curses is None:
            return False
        if not curses.has_colors():
            return False
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(Colors.SNOW_BRIGHT, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.SNOW_DIM, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.SNOW_FADE, curses.COLOR_BLACK, -1)
        curses.init_pair(Colors.STATUS, curses.COLOR_CYAN, -1)
        return True


def fill_attributes(style: FillStyle, use_color: bool = True) -> int:
    """Curses attribute for a fill: brighter pairs for more opaque flakes."""
    if style.alpha_tenths >= 7:
        pair, extra = Colors.SNOW_BRIGHT, curses.A_BOLD
    elif style.alpha_tenths >= 4:
        pair, extra = Colors.SNOW_DIM, curses.A_NORMAL
    else:
        pair, extra = Colors.SNOW_FADE, curses.A_DIM
    if not use_color:
        return extra
    return curses.color_pair(pair) | extra


class CursesSurface(DrawingSurface):
    """DrawingSurface backed by a curses window."""

    def __init__(self, window, width: float, height: float,
                 cell_width: int = DEFAULT_CELL_WIDTH,
                 cell_height: int = DEFAULT_CELL_HEIGHT,
                 use_color: bool = True,
                 encoding: Optional[str] = None):
        self.window = window
        if encoding is None:
            encoding = getattr(window, "encoding", None)
        if not isinstance(encoding, str):
            encoding = locale.getpreferredencoding(False)
        self.encoding = encoding
        self.faint_char = glyph_for(FAINT_GLYPH, encoding)
        self.star_char = glyph_for(STAR_GLYPH, encoding)
        self._width = width
        self._height = height
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.use_color = use_color
        self._style: Optional[FillStyle] = None
        self._attr = 0

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def rows(self) -> int:
        return max(1, int(self._height // self.cell_height))

    @property
    def cols(self) -> int:
        return max(1, int(self._width // self.cell_width))

    def resize(self, width: float, height: float):
        self._width = width
        self._height = height
        try:
            self.window.resize(self.rows, self.cols)
        except curses.error:
            pass
        self.window.erase()

    def clear(self):
        self.window.erase()

    def set_fill(self, style: FillStyle):
        self._style = style
        self._attr = fill_attributes(style, self.use_color)

    def _cell(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        if x < 0 or y < 0:
            return None
        row = int(y // self.cell_height)
        col = int(x // self.cell_width)
        if row >= self.rows or col >= self.cols:
            return None
        return row, col

    def _plot(self, x: float, y: float, char: str):
        cell = self._cell(x, y)
        if cell is None:
            return
        try:
            self.window.addstr(cell[0], cell[1], char, self._attr)
        except curses.error:
            # Bottom-right cell and narrow terminals raise on write
            pass

    def fill_rects(self, rects: Sequence[Rect]):
        faint = self._style is not None and self._style.alpha_tenths < 5
        char = self.faint_char if faint else SMALL_GLYPH
        for x, y, w, h in rects:
            self._plot(x + w / 2, y + h / 2, char)

    def fill_circles(self, circles: Sequence[Circle]):
        for x, y, radius in circles:
            char = self.star_char if radius > STAR_RADIUS else LARGE_GLYPH
            self._plot(x, y, char)


class CursesHost(SurfaceHost):
    """
    Host container for overlay surfaces on a curses screen.

    Surfaces are separate windows stacked over the screen; refresh()
    composites them. Resize notifications are delivered by notify_resize(),
    which the frame loop calls once a burst of KEY_RESIZE events settles.
    """

    def __init__(self, stdscr, cell_width: int = DEFAULT_CELL_WIDTH,
                 cell_height: int = DEFAULT_CELL_HEIGHT):
        self.stdscr = stdscr
        self.cell_width = cell_width
        self.cell_height = cell_height
        self._surfaces: List[CursesSurface] = []
        self._listeners: List[ResizeListener] = []
        self._use_color: Optional[bool] = None

    def _grid(self) -> Tuple[int, int]:
        rows, cols = self.stdscr.getmaxyx()
        return max(1, rows - STATUS_ROWS), max(1, cols)

    def viewport_size(self) -> Tuple[float, float]:
        rows, cols = self._grid()
        return (cols * self.cell_width, rows * self.cell_height)

    def create_surface(self, width: float, height: float) -> DrawingSurface:
        if not CURSES_AVAILABLE or curses is None:
            raise SurfaceUnavailableError("curses is not available on this platform")
        try:
            if self._use_color is None:
                self._use_color = Colors.init_colors()
            rows = max(1, int(height // self.cell_height))
            cols = max(1, int(width // self.cell_width))
            window = curses.newwin(rows, cols, 0, 0)
        except curses.error as e:
            raise SurfaceUnavailableError(f"cannot create curses window: {e}") from e
        return CursesSurface(window, width, height, self.cell_width,
                             self.cell_height, use_color=self._use_color)

    def attach(self, surface: DrawingSurface):
        if surface not in self._surfaces:
            self._surfaces.append(surface)

    def detach(self, surface: DrawingSurface):
        if surface in self._surfaces:
            self._surfaces.remove(surface)
            surface.clear()
            try:
                surface.window.noutrefresh()
            except curses.error:
                pass

    def add_resize_listener(self, listener: ResizeListener):
        self._listeners.append(listener)

    def remove_resize_listener(self, listener: ResizeListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_resize(self):
        """Pick up the new terminal size and tell every listener."""
        if CURSES_AVAILABLE and hasattr(curses, 'update_lines_cols'):
            curses.update_lines_cols()
        logger.debug(f"Terminal resized to {self.stdscr.getmaxyx()}")
        for listener in list(self._listeners):
            listener()

    def show_status(self, text: str):
        """Write text on the reserved bottom row (empty string clears it)."""
        rows, cols = self.stdscr.getmaxyx()
        attr = curses.color_pair(Colors.STATUS) if self._use_color else curses.A_BOLD
        try:
            self.stdscr.move(rows - 1, 0)
            self.stdscr.clrtoeol()
            if text:
                self.stdscr.addstr(rows - 1, 0, text[:max(0, cols - 1)], attr)
        except curses.error:
            pass

    def refresh(self):
        """Composite the screen and every attached surface."""
        try:
            self.stdscr.noutrefresh()
            for surface in self._surfaces:
                surface.window.noutrefresh()
            curses.doupdate()
        except curses.error:
            pass
