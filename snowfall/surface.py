"""
Drawing Surface and Host Interfaces

Defines the capabilities the overlay needs from its environment: a 2D
surface it can paint on, and a host container that creates, holds and
resizes that surface.

Usage:
    from snowfall.surface import DrawingSurface, SurfaceHost

    class MyHost(SurfaceHost):
        def create_surface(self, width, height):
            return MySurface(width, height)
        # ... implement other methods
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from .particle import FillStyle
from .utils.error_handling import SurfaceUnavailableError

# (x, y, width, height)
Rect = Tuple[float, float, float, float]
# (center_x, center_y, radius)
Circle = Tuple[float, float, float]

ResizeListener = Callable[[], None]


class DrawingSurface(ABC):
    """
    Abstract 2D drawing surface.

    fill_rects and fill_circles are each a single draw call no matter how
    many shapes they carry.
    """

    @property
    @abstractmethod
    def width(self) -> float:
        """Surface width in drawing units."""

    @property
    @abstractmethod
    def height(self) -> float:
        """Surface height in drawing units."""

    @abstractmethod
    def resize(self, width: float, height: float):
        """Change surface dimensions. Contents are discarded."""

    @abstractmethod
    def clear(self):
        """Erase the whole surface."""

    @abstractmethod
    def set_fill(self, style: FillStyle):
        """Set the fill used by subsequent draw calls."""

    @abstractmethod
    def fill_rects(self, rects: Sequence[Rect]):
        """Fill axis-aligned rectangles with the current fill."""

    @abstractmethod
    def fill_circles(self, circles: Sequence[Circle]):
        """Fill all circles as one combined path with the current fill."""


class SurfaceHost(ABC):
    """
    Abstract host container for a drawing surface.

    The host owns resize timing: it must coalesce bursts of resize events
    before calling listeners, and never call them from inside update/draw.
    """

    @abstractmethod
    def create_surface(self, width: float, height: float) -> DrawingSurface:
        """
        Create a drawing surface.

        Raises:
            SurfaceUnavailableError: if the surface or its context cannot be made
        """

    @abstractmethod
    def attach(self, surface: DrawingSurface):
        """Place the surface in the host container."""

    @abstractmethod
    def detach(self, surface: DrawingSurface):
        """Remove the surface from the host container if present."""

    @abstractmethod
    def viewport_size(self) -> Tuple[float, float]:
        """Current viewport (width, height) in drawing units."""

    @abstractmethod
    def add_resize_listener(self, listener: ResizeListener):
        """Call listener (no args) after each debounced resize."""

    @abstractmethod
    def remove_resize_listener(self, listener: ResizeListener):
        """Stop delivering resize notifications to listener."""


class RecordingSurface(DrawingSurface):
    """
    In-memory surface that records draw commands.

    Keeps the commands issued since the last clear() plus running counters
    of fill changes and draw calls. Used for headless runs and tests.
    """

    def __init__(self, width: float, height: float):
        self._width = width
        self._height = height
        self.commands: List[tuple] = []
        self.fill_changes = 0
        self.draw_calls = 0
        self.clears = 0
        self._fill: Optional[FillStyle] = None

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def resize(self, width: float, height: float):
        self._width = width
        self._height = height
        self.commands = []

    def clear(self):
        self.commands = []
        self.clears += 1

    def set_fill(self, style: FillStyle):
        self._fill = style
        self.fill_changes += 1
        self.commands.append(('fill', style))

    def fill_rects(self, rects: Sequence[Rect]):
        self.draw_calls += 1
        self.commands.append(('rects', self._fill, tuple(rects)))

    def fill_circles(self, circles: Sequence[Circle]):
        self.draw_calls += 1
        self.commands.append(('circles', self._fill, tuple(circles)))

    def painted(self) -> List[Tuple[str, FillStyle, tuple]]:
        """Every shape drawn since the last clear as (kind, fill, geometry)."""
        shapes = []
        for command in self.commands:
            if command[0] == 'rects':
                shapes.extend(('rect', command[1], r) for r in command[2])
            elif command[0] == 'circles':
                shapes.extend(('circle', command[1], c) for c in command[2])
        return shapes

    def reset_counters(self):
        self.fill_changes = 0
        self.draw_calls = 0
        self.clears = 0


class HeadlessHost(SurfaceHost):
    """In-memory host. Resizes are delivered synchronously by notify_resize()."""

    def __init__(self, width: float = 800, height: float = 600,
                 surface_available: bool = True):
        self._width = width
        self._height = height
        self._surface_available = surface_available
        self.attached: List[DrawingSurface] = []
        self._listeners: List[ResizeListener] = []

    def create_surface(self, width: float, height: float) -> DrawingSurface:
        if not self._surface_available:
            raise SurfaceUnavailableError("2D drawing context not available")
        return RecordingSurface(width, height)

    def attach(self, surface: DrawingSurface):
        if surface not in self.attached:
            self.attached.append(surface)

    def detach(self, surface: DrawingSurface):
        if surface in self.attached:
            self.attached.remove(surface)

    def viewport_size(self) -> Tuple[float, float]:
        return (self._width, self._height)

    def add_resize_listener(self, listener: ResizeListener):
        self._listeners.append(listener)

    def remove_resize_listener(self, listener: ResizeListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def notify_resize(self, width: float, height: float):
        self._width = width
        self._height = height
        for listener in list(self._listeners):
            listener()
