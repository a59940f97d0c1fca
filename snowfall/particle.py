"""
Snowflake particle - one unit of the snow overlay.

Each flake belongs to one of three depth layers. The layer fixes a scale
factor that makes far flakes smaller, slower and fainter than near ones,
which gives the overlay its parallax look.
"""

import random
from dataclasses import dataclass
from typing import Optional, Tuple

# Depth layers
LAYER_BACKGROUND = 0
LAYER_MIDDLE = 1
LAYER_FOREGROUND = 2
LAYERS = (LAYER_BACKGROUND, LAYER_MIDDLE, LAYER_FOREGROUND)

# Motion is specified per 60fps frame; deltas are in seconds
FRAME_RATE_NORMALIZER = 60

DEFAULT_EDGE_MARGIN = 10.0


def layer_scale(layer: int) -> float:
    """Scale factor for a layer: 0.5, 0.8, 1.1 for background..foreground."""
    if layer not in LAYERS:
        raise ValueError(f"layer must be one of {LAYERS}, got {layer!r}")
    return 0.5 + layer * 0.3


@dataclass(frozen=True)
class FillStyle:
    """
    Fill descriptor for a flake: white at a quantized translucency.

    Keyed on the layer and the opacity in tenths so that the number of
    distinct styles per frame stays small no matter how many flakes exist.
    """
    layer: int
    alpha_tenths: int

    @property
    def alpha(self) -> float:
        return self.alpha_tenths / 10

    @property
    def rgba(self) -> Tuple[int, int, int, float]:
        return (255, 255, 255, self.alpha)


def quantize_opacity(raw: float) -> int:
    """Opacity in whole tenths, clamped to 0..10."""
    return max(0, min(10, int(round(raw * 10))))


class Snowflake:
    """A single flake. Reset in place when it falls off the bottom."""

    __slots__ = (
        'x', 'y', 'layer', 'radius', 'speed', 'drift', 'opacity', 'fill',
        'bounds_width', 'bounds_height', 'margin', '_rng',
    )

    def __init__(self, width: float, height: float, layer: int,
                 rng: Optional[random.Random] = None, initial: bool = True,
                 margin: float = DEFAULT_EDGE_MARGIN):
        self._rng = rng or random.Random()
        self.margin = margin
        self.reset(width, height, layer, initial)

    def reset(self, width: float, height: float, layer: int, initial: bool = False):
        """
        Give the flake a fresh random state for the given layer.

        On the initial fill the flake may start anywhere on screen; every
        later reset parks it just above the top edge so it drifts in unseen.
        """
        rng = self._rng
        scale = layer_scale(layer)

        self.layer = layer
        self.x = rng.random() * width
        self.y = rng.random() * height if initial else -self.margin

        self.radius = (1 + rng.random() * 2.5) * scale
        self.speed = (0.5 + rng.random() * 1) * scale
        self.drift = (rng.random() - 0.5) * 0.5 * scale

        tenths = quantize_opacity((0.3 + rng.random() * 0.4) * scale)
        self.opacity = tenths / 10
        self.fill = FillStyle(layer, tenths)

        self.bounds_width = width
        self.bounds_height = height

    def step(self, delta: float):
        """Advance by delta seconds, respawning and wrapping at the edges."""
        frames = delta * FRAME_RATE_NORMALIZER
        self.y += self.speed * frames
        self.x += self.drift * frames

        if self.y > self.bounds_height + self.margin:
            self.reset(self.bounds_width, self.bounds_height, self.layer, initial=False)

        if self.x > self.bounds_width + self.margin:
            self.x = -self.margin
        elif self.x < -self.margin:
            self.x = self.bounds_width + self.margin

    def __repr__(self) -> str:
        return (f"Snowflake(x={self.x:.1f}, y={self.y:.1f}, layer={self.layer}, "
                f"radius={self.radius:.2f}, opacity={self.opacity:.1f})")
