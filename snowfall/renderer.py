"""
Batched snow renderer.

Flakes are grouped by fill style before drawing, so each frame costs one
fill change per distinct style and at most two draw calls per style,
however many flakes are live. Flakes with a radius at or below the small
threshold are drawn as squares, which are indistinguishable from circles
at that size and cheaper to fill.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .particle import FillStyle, Snowflake
from .surface import DrawingSurface

SMALL_FLAKE_THRESHOLD = 2.0


@dataclass
class FlakeGroup:
    """Flakes sharing one fill style, split by draw primitive."""
    small: List[Snowflake] = field(default_factory=list)
    large: List[Snowflake] = field(default_factory=list)


@dataclass
class RenderStats:
    """Counts for one rendered frame."""
    flakes: int = 0
    groups: int = 0
    fill_changes: int = 0
    draw_calls: int = 0


class BatchedRenderer:
    """Paints flakes onto a DrawingSurface with minimal state changes."""

    def __init__(self, small_threshold: float = SMALL_FLAKE_THRESHOLD):
        self.small_threshold = small_threshold
        self.last_stats = RenderStats()

    def group(self, flakes: Iterable[Snowflake]) -> Dict[FillStyle, FlakeGroup]:
        groups: Dict[FillStyle, FlakeGroup] = {}
        for flake in flakes:
            group = groups.get(flake.fill)
            if group is None:
                group = FlakeGroup()
                groups[flake.fill] = group
            if flake.radius <= self.small_threshold:
                group.small.append(flake)
            else:
                group.large.append(flake)
        return groups

    def draw(self, surface: DrawingSurface, flakes: Iterable[Snowflake]) -> RenderStats:
        """Clear the surface and repaint every flake."""
        surface.clear()
        stats = RenderStats()

        groups = self.group(flakes)
        stats.groups = len(groups)

        for style, group in groups.items():
            surface.set_fill(style)
            stats.fill_changes += 1

            if group.small:
                surface.fill_rects([
                    (f.x - f.radius, f.y - f.radius, f.radius * 2, f.radius * 2)
                    for f in group.small
                ])
                stats.draw_calls += 1

            if group.large:
                surface.fill_circles([(f.x, f.y, f.radius) for f in group.large])
                stats.draw_calls += 1

            stats.flakes += len(group.small) + len(group.large)

        self.last_stats = stats
        return stats
