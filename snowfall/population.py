"""
Snow population management.

Decides how many flakes the current viewport should carry and grows or
shrinks the live set toward that number while keeping the background /
middle / foreground mix.
"""

import logging
import math
import random
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import SnowConfig
from .particle import LAYERS, Snowflake

logger = logging.getLogger(__name__)

# Upper bound on recycled flake records kept after a shrink
MAX_SPARE_FLAKES = 2048


class FlakeArena:
    """
    Ordered slots of live flakes.

    Respawning resets a slot in place. Shrinking truncates per layer and
    parks the dropped records in a spare pool so the next growth can reuse
    them instead of allocating.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 margin: float = 10.0):
        self._rng = rng or random.Random()
        self._margin = margin
        self._slots: List[Snowflake] = []
        self._spare: List[Snowflake] = []

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Snowflake]:
        return iter(self._slots)

    def __getitem__(self, index: int) -> Snowflake:
        return self._slots[index]

    @property
    def spare_count(self) -> int:
        return len(self._spare)

    def spawn(self, width: float, height: float, layer: int, initial: bool) -> Snowflake:
        """Append a flake for the layer, reusing a spare record when one exists."""
        if self._spare:
            flake = self._spare.pop()
            flake.reset(width, height, layer, initial)
        else:
            flake = Snowflake(width, height, layer, rng=self._rng,
                              initial=initial, margin=self._margin)
        self._slots.append(flake)
        return flake

    def set_bounds(self, width: float, height: float):
        for flake in self._slots:
            flake.bounds_width = width
            flake.bounds_height = height

    def count_by_layer(self) -> Tuple[int, ...]:
        counts = [0] * len(LAYERS)
        for flake in self._slots:
            counts[flake.layer] += 1
        return tuple(counts)

    def keep_first_per_layer(self, quotas: Sequence[int]):
        """Keep the first quotas[layer] flakes of each layer, in slot order."""
        kept: List[Snowflake] = []
        taken = [0] * len(LAYERS)
        for flake in self._slots:
            if taken[flake.layer] < quotas[flake.layer]:
                taken[flake.layer] += 1
                kept.append(flake)
            elif len(self._spare) < MAX_SPARE_FLAKES:
                self._spare.append(flake)
        self._slots = kept

    def clear(self):
        self._slots = []
        self._spare = []


class PopulationManager:
    """Sizes the flake population to the viewport area."""

    def __init__(self, config: SnowConfig, rng: Optional[random.Random] = None):
        self.config = config
        self._rng = rng or random.Random()
        # Cumulative distribution for weighted layer draws
        self._cumulative: List[float] = []
        running = 0.0
        for ratio in config.layer_distribution:
            running += ratio
            self._cumulative.append(running)

    def target_count(self, width: float, height: float) -> int:
        area = max(0.0, width) * max(0.0, height)
        return max(math.floor(area / self.config.flakes_per_area), self.config.min_count)

    def layer_quotas(self, target: int) -> Tuple[int, ...]:
        return tuple(math.floor(target * ratio) for ratio in self.config.layer_distribution)

    def pick_layer(self) -> int:
        """Weighted random layer following the configured distribution."""
        roll = self._rng.random()
        for layer, bound in enumerate(self._cumulative):
            if roll < bound:
                return layer
        # Rounding can leave the last bound a hair under 1.0
        return LAYERS[-1]

    def reconcile(self, arena: FlakeArena, width: float, height: float,
                  initial: bool = False) -> int:
        """
        Grow or shrink the arena toward the target count for this viewport.

        Growth draws each new flake's layer at random against the
        distribution. Shrink leaves exactly floor(target * ratio) flakes in
        each layer: the first ones in slot order survive, and a layer that
        was already short gets new flakes spawned above the top edge.

        Returns:
            The live count after reconciling.
        """
        target = self.target_count(width, height)
        current = len(arena)

        if target > current:
            for _ in range(target - current):
                arena.spawn(width, height, self.pick_layer(), initial)
            logger.debug(f"Snow population grown {current} -> {len(arena)} "
                         f"for {width:.0f}x{height:.0f}")
        elif target < current:
            quotas = self.layer_quotas(target)
            arena.keep_first_per_layer(quotas)
            # Layers that were already short are filled up to their quota
            for layer, (count, quota) in enumerate(zip(arena.count_by_layer(), quotas)):
                for _ in range(quota - count):
                    arena.spawn(width, height, layer, initial)
            logger.debug(f"Snow population shrunk {current} -> {len(arena)} "
                         f"(quotas {quotas}) for {width:.0f}x{height:.0f}")

        return len(arena)
