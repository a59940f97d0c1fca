"""
Snow Overlay - decorative snowfall drawn on its own surface.

The overlay owns its drawing surface, the flake population and the
enabled preference. The host drives it once per frame:

    overlay = create_overlay(host, preferences, config)

    # every frame
    overlay.update(delta)
    overlay.draw()

    # on a (debounced) resize the host calls the listener registered at
    # construction, which ends up in overlay.resize()

    overlay.toggle()    # user switched snow on/off
    overlay.cleanup()   # teardown

update() and draw() are plain synchronous calls. The overlay keeps no
timers; stopping the frame loop is the host's business.
"""

import logging
import random
from datetime import date
from typing import Optional, Union

from .config import SnowConfig
from .population import FlakeArena, PopulationManager
from .preferences import PreferenceStore
from .renderer import BatchedRenderer, RenderStats
from .season import is_snow_season
from .simulation import advance
from .surface import DrawingSurface, SurfaceHost
from .utils.error_handling import (
    ErrorCategory,
    SurfaceUnavailableError,
    handle_error,
)

logger = logging.getLogger(__name__)


class SnowOverlay:
    """Snow particle overlay controller."""

    def __init__(
        self,
        host: SurfaceHost,
        preferences: PreferenceStore,
        config: Optional[SnowConfig] = None,
        rng: Optional[random.Random] = None,
        today: Optional[date] = None,
    ):
        """
        Create the surface, read the preference and populate the first frame.

        Raises:
            SurfaceUnavailableError: if the host cannot provide a drawing surface
        """
        self.config = (config or SnowConfig()).validate()
        self._host = host
        self._preferences = preferences
        self._closed = False

        width, height = host.viewport_size()
        self._surface: DrawingSurface = host.create_surface(width, height)

        stored = preferences.get_bool(self.config.preference_key)
        if stored is not None:
            self._enabled = stored
        else:
            self._enabled = is_snow_season(self.config.winter_months, today)

        host.attach(self._surface)

        rng = rng or random.Random()
        self._arena = FlakeArena(rng=rng, margin=self.config.edge_margin)
        self._population = PopulationManager(self.config, rng=rng)
        self._renderer = BatchedRenderer(self.config.small_flake_threshold)

        self._population.reconcile(self._arena, width, height, initial=True)

        host.add_resize_listener(self.resize)

        logger.info(f"Snow overlay ready: {len(self._arena)} flakes, "
                    f"{width:.0f}x{height:.0f}, enabled={self._enabled}")

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def flakes(self) -> FlakeArena:
        return self._arena

    @property
    def population(self) -> PopulationManager:
        return self._population

    @property
    def surface(self) -> DrawingSurface:
        return self._surface

    @property
    def closed(self) -> bool:
        return self._closed

    def resize(self):
        """Match the surface and population to the host's current viewport."""
        if self._closed:
            return
        width, height = self._host.viewport_size()
        self._surface.resize(width, height)
        self._arena.set_bounds(width, height)
        self._population.reconcile(self._arena, width, height)
        logger.debug(f"Snow overlay resized to {width:.0f}x{height:.0f}")

    def update(self, delta: float):
        """Advance the simulation by delta seconds. Frozen while disabled."""
        if self._closed:
            return
        advance(self._arena, delta, self._enabled)

    def draw(self) -> Optional[RenderStats]:
        """Repaint the surface. Returns frame stats, or None if nothing was drawn."""
        if self._closed or not self._enabled:
            return None
        return self._renderer.draw(self._surface, self._arena)

    def toggle(self) -> bool:
        """Flip and persist the enabled preference. Returns the new state."""
        self._enabled = not self._enabled

        try:
            self._preferences.set_bool(self.config.preference_key, self._enabled)
        except OSError as e:
            handle_error(
                e,
                "persist snow preference",
                ErrorCategory.PERSISTENCE,
                additional_context={'key': self.config.preference_key,
                                    'enabled': self._enabled},
            )

        if not self._enabled and not self._closed:
            # Frozen flakes must not stay painted
            self._surface.clear()

        logger.info(f"Snow effect {'ON' if self._enabled else 'OFF'}")
        return self._enabled

    def cleanup(self):
        """Detach from the host and release the flakes. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._host.remove_resize_listener(self.resize)
        self._host.detach(self._surface)
        self._arena.clear()
        logger.debug("Snow overlay cleaned up")


class NullSnowOverlay:
    """Stand-in used when no drawing surface could be created."""

    enabled = False
    closed = False

    def update(self, delta: float):
        pass

    def draw(self) -> Optional[RenderStats]:
        return None

    def toggle(self) -> bool:
        return False

    def resize(self):
        pass

    def cleanup(self):
        pass


def create_overlay(
    host: SurfaceHost,
    preferences: PreferenceStore,
    config: Optional[SnowConfig] = None,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> Union[SnowOverlay, NullSnowOverlay]:
    """
    Build a SnowOverlay, or a NullSnowOverlay if the surface is unavailable.

    The rest of the application keeps working either way.
    """
    try:
        return SnowOverlay(host, preferences, config=config, rng=rng, today=today)
    except SurfaceUnavailableError as e:
        handle_error(e, "snow overlay init", ErrorCategory.SURFACE)
        return NullSnowOverlay()
