"""
Snowfall - decorative snow overlay

A layered snow particle overlay that runs next to a host scene: it sizes
its population to the viewport, drifts flakes at three parallax depths
and paints them in batches keyed by fill style.

Basic Usage:
    from snowfall import HeadlessHost, MemoryPreferenceStore, create_overlay

    overlay = create_overlay(HeadlessHost(800, 600), MemoryPreferenceStore())
    overlay.update(1 / 60)
    overlay.draw()

Terminal Demo:
    snowfall-demo
"""

__version__ = "1.0.0"

# Core classes
from .overlay import SnowOverlay, NullSnowOverlay, create_overlay
from .config import SnowConfig, ConfigFormat, load_config

# Simulation
from .particle import Snowflake, FillStyle, layer_scale
from .population import FlakeArena, PopulationManager
from .simulation import advance
from .renderer import BatchedRenderer, FlakeGroup, RenderStats

# Host capabilities
from .surface import DrawingSurface, SurfaceHost, RecordingSurface, HeadlessHost
from .preferences import PreferenceStore, MemoryPreferenceStore, JsonPreferenceStore
from .season import is_snow_season, Debouncer

# Errors
from .utils.error_handling import SnowfallError, SurfaceUnavailableError, ConfigError

__all__ = [
    # Version
    "__version__",
    # Core
    "SnowOverlay",
    "NullSnowOverlay",
    "create_overlay",
    "SnowConfig",
    "ConfigFormat",
    "load_config",
    # Simulation
    "Snowflake",
    "FillStyle",
    "layer_scale",
    "FlakeArena",
    "PopulationManager",
    "advance",
    "BatchedRenderer",
    "FlakeGroup",
    "RenderStats",
    # Host capabilities
    "DrawingSurface",
    "SurfaceHost",
    "RecordingSurface",
    "HeadlessHost",
    "PreferenceStore",
    "MemoryPreferenceStore",
    "JsonPreferenceStore",
    "is_snow_season",
    "Debouncer",
    # Errors
    "SnowfallError",
    "SurfaceUnavailableError",
    "ConfigError",
]
