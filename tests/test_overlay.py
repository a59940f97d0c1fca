"""
Tests for snowfall/overlay.py - Overlay controller

Tests cover:
- Construction: surface, preference, seasonal default, first population
- Resize reconciliation
- Disabled freeze
- Toggle persistence and surface clearing
- Idempotent cleanup
- No-op stand-in when the surface is unavailable
- Fixed-count frame driving
"""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snowfall.config import SnowConfig
from snowfall.demo import FrameDriver
from snowfall.overlay import NullSnowOverlay, SnowOverlay, create_overlay
from snowfall.preferences import MemoryPreferenceStore, PreferenceStore
from snowfall.surface import HeadlessHost
from snowfall.utils.error_handling import SurfaceUnavailableError, get_error_aggregator

WINTER = date(2024, 12, 15)
SUMMER = date(2024, 7, 15)


class FailingPreferenceStore(PreferenceStore):
    def __init__(self, value=None):
        self.value = value

    def get_bool(self, key):
        return self.value

    def set_bool(self, key, value):
        raise OSError("read-only file system")


def positions(overlay):
    return [(f.x, f.y) for f in overlay.flakes]


@pytest.fixture
def host():
    return HeadlessHost(800, 600)


@pytest.fixture
def prefs():
    return MemoryPreferenceStore()


@pytest.fixture
def overlay(host, prefs, rng):
    overlay = SnowOverlay(host, prefs, SnowConfig(), rng=rng, today=WINTER)
    yield overlay
    overlay.cleanup()


class TestConstruction:
    @pytest.mark.unit
    def test_surface_attached_and_sized(self, host, overlay):
        assert host.attached == [overlay.surface]
        assert overlay.surface.width == 800
        assert overlay.surface.height == 600

    @pytest.mark.unit
    def test_initial_population(self, overlay):
        assert len(overlay.flakes) == 120

    @pytest.mark.unit
    def test_registers_resize_listener(self, host, overlay):
        assert host.listener_count == 1

    @pytest.mark.unit
    @pytest.mark.parametrize("stored, today, expected", [
        ("true", SUMMER, True),
        ("false", WINTER, False),
        ("yes", WINTER, False),
    ])
    def test_stored_preference_wins(self, host, rng, stored, today, expected):
        prefs = MemoryPreferenceStore({"snowEnabled": stored})
        overlay = SnowOverlay(host, prefs, rng=rng, today=today)
        assert overlay.enabled is expected

    @pytest.mark.unit
    @pytest.mark.parametrize("today, expected", [
        (date(2024, 12, 1), True),
        (date(2025, 1, 31), True),
        (date(2025, 2, 1), False),
        (SUMMER, False),
    ])
    def test_seasonal_default_without_preference(self, host, prefs, rng, today, expected):
        overlay = SnowOverlay(host, prefs, rng=rng, today=today)
        assert overlay.enabled is expected

    @pytest.mark.unit
    def test_custom_preference_key(self, host, rng):
        prefs = MemoryPreferenceStore({"flurries": "true"})
        config = SnowConfig(preference_key="flurries")
        overlay = SnowOverlay(host, prefs, config, rng=rng, today=SUMMER)
        assert overlay.enabled is True

    @pytest.mark.unit
    def test_surface_unavailable_raises(self, prefs):
        with pytest.raises(SurfaceUnavailableError):
            SnowOverlay(HeadlessHost(surface_available=False), prefs)


class TestResize:
    @pytest.mark.unit
    def test_population_follows_area(self, host, overlay):
        host.notify_resize(400, 600)
        assert overlay.surface.width == 400
        assert len(overlay.flakes) == 60
        assert overlay.flakes.count_by_layer() == (18, 24, 18)

        host.notify_resize(1600, 1200)
        assert len(overlay.flakes) == 480

    @pytest.mark.unit
    def test_growth_hits_target_exactly(self, host, overlay):
        for width, height in [(1024, 768), (1920, 1080), (3840, 2160)]:
            host.notify_resize(width, height)
            assert len(overlay.flakes) == max((width * height) // 4000, 10)

    @pytest.mark.unit
    def test_tiny_viewport_keeps_minimum(self, host, overlay):
        host.notify_resize(1000, 1000)
        host.notify_resize(2000, 2000)
        host.notify_resize(50, 50)
        assert overlay.flakes.count_by_layer() == (3, 4, 3)
        assert len(overlay.flakes) == 10
        host.notify_resize(60, 60)
        assert len(overlay.flakes) == 10

    @pytest.mark.unit
    def test_bounds_updated_on_every_flake(self, host, overlay):
        host.notify_resize(1024, 768)
        assert all(f.bounds_width == 1024 and f.bounds_height == 768 for f in overlay.flakes)


class TestUpdateDraw:
    @pytest.mark.unit
    def test_enabled_update_moves_flakes(self, overlay):
        assert overlay.enabled
        before = positions(overlay)
        overlay.update(1 / 60)
        assert positions(overlay) != before

    @pytest.mark.unit
    def test_disabled_update_freezes(self, host, rng):
        overlay = SnowOverlay(host, MemoryPreferenceStore({"snowEnabled": "false"}), rng=rng)
        before = positions(overlay)
        for _ in range(50):
            overlay.update(1 / 30)
        assert positions(overlay) == before

    @pytest.mark.unit
    def test_draw_paints_all_flakes(self, overlay):
        stats = overlay.draw()
        assert stats.flakes == len(overlay.flakes)
        assert len(overlay.surface.painted()) == len(overlay.flakes)

    @pytest.mark.unit
    def test_disabled_draw_paints_nothing(self, host, rng):
        overlay = SnowOverlay(host, MemoryPreferenceStore({"snowEnabled": "false"}), rng=rng)
        assert overlay.draw() is None
        assert overlay.surface.draw_calls == 0


class TestToggle:
    @pytest.mark.unit
    def test_toggle_flips_and_returns_state(self, overlay):
        assert overlay.toggle() is False
        assert overlay.enabled is False
        assert overlay.toggle() is True

    @pytest.mark.unit
    def test_toggle_persists_string_value(self, overlay, prefs):
        overlay.toggle()
        assert prefs.values["snowEnabled"] == "false"
        overlay.toggle()
        assert prefs.values["snowEnabled"] == "true"

    @pytest.mark.unit
    def test_fresh_overlay_reads_toggled_value(self, host, prefs, rng):
        first = SnowOverlay(host, prefs, rng=rng, today=WINTER)
        assert first.enabled is True
        first.toggle()
        first.cleanup()

        second = SnowOverlay(host, prefs, rng=rng, today=WINTER)
        assert second.enabled is False

    @pytest.mark.unit
    def test_disabling_clears_surface(self, overlay):
        overlay.draw()
        assert overlay.surface.painted()
        overlay.toggle()
        assert overlay.surface.painted() == []

    @pytest.mark.unit
    def test_toggle_survives_persistence_failure(self, host, rng):
        get_error_aggregator().clear()
        overlay = SnowOverlay(host, FailingPreferenceStore(True), rng=rng)
        assert overlay.toggle() is False
        assert overlay.enabled is False
        summary = get_error_aggregator().get_error_summary()
        assert summary['by_category'].get('persistence') == 1


class TestCleanup:
    @pytest.mark.unit
    def test_detaches_surface_and_listener(self, host, prefs, rng):
        overlay = SnowOverlay(host, prefs, rng=rng)
        overlay.cleanup()
        assert host.attached == []
        assert host.listener_count == 0
        assert overlay.closed

    @pytest.mark.unit
    def test_cleanup_is_idempotent(self, host, prefs, rng):
        overlay = SnowOverlay(host, prefs, rng=rng)
        overlay.cleanup()
        overlay.cleanup()
        assert host.attached == []

    @pytest.mark.unit
    def test_no_resize_after_cleanup(self, host, prefs, rng):
        overlay = SnowOverlay(host, prefs, rng=rng)
        overlay.cleanup()
        assert len(overlay.flakes) == 0
        host.notify_resize(1600, 1200)
        assert len(overlay.flakes) == 0


class TestCreateOverlay:
    @pytest.mark.unit
    def test_returns_overlay_when_surface_available(self, host, prefs):
        overlay = create_overlay(host, prefs)
        assert isinstance(overlay, SnowOverlay)
        overlay.cleanup()

    @pytest.mark.unit
    def test_substitutes_null_overlay(self, prefs):
        get_error_aggregator().clear()
        overlay = create_overlay(HeadlessHost(surface_available=False), prefs)

        assert isinstance(overlay, NullSnowOverlay)
        assert overlay.enabled is False
        overlay.update(1 / 60)
        assert overlay.draw() is None
        assert overlay.toggle() is False
        overlay.cleanup()
        overlay.cleanup()
        assert get_error_aggregator().get_error_summary()['by_category'].get('surface') == 1


class TestFrameDriver:
    @pytest.mark.integration
    def test_fixed_frame_count(self, overlay):
        driver = FrameDriver(overlay)
        before = positions(overlay)
        assert driver.run(10, 1 / 60) == 10
        assert driver.frames_run == 10
        assert positions(overlay) != before
        assert overlay.surface.clears == 10

    @pytest.mark.integration
    def test_scenario_end_to_end(self, rng):
        host = HeadlessHost(800, 600)
        prefs = MemoryPreferenceStore({"snowEnabled": "true"})
        config = SnowConfig(flakes_per_area=4000, min_count=10)
        overlay = create_overlay(host, prefs, config, rng=rng)
        driver = FrameDriver(overlay)

        assert len(overlay.flakes) == 120
        driver.run(30, 1 / 60)

        overlay.toggle()
        frozen = positions(overlay)
        driver.run(30, 1 / 60)
        assert positions(overlay) == frozen

        overlay.toggle()
        driver.run(1, 1 / 60)
        assert positions(overlay) != frozen

        overlay.cleanup()
        assert host.attached == []
