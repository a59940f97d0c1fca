"""
Snowfall Demo - snow overlay in a terminal.

Runs the overlay on a curses screen at a fixed frame rate.

Usage:
    snowfall-demo
    snowfall-demo --config snow.yaml --fps 30
    snowfall-demo --force-on

Keyboard Shortcuts:
    [s] Toggle snow
    [q] Quit
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

from .config import SnowConfig, load_config
from .curses_surface import CursesHost
from .overlay import create_overlay
from .preferences import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore
from .season import Debouncer
from .utils.error_handling import ConfigError, ErrorCategory, SurfaceUnavailableError, handle_error

logger = logging.getLogger(__name__)

DEFAULT_PREFS_PATH = Path.home() / ".config" / "snowfall" / "prefs.json"
DEFAULT_LOG_FILE = "snowfall.log"

# Cap on a single frame delta, so a stalled terminal does not teleport flakes
MAX_FRAME_DELTA = 0.1

NOTIFICATION_SECONDS = 2.0


class FrameDriver:
    """Calls update then draw on an overlay a fixed number of times."""

    def __init__(self, overlay):
        self.overlay = overlay
        self.frames_run = 0

    def run(self, frames: int, delta: float) -> int:
        for _ in range(frames):
            self.overlay.update(delta)
            self.overlay.draw()
            self.frames_run += 1
        return frames


def run_demo(stdscr, config: SnowConfig, preferences: PreferenceStore, fps: int = 30):
    """Frame loop: one update/draw per frame until the user quits."""
    curses.curs_set(0)
    stdscr.nodelay(True)
    stdscr.keypad(True)

    host = CursesHost(stdscr)
    overlay = create_overlay(host, preferences, config)
    resize = Debouncer(host.notify_resize, config.debounce_ms)

    frame_time = 1.0 / max(1, fps)
    notification_until = 0.0
    last = time.monotonic()

    try:
        while True:
            key = stdscr.getch()
            if key in (ord('q'), ord('Q')):
                break
            if key in (ord('s'), ord('S')):
                enabled = overlay.toggle()
                host.show_status(f"Snow Effect: {'ON' if enabled else 'OFF'}")
                notification_until = time.monotonic() + NOTIFICATION_SECONDS
            elif key == curses.KEY_RESIZE:
                resize()

            resize.poll()

            now = time.monotonic()
            delta = min(now - last, MAX_FRAME_DELTA)
            last = now

            overlay.update(delta)
            overlay.draw()

            if notification_until and now >= notification_until:
                host.show_status("")
                notification_until = 0.0

            host.refresh()

            spent = time.monotonic() - now
            if spent < frame_time:
                time.sleep(frame_time - spent)
    finally:
        resize.cancel()
        overlay.cleanup()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Snowfall - snow overlay terminal demo')
    parser.add_argument('--config', help='JSON or YAML config file')
    parser.add_argument('--prefs', default=str(DEFAULT_PREFS_PATH),
                        help='Preference file (default: %(default)s)')
    parser.add_argument('--fps', type=int, default=30, help='Target frame rate')
    parser.add_argument('--log-file', default=DEFAULT_LOG_FILE,
                        help='Log file (the terminal belongs to curses)')
    parser.add_argument('--force-on', action='store_true',
                        help='Ignore stored preference and season; start with snow on')

    args = parser.parse_args(argv)

    logging.basicConfig(
        filename=args.log_file,
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not CURSES_AVAILABLE:
        handle_error(SurfaceUnavailableError("curses is not available on this platform"),
                     "start snowfall demo", ErrorCategory.PLATFORM,
                     additional_context={'platform': sys.platform})
        print("curses is not available on this platform", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config) if args.config else SnowConfig()
        config = config.with_env_overrides(os.environ)
    except ConfigError as e:
        handle_error(e, "load snow config", ErrorCategory.CONFIG,
                     additional_context={'path': args.config})
        print(f"Config error: {e}", file=sys.stderr)
        return 2

    if args.force_on:
        preferences: PreferenceStore = MemoryPreferenceStore()
        preferences.set_bool(config.preference_key, True)
    else:
        preferences = JsonPreferenceStore(args.prefs)

    curses.wrapper(run_demo, config, preferences, args.fps)
    return 0


if __name__ == '__main__':
    sys.exit(main())
