"""
Season detection and resize debouncing.

Both are host-side helpers: the overlay asks whether it is snow season
when no stored preference exists, and hosts use Debouncer to coalesce
bursts of resize events before telling the overlay.
"""

import time
from datetime import date
from typing import Any, Callable, Collection, Optional, Tuple


def is_snow_season(winter_months: Collection[int], today: Optional[date] = None) -> bool:
    """True if today's month (1-12) is one of winter_months."""
    if not isinstance(winter_months, (list, tuple, set, frozenset)):
        return False
    today = today or date.today()
    return today.month in winter_months


class Debouncer:
    """
    Poll-driven debounce for a single-threaded frame loop.

    Calling the debouncer records the latest arguments and restarts the
    quiet period. poll() runs the function once the quiet period has
    passed. No timers or threads are involved; the frame loop polls.
    """

    def __init__(self, func: Callable[..., Any], wait_ms: float,
                 clock: Callable[[], float] = time.monotonic):
        self._func = func
        self._wait = wait_ms / 1000.0
        self._clock = clock
        self._deadline: Optional[float] = None
        self._args: Tuple[Any, ...] = ()
        self._kwargs: dict = {}

    def __call__(self, *args, **kwargs):
        self._args = args
        self._kwargs = kwargs
        self._deadline = self._clock() + self._wait

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def poll(self) -> bool:
        """Run the pending call if its quiet period is over. True if it ran."""
        if self._deadline is None or self._clock() < self._deadline:
            return False
        args, kwargs = self._args, self._kwargs
        self.cancel()
        self._func(*args, **kwargs)
        return True

    def cancel(self):
        self._deadline = None
        self._args = ()
        self._kwargs = {}
