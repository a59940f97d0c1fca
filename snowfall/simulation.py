"""Per-frame simulation step for the snow overlay."""

from typing import Iterable

from .particle import Snowflake


def advance(flakes: Iterable[Snowflake], delta: float, enabled: bool = True) -> bool:
    """
    Move every flake forward by delta seconds.

    A disabled overlay is frozen: nothing moves, nothing is simulated
    off-screen. Flakes never read each other's state, so order is free.

    Returns:
        True if the flakes were advanced.
    """
    if not enabled:
        return False
    for flake in flakes:
        flake.step(delta)
    return True
