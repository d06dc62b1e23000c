"""Runtime components: clock, sun window cache and poll loop."""

from .cache import DaylightCache
from .clock import SystemClock
from .loop import PollLoop, next_delay

__all__ = [
    "DaylightCache",
    "SystemClock",
    "PollLoop",
    "next_delay",
]
