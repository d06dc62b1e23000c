"""Wall and monotonic time sources for the poll loop.

The loop reads timestamps from ``now()`` and measures cycle durations with
``monotonic()`` so that a wall-clock step (NTP, DST) cannot distort the
cadence.
"""
from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo
import time


def local_timezone() -> tzinfo:
    """Return the host's current local timezone."""
    return datetime.now().astimezone().tzinfo


class SystemClock:
    """Clock backed by the host's time functions."""

    def __init__(self, tz: Optional[tzinfo] = None):
        """Initialize the clock.

        Args:
            tz: Zone for ``now()`` timestamps (default: host local zone)
        """
        self._tz = tz

    @classmethod
    def for_zone(cls, name: Optional[str]) -> "SystemClock":
        """Build a clock for an IANA zone name, or the local zone if None."""
        return cls(ZoneInfo(name) if name else None)

    @property
    def tz(self) -> tzinfo:
        """Zone that ``now()`` timestamps are expressed in."""
        return self._tz or local_timezone()

    def now(self) -> datetime:
        """Get the current time as a timezone-aware datetime."""
        return datetime.now(self.tz)

    def monotonic(self) -> float:
        """Get seconds from a monotonic source, for measuring durations."""
        return time.monotonic()

    def __repr__(self) -> str:
        return f"SystemClock({self.now().isoformat()})"
