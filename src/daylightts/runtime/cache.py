"""Owned holder for the single cached sunrise/sunset window."""
from datetime import datetime
from typing import Optional
import logging

from ..core.daylight import Location, SunWindow, compute_window, refresh_if_stale
from ..errors import SunCalculationError

logger = logging.getLogger(__name__)


class DaylightCache:
    """Holds the current SunWindow and replaces it on day rollover.

    Only the cadence worker writes to the cache. If pollers ever run
    concurrently, ``refresh`` needs a lock around it.
    """

    def __init__(self, location: Location, calculator, window: Optional[SunWindow] = None):
        """Initialize the cache.

        Args:
            location: Fixed observer location
            calculator: Object with ``compute(lat, lon, year, month, day)``
            window: Pre-computed window (default: none until ``prime``)
        """
        self.location = location
        self.calculator = calculator
        self._window = window

    def is_primed(self) -> bool:
        """Check if a window has been computed."""
        return self._window is not None

    @property
    def window(self) -> SunWindow:
        """The cached window; raises if the cache was never primed."""
        if self._window is None:
            raise RuntimeError("DaylightCache used before prime()")
        return self._window

    def prime(self, now: datetime) -> SunWindow:
        """Compute the window for ``now``'s day unconditionally.

        Errors propagate: a location with no sunrise at startup is fatal.
        """
        self._window = compute_window(self.location, self.calculator, now)
        logger.info(
            f"Initial sun window for {now.date().isoformat()}: "
            f"sunrise={self._window.sunrise.isoformat()}, sunset={self._window.sunset.isoformat()}"
        )
        return self._window

    def refresh(self, now: datetime) -> SunWindow:
        """Replace the window if it belongs to a past day.

        A calculation failure keeps the stale window so a long-running
        process is not brought down by it.
        """
        try:
            self._window = refresh_if_stale(self.window, now, self.location, self.calculator)
        except SunCalculationError as e:
            logger.warning(f"Keeping stale sun window: {e}")
        return self._window
