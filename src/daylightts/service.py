"""Service coordinator that ties configuration, cache, loop and sink together."""

from datetime import timedelta
from typing import Any, Dict, Optional
import logging

from .core.daylight import Location, effective_window
from .core.sun import SunCalculator
from .model.settings import Settings
from .runtime import DaylightCache, PollLoop, SystemClock
from .runtime.loop import MEASUREMENT
from .sinks.base import TimeSeriesSink

logger = logging.getLogger(__name__)


class DaylightService:
    """Owns the daylight recorder's components and their lifecycle."""

    def __init__(
        self,
        settings: Settings,
        sink: TimeSeriesSink,
        clock: Optional[SystemClock] = None,
        calculator=None,
    ):
        """Initialize the service.

        Args:
            settings: Validated configuration
            sink: Time-series sink receiving samples
            clock: Time source (default: host clock in the configured zone)
            calculator: Sunrise/sunset calculator (default: astral, clock zone)
        """
        self.settings = settings
        self.sink = sink
        self.clock = clock or SystemClock.for_zone(settings.timezone)
        self.calculator = calculator or SunCalculator(self.clock.tz)
        self.location = Location(settings.latitude, settings.longitude)
        self.time_offset = timedelta(minutes=settings.time_offset)

        self.cache = DaylightCache(self.location, self.calculator)
        self.loop = PollLoop(
            self.cache,
            self.sink,
            poll_interval=timedelta(seconds=settings.poll_interval),
            time_offset=self.time_offset,
            clock=self.clock,
            measurement=f"{settings.influxdb.measurement_prefix}{MEASUREMENT}",
            tags=settings.influxdb.tags,
        )
        self._running = False
        self._stopped = False

    def start(self) -> None:
        """Compute the initial window and start polling.

        Raises:
            SunCalculationError: If the location has no sunrise/sunset today
        """
        if self._running:
            logger.warning("Service already running")
            return
        if self._stopped:
            raise RuntimeError("Service cannot be restarted after stop()")

        self.cache.prime(self.clock.now())
        self.loop.start()
        self._running = True
        logger.info(
            f"Recording daylight for ({self.location.latitude}, {self.location.longitude}) "
            f"to {self.sink.describe()}"
        )

    def stop(self) -> None:
        """Stop polling and flush buffered points exactly once."""
        if self._stopped:
            return
        self._stopped = True

        logger.info("Stopping service...")
        self.loop.stop()
        try:
            self.sink.flush()
        finally:
            self.sink.close()
        self._running = False
        logger.info(f"Service stopped after {self.loop.cycles} cycles ({self.sink.write_errors} write errors)")

    def is_running(self) -> bool:
        """Check if the service is polling."""
        return self._running

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics.

        Returns:
            Dictionary of statistics
        """
        stats: Dict[str, Any] = {
            "running": self._running,
            "cycles": self.loop.cycles,
            "write_errors": self.sink.write_errors,
            "current_time": self.clock.now().isoformat(),
        }
        if self.cache.is_primed():
            window = self.cache.window
            start, end = effective_window(window, self.time_offset)
            stats["sunrise"] = window.sunrise.isoformat()
            stats["sunset"] = window.sunset.isoformat()
            stats["daylight_start"] = start.isoformat()
            stats["daylight_end"] = end.isoformat()
        if self.loop.last_sample is not None:
            stats["daylight"] = self.loop.last_sample.is_daylight
        return stats
