"""Fixed-cadence poll loop.

Each cycle refreshes the sun window if the day rolled over, evaluates
daylight for "now" and submits one sample to the sink, then waits for the
rest of the poll interval.
"""
from datetime import timedelta
from threading import Event, Thread
from typing import Dict, Mapping, Optional
import logging

from ..core.daylight import DaylightSample, is_daylight
from ..errors import SinkError
from ..sinks.base import TimeSeriesSink
from .cache import DaylightCache
from .clock import SystemClock

logger = logging.getLogger(__name__)

MEASUREMENT = "daylight"


def next_delay(poll_interval: float, elapsed: float) -> float:
    """Seconds to wait before the next cycle; overruns start it immediately."""
    return max(0.0, poll_interval - elapsed)


class PollLoop:
    """Single cadence worker driving refresh, evaluation and submission."""

    def __init__(
        self,
        cache: DaylightCache,
        sink: TimeSeriesSink,
        poll_interval: timedelta,
        time_offset: timedelta = timedelta(0),
        clock: Optional[SystemClock] = None,
        measurement: str = MEASUREMENT,
        tags: Optional[Mapping[str, str]] = None,
        stop_event: Optional[Event] = None,
    ):
        """Initialize the poll loop.

        Args:
            cache: Primed sun window cache
            sink: Destination for samples
            poll_interval: Target time between cycle starts
            time_offset: Symmetric shrink applied to the daylight interval
            clock: Time source (default: host clock)
            measurement: Series name for samples
            tags: Static tags attached to every sample
            stop_event: Cancellation token (default: a new Event)
        """
        self.cache = cache
        self.sink = sink
        self.poll_interval = poll_interval
        self.time_offset = time_offset
        self.clock = clock or SystemClock()
        self.measurement = measurement
        self.tags: Dict[str, str] = dict(tags or {})
        self._stop_event = stop_event or Event()
        self._thread: Optional[Thread] = None
        self.cycles = 0
        self.last_sample: Optional[DaylightSample] = None

    def run_cycle(self) -> DaylightSample:
        """Run one refresh/evaluate/submit cycle and return its sample."""
        now = self.clock.now()
        window = self.cache.refresh(now)
        sample = DaylightSample(is_daylight(window, now, self.time_offset), now)

        try:
            self.sink.submit(
                self.measurement,
                self.tags,
                {MEASUREMENT: sample.is_daylight},
                sample.timestamp,
            )
        except SinkError as e:
            logger.error(f"Failed to submit daylight sample for {now.isoformat()}: {e}")

        self.cycles += 1
        self.last_sample = sample
        logger.debug(f"daylight={sample.is_daylight} at {now.isoformat()}")
        return sample

    def run(self) -> None:
        """Run cycles until the stop event is set (blocking)."""
        interval = self.poll_interval.total_seconds()
        while not self._stop_event.is_set():
            started = self.clock.monotonic()
            try:
                self.run_cycle()
            except Exception as e:
                logger.exception(f"Error in poll cycle: {e}")

            # Returns early when stop() is called, so no further cycle starts.
            self._stop_event.wait(next_delay(interval, self.clock.monotonic() - started))

    def start(self) -> None:
        """Start the loop in a background thread."""
        if self.is_running():
            logger.warning("Poll loop already running")
            return

        self._stop_event.clear()
        self._thread = Thread(target=self.run, name="daylightts-poll", daemon=True)
        self._thread.start()
        logger.info(f"Poll loop started (interval={self.poll_interval.total_seconds():g}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to stop and wait for the current cycle to end.

        Args:
            timeout: Maximum time to wait for clean shutdown
        """
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Poll loop stopped")

    def is_running(self) -> bool:
        """Check if the loop thread is alive."""
        return self._thread is not None and self._thread.is_alive()
