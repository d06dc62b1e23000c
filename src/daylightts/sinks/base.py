"""Base interface for time-series sinks."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping
import logging

logger = logging.getLogger(__name__)

ErrorListener = Callable[[Exception], None]


class TimeSeriesSink(ABC):
    """Accepts timestamped points and delivers them in the background.

    ``submit`` must return without waiting for network I/O. Delivery
    failures are reported through error listeners, never raised into the
    submitting thread.
    """

    def __init__(self):
        self._listeners: List[ErrorListener] = []
        self.write_errors = 0

    @abstractmethod
    def submit(
        self,
        measurement: str,
        tags: Mapping[str, str],
        fields: Mapping[str, Any],
        timestamp: datetime,
    ) -> None:
        """Queue one point for delivery.

        Args:
            measurement: Series name
            tags: Indexed string tags
            fields: Field values
            timestamp: Point time (timezone-aware)

        Raises:
            SinkError: If the point is rejected before being queued
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Deliver all buffered points before returning."""
        pass

    def close(self) -> None:
        """Release connections. Override to clean up client resources."""
        pass

    def add_error_listener(self, callback: ErrorListener) -> None:
        """Register a callback for asynchronous delivery failures.

        Args:
            callback: Function called with the delivery exception
        """
        if callback not in self._listeners:
            self._listeners.append(callback)

    def _report_error(self, error: Exception) -> None:
        """Count a delivery failure and notify listeners."""
        self.write_errors += 1
        for listener in self._listeners:
            try:
                listener(error)
            except Exception as e:
                # Log but don't fail on listener errors
                logger.error(f"Error in sink error listener: {e}")

    def describe(self) -> Dict[str, Any]:
        """Return a loggable summary of the sink's target."""
        return {"type": type(self).__name__}
