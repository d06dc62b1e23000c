"""Time-series sinks for daylight samples."""

from .base import TimeSeriesSink
from .influx import InfluxDB1Sink, InfluxDB2Sink, InfluxSink, build_sink

__all__ = [
    "TimeSeriesSink",
    "InfluxSink",
    "InfluxDB1Sink",
    "InfluxDB2Sink",
    "build_sink",
]
