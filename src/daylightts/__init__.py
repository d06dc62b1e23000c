"""Record whether a location is in daylight into a time-series database."""

__version__ = "0.1.0"
