"""Exception hierarchy for the daylight recorder."""


class DaylightTSError(Exception):
    """Base class for all daylightts errors."""


class ConfigError(DaylightTSError):
    """Configuration is missing, unreadable or invalid."""


class SunCalculationError(DaylightTSError):
    """Sunrise/sunset could not be computed for a location and date."""


class SinkError(DaylightTSError):
    """A time-series sink rejected a point synchronously."""
