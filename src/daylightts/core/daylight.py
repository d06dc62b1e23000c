from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
  latitude: float
  longitude: float


@dataclass(frozen=True)
class SunWindow:
  sunrise: datetime
  sunset: datetime


@dataclass(frozen=True)
class DaylightSample:
  is_daylight: bool
  timestamp: datetime


def compute_window(location: Location, calculator, day) -> SunWindow:
  sunrise, sunset = calculator.compute(location.latitude, location.longitude, day.year, day.month, day.day)
  return SunWindow(sunrise=sunrise, sunset=sunset)


def is_stale(window: SunWindow, now: datetime) -> bool:
  # Calendar arithmetic on the date, not now - 24h: DST days are 23h or 25h long.
  yesterday = now.date() - timedelta(days=1)
  sunrise_day = window.sunrise.astimezone(now.tzinfo).date()
  sunset_day = window.sunset.astimezone(now.tzinfo).date()
  if sunrise_day == yesterday or sunset_day == yesterday:
    return True
  # A window older than yesterday means cycles were missed (suspended host).
  return max(sunrise_day, sunset_day) < yesterday


def refresh_if_stale(window: SunWindow, now: datetime, location: Location, calculator) -> SunWindow:
  if not is_stale(window, now):
    return window
  fresh = compute_window(location, calculator, now)
  logger.info(
    f"Refreshed sun window for {now.date().isoformat()}: "
    f"sunrise={fresh.sunrise.isoformat()}, sunset={fresh.sunset.isoformat()}"
  )
  return fresh


def effective_window(window: SunWindow, offset: timedelta) -> Tuple[datetime, datetime]:
  # Positive offsets shrink daylight from both ends, negative ones widen it.
  return window.sunrise + offset, window.sunset - offset


def is_daylight(window: SunWindow, now: datetime, offset: timedelta = timedelta(0)) -> bool:
  start, end = effective_window(window, offset)
  if now < start or now > end:
    return False
  return True
