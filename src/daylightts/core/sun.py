from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, Optional, Tuple

from astral import Observer
from astral.sun import elevation, noon, sunrise, sunset

from ..errors import SunCalculationError


@dataclass
class SunCalculator:
  tz: tzinfo

  def _event(self, fn: Callable, observer: Observer, d: date) -> Optional[datetime]:
    # astral raises ValueError when the event does not happen on that local date
    try:
      return fn(observer, date=d, tzinfo=self.tz)
    except ValueError:
      return None

  def compute(self, latitude: float, longitude: float, year: int, month: int, day: int) -> Tuple[datetime, datetime]:
    # sunrise/sunset only: astral.sun.sun() also needs dawn/dusk, which fail in high-latitude summers
    observer = Observer(latitude=latitude, longitude=longitude)
    d = date(year, month, day)
    rise = self._event(sunrise, observer, d)
    set_ = self._event(sunset, observer, d)
    if set_ is None or (rise is not None and set_ < rise):
      # Sunset falls after local midnight; take the one that ends this day's daylight.
      set_ = self._event(sunset, observer, d + timedelta(days=1))
    if rise is not None and set_ is not None:
      return rise, set_

    # Polar day or night: the sun does not cross the horizon on this date.
    start_of_day = datetime.combine(d, time.min, tzinfo=self.tz)
    end_of_day = datetime.combine(d, time.max, tzinfo=self.tz)
    try:
      sun_up = elevation(observer, noon(observer, date=d, tzinfo=self.tz)) > 0
    except ValueError as e:
      raise SunCalculationError(f"no sun position at ({latitude}, {longitude}) on {d.isoformat()}: {e}") from e
    if sun_up:
      return rise or start_of_day, set_ or end_of_day
    # Empty window: sunrise after sunset, so no instant is daylight.
    return end_of_day, start_of_day
