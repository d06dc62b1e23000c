from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from daylightts.core.daylight import Location, SunWindow, compute_window, is_stale, refresh_if_stale
from daylightts.errors import SunCalculationError
from daylightts.runtime.cache import DaylightCache

from conftest import FakeCalculator

BOULDER = Location(40.0, -105.0)


def test_same_day_never_refreshes(calculator):
  day = datetime(2024, 6, 1, tzinfo=timezone.utc)
  window = compute_window(BOULDER, calculator, day)
  calculator.calls.clear()
  for minutes in range(0, 24 * 60, 7):
    assert refresh_if_stale(window, day + timedelta(minutes=minutes), BOULDER, calculator) is window
  assert calculator.calls == []


def test_first_poll_after_midnight_refreshes_once(calculator):
  window = compute_window(BOULDER, calculator, datetime(2024, 6, 1, tzinfo=timezone.utc))
  calculator.calls.clear()
  now = datetime(2024, 6, 2, 0, 0, 30, tzinfo=timezone.utc)
  fresh = refresh_if_stale(window, now, BOULDER, calculator)
  assert calculator.calls == [(40.0, -105.0, 2024, 6, 2)]
  assert fresh.sunrise.date() == now.date()
  for minutes in range(1, 24 * 60, 11):
    fresh = refresh_if_stale(fresh, now + timedelta(minutes=minutes), BOULDER, calculator)
  assert len(calculator.calls) == 1


def test_refresh_is_idempotent_for_same_now(calculator):
  window = compute_window(BOULDER, calculator, datetime(2024, 6, 1, tzinfo=timezone.utc))
  calculator.calls.clear()
  now = datetime(2024, 6, 2, 8, 0, tzinfo=timezone.utc)
  first = refresh_if_stale(window, now, BOULDER, calculator)
  second = refresh_if_stale(first, now, BOULDER, calculator)
  assert second is first
  assert len(calculator.calls) == 1


def test_month_and_year_rollover(calculator):
  window = compute_window(BOULDER, calculator, datetime(2023, 12, 31, tzinfo=timezone.utc))
  assert is_stale(window, datetime(2024, 1, 1, 0, 1, tzinfo=timezone.utc))
  window = compute_window(BOULDER, calculator, datetime(2024, 1, 31, tzinfo=timezone.utc))
  assert not is_stale(window, datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc))
  assert is_stale(window, datetime(2024, 2, 1, 0, 0, tzinfo=timezone.utc))


def test_dst_days_roll_over_at_local_midnight():
  denver = ZoneInfo("America/Denver")
  calculator = FakeCalculator(tz=denver)
  # 2024-03-10 is 23 hours long, 2024-11-03 is 25 hours long
  for day in (datetime(2024, 3, 10, tzinfo=denver), datetime(2024, 11, 3, tzinfo=denver)):
    window = compute_window(BOULDER, calculator, day)
    assert not is_stale(window, day.replace(hour=23, minute=30))
    assert is_stale(window, (day + timedelta(days=1)).replace(hour=0, minute=5))


def test_window_compared_in_callers_zone():
  denver = ZoneInfo("America/Denver")
  # Late-evening sunset in UTC terms lands on the next UTC day.
  window = SunWindow(
    sunrise=datetime(2024, 6, 1, 11, 30, tzinfo=timezone.utc),
    sunset=datetime(2024, 6, 2, 2, 30, tzinfo=timezone.utc),
  )
  assert not is_stale(window, datetime(2024, 6, 1, 21, 0, tzinfo=denver))
  assert is_stale(window, datetime(2024, 6, 2, 0, 10, tzinfo=denver))


def test_recovers_after_missed_days(calculator):
  window = compute_window(BOULDER, calculator, datetime(2024, 6, 1, tzinfo=timezone.utc))
  calculator.calls.clear()
  fresh = refresh_if_stale(window, datetime(2024, 6, 5, 9, 0, tzinfo=timezone.utc), BOULDER, calculator)
  assert calculator.calls == [(40.0, -105.0, 2024, 6, 5)]
  assert fresh.sunset.date() == datetime(2024, 6, 5).date()


class FlakyCalculator(FakeCalculator):
  def __init__(self):
    super().__init__()
    self.fail = False

  def compute(self, latitude, longitude, year, month, day):
    if self.fail:
      self.calls.append((latitude, longitude, year, month, day))
      raise SunCalculationError("sun never rises")
    return super().compute(latitude, longitude, year, month, day)


def test_cache_keeps_stale_window_on_mid_run_failure(caplog):
  calculator = FlakyCalculator()
  cache = DaylightCache(BOULDER, calculator)
  primed = cache.prime(datetime(2024, 6, 1, 5, 0, tzinfo=timezone.utc))
  calculator.fail = True
  with caplog.at_level("WARNING"):
    assert cache.refresh(datetime(2024, 6, 2, 0, 1, tzinfo=timezone.utc)) is primed
  assert "Keeping stale sun window" in caplog.text
  calculator.fail = False
  assert cache.refresh(datetime(2024, 6, 2, 0, 2, tzinfo=timezone.utc)).sunrise.day == 2


def test_prime_failure_propagates():
  calculator = FlakyCalculator()
  calculator.fail = True
  cache = DaylightCache(BOULDER, calculator)
  with pytest.raises(SunCalculationError):
    cache.prime(datetime(2024, 6, 1, tzinfo=timezone.utc))
  assert not cache.is_primed()
  with pytest.raises(RuntimeError):
    cache.window
