from datetime import datetime, timedelta, timezone

import pytest

from daylightts.errors import SinkError
from daylightts.sinks.base import TimeSeriesSink


class FakeCalculator:
  def __init__(self, tz=timezone.utc, sunrise=(6, 30), sunset=(19, 45)):
    self.tz = tz
    self.sunrise = sunrise
    self.sunset = sunset
    self.calls = []

  def compute(self, latitude, longitude, year, month, day):
    self.calls.append((latitude, longitude, year, month, day))
    return (
      datetime(year, month, day, *self.sunrise, tzinfo=self.tz),
      datetime(year, month, day, *self.sunset, tzinfo=self.tz),
    )


class FakeClock:
  def __init__(self, start):
    self.current = start
    self.mono = 1000.0

  @property
  def tz(self):
    return self.current.tzinfo

  def now(self):
    return self.current

  def monotonic(self):
    return self.mono

  def advance(self, seconds):
    self.current += timedelta(seconds=seconds)
    self.mono += seconds


class FakeStopEvent:
  """Stop token that advances a fake clock instead of sleeping."""

  def __init__(self, clock, max_waits=None):
    self.clock = clock
    self.max_waits = max_waits
    self.waits = []
    self._set = False

  def is_set(self):
    return self._set

  def set(self):
    self._set = True

  def clear(self):
    self._set = False

  def wait(self, timeout=None):
    self.waits.append(timeout)
    if self.max_waits is not None and len(self.waits) >= self.max_waits:
      self._set = True
    if not self._set and timeout:
      self.clock.advance(timeout)
    return self._set


class FakeSink(TimeSeriesSink):
  def __init__(self, fail=False, on_submit=None):
    super().__init__()
    self.fail = fail
    self.on_submit = on_submit
    self.points = []
    self.flushes = 0
    self.closed = False

  def submit(self, measurement, tags, fields, timestamp):
    if self.on_submit:
      self.on_submit()
    if self.fail:
      raise SinkError("connection refused")
    self.points.append((measurement, dict(tags), dict(fields), timestamp))

  def flush(self):
    self.flushes += 1

  def close(self):
    self.closed = True


@pytest.fixture
def calculator():
  return FakeCalculator()


@pytest.fixture
def clock():
  return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))
