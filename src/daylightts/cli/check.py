import sys
from datetime import timedelta

import click

from ..core.daylight import Location, compute_window, effective_window, is_daylight
from ..core.sun import SunCalculator
from ..errors import DaylightTSError
from ..model.settings import load_settings
from ..runtime.clock import SystemClock


@click.command()
@click.option("--config", default="config.yaml", show_default=True, type=click.Path())
def main(config):
  """Validate the configuration and print today's daylight window."""
  try:
    settings = load_settings(config)
    clock = SystemClock.for_zone(settings.timezone)
    now = clock.now()
    window = compute_window(Location(settings.latitude, settings.longitude), SunCalculator(clock.tz), now)
  except DaylightTSError as e:
    click.echo(f"ERROR: {e}", err=True)
    sys.exit(1)
  offset = timedelta(minutes=settings.time_offset)
  start, end = effective_window(window, offset)
  influx = settings.influxdb
  target = influx.bucket or (f"{influx.database}/{influx.retention_policy}" if influx.database and influx.retention_policy else None)
  click.echo(f"Location: {settings.latitude}, {settings.longitude} ({clock.tz})")
  click.echo(f"Sunrise:  {window.sunrise.isoformat()}")
  click.echo(f"Sunset:   {window.sunset.isoformat()}")
  click.echo(f"Daylight: {start.isoformat()} .. {end.isoformat()} (offset {settings.time_offset} min)")
  click.echo(f"Now:      {now.isoformat()} -> daylight={is_daylight(window, now, offset)}")
  if target is None:
    click.echo("ERROR: must configure at least one of bucket or database/retention policy", err=True)
    sys.exit(1)
  click.echo(f"Target:   {influx.address} {target}, every {settings.poll_interval}s")
  click.echo("Configuration OK")


if __name__ == "__main__":
  main()
