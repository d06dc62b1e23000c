"""CLI command to run the daylight recorder."""

from threading import Event
import logging
import signal
import sys

import click

from ..errors import DaylightTSError
from ..model.settings import load_settings
from ..service import DaylightService
from ..sinks import build_sink

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--config",
    default="config.yaml",
    show_default=True,
    type=click.Path(),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: INFO)",
)
def main(config, log_level):
    """Record whether the configured location is in daylight to InfluxDB.

    Polls on the configured interval until SIGTERM or SIGINT, then flushes
    buffered points and exits.

    Examples:
        daylightts --config /etc/daylightts/config.yaml
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = load_settings(config)
        sink = build_sink(settings.influxdb)
    except DaylightTSError as e:
        logger.error(f"failed to load configuration: {e}")
        sys.exit(1)

    service = DaylightService(settings, sink)

    shutdown = Event()
    caught = []

    def _handle_signal(signum, frame):
        caught.append(signal.Signals(signum).name)
        shutdown.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    try:
        service.start()
    except DaylightTSError as e:
        logger.error(f"failed to compute initial sun window: {e}")
        sink.close()
        sys.exit(1)

    # Short waits so the signal handler runs promptly whichever thread receives the signal.
    while not shutdown.wait(0.5):
        pass
    logger.info(f"caught signal {caught[0] if caught else 'unknown'}, flushing data to InfluxDB")
    service.stop()


if __name__ == "__main__":
    main()
