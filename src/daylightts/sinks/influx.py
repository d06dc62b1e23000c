"""InfluxDB adapters built on influxdb-client's batching write API.

Two targets are supported through the same client library:

* ``InfluxDB2Sink`` writes to an organization/bucket with token auth.
* ``InfluxDB1Sink`` writes through the 1.8+ compatibility endpoint, where the
  bucket is ``database/retention_policy`` and the token is ``user:password``.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional
import logging

from influxdb_client import InfluxDBClient, Point, WriteOptions, WritePrecision

from ..errors import ConfigError, SinkError
from ..model.settings import InfluxDBConfig
from .base import TimeSeriesSink

logger = logging.getLogger(__name__)


class InfluxSink(TimeSeriesSink):
    """Shared batching behaviour for both InfluxDB targets."""

    def __init__(
        self,
        address: str,
        token: str,
        org: str,
        bucket: str,
        verify_ssl: bool = True,
        flush_interval: int = 30,
        client_factory: Callable[..., Any] = InfluxDBClient,
    ):
        """Initialize the sink and open a batching write API.

        Args:
            address: Server URL
            token: Auth token (empty for unauthenticated servers)
            org: Organization name
            bucket: Write destination
            verify_ssl: Verify the server certificate
            flush_interval: Seconds between background flushes
            client_factory: Callable returning an ``InfluxDBClient``
        """
        super().__init__()
        self.address = address
        self.org = org
        self.bucket = bucket
        self.flush_interval = flush_interval
        self._client = client_factory(url=address, token=token, org=org, verify_ssl=verify_ssl)
        self._write_api = self._open_write_api()
        self._closed = False

    def _open_write_api(self):
        return self._client.write_api(
            write_options=WriteOptions(flush_interval=self.flush_interval * 1000),
            error_callback=self._on_write_error,
        )

    def _on_write_error(self, conf, data, exception) -> None:
        """Error callback invoked on the client's background thread."""
        logger.error(f"encountered error on writing to InfluxDB {self.address} ({self.bucket}): {exception}")
        self._report_error(exception)

    def submit(
        self,
        measurement: str,
        tags: Mapping[str, str],
        fields: Mapping[str, Any],
        timestamp: datetime,
    ) -> None:
        if self._closed:
            raise SinkError("sink is closed")
        point = Point(measurement)
        for key, value in tags.items():
            point = point.tag(key, value)
        for key, value in fields.items():
            point = point.field(key, value)
        point = point.time(timestamp, WritePrecision.NS)
        if self._write_api is None:
            self._write_api = self._open_write_api()
        try:
            self._write_api.write(bucket=self.bucket, org=self.org, record=point)
        except Exception as e:
            raise SinkError(f"failed to queue point for {measurement}: {e}") from e

    def flush(self) -> None:
        # The batching API only drains its buffer on close; the next submit reopens it.
        if self._closed or self._write_api is None:
            return
        self._write_api.close()
        self._write_api = None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._write_api is not None:
            self._write_api.close()
            self._write_api = None
        self._client.close()

    def describe(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "address": self.address,
            "org": self.org,
            "bucket": self.bucket,
            "flush_interval": self.flush_interval,
        }


class InfluxDB2Sink(InfluxSink):
    """Sink for InfluxDB 2.x organization/bucket targets."""


class InfluxDB1Sink(InfluxSink):
    """Sink for InfluxDB 1.8+ database/retention-policy targets."""

    def __init__(self, address: str, token: str, database: str, retention_policy: str, **kwargs):
        # Compatibility endpoint ignores the org; "-" is the documented placeholder.
        super().__init__(address, token, "-", f"{database}/{retention_policy}", **kwargs)
        self.database = database
        self.retention_policy = retention_policy


def build_sink(cfg: InfluxDBConfig, client_factory: Optional[Callable[..., Any]] = None) -> InfluxSink:
    """Choose and build the adapter for the configured target.

    A bucket selects InfluxDB 2.x; otherwise a database and retention policy
    select the 1.x compatibility adapter.

    Raises:
        ConfigError: If neither target is configured
    """
    kwargs = {
        "verify_ssl": not cfg.skip_verify_ssl,
        "flush_interval": cfg.flush_interval,
    }
    if client_factory is not None:
        kwargs["client_factory"] = client_factory

    if cfg.bucket:
        return InfluxDB2Sink(cfg.address, cfg.auth_token(), cfg.organization, cfg.bucket, **kwargs)
    if cfg.database and cfg.retention_policy:
        return InfluxDB1Sink(cfg.address, cfg.auth_token(), cfg.database, cfg.retention_policy, **kwargs)
    raise ConfigError("must configure at least one of bucket or database/retention policy")
