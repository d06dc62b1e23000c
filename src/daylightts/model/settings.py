import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ConfigError

ENV_PREFIX = "DAYLIGHTTS_"
DEFAULT_FLUSH_INTERVAL = 30


class InfluxDBConfig(BaseModel):
  address: str = "http://localhost:8086"
  token: str = ""
  username: str = ""
  password: str = ""
  organization: str = ""
  bucket: str = ""
  database: str = ""
  retention_policy: str = ""
  measurement_prefix: str = ""
  tags: Dict[str, str] = Field(default_factory=dict)
  skip_verify_ssl: bool = False
  flush_interval: int = Field(DEFAULT_FLUSH_INTERVAL, ge=0)

  @field_validator("flush_interval")
  @classmethod
  def _default_flush(cls, v: int) -> int:
    return v or DEFAULT_FLUSH_INTERVAL

  def auth_token(self) -> str:
    if self.token:
      return self.token
    if self.username and self.password:
      return f"{self.username}:{self.password}"
    return ""


class Settings(BaseModel):
  latitude: float = Field(ge=-90, le=90)
  longitude: float = Field(ge=-180, le=180)
  timezone: Optional[str] = None
  poll_interval: int = Field(60, ge=1)
  time_offset: int = 0
  influxdb: InfluxDBConfig = Field(default_factory=InfluxDBConfig)

  @field_validator("timezone")
  @classmethod
  def _known_zone(cls, v: Optional[str]) -> Optional[str]:
    if v:
      try:
        ZoneInfo(v)
      except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone {v!r}") from e
    return v or None


def apply_env_overrides(raw: dict, environ: Mapping[str, str]) -> dict:
  # DAYLIGHTTS_POLL_INTERVAL -> poll_interval, DAYLIGHTTS_INFLUXDB_TOKEN -> influxdb.token
  out = dict(raw)
  influx = dict(out.get("influxdb") or {})
  for key, value in environ.items():
    if not key.startswith(ENV_PREFIX):
      continue
    name = key[len(ENV_PREFIX):].lower()
    if name.startswith("influxdb_"):
      field = name[len("influxdb_"):]
      if field in InfluxDBConfig.model_fields and field != "tags":
        influx[field] = value
    elif name in Settings.model_fields and name != "influxdb":
      out[name] = value
  if influx or "influxdb" in out:
    out["influxdb"] = influx
  return out


def load_settings(path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> Settings:
  path = Path(path)
  try:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
  except OSError as e:
    raise ConfigError(f"error reading config file {path}: {e}") from e
  except yaml.YAMLError as e:
    raise ConfigError(f"error parsing config file {path}: {e}") from e
  if not isinstance(raw, dict):
    raise ConfigError(f"config file {path} must contain a mapping")
  raw = apply_env_overrides(raw, os.environ if environ is None else environ)
  try:
    return Settings(**raw)
  except ValidationError as e:
    raise ConfigError(f"unable to decode config {path}: {e}") from e
