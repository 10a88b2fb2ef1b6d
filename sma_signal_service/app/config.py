"""Configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


DEFAULT_CANDLES_BASE_URL = "http://cryptohopper-ticker-frontend.us-east-1.elasticbeanstalk.com"


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


class UpstreamConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    base_url: str = DEFAULT_CANDLES_BASE_URL
    timeout_sec: float = Field(default=10.0, gt=0)
    retries: int = Field(default=3, ge=1)
    retry_delay_sec: float = Field(default=0.5, ge=0)


class SignalConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    short_window: int = Field(default=8, ge=1)
    long_window: int = Field(default=55, ge=2)

    @model_validator(mode="after")
    def _short_below_long(self) -> "SignalConfig":
        if self.short_window >= self.long_window:
            raise ValueError("short_window must be smaller than long_window")
        return self


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO", pattern=r"^(TRACE|DEBUG|INFO|SUCCESS|WARNING|ERROR|CRITICAL)$")
    log_dir: str = "logs"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    server: ServerConfig = Field(default_factory=ServerConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    signal: SignalConfig = Field(default_factory=SignalConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _apply_env_overrides(raw_data: dict) -> dict:
    port = os.getenv("PORT")
    if port:
        raw_data["server"] = {**(raw_data.get("server") or {}), "port": port}

    base_url = os.getenv("CANDLES_BASE_URL")
    if base_url:
        raw_data["upstream"] = {**(raw_data.get("upstream") or {}), "base_url": base_url}
    return raw_data


def load_config(path: str | Path = "config.yml") -> AppConfig:
    """Load configuration from YAML file, apply env overrides and validate schema."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file '{config_path}' not found. Copy config.yml.example to config.yml first."
        )

    load_dotenv()
    with config_path.open("r", encoding="utf-8") as fh:
        raw_data = yaml.safe_load(fh) or {}

    try:
        return AppConfig.model_validate(_apply_env_overrides(raw_data))
    except ValidationError as exc:
        raise ValueError(f"Invalid config '{config_path}': {exc}") from exc
