# File: src/parkhub/config.py
"""
Application configuration

Configuration is an explicit struct handed to the service factory at startup.
Business code never reads the process environment; ``AppConfig.from_env`` is
called once by the CLI bootstrap.
"""

import logging
import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceMode(Enum):
    """Selects which service implementations the factory wires"""
    STANDARD = "STANDARD"
    BATCH = "BATCH"


class PartnerServiceConfig(BaseModel):
    """Connection settings for the partner rental service"""
    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default="http://localhost:8080", description="Partner service root URL")
    timeout_seconds: Optional[float] = Field(default=None, gt=0, description="None keeps the transport default")
    max_search_attempts: int = Field(default=5, ge=1)
    search_page_size: int = Field(default=2147483647, ge=1)

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Partner base URL cannot be empty")
        if "://" not in v:
            v = f"http://{v}"
        return v.rstrip('/')


class AppConfig(BaseModel):
    """Top level configuration"""
    model_config = ConfigDict(frozen=True)

    database_url: str = "sqlite:///parkhub.db"
    service_mode: ServiceMode = ServiceMode.STANDARD
    available_spots_only: bool = False
    log_level: str = "INFO"
    partner: PartnerServiceConfig = Field(default_factory=PartnerServiceConfig)

    @field_validator('service_mode', mode='before')
    @classmethod
    def parse_mode(cls, v):
        if isinstance(v, str):
            return ServiceMode(v.strip().upper())
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Build configuration from environment variables"""
        env = os.environ if environ is None else environ

        values = {}
        if env.get("PARKHUB_DATABASE_URL"):
            values["database_url"] = env["PARKHUB_DATABASE_URL"]
        if env.get("PARKHUB_SERVICE_MODE"):
            values["service_mode"] = env["PARKHUB_SERVICE_MODE"]
        if env.get("PARKHUB_LOG_LEVEL"):
            values["log_level"] = env["PARKHUB_LOG_LEVEL"]
        if env.get("PARKHUB_AVAILABLE_SPOTS_ONLY"):
            values["available_spots_only"] = env["PARKHUB_AVAILABLE_SPOTS_ONLY"].strip().lower() in ("1", "true", "yes")

        partner = {}
        if env.get("CARLY_HOSTNAME"):
            partner["base_url"] = env["CARLY_HOSTNAME"]
        if env.get("CARLY_TIMEOUT_SECONDS"):
            partner["timeout_seconds"] = float(env["CARLY_TIMEOUT_SECONDS"])
        if partner:
            values["partner"] = PartnerServiceConfig(**partner)

        return cls(**values)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(asctime)s %(name)s %(message)s",
        force=True
    )
