"""
Configuration for the weather SDK.

Values are read from the environment once at import time. An SDK instance
copies them into an ``SdkSettings`` at construction and keeps them for life.
"""
import os
from enum import Enum

from pydantic import BaseModel, Field

MAX_CACHE_SIZE = int(os.getenv("WEATHER_SDK_MAX_CACHE_SIZE", "10"))
CACHE_TTL_SECONDS = float(os.getenv("WEATHER_SDK_CACHE_TTL_SECONDS", "600"))
REFRESH_PERIOD_SECONDS = float(os.getenv("WEATHER_SDK_REFRESH_PERIOD_SECONDS", "300"))
SHUTDOWN_GRACE_SECONDS = float(os.getenv("WEATHER_SDK_SHUTDOWN_GRACE_SECONDS", "5"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("WEATHER_SDK_REQUEST_TIMEOUT_SECONDS", "10"))

GEOCODING_URL = os.getenv(
    "OPENWEATHER_GEOCODING_URL", "https://api.openweathermap.org/geo/1.0/direct"
)
WEATHER_URL = os.getenv(
    "OPENWEATHER_WEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
)
UNITS = "metric"
LANG = os.getenv("OPENWEATHER_LANG", "en")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class SdkMode(str, Enum):
    # Data is fetched only when a caller asks for it
    ON_DEMAND = "on_demand"
    # Cached cities are also refreshed in the background
    POLLING = "polling"


class SdkSettings(BaseModel):
    """Cache and refresh parameters for one SDK instance."""

    model_config = {"frozen": True}

    max_cache_size: int = Field(default=MAX_CACHE_SIZE, ge=1)
    cache_ttl_seconds: float = Field(default=CACHE_TTL_SECONDS, gt=0)
    refresh_period_seconds: float = Field(default=REFRESH_PERIOD_SECONDS, gt=0)
    shutdown_grace_seconds: float = Field(default=SHUTDOWN_GRACE_SECONDS, ge=0)
    request_timeout_seconds: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
