"""
Cached client for the OpenWeather current-weather API.

Example usage:
    import weather_sdk

    sdk = weather_sdk.create("your-api-key", weather_sdk.SdkMode.ON_DEMAND)
    weather = sdk.get_current_weather("Moscow")
    print(weather.temperature.temp)

    weather_sdk.delete("your-api-key")
"""
from .cache import BoundedFreshCache, CacheEntry, normalize_key
from .config import SdkMode, SdkSettings
from .errors import (
    CityNotFoundError,
    ConfigurationConflictError,
    FetchCancelledError,
    FetchError,
    InvalidArgumentError,
    UpstreamError,
    WeatherApiError,
)
from .models import GeocodingResult, WeatherData
from .provider import OpenWeatherProvider, WeatherFetcher
from .refresh import RefreshScheduler
from .registry import InstanceRegistry, create, default_registry, delete, get
from .sdk import WeatherSdk

__version__ = "1.0.0"

__all__ = [
    "BoundedFreshCache",
    "CacheEntry",
    "CityNotFoundError",
    "ConfigurationConflictError",
    "FetchCancelledError",
    "FetchError",
    "GeocodingResult",
    "InstanceRegistry",
    "InvalidArgumentError",
    "OpenWeatherProvider",
    "RefreshScheduler",
    "SdkMode",
    "SdkSettings",
    "UpstreamError",
    "WeatherApiError",
    "WeatherData",
    "WeatherFetcher",
    "WeatherSdk",
    "create",
    "default_registry",
    "delete",
    "get",
    "normalize_key",
]
