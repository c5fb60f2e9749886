"""
WeatherSdk: cached access to current weather for one API key.
"""
import logging
import threading
import time
from typing import TYPE_CHECKING, Optional, Union

from utils.logging_config import get_logger_with_context
from utils.metrics import cache_lookup_counter, upstream_fetch_duration

from .cache import BoundedFreshCache, CacheEntry
from .config import SdkMode, SdkSettings
from .errors import InvalidArgumentError, WeatherApiError
from .models import WeatherData
from .provider import OpenWeatherProvider, WeatherFetcher, validate_coordinates
from .refresh import RefreshScheduler

if TYPE_CHECKING:
    from .registry import InstanceRegistry

logger = logging.getLogger(__name__)


def parse_mode(mode: Union[SdkMode, str, None]) -> SdkMode:
    if mode is None:
        raise InvalidArgumentError("Mode cannot be empty")
    try:
        return SdkMode(mode)
    except ValueError:
        raise InvalidArgumentError(f"Unknown mode: {mode!r}")


class WeatherSdk:
    """
    Current weather by city name, cached per instance.

    Up to ``max_cache_size`` cities are kept; an entry younger than
    ``cache_ttl_seconds`` is served without calling the upstream. In
    POLLING mode a background loop also re-fetches every cached city each
    ``refresh_period_seconds``.

    Instances are normally obtained from an InstanceRegistry so there is a
    single one per API key.
    """

    def __init__(
        self,
        api_key: str,
        mode: Union[SdkMode, str],
        fetcher: Optional[WeatherFetcher] = None,
        settings: Optional[SdkSettings] = None,
        registry: Optional["InstanceRegistry"] = None,
    ):
        if not api_key or not api_key.strip():
            raise InvalidArgumentError("API key cannot be empty")

        self.api_key = api_key.strip()
        self._mode = parse_mode(mode)
        self.settings = settings or SdkSettings()
        self._fetcher = fetcher or OpenWeatherProvider(
            self.api_key, timeout=self.settings.request_timeout_seconds
        )
        self._cache = BoundedFreshCache(capacity=self.settings.max_cache_size)
        self._registry = registry
        self._log = get_logger_with_context(__name__, mode=self._mode.value)
        self._shutdown_lock = threading.Lock()
        self._closed = False

        self._scheduler: Optional[RefreshScheduler] = None
        if self._mode is SdkMode.POLLING:
            self._scheduler = RefreshScheduler(
                self._cache,
                self._fetcher,
                period_seconds=self.settings.refresh_period_seconds,
                grace_seconds=self.settings.shutdown_grace_seconds,
            )
            self._scheduler.start()

    @property
    def mode(self) -> SdkMode:
        return self._mode

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def refresh_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def get_current_weather(self, city: str) -> WeatherData:
        """
        Get current weather for a city.

        A fresh cached entry is returned as is. Otherwise the upstream is
        queried (errors propagate to the caller) and the result is cached.
        """
        if not city or not city.strip():
            raise InvalidArgumentError("City name cannot be empty")

        city = city.strip()
        cached = self._cache.lookup(city)
        if cached is not None and cached.is_fresh(self.settings.cache_ttl_seconds):
            cache_lookup_counter.labels(result="hit").inc()
            return cached.payload

        cache_lookup_counter.labels(result="miss" if cached is None else "stale").inc()

        start_time = time.time()
        try:
            weather_data = self._fetcher.fetch(city)
        except Exception:
            upstream_fetch_duration.labels(status="error").observe(
                time.time() - start_time
            )
            raise

        duration = time.time() - start_time
        upstream_fetch_duration.labels(status="ok").observe(duration)
        logger.debug(
            f"Fetched weather for {city}",
            extra={
                "city": city,
                "mode": self._mode.value,
                "duration_ms": int(duration * 1000),
            },
        )

        self._cache.put(city, city, CacheEntry(weather_data, time.time()))
        return weather_data

    def get_current_weather_by_coordinates(self, lat: float, lon: float) -> WeatherData:
        """Uncached lookup by coordinates."""
        validate_coordinates(lat, lon)
        fetch_by_coordinates = getattr(self._fetcher, "fetch_by_coordinates", None)
        if fetch_by_coordinates is None:
            raise WeatherApiError("The configured fetcher has no coordinate lookup")
        return fetch_by_coordinates(lat, lon)

    def cache_size(self) -> int:
        return self._cache.size()

    def shutdown(self) -> None:
        """Stop background refresh and drop cached data. Safe to call repeatedly."""
        with self._shutdown_lock:
            if self._closed:
                return
            self._closed = True

        try:
            if self._scheduler is not None:
                self._scheduler.stop()
            self._cache.clear()
        except Exception as e:
            self._log.error(f"Error during SDK shutdown: {e}")
            return

        self._log.info("SDK shut down")

    def close(self) -> None:
        """Shut down and remove this instance from its registry."""
        self.shutdown()
        if self._registry is not None:
            self._registry.discard(self)

    def __enter__(self) -> "WeatherSdk":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"WeatherSdk(mode={self._mode.value}, cached={self.cache_size()})"
