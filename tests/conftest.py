"""
Shared fixtures for weather SDK tests.
"""
import threading
from typing import Dict, List, Optional

import pytest

from weather_sdk.errors import CityNotFoundError
from weather_sdk.models import WeatherData


class FakeFetcher:
    """In-memory stand-in for the OpenWeather provider."""

    def __init__(self, failures: Optional[Dict[str, Exception]] = None):
        self.failures = failures or {}
        self.calls: List[str] = []
        self.fetch_count = 0
        self.called = threading.Event()
        self._lock = threading.Lock()

    def fetch(self, city: str) -> WeatherData:
        with self._lock:
            self.calls.append(city)
            self.fetch_count += 1
            count = self.fetch_count
        self.called.set()

        error = self.failures.get(city.lower())
        if error is not None:
            raise error
        if city.lower() == "atlantis":
            raise CityNotFoundError(city)
        return WeatherData(name=city, dt=count, main={"temp": 20.0 + count})


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()
