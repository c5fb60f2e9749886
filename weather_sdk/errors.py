"""
Exception hierarchy for the weather SDK.
"""
from typing import Optional


class WeatherApiError(Exception):
    """Base class for every error raised by the SDK."""


class InvalidArgumentError(WeatherApiError, ValueError):
    """Blank API key, blank city name, missing mode or out-of-range input."""


class ConfigurationConflictError(WeatherApiError):
    """An SDK instance already exists for the API key with another mode."""


class FetchError(WeatherApiError):
    """Failure reported by the upstream weather fetcher."""


class CityNotFoundError(FetchError):
    def __init__(self, city: str):
        super().__init__(f"City not found: {city}")
        self.city = city


class UpstreamError(FetchError):
    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class FetchCancelledError(FetchError):
    """The fetch was interrupted before it completed."""
