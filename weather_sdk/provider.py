"""
Weather data provider using the OpenWeather API.
"""
import logging
from typing import Any, Dict, Optional, Protocol

import requests
from pydantic import ValidationError

from .config import GEOCODING_URL, LANG, REQUEST_TIMEOUT_SECONDS, UNITS, WEATHER_URL
from .errors import CityNotFoundError, InvalidArgumentError, UpstreamError
from .models import GeocodingResult, WeatherData

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    401: "Invalid API key. Check your key.",
    429: "Request limit exceeded. Try again later.",
    500: "OpenWeather server error. Try again later.",
    502: "OpenWeather server error. Try again later.",
    503: "OpenWeather server error. Try again later.",
}


class WeatherFetcher(Protocol):
    """Anything that can turn a city name into current weather."""

    def fetch(self, city: str) -> WeatherData:
        ...


def validate_coordinates(lat: float, lon: float) -> None:
    if not -90 <= lat <= 90:
        raise InvalidArgumentError("Invalid latitude. Must be between -90 and 90")
    if not -180 <= lon <= 180:
        raise InvalidArgumentError("Invalid longitude. Must be between -180 and 180")


class OpenWeatherProvider:
    def __init__(
        self,
        api_key: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        geocoding_url: str = GEOCODING_URL,
        weather_url: str = WEATHER_URL,
    ):
        if not api_key or not api_key.strip():
            raise InvalidArgumentError("API key cannot be empty")
        self.api_key = api_key.strip()
        self.timeout = timeout
        self.geocoding_url = geocoding_url
        self.weather_url = weather_url

    def fetch(self, city: str) -> WeatherData:
        """
        Fetch current weather for a city name.
        Geocodes the name first, then queries by coordinates.
        """
        coords = self.geocode_city(city)
        weather_data = self.fetch_by_coordinates(coords.lat, coords.lon)

        if not weather_data.name:
            raise UpstreamError(None, f"Failed to get city data: {city}")

        return weather_data

    def geocode_city(self, city: str) -> GeocodingResult:
        """Resolve a city name to its best-matching coordinates."""
        params = {"q": city, "limit": 1, "appid": self.api_key}
        data = self._get_json(self.geocoding_url, params, city=city)

        if not data:
            raise CityNotFoundError(city)

        try:
            return GeocodingResult.model_validate(data[0])
        except (ValidationError, KeyError, TypeError) as e:
            raise UpstreamError(None, f"Unexpected geocoding response: {e}")

    def fetch_by_coordinates(self, lat: float, lon: float) -> WeatherData:
        """Fetch current weather for a coordinate pair."""
        validate_coordinates(lat, lon)

        params = {
            "lat": f"{lat:.6f}",
            "lon": f"{lon:.6f}",
            "appid": self.api_key,
            "units": UNITS,
            "lang": LANG,
        }
        data = self._get_json(self.weather_url, params)

        try:
            return WeatherData.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(None, f"Error processing API response: {e}")

    def _get_json(
        self, url: str, params: Dict[str, Any], city: Optional[str] = None
    ) -> Any:
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"OpenWeather request error: {e}")
            raise UpstreamError(None, f"Error getting weather data: {e}")

        if response.status_code != 200:
            raise self._status_error(response, city)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                response.status_code, f"Error processing API response: {e}"
            )

    def _status_error(
        self, response: requests.Response, city: Optional[str]
    ) -> Exception:
        status = response.status_code
        if status == 404 and city is not None:
            return CityNotFoundError(city)

        message = STATUS_MESSAGES.get(status)
        if message is None:
            body = response.text or "Unknown error"
            message = f"API error: {body}"

        logger.error(f"OpenWeather API error {status}: {message}")
        return UpstreamError(status, message)
