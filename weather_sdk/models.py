"""
Payload models for the OpenWeather geocoding and current-weather endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

_MODEL_CONFIG = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class GeocodingResult(BaseModel):
    model_config = _MODEL_CONFIG

    name: str
    lat: float
    lon: float
    country: Optional[str] = None


class WeatherCondition(BaseModel):
    model_config = _MODEL_CONFIG

    main: Optional[str] = None
    description: Optional[str] = None


class Temperature(BaseModel):
    model_config = _MODEL_CONFIG

    temp: Optional[float] = None
    feels_like: Optional[float] = None


class Wind(BaseModel):
    model_config = _MODEL_CONFIG

    speed: Optional[float] = None


class SunTimes(BaseModel):
    model_config = _MODEL_CONFIG

    sunrise: Optional[int] = None
    sunset: Optional[int] = None


class WeatherData(BaseModel):
    """Current weather for one location, as returned by OpenWeather."""

    model_config = _MODEL_CONFIG

    weather: List[WeatherCondition] = Field(default_factory=list)
    main: Optional[Temperature] = None
    visibility: Optional[int] = None
    wind: Optional[Wind] = None
    dt: Optional[int] = None
    sys: Optional[SunTimes] = None
    timezone: Optional[int] = None
    name: Optional[str] = None

    @property
    def temperature(self) -> Optional[Temperature]:
        return self.main

    @property
    def datetime(self) -> Optional[int]:
        return self.dt
