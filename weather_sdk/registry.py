"""
Registry handing out one WeatherSdk per API key.
"""
import atexit
import logging
import threading
from typing import Callable, Dict, List, Optional, Union

from utils.metrics import registered_instances

from .config import SdkMode, SdkSettings
from .errors import ConfigurationConflictError, InvalidArgumentError
from .provider import WeatherFetcher
from .sdk import WeatherSdk, parse_mode

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[str], WeatherFetcher]


def _normalize_api_key(api_key: Optional[str]) -> str:
    return api_key.strip() if api_key else ""


class InstanceRegistry:
    """
    Directory of SDK instances keyed by trimmed API key.

    An instance keeps the mode it was created with; asking for the same key
    with another mode is an error rather than a reconfiguration.
    """

    def __init__(
        self,
        fetcher_factory: Optional[FetcherFactory] = None,
        settings: Optional[SdkSettings] = None,
    ):
        self.fetcher_factory = fetcher_factory
        self.settings = settings
        self._lock = threading.Lock()
        self._instances: Dict[str, WeatherSdk] = {}

    def create(self, api_key: str, mode: Union[SdkMode, str]) -> WeatherSdk:
        """Return the SDK for ``api_key``, creating it on first use."""
        normalized = _normalize_api_key(api_key)
        if not normalized:
            raise InvalidArgumentError("API key cannot be empty")
        requested_mode = parse_mode(mode)

        existing = self._check_existing(normalized, requested_mode)
        if existing is not None:
            return existing

        # The factory may be slow; it must not hold up other registry calls
        fetcher = self.fetcher_factory(normalized) if self.fetcher_factory else None

        with self._lock:
            existing = self._check_existing_locked(normalized, requested_mode)
            if existing is not None:
                return existing

            instance = WeatherSdk(
                normalized,
                requested_mode,
                fetcher=fetcher,
                settings=self.settings,
                registry=self,
            )
            self._instances[normalized] = instance
            registered_instances.inc()

        logger.info("SDK instance created", extra={"mode": requested_mode.value})
        return instance

    def _check_existing(self, normalized: str, mode: SdkMode) -> Optional[WeatherSdk]:
        with self._lock:
            return self._check_existing_locked(normalized, mode)

    def _check_existing_locked(
        self, normalized: str, mode: SdkMode
    ) -> Optional[WeatherSdk]:
        existing = self._instances.get(normalized)
        if existing is not None and existing.mode is not mode:
            raise ConfigurationConflictError(
                f"An SDK for this API key already exists in {existing.mode.value} mode"
            )
        return existing

    def get(self, api_key: str) -> Optional[WeatherSdk]:
        normalized = _normalize_api_key(api_key)
        if not normalized:
            return None
        with self._lock:
            return self._instances.get(normalized)

    def delete(self, api_key: str) -> bool:
        """Remove and shut down the SDK for ``api_key``. False if there was none."""
        normalized = _normalize_api_key(api_key)
        if not normalized:
            return False

        with self._lock:
            instance = self._instances.pop(normalized, None)
            if instance is None:
                return False
            registered_instances.dec()

        # Only the caller that popped the instance gets here
        instance.shutdown()
        logger.info("SDK instance deleted", extra={"mode": instance.mode.value})
        return True

    def discard(self, instance: WeatherSdk) -> bool:
        """Remove ``instance`` if it is still the one registered for its key."""
        with self._lock:
            if self._instances.get(instance.api_key) is not instance:
                return False
            del self._instances[instance.api_key]
            registered_instances.dec()

        instance.shutdown()
        return True

    def clear(self) -> None:
        """Delete every registered SDK."""
        with self._lock:
            instances: List[WeatherSdk] = list(self._instances.values())
            self._instances.clear()
            registered_instances.dec(len(instances))

        for instance in instances:
            instance.shutdown()

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)

    def __contains__(self, api_key: str) -> bool:
        return self.get(api_key) is not None


# Process-wide registry
default_registry = InstanceRegistry()
atexit.register(default_registry.clear)


def create(api_key: str, mode: Union[SdkMode, str]) -> WeatherSdk:
    return default_registry.create(api_key, mode)


def get(api_key: str) -> Optional[WeatherSdk]:
    return default_registry.get(api_key)


def delete(api_key: str) -> bool:
    return default_registry.delete(api_key)
