"""
Background refresh loop for cached cities.
"""
import logging
import threading
import time
from typing import Optional

from utils.metrics import refresh_cycle_counter, refresh_failure_counter

from .cache import BoundedFreshCache, CacheEntry
from .config import REFRESH_PERIOD_SECONDS, SHUTDOWN_GRACE_SECONDS
from .errors import WeatherApiError
from .provider import WeatherFetcher

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Periodically re-fetches every city held in a cache.

    The first cycle runs as soon as the scheduler starts; later cycles start
    ``period_seconds`` after the previous one finished. A failure for one
    city is logged and the cycle moves on to the next city.
    """

    def __init__(
        self,
        cache: BoundedFreshCache,
        fetcher: WeatherFetcher,
        period_seconds: float = REFRESH_PERIOD_SECONDS,
        grace_seconds: float = SHUTDOWN_GRACE_SECONDS,
        name: str = "weather-sdk-refresh",
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.period_seconds = period_seconds
        self.grace_seconds = grace_seconds
        self.name = name
        self._stop_event = threading.Event()
        # Set when stop() gives up on the thread; its results are then dropped
        self._abandoned = threading.Event()
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return (
            thread is not None and thread.is_alive() and not self._stop_event.is_set()
        )

    def start(self) -> None:
        with self._state_lock:
            if self._stop_event.is_set():
                raise RuntimeError("A stopped refresh scheduler cannot be restarted")
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()
        logger.info(f"Refresh loop started, period {self.period_seconds}s")

    def stop(self) -> bool:
        """
        Ask the loop to exit and wait up to ``grace_seconds`` for it.

        Returns True when the loop thread is gone. A thread that outlives the
        grace period is abandoned: it is a daemon, its in-flight result is
        discarded and it exits after its current fetch.
        """
        with self._state_lock:
            already_stopped = self._stop_event.is_set()
            self._stop_event.set()
            thread = self._thread

        if thread is None or thread is threading.current_thread():
            return True

        thread.join(self.grace_seconds)
        with self._state_lock:
            alive = thread.is_alive()
            if alive:
                self._abandoned.set()
        if alive:
            logger.warning(
                f"Refresh loop did not stop within {self.grace_seconds}s, abandoning it"
            )
            return False

        if not already_stopped:
            logger.info("Refresh loop stopped")
        return True

    def run_cycle(self) -> int:
        """Refresh every currently cached city once. Returns how many succeeded."""
        refreshed = 0

        for key in self.cache.snapshot_keys():
            if self._stop_event.is_set():
                break

            city = self.cache.original_key_of(key)
            if city is None:
                # Evicted since the snapshot
                continue

            try:
                payload = self.fetcher.fetch(city)
            except WeatherApiError as e:
                refresh_failure_counter.labels(error_type=type(e).__name__).inc()
                logger.warning(
                    f"Error updating data for city {city}: {e}",
                    extra={"city": city, "status": "error"},
                )
                continue
            except Exception as e:
                refresh_failure_counter.labels(error_type=type(e).__name__).inc()
                logger.exception(
                    f"Unexpected error updating data for city {city}: {e}",
                    extra={"city": city, "status": "error"},
                )
                continue

            with self._state_lock:
                if self._abandoned.is_set():
                    logger.info(f"Dropping refresh result for {city}, loop was abandoned")
                    break
                self.cache.put(key, city, CacheEntry(payload, time.time()))
            refreshed += 1

        refresh_cycle_counter.inc()
        logger.debug("Refresh cycle finished", extra={"refreshed": refreshed})
        return refreshed

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.run_cycle()
            if self._stop_event.wait(self.period_seconds):
                break
