"""
Prometheus metrics for the weather SDK cache and refresh loop.
"""
from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

# Library info metric
sdk_info = Info(
    "weathersdk",
    "Library information for the weather SDK",
)

# Cache metrics
cache_lookup_counter = Counter(
    "weathersdk_cache_lookups_total",
    "Total number of city lookups by cache outcome",
    ["result"],
)

cache_eviction_counter = Counter(
    "weathersdk_cache_evictions_total",
    "Total number of entries evicted to stay within capacity",
)

# Upstream metrics
upstream_fetch_duration = Histogram(
    "weathersdk_upstream_fetch_duration_seconds",
    "Upstream weather fetch duration in seconds",
    ["status"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Refresh loop metrics
refresh_cycle_counter = Counter(
    "weathersdk_refresh_cycles_total",
    "Total number of completed background refresh cycles",
)

refresh_failure_counter = Counter(
    "weathersdk_refresh_failures_total",
    "Total number of failed background refreshes",
    ["error_type"],
)

# Registry metrics
registered_instances = Gauge(
    "weathersdk_registered_instances",
    "Number of SDK instances currently held by registries",
)


def set_sdk_info(version: str):
    """Set library information."""
    sdk_info.info({"version": version, "library": "weather-sdk"})


def get_metrics() -> bytes:
    """Get all metrics in Prometheus format."""
    return generate_latest(REGISTRY)
