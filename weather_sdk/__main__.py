#!/usr/bin/env python3
"""
Command line entry point: print current weather for one or more cities as JSON.
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from utils.logging_config import setup_logging
from utils.metrics import get_metrics, set_sdk_info

from . import __version__
from .config import LOG_LEVEL, SdkMode
from .errors import WeatherApiError
from .registry import InstanceRegistry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Current weather via OpenWeather")
    parser.add_argument("cities", nargs="+", help="City names to look up")
    parser.add_argument(
        "--api-key",
        default=os.getenv("OPENWEATHER_API_KEY"),
        help="OpenWeather API key (default: $OPENWEATHER_API_KEY)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SdkMode],
        default=SdkMode.ON_DEMAND.value,
    )
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print Prometheus metrics after the lookups",
    )
    return parser


def main(argv: Optional[List[str]] = None, registry: Optional[InstanceRegistry] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    set_sdk_info(__version__)

    registry = registry or InstanceRegistry()
    exit_code = 0
    try:
        sdk = registry.create(args.api_key, args.mode)
        for city in args.cities:
            try:
                weather = sdk.get_current_weather(city)
                response = {"city": city, "weather": weather.model_dump()}
            except WeatherApiError as e:
                logger.error(f"Lookup failed: {e}", extra={"city": city})
                response = {"city": city, "error": type(e).__name__, "hint": str(e)}
                exit_code = 1
            print(json.dumps(response, ensure_ascii=False))
            sys.stdout.flush()
    except WeatherApiError as e:
        print(json.dumps({"error": type(e).__name__, "hint": str(e)}))
        exit_code = 2
    finally:
        registry.clear()

    if args.metrics:
        sys.stdout.write(get_metrics().decode("utf-8"))
        sys.stdout.flush()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
