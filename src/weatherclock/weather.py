"""Open-Meteo forecast client.

Fetches the current temperature and a 7-day forecast for a fixed location
and turns the JSON payload into an immutable :class:`WeatherSnapshot`.
Every failure collapses to ``None`` so the display can keep running.
"""

from __future__ import annotations

import http.client
import json
import logging
import math
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Brisbane, Australia
LATITUDE: float = -27.4698
LONGITUDE: float = 153.0251
TIMEZONE: str = "Australia/Brisbane"

WEATHER_URL: str = "https://api.open-meteo.com/v1/forecast"

# Today plus the seven days shown in the forecast
FORECAST_DAYS: int = 8
FORECAST_LENGTH: int = 7

REQUEST_TIMEOUT_SECONDS: float = 10
USER_AGENT: str = "weatherclock/0.1.0"

UNKNOWN_DAY_LABEL: str = "???"


class Condition(str, Enum):
    CLEAR = "Clear"
    CLOUDY = "Cloudy"
    FOG = "Fog"
    RAIN = "Rain"
    SNOW = "Snow"
    SHOWERS = "Showers"
    STORM = "Storm"
    UNKNOWN = "Unknown"


# WMO weather code ranges (inclusive), checked in order
_CONDITION_RANGES: Sequence[Tuple[int, int, Condition]] = (
    (0, 0, Condition.CLEAR),
    (1, 3, Condition.CLOUDY),
    (45, 48, Condition.FOG),
    (51, 67, Condition.RAIN),
    (71, 77, Condition.SNOW),
    (80, 82, Condition.SHOWERS),
    (95, 99, Condition.STORM),
)


@dataclass(frozen=True)
class ForecastDay:
    """One day of the forecast panel."""

    day_label: str
    high: float
    low: float
    condition: Condition


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions plus the forecast for the following days."""

    current_temperature: float
    current_condition: Condition
    forecast: Tuple[ForecastDay, ...]


Opener = Callable[..., Any]


def condition_label(code: int) -> Condition:
    """Map a WMO weather code to a :class:`Condition`.

    Codes outside the known ranges (including negative ones) are
    ``Condition.UNKNOWN``.
    """

    for low, high, condition in _CONDITION_RANGES:
        if low <= code <= high:
            return condition
    return Condition.UNKNOWN


def day_label(date_str: str) -> str:
    """Return the short weekday name for a ``YYYY-MM-DD`` string, or ``???``."""

    try:
        return datetime.strptime(date_str, "%Y-%m-%d").strftime("%a")
    except (TypeError, ValueError):
        return UNKNOWN_DAY_LABEL


def build_url() -> str:
    params = {
        "latitude": LATITUDE,
        "longitude": LONGITUDE,
        "current": "temperature_2m,weather_code",
        "daily": "weather_code,temperature_2m_max,temperature_2m_min",
        "timezone": TIMEZONE,
        "forecast_days": FORECAST_DAYS,
    }
    return f"{WEATHER_URL}?{urllib.parse.urlencode(params, safe=',/')}"


def _daily_column(daily: dict, name: str) -> List[Any]:
    column = daily[name]
    if not isinstance(column, list):
        raise TypeError(f"daily.{name} is not a list")
    if len(column) < FORECAST_LENGTH + 1:
        raise ValueError(
            f"daily.{name} has {len(column)} entries, need {FORECAST_LENGTH + 1}"
        )
    return column


def _finite(value: Any) -> float:
    """Convert a JSON number to ``float``, rejecting infinities and NaN."""

    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number: {value!r}")
    return number


def _code(value: Any) -> int:
    return int(_finite(value))


def parse_forecast(data: dict) -> List[ForecastDay]:
    """Build the forecast from the ``daily`` block of an Open-Meteo response.

    Entry 0 is today and is skipped; the next seven entries are returned in
    the order the API sent them. Raises ``KeyError``, ``TypeError`` or
    ``ValueError`` when the block is missing, ill-typed, too short or holds
    a non-finite number.
    """

    daily = data["daily"]
    times = _daily_column(daily, "time")
    codes = _daily_column(daily, "weather_code")
    highs = _daily_column(daily, "temperature_2m_max")
    lows = _daily_column(daily, "temperature_2m_min")

    days: List[ForecastDay] = []
    for idx in range(1, FORECAST_LENGTH + 1):
        days.append(
            ForecastDay(
                day_label=day_label(times[idx]),
                high=_finite(highs[idx]),
                low=_finite(lows[idx]),
                condition=condition_label(_code(codes[idx])),
            )
        )
    return days


def parse_weather(data: dict) -> WeatherSnapshot:
    """Convert a decoded Open-Meteo response into a :class:`WeatherSnapshot`."""

    current = data["current"]
    return WeatherSnapshot(
        current_temperature=_finite(current["temperature_2m"]),
        current_condition=condition_label(_code(current["weather_code"])),
        forecast=tuple(parse_forecast(data)),
    )


def fetch_weather(opener: Opener = urllib.request.urlopen) -> Optional[WeatherSnapshot]:
    """Fetch and parse the forecast, or return ``None`` on any error.

    A single blocking attempt; retrying is left to the caller's next
    scheduled refresh. ``opener`` takes a request and a ``timeout`` keyword
    and returns a context manager with ``read()``, like ``urlopen``.
    """

    url = build_url()
    logger.debug("Fetching weather from %s", url)
    try:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with opener(req, timeout=REQUEST_TIMEOUT_SECONDS) as resp:
            raw = resp.read().decode("utf-8")
        data = json.loads(raw)
    except (
        urllib.error.URLError,
        http.client.HTTPException,
        TimeoutError,
        OSError,
        ValueError,
    ) as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors;
        # IncompleteRead and friends are HTTPExceptions, not OSErrors
        logger.warning("Weather fetch failed: %s", exc)
        return None

    try:
        snapshot = parse_weather(data)
    except (KeyError, TypeError, ValueError, IndexError, OverflowError) as exc:
        logger.warning("Unexpected weather response: %r", exc)
        return None

    logger.debug(
        "Weather: %.1fC %s, %d forecast days",
        snapshot.current_temperature,
        snapshot.current_condition.value,
        len(snapshot.forecast),
    )
    return snapshot


__all__ = [
    "Condition",
    "ForecastDay",
    "WeatherSnapshot",
    "condition_label",
    "day_label",
    "build_url",
    "parse_forecast",
    "parse_weather",
    "fetch_weather",
]
