"""Clock & weather display for a terminal.

This package provides a curses-based display that shows:
- A large ASCII-art ``HH:MM`` clock with a blinking colon on the left
- The full date (e.g. "Saturday, January 4") under the clock
- The current temperature and condition on the right, with a 7-day
  forecast underneath, refreshed from Open-Meteo every 30 minutes

Press ``q`` or Escape to quit.

The console entry point ``weatherclock`` is configured in ``pyproject.toml``
as ``weatherclock = "weatherclock:main"``, which runs ``main()`` below.
"""

from __future__ import annotations

import curses
import logging
import sys

from .app import run
from .weather import Condition, ForecastDay, WeatherSnapshot, fetch_weather

# The terminal belongs to curses; callers that want log output attach a handler
logging.getLogger(__name__).addHandler(logging.NullHandler())


def main() -> None:
    """Entry point for the ``weatherclock`` console script.

    Runs the display on the current TTY until the user quits. Terminal
    errors propagate after :func:`curses.wrapper` has restored the terminal.
    """

    sys.exit(curses.wrapper(run))


__all__ = [
    "main",
    "run",
    "fetch_weather",
    "Condition",
    "ForecastDay",
    "WeatherSnapshot",
]
