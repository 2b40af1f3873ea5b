"""Display loop: owns the terminal, blinks the clock, refreshes the weather."""

from __future__ import annotations

import curses
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from . import render
from .weather import WeatherSnapshot, fetch_weather

logger = logging.getLogger(__name__)

# How often to refresh weather info (in seconds)
WEATHER_REFRESH_SECONDS: int = 30 * 60

# getch timeout; must stay under one blink phase so the colon does not skip
POLL_TIMEOUT_MS: int = 500

BLINK_PERIOD_MS: int = 500

ESC_KEY: int = 27

# curses waits a full second by default to tell Escape from an escape sequence
ESC_DELAY_MS: int = 25

Fetcher = Callable[[], Optional[WeatherSnapshot]]


@dataclass(frozen=True)
class LoopState:
    """State carried from one loop iteration to the next."""

    snapshot: Optional[WeatherSnapshot] = None
    last_refresh: float = 0.0


def blink_on(t_ms: int) -> bool:
    """Whether the clock separator is visible at *t_ms* milliseconds since the epoch."""

    return (t_ms // BLINK_PERIOD_MS) % 2 == 0


def is_quit_key(ch: int) -> bool:
    return ch == ord("q") or ch == ESC_KEY


def refresh_due(state: LoopState, now: float) -> bool:
    return now - state.last_refresh >= WEATHER_REFRESH_SECONDS


def refresh_weather(state: LoopState, now: float, fetch: Fetcher = fetch_weather) -> LoopState:
    """Fetch once and return the next state.

    A failed fetch keeps the previous snapshot. The refresh time moves to
    *now* either way, so an outage is retried on the normal schedule.
    """

    snapshot = fetch()
    if snapshot is None:
        logger.info("Weather refresh failed, keeping previous data")
        return replace(state, last_refresh=now)
    logger.info("Weather refreshed")
    return LoopState(snapshot=snapshot, last_refresh=now)


def clear_screen(stdscr: "curses._CursesWindow") -> None:  # type: ignore[name-defined]
    """Wipe whatever the previous program left on the terminal."""

    stdscr.clear()
    stdscr.refresh()
    for _ in range(2):
        stdscr.erase()
        stdscr.refresh()


def _setup_terminal(stdscr: "curses._CursesWindow") -> None:  # type: ignore[name-defined]
    try:
        curses.curs_set(0)  # hide cursor
    except curses.error:
        # Not all terminals support cursor visibility changes
        pass

    try:
        curses.set_escdelay(ESC_DELAY_MS)
    except (AttributeError, curses.error):
        pass

    stdscr.keypad(True)
    stdscr.timeout(POLL_TIMEOUT_MS)


def run(
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    fetch: Fetcher = fetch_weather,
    clock: Callable[[], float] = time.time,
) -> int:
    """Main curses loop. Returns the exit status once the user quits.

    This is wrapped by :func:`curses.wrapper` in :func:`weatherclock.main`.
    The first fetch happens on the first iteration, after a "Loading..."
    frame is already on screen.
    """

    _setup_terminal(stdscr)
    clear_screen(stdscr)

    # last_refresh of 0.0 makes the first iteration fetch, after one frame
    state = LoopState()

    while True:
        now = clock()
        local_now = datetime.fromtimestamp(now)
        render.draw(stdscr, local_now, blink_on(int(now * 1000)), state.snapshot)

        # Blocks for at most POLL_TIMEOUT_MS; -1 when no key arrived
        ch = stdscr.getch()
        if is_quit_key(ch):
            logger.debug("Quit requested")
            return 0

        now = clock()
        if refresh_due(state, now):
            state = refresh_weather(state, now, fetch)


__all__ = [
    "LoopState",
    "WEATHER_REFRESH_SECONDS",
    "POLL_TIMEOUT_MS",
    "blink_on",
    "is_quit_key",
    "refresh_due",
    "refresh_weather",
    "clear_screen",
    "run",
]
