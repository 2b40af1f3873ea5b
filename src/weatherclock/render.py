"""Frame rendering for the clock and weather panels.

The screen is split horizontally: the left two thirds hold a large
ASCII-art ``HH:MM`` clock with the date underneath, the right third holds
the current temperature, its condition and the 7-day forecast. Both panels
are bordered and their contents are vertically centered.

Rendering only draws; everything it shows is derived from the arguments to
:func:`draw`.
"""

from __future__ import annotations

import curses
import math
from datetime import datetime
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

from pyfiglet import Figlet

from .weather import ForecastDay, WeatherSnapshot

CLOCK_FONT: str = "big"
TEMP_FONT: str = "standard"

# Left panel share of the screen width
TIME_PANEL_RATIO: Tuple[int, int] = (2, 3)

# Below this the panels cannot hold a border and a line of text
MIN_HEIGHT: int = 3
MIN_WIDTH: int = 12

LOADING_TEXT: str = "Loading..."
TOO_SMALL_TEXT: str = "Terminal too small"

PRIMARY_ATTR: int = curses.A_BOLD
SECONDARY_ATTR: int = curses.A_DIM
BORDER_ATTR: int = curses.A_DIM

# Keeps pyfiglet from wrapping wide renderings onto a second block
_FIGLET_WIDTH: int = 1000

Row = Tuple[str, int]


@lru_cache(maxsize=None)
def _figlet(font: str) -> Figlet:
    return Figlet(font=font, width=_FIGLET_WIDTH)


def _pad_lines(lines: Iterable[str]) -> List[str]:
    """Return a list of lines padded to equal width."""

    lines_list = list(lines)
    if not lines_list:
        return []
    width = max(len(line) for line in lines_list)
    return [line.ljust(width) for line in lines_list]


def _trim_empty_border(lines: Iterable[str]) -> List[str]:
    """Trim completely empty rows from top and bottom of ASCII art."""

    out = list(lines)
    while out and not out[0].strip():
        out.pop(0)
    while out and not out[-1].strip():
        out.pop()
    return out or [""]


def _art(text: str, font: str) -> List[str]:
    # Untrimmed so that blocks rendered separately share the same baseline
    return _pad_lines(_figlet(font).renderText(text).rstrip("\n").splitlines())


def _hstack(*blocks: List[str]) -> List[str]:
    """Join ASCII-art blocks side by side."""

    height = max(len(block) for block in blocks)
    rows: List[str] = []
    for i in range(height):
        parts = []
        for block in blocks:
            width = len(block[0]) if block else 0
            parts.append(block[i] if i < len(block) else " " * width)
        rows.append("".join(parts))
    return rows


def figlet_lines(text: str, font: str) -> List[str]:
    """Render *text* as trimmed, equal-width ASCII-art lines."""

    return _pad_lines(_trim_empty_border(_art(text, font)))


def clock_art(now: datetime, blink_on: bool) -> List[str]:
    """Render ``HH:MM`` with the colon blanked out when *blink_on* is false.

    The separator keeps its width either way so the digits never shift.
    """

    hours = _art(f"{now.hour:02d}", CLOCK_FONT)
    separator = _art(":", CLOCK_FONT)
    minutes = _art(f"{now.minute:02d}", CLOCK_FONT)
    lines = _pad_lines(_trim_empty_border(_hstack(hours, separator, minutes)))
    if blink_on:
        return lines

    # Blank the separator columns after trimming so both phases share one shape
    start = len(hours[0]) if hours else 0
    end = start + (len(separator[0]) if separator else 0)
    return [line[:start] + " " * (end - start) + line[end:] for line in lines]


def round_temperature(value: float) -> int:
    """Round half away from zero (21.5 -> 22, -0.5 -> -1)."""

    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def format_temperature(value: float) -> str:
    return f"{round_temperature(value)}c"


def format_date(now: datetime) -> str:
    """Return e.g. ``Saturday, January 4`` (day of month not zero padded)."""

    return f"{now:%A}, {now:%B} {now.day}"


def format_forecast_day(day: ForecastDay) -> str:
    return (
        f"{day.day_label} {format_temperature(day.low)}/"
        f"{format_temperature(day.high)} {day.condition.value}"
    )


def _fits(lines: List[str], width: int) -> bool:
    return all(len(line) <= width for line in lines)


def time_panel_rows(now: datetime, blink_on: bool, width: int) -> List[Row]:
    """Rows for the clock panel: big clock, spacer, date.

    Falls back to a plain ``HH:MM`` line when the art is wider than *width*.
    """

    art = clock_art(now, blink_on)
    if not _fits(art, width):
        separator = ":" if blink_on else " "
        art = [f"{now.hour:02d}{separator}{now.minute:02d}"]
    rows: List[Row] = [(line, PRIMARY_ATTR) for line in art]
    rows.append(("", curses.A_NORMAL))
    rows.append((format_date(now), SECONDARY_ATTR))
    return rows


def weather_panel_rows(snapshot: Optional[WeatherSnapshot], width: int) -> List[Row]:
    """Rows for the weather panel, or the loading placeholder."""

    if snapshot is None:
        return [(LOADING_TEXT, SECONDARY_ATTR)]

    temp_text = format_temperature(snapshot.current_temperature)
    art = figlet_lines(temp_text, TEMP_FONT)
    if not _fits(art, width):
        art = [temp_text]

    rows: List[Row] = [(line, SECONDARY_ATTR) for line in art]
    rows.append((snapshot.current_condition.value, SECONDARY_ATTR))
    rows.append(("", curses.A_NORMAL))
    rows.extend((format_forecast_day(day), SECONDARY_ATTR) for day in snapshot.forecast)
    return rows


def _addstr(win: "curses._CursesWindow", y: int, x: int, text: str, attr: int = 0) -> None:  # type: ignore[name-defined]
    # curses raises when writing the bottom-right cell; the text is still drawn
    try:
        win.addstr(y, x, text, attr)
    except curses.error:
        pass


def _draw_panel(win: "curses._CursesWindow", rows: List[Row]) -> None:  # type: ignore[name-defined]
    """Draw a bordered panel with *rows* centered inside it."""

    h, w = win.getmaxyx()
    win.attrset(BORDER_ATTR)
    win.box()
    win.attrset(curses.A_NORMAL)

    inner_h = h - 2
    inner_w = w - 2
    if inner_h <= 0 or inner_w <= 0:
        return

    top = 1 + max(0, (inner_h - len(rows)) // 2)
    for i, (text, attr) in enumerate(rows):
        y = top + i
        if y > inner_h:
            break
        if not text:
            continue
        text = text[:inner_w]
        x = 1 + max(0, (inner_w - len(text)) // 2)
        _addstr(win, y, x, text, attr)


def draw(
    stdscr: "curses._CursesWindow",  # type: ignore[name-defined]
    now: datetime,
    blink_on: bool,
    snapshot: Optional[WeatherSnapshot],
) -> None:
    """Compose and show one frame."""

    stdscr.erase()
    h, w = stdscr.getmaxyx()

    if h < MIN_HEIGHT or w < MIN_WIDTH:
        _addstr(stdscr, 0, 0, TOO_SMALL_TEXT[: max(0, w - 1)])
        stdscr.refresh()
        return

    num, den = TIME_PANEL_RATIO
    time_w = w * num // den
    weather_w = w - time_w

    time_win = stdscr.derwin(h, time_w, 0, 0)
    weather_win = stdscr.derwin(h, weather_w, 0, time_w)

    _draw_panel(time_win, time_panel_rows(now, blink_on, time_w - 2))
    _draw_panel(weather_win, weather_panel_rows(snapshot, weather_w - 2))

    stdscr.refresh()


__all__ = [
    "draw",
    "clock_art",
    "figlet_lines",
    "format_date",
    "format_forecast_day",
    "format_temperature",
    "round_temperature",
    "time_panel_rows",
    "weather_panel_rows",
]
