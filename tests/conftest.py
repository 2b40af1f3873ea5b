"""Shared test fixtures."""

import curses
import json
from typing import Iterable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from weatherclock.weather import parse_weather, WeatherSnapshot


class FakeWindow:
    """In-memory stand-in for a curses window.

    Sub-windows from :meth:`derwin` write into the parent's grid. ``getch``
    hands out the queued keys and fails once they run out so a loop under
    test cannot spin forever.
    """

    def __init__(
        self,
        height: int = 24,
        width: int = 80,
        keys: Iterable[int] = (),
        *,
        _grid: Optional[List[List[str]]] = None,
        _origin: Tuple[int, int] = (0, 0),
        _calls: Optional[List[str]] = None,
    ):
        self.height = height
        self.width = width
        self.keys = list(keys)
        self.grid = _grid if _grid is not None else [[" "] * width for _ in range(height)]
        self.origin = _origin
        self.calls = _calls if _calls is not None else []
        self.timeout_ms: Optional[int] = None

    def getmaxyx(self) -> Tuple[int, int]:
        return self.height, self.width

    def erase(self) -> None:
        self.calls.append("erase")
        oy, ox = self.origin
        for y in range(self.height):
            for x in range(self.width):
                self.grid[oy + y][ox + x] = " "

    def clear(self) -> None:
        self.erase()
        self.calls.append("clear")

    def refresh(self) -> None:
        self.calls.append("refresh")

    def addstr(self, y: int, x: int, text: str, attr: int = 0) -> None:
        if not (0 <= y < self.height and 0 <= x < self.width):
            raise curses.error("addwstr() returned ERR")
        oy, ox = self.origin
        for i, ch in enumerate(text):
            if x + i >= self.width:
                raise curses.error("addwstr() returned ERR")
            self.grid[oy + y][ox + x + i] = ch

    def derwin(self, height: int, width: int, y: int, x: int) -> "FakeWindow":
        oy, ox = self.origin
        return FakeWindow(
            height, width, _grid=self.grid, _origin=(oy + y, ox + x), _calls=self.calls
        )

    def box(self) -> None:
        oy, ox = self.origin
        right = ox + self.width - 1
        bottom = oy + self.height - 1
        for x in range(ox, right + 1):
            self.grid[oy][x] = "-"
            self.grid[bottom][x] = "-"
        for y in range(oy, bottom + 1):
            self.grid[y][ox] = "|"
            self.grid[y][right] = "|"
        for y, x in ((oy, ox), (oy, right), (bottom, ox), (bottom, right)):
            self.grid[y][x] = "+"

    def attrset(self, attr: int) -> None:
        pass

    def keypad(self, flag: bool) -> None:
        pass

    def timeout(self, delay: int) -> None:
        self.timeout_ms = delay

    def getch(self) -> int:
        self.calls.append("getch")
        if not self.keys:
            raise RuntimeError("FakeWindow ran out of keys")
        return self.keys.pop(0)

    def text(self) -> str:
        return "\n".join("".join(row) for row in self.grid)


class FakeResponse:
    """Context manager returned by a fake ``urlopen``."""

    def __init__(self, body: bytes):
        self.body = body

    def read(self) -> bytes:
        return self.body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


@pytest.fixture
def sample_payload() -> dict:
    """An Open-Meteo response with today plus seven forecast days."""
    return {
        "latitude": -27.5,
        "longitude": 153.0,
        "timezone": "Australia/Brisbane",
        "current": {"time": "2024-01-01T10:00", "temperature_2m": 21.4, "weather_code": 2},
        "daily": {
            "time": [
                "2024-01-01",
                "2024-01-02",
                "2024-01-03",
                "2024-01-04",
                "2024-01-05",
                "2024-01-06",
                "2024-01-07",
                "2024-01-08",
            ],
            "weather_code": [1, 0, 61, 3, 45, 71, 80, 95],
            "temperature_2m_max": [25.0, 26.0, 27.0, 28.0, 29.0, 30.0, 31.0, 32.0],
            "temperature_2m_min": [15.0, 16.0, 17.0, 18.0, 19.0, 20.0, 21.0, 22.0],
        },
    }


@pytest.fixture
def sample_snapshot(sample_payload: dict) -> WeatherSnapshot:
    return parse_weather(sample_payload)


@pytest.fixture
def make_opener():
    """Build a fake ``urlopen`` that returns *body*."""

    def _make(body) -> MagicMock:
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        return MagicMock(return_value=FakeResponse(body))

    return _make


@pytest.fixture
def no_terminal(monkeypatch):
    """Stub the curses calls that need a real terminal."""
    monkeypatch.setattr(curses, "curs_set", lambda visibility: None)
    monkeypatch.setattr(curses, "set_escdelay", lambda ms: None, raising=False)
