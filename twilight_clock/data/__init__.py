"""Astronomical data for Twilight Clock."""

from .ephemeris import (
    NO_RISE_SET_TIME,
    ZENITH_ASTRONOMICAL,
    ZENITH_CIVIL,
    ZENITH_NAUTICAL,
    ZENITH_OFFICIAL,
    adjust_timezone,
    calc_sunrise,
    calc_sunset,
    solve,
)
from .lunar import LunarProvider, MoonPhase

__all__ = [
    "NO_RISE_SET_TIME",
    "ZENITH_OFFICIAL",
    "ZENITH_CIVIL",
    "ZENITH_NAUTICAL",
    "ZENITH_ASTRONOMICAL",
    "adjust_timezone",
    "calc_sunrise",
    "calc_sunset",
    "solve",
    "LunarProvider",
    "MoonPhase",
]
