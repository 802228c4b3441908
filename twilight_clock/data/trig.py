"""Math helpers used by the ephemeris and the dial geometry.

Everything the solar calculations need goes through here, so the
ephemeris never touches the math module directly.
"""

import math

PI = math.pi

DEG_TO_RAD = PI / 180.0
RAD_TO_DEG = 180.0 / PI


def sin(x: float) -> float:
    return math.sin(x)


def cos(x: float) -> float:
    return math.cos(x)


def tan(x: float) -> float:
    return math.tan(x)


def asin(x: float) -> float:
    return math.asin(x)


def acos(x: float) -> float:
    return math.acos(x)


def atan(x: float) -> float:
    return math.atan(x)


def floor(x: float) -> int:
    """Largest integer not greater than x."""
    return math.floor(x)


def sin_deg(degrees: float) -> float:
    """Sine of an angle given in degrees."""
    return sin(DEG_TO_RAD * degrees)


def cos_deg(degrees: float) -> float:
    """Cosine of an angle given in degrees."""
    return cos(DEG_TO_RAD * degrees)


def tan_deg(degrees: float) -> float:
    """Tangent of an angle given in degrees."""
    return tan(DEG_TO_RAD * degrees)
