"""Dial overlay and 24-hour hand drawn over the twilight bands."""

import logging
from typing import Optional

from PIL import Image, ImageDraw

from ..data import trig
from .colors import BLACK, WHITE, CompositingMode
from .surface import Point, Rect, RenderSurface
from .twilight import TIME_PHASE_SHIFT, FaceGeometry

logger = logging.getLogger(__name__)

RIM_MARGIN = 2
TICK_LENGTH = 4
MAJOR_TICK_LENGTH = 8


def hour_angle_fraction(hour: int, minute: int) -> float:
    """
    Fraction of a full turn for the 24-hour hand, noon at the top.

    Uses the same half-day shift as the twilight band hands.
    """
    return (TIME_PHASE_SHIFT + hour + minute / 60.0) / 24.0


def _polar(center: tuple[float, float], fraction: float, length: float) -> tuple[float, float]:
    angle = fraction * trig.PI * 2
    return (center[0] + trig.sin(angle) * length, center[1] - trig.cos(angle) * length)


def hour_hand_points(
    hour: int, minute: int, hub: Point, length: float, half_width: float
) -> list[Point]:
    """
    Outline of the hour hand as a closed, clockwise polygon.

    Args:
        hour: Local hour 0-23
        minute: Minute 0-59
        hub: Screen point the hand rotates around
        length: Distance from hub to tip
        half_width: Half the width of the hand at the hub

    Returns:
        Four screen points: tip, right shoulder, tail, left shoulder
    """
    fraction = hour_angle_fraction(hour, minute)
    tip = _polar(hub, fraction, length)
    tail = _polar(hub, fraction + 0.5, half_width * 2)
    right = _polar(hub, fraction + 0.25, half_width)
    left = _polar(hub, fraction - 0.25, half_width)
    return [(round(x), round(y)) for x, y in (tip, right, tail, left)]


class DialOverlay:
    """
    Face frame composited over the bands as two masks.

    The white mask (OR) lays down the hour ticks; the black mask (CLEAR)
    blacks out everything outside the round face.
    """

    def __init__(self, white_mask: Image.Image, black_mask: Image.Image, rim_radius: int):
        self.white_mask = white_mask
        self.black_mask = black_mask
        self.rim_radius = rim_radius

    @classmethod
    def create(cls, geometry: FaceGeometry = FaceGeometry()) -> Optional["DialOverlay"]:
        """
        Build both masks for a face.

        Returns:
            DialOverlay, or None if the face is too small for a dial
        """
        width, height = geometry.size
        rim_radius = min(width, height) // 2 - RIM_MARGIN
        if rim_radius <= MAJOR_TICK_LENGTH:
            logger.warning(f"Face {width}x{height} is too small for a dial")
            return None

        center = (width // 2 + geometry.hub[0], height // 2 + geometry.hub[1])
        rim_box = [
            (center[0] - rim_radius, center[1] - rim_radius),
            (center[0] + rim_radius, center[1] + rim_radius),
        ]

        white_mask = Image.new("L", (width, height), BLACK)
        draw = ImageDraw.Draw(white_mask)
        for hour in range(24):
            fraction = hour / 24.0
            tick = MAJOR_TICK_LENGTH if hour % 6 == 0 else TICK_LENGTH
            outer = _polar(center, fraction, rim_radius - 1)
            inner = _polar(center, fraction, rim_radius - 1 - tick)
            draw.line([inner, outer], fill=WHITE, width=2 if hour % 6 == 0 else 1)

        black_mask = Image.new("L", (width, height), WHITE)
        ImageDraw.Draw(black_mask).ellipse(rim_box, fill=BLACK)

        return cls(white_mask, black_mask, rim_radius)

    def draw(self, surface: RenderSurface, rect: Rect) -> None:
        surface.set_compositing_mode(CompositingMode.OR)
        surface.draw_image_in_rect(self.white_mask, rect)

        surface.set_compositing_mode(CompositingMode.CLEAR)
        surface.draw_image_in_rect(self.black_mask, rect)

        surface.set_compositing_mode(CompositingMode.ASSIGN)

    def close(self) -> None:
        self.white_mask.close()
        self.black_mask.close()
