"""Twilight bands: dawn/dusk wedges drawn onto the 24-hour dial.

Each band carries a closed five-point path. Two of its points are the ends
of "clock hands" showing the band's dawn and dusk times on the 24-hour
face; their inner ends meet at the hub. The rest of the path runs out to
two screen corners so the polygon covers either the top or the bottom of
the screen beyond those hands.

Path coordinates are relative, with the origin at the center of the target
rectangle. Points must be wound clockwise on screen, so the insertion
order of the corners and of the dawn/dusk points depends on which side of
the screen the band encloses.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from PIL import Image

from ..data import trig
from ..data.ephemeris import (
    NO_RISE_SET_TIME,
    RiseSetTime,
    adjust_timezone,
    calc_sunrise,
    calc_sunset,
)
from .colors import CompositingMode
from .surface import Point, RealizedPath, Rect, RenderSurface
from .tones import OverlaySource, load_overlay

if TYPE_CHECKING:
    import datetime

    from ..location import Location

logger = logging.getLogger(__name__)

POINTS_IN_TWILIGHT_PATH = 5

# Hours added before mapping a time to an angle, putting noon at the top
TIME_PHASE_SHIFT = 12.0

# Reference face the dial artwork was laid out for
REFERENCE_HEIGHT = 168
REFERENCE_HUB_Y = 9


class EnclosureSide(Enum):
    """Which part of the screen a band's path covers."""

    TOP = "top"
    BOTTOM = "bottom"


class BandState(Enum):
    CREATED = "created"
    COMPUTED = "computed"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class FaceGeometry:
    """
    Fixed layout of the dial, in path coordinates.

    The hub sits a little below the screen center, and the hand radius is
    long enough to reach past every screen corner.
    """

    width: int = 144
    height: int = 168

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def x_left(self) -> int:
        return -self.x_right

    @property
    def x_right(self) -> int:
        return self.width // 2 + 1

    @property
    def y_top(self) -> int:
        return -self.y_bottom

    @property
    def y_bottom(self) -> int:
        return self.height // 2

    @property
    def hub(self) -> Point:
        return (0, round(self.height * REFERENCE_HUB_Y / REFERENCE_HEIGHT))

    @property
    def radius(self) -> int:
        hub_y = self.hub[1]
        return math.ceil(math.hypot(self.x_right, self.y_bottom + abs(hub_y))) + 1

    def time_to_point(self, time: float) -> Point:
        """
        Map a local hour-of-day to the end of a hand on the 24-hour dial.

        Args:
            time: Local hour and fraction

        Returns:
            Point at the hand radius from the hub
        """
        hub_x, hub_y = self.hub
        angle = (time + TIME_PHASE_SHIFT) / 24 * trig.PI * 2
        return (
            hub_x + int(trig.sin(angle) * self.radius),
            hub_y - int(trig.cos(angle) * self.radius),
        )


def signed_area(points: Sequence[Point]) -> float:
    """
    Signed area of a polygon given in screen coordinates (Y down).

    The Y axis is flipped before applying the shoelace formula, so the
    result is negative for paths that run clockwise on screen.
    """
    total = 0.0
    count = len(points)
    for i in range(count):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % count]
        total += x1 * (-y2) - x2 * (-y1)
    return total / 2


class TwilightBand:
    """
    One dawn/dusk boundary of the twilight display.

    Created with its static corners and hub in place; recompute() fills in
    the dawn/dusk times and the two hand points; render() draws the
    optional tonal overlay and then fills the path.
    """

    def __init__(
        self,
        zenith: float,
        enclose: EnclosureSide,
        overlay: Optional[Image.Image] = None,
        geometry: FaceGeometry = FaceGeometry(),
    ):
        """
        Initialize a band. Prefer create(), which handles overlay loading.

        Args:
            zenith: Zenith angle in degrees defining this band's dawn/dusk
            enclose: Side of the screen the path covers
            overlay: Bitmap drawn with AND compositing before the fill
            geometry: Dial layout
        """
        self.zenith = zenith
        self.enclose = enclose
        self.overlay = overlay
        self.geometry = geometry

        self.dawn_time: RiseSetTime = NO_RISE_SET_TIME
        self.dusk_time: RiseSetTime = NO_RISE_SET_TIME
        self.state = BandState.CREATED
        self._path: Optional[RealizedPath] = None

        hub = geometry.hub
        self._points: list[Point] = [hub] * POINTS_IN_TWILIGHT_PATH
        if enclose is EnclosureSide.TOP:
            # [1] = dawn, [4] = dusk
            self._points[2] = (geometry.x_left, geometry.y_top)
            self._points[3] = (geometry.x_right, geometry.y_top)
        else:
            # [1] = dusk, [4] = dawn
            self._points[2] = (geometry.x_right, geometry.y_bottom)
            self._points[3] = (geometry.x_left, geometry.y_bottom)

    @classmethod
    def create(
        cls,
        zenith: float,
        enclose: EnclosureSide,
        overlay: Optional[OverlaySource] = None,
        geometry: FaceGeometry = FaceGeometry(),
    ) -> Optional["TwilightBand"]:
        """
        Create a band, loading its overlay bitmap if one is named.

        Args:
            zenith: Zenith angle in degrees
            enclose: Side of the screen the path covers
            overlay: Tone or image file for the overlay, or None
            geometry: Dial layout

        Returns:
            TwilightBand, or None if the overlay could not be loaded
        """
        bitmap = None
        if overlay is not None:
            try:
                bitmap = load_overlay(overlay, geometry.size)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not load overlay {overlay} for zenith {zenith}: {e}")
                return None

        return cls(zenith, enclose, bitmap, geometry)

    @property
    def points(self) -> tuple[Point, ...]:
        """Path points in winding order: hub, hand, corner, corner, hand."""
        return tuple(self._points)

    @property
    def has_rise_and_set(self) -> bool:
        return (
            self.dawn_time is not NO_RISE_SET_TIME
            and self.dusk_time is not NO_RISE_SET_TIME
        )

    def _check_alive(self) -> None:
        if self.state is BandState.DESTROYED:
            raise RuntimeError(f"Twilight band for zenith {self.zenith} was destroyed")

    def set_times(self, dawn_time: RiseSetTime, dusk_time: RiseSetTime) -> None:
        """
        Store local dawn/dusk times and move the hand points to match.

        Args:
            dawn_time: Local dawn hour and fraction, or NO_RISE_SET_TIME
            dusk_time: Local dusk hour and fraction, or NO_RISE_SET_TIME
        """
        self._check_alive()
        self.dawn_time = dawn_time
        self.dusk_time = dusk_time
        self.state = BandState.COMPUTED

        if not self.has_rise_and_set:
            # Hands keep their previous positions; render() draws nothing
            return

        dawn_point = self.geometry.time_to_point(dawn_time)
        dusk_point = self.geometry.time_to_point(dusk_time)

        if self.enclose is EnclosureSide.TOP:
            self._points[1] = dawn_point
            self._points[4] = dusk_point
        else:
            self._points[1] = dusk_point
            self._points[4] = dawn_point

    def recompute(self, local_date: "datetime.date", location: "Location") -> None:
        """
        Compute dawn/dusk for a local date at the given location.

        The ephemeris is handed the local calendar date as-is, without
        moving it to the UTC date first. Close to midnight this can pick
        the neighbouring day's times.

        Args:
            local_date: Local date (anything with year, month and day)
            location: Current location and UTC offset
        """
        self._check_alive()

        rise_utc = calc_sunrise(
            local_date.year,
            local_date.month,
            local_date.day,
            location.latitude,
            location.longitude,
            self.zenith,
        )
        set_utc = calc_sunset(
            local_date.year,
            local_date.month,
            local_date.day,
            location.latitude,
            location.longitude,
            self.zenith,
        )

        tz_hours = location.tz_in_hours
        self.set_times(adjust_timezone(rise_utc, tz_hours), adjust_timezone(set_utc, tz_hours))

        if self.has_rise_and_set:
            logger.debug(
                f"Zenith {self.zenith:.2f}: dawn {self.dawn_time:.3f}, "
                f"dusk {self.dusk_time:.3f}"
            )
        else:
            logger.debug(f"Zenith {self.zenith:.2f}: no rise/set on {local_date}")

    def render(self, surface: RenderSurface, color: int, rect: Rect) -> bool:
        """
        Draw the overlay (if any) over rect, then fill the path with color.

        Nothing at all is drawn when either dawn or dusk does not occur;
        whatever earlier bands drew stays untouched.

        Args:
            surface: Surface to draw on
            color: Fill color for the path
            rect: Target rectangle; the path origin goes to its center

        Returns:
            True if the band was drawn
        """
        self._check_alive()

        if not self.has_rise_and_set:
            return False

        # Always start from the point buffer; never reposition an old path
        self._path = None
        self._path = RealizedPath.create(self._points)
        if self._path is None:
            return False
        self._path.move_to(rect.center_point())

        if self.overlay is not None:
            surface.set_compositing_mode(CompositingMode.AND)
            surface.draw_image_in_rect(self.overlay, rect)

        surface.set_fill_color(color)
        self._path.draw_filled(surface)
        return True

    def close(self) -> None:
        """Release the path and overlay bitmap."""
        if self.state is BandState.DESTROYED:
            return
        self._path = None
        if self.overlay is not None:
            self.overlay.close()
            self.overlay = None
        self.state = BandState.DESTROYED

    def __enter__(self) -> "TwilightBand":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
