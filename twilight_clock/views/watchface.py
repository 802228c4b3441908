"""Watchface view - twilight bands, dial, hour hand and text."""

import datetime
from typing import TYPE_CHECKING, Optional

from PIL import Image, ImageDraw

from ..data.ephemeris import NO_RISE_SET_TIME, RiseSetTime
from .base import BaseView
from .colors import BLACK, WHITE
from .dial import DialOverlay, hour_hand_points
from .surface import PillowSurface

if TYPE_CHECKING:
    from ..config import Config
    from ..controller import WatchfaceController

# Layout of the reference 144x168 face
REFERENCE_HEIGHT = 168
TIME_Y = 32
MOON_Y = 112
SUN_TIMES_Y = 147
MOON_RADIUS = 11


def format_hour(value: RiseSetTime, clock_24h: bool) -> str:
    """
    Format an hour-of-day float as clock text.

    Minutes are truncated, not rounded.

    Args:
        value: Local hour and fraction, or NO_RISE_SET_TIME
        clock_24h: "13:05" style if True, else "1:05"

    Returns:
        Time text, or "--:--" when the event does not occur
    """
    if value is NO_RISE_SET_TIME:
        return "--:--"

    hours = int(value)
    minutes = int(60 * (value - hours))
    if clock_24h:
        return f"{hours:02d}:{minutes:02d}"
    return f"{hours % 12 or 12}:{minutes:02d}"


class WatchfaceView(BaseView):
    """The 24-hour sun clock face."""

    name = "watchface"

    def __init__(
        self,
        config: "Config",
        controller: "WatchfaceController",
        dial: Optional[DialOverlay] = None,
    ):
        super().__init__(config)
        self.controller = controller
        self.dial = dial
        self.clock_24h = config.appearance.clock_24h
        self.show_moon_phase = config.appearance.show_moon_phase
        self._scale = self.height / REFERENCE_HEIGHT

    def _y(self, reference_y: int) -> int:
        return int(reference_y * self._scale)

    @property
    def hub(self) -> tuple[int, int]:
        cx, cy = self.frame_rect.center_point()
        hub_x, hub_y = self.controller.bands["night"].geometry.hub
        return (cx + hub_x, cy + hub_y)

    def render_content(self, surface: PillowSurface, now: datetime.datetime) -> None:
        """Render bands, dial, moon, hour hand and text, back to front."""
        rect = self.frame_rect
        self.controller.render_bands(surface, rect)
        if self.dial is not None:
            self.dial.draw(surface, rect)

        if self.show_moon_phase and self.controller.moon_phase is not None:
            self._render_moon(surface.image, self.controller.moon_phase.phase_index)

        self._render_hour_hand(surface, now)
        self._render_text(surface.draw, now)

    def _render_moon(self, image: Image.Image, phase_index: int) -> None:
        """Draw the moon disc, lit from the side matching its phase."""
        r = int(MOON_RADIUS * self._scale)
        size = 2 * r + 1

        disc = Image.new("L", (size, size), BLACK)
        ImageDraw.Draw(disc).ellipse([(0, 0), (size - 1, size - 1)], fill=WHITE)

        moon = Image.new("L", (size, size), WHITE)
        moon_draw = ImageDraw.Draw(moon)
        if phase_index <= 14:
            # Waxing: shadow slides off to the left
            dx = -round(2 * r * phase_index / 14)
        else:
            dx = round(2 * r * (28 - phase_index) / 14)
        moon_draw.ellipse([(dx, 0), (dx + size - 1, size - 1)], fill=BLACK)
        moon_draw.ellipse([(0, 0), (size - 1, size - 1)], outline=WHITE)

        x = self.width // 2 - r
        y = self._y(MOON_Y) - r
        image.paste(moon, (x, y), disc)

    def _render_hour_hand(self, surface: PillowSurface, now: datetime.datetime) -> None:
        length = (self.dial.rim_radius if self.dial else self.width // 2) - 6
        hub = self.hub

        surface.set_fill_color(WHITE)
        surface.fill_polygon(hour_hand_points(now.hour, now.minute, hub, length + 2, 4))
        surface.set_fill_color(BLACK)
        surface.fill_polygon(hour_hand_points(now.hour, now.minute, hub, length, 2))

    def _render_text(self, draw: ImageDraw.ImageDraw, now: datetime.datetime) -> None:
        font_time = self.get_font(int(28 * self._scale), bold=True)
        font_date = self.get_font(int(16 * self._scale))
        font_small = self.get_font(int(14 * self._scale))

        if self.clock_24h:
            time_str = now.strftime("%H:%M")
        else:
            time_str = now.strftime("%I:%M").lstrip("0")
        self.draw_text(draw, self._y(TIME_Y), time_str, font_time, BLACK)

        # Top corners sit outside the dial, on black
        self.draw_text(draw, 0, now.strftime("%a"), font_date, WHITE, align="left")
        date_str = f"{now.strftime('%b')} {now.day}, {now.year}"
        self.draw_text(draw, 0, date_str, font_date, WHITE, align="right")

        sunrise = format_hour(self.controller.sunrise_time, self.clock_24h)
        sunset = format_hour(self.controller.sunset_time, self.clock_24h)
        self.draw_text(draw, self._y(SUN_TIMES_Y), sunrise, font_small, WHITE, align="left")
        self.draw_text(draw, self._y(SUN_TIMES_Y), sunset, font_small, WHITE, align="right")
