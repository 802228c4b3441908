"""Base view class for Twilight Clock frames."""

import datetime
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from .colors import WHITE
from .font_manager import Font, get_font_manager
from .surface import PillowSurface, Rect

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


class BaseView(ABC):
    """
    Abstract base class for full-screen views.

    Each view renders one greyscale frame at the watch face size; the
    display scales it to the framebuffer.
    """

    name: str = "base"

    def __init__(self, config: "Config"):
        """
        Initialize view.

        Args:
            config: Application configuration
        """
        self.config = config
        self.width = config.display.face_width
        self.height = config.display.face_height
        self._fonts = get_font_manager()

    @property
    def frame_rect(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def get_font(self, size: int, bold: bool = False) -> Font:
        return self._fonts.get_font(size, bold)

    def draw_text(
        self,
        draw: ImageDraw.ImageDraw,
        y: int,
        text: str,
        font: Font,
        fill: int,
        align: str = "center",
        margin: int = 2,
    ) -> None:
        """Draw one line of text aligned left, center or right."""
        bbox = draw.textbbox((0, 0), text, font=font)
        text_width = bbox[2] - bbox[0]
        if align == "left":
            x = margin
        elif align == "right":
            x = self.width - text_width - margin
        else:
            x = (self.width - text_width) // 2
        draw.text((x, y), text, fill=fill, font=font)

    @abstractmethod
    def render_content(self, surface: PillowSurface, now: datetime.datetime) -> None:
        """
        Render the view content.

        Args:
            surface: Surface over a white frame
            now: Local time to render for
        """
        pass

    def render(self, now: datetime.datetime) -> Image.Image:
        """
        Render a complete frame.

        Args:
            now: Local time to render for

        Returns:
            Mode "L" PIL Image of face size
        """
        surface = PillowSurface.blank(self.width, self.height, WHITE)
        self.render_content(surface, now)
        return surface.image
