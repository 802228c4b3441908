"""Font manager singleton for the watchface text."""

import logging
from typing import Union

from PIL import ImageFont

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Condensed faces first: the watch face is only 144 pixels wide
FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansCondensed.ttf",  # Debian/Ubuntu/Raspbian
    "/usr/share/fonts/TTF/DejaVuSansCondensed.ttf",  # Arch Linux
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/System/Library/Fonts/Helvetica.ttc",  # macOS
]

BOLD_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansCondensed-Bold.ttf",
    "/usr/share/fonts/TTF/DejaVuSansCondensed-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
]


class FontManager:
    """Process-wide cache of loaded fonts, keyed by size and weight."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._fonts = {}
        return cls._instance

    def _load(self, size: int, paths: list[str]) -> Font:
        for path in paths:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
        logger.warning(f"No system fonts found for size {size}, using default")
        return ImageFont.load_default()

    def get_font(self, size: int, bold: bool = False) -> Font:
        """
        Get a font at the specified size.

        Args:
            size: Font size in points
            bold: Use the bold face if one is installed

        Returns:
            PIL ImageFont (the PIL default if no system font is found)
        """
        key = (size, bold)
        if key not in self._fonts:
            self._fonts[key] = self._load(size, BOLD_FONT_PATHS if bold else FONT_PATHS)
        return self._fonts[key]

    def clear_cache(self) -> None:
        self._fonts.clear()
        logger.debug("Font cache cleared")


def get_font_manager() -> FontManager:
    """Get the global FontManager instance."""
    return FontManager()
