"""Framebuffer output for the watch face."""

import logging
from typing import TYPE_CHECKING, Optional, BinaryIO

import numpy as np
from PIL import Image

if TYPE_CHECKING:
    from .config import DisplayConfig

logger = logging.getLogger(__name__)

# Hints logged when the panel device cannot be opened
_OPEN_HINTS = {
    PermissionError: "needs root or membership of the 'video' group",
    FileNotFoundError: "device missing, is the panel overlay loaded?",
}


class Display:
    """
    Pushes watch face frames to a 16-bit framebuffer panel.

    Frames are rendered at watch face size and letterboxed onto the panel.
    """

    def __init__(self, config: "DisplayConfig"):
        self.config = config
        self.width = config.width
        self.height = config.height
        self.framebuffer = config.framebuffer
        self._fb_handle: Optional[BinaryIO] = None

    def open(self) -> bool:
        """Open the panel device for writing. Returns False on failure."""
        try:
            self._fb_handle = open(self.framebuffer, "wb")
        except OSError as e:
            hint = _OPEN_HINTS.get(type(e), str(e))
            logger.error(f"Cannot open panel {self.framebuffer}: {hint}")
            return False

        logger.info(f"Writing frames to {self.framebuffer} ({self.width}x{self.height})")
        return True

    def close(self) -> None:
        if self._fb_handle is None:
            return
        handle, self._fb_handle = self._fb_handle, None
        try:
            handle.close()
        except OSError as e:
            logger.warning(f"Panel {self.framebuffer} did not close cleanly: {e}")

    def fit_frame(self, image: Image.Image) -> Image.Image:
        """
        Scale a face-sized frame to the display, keeping its aspect ratio.

        Nearest-neighbour scaling keeps the dithered tones crisp; the
        unused margins are black.

        Args:
            image: Frame at watch face size, any mode

        Returns:
            RGB image of exactly display size
        """
        if image.size == (self.width, self.height):
            return image.convert("RGB")

        scale = min(self.width / image.width, self.height / image.height)
        size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
        scaled = image.resize(size, Image.Resampling.NEAREST)

        canvas = Image.new("RGB", (self.width, self.height), (0, 0, 0))
        offset = ((self.width - size[0]) // 2, (self.height - size[1]) // 2)
        canvas.paste(scaled.convert("RGB"), offset)
        return canvas

    def write_frame(self, image: Image.Image) -> bool:
        """
        Letterbox a frame onto the panel and write it out as RGB565.

        Returns:
            True if the whole frame reached the device
        """
        if self._fb_handle is None:
            logger.error("Cannot write frame: panel is not open")
            return False

        data = self._rgb_to_rgb565(self.fit_frame(image))
        try:
            self._fb_handle.seek(0)
            self._fb_handle.write(data)
            self._fb_handle.flush()
        except OSError as e:
            logger.error(f"Frame write to {self.framebuffer} failed: {e}")
            return False
        return True

    @staticmethod
    def _rgb_to_rgb565(image: Image.Image) -> bytes:
        # 5 bits red, 6 green, 5 blue, little-endian words
        rgb = np.asarray(image, dtype=np.uint16)
        packed = (
            ((rgb[..., 0] & 0xF8) << 8)
            | ((rgb[..., 1] & 0xFC) << 3)
            | (rgb[..., 2] >> 3)
        )
        return packed.astype("<u2").tobytes()

    def clear(self, level: int = 0) -> bool:
        """Fill the whole panel with one grey level (0 black, 255 white)."""
        return self.write_frame(Image.new("L", (self.width, self.height), level))

    def __enter__(self) -> "Display":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
