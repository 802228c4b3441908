"""Tonal overlay bitmaps for the twilight bands.

A 1-bit style face has no real greys, so each tone is an ordered-dither
pattern of black and white pixels. Drawn with AND compositing, the pattern
darkens whatever white is underneath it.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .colors import BLACK, WHITE

logger = logging.getLogger(__name__)

# 2x2 Bayer threshold matrix
BAYER_2X2 = np.array([[0, 2], [3, 1]])


class Tone(Enum):
    """Grey tones, valued by black pixels per 2x2 cell."""

    LIGHT_GRAY = 1
    GRAY = 2
    DARK_GRAY = 3


OverlaySource = Union[Tone, Path, str]


def make_tone_bitmap(tone: Tone, size: tuple[int, int]) -> Image.Image:
    """
    Build a dithered greyscale bitmap.

    Args:
        tone: Tone to render
        size: (width, height) in pixels

    Returns:
        Mode "L" image containing only black and white pixels

    Raises:
        ValueError: If size is not positive
    """
    width, height = size
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid tone bitmap size: {width}x{height}")

    tile = np.where(BAYER_2X2 < tone.value, BLACK, WHITE).astype(np.uint8)
    reps = (-(-height // 2), -(-width // 2))
    pattern = np.tile(tile, reps)[:height, :width]
    return Image.fromarray(np.ascontiguousarray(pattern))


def load_overlay(source: OverlaySource, size: tuple[int, int]) -> Image.Image:
    """
    Load an overlay bitmap from a built-in tone or an image file.

    Args:
        source: Tone, or path to an image file
        size: Size used for built-in tones

    Returns:
        Mode "L" image

    Raises:
        OSError: If an image file cannot be read
        ValueError: If the bitmap cannot be created
    """
    if isinstance(source, Tone):
        return make_tone_bitmap(source, size)

    path = Path(source)
    with Image.open(path) as img:
        bitmap = img.convert("L")
    logger.debug(f"Loaded overlay bitmap {path} ({bitmap.width}x{bitmap.height})")
    return bitmap
