"""Greyscale palette and compositing modes for the watch face."""

from enum import Enum


class Colors:
    """Fill colors available on the face, as 8-bit grey levels."""

    BLACK = 0
    DARK_GRAY = 85
    LIGHT_GRAY = 170
    WHITE = 255


class CompositingMode(Enum):
    """How a bitmap is merged with what is already on the surface."""

    ASSIGN = "assign"  # plain overwrite
    OR = "or"          # white source pixels force white
    AND = "and"        # black source pixels force black
    CLEAR = "clear"    # white source pixels force black


BLACK = Colors.BLACK
DARK_GRAY = Colors.DARK_GRAY
LIGHT_GRAY = Colors.LIGHT_GRAY
WHITE = Colors.WHITE
