"""Views and rendering primitives for the Twilight Clock display."""

from .base import BaseView
from .colors import Colors, CompositingMode
from .dial import DialOverlay
from .message import MessageView
from .surface import PillowSurface, Rect, RealizedPath, RenderSurface
from .twilight import EnclosureSide, FaceGeometry, TwilightBand
from .watchface import WatchfaceView, format_hour

__all__ = [
    "BaseView",
    "Colors",
    "CompositingMode",
    "DialOverlay",
    "EnclosureSide",
    "FaceGeometry",
    "MessageView",
    "PillowSurface",
    "Rect",
    "RealizedPath",
    "RenderSurface",
    "TwilightBand",
    "WatchfaceView",
    "format_hour",
]
