"""Render surface used by the twilight bands and the dial."""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from PIL import Image, ImageChops, ImageDraw

from .colors import CompositingMode, WHITE

logger = logging.getLogger(__name__)

Point = tuple[int, int]


@dataclass(frozen=True)
class Rect:
    """Screen rectangle: origin plus size."""

    x: int
    y: int
    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Left, top, right, bottom as used by PIL."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def center_point(self) -> Point:
        return (self.x + self.width // 2, self.y + self.height // 2)


class RenderSurface(Protocol):
    """Drawing operations the twilight bands and dial need."""

    def set_compositing_mode(self, mode: CompositingMode) -> None: ...

    def set_fill_color(self, color: int) -> None: ...

    def draw_image_in_rect(self, bitmap: Image.Image, rect: Rect) -> None: ...

    def fill_polygon(self, points: Sequence[Point]) -> None: ...


class RealizedPath:
    """
    A polygon ready for filling, built from a point buffer.

    The offset set by move_to() is absolute, not cumulative. Instances are
    meant to be built fresh for each render from the immutable buffer.
    """

    MIN_POINTS = 3

    def __init__(self, points: Sequence[Point]):
        self._points = tuple(points)
        self._offset: Point = (0, 0)

    @classmethod
    def create(cls, points: Sequence[Point]) -> Optional["RealizedPath"]:
        """
        Realize a polygon from a point buffer.

        Returns:
            RealizedPath, or None if the buffer cannot form a polygon
        """
        if len(points) < cls.MIN_POINTS:
            logger.warning(f"Cannot realize path from {len(points)} points")
            return None
        return cls(points)

    def move_to(self, offset: Point) -> None:
        """Place the path's origin at the given screen point."""
        self._offset = offset

    @property
    def offset(self) -> Point:
        return self._offset

    @property
    def points(self) -> list[Point]:
        """Screen coordinates of the path points."""
        dx, dy = self._offset
        return [(x + dx, y + dy) for x, y in self._points]

    def draw_filled(self, surface: RenderSurface) -> None:
        surface.fill_polygon(self.points)


class PillowSurface:
    """
    RenderSurface backed by a greyscale PIL image.

    Bitmaps are treated as black/white masks: OR keeps the lighter pixel,
    AND keeps the darker one, and CLEAR blackens wherever the source is
    white. Polygon fills always overwrite, whatever the compositing mode.
    """

    def __init__(self, image: Image.Image):
        if image.mode != "L":
            raise ValueError(f"PillowSurface needs a greyscale image, got {image.mode}")
        self.image = image
        self.draw = ImageDraw.Draw(image)
        self.compositing_mode = CompositingMode.ASSIGN
        self.fill_color = WHITE

    @classmethod
    def blank(cls, width: int, height: int, color: int = WHITE) -> "PillowSurface":
        """Create a surface over a new image filled with color."""
        return cls(Image.new("L", (width, height), color))

    @property
    def bounds(self) -> Rect:
        return Rect(0, 0, self.image.width, self.image.height)

    def set_compositing_mode(self, mode: CompositingMode) -> None:
        self.compositing_mode = mode

    def set_fill_color(self, color: int) -> None:
        self.fill_color = color

    def draw_image_in_rect(self, bitmap: Image.Image, rect: Rect) -> None:
        """Stretch bitmap to rect and merge it using the compositing mode."""
        src = bitmap if bitmap.mode == "L" else bitmap.convert("L")
        if src.size != rect.size:
            src = src.resize(rect.size, Image.Resampling.NEAREST)

        if self.compositing_mode is CompositingMode.ASSIGN:
            self.image.paste(src, (rect.x, rect.y))
            return

        dest = self.image.crop(rect.box)
        if self.compositing_mode is CompositingMode.OR:
            merged = ImageChops.lighter(dest, src)
        elif self.compositing_mode is CompositingMode.AND:
            merged = ImageChops.darker(dest, src)
        else:  # CLEAR
            merged = ImageChops.darker(dest, ImageChops.invert(src))
        self.image.paste(merged, (rect.x, rect.y))

    def fill_polygon(self, points: Sequence[Point]) -> None:
        self.draw.polygon(list(points), fill=self.fill_color)
