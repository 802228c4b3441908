"""Status message view shown while the watchface cannot be drawn."""

import datetime

from .base import BaseView
from .colors import BLACK, WHITE
from .surface import PillowSurface


class MessageView(BaseView):
    """White-on-black title plus a short wrapped message."""

    name = "message"

    TITLE_HEIGHT = 30
    LINE_HEIGHT = 20

    def __init__(self, config, title: str = "", body: str = ""):
        super().__init__(config)
        self.title = title
        self.body = body

    def _wrap(self, draw, text: str, font) -> list[str]:
        lines: list[str] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}".strip()
            bbox = draw.textbbox((0, 0), candidate, font=font)
            if current and bbox[2] - bbox[0] > self.width - 8:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines

    def render_content(self, surface: PillowSurface, now: datetime.datetime) -> None:
        draw = surface.draw
        draw.rectangle(((0, 0), (self.width, self.TITLE_HEIGHT)), fill=BLACK)
        self.draw_text(draw, 5, self.title, self.get_font(18, bold=True), WHITE)

        font = self.get_font(16)
        y = self.TITLE_HEIGHT + 10
        for line in self._wrap(draw, self.body, font):
            self.draw_text(draw, y, line, font, BLACK)
            y += self.LINE_HEIGHT
