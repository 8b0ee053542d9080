"""
Typesetting module for text layers.

Text layers keep their content as a list of :py:class:`TextRun` objects.
Each run is a substring sharing one style. When a text layer has no decoded
raster, or its text was replaced at runtime, its pixels are produced from the
runs by :py:func:`draw_text_runs`.

Example::

    runs = [TextRun("Hello ", font="DejaVuSans", font_size=12.0),
            TextRun("world", color="#ff0000")]
    pixels = draw_text_runs(runs, (64, 16))
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Any, Iterable

import numpy as np
from attrs import define, evolve, field
from PIL import Image, ImageColor, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@define
class TextRun:
    """
    Substring of a text layer sharing one style.

    .. py:attribute:: text
    .. py:attribute:: font

        Font family used for drawing.

    .. py:attribute:: original_font

        Font name recorded in the source document.

    .. py:attribute:: font_size
    .. py:attribute:: color

        ``#rrggbb`` color string.
    """

    text: str = ""
    font: str = ""
    original_font: str = ""
    font_size: float = field(default=12.0, converter=float)
    color: str = "#000000"

    def with_text(self, text: str) -> "TextRun":
        """Return a copy of this run holding `text`."""
        return evolve(self, text=text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "font": self.font,
            "originalFont": self.original_font,
            "fontSize": self.font_size,
            "color": self.color,
        }


@functools.lru_cache(maxsize=32)
def _load_font(name: str, size: int) -> Any:
    for candidate in (name, name + ".ttf") if name else ():
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("Font %r not available, using the default font" % name)
    try:
        return ImageFont.load_default(size)
    except TypeError:
        # Pillow < 10.1 has no sized default font.
        return ImageFont.load_default()


def get_font(run: TextRun) -> Any:
    """Resolve the PIL font of a run, by family then by original name."""
    size = max(1, int(round(run.font_size)))
    font = run.font or run.original_font
    return _load_font(font, size)


def _line_height(font: Any) -> int:
    bbox = font.getbbox("Ag")
    return max(1, int(bbox[3]))


def draw_text_runs(runs: Iterable[TextRun], size: tuple[int, int]) -> np.ndarray:
    """
    Draw text runs into a transparent RGBA buffer.

    Runs are laid out left to right starting at the top-left corner. Line
    breaks restart at the left edge on the next line. Content outside of
    `size` is clipped.

    :param runs: Runs to draw.
    :param size: (width, height) of the buffer.
    :return: uint8 array of shape (height, width, 4).
    """
    width, height = size
    image = Image.new("RGBA", (max(0, width), max(0, height)), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    x, y = 0.0, 0
    for run in runs:
        font = get_font(run)
        fill = ImageColor.getrgb(run.color or "#000000")
        for index, line in enumerate(_LINE_BREAK.split(run.text)):
            if index > 0:
                x = 0.0
                y += _line_height(font)
            if line:
                draw.text((x, y), line, fill=fill, font=font)
                x += draw.textlength(line, font=font)
    return np.asarray(image, dtype=np.uint8).copy()
