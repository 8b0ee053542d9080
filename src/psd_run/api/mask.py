"""
Mask module.
"""

import logging
from typing import Optional, Union

import numpy as np
from PIL import Image

from psd_run.api import pil_io
from psd_run.api.rect import Rect

logger = logging.getLogger(__name__)


class LayerMask:
    """Raster layer mask attached to a leaf layer.

    The mask is a grayscale image positioned at its own rectangle in document
    space. Outside of that rectangle the mask takes the value of
    :py:attr:`background_color`.

    :param image: Grayscale samples, either a 2-D uint8 array or a PIL image.
    :param rect: Placement of the mask in document space. Defaults to the
        image size at the origin.
    :param background_color: Mask value outside `rect`, in [0, 255].
    :param disabled: Disabled masks are ignored when compositing.
    """

    def __init__(
        self,
        image: Union[np.ndarray, Image.Image],
        rect: Optional[Rect] = None,
        background_color: int = 0,
        disabled: bool = False,
    ):
        self._data = pil_io.to_gray_array(image)
        height, width = self._data.shape
        if rect is None:
            rect = Rect(0, 0, width, height)
        elif rect.size != (width, height):
            raise ValueError(
                "Mask size %dx%d does not match rect %r" % (width, height, rect)
            )
        if not (0 <= background_color <= 255):
            raise ValueError(
                f"Background color must be in range [0, 255], got {background_color}"
            )
        self._rect = rect
        self._background_color = int(background_color)
        self.disabled = bool(disabled)

    @property
    def background_color(self) -> int:
        """Mask value outside of :py:attr:`rect`."""
        return self._background_color

    @property
    def rect(self) -> Rect:
        """Placement of the mask in document space."""
        return self._rect

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """BBox"""
        return self._rect.bbox

    @property
    def left(self) -> int:
        return self._rect.left

    @property
    def top(self) -> int:
        return self._rect.top

    @property
    def width(self) -> int:
        return self._rect.width

    @property
    def height(self) -> int:
        return self._rect.height

    @property
    def size(self) -> tuple[int, int]:
        """(Width, Height) tuple."""
        return self._rect.size

    @property
    def data(self) -> np.ndarray:
        """Grayscale samples as a (height, width) uint8 array."""
        return self._data

    def topil(self) -> Image.Image:
        """
        Get PIL Image of the mask.

        :return: PIL Image object in `L` mode.
        """
        return Image.fromarray(self._data)

    def __repr__(self) -> str:
        return "%s(offset=(%d,%d) size=%dx%d)" % (
            self.__class__.__name__,
            self.left,
            self.top,
            self.width,
            self.height,
        )
