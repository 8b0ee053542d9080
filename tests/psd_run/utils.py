"""Helpers building layer trees in memory."""

import numpy as np

from psd_run.api.document import Document
from psd_run.api.layers import PixelLayer
from psd_run.api.rect import Rect

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def solid(width, height, color, alpha=255):
    """RGBA buffer filled with one color."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, :3] = color
    pixels[:, :, 3] = alpha
    return pixels


def solid_layer(layer_id, rect, color, alpha=255, **kwargs):
    pixels = solid(rect.width, rect.height, color, alpha)
    return PixelLayer(layer_id, "Layer %d" % layer_id, rect, pixels=pixels, **kwargs)


def red_document(opacity=1.0, size=(100, 100)):
    """Document with a single red layer at (10, 10, 50, 50)."""
    layer = solid_layer(1, Rect(10, 10, 50, 50), RED, opacity=opacity)
    return Document(size[0], size[1], [layer])


def loader_of(factory):
    """Loader that ignores the staged file and builds a fresh document."""

    def loader(path):
        return factory()

    return loader


def pixel_at(image, x, y):
    """RGBA tuple of a rendered image at document coordinates."""
    return tuple(int(v) for v in image.pixels[y - image.y, x - image.x])
