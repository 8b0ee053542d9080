"""Application of transparency masks and raster layer masks to leaf pixels."""

import logging
from typing import Optional

import numpy as np

from psd_run.api import pil_io
from psd_run.api.layers import Layer, PixelLayer
from psd_run.api.mask import LayerMask
from psd_run.api.rect import Rect

logger = logging.getLogger(__name__)


def apply_masks(layer: Layer) -> Optional[np.ndarray]:
    """
    Get the masked RGBA pixels of a leaf layer.

    The transparency mask sets the baseline alpha of pixels that have no
    alpha channel, then the raster layer mask attenuates it. The layer
    buffers are not modified.

    :param layer: Leaf layer.
    :return: uint8 array of shape (height, width, 4) covering `layer.rect`,
        or None if the layer has no pixels.
    """
    if not isinstance(layer, PixelLayer) or not layer.has_pixels():
        return None
    pixels = layer.pixels
    assert pixels is not None

    transparency = layer.transparency_mask
    if transparency is not None and not pil_io.has_alpha(pixels):
        pixels = apply_transparency_mask(pixels, transparency)

    mask = layer.mask
    if mask is not None and not mask.disabled:
        pixels = apply_layer_mask(pixels, layer.rect, mask)

    if pixels is layer.pixels:
        return pil_io.promote_alpha(pixels)
    return pixels


def apply_transparency_mask(pixels: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    Replace alpha by the mask samples where pixels and mask overlap.

    Pixels outside of the mask extent stay opaque.
    """
    result = pil_io.promote_alpha(pixels)
    height = min(result.shape[0], mask.shape[0])
    width = min(result.shape[1], mask.shape[1])
    result[:height, :width, 3] = mask[:height, :width]
    return result


def apply_layer_mask(pixels: np.ndarray, rect: Rect, mask: LayerMask) -> np.ndarray:
    """
    Multiply alpha by the layer mask, ``alpha * value // 255``.

    The mask is positioned in document space; pixels outside of the mask
    rectangle use the mask background color.
    """
    result = pil_io.promote_alpha(pixels)
    height, width = result.shape[:2]
    values = np.full((height, width), mask.background_color, dtype=np.uint16)

    pixel_rect = Rect(rect.x, rect.y, width, height)
    inter = pixel_rect.intersected(mask.rect)
    if not inter.is_empty():
        src = inter.translated(-mask.rect.x, -mask.rect.y)
        dst = inter.translated(-pixel_rect.x, -pixel_rect.y)
        values[dst.top : dst.bottom, dst.left : dst.right] = mask.data[
            src.top : src.bottom, src.left : src.right
        ]

    alpha = result[:, :, 3].astype(np.uint16)
    result[:, :, 3] = (alpha * values // 255).astype(np.uint8)
    return result
