"""
PIL IO module.

Conversion between PIL images and the uint8 NumPy buffers that layers carry.
Pixel buffers are (height, width, 3) without alpha or (height, width, 4) with
straight alpha; mask buffers are (height, width) grayscale.
"""

import logging
from typing import Optional, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def has_alpha(pixels: np.ndarray) -> bool:
    """Return True if the pixel buffer carries an alpha channel."""
    return pixels.ndim == 3 and pixels.shape[2] == 4


def to_pixel_array(
    image: Union[np.ndarray, Image.Image, None],
) -> Optional[np.ndarray]:
    """Convert an image to a uint8 RGB or RGBA array, keeping alpha if any."""
    if image is None:
        return None
    if isinstance(image, Image.Image):
        if image.mode in ("RGBA", "LA", "PA", "La", "RGBa") or (
            image.mode == "P" and "transparency" in image.info
        ):
            image = image.convert("RGBA")
        elif image.mode != "RGB":
            logger.debug("Converting %s image to RGB" % image.mode)
            image = image.convert("RGB")
        return np.asarray(image, dtype=np.uint8).copy()

    array = np.asarray(image)
    if array.dtype != np.uint8:
        raise TypeError(f"Expected uint8 pixels, got {array.dtype}")
    if array.ndim == 2:
        array = array[:, :, np.newaxis]
    if array.ndim != 3:
        raise ValueError(f"Expected a 2-D or 3-D array, got shape {array.shape}")
    channels = array.shape[2]
    if channels == 1:
        return np.repeat(array, 3, axis=2)
    if channels == 2:
        return np.concatenate([np.repeat(array[:, :, :1], 3, axis=2), array[:, :, 1:]], 2)
    if channels in (3, 4):
        return array.copy()
    raise ValueError(f"Unsupported number of channels: {channels}")


def to_gray_array(image: Union[np.ndarray, Image.Image]) -> np.ndarray:
    """Convert a mask image to a (height, width) uint8 array."""
    if isinstance(image, Image.Image):
        if image.mode != "L":
            image = image.convert("L")
        return np.asarray(image, dtype=np.uint8).copy()

    array = np.asarray(image)
    if array.dtype != np.uint8:
        raise TypeError(f"Expected uint8 mask, got {array.dtype}")
    if array.ndim == 3 and array.shape[2] == 1:
        array = array[:, :, 0]
    elif array.ndim == 3:
        # Same weights as PIL's "L" conversion.
        array = (image_gray(array[:, :, :3].astype(np.float32)) + 0.5).astype(np.uint8)
    if array.ndim != 2:
        raise ValueError(f"Expected a 2-D mask, got shape {array.shape}")
    return array.copy()


def image_gray(color: np.ndarray) -> np.ndarray:
    """ITU-R 601-2 luma of an RGB array."""
    return (
        color[:, :, 0] * 299.0 + color[:, :, 1] * 587.0 + color[:, :, 2] * 114.0
    ) / 1000.0


def promote_alpha(pixels: np.ndarray) -> np.ndarray:
    """Return an RGBA copy of the pixels, opaque where alpha was missing."""
    if has_alpha(pixels):
        return pixels.copy()
    alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([pixels, alpha], axis=2)


def convert_to_pil(pixels: Optional[np.ndarray]) -> Optional[Image.Image]:
    """Convert a uint8 RGB or RGBA buffer to a PIL image."""
    if pixels is None or pixels.size == 0:
        return None
    return Image.fromarray(np.ascontiguousarray(pixels))
