"""Utility functions for composite operations."""

from typing import Union, overload

import numpy as np
from numpy.typing import NDArray

from psd_run.api.rect import Rect


def divide(
    a: NDArray[np.floating], b: NDArray[np.floating], default: float = 0.0
) -> NDArray[np.floating]:
    """Safe division for color ops."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = default
    return c


@overload
def union(backdrop: float, source: float) -> float: ...


@overload
def union(
    backdrop: NDArray[np.floating], source: NDArray[np.floating]
) -> NDArray[np.floating]: ...


@overload
def union(backdrop: float, source: NDArray[np.floating]) -> NDArray[np.floating]: ...


@overload
def union(backdrop: NDArray[np.floating], source: float) -> NDArray[np.floating]: ...


def union(
    backdrop: Union[float, NDArray[np.floating]],
    source: Union[float, NDArray[np.floating]],
) -> Union[float, NDArray[np.floating]]:
    """Generalized union of shape."""
    return backdrop + source - (backdrop * source)


def clip(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)


def to_float(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Split uint8 RGBA pixels into float32 color and alpha in [0, 1]."""
    values = pixels.astype(np.float32) / 255.0
    return values[:, :, :3], values[:, :, 3:4]


def to_uint8(values: NDArray[np.floating]) -> np.ndarray:
    """Quantize [0, 1] values to uint8."""
    return np.round(clip(values) * 255.0).astype(np.uint8)


def overlap(
    size: tuple[int, int], source: Rect
) -> tuple[Rect, Rect]:
    """
    Clip a source rectangle, placed in surface coordinates, to a surface of
    the given (width, height).

    :return: The visible area in surface coordinates and the same area in
        source coordinates. Both are empty when nothing is visible.
    """
    inter = Rect(0, 0, size[0], size[1]).intersected(source)
    if inter.is_empty():
        return inter, inter
    return inter, inter.translated(-source.x, -source.y)
