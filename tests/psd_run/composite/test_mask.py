import numpy as np
import pytest

from psd_run.api.layers import Group, PixelLayer
from psd_run.api.mask import LayerMask
from psd_run.api.rect import Rect
from psd_run.composite.mask import apply_masks

from ..utils import RED, solid


def rgb(width, height, color=RED):
    return solid(width, height, color)[:, :, :3].copy()


def test_no_pixels():
    assert apply_masks(PixelLayer(1, rect=Rect(0, 0, 2, 2))) is None
    assert apply_masks(Group(1)) is None


def test_promotes_alpha():
    layer = PixelLayer(1, pixels=rgb(2, 2))
    pixels = apply_masks(layer)
    assert pixels.shape == (2, 2, 4)
    assert (pixels[:, :, 3] == 255).all()
    assert (pixels[:, :, :3] == RED).all()


def test_returns_copy():
    layer = PixelLayer(1, pixels=solid(2, 2, RED, alpha=100))
    pixels = apply_masks(layer)
    pixels[:] = 0
    assert (layer.pixels[:, :, 3] == 100).all()


def test_transparency_mask():
    mask = np.array([[0, 128], [255, 64]], dtype=np.uint8)
    layer = PixelLayer(1, pixels=rgb(2, 2), transparency_mask=mask)
    pixels = apply_masks(layer)
    assert pixels[:, :, 3].tolist() == [[0, 128], [255, 64]]
    assert layer.pixels.shape == (2, 2, 3)


def test_transparency_mask_partial_overlap():
    mask = np.zeros((1, 2), dtype=np.uint8)
    layer = PixelLayer(1, pixels=rgb(3, 2), transparency_mask=mask)
    pixels = apply_masks(layer)
    assert pixels[:, :, 3].tolist() == [[0, 0, 255], [255, 255, 255]]


def test_transparency_mask_ignored_with_alpha():
    mask = np.zeros((2, 2), dtype=np.uint8)
    layer = PixelLayer(1, pixels=solid(2, 2, RED, alpha=200), transparency_mask=mask)
    pixels = apply_masks(layer)
    assert (pixels[:, :, 3] == 200).all()


@pytest.mark.parametrize(
    "background_color, expected",
    [
        (0, [0, 0, 200, 100]),
        (255, [200, 200, 200, 100]),
    ],
)
def test_layer_mask(background_color, expected):
    mask = LayerMask(
        np.array([[255, 128]], dtype=np.uint8),
        Rect(12, 5, 2, 1),
        background_color=background_color,
    )
    layer = PixelLayer(
        1, rect=Rect(10, 5, 4, 1), pixels=solid(4, 1, RED, alpha=200), mask=mask
    )
    pixels = apply_masks(layer)
    assert pixels[0, :, 3].tolist() == expected
    assert (pixels[:, :, :3] == RED).all()
    assert (layer.pixels[:, :, 3] == 200).all()


def test_layer_mask_outside_layer():
    mask = LayerMask(np.full((2, 2), 255, dtype=np.uint8), Rect(50, 50, 2, 2))
    layer = PixelLayer(1, rect=Rect(0, 0, 2, 2), pixels=rgb(2, 2), mask=mask)
    assert (apply_masks(layer)[:, :, 3] == 0).all()


def test_disabled_layer_mask():
    mask = LayerMask(np.zeros((2, 2), dtype=np.uint8), disabled=True)
    layer = PixelLayer(1, pixels=rgb(2, 2), mask=mask)
    assert (apply_masks(layer)[:, :, 3] == 255).all()


def test_both_masks():
    transparency = np.array([[100, 255]], dtype=np.uint8)
    mask = LayerMask(np.array([[128, 0]], dtype=np.uint8))
    layer = PixelLayer(1, pixels=rgb(2, 1), transparency_mask=transparency, mask=mask)
    assert apply_masks(layer)[0, :, 3].tolist() == [100 * 128 // 255, 0]


@pytest.mark.parametrize("background_color", [-1, 256])
def test_layer_mask_background_range(background_color):
    with pytest.raises(ValueError):
        LayerMask(np.zeros((1, 1), dtype=np.uint8), background_color=background_color)
