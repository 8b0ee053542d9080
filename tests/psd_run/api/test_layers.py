import logging

import numpy as np
import pytest
from PIL import Image

from psd_run.api.layers import Group, PixelLayer, ShapeLayer, TypeLayer
from psd_run.api.mask import LayerMask
from psd_run.api.rect import Rect
from psd_run.api.typesetting import TextRun
from psd_run.constants import BlendMode, ItemType, PathType
from psd_run.errors import NotATextLayer

from ..utils import BLUE, RED, solid, solid_layer

logger = logging.getLogger(__name__)


@pytest.fixture
def tree():
    """
    Group 10
      Layer 1
      Group 11
        Layer 2
      Layer 3
    """
    inner = Group(11, "Inner", children=[solid_layer(2, Rect(0, 0, 5, 5), RED)])
    return Group(
        10,
        "Outer",
        children=[
            solid_layer(1, Rect(10, 10, 5, 5), RED),
            inner,
            solid_layer(3, Rect(-5, 0, 5, 5), RED),
        ],
    )


def test_layer_properties():
    layer = solid_layer(1, Rect(1, 2, 3, 4), RED, opacity=0.5, blend_mode="multiply")
    assert layer.layer_id == 1
    assert layer.kind == "image"
    assert layer.item_type == ItemType.IMAGE
    assert layer.opacity == 0.5
    assert layer.fill_opacity == 1.0
    assert layer.blend_mode == BlendMode.MULTIPLY
    assert layer.bbox == (1, 2, 4, 6)
    assert layer.has_pixels()
    assert not layer.has_mask()
    assert not layer.is_group()
    assert layer.hint.is_default()
    repr(layer)


@pytest.mark.parametrize("value", [-0.1, 1.5])
def test_layer_opacity_range(value):
    layer = solid_layer(1, Rect(0, 0, 1, 1), RED)
    with pytest.raises(ValueError):
        layer.opacity = value
    with pytest.raises(ValueError):
        layer.fill_opacity = value


def test_pixel_layer_rect_from_pixels():
    layer = PixelLayer(1, pixels=solid(4, 3, RED))
    assert layer.rect == Rect(0, 0, 4, 3)


def test_pixel_layer_size_mismatch():
    with pytest.raises(ValueError):
        PixelLayer(1, rect=Rect(0, 0, 5, 5), pixels=solid(4, 3, RED))


def test_pixel_layer_from_pil():
    image = Image.new("RGB", (4, 2), (0, 0, 255))
    layer = PixelLayer(1, rect=Rect(3, 3, 4, 2), pixels=image)
    assert layer.pixels.shape == (2, 4, 3)
    assert isinstance(layer.topil(), Image.Image)


def test_pixel_layer_without_pixels():
    layer = PixelLayer(1, rect=Rect(0, 0, 5, 5))
    assert not layer.has_pixels()
    assert layer.topil() is None


def test_pixel_layer_mask():
    mask = LayerMask(np.full((2, 2), 128, dtype=np.uint8), Rect(1, 1, 2, 2))
    layer = PixelLayer(1, pixels=solid(4, 4, RED), mask=mask)
    assert layer.has_mask()
    assert layer.mask.bbox == (1, 1, 3, 3)
    with pytest.raises(TypeError):
        layer.mask = "mask"


def test_shape_layer():
    layer = ShapeLayer(
        1,
        "Button",
        rect=Rect(0, 0, 2, 2),
        pixels=solid(2, 2, BLUE),
        brush_color="#0000ff",
        path_type=PathType.ROUNDED_RECTANGLE,
        corner_radius=4,
    )
    assert layer.kind == "shape"
    assert layer.path_type.label == "roundedRectangle"
    assert layer.corner_radius == 4.0


def test_group_defaults(tree):
    assert tree.is_group()
    assert tree.kind == "folder"
    assert tree.blend_mode == BlendMode.PASS_THROUGH
    assert tree.pass_through
    tree.blend_mode = BlendMode.NORMAL
    assert not tree.pass_through


def test_group_order_and_parent(tree):
    assert [layer.layer_id for layer in tree] == [1, 11, 3]
    assert [layer.layer_id for layer in reversed(tree)] == [3, 11, 1]
    assert len(tree) == 3
    assert tree[1].layer_id == 11
    assert all(layer.parent is tree for layer in tree)


def test_group_descendants(tree):
    assert [layer.layer_id for layer in tree.descendants()] == [1, 11, 2, 3]
    assert tree.find(2).layer_id == 2
    assert tree.find(99) is None


def test_group_rect(tree):
    assert tree.rect == Rect(-5, 0, 20, 15)
    assert Group(1).rect.is_empty()
    assert Group(1, rect=Rect(0, 0, 3, 3)).rect == Rect(0, 0, 3, 3)


def test_group_append_moves_layer(tree):
    layer = tree[0]
    other = Group(20)
    other.append(layer)
    assert layer.parent is other
    assert layer not in tree
    assert len(tree) == 2


def test_group_insertion_errors(tree):
    with pytest.raises(TypeError):
        tree.append("layer")
    with pytest.raises(ValueError):
        tree.append(tree)
    inner = tree[1]
    with pytest.raises(ValueError):
        inner.append(tree)


def test_is_visible_follows_parent(tree):
    layer = tree.find(2)
    assert layer.is_visible()
    tree.visible = False
    assert layer.visible
    assert not layer.is_visible()


class Rasterizer(object):
    def __init__(self, color):
        self.color = color
        self.calls = []

    def __call__(self, runs, size):
        self.calls.append(("".join(run.text for run in runs), size))
        return solid(size[0], size[1], self.color)


def test_type_layer_set_text():
    rasterizer = Rasterizer(BLUE)
    layer = TypeLayer(
        1,
        "Title",
        rect=Rect(0, 0, 8, 4),
        pixels=solid(8, 4, RED),
        runs=[
            TextRun("Hello ", font="Serif", font_size=20, color="#ff0000"),
            TextRun("world"),
        ],
        rasterizer=rasterizer,
    )
    assert layer.kind == "text"
    assert layer.text == "Hello world"
    assert tuple(layer.pixels[0, 0]) == (255, 0, 0, 255)
    assert rasterizer.calls == []

    layer.set_text("Bye")
    assert layer.text == "Bye"
    runs = layer.runs
    assert len(runs) == 1
    assert runs[0].font == "Serif"
    assert runs[0].font_size == 20.0
    assert runs[0].color == "#ff0000"
    assert tuple(layer.pixels[0, 0]) == (0, 0, 255, 255)
    layer.pixels
    assert rasterizer.calls == [("Bye", (8, 4))]


def test_type_layer_without_pixels_is_rasterized():
    rasterizer = Rasterizer(BLUE)
    layer = TypeLayer(1, rect=Rect(0, 0, 3, 2), runs=[TextRun("a")], rasterizer=rasterizer)
    assert layer.has_pixels()
    assert layer.pixels.shape == (2, 3, 4)


def test_type_layer_without_runs():
    layer = TypeLayer(1, rect=Rect(0, 0, 3, 2))
    assert layer.text == ""
    assert not layer.has_pixels()
    with pytest.raises(NotATextLayer):
        layer.set_text("text")
