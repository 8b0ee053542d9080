import json
import os

import pytest

from psd_run.api.document import Document
from psd_run.api.hints import ExportHint
from psd_run.api.layers import Group, PixelLayer, ShapeLayer, TypeLayer
from psd_run.api.rect import Rect
from psd_run.api.typesetting import TextRun
from psd_run.constants import BlendMode, HintType, PathType

from ..utils import RED, solid, solid_layer


@pytest.fixture
def document():
    title = TypeLayer(
        4,
        "Title",
        rect=Rect(0, 0, 8, 4),
        pixels=solid(8, 4, RED),
        runs=[TextRun("Hi", font="Sans", original_font="Sans-Regular", font_size=9)],
    )
    button = ShapeLayer(
        5,
        "Button",
        rect=Rect(2, 2, 4, 4),
        pixels=solid(4, 4, RED),
        brush_color="#ff0000",
        path_type=PathType.ROUNDED_RECTANGLE,
        corner_radius=2,
        hint=ExportHint(type=HintType.NATIVE, component_name="OkButton"),
    )
    group = Group(3, "Folder", children=[title, button], is_opened=False)
    background = solid_layer(1, Rect(0, 0, 20, 10), RED, opacity=0.5)
    background.linked_file = "background.png"
    return Document(20, 10, [group, Group(6, "Empty"), background], name="doc.psd")


def test_document_properties(document):
    assert document.size == (20, 10)
    assert document.viewbox == Rect(0, 0, 20, 10)
    assert len(document) == 3
    assert document.find(5).name == "Button"
    assert document[0].parent is document
    repr(document)


def test_flat_layers(document):
    layers = document.flat_layers()
    assert [(item["id"], item["type"]) for item in layers] == [
        (3, "group"),
        (4, "layer"),
        (5, "layer"),
        (3, "groupEnd"),
        (6, "group"),
        (6, "groupEnd"),
        (1, "layer"),
    ]
    title = layers[1]
    assert title["text"] == "Hi"
    assert title["itemType"] == "text"
    assert title["index"] == 0
    assert layers[2]["index"] == 1
    assert layers[3] == {"id": 3, "type": "groupEnd", "name": ""}

    background = layers[-1]
    assert background["opacity"] == 127
    assert background["blendMode"] == "normal"
    assert background["itemType"] == "image"
    assert (background["x"], background["y"]) == (0, 0)
    assert (background["width"], background["height"]) == (20, 10)
    assert "text" not in background
    assert layers[0]["blendMode"] == BlendMode.PASS_THROUGH.value


def test_to_dict(document):
    data = json.loads(json.dumps(document.to_dict()))
    assert (data["width"], data["height"]) == (20, 10)
    folder, empty, background = data["layers"]

    assert folder["type"] == "folder"
    assert folder["childCount"] == 2
    assert folder["isOpened"] is False
    title, button = folder["children"]

    assert title["type"] == "text"
    assert title["runs"] == [
        {
            "text": "Hi",
            "font": "Sans",
            "originalFont": "Sans-Regular",
            "fontSize": 9.0,
            "color": "#000000",
        }
    ]
    assert button["type"] == "shape"
    assert button["brushColor"] == "#ff0000"
    assert button["pathType"] == "roundedRectangle"
    assert button["cornerRadius"] == 2.0
    assert button["hintType"] == "native"
    assert button["rect"] == {"x": 2, "y": 2, "width": 4, "height": 4}

    assert empty["childCount"] == 0
    assert "children" not in empty

    assert background["linkedFile"] == "background.png"
    assert background["opacity"] == 0.5
    assert background["fillOpacity"] == 1.0
    assert background["hintType"] == "embed"
    assert background["hintVisible"] is True
    assert "hintProperties" not in background


def test_close_removes_staged_file(tmp_path):
    path = tmp_path / "staged.psd"
    path.write_bytes(b"data")
    document = Document(1, 1)
    document.staged_path = str(path)
    document.close()
    assert not os.path.exists(path)
    assert document.staged_path is None
    document.close()


def test_pixel_layer_without_linked_file(document):
    layer = PixelLayer(9, rect=Rect(0, 0, 1, 1))
    document.append(layer)
    assert "linkedFile" not in document.to_dict()["layers"][-1]
