"""
Layer tree construction from PSD files.

The binary format is decoded by `psd-tools`; this module converts its layer
tree into :py:mod:`psd_run.api.layers` nodes. psd-tools iterates layers
bottom-first, while psd_run stores them topmost-first.

Example::

    document = load_psd('example.psd')
    print(document.flat_layers())

Vector shapes without a raster are loaded without pixels and do not
contribute to renders.
"""

import logging
import os
from typing import Any, Iterable, Optional

from psd_tools import PSDImage
from psd_tools.constants import SectionDivider, Tag
from psd_tools.terminology import Key

from psd_run.api.document import Document
from psd_run.api.layers import Group, Layer, PixelLayer, ShapeLayer, TypeLayer
from psd_run.api.mask import LayerMask
from psd_run.api.rect import Rect
from psd_run.api.typesetting import TextRun
from psd_run.constants import BlendMode, PathType

logger = logging.getLogger(__name__)


def load_psd(path: str) -> Document:
    """
    Open a PSD or PSB file.

    :param path: File path.
    :return: :py:class:`~psd_run.api.document.Document`.
    """
    psd = PSDImage.open(path)
    logger.debug("Opened %s: %dx%d" % (path, psd.width, psd.height))
    builder = _TreeBuilder()
    layers = builder.convert_children(psd)
    return Document(psd.width, psd.height, layers, name=os.path.basename(path))


class _TreeBuilder(object):
    """Converts psd-tools layers, assigning ids to layers that lack one."""

    def __init__(self) -> None:
        self._used_ids: set[int] = set()
        self._next_id = 1 << 20

    def convert_children(self, group: Iterable[Any]) -> list[Layer]:
        return [self.convert(layer) for layer in reversed(list(group))]

    def convert(self, layer: Any) -> Layer:
        kwargs = dict(
            visible=layer.visible,
            opacity=layer.opacity / 255.0,
            fill_opacity=layer.fill_opacity / 255.0,
            blend_mode=BlendMode[layer.blend_mode.name],
        )
        layer_id = self._layer_id(layer)

        if layer.is_group():
            return Group(
                layer_id,
                layer.name,
                children=self.convert_children(layer),
                is_opened=_is_opened(layer),
                **kwargs,
            )

        image = layer.topil() if layer.has_pixels() else None
        if image is not None:
            rect = Rect(layer.left, layer.top, image.width, image.height)
        else:
            rect = Rect.from_bbox(layer.bbox)
        kwargs.update(pixels=image, mask=_convert_mask(layer))

        if layer.kind == "type":
            return TypeLayer(layer_id, layer.name, rect, runs=_text_runs(layer), **kwargs)
        if layer.kind == "shape":
            path_type, corner_radius = _path_type(layer)
            return ShapeLayer(
                layer_id,
                layer.name,
                rect,
                brush_color=_brush_color(layer),
                path_type=path_type,
                corner_radius=corner_radius,
                **kwargs,
            )
        linked_file = None
        if layer.kind == "smartobject":
            linked_file = layer.smart_object.filename
        return PixelLayer(layer_id, layer.name, rect, linked_file=linked_file, **kwargs)

    def _layer_id(self, layer: Any) -> int:
        layer_id = layer.layer_id
        if layer_id < 0 or layer_id in self._used_ids:
            logger.warning("Layer %r has no unique id" % layer.name)
            while self._next_id in self._used_ids:
                self._next_id += 1
            layer_id = self._next_id
        self._used_ids.add(layer_id)
        return layer_id


def _is_opened(group: Any) -> bool:
    setting = group.tagged_blocks.get_data(Tag.SECTION_DIVIDER_SETTING)
    return setting is None or setting.kind != SectionDivider.CLOSED_FOLDER


def _convert_mask(layer: Any) -> Optional[LayerMask]:
    if not layer.has_mask():
        return None
    mask = layer.mask
    image = mask.topil()
    if image is None:
        return None
    return LayerMask(
        image,
        Rect(mask.left, mask.top, image.width, image.height),
        background_color=mask.background_color,
        disabled=mask.disabled,
    )


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


def _hex_color(rgb: Iterable[float]) -> str:
    return "#" + "".join(
        "%02x" % max(0, min(255, int(round(v * 255)))) for v in rgb
    )


def _text_runs(layer: Any) -> list[TextRun]:
    """
    Style runs of a type layer.

    Falls back to a single unstyled run when the engine data can't be read.
    """
    text = layer.text
    try:
        fontset = layer.resource_dict["FontSet"]
        style_run = layer.engine_dict["StyleRun"]
        lengths = style_run["RunLengthArray"]
        styles = style_run["RunArray"]
        runs = []
        index = 0
        for length, style in zip(lengths, styles):
            length = int(_value(length))
            sheet = style["StyleSheet"]["StyleSheetData"]
            font = ""
            if "Font" in sheet:
                font = str(_value(fontset[int(_value(sheet["Font"]))]["Name"]))
                font = font.rstrip("\x00")
            color = "#000000"
            if "FillColor" in sheet:
                # ARGB in [0, 1]
                values = [float(_value(v)) for v in sheet["FillColor"]["Values"]]
                color = _hex_color(values[1:4])
            runs.append(
                TextRun(
                    text[index : index + length],
                    font=font,
                    original_font=font,
                    font_size=float(_value(sheet.get("FontSize", 12.0))),
                    color=color,
                )
            )
            index += length
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        logger.warning("Failed to read text style of %r: %s" % (layer.name, e))
        return [TextRun(text)]
    if not runs:
        return [TextRun(text)]
    return runs


def _brush_color(layer: Any) -> str:
    desc = layer.tagged_blocks.get_data(Tag.SOLID_COLOR_SHEET_SETTING)
    if desc is None:
        return "#000000"
    try:
        color = desc[Key.Color]
        rgb = [float(color[key]) / 255.0 for key in (Key.Red, Key.Green, Key.Blue)]
    except (KeyError, TypeError, ValueError):
        logger.debug("Non-RGB fill color in %r" % layer.name)
        return "#000000"
    return _hex_color(rgb)


def _path_type(layer: Any) -> tuple[PathType, float]:
    if layer.has_origination():
        origination = layer.origination[0]
        kind = origination.__class__.__name__
        if kind == "Rectangle":
            return PathType.RECTANGLE, 0.0
        if kind == "RoundedRectangle":
            radii = origination.radii
            radius = 0.0
            if radii:
                radius = float(_value(next(iter(radii.values()))))
            return PathType.ROUNDED_RECTANGLE, radius
        return PathType.PATH, 0.0
    if layer.has_vector_mask():
        return PathType.PATH, 0.0
    return PathType.NONE, 0.0
