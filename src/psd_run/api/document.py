"""
Document module.

A :py:class:`Document` is the root of a layer tree together with the canvas
size. It is produced by a loader and registered in a
:py:class:`~psd_run.api.handles.HandleTable` while resident.

Example::

    document = Document(100, 100, [layer])
    for layer in document.descendants():
        print(layer)
"""

import logging
import os
from typing import Any, Iterable, Optional

from psd_run.api.layers import (
    Group,
    GroupMixin,
    Layer,
    PixelLayer,
    ShapeLayer,
    TypeLayer,
)
from psd_run.api.rect import Rect
from psd_run.constants import PathType

logger = logging.getLogger(__name__)


class Document(GroupMixin):
    """
    Layered document.

    :param width: Canvas width in pixels.
    :param height: Canvas height in pixels.
    :param layers: Root layers, topmost-first.
    :param name: Optional document name.
    """

    def __init__(
        self,
        width: int,
        height: int,
        layers: Iterable[Layer] = (),
        name: str = "",
    ):
        self._width = int(width)
        self._height = int(height)
        self._layers = []
        self.name = name
        self.staged_path: Optional[str] = None
        self.extend(layers)

    @property
    def width(self) -> int:
        """Canvas width."""
        return self._width

    @property
    def height(self) -> int:
        """Canvas height."""
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self._width, self._height

    @property
    def viewbox(self) -> Rect:
        """Canvas rectangle at the origin."""
        return Rect(0, 0, self._width, self._height)

    def close(self) -> None:
        """Discard the temporary backing storage of the document, if any."""
        if self.staged_path is None:
            return
        try:
            os.remove(self.staged_path)
        except FileNotFoundError:
            pass
        logger.debug("Removed staged file %s" % self.staged_path)
        self.staged_path = None

    def flat_layers(self) -> list[dict[str, Any]]:
        """
        Flat, depth-first pre-order list of layer descriptors.

        Each group is followed by its children and then by a ``groupEnd``
        marker carrying the group id, so that a consumer can rebuild the tree
        without recursion.
        """
        layers: list[dict[str, Any]] = []
        _flatten(self, layers)
        return layers

    def to_dict(self) -> dict[str, Any]:
        """Hierarchical dump of the layer tree."""
        return {
            "width": self._width,
            "height": self._height,
            "layers": [_layer_to_dict(layer) for layer in self],
        }

    def __repr__(self) -> str:
        return "%s(%r size=%dx%d)" % (
            self.__class__.__name__,
            self.name,
            self._width,
            self._height,
        )


def _flatten(group: GroupMixin, layers: list[dict[str, Any]]) -> None:
    for index, layer in enumerate(group):
        rect = layer.rect
        descriptor: dict[str, Any] = {
            "id": layer.layer_id,
            "index": index,
            "name": layer.name,
            "x": rect.x,
            "y": rect.y,
            "width": rect.width,
            "height": rect.height,
            "visible": layer.visible,
            "opacity": int(layer.opacity * 255),
            "blendMode": layer.blend_mode.value,
            "itemType": layer.kind,
            "type": "group" if isinstance(layer, Group) else "layer",
        }
        if isinstance(layer, TypeLayer):
            descriptor["text"] = layer.text
        layers.append(descriptor)

        # Empty groups are still "group" with a "groupEnd" marker, not "layer".
        if isinstance(layer, Group):
            _flatten(layer, layers)
            layers.append({"id": layer.layer_id, "type": "groupEnd", "name": ""})


def _layer_to_dict(layer: Layer) -> dict[str, Any]:
    data: dict[str, Any] = {
        "layerId": layer.layer_id,
        "name": layer.name,
        "type": layer.kind,
        "rect": layer.rect.to_dict(),
        "opacity": layer.opacity,
        "fillOpacity": layer.fill_opacity,
        "visible": layer.visible,
        "blendMode": layer.blend_mode.value,
    }
    if isinstance(layer, TypeLayer):
        data["runs"] = [run.to_dict() for run in layer.runs]
    elif isinstance(layer, ShapeLayer):
        data["brushColor"] = layer.brush_color
        data["pathType"] = layer.path_type.label
        if layer.path_type == PathType.ROUNDED_RECTANGLE:
            data["cornerRadius"] = layer.corner_radius
    elif isinstance(layer, Group):
        data["childCount"] = len(layer)
        data["isOpened"] = layer.is_opened
    elif isinstance(layer, PixelLayer) and layer.linked_file:
        data["linkedFile"] = layer.linked_file

    hint = layer.hint
    data["hintType"] = hint.type.label
    data["hintVisible"] = hint.visible
    if hint.properties:
        data["hintProperties"] = sorted(hint.properties)

    if isinstance(layer, Group) and len(layer) > 0:
        data["children"] = [_layer_to_dict(child) for child in layer]
    return data
