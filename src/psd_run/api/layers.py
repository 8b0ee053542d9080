"""
Layer module.

This module defines the in-memory layer tree that the compositor renders.
Trees are built by a decoder (see :py:mod:`psd_run.api.psd_loader`) or
directly in code.

Key classes:

- :py:class:`Layer`: Base class for all layer types
- :py:class:`GroupMixin`: Mixin for containers of layers (groups, documents)
- :py:class:`Group`: Folder layer containing other layers
- :py:class:`PixelLayer`: Raster layer with pixel data
- :py:class:`ShapeLayer`: Rasterized vector shape layer
- :py:class:`TypeLayer`: Text layer whose content can be replaced

Children of a group are stored topmost-first: ``group[0]`` is drawn last and
appears on top of its siblings.

Example usage::

    import numpy as np
    from psd_run.api.layers import Group, PixelLayer
    from psd_run.api.rect import Rect

    red = np.zeros((50, 50, 4), dtype=np.uint8)
    red[:, :] = (255, 0, 0, 255)
    layer = PixelLayer(1, "Red", rect=Rect(0, 0, 50, 50), pixels=red,
                       opacity=0.5)
    group = Group(2, "Folder", blend_mode="multiply")
    group.append(layer)

Opacity and fill opacity are floats in [0, 1].
"""

import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Union

import numpy as np
from PIL import Image

from psd_run.api import pil_io
from psd_run.api.hints import ExportHint
from psd_run.api.mask import LayerMask
from psd_run.api.rect import Rect
from psd_run.api.typesetting import TextRun, draw_text_runs
from psd_run.constants import BlendMode, ItemType, PathType
from psd_run.errors import NotATextLayer

logger = logging.getLogger(__name__)


def _check_unit(name: str, value: float) -> float:
    value = float(value)
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be in range [0, 1], got {value}")
    return value


class Layer:
    """
    Base class of layer tree nodes.

    :param layer_id: Identifier, unique within a document.
    :param name: Layer name.
    :param rect: Bounding rectangle in document space.
    :param visible: Recorded visibility.
    :param opacity: Opacity in [0, 1].
    :param fill_opacity: Fill opacity in [0, 1].
    :param blend_mode: :py:class:`~psd_run.constants.BlendMode` or its value.
    :param hint: :py:class:`~psd_run.api.hints.ExportHint`.
    """

    item_type = ItemType.IMAGE

    def __init__(
        self,
        layer_id: int,
        name: str = "",
        rect: Optional[Rect] = None,
        visible: bool = True,
        opacity: float = 1.0,
        fill_opacity: float = 1.0,
        blend_mode: Union[BlendMode, str] = BlendMode.NORMAL,
        hint: Optional[ExportHint] = None,
    ):
        self._layer_id = int(layer_id)
        self._parent: Optional["GroupMixin"] = None
        self._rect = rect
        self.name = name
        self.visible = visible
        self.opacity = opacity
        self.fill_opacity = fill_opacity
        self.blend_mode = blend_mode  # type: ignore[assignment]
        self.hint = hint or ExportHint()

    @property
    def layer_id(self) -> int:
        """Layer ID."""
        return self._layer_id

    @property
    def name(self) -> str:
        """Layer name. Writable."""
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = str(value)

    @property
    def kind(self) -> str:
        """
        Kind of this layer, one of image, shape, text or folder.

        :return: `str`
        """
        return self.item_type.value

    @property
    def visible(self) -> bool:
        """
        Recorded layer visibility. Doesn't take group visibility in account.
        Writable.
        """
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        self._visible = bool(value)

    def is_visible(self) -> bool:
        """Layer visibility. Takes group visibility in account."""
        if not self.visible:
            return False
        elif isinstance(self.parent, Layer):
            return self.parent.is_visible()
        return True

    @property
    def opacity(self) -> float:
        """Opacity of this layer in [0, 1] range. Writable."""
        return self._opacity

    @opacity.setter
    def opacity(self, value: float) -> None:
        self._opacity = _check_unit("Opacity", value)

    @property
    def fill_opacity(self) -> float:
        """Fill opacity of this layer in [0, 1] range. Writable."""
        return self._fill_opacity

    @fill_opacity.setter
    def fill_opacity(self, value: float) -> None:
        self._fill_opacity = _check_unit("Fill opacity", value)

    @property
    def blend_mode(self) -> BlendMode:
        """Blend mode of this layer. Writable."""
        return self._blend_mode

    @blend_mode.setter
    def blend_mode(self, value: Union[BlendMode, str]) -> None:
        self._blend_mode = BlendMode(value)

    @property
    def hint(self) -> ExportHint:
        """Export hint. Writable."""
        return self._hint

    @hint.setter
    def hint(self, value: ExportHint) -> None:
        if not isinstance(value, ExportHint):
            raise TypeError(f"Expected ExportHint, got {type(value).__name__}")
        self._hint = value

    @property
    def parent(self) -> Optional["GroupMixin"]:
        """Parent of this layer."""
        return self._parent

    @property
    def rect(self) -> Rect:
        """Bounding rectangle in document space."""
        return self._rect if self._rect is not None else Rect.empty()

    @property
    def left(self) -> int:
        return self.rect.left

    @property
    def top(self) -> int:
        return self.rect.top

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple."""
        return self.rect.bbox

    def is_group(self) -> bool:
        """Return True if the layer is a group."""
        return False

    def has_pixels(self) -> bool:
        return False

    def has_mask(self) -> bool:
        return False

    def __repr__(self) -> str:
        has_size = self.width > 0 and self.height > 0
        return "%s(%d %r%s%s%s)" % (
            self.__class__.__name__,
            self.layer_id,
            self.name,
            " size=%dx%d" % (self.width, self.height) if has_size else "",
            " invisible" if not self.visible else "",
            " mask" if self.has_mask() else "",
        )


class PixelLayer(Layer):
    """
    Layer that has rasterized image in pixels.

    :param pixels: RGB or RGBA image covering `rect`, as a uint8 array or a
        PIL image. When `rect` is omitted it is placed at the origin.
    :param transparency_mask: Optional alpha-only image. It is only applied
        when `pixels` has no alpha channel.
    :param mask: Optional :py:class:`~psd_run.api.mask.LayerMask`.
    :param linked_file: Name of the linked file, if any.

    Other keyword arguments are passed to :py:class:`Layer`.
    """

    def __init__(
        self,
        layer_id: int,
        name: str = "",
        rect: Optional[Rect] = None,
        pixels: Union[np.ndarray, Image.Image, None] = None,
        transparency_mask: Union[np.ndarray, Image.Image, None] = None,
        mask: Optional[LayerMask] = None,
        linked_file: Optional[str] = None,
        **kwargs: Any,
    ):
        self._pixels = pil_io.to_pixel_array(pixels)
        if rect is None and self._pixels is not None:
            rect = Rect(0, 0, self._pixels.shape[1], self._pixels.shape[0])
        super(PixelLayer, self).__init__(layer_id, name, rect, **kwargs)
        if self._pixels is not None:
            self._check_size(self._pixels)
        self._transparency_mask = (
            None if transparency_mask is None else pil_io.to_gray_array(transparency_mask)
        )
        self.mask = mask
        self.linked_file = linked_file

    def _check_size(self, pixels: np.ndarray) -> None:
        height, width = pixels.shape[:2]
        if (width, height) != self.rect.size:
            raise ValueError(
                "Pixel size %dx%d does not match rect %r" % (width, height, self.rect)
            )

    @property
    def pixels(self) -> Optional[np.ndarray]:
        """Raw pixels as a uint8 array of shape (height, width, 3 or 4)."""
        return self._pixels

    @property
    def transparency_mask(self) -> Optional[np.ndarray]:
        """Alpha-only image as a uint8 array of shape (height, width)."""
        return self._transparency_mask

    @property
    def mask(self) -> Optional[LayerMask]:
        """
        Returns mask associated with this layer.

        :return: :py:class:`~psd_run.api.mask.LayerMask` or `None`
        """
        return self._mask

    @mask.setter
    def mask(self, value: Optional[LayerMask]) -> None:
        if value is not None and not isinstance(value, LayerMask):
            raise TypeError(f"Expected LayerMask, got {type(value).__name__}")
        self._mask = value

    def has_pixels(self) -> bool:
        """
        Returns True if the layer has associated pixels. When this is True,
        `topil` method returns :py:class:`PIL.Image.Image`.
        """
        pixels = self.pixels
        return pixels is not None and pixels.size > 0

    def has_mask(self) -> bool:
        return self._mask is not None

    def topil(self) -> Optional[Image.Image]:
        """
        Get PIL Image of the raw layer pixels, without masks applied.

        :return: :py:class:`PIL.Image.Image`, or `None` if the layer has no pixels.
        """
        return pil_io.convert_to_pil(self.pixels)


class ShapeLayer(PixelLayer):
    """
    Layer holding a rasterized vector shape.

    :param brush_color: ``#rrggbb`` fill color.
    :param path_type: :py:class:`~psd_run.constants.PathType`.
    :param corner_radius: Radius of rounded rectangles.
    """

    item_type = ItemType.SHAPE

    def __init__(
        self,
        layer_id: int,
        name: str = "",
        rect: Optional[Rect] = None,
        brush_color: str = "#000000",
        path_type: Union[PathType, int] = PathType.NONE,
        corner_radius: float = 0.0,
        **kwargs: Any,
    ):
        super(ShapeLayer, self).__init__(layer_id, name, rect, **kwargs)
        self.brush_color = brush_color
        self.path_type = PathType(path_type)
        self.corner_radius = float(corner_radius)


class TypeLayer(PixelLayer):
    """
    Layer that has text and styling information.

    Text is kept as a list of :py:class:`~psd_run.api.typesetting.TextRun`.
    When the layer was decoded with a raster, that raster is used until the
    text is replaced with :py:meth:`set_text`; from then on the pixels are
    produced from the runs by `rasterizer`.

    Example::

        layer = TypeLayer(3, "Title", rect=Rect(0, 0, 64, 16),
                          runs=[TextRun("Hello", font_size=12)])
        layer.set_text("Bye")
        layer.text  # 'Bye'

    :param runs: Text runs.
    :param rasterizer: Callable taking (runs, (width, height)) and returning
        RGBA pixels. Defaults to
        :py:func:`~psd_run.api.typesetting.draw_text_runs`.
    """

    item_type = ItemType.TEXT

    def __init__(
        self,
        layer_id: int,
        name: str = "",
        rect: Optional[Rect] = None,
        runs: Iterable[TextRun] = (),
        rasterizer: Optional[Callable[..., np.ndarray]] = None,
        **kwargs: Any,
    ):
        super(TypeLayer, self).__init__(layer_id, name, rect, **kwargs)
        self._runs = list(runs)
        self._rasterizer = rasterizer or draw_text_runs
        self._rendered: Optional[np.ndarray] = None

    @property
    def runs(self) -> list[TextRun]:
        """Text runs. Read-only, use :py:meth:`set_text` to replace."""
        return list(self._runs)

    @property
    def text(self) -> str:
        """Text in the layer."""
        return "".join(run.text for run in self._runs)

    @property
    def pixels(self) -> Optional[np.ndarray]:
        if self._pixels is not None:
            return self._pixels
        if self._rendered is None and self._runs and not self.rect.is_empty():
            logger.debug("Rasterizing text of %s" % self)
            rendered = pil_io.to_pixel_array(self._rasterizer(self._runs, self.rect.size))
            assert rendered is not None
            self._check_size(rendered)
            self._rendered = rendered
        return self._rendered

    def set_text(self, text: str) -> None:
        """
        Replace the content with a single run inheriting the style of the
        first existing run.

        :raises NotATextLayer: If the layer has no runs to inherit from.
        """
        if not self._runs:
            raise NotATextLayer("Text layer has no runs")
        self._runs = [self._runs[0].with_text(text)]
        self._pixels = None
        self._rendered = None


class GroupMixin:
    """Container of layers, stored topmost-first."""

    _layers: list[Layer]

    def __len__(self) -> int:
        return self._layers.__len__()

    def __iter__(self) -> Iterator[Layer]:
        return self._layers.__iter__()

    def __reversed__(self) -> Iterator[Layer]:
        return self._layers.__reversed__()

    def __contains__(self, item: object) -> bool:
        return item in self._layers

    def __getitem__(self, key: int) -> Layer:
        return self._layers.__getitem__(key)

    def append(self, layer: Layer) -> None:
        """
        Add a layer below the existing children of the group.

        :param layer: The layer to add.
        :raises TypeError: If the provided object is not a Layer instance.
        :raises ValueError: If attempting to add a group to itself.
        """
        self.extend([layer])

    def extend(self, layers: Iterable[Layer]) -> None:
        """
        Add layers below the existing children of the group, in order.

        :raises TypeError: If the provided object is not a Layer instance.
        :raises ValueError: If attempting to add a group to itself.
        """
        layers = list(layers)
        self._check_insertion(layers)
        for layer in layers:
            if isinstance(layer.parent, GroupMixin) and layer in layer.parent:
                layer.parent._layers.remove(layer)
            layer._parent = self
        self._layers.extend(layers)

    def _check_insertion(self, layers: Iterable[Layer]) -> None:
        for layer in layers:
            if not isinstance(layer, Layer):
                raise TypeError(f"Expected Layer instance, got {type(layer).__name__}")
            if layer is self:
                raise ValueError(f"Cannot add the group {self} to itself")
            if isinstance(layer, GroupMixin):
                if self in list(layer.descendants()):
                    raise ValueError(
                        "This operation would create a reference loop "
                        f"within the group between {self} and {layer}"
                    )

    def descendants(self) -> Iterator[Layer]:
        """
        Return a generator to iterate over all descendant layers in
        depth-first pre-order.
        """
        for layer in self:
            yield layer
            if isinstance(layer, GroupMixin):
                yield from layer.descendants()

    def find(self, layer_id: int) -> Optional[Layer]:
        """
        Returns the first layer found for the given layer id.

        :param layer_id:
        """
        for layer in self.descendants():
            if layer.layer_id == layer_id:
                return layer
        return None


class Group(GroupMixin, Layer):
    """
    Group of layers.

    A group whose blend mode is pass-through is flattened into its parent's
    compositing context; any other blend mode isolates its children on a
    separate surface.

    Example::

        group = document[1]
        for layer in group:
            if layer.kind == 'image':
                print(layer.name)

    :param children: Initial children, topmost-first.
    :param is_opened: Whether the folder is expanded in the editor.
    """

    item_type = ItemType.FOLDER

    def __init__(
        self,
        layer_id: int,
        name: str = "",
        rect: Optional[Rect] = None,
        children: Iterable[Layer] = (),
        is_opened: bool = True,
        **kwargs: Any,
    ):
        kwargs.setdefault("blend_mode", BlendMode.PASS_THROUGH)
        super(Group, self).__init__(layer_id, name, rect, **kwargs)
        self._layers = []
        self.is_opened = bool(is_opened)
        self.extend(children)

    @property
    def pass_through(self) -> bool:
        """True when the group is not isolated."""
        return self.blend_mode == BlendMode.PASS_THROUGH

    @property
    def rect(self) -> Rect:
        """Recorded rectangle, or the union of all the children's rectangles."""
        if self._rect is not None:
            return self._rect
        rect = Rect.empty()
        for layer in self:
            rect = rect.united(layer.rect)
        return rect

    def is_group(self) -> bool:
        return True
