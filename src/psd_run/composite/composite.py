"""Composite implementation for layer rendering and blending."""

import logging
from typing import Optional, Union

import numpy as np
from attrs import define, evolve, field
from PIL import Image

from psd_run.api.document import Document
from psd_run.api.layers import Group, GroupMixin, Layer
from psd_run.api.rect import Rect
from psd_run.composite import utils
from psd_run.composite.blend import get_blend_func
from psd_run.composite.bounds import LayerFilter, compute_bounds, is_visible
from psd_run.composite.mask import apply_masks
from psd_run.constants import BlendMode

logger = logging.getLogger(__name__)


class Surface(object):
    """Raster surface holding straight color and alpha.

    Example::

        surface = Surface(100, 100)
        surface.apply_pixels(pixels, BlendMode.NORMAL, (10, 10), opacity=0.5)
        rgba = surface.to_rgba8()
    """

    def __init__(self, width: int, height: int):
        self._color = np.zeros((height, width, 3), dtype=np.float32)
        self._alpha = np.zeros((height, width, 1), dtype=np.float32)

    @property
    def width(self) -> int:
        return self._color.shape[1]

    @property
    def height(self) -> int:
        return self._color.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def color(self) -> np.ndarray:
        return self._color

    @property
    def alpha(self) -> np.ndarray:
        return self._alpha

    def apply(
        self,
        color: np.ndarray,
        alpha: np.ndarray,
        blend_mode: BlendMode,
        offset: tuple[int, int] = (0, 0),
        opacity: float = 1.0,
    ) -> None:
        """
        Composite a source over this surface.

        :param color: Source color, float32 (height, width, 3) in [0, 1].
        :param alpha: Source alpha, float32 (height, width, 1) in [0, 1].
        :param blend_mode: Blend mode of the source.
        :param offset: Position of the source top-left corner on this surface.
            Parts outside of the surface are clipped.
        :param opacity: Constant factor applied to the source alpha.
        """
        height, width = color.shape[:2]
        dst, src = utils.overlap(self.size, Rect(offset[0], offset[1], width, height))
        if dst.is_empty():
            logger.debug("Out of surface at %r" % (offset,))
            return

        color_s = color[src.top : src.bottom, src.left : src.right]
        alpha_s = alpha[src.top : src.bottom, src.left : src.right] * opacity
        region = (slice(dst.top, dst.bottom), slice(dst.left, dst.right))
        color_b = self._color[region]
        alpha_b = self._alpha[region]

        blend_fn = get_blend_func(blend_mode)
        color_t = (1.0 - alpha_b) * color_s + alpha_b * blend_fn(color_b, color_s)
        alpha_o = utils.union(alpha_b, alpha_s)
        color_o = alpha_s * color_t + (1.0 - alpha_s) * alpha_b * color_b
        self._color[region] = utils.clip(utils.divide(color_o, alpha_o))
        self._alpha[region] = alpha_o

    def apply_pixels(
        self,
        pixels: np.ndarray,
        blend_mode: BlendMode,
        offset: tuple[int, int] = (0, 0),
        opacity: float = 1.0,
    ) -> None:
        """Composite uint8 RGBA pixels over this surface."""
        color, alpha = utils.to_float(pixels)
        self.apply(color, alpha, blend_mode, offset, opacity)

    def apply_surface(
        self,
        surface: "Surface",
        blend_mode: BlendMode,
        offset: tuple[int, int] = (0, 0),
        opacity: float = 1.0,
    ) -> None:
        """Composite another surface over this surface."""
        self.apply(surface.color, surface.alpha, blend_mode, offset, opacity)

    def to_rgba8(self) -> np.ndarray:
        """Straight-alpha uint8 RGBA pixels."""
        return to_rgba8(self._color, self._alpha)


@define
class CompositeContext:
    """
    State threaded through the recursive compositing of a group.

    .. py:attribute:: surface

        Destination :py:class:`Surface`.

    .. py:attribute:: origin

        Document-space point mapped to the surface pixel (0, 0).

    .. py:attribute:: opacity

        Opacity accumulator of the destination.

    .. py:attribute:: pass_through

        True while flattening a pass-through group into its ancestor.

    .. py:attribute:: layer_filter

        Callable(layer) -> bool deciding visibility.
    """

    surface: Surface
    origin: tuple[int, int] = (0, 0)
    opacity: float = field(default=1.0, converter=float)
    pass_through: bool = False
    layer_filter: LayerFilter = is_visible

    def offset(self, rect: Rect) -> tuple[int, int]:
        return rect.x - self.origin[0], rect.y - self.origin[1]


def composite_children(node: GroupMixin, context: CompositeContext) -> None:
    """
    Paint the visible children of `node` onto the context surface.

    Children are stored topmost-first and painted bottommost-first.
    """
    for layer in reversed(node):
        composite_layer(layer, context)


def composite_layer(layer: Layer, context: CompositeContext) -> None:
    """Paint a single layer, or a whole group, onto the context surface."""
    if not context.layer_filter(layer):
        logger.debug("Ignore %s" % layer)
        return
    logger.debug("Compositing %s" % layer)

    if isinstance(layer, Group):
        if layer.pass_through:
            # The group's own opacity and blend mode are not applied here.
            composite_children(layer, evolve(context, pass_through=True))
            return
        surface, bounds = isolate(layer, context.layer_filter)
        if surface is None:
            logger.debug("Empty group %s" % layer)
            return
        context.surface.apply_surface(
            surface,
            layer.blend_mode,
            context.offset(bounds),
            context.opacity * layer.opacity * layer.fill_opacity,
        )
        return

    pixels = apply_masks(layer)
    if pixels is None:
        logger.debug("No pixels in %s" % layer)
        return
    context.surface.apply_pixels(
        pixels,
        layer.blend_mode,
        context.offset(layer.rect),
        context.opacity * layer.opacity * layer.fill_opacity,
    )


def isolate(
    group: GroupMixin, layer_filter: Optional[LayerFilter] = None
) -> tuple[Optional[Surface], Rect]:
    """
    Composite the visible children of a group on a fresh transparent surface
    sized to their bounds.

    :return: The surface and its bounds in document space; the surface is
        None when the bounds are empty.
    """
    layer_filter = layer_filter or is_visible
    bounds = compute_bounds(group, layer_filter)
    if bounds.is_empty():
        return None, bounds
    surface = Surface(bounds.width, bounds.height)
    context = CompositeContext(
        surface, bounds.top_left, 1.0, pass_through=False, layer_filter=layer_filter
    )
    composite_children(group, context)
    return surface, bounds


def composite(
    target: Union[Document, GroupMixin, Layer],
    layer_filter: Optional[LayerFilter] = None,
    viewport: Optional[Rect] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Composite layers and return NumPy arrays.

    Args:
        target: Document, group, or a single layer to composite.
        layer_filter: Optional callable(layer) -> bool deciding visibility.
            Defaults to the recorded visibility of each layer.
        viewport: Area in document space to composite. Defaults to the
            canvas for a document, the visible bounds for a group, and the
            layer rect for a leaf.

    Returns:
        Tuple of (color, alpha) float32 arrays of shape (height, width, 3)
        and (height, width, 1) in [0.0, 1.0], straight alpha.

    Examples:
        >>> color, alpha = composite(document)
        >>> color, alpha = composite(document, layer_filter=lambda l: l.layer_id != 3)
    """
    layer_filter = layer_filter or is_visible
    if viewport is None:
        if isinstance(target, Document):
            viewport = target.viewbox
        elif isinstance(target, GroupMixin):
            viewport = compute_bounds(target, layer_filter)
        else:
            viewport = target.rect

    surface = Surface(max(0, viewport.width), max(0, viewport.height))
    context = CompositeContext(surface, viewport.top_left, layer_filter=layer_filter)
    if isinstance(target, Document):
        composite_children(target, context)
    else:
        composite_layer(target, context)
    return surface.color, surface.alpha


def composite_pil(
    target: Union[Document, GroupMixin, Layer],
    layer_filter: Optional[LayerFilter] = None,
    viewport: Optional[Rect] = None,
) -> Optional[Image.Image]:
    """
    Composite layers and return a PIL Image in RGBA mode.

    :return: PIL Image, or None if the viewport is empty.
    """
    color, alpha = composite(target, layer_filter, viewport)
    if color.shape[0] == 0 or color.shape[1] == 0:
        return None
    return Image.fromarray(to_rgba8(color, alpha))


def to_rgba8(color: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """
    Quantize straight color and alpha to uint8 RGBA.

    Fully transparent pixels are (0, 0, 0, 0).
    """
    rgba = utils.to_uint8(np.concatenate((color, alpha), axis=2))
    rgba[rgba[:, :, 3] == 0] = 0
    return rgba
