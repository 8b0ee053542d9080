"""Bounding box of the visible content of a group."""

import logging
from typing import Callable, Iterable, Optional

from psd_run.api.layers import GroupMixin, Layer
from psd_run.api.rect import Rect

logger = logging.getLogger(__name__)

LayerFilter = Callable[[Layer], bool]


def is_visible(layer: Layer) -> bool:
    """Default layer filter, the recorded visibility of the layer."""
    return layer.visible


def compute_bounds(
    node: GroupMixin, layer_filter: Optional[LayerFilter] = None
) -> Rect:
    """
    Union of the rectangles of all the visible leaves under `node`.

    Invisible children are skipped together with their whole subtree, even
    when some of their descendants are marked visible.

    :param node: Group or document.
    :param layer_filter: Callable(layer) -> bool deciding visibility. Defaults
        to the recorded visibility.
    :return: The union, or the empty rect when nothing contributes.
    """
    layer_filter = layer_filter or is_visible
    bounds = Rect.empty()
    for layer in node:
        if not layer_filter(layer):
            continue
        if isinstance(layer, GroupMixin):
            bounds = bounds.united(compute_bounds(layer, layer_filter))
        else:
            bounds = bounds.united(layer.rect)
    return bounds


def make_layer_filter(
    hidden: Iterable[int] = (), shown: Iterable[int] = ()
) -> LayerFilter:
    """
    Layer filter applying visibility overrides on top of the recorded
    visibility. A layer id listed in both `hidden` and `shown` is visible.

    The layers themselves are not modified.
    """
    hidden = frozenset(int(layer_id) for layer_id in hidden)
    shown = frozenset(int(layer_id) for layer_id in shown)
    if not hidden and not shown:
        return is_visible

    def layer_filter(layer: Layer) -> bool:
        if layer.layer_id in shown:
            return True
        if layer.layer_id in hidden:
            return False
        return layer.visible

    return layer_filter
