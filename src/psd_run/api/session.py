"""
Session module.

A :py:class:`Session` owns a handle table of resident documents and the
staging buffer that receives the bytes of the next document to load. All the
operations raise :py:class:`~psd_run.errors.PSDRunError` subclasses; see
:py:mod:`psd_run.host` for the structured, non-raising variant.

Example::

    with Session() as session:
        result = session.load_document(data)
        image = session.render(result.handle, hidden=[4], shown=[7])
        image.topil().save('output.png')
        session.set_layer_text(result.handle, 9, 'Hello')
        print(session.export_layer_tree(result.handle))
"""

import contextlib
import json
import logging
import os
import tempfile
from typing import Any, Callable, Iterable, Iterator, Optional

import numpy as np
from attrs import define, field
from PIL import Image

from psd_run.api import pil_io
from psd_run.api.document import Document
from psd_run.api.handles import DEFAULT_CAPACITY, Handle, HandleLike, HandleTable
from psd_run.api.hints import hints_to_dict, restore_hints
from psd_run.api.layers import GroupMixin, Layer, TypeLayer
from psd_run.api.psd_loader import load_psd
from psd_run.composite import composite, isolate, make_layer_filter, to_rgba8
from psd_run.composite.mask import apply_masks
from psd_run.errors import (
    EmptyBounds,
    HandleTableExhausted,
    InvalidBufferSize,
    InvalidHints,
    LayerNotFound,
    LoadFailure,
    NotATextLayer,
    NullImage,
    PSDRunError,
    RenderFailure,
)

logger = logging.getLogger(__name__)

Loader = Callable[[str], Document]


@define
class LoadResult:
    """
    Result of loading a document.

    .. py:attribute:: handle
    .. py:attribute:: width
    .. py:attribute:: height
    .. py:attribute:: layers

        Flat layer descriptors, see :py:meth:`Document.flat_layers`.
    """

    handle: Handle
    width: int
    height: int
    layers: list = field(factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "handle": self.handle.token,
            "width": self.width,
            "height": self.height,
            "layers": self.layers,
        }


@define
class RenderedImage:
    """
    Rendered RGBA pixels and their position in document space.

    .. py:attribute:: x
    .. py:attribute:: y
    .. py:attribute:: pixels

        uint8 array of shape (height, width, 4), straight alpha.
    """

    x: int
    y: int
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def data(self) -> bytes:
        """Row-major RGBA bytes."""
        return np.ascontiguousarray(self.pixels).tobytes()

    def topil(self) -> Optional[Image.Image]:
        return pil_io.convert_to_pil(self.pixels)

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "data": self.data,
        }


def _buffer_size(size: Any) -> int:
    try:
        return int(size)
    except (TypeError, ValueError) as e:
        raise InvalidBufferSize() from e


@contextlib.contextmanager
def _render_guard() -> Iterator[None]:
    try:
        yield
    except PSDRunError:
        raise
    except Exception as e:
        logger.exception("Rendering failed")
        raise RenderFailure(str(e) or None) from e


class Session:
    """
    Resident documents and the staging buffer.

    :param capacity: Handle table capacity, including the reserved slot.
    :param loader: Callable(path) -> :py:class:`Document`. Defaults to
        :py:func:`psd_run.api.psd_loader.load_psd`.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        loader: Optional[Loader] = None,
    ):
        self._table = HandleTable(capacity)
        self._loader = loader or load_psd
        self._buffer = bytearray()

    @property
    def buffer(self) -> memoryview:
        """Writable view of the staging buffer."""
        return memoryview(self._buffer)

    def allocate_buffer(self, size: int) -> memoryview:
        """
        Replace the staging buffer with a zeroed buffer of `size` bytes.

        :raises InvalidBufferSize: If size is not positive.
        """
        size = _buffer_size(size)
        if size <= 0:
            raise InvalidBufferSize()
        self._buffer = bytearray(size)
        return self.buffer

    def parse(self, size: int) -> LoadResult:
        """
        Load a document from the first `size` bytes of the staging buffer.

        :raises InvalidBufferSize: If size is not positive or exceeds the buffer.
        :raises LoadFailure: If the document can't be decoded.
        :raises HandleTableExhausted: If too many documents are resident.
        """
        size = _buffer_size(size)
        if not (0 < size <= len(self._buffer)):
            raise InvalidBufferSize()

        fd, path = tempfile.mkstemp(prefix="psd-run-", suffix=".psd")
        with os.fdopen(fd, "wb") as f:
            f.write(self._buffer[:size])
        logger.debug("Staged %d bytes at %s" % (size, path))

        try:
            document = self._loader(path)
        except Exception as e:
            os.remove(path)
            if isinstance(e, PSDRunError):
                raise
            logger.debug("Loader failed: %s" % e)
            raise LoadFailure(str(e) or None) from e
        document.staged_path = path

        if document.width <= 0 or document.height <= 0:
            document.close()
            raise LoadFailure("Invalid dimensions")
        try:
            handle = self._table.allocate(document)
        except HandleTableExhausted:
            document.close()
            raise
        return LoadResult(handle, document.width, document.height, document.flat_layers())

    def load_document(self, data: bytes) -> LoadResult:
        """Stage `data` and load it."""
        try:
            source = memoryview(data).cast("B")
        except TypeError as e:
            raise InvalidBufferSize() from e
        view = self.allocate_buffer(len(source))
        view[:] = source
        return self.parse(len(source))

    def document(self, handle: HandleLike) -> Document:
        """
        Resident document of a handle.

        :raises InvalidHandle: If the handle is unknown or stale.
        """
        return self._table.lookup(handle)

    def render(
        self,
        handle: HandleLike,
        hidden: Iterable[int] = (),
        shown: Iterable[int] = (),
    ) -> RenderedImage:
        """
        Composite the whole document.

        Overrides apply to this call only: the recorded visibility is the
        starting point, ids in `hidden` are hidden, then ids in `shown` are
        shown.
        """
        document = self.document(handle)
        with _render_guard():
            layer_filter = make_layer_filter(hidden, shown)
            color, alpha = composite(document, layer_filter)
            pixels = to_rgba8(color, alpha)
        return RenderedImage(0, 0, pixels)

    def get_layer_image(self, handle: HandleLike, layer_id: int) -> RenderedImage:
        """
        Image of a single layer at its position in document space.

        A leaf gives its pixels with masks applied. A group gives the
        isolated composite of its visible descendants, cropped to their
        bounds.

        :raises LayerNotFound:
        :raises NullImage: If the leaf has no pixels.
        :raises EmptyBounds: If the group has no visible content.
        """
        layer = self._find(handle, layer_id)
        with _render_guard():
            if isinstance(layer, GroupMixin):
                surface, bounds = isolate(layer)
                if surface is None:
                    raise EmptyBounds()
                return RenderedImage(bounds.x, bounds.y, surface.to_rgba8())

            pixels = apply_masks(layer)
            if pixels is None:
                raise NullImage()
            return RenderedImage(layer.rect.x, layer.rect.y, pixels)

    def export_layer_tree(self, handle: HandleLike) -> str:
        """Compact JSON dump of the layer tree."""
        document = self.document(handle)
        return json.dumps(document.to_dict(), separators=(",", ":"))

    def get_hints(self, handle: HandleLike) -> str:
        """Compact JSON of the non-default export hints."""
        document = self.document(handle)
        return json.dumps(hints_to_dict(document), separators=(",", ":"))

    def set_hints(self, handle: HandleLike, text: str) -> int:
        """
        Restore export hints from JSON.

        :return: Number of restored hints.
        :raises InvalidHints: If `text` is not a JSON object.
        """
        document = self.document(handle)
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise InvalidHints() from e
        if not isinstance(data, dict):
            raise InvalidHints("Hints must be a JSON object")
        return restore_hints(document, data)

    def set_layer_text(self, handle: HandleLike, layer_id: int, text: str) -> None:
        """
        Replace the text of a text layer. Later renders show the new text.

        :raises LayerNotFound:
        :raises NotATextLayer:
        """
        layer = self._find(handle, layer_id)
        if not isinstance(layer, TypeLayer):
            raise NotATextLayer()
        layer.set_text(text)
        logger.debug("Replaced text of %s" % layer)

    def release_document(self, handle: HandleLike) -> bool:
        """Release a document. Unknown handles are ignored."""
        return self._table.release(handle)

    def handles(self) -> list[Handle]:
        return list(self._table.handles())

    def close(self) -> None:
        """Release all the resident documents."""
        self._table.release_all()

    def _find(self, handle: HandleLike, layer_id: Any) -> Layer:
        document = self.document(handle)
        try:
            layer = document.find(int(layer_id))
        except (TypeError, ValueError) as e:
            raise LayerNotFound("Layer %r not found" % (layer_id,)) from e
        if layer is None:
            raise LayerNotFound("Layer %r not found" % (layer_id,))
        return layer

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return "%s(documents=%d)" % (self.__class__.__name__, len(self._table))
