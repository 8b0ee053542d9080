"""
Handle table of resident documents.

Documents are registered in a fixed-capacity slot table. Slot 0 is never
used, so a zero token always means "no document". Each slot keeps a
generation counter that is bumped whenever the slot is reused, and handles
carry the generation they were issued with: a handle kept after its document
was released does not resolve to the document that reuses the slot.

Example::

    table = HandleTable(capacity=16)
    handle = table.allocate(document)
    assert table.lookup(handle) is document
    table.release(handle)
"""

import logging
from typing import Iterator, Optional, Union

from attrs import define, field

from psd_run.api.document import Document
from psd_run.errors import HandleTableExhausted, InvalidHandle

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 16
_SLOT_BITS = 16


@define(frozen=True)
class Handle:
    """
    Opaque reference to a resident document.

    .. py:attribute:: slot
    .. py:attribute:: generation
    """

    slot: int = field(converter=int)
    generation: int = field(default=0, converter=int)

    @property
    def token(self) -> int:
        """Single integer form of the handle for host bindings."""
        return (self.generation << _SLOT_BITS) | self.slot

    @classmethod
    def from_token(cls, token: int) -> "Handle":
        token = int(token)
        if token < 0:
            raise InvalidHandle()
        return cls(token & ((1 << _SLOT_BITS) - 1), token >> _SLOT_BITS)

    def __int__(self) -> int:
        return self.token


HandleLike = Union[Handle, int]


class HandleTable:
    """
    Fixed-capacity registry mapping handles to documents.

    :param capacity: Number of slots, including the reserved slot 0.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if not (2 <= capacity <= (1 << _SLOT_BITS)):
            raise ValueError(f"Capacity must be in range [2, 65536], got {capacity}")
        self._documents: list[Optional[Document]] = [None] * capacity
        self._generations = [0] * capacity

    @property
    def capacity(self) -> int:
        return len(self._documents)

    def allocate(self, document: Document) -> Handle:
        """
        Register the document in the first free slot.

        :raises HandleTableExhausted: If every slot is taken.
        """
        for slot in range(1, self.capacity):
            if self._documents[slot] is None:
                self._generations[slot] += 1
                self._documents[slot] = document
                handle = Handle(slot, self._generations[slot])
                logger.debug("Allocated %s for %s" % (handle, document))
                return handle
        raise HandleTableExhausted()

    def lookup(self, handle: HandleLike) -> Document:
        """
        Resolve the handle.

        :raises InvalidHandle: If the handle is out of range, free, or stale.
        """
        handle = self._coerce(handle)
        document = self._documents[handle.slot]
        if document is None or self._generations[handle.slot] != handle.generation:
            raise InvalidHandle()
        return document

    def release(self, handle: HandleLike) -> bool:
        """
        Free the slot and discard the temporary storage of its document.

        Releasing an invalid or stale handle does nothing.

        :return: True if a document was released.
        """
        try:
            handle = self._coerce(handle)
            document = self.lookup(handle)
        except InvalidHandle:
            logger.debug("Ignore release of invalid handle %r" % (handle,))
            return False
        self._documents[handle.slot] = None
        document.close()
        logger.debug("Released %s" % (handle,))
        return True

    def release_all(self) -> None:
        for handle in list(self.handles()):
            self.release(handle)

    def handles(self) -> Iterator[Handle]:
        """Iterate over the handles of the resident documents."""
        for slot, document in enumerate(self._documents):
            if document is not None:
                yield Handle(slot, self._generations[slot])

    def __len__(self) -> int:
        return sum(1 for document in self._documents if document is not None)

    def __contains__(self, handle: object) -> bool:
        if not isinstance(handle, (Handle, int)):
            return False
        try:
            self.lookup(handle)
        except InvalidHandle:
            return False
        return True

    def _coerce(self, handle: HandleLike) -> Handle:
        if isinstance(handle, bool):
            raise InvalidHandle()
        if not isinstance(handle, Handle):
            try:
                handle = Handle.from_token(handle)
            except (TypeError, ValueError):
                raise InvalidHandle()
        if not (1 <= handle.slot < self.capacity):
            raise InvalidHandle()
        return handle
