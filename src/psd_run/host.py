"""
Bridge for host bindings.

:py:class:`HostBridge` exposes a :py:class:`~psd_run.api.session.Session`
through methods that take and return plain values. Handles cross the
boundary as int tokens. Errors are returned, never raised::

    bridge = HostBridge()
    result = bridge.load_document(data)
    if "error" in result:
        print(result["code"], result["error"])
    else:
        image = bridge.render(result["handle"], hidden=[3])
"""

import functools
import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

from psd_run.api.session import Loader, Session
from psd_run.errors import PSDRunError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., dict[str, Any]])


def _structured(func: F) -> F:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            return func(*args, **kwargs)
        except PSDRunError as e:
            logger.debug("%s failed: %s" % (func.__name__, e))
            return {"error": e.message, "code": e.code}

    return wrapper  # type: ignore[return-value]


class HostBridge(object):
    """
    Dict-returning wrapper of a session.

    :param session: Session to wrap. A new one is created when omitted.
    :param loader: Loader of the new session.
    """

    def __init__(
        self, session: Optional[Session] = None, loader: Optional[Loader] = None
    ):
        self.session = session or Session(loader=loader)

    @_structured
    def allocate_buffer(self, size: int) -> dict[str, Any]:
        buffer = self.session.allocate_buffer(size)
        return {"size": len(buffer), "buffer": buffer}

    @_structured
    def parse(self, size: int) -> dict[str, Any]:
        return self.session.parse(size).to_dict()

    @_structured
    def load_document(self, data: bytes) -> dict[str, Any]:
        return self.session.load_document(data).to_dict()

    @_structured
    def render(
        self, handle: int, hidden: Iterable[int] = (), shown: Iterable[int] = ()
    ) -> dict[str, Any]:
        return self.session.render(handle, hidden, shown).to_dict()

    @_structured
    def get_layer_image(self, handle: int, layer_id: int) -> dict[str, Any]:
        return self.session.get_layer_image(handle, layer_id).to_dict()

    @_structured
    def export_layer_tree(self, handle: int) -> dict[str, Any]:
        return {"json": self.session.export_layer_tree(handle)}

    @_structured
    def get_hints(self, handle: int) -> dict[str, Any]:
        return {"json": self.session.get_hints(handle)}

    @_structured
    def set_hints(self, handle: int, text: str) -> dict[str, Any]:
        return {"success": True, "restored": self.session.set_hints(handle, text)}

    @_structured
    def set_layer_text(self, handle: int, layer_id: int, text: str) -> dict[str, Any]:
        self.session.set_layer_text(handle, layer_id, text)
        return {"success": True}

    @_structured
    def release_document(self, handle: int) -> dict[str, Any]:
        return {"success": self.session.release_document(handle)}
