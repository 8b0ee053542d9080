"""
Errors raised by psd_run.

Every error carries a stable ``code`` string so that host bindings can
report it as a structured result, see :py:mod:`psd_run.host`.
"""


class PSDRunError(Exception):
    """Base class of all the psd_run errors."""

    code = "Error"
    default_message = "Unknown error"

    def __init__(self, message=None):
        super(PSDRunError, self).__init__(message or self.default_message)

    @property
    def message(self):
        return self.args[0]


class InvalidHandle(PSDRunError):
    code = "InvalidHandle"
    default_message = "Invalid parser handle"


class InvalidBufferSize(PSDRunError):
    code = "InvalidBufferSize"
    default_message = "Invalid data size"


class LoadFailure(PSDRunError):
    """Decoder failure, carries the decoder message."""

    code = "LoadFailure"
    default_message = "Failed to load PSD"


class LayerNotFound(PSDRunError):
    code = "LayerNotFound"
    default_message = "Layer not found"


class EmptyBounds(PSDRunError):
    code = "EmptyBounds"
    default_message = "Empty bounds"


class NullImage(PSDRunError):
    code = "NullImage"
    default_message = "Null image"


class NotATextLayer(PSDRunError):
    code = "NotATextLayer"
    default_message = "Layer is not a text layer"


class HandleTableExhausted(PSDRunError):
    code = "HandleTableExhausted"
    default_message = "Too many parsers allocated"


class InvalidHints(PSDRunError):
    code = "InvalidHints"
    default_message = "Invalid JSON"


class RenderFailure(PSDRunError):
    """Unexpected fault caught at the render entry point."""

    code = "RenderFailure"
    default_message = "Unknown exception"
