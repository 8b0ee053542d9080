"""
Export hints.

An export hint records how a layer should be exported by downstream
tooling. Only hints that differ from the default are persisted. The
persisted form is a JSON object::

    {"qtpsdparser.hint": 1,
     "layers": {"12": {"type": 3, "native": 2, "visible": true,
                       "name": "OkButton", "properties": ["x", "y"]}}}
"""

import logging
from typing import TYPE_CHECKING, Any

from attrs import define, field

from psd_run.constants import HintType, NativeComponent

if TYPE_CHECKING:
    from psd_run.api.document import Document

logger = logging.getLogger(__name__)

HINT_FORMAT_KEY = "qtpsdparser.hint"
HINT_FORMAT_VERSION = 1


@define
class ExportHint:
    """
    Export hint of a layer.

    .. py:attribute:: id
    .. py:attribute:: type

        See :py:class:`~psd_run.constants.HintType`.

    .. py:attribute:: component_name
    .. py:attribute:: native

        See :py:class:`~psd_run.constants.NativeComponent`.

    .. py:attribute:: visible
    .. py:attribute:: properties
    """

    id: str = ""
    type: HintType = field(default=HintType.EMBED, converter=HintType)
    component_name: str = ""
    native: NativeComponent = field(
        default=NativeComponent.CONTAINER, converter=NativeComponent
    )
    visible: bool = field(default=True, converter=bool)
    properties: frozenset = field(factory=frozenset, converter=frozenset)

    def is_default(self) -> bool:
        return self == ExportHint()

    def to_dict(self) -> dict[str, Any]:
        """Persisted form, omitting empty optional fields."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        data["type"] = int(self.type)
        if self.component_name:
            data["name"] = self.component_name
        data["native"] = int(self.native)
        data["visible"] = self.visible
        if self.properties:
            data["properties"] = sorted(self.properties)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportHint":
        properties = data.get("properties") or []
        if isinstance(properties, str):
            properties = [properties]
        return cls(
            id=str(data.get("id", "")),
            type=int(data.get("type", 0)),
            component_name=str(data.get("name", "")),
            native=int(data.get("native", 0)),
            visible=bool(data.get("visible", False)),
            properties=[str(p) for p in properties],
        )


def hints_to_dict(document: "Document") -> dict[str, Any]:
    """Collect the non-default hints of all the layers in the document."""
    layers = {}
    for layer in document.descendants():
        if not layer.hint.is_default():
            layers[str(layer.layer_id)] = layer.hint.to_dict()
    return {HINT_FORMAT_KEY: HINT_FORMAT_VERSION, "layers": layers}


def restore_hints(document: "Document", data: dict[str, Any]) -> int:
    """
    Apply persisted hints to the document.

    Hints for layer ids that do not exist in the document are ignored.

    :return: Number of restored hints.
    """
    layers = data.get("layers")
    if not isinstance(layers, dict):
        logger.debug("No layer hints to restore")
        return 0

    restored = 0
    for key, settings in layers.items():
        try:
            layer_id = int(key)
        except ValueError:
            logger.debug("Ignore hint with non-integer id %r" % key)
            continue
        layer = document.find(layer_id)
        if layer is None or not isinstance(settings, dict):
            continue
        try:
            layer.hint = ExportHint.from_dict(settings)
        except (TypeError, ValueError) as e:
            logger.warning("Ignore malformed hint for layer %d: %s" % (layer_id, e))
            continue
        restored += 1
    return restored
