"""
Various constants for psd_run
"""
from enum import Enum, IntEnum


class BlendMode(Enum):
    """
    Blend modes.

    Values are the identifiers exposed to hosts. The four-character PSD keys
    are available through :py:meth:`BlendMode.from_key`.
    """
    PASS_THROUGH = 'passThrough'
    NORMAL = 'normal'
    DISSOLVE = 'dissolve'
    DARKEN = 'darken'
    MULTIPLY = 'multiply'
    COLOR_BURN = 'colorBurn'
    LINEAR_BURN = 'linearBurn'
    DARKER_COLOR = 'darkerColor'
    LIGHTEN = 'lighten'
    SCREEN = 'screen'
    COLOR_DODGE = 'colorDodge'
    LINEAR_DODGE = 'linearDodge'
    LIGHTER_COLOR = 'lighterColor'
    OVERLAY = 'overlay'
    SOFT_LIGHT = 'softLight'
    HARD_LIGHT = 'hardLight'
    VIVID_LIGHT = 'vividLight'
    LINEAR_LIGHT = 'linearLight'
    PIN_LIGHT = 'pinLight'
    HARD_MIX = 'hardMix'
    DIFFERENCE = 'difference'
    EXCLUSION = 'exclusion'
    SUBTRACT = 'subtract'
    DIVIDE = 'divide'
    HUE = 'hue'
    SATURATION = 'saturation'
    COLOR = 'color'
    LUMINOSITY = 'luminosity'

    @classmethod
    def from_key(cls, key):
        """Look up a blend mode by its four-character PSD key."""
        if isinstance(key, str):
            key = key.encode('ascii')
        return _PSD_KEYS[key]


_PSD_KEYS = {
    b'pass': BlendMode.PASS_THROUGH,
    b'norm': BlendMode.NORMAL,
    b'diss': BlendMode.DISSOLVE,
    b'dark': BlendMode.DARKEN,
    b'mul ': BlendMode.MULTIPLY,
    b'idiv': BlendMode.COLOR_BURN,
    b'lbrn': BlendMode.LINEAR_BURN,
    b'dkCl': BlendMode.DARKER_COLOR,
    b'lite': BlendMode.LIGHTEN,
    b'scrn': BlendMode.SCREEN,
    b'div ': BlendMode.COLOR_DODGE,
    b'lddg': BlendMode.LINEAR_DODGE,
    b'lgCl': BlendMode.LIGHTER_COLOR,
    b'over': BlendMode.OVERLAY,
    b'sLit': BlendMode.SOFT_LIGHT,
    b'hLit': BlendMode.HARD_LIGHT,
    b'vLit': BlendMode.VIVID_LIGHT,
    b'lLit': BlendMode.LINEAR_LIGHT,
    b'pLit': BlendMode.PIN_LIGHT,
    b'hMix': BlendMode.HARD_MIX,
    b'diff': BlendMode.DIFFERENCE,
    b'smud': BlendMode.EXCLUSION,
    b'fsub': BlendMode.SUBTRACT,
    b'fdiv': BlendMode.DIVIDE,
    b'hue ': BlendMode.HUE,
    b'sat ': BlendMode.SATURATION,
    b'colr': BlendMode.COLOR,
    b'lum ': BlendMode.LUMINOSITY,
}


class ItemType(Enum):
    """
    Layer item types exposed to hosts.
    """
    IMAGE = 'image'
    SHAPE = 'shape'
    TEXT = 'text'
    FOLDER = 'folder'


class PathType(IntEnum):
    """
    Shape path types.
    """
    NONE = 0
    RECTANGLE = 1
    ROUNDED_RECTANGLE = 2
    PATH = 3

    @property
    def label(self):
        return ('none', 'rectangle', 'roundedRectangle', 'path')[self]


class HintType(IntEnum):
    """
    Export hint types.
    """
    EMBED = 0
    MERGE = 1
    CUSTOM = 2
    NATIVE = 3
    SKIP = 4
    NONE = 5

    @property
    def label(self):
        return self.name.lower()


class NativeComponent(IntEnum):
    """
    Native components an exported layer can be mapped to.
    """
    CONTAINER = 0
    TOUCH_AREA = 1
    BUTTON = 2
    BUTTON_WITH_IMAGE = 3
