"""
Blend mode lookup.

Every blend function takes the backdrop color `Cb` and the source color `Cs`
as float arrays of shape (height, width, 3) in [0, 1] and returns the blended
color ``B(Cb, Cs)``. The formulas are the ones of
:py:mod:`psd_tools.composite.blend`; this module maps psd-run blend modes onto
them. Alpha compositing is done by the caller, see
:py:meth:`psd_run.composite.composite.Surface.apply`.
"""

import logging
from typing import Callable

import numpy as np
from psd_tools import constants as psd_constants
from psd_tools.composite import blend as psd_blend

from psd_run.constants import BlendMode

logger = logging.getLogger(__name__)

BlendFunc = Callable[[np.ndarray, np.ndarray], np.ndarray]

normal: BlendFunc = psd_blend.normal

BLEND_FUNC: dict[BlendMode, BlendFunc] = {
    mode: psd_blend.BLEND_FUNC[psd_constants.BlendMode[mode.name]]
    for mode in BlendMode
    if mode is not BlendMode.PASS_THROUGH
}
# Pass-through groups are flattened by the compositor; as a source they blend
# like normal.
BLEND_FUNC[BlendMode.PASS_THROUGH] = normal


def get_blend_func(blend_mode: BlendMode) -> BlendFunc:
    """Return the blend function for the mode, normal if unsupported."""
    func = BLEND_FUNC.get(blend_mode)
    if func is None:
        logger.debug("Unsupported blend mode %s, using normal" % (blend_mode,))
        return normal
    return func
